"""
Request-scoped access to the shared services created in the lifespan.
"""

from fastapi import Request

from routers.chat_orchestration import AdaptiveRouter, Orchestrator
from services.telemetry_store import TelemetryStore


def get_telemetry_store(request: Request) -> TelemetryStore:
    return request.app.state.telemetry_store


def get_orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


def get_adaptive_router(request: Request) -> AdaptiveRouter:
    return request.app.state.adaptive_router
