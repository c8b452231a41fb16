"""
MelonScope - provider-agnostic chat with composite orchestration
FastAPI Backend with adaptive routing + live telemetry
"""

from contextlib import asynccontextmanager
import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from routers import chat, system, telemetry
from routers.chat_orchestration import AdaptiveRouter, Orchestrator
from errors import register_exception_handlers
from logging_config import setup_logging
from services.image_client import ImageClient
from services.telemetry_store import TelemetryStore
from config import runtime_config

setup_logging(runtime_config.log_level)
logger = logging.getLogger(__name__)

# Instance ID - changes on every startup, used by frontend to detect restarts
INSTANCE_ID = str(uuid.uuid4())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events"""
    # One store per process; orchestrator, router and endpoints share it
    store = TelemetryStore()
    app.state.telemetry_store = store
    app.state.orchestrator = Orchestrator(store, ImageClient.from_config())
    app.state.adaptive_router = AdaptiveRouter(store)

    logger.info(
        f"MelonScope ready (instance {INSTANCE_ID[:8]}, image model {runtime_config.image_model})"
    )

    yield

    # Shutdown
    logger.info(f"MelonScope signing off ({len(store)} telemetry records discarded)")


app = FastAPI(
    title="MelonScope",
    description="Provider-agnostic chat with composite text + image orchestration",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


# Request body size limit middleware
MAX_BODY_SIZE_API = 1 * 1024 * 1024  # 1MB; chat histories are text only


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests with bodies exceeding the size limit."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            size = int(content_length)
            if size > MAX_BODY_SIZE_API:
                return JSONResponse(
                    status_code=413,
                    content={"error": f"Request body too large ({size} bytes, limit {MAX_BODY_SIZE_API} bytes)"},
                )
        return await call_next(request)


app.add_middleware(SecurityHeadersMiddleware)

# Request body size limit
app.add_middleware(RequestSizeLimitMiddleware)

# CORS - restrict to localhost and private network IPs on port 3000
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1|192\.168\.\d+\.\d+|[a-zA-Z][a-zA-Z0-9\-]*):3000$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API Routers
app.include_router(chat.router, tags=["chat"])
app.include_router(telemetry.router, tags=["telemetry"])
app.include_router(system.router, tags=["system"])


@app.get("/health")
async def health(request: Request):
    """Liveness plus telemetry buffer size."""
    store: TelemetryStore = request.app.state.telemetry_store
    return {
        "status": "healthy",
        "service": "melonscope",
        "instance_id": INSTANCE_ID,
        "telemetry_records": len(store),
        "telemetry_subscribers": store.subscriber_count,
    }


@app.get("/api/instance")
async def get_instance():
    """Return instance ID - changes on each startup."""
    return {"instance_id": INSTANCE_ID}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
