"""
MelonScope Services - Shared infrastructure services.

- telemetry_store: In-memory ring buffer of orchestration records with subscriptions
- providers: Uniform adapters over the supported LLM APIs
- image_client: Text-to-image client for composite requests
- model_catalog: Static list of selectable models
"""

from .telemetry_store import TelemetryRecord, TelemetryStore

__all__ = ["TelemetryRecord", "TelemetryStore"]
