"""
MelonScope System Router - model catalog and runtime configuration read-out.
"""

from fastapi import APIRouter

from config import runtime_config
from services.model_catalog import AVAILABLE_MODELS, DEFAULT_MODEL_ID
from services.providers import DEFAULT_PROVIDER, PROVIDER_REGISTRY

router = APIRouter(prefix="/api")


@router.get("/models")
async def list_models():
    return {
        "models": [m.to_dict() for m in AVAILABLE_MODELS],
        "defaultModelId": DEFAULT_MODEL_ID,
    }


@router.get("/config")
async def get_runtime_config():
    """Non-secret settings plus which providers have a credential set."""
    return {
        "config": runtime_config.to_dict(),
        "defaultProvider": DEFAULT_PROVIDER,
        "providers": [
            {
                "id": spec.provider_id,
                "name": spec.name,
                "envVar": spec.env_var,
                "configured": runtime_config.get_credential(spec.env_var) is not None,
            }
            for spec in PROVIDER_REGISTRY.values()
        ],
    }
