"""
Provider catalog, credentials and settings endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Dict, List, Optional

from ..context import PlaygroundContext
from ..models.profile import PlaygroundSettings
from ..models.provider import Model
from .dependencies import get_context

router = APIRouter(tags=["providers"])


class ProviderSummary(BaseModel):
    id: str
    name: str
    requiresKey: bool
    hasKey: bool
    supportsModelsEndpoint: bool
    docsUrl: str = ""
    keyLabel: str = ""
    models: List[Model]


class KeyUpdate(BaseModel):
    key: str


def _summary(context: PlaygroundContext, provider_id: str) -> ProviderSummary:
    provider = context.registry.get(provider_id)
    return ProviderSummary(
        id=provider.id,
        name=provider.name,
        requiresKey=provider.requires_key,
        hasKey=context.credentials.has_key(provider.id),
        supportsModelsEndpoint=provider.supports_models_endpoint,
        docsUrl=provider.docs_url,
        keyLabel=provider.key_label,
        models=context.registry.models_for(provider.id),
    )


def _require_provider(context: PlaygroundContext, provider_id: str):
    provider = context.registry.get(provider_id)
    if provider is None:
        raise HTTPException(status_code=404, detail="Provider not found")
    return provider


@router.get("/api/providers", response_model=List[ProviderSummary])
async def list_providers(context: PlaygroundContext = Depends(get_context)):
    return [_summary(context, p.id) for p in context.registry.all()]


@router.get("/api/providers/{provider_id}", response_model=ProviderSummary)
async def get_provider(provider_id: str, context: PlaygroundContext = Depends(get_context)):
    _require_provider(context, provider_id)
    return _summary(context, provider_id)


@router.put("/api/providers/{provider_id}/key")
async def save_key(provider_id: str, data: KeyUpdate, context: PlaygroundContext = Depends(get_context)):
    """Store a key. An empty key clears it."""
    _require_provider(context, provider_id)
    context.credentials.save(provider_id, data.key)
    return {"hasKey": context.credentials.has_key(provider_id)}


@router.delete("/api/providers/{provider_id}/key")
async def clear_key(provider_id: str, context: PlaygroundContext = Depends(get_context)):
    _require_provider(context, provider_id)
    context.credentials.clear(provider_id)
    return {"hasKey": False}


@router.post("/api/providers/{provider_id}/test")
async def test_provider(provider_id: str, context: PlaygroundContext = Depends(get_context)):
    provider = _require_provider(context, provider_id)
    ok = await context.transport.test_connection(provider, context.credentials.load(provider_id))
    return {"ok": ok}


@router.post("/api/providers/{provider_id}/models/refresh", response_model=List[Model])
async def refresh_models(provider_id: str, context: PlaygroundContext = Depends(get_context)):
    provider = _require_provider(context, provider_id)
    models = await context.transport.fetch_models(provider, context.credentials.load(provider_id))
    if models is None:
        raise HTTPException(status_code=502, detail=f"Could not fetch models from {provider.name}")
    context.registry.set_cached_models(provider_id, models)
    return models


@router.get("/api/usage")
async def get_usage(context: PlaygroundContext = Depends(get_context)) -> Dict[str, int]:
    return context.transport.usage.as_dict()


@router.get("/api/settings", response_model=PlaygroundSettings)
async def get_settings(context: PlaygroundContext = Depends(get_context)):
    return context.settings


@router.put("/api/settings", response_model=PlaygroundSettings)
async def update_settings(data: PlaygroundSettings, context: PlaygroundContext = Depends(get_context)):
    return context.save_settings(data)
