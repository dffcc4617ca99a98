"""
Read-only provider registry.

Loads the static catalog from providers_config once and answers lookups.
Missing providers or models are a display-only degradation: the name
helpers fall back to the raw id and never raise.
"""
from typing import Dict, Iterable, List, Optional

from playground.config.providers_config import (
    NO_STREAMING_MODELS,
    NO_SYSTEM_PROMPT_MODELS,
    PROVIDERS,
)
from playground.models.provider import Model, Provider
from playground.utils.logging_utils import logger


def _build_model(entry: Dict) -> Model:
    model_id = entry["id"]
    return Model(
        id=model_id,
        name=entry.get("name", model_id),
        tags=tuple(entry.get("tags", ())),
        context_window=entry.get("context_window"),
        no_system_prompt=model_id in NO_SYSTEM_PROMPT_MODELS,
        no_streaming=model_id in NO_STREAMING_MODELS,
    )


def _build_provider(entry: Dict) -> Provider:
    return Provider(
        id=entry["id"],
        name=entry["name"],
        base_url=entry["base_url"],
        requires_key=entry["requires_key"],
        extra_headers=dict(entry.get("extra_headers", {})),
        models=tuple(_build_model(m) for m in entry.get("models", [])),
        supports_models_endpoint=entry.get("supports_models_endpoint", False),
        docs_url=entry.get("docs_url", ""),
        key_label=entry.get("key_label", ""),
        auth_header=entry.get("auth_header", "Authorization"),
        auth_prefix=entry.get("auth_prefix", "Bearer"),
    )


class ProviderRegistry:
    def __init__(self, catalog: Optional[Iterable[Dict]] = None):
        entries = PROVIDERS if catalog is None else catalog
        self._providers: List[Provider] = [_build_provider(e) for e in entries]
        self._by_id: Dict[str, Provider] = {p.id: p for p in self._providers}
        # Models discovered through a provider's list-models query
        self._cached_models: Dict[str, List[Model]] = {}
        logger.debug(f"Provider registry loaded with {len(self._providers)} providers")

    def get(self, provider_id: str) -> Optional[Provider]:
        return self._by_id.get(provider_id)

    def all(self) -> List[Provider]:
        return list(self._providers)

    def find_model(self, provider_id: str, model_id: str) -> Optional[Model]:
        for model in self.models_for(provider_id):
            if model.id == model_id:
                return model
        return None

    def display_name(self, provider_id: str) -> str:
        provider = self.get(provider_id)
        return provider.name if provider else provider_id

    def model_display_name(self, provider_id: str, model_id: str) -> str:
        model = self.find_model(provider_id, model_id)
        return model.name if model else model_id

    def supports_system_prompt(self, model_id: str) -> bool:
        return model_id not in NO_SYSTEM_PROMPT_MODELS

    def supports_streaming(self, model_id: str) -> bool:
        return model_id not in NO_STREAMING_MODELS

    def set_cached_models(self, provider_id: str, models: List[Model]) -> None:
        if provider_id not in self._by_id:
            logger.warning(f"Ignoring model list for unknown provider {provider_id}")
            return
        self._cached_models[provider_id] = list(models)

    def models_for(self, provider_id: str) -> List[Model]:
        """Cached model list if one was fetched, otherwise the catalog's."""
        if provider_id in self._cached_models:
            return list(self._cached_models[provider_id])
        provider = self.get(provider_id)
        return list(provider.models) if provider else []
