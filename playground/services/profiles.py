"""
Profile manager.

Profiles are named snapshots of provider, model, system prompt and
parameters. Names are not unique; ids are.
"""
import time
import uuid
from typing import List, Optional

from playground.models.profile import PlaygroundSettings, Profile
from playground.providers.registry import ProviderRegistry
from playground.storage.profiles import ProfileStorage
from playground.utils.custom_exceptions import ValidationError
from playground.utils.logging_utils import logger


class ProfileManager:

    def __init__(self, storage: ProfileStorage, registry: ProviderRegistry):
        self.storage = storage
        self.registry = registry

    def save(self, name: str, settings: PlaygroundSettings) -> Profile:
        name = name.strip()
        if not name:
            raise ValidationError("Profile name cannot be empty")

        profile = Profile(
            id=str(uuid.uuid4()),
            name=name,
            providerId=settings.selectedProviderId,
            modelId=settings.selectedModelId,
            systemPrompt=settings.systemPrompt,
            params=settings.params.model_copy(),
            createdAt=int(time.time() * 1000),
        )
        self.storage.create(profile)
        logger.info(f"Saved profile {name!r} ({profile.id})")
        return profile

    def get(self, profile_id: str) -> Optional[Profile]:
        return self.storage.get(profile_id)

    def list(self) -> List[Profile]:
        return self.storage.list()

    def apply(self, profile_id: str, settings: PlaygroundSettings) -> Optional[PlaygroundSettings]:
        """Return settings with the profile's fields copied in, or None if missing."""
        profile = self.storage.get(profile_id)
        if profile is None:
            return None
        return settings.model_copy(update={
            "selectedProviderId": profile.providerId,
            "selectedModelId": profile.modelId,
            "systemPrompt": profile.systemPrompt,
            "params": profile.params.model_copy(),
        })

    def delete(self, profile_id: str) -> bool:
        return self.storage.delete(profile_id)

    def describe(self, profile: Profile) -> str:
        """Provider and model label; retired ids show as-is."""
        provider = self.registry.display_name(profile.providerId)
        model = self.registry.model_display_name(profile.providerId, profile.modelId)
        return f"{provider} / {model}"
