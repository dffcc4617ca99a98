"""
Profile storage implementation.
"""
from pathlib import Path
from typing import Optional, List

from .base import BaseStorage
from ..models.profile import Profile


class ProfileStorage(BaseStorage[Profile]):
    """Storage for saved model profiles."""

    def __init__(self, playground_home: Path):
        self.profiles_dir = playground_home / "profiles"
        super().__init__(self.profiles_dir)

    def get(self, profile_id: str) -> Optional[Profile]:
        data = self._read_json(self._entity_file(profile_id))
        if not data:
            return None
        return Profile(**data)

    def list(self) -> List[Profile]:
        profiles = []
        for profile_file in self.profiles_dir.glob("*.json"):
            data = self._read_json(profile_file)
            if data:
                profiles.append(Profile(**data))
        return sorted(profiles, key=lambda p: p.createdAt)

    def create(self, profile: Profile) -> Profile:
        """Persist an already-built profile. Profiles are never updated."""
        self._write_json(self._entity_file(profile.id), profile.model_dump())
        return profile

    def delete(self, profile_id: str) -> bool:
        profile_file = self._entity_file(profile_id)
        if not profile_file.exists():
            return False
        profile_file.unlink()
        return True
