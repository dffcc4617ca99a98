"""
Current playground settings, persisted to settings.json.
"""
from pathlib import Path

from .base import JsonFileStorage
from ..config.app_config import DEFAULT_SETTINGS
from ..models.profile import PlaygroundSettings


class SettingsStorage(JsonFileStorage):

    def __init__(self, playground_home: Path):
        super().__init__(playground_home)
        self.settings_file = playground_home / "settings.json"

    def load(self) -> PlaygroundSettings:
        data = self._read_json(self.settings_file)
        if not isinstance(data, dict):
            return PlaygroundSettings(**DEFAULT_SETTINGS)
        merged = {**DEFAULT_SETTINGS, **data}
        return PlaygroundSettings(**merged)

    def save(self, settings: PlaygroundSettings) -> PlaygroundSettings:
        self._write_json(self.settings_file, settings.model_dump())
        return settings
