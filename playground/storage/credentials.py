"""
Per-provider API key storage.

Keys are obfuscated at rest. Obfuscation keeps keys from being read at a
glance in the JSON file; it is not encryption.
"""
from pathlib import Path
from typing import Dict, List

from .base import JsonFileStorage
from ..utils.logging_utils import logger
from ..utils.obfuscation import obfuscate, deobfuscate


class CredentialStorage(JsonFileStorage):

    def __init__(self, playground_home: Path):
        super().__init__(playground_home)
        self.credentials_file = playground_home / "credentials.json"

    def _load_all(self) -> Dict[str, str]:
        data = self._read_json(self.credentials_file)
        return data if isinstance(data, dict) else {}

    def save(self, provider_id: str, secret: str) -> None:
        """Store a key. Saving an empty key clears the entry."""
        secret = secret.strip()
        if not secret:
            self.clear(provider_id)
            return
        data = self._load_all()
        data[provider_id] = obfuscate(secret)
        self._write_json(self.credentials_file, data)
        logger.info(f"Saved API key for {provider_id}")

    def load(self, provider_id: str) -> str:
        encoded = self._load_all().get(provider_id)
        if not encoded:
            return ""
        return deobfuscate(encoded)

    def clear(self, provider_id: str) -> None:
        data = self._load_all()
        if data.pop(provider_id, None) is not None:
            self._write_json(self.credentials_file, data)
            logger.info(f"Cleared API key for {provider_id}")

    def has_key(self, provider_id: str) -> bool:
        return bool(self.load(provider_id))

    def configured_providers(self) -> List[str]:
        return [pid for pid, encoded in self._load_all().items() if deobfuscate(encoded)]
