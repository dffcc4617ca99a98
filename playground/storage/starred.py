"""
Starred message storage.

Maps conversation id to a set of message ids. Entries never imply that the
message still exists; readers filter dangling ids.
"""
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .base import JsonFileStorage


class StarredStorage(JsonFileStorage):

    def __init__(self, playground_home: Path):
        super().__init__(playground_home)
        self.starred_file = playground_home / "starred.json"

    def _load_all(self) -> Dict[str, List[str]]:
        data = self._read_json(self.starred_file)
        return data if isinstance(data, dict) else {}

    def star(self, conversation_id: str, message_id: str) -> None:
        data = self._load_all()
        ids = data.setdefault(conversation_id, [])
        if message_id not in ids:
            ids.append(message_id)
            self._write_json(self.starred_file, data)

    def unstar(self, conversation_id: str, message_id: str) -> None:
        data = self._load_all()
        ids = data.get(conversation_id, [])
        if message_id not in ids:
            return
        ids.remove(message_id)
        if not ids:
            del data[conversation_id]
        self._write_json(self.starred_file, data)

    def toggle(self, conversation_id: str, message_id: str) -> bool:
        """Flip the star and return the new state."""
        if self.is_starred(conversation_id, message_id):
            self.unstar(conversation_id, message_id)
            return False
        self.star(conversation_id, message_id)
        return True

    def is_starred(self, conversation_id: str, message_id: str) -> bool:
        return message_id in self._load_all().get(conversation_id, [])

    def starred(self, conversation_id: str, existing_ids: Optional[Iterable[str]] = None) -> List[str]:
        """Starred ids for a conversation, restricted to existing_ids when given."""
        ids = self._load_all().get(conversation_id, [])
        if existing_ids is None:
            return list(ids)
        existing = set(existing_ids)
        return [i for i in ids if i in existing]

    def forget_conversation(self, conversation_id: str) -> None:
        data = self._load_all()
        if data.pop(conversation_id, None) is not None:
            self._write_json(self.starred_file, data)
