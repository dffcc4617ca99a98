"""
Application root scope.

Builds the long-lived collaborators once and wires them together. The
server and the CLI each own exactly one PlaygroundContext; nothing in the
package keeps module-level mutable state.
"""
from pathlib import Path
from typing import Dict, Optional

from playground.commands.slash import SlashCommandInterpreter
from playground.models.profile import PlaygroundSettings
from playground.providers.registry import ProviderRegistry
from playground.services.conversations import ConversationStore
from playground.services.human_input import HumanInputBroker
from playground.services.profiles import ProfileManager
from playground.storage.credentials import CredentialStorage
from playground.storage.profiles import ProfileStorage
from playground.storage.settings import SettingsStorage
from playground.storage.starred import StarredStorage
from playground.streaming.pipeline import StreamingSession
from playground.streaming.transport import HttpxChatTransport
from playground.tools.registry import ToolRegistry
from playground.utils.logging_utils import logger
from playground.utils.paths import get_playground_home


class PlaygroundContext:

    def __init__(self, home: Optional[Path] = None, transport: Optional[HttpxChatTransport] = None):
        self.home = home or get_playground_home()
        self.registry = ProviderRegistry()
        self.broker = HumanInputBroker()
        self.tools = ToolRegistry(self.broker)
        self.commands = SlashCommandInterpreter()
        self.credentials = CredentialStorage(self.home)
        self.settings_storage = SettingsStorage(self.home)
        self.starred = StarredStorage(self.home)
        self.profiles = ProfileManager(ProfileStorage(self.home), self.registry)
        self.conversations = ConversationStore(self.starred)
        self.transport = transport or HttpxChatTransport()
        self._sessions: Dict[str, StreamingSession] = {}
        logger.debug(f"Playground context created at {self.home}")

    @property
    def settings(self) -> PlaygroundSettings:
        return self.settings_storage.load()

    def save_settings(self, settings: PlaygroundSettings) -> PlaygroundSettings:
        return self.settings_storage.save(settings)

    def session_for(self, conversation_id: str) -> StreamingSession:
        """One pipeline per conversation, created on first use."""
        session = self._sessions.get(conversation_id)
        if session is None:
            session = StreamingSession(
                registry=self.registry,
                credentials=self.credentials,
                tools=self.tools,
                broker=self.broker,
                conversations=self.conversations,
                transport=self.transport,
            )
            self._sessions[conversation_id] = session
        return session

    def drop_session(self, conversation_id: str) -> None:
        session = self._sessions.pop(conversation_id, None)
        if session is not None:
            session.cancel()

    async def aclose(self) -> None:
        for session in self._sessions.values():
            session.cancel()
        self._sessions.clear()
        await self.transport.aclose()
