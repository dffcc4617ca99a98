"""
Turn submission: slash commands first, the model otherwise.
"""
from typing import Optional, Sequence

from playground.commands.slash import SlashCommandInterpreter
from playground.models.attachment import AttachedFile
from playground.models.events import TurnEvent, TurnResult
from playground.models.profile import PlaygroundSettings
from playground.services.conversations import new_message
from playground.streaming.pipeline import Listener, StreamingSession


async def submit_turn(session: StreamingSession, commands: SlashCommandInterpreter,
                      conversation_id: str, text: str, settings: PlaygroundSettings,
                      attachments: Sequence[AttachedFile] = (),
                      listener: Optional[Listener] = None) -> TurnResult:
    """
    Answer a recognised slash command locally, or hand the turn to the session.

    A local answer is recorded as a user/assistant pair and never touches
    the network.
    """
    output = None if attachments else commands.execute(text)
    if output is None:
        return await session.run_turn(conversation_id, text, settings, attachments=attachments, listener=listener)

    conversations = session.conversations
    user = conversations.append_message(conversation_id, new_message("user", text))
    reply = conversations.append_message(conversation_id, new_message("assistant", output))
    result = TurnResult(
        conversationId=conversation_id,
        outcome="local",
        messageIds=[reply.id] if reply else [],
    )
    if listener is not None and user is not None and reply is not None:
        listener(TurnEvent(type="message", data={"message": user.model_dump()}))
        listener(TurnEvent(type="message", data={"message": reply.model_dump()}))
        listener(TurnEvent(type="done", data={"result": result.model_dump()}))
    return result
