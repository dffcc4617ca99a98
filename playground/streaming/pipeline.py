"""
Streaming session pipeline.

Drives one conversation turn end to end:

    IDLE -> BUILDING -> STREAMING -> PARSING_TAIL -> IDLE
                                  +-> AWAITING_HUMAN -> (next hop) ...
    any  -> ERRORED   -> IDLE
    any  -> CANCELLED -> IDLE

Each hop builds a request from the conversation, streams the reply into a
fresh assistant message and re-parses the whole buffer after every delta.
When the finished reply asks for tools, they are run (pausing on the
human-input broker where confirmation or an answer is needed) and their
results are appended as a tool message that feeds the next hop. Hops are
bounded by settings.maxToolHops; hitting the bound stops the turn without
an error.

Every exit path returns the session to IDLE. One session handles one turn
at a time; callers must not start a second turn while one is running.
"""
import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from playground.models.attachment import AttachedFile
from playground.models.chat import Conversation, Message
from playground.models.events import TurnEvent, TurnResult
from playground.models.human_input import HumanInputField
from playground.models.parsed import ToolElicitRequest
from playground.models.profile import PlaygroundSettings
from playground.models.provider import Provider
from playground.models.tool import ToolResult
from playground.parsing import parse_message
from playground.providers.registry import ProviderRegistry
from playground.services.attachments import build_message_content
from playground.services.conversations import ConversationStore, new_message
from playground.services.human_input import HumanInputBroker, HumanInputRequest
from playground.storage.credentials import CredentialStorage
from playground.streaming.request_builder import build_messages, build_payload, build_system_prompt
from playground.streaming.state import SessionState
from playground.streaming.transport import HttpxChatTransport
from playground.tools.registry import ToolRegistry
from playground.utils.custom_exceptions import (
    HumanInputCancelled,
    MissingCredentialError,
    PlaygroundError,
    TransportError,
    UnknownProviderError,
)
from playground.utils.logging_utils import logger

Listener = Callable[[TurnEvent], Any]

CONFIRM_RUN = "Run"
CONFIRM_DISMISS = "Dismiss"


class StreamingSession:

    def __init__(self, registry: ProviderRegistry, credentials: CredentialStorage,
                 tools: ToolRegistry, broker: HumanInputBroker,
                 conversations: ConversationStore, transport: HttpxChatTransport):
        self.registry = registry
        self.credentials = credentials
        self.tools = tools
        self.broker = broker
        self.conversations = conversations
        self.transport = transport

        self._state = SessionState.IDLE
        self._listener: Optional[Listener] = None
        self._stream_task: Optional[asyncio.Task] = None
        self._pending_request: Optional[HumanInputRequest] = None
        self._current_message: Optional[Message] = None
        self._cancel_requested = False
        self._reserved = False
        self._listener_tasks: Set[asyncio.Future] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def pending_request(self) -> Optional[HumanInputRequest]:
        """The confirmation request this session is suspended on, if any."""
        return self._pending_request

    @property
    def busy(self) -> bool:
        return self._reserved or self._state != SessionState.IDLE

    def reserve(self) -> bool:
        """
        Mark the session busy ahead of a turn that has not started yet.

        Returns False when a turn is already running or reserved. The
        caller must release() once its turn task finishes.
        """
        if self.busy:
            return False
        self._reserved = True
        return True

    def release(self) -> None:
        self._reserved = False

    # -----------------------------------------------------------------------
    # Turn entry points
    # -----------------------------------------------------------------------

    async def run_turn(self, conversation_id: str, text: Optional[str],
                       settings: PlaygroundSettings,
                       attachments: Sequence[AttachedFile] = (),
                       listener: Optional[Listener] = None) -> TurnResult:
        """
        Run one user turn. With text None the current history is re-sent as is.

        Never raises for transport, credential, tool or cancellation
        failures; those are reported on the returned TurnResult.
        """
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            raise PlaygroundError(f"Conversation {conversation_id} not found")

        self._listener = listener
        self._cancel_requested = False
        result = TurnResult(conversationId=conversation_id, outcome="completed")

        try:
            if text is not None or attachments:
                content = build_message_content(text or "", attachments)
                self.conversations.append_message(conversation_id, new_message("user", content))

            while True:
                message = await self._stream_hop(conversation, settings)
                result.messageIds.append(message.id)

                self._transition(SessionState.PARSING_TAIL)
                parsed = parse_message(message.text())
                self._emit("segments", messageId=message.id,
                           **parsed.model_dump(include={"segments", "artifact"}), final=True)
                if not parsed.tool_requests:
                    break
                if result.hops >= settings.maxToolHops:
                    logger.warning(f"Stopping tool loop after {result.hops} hops")
                    self._emit("stopped", reason="hop_limit", hops=result.hops)
                    result.outcome = "hop_limit"
                    break

                outputs = await self._dispatch_tools(parsed.tool_requests, settings)
                self._check_cancelled()
                follow_up = self._tool_message(outputs)
                self.conversations.append_message(conversation_id, follow_up)
                self._emit("message", message=follow_up.model_dump())
                result.hops += 1

        except _TurnCancelled:
            result.outcome = "cancelled"
            self._transition(SessionState.CANCELLED)
        except HumanInputCancelled:
            if self._cancel_requested:
                result.outcome = "cancelled"
                self._transition(SessionState.CANCELLED)
            else:
                logger.info("Tool run dismissed, turn ended")
                result.outcome = "dismissed"
                self._transition(SessionState.IDLE)
        except (TransportError, MissingCredentialError, UnknownProviderError) as e:
            logger.error(f"Turn failed: {e}")
            result.outcome = "errored"
            result.error = str(e)
            if self._current_message is not None:
                self.conversations.update_message(conversation_id, self._current_message.id, error=str(e))
            self._transition(SessionState.ERRORED)
            self._emit("error", message=str(e),
                       messageId=self._current_message.id if self._current_message else None)
        finally:
            if self._state == SessionState.AWAITING_HUMAN:
                # Turn torn down while suspended; release the broker slot
                self.broker.cancel(self._pending_request.id if self._pending_request else None)
            self._stream_task = None
            self._pending_request = None
            self._current_message = None
            self._transition(SessionState.IDLE)
            self._emit("done", result=result.model_dump())
            await self._drain_listener()
            self._listener = None

        return result

    async def retry(self, conversation_id: str, settings: PlaygroundSettings,
                    listener: Optional[Listener] = None) -> TurnResult:
        """Drop everything after the last user message and run again."""
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            raise PlaygroundError(f"Conversation {conversation_id} not found")
        last_user = next((m for m in reversed(conversation.messages) if m.role == "user"), None)
        if last_user is not None:
            self.conversations.delete_messages_after(conversation_id, last_user.id)
        return await self.run_turn(conversation_id, None, settings, listener=listener)

    def cancel(self) -> bool:
        """
        Abort the running turn. Text already streamed stays on the message.

        Returns False when there is nothing to cancel.
        """
        if self._state == SessionState.IDLE:
            return False
        logger.info(f"Cancelling turn in state {self._state.value}")
        self._cancel_requested = True

        if self._stream_task is not None and not self._stream_task.done():
            self._stream_task.cancel()
        if self._state == SessionState.AWAITING_HUMAN:
            request_id = self._pending_request.id if self._pending_request else None
            self.broker.cancel(request_id)
        return True

    # -----------------------------------------------------------------------
    # Hop internals
    # -----------------------------------------------------------------------

    def _resolve_target(self, settings: PlaygroundSettings) -> Tuple[Provider, str]:
        provider = self.registry.get(settings.selectedProviderId)
        if provider is None:
            raise UnknownProviderError(settings.selectedProviderId)
        api_key = self.credentials.load(provider.id)
        if provider.requires_key and not api_key:
            raise MissingCredentialError(provider.name)
        return provider, api_key

    async def _stream_hop(self, conversation: Conversation, settings: PlaygroundSettings) -> Message:
        self._transition(SessionState.BUILDING)
        self._current_message = None
        provider, api_key = self._resolve_target(settings)
        model_id = settings.selectedModelId

        enabled_tools = self.tools.select(settings.enabledToolNames)
        system_prompt = build_system_prompt(settings, enabled_tools)
        if not self.registry.supports_system_prompt(model_id):
            logger.debug(f"Model {model_id} takes no system prompt, omitting it")
            system_prompt = None
        streaming = self.registry.supports_streaming(model_id)
        payload = build_payload(model_id, build_messages(conversation.messages, system_prompt),
                                settings.params, stream=streaming)
        self._check_cancelled()

        message = new_message("assistant", "")
        self.conversations.append_message(conversation.id, message)
        self._current_message = message
        self._emit("message", message=message.model_dump())

        self._transition(SessionState.STREAMING)
        self._stream_task = asyncio.ensure_future(
            self._consume(provider, api_key, payload, conversation.id, message, streaming)
        )
        try:
            await self._stream_task
        except asyncio.CancelledError:
            if not self._cancel_requested:
                raise
            raise _TurnCancelled()
        finally:
            self._stream_task = None
        return message

    async def _consume(self, provider: Provider, api_key: str, payload: Dict[str, Any],
                       conversation_id: str, message: Message, streaming: bool) -> None:
        if not streaming:
            text = await self.transport.complete(provider, api_key, payload)
            self._apply_delta(conversation_id, message, text, streaming=False)
            return

        async for delta in self.transport.stream_chat(provider, api_key, payload):
            self._apply_delta(conversation_id, message, delta, streaming=True)

    def _apply_delta(self, conversation_id: str, message: Message, delta: str, streaming: bool) -> None:
        if not delta:
            return
        self.conversations.update_message(conversation_id, message.id, content=message.text() + delta)
        self._emit("delta", messageId=message.id, delta=delta)
        parsed = parse_message(message.text(), streaming=streaming)
        self._emit("segments", messageId=message.id,
                   **parsed.model_dump(include={"segments", "artifact"}), final=False)

    async def _dispatch_tools(self, requests: List[ToolElicitRequest],
                              settings: PlaygroundSettings) -> List[Tuple[ToolElicitRequest, ToolResult]]:
        outputs = []
        for request in requests:
            self._check_cancelled()
            self._emit("tool_request", **request.model_dump())
            tool = self.tools.get(request.tool)

            if tool is not None and tool.requires_confirmation and settings.confirmToolRuns:
                if not await self._confirm(request):
                    outputs.append((request, ToolResult(
                        type="dismissed",
                        data={"tool": request.tool},
                        text=f"The user chose not to run {request.tool}.",
                        error=True,
                    )))
                    continue

            if tool is not None and tool.awaits_human:
                self._transition(SessionState.AWAITING_HUMAN)
                self._emit("human_input", tool=request.tool)
            result = await self.tools.execute(request.tool, request.params)
            self._transition(SessionState.PARSING_TAIL)
            self._emit("tool_result", tool=request.tool, result=result.model_dump())
            outputs.append((request, result))
        return outputs

    async def _confirm(self, request: ToolElicitRequest) -> bool:
        question = f"Run tool {request.tool}?"
        if request.reason:
            question = f"{question} {request.reason}"
        fields = [HumanInputField(
            key="decision",
            type="radio",
            label=f"The assistant wants to run {request.tool} with {request.params}",
            options=[CONFIRM_RUN, CONFIRM_DISMISS],
            required=True,
        )]
        human_request = self.broker.request(question, fields)
        self._pending_request = human_request
        self._transition(SessionState.AWAITING_HUMAN)
        self._emit("human_input", tool=request.tool, request=human_request.view().model_dump())
        try:
            answer = await human_request
        finally:
            self._pending_request = None
        self._transition(SessionState.PARSING_TAIL)
        return answer.get("decision") == CONFIRM_RUN

    def _tool_message(self, outputs: List[Tuple[ToolElicitRequest, ToolResult]]) -> Message:
        blocks = [f"Tool result for {request.tool}:\n{result.text}" for request, result in outputs]
        tool_name = outputs[0][0].tool if len(outputs) == 1 else None
        return new_message("tool", "\n\n".join(blocks), toolName=tool_name)

    # -----------------------------------------------------------------------
    # Plumbing
    # -----------------------------------------------------------------------

    def _check_cancelled(self) -> None:
        if self._cancel_requested:
            raise _TurnCancelled()

    def _transition(self, state: SessionState) -> None:
        if state == self._state:
            return
        logger.debug(f"Pipeline {self._state.value} -> {state.value}")
        self._state = state
        self._emit("state", state=state.value)

    def _emit(self, event_type: str, **data) -> None:
        if self._listener is None:
            return
        try:
            outcome = self._listener(TurnEvent(type=event_type, data=data))
            if inspect.isawaitable(outcome):
                task = asyncio.ensure_future(outcome)
                self._listener_tasks.add(task)
                task.add_done_callback(self._listener_done)
        except Exception as e:
            logger.error(f"Turn listener failed on {event_type}: {e}")

    def _listener_done(self, task: asyncio.Future) -> None:
        self._listener_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Turn listener failed: {task.exception()}")

    async def _drain_listener(self) -> None:
        if self._listener_tasks:
            await asyncio.gather(*list(self._listener_tasks), return_exceptions=True)


class _TurnCancelled(Exception):
    """Internal signal that the user aborted the turn."""
    pass
