"""
Outgoing chat-completion request assembly.

Conversation history is mapped onto langchain message objects and then
serialised with convert_to_openai_messages, which yields the role/content
dicts every OpenAI-compatible endpoint accepts.
"""
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.messages import convert_to_openai_messages

from playground.config.prompts import AGENTIC_PROMPTS, TOOL_PROTOCOL_PROMPT
from playground.models.chat import Message
from playground.models.profile import ModelParams, PlaygroundSettings
from playground.models.provider import Provider
from playground.tools.base import BaseClientTool


def describe_tools(tools: Sequence[BaseClientTool]) -> str:
    lines = []
    for tool in tools:
        properties = tool.InputSchema.model_json_schema(by_alias=True).get("properties", {})
        params = ", ".join(properties) or "none"
        lines.append(f"- {tool.name}: {tool.description} Params: {params}.")
    return "\n".join(lines)


def build_system_prompt(settings: PlaygroundSettings, tools: Sequence[BaseClientTool] = ()) -> str:
    """User system prompt, then the agentic mode block, then the tool protocol."""
    parts = [settings.systemPrompt.strip(), AGENTIC_PROMPTS.get(settings.agenticMode, "")]
    if tools:
        parts.append(TOOL_PROTOCOL_PROMPT.format(catalogue=describe_tools(tools)))
    return "\n\n".join(p for p in parts if p)


def _content_for_langchain(message: Message):
    if isinstance(message.content, str):
        return message.content
    return [part.model_dump(exclude_none=True) for part in message.content]


def to_langchain_messages(history: Sequence[Message], system_prompt: Optional[str] = None) -> List[BaseMessage]:
    """
    Map stored messages onto langchain messages in conversation order.

    Tool results have no tool_call_id to pair with, so they are sent as user
    turns. Assistant messages that failed before producing any text are left
    out.
    """
    messages: List[BaseMessage] = []
    if system_prompt:
        messages.append(SystemMessage(content=system_prompt))

    for message in history:
        content = _content_for_langchain(message)
        if message.role == "assistant":
            if message.error and not message.text():
                continue
            messages.append(AIMessage(content=content))
        elif message.role == "system":
            messages.append(SystemMessage(content=content))
        else:
            messages.append(HumanMessage(content=content))
    return messages


def build_messages(history: Sequence[Message], system_prompt: Optional[str] = None) -> List[Dict[str, Any]]:
    return convert_to_openai_messages(to_langchain_messages(history, system_prompt))


def build_payload(model_id: str, messages: List[Dict[str, Any]], params: ModelParams,
                  stream: bool = True) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model_id,
        "messages": messages,
        "stream": stream,
        "max_tokens": params.maxTokens,
    }
    if stream:
        payload.update({
            "temperature": params.temperature,
            "top_p": params.topP,
            "frequency_penalty": params.frequencyPenalty,
            "presence_penalty": params.presencePenalty,
        })
    if params.reasoningEffort:
        payload["reasoning_effort"] = params.reasoningEffort
    return payload


def build_headers(provider: Provider, api_key: str) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers[provider.auth_header] = f"{provider.auth_prefix} {api_key}" if provider.auth_prefix else api_key
    headers.update(provider.extra_headers)
    return headers


def endpoint_url(provider: Provider, path: str) -> str:
    return f"{provider.base_url.rstrip('/')}/{path.lstrip('/')}"
