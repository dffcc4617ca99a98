"""
HTTP transport for OpenAI-compatible chat completion endpoints.

Streaming responses are server-sent events: one `data: {json}` line per
chunk, terminated by `data: [DONE]`. Every failure surfaces as a
TransportError subclass carrying a message fit to show the user.
"""
import json
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from playground.config.app_config import REQUEST_TIMEOUT_SECONDS
from playground.models.provider import Model, Provider
from playground.streaming.request_builder import build_headers, endpoint_url
from playground.utils.custom_exceptions import (
    ProviderConnectionError,
    ProviderHTTPError,
    StreamFramingError,
    TransportError,
)
from playground.utils.logging_utils import logger

SSE_DONE = "[DONE]"


class SessionUsage:
    """Running token totals per provider for the lifetime of the process."""

    def __init__(self):
        self._tokens: Dict[str, int] = {}

    def add(self, provider_id: str, tokens: int) -> None:
        if tokens:
            self._tokens[provider_id] = self._tokens.get(provider_id, 0) + tokens

    def get(self, provider_id: str) -> int:
        return self._tokens.get(provider_id, 0)

    def total(self) -> int:
        return sum(self._tokens.values())

    def as_dict(self) -> Dict[str, int]:
        return dict(self._tokens)

    def reset(self) -> None:
        self._tokens.clear()


def friendly_http_error(provider: Provider, model_id: str, status_code: int, body: bytes) -> ProviderHTTPError:
    if status_code == 401:
        message = f"Invalid API key for {provider.name}"
    elif status_code == 429:
        message = f"Rate limited by {provider.name}. Try again soon."
    elif status_code == 404:
        message = f"Model {model_id} not found on {provider.name}"
    else:
        message = _error_message_from_body(body) or f"{provider.name} returned HTTP {status_code}"
    return ProviderHTTPError(message, provider_id=provider.id, status_code=status_code)


def _error_message_from_body(body: bytes) -> Optional[str]:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(data, list) and data:
        data = data[0]
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return data.get("message")


class HttpxChatTransport:

    def __init__(self, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = REQUEST_TIMEOUT_SECONDS,
                 usage: Optional[SessionUsage] = None):
        self._http_client = client
        self.timeout = timeout
        self.usage = usage or SessionUsage()

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def stream_chat(self, provider: Provider, api_key: str, payload: Dict[str, Any]) -> AsyncIterator[str]:
        """
        Yield text deltas in arrival order.

        Closing the generator (or cancelling the task iterating it) closes
        the underlying response.
        """
        client = self._get_http_client()
        url = endpoint_url(provider, "chat/completions")
        logger.debug(f"Opening stream to {provider.id} for model {payload.get('model')}")
        try:
            async with client.stream("POST", url, json=payload, headers=build_headers(provider, api_key)) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    raise friendly_http_error(provider, payload.get("model", ""), response.status_code, body)

                async for line in response.aiter_lines():
                    line = line.strip()
                    if not line or line.startswith(":") or not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if data == SSE_DONE:
                        break
                    delta = self._parse_chunk(provider, data)
                    if delta:
                        yield delta
        except httpx.TimeoutException as e:
            raise ProviderConnectionError(f"Request to {provider.name} timed out", provider_id=provider.id) from e
        except httpx.TransportError as e:
            raise ProviderConnectionError(f"Could not reach {provider.name}: {e}", provider_id=provider.id) from e
        finally:
            logger.debug(f"Stream to {provider.id} closed")

    def _parse_chunk(self, provider: Provider, data: str) -> str:
        try:
            chunk = json.loads(data)
        except json.JSONDecodeError as e:
            raise StreamFramingError(f"Malformed stream chunk from {provider.name}", provider_id=provider.id) from e
        if not isinstance(chunk, dict):
            raise StreamFramingError(f"Unexpected stream chunk from {provider.name}", provider_id=provider.id)

        if chunk.get("error"):
            message = _error_message_from_body(data.encode("utf-8")) or f"{provider.name} reported an error"
            raise TransportError(message, provider_id=provider.id)

        usage = chunk.get("usage")
        if isinstance(usage, dict):
            self.usage.add(provider.id, usage.get("total_tokens") or 0)

        return self._choice_text(provider, chunk, "delta")

    @staticmethod
    def _choice_text(provider: Provider, body: Dict[str, Any], key: str) -> str:
        """Pull choices[0][key]['content'] out of a response body, checking shapes on the way."""
        choices = body.get("choices") or []
        if not isinstance(choices, list):
            raise StreamFramingError(f"Unexpected response shape from {provider.name}", provider_id=provider.id)
        if not choices:
            return ""
        choice = choices[0]
        if not isinstance(choice, dict):
            raise StreamFramingError(f"Unexpected response shape from {provider.name}", provider_id=provider.id)
        part = choice.get(key) or {}
        if not isinstance(part, dict):
            raise StreamFramingError(f"Unexpected response shape from {provider.name}", provider_id=provider.id)
        content = part.get("content")
        return content if isinstance(content, str) else ""

    async def complete(self, provider: Provider, api_key: str, payload: Dict[str, Any]) -> str:
        """Single non-streamed completion; returns the full text."""
        body = dict(payload, stream=False)
        response = await self._request(provider, "POST", "chat/completions", api_key, json=body)
        if response.status_code >= 400:
            raise friendly_http_error(provider, body.get("model", ""), response.status_code, response.content)
        try:
            data = response.json()
        except ValueError as e:
            raise StreamFramingError(f"Malformed response from {provider.name}", provider_id=provider.id) from e
        if not isinstance(data, dict):
            raise StreamFramingError(f"Unexpected response shape from {provider.name}", provider_id=provider.id)

        usage = data.get("usage")
        if isinstance(usage, dict):
            self.usage.add(provider.id, usage.get("total_tokens") or 0)
        return self._choice_text(provider, data, "message")

    async def _request(self, provider: Provider, method: str, path: str, api_key: str, **kwargs) -> httpx.Response:
        client = self._get_http_client()
        try:
            return await client.request(method, endpoint_url(provider, path),
                                        headers=build_headers(provider, api_key), **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderConnectionError(f"Request to {provider.name} timed out", provider_id=provider.id) from e
        except httpx.TransportError as e:
            raise ProviderConnectionError(f"Could not reach {provider.name}: {e}", provider_id=provider.id) from e

    async def test_connection(self, provider: Provider, api_key: str) -> bool:
        """
        Check that the key works. A 400 or 404 means the key was accepted
        even if the probe model was not.
        """
        try:
            if provider.supports_models_endpoint:
                response = await self._request(provider, "GET", "models", api_key)
            else:
                probe_model = provider.models[0].id if provider.models else "test"
                response = await self._request(provider, "POST", "chat/completions", api_key, json={
                    "model": probe_model,
                    "messages": [{"role": "user", "content": "Hi"}],
                    "max_tokens": 1,
                    "stream": False,
                })
        except ProviderConnectionError as e:
            logger.warning(f"Connection test for {provider.id} failed: {e}")
            return False

        if response.status_code < 400:
            return True
        if response.status_code in (400, 404):
            return True
        logger.info(f"Connection test for {provider.id} returned HTTP {response.status_code}")
        return False

    async def fetch_models(self, provider: Provider, api_key: str) -> Optional[List[Model]]:
        """Query the provider's model list, or None when unsupported or failing."""
        if not provider.supports_models_endpoint:
            return None
        try:
            response = await self._request(provider, "GET", "models", api_key)
            response.raise_for_status()
            entries = response.json().get("data", [])
        except (ProviderConnectionError, httpx.HTTPStatusError, ValueError, AttributeError) as e:
            logger.warning(f"Could not fetch models for {provider.id}: {e}")
            return None
        return [Model(id=entry["id"], name=entry["id"]) for entry in entries if isinstance(entry, dict) and "id" in entry]
