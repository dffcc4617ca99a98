"""
Custom exceptions for the application.
"""
from typing import Optional


class PlaygroundError(Exception):
    """Base class for all errors raised by the orchestration core."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        return self.message


class TransportError(PlaygroundError):
    """
    Raised when talking to a provider endpoint fails.

    The turn that hit it is reported as errored; any text that already
    streamed in stays on the assistant message.
    """
    def __init__(self, message: str, provider_id: str = "", status_code: Optional[int] = None):
        self.provider_id = provider_id
        self.status_code = status_code
        super().__init__(message)


class ProviderConnectionError(TransportError):
    """Connection failure, read failure or timeout."""
    pass


class ProviderHTTPError(TransportError):
    """Provider answered with a non-success status code."""
    pass


class StreamFramingError(TransportError):
    """A server-sent event could not be decoded."""
    pass


class MissingCredentialError(PlaygroundError):
    """Provider requires a key and none is stored."""

    def __init__(self, provider_name: str):
        self.provider_name = provider_name
        super().__init__(f"No API key for {provider_name}. Add one in settings.")


class UnknownProviderError(PlaygroundError):
    """A request was built against a provider id missing from the catalog."""

    def __init__(self, provider_id: str):
        self.provider_id = provider_id
        super().__init__(f"Unknown provider: {provider_id}")


class HumanInputCancelled(PlaygroundError):
    """Delivered to whoever awaits a human-input request that was cancelled or evicted."""

    def __init__(self, message: str = "Human input cancelled"):
        super().__init__(message)


class RequestAlreadySettled(PlaygroundError):
    """A human-input request was resolved or cancelled a second time."""
    pass


class ValidationError(PlaygroundError):
    """Exception raised when input validation fails."""
    pass


class ToolExecutionError(PlaygroundError):
    """Raised by a client tool; the registry turns it into a textual result."""
    pass
