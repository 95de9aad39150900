"""Exception hierarchy for askai.

Every error raised across a module boundary derives from :class:`AskAIError`
so callers can catch the package's failures without catching everything.
"""

__all__ = [
    "AskAIError",
    "ChatNotFoundError",
    "InvalidInputError",
    "SessionExpiredError",
    "SessionUnavailableError",
    "TransportError",
]


class AskAIError(RuntimeError):
    """Base class for askai errors."""


class ChatNotFoundError(AskAIError):
    """Raised when an operation references a deleted or absent chat.

    Callers should refresh their view of the chat list.
    """

    def __init__(self, chat_id: str):
        super().__init__(f"Chat not found: {chat_id}")
        self.chat_id = chat_id


class TransportError(AskAIError):
    """Raised when a backend is unreachable or answers with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(TransportError):
    """Raised when the remote store rejects the bearer credential (HTTP 401)."""

    def __init__(self, message: str = "Session expired, please log in again"):
        super().__init__(message, status_code=401)


class SessionUnavailableError(AskAIError):
    """Raised when a chat is mutated while no auth token is present."""

    def __init__(self, message: str = "Not authenticated: no conversations available"):
        super().__init__(message)


class InvalidInputError(AskAIError, ValueError):
    """Raised for malformed messages or stored chat documents."""
