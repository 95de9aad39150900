"""Chat session module for askai.

Holds the active selection and runs the optimistic send protocol.
"""

from .controller import SessionController, derive_title
from .models import PersistOutcome, SendResult, SendState, SendStatus, Session

__all__ = [
    "PersistOutcome",
    "SendResult",
    "SendState",
    "SendStatus",
    "Session",
    "SessionController",
    "derive_title",
]
