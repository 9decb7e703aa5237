"""Error categories raised by the core.

Every gateway operation fails with one of these. The HTTP layer maps each
code to exactly one status (see ``photochat.services.handlers``).
"""

from enum import Enum


class ErrorCode(str, Enum):
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_CONVERSATION_MISMATCH = "E_CONVERSATION_MISMATCH"
    E_NOT_FOUND = "E_NOT_FOUND"
    E_FORBIDDEN = "E_FORBIDDEN"
    E_CONFLICT = "E_CONFLICT"
    E_INTERNAL = "E_INTERNAL"


class CoreError(Exception):
    """Base exception for core errors.

    Attributes:
        code: Stable error code
        message: Human-readable error message
    """

    code: ErrorCode = ErrorCode.E_INTERNAL
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CoreError):
    """Malformed input: bad username, empty text, payload/kind mismatch, bad base64."""

    code = ErrorCode.E_INVALID_REQUEST
    default_message = "Invalid request"


class ConversationMismatch(CoreError):
    """The referenced message does not belong to the given conversation."""

    code = ErrorCode.E_CONVERSATION_MISMATCH
    default_message = "Message does not belong to specified conversation"


class NotFound(CoreError):
    code = ErrorCode.E_NOT_FOUND
    default_message = "Not found"


class Forbidden(CoreError):
    """The actor lacks the participation or ownership the operation requires."""

    code = ErrorCode.E_FORBIDDEN
    default_message = "Forbidden"


class Conflict(CoreError):
    code = ErrorCode.E_CONFLICT
    default_message = "Conflict"


class InternalError(CoreError):
    """Storage failure. The message is opaque; details go to the log."""

    code = ErrorCode.E_INTERNAL
    default_message = "Internal error"
