from .messages import Messages, MessageProvider, DEFAULT_MESSAGES, default_provider
from .error_list import (
    ErrorSeverity,
    ErrorType,
    ErrorMessage,
    ErrorList,
    ErrorAbortException,
)

__all__ = [
    "Messages",
    "MessageProvider",
    "DEFAULT_MESSAGES",
    "default_provider",
    "ErrorSeverity",
    "ErrorType",
    "ErrorMessage",
    "ErrorList",
    "ErrorAbortException",
]
