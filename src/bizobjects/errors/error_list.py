"""
Error messages, error lists and the abort exception.

Data problems are collected in an ErrorList rather than raised; only
critical errors (or an explicit abort) raise ErrorAbortException, which
carries the list so callers can inspect everything gathered so far.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterator, List, Optional

from .messages import MessageProvider, default_provider


class ErrorSeverity(IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2
    CRITICAL = 3


class ErrorType(Enum):
    """Origin of an error."""
    VALIDATION = "validation"
    FUNCTIONAL = "functional"
    DATA = "data"
    CONCURRENCY = "concurrency"
    EXTERNAL = "external"
    SECURITY = "security"
    SYSTEM = "system"
    MESSAGE = "message"


_HTTP_STATUS = {
    ErrorType.VALIDATION: 400,
    ErrorType.FUNCTIONAL: 400,
    ErrorType.SECURITY: 403,
    ErrorType.DATA: 404,
    ErrorType.CONCURRENCY: 409,
    ErrorType.EXTERNAL: 502,
}


@dataclass
class ErrorMessage:
    type: ErrorType
    code: str
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR

    @property
    def http_status(self) -> int:
        if self.severity < ErrorSeverity.ERROR:
            return 200
        return _HTTP_STATUS.get(self.type, 500)

    def __str__(self):
        return self.message


class ErrorAbortException(Exception):
    """Raised when an operation is aborted due to the severity of its errors."""

    def __init__(self, message: str, errors: "ErrorList"):
        super().__init__(message)
        self.errors = errors


class ErrorList:
    """
    Ordered collection of error messages.
    """

    def __init__(self, resources: Optional[MessageProvider] = None):
        self.resources = resources or default_provider
        self._errors: List[ErrorMessage] = []
        self._http_status: Optional[int] = None

    def get_message(self, code: str, *params) -> str:
        return self.resources.format(code, *params)

    # --- Adding ---
    def add(self, err: ErrorMessage) -> ErrorMessage:
        self._errors.append(err)
        return err

    def add_validation_error(self, code: str, *params) -> ErrorMessage:
        return self.add(ErrorMessage(ErrorType.VALIDATION, code, self.get_message(code, *params), ErrorSeverity.ERROR))

    def add_error(self, type: ErrorType, code: str, *params) -> ErrorMessage:
        return self.add(ErrorMessage(type, code, self.get_message(code, *params), ErrorSeverity.ERROR))

    def add_warning(self, code: str, *params) -> ErrorMessage:
        return self.add(ErrorMessage(ErrorType.MESSAGE, code, self.get_message(code, *params), ErrorSeverity.WARNING))

    def add_info(self, code: str, *params) -> ErrorMessage:
        return self.add(ErrorMessage(ErrorType.MESSAGE, code, self.get_message(code, *params), ErrorSeverity.INFO))

    def critical_error(self, type: ErrorType, code: str, *params, abort: bool = True) -> ErrorMessage:
        """
        Add a critical error and, unless told otherwise, abort right away.

        Raises:
            ErrorAbortException: when ``abort`` is True.
        """
        err = self.add(ErrorMessage(type, code, self.get_message(code, *params), ErrorSeverity.CRITICAL))
        if abort:
            self.abort(err.message)
        return err

    # --- Aborting ---
    def abort(self, reason: str):
        raise ErrorAbortException(reason, self)

    def abort_if_has_errors(self):
        if self.has_errors():
            self.abort(self.errors_text)

    # --- Queries ---
    def has_errors(self) -> bool:
        return any(e.severity > ErrorSeverity.WARNING for e in self._errors)

    def has_critical(self) -> bool:
        return any(e.severity == ErrorSeverity.CRITICAL for e in self._errors)

    def merge_with(self, other: Optional["ErrorList"]):
        if other is not None and other is not self:
            self._errors.extend(other.errors)

    def clear(self):
        self._errors.clear()

    @property
    def errors(self) -> List[ErrorMessage]:
        return list(self._errors)

    @property
    def errors_text(self) -> str:
        return "\n".join(e.message for e in self._errors)

    @property
    def http_status(self) -> int:
        if self._http_status is not None:
            return self._http_status
        if not self._errors:
            return 200
        return max(e.http_status for e in self._errors)

    @http_status.setter
    def http_status(self, value: int):
        self._http_status = value

    def __len__(self):
        return len(self._errors)

    def __iter__(self) -> Iterator[ErrorMessage]:
        return iter(list(self._errors))

    def __bool__(self):
        # an empty list is still a list; callers test for None explicitly
        return True

    def __repr__(self):
        return f"ErrorList({self._errors!r})"
