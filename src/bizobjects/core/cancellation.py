"""
Cooperative cancellation for async value, validation and CRUD operations.
"""
import asyncio
from typing import Optional


class CancellationToken:
    """
    Flag shared between a caller and a running async operation.

    Operations call ``raise_if_cancelled`` at each suspension boundary,
    which surfaces cancellation as ``asyncio.CancelledError``.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError("Operation was cancelled")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise if the optional token has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()
