"""
Core infrastructure shared by properties, data objects and criteria.

Provides:
- Signal / AsyncSignal: observer primitives for change notifications
- CancellationToken: cooperative cancellation for async operations
- ModelSettings / load_settings / save_settings: injectable configuration and its files
- setup_logging: Loguru sink configuration
"""
from .events import Signal, AsyncSignal
from .cancellation import CancellationToken, check_cancelled
from .config import (
    ModelSettings,
    ValueSettings,
    DateSettings,
    NumberSettings,
    CriteriaSettings,
    ListSettings,
    load_settings,
    save_settings,
)
from .logging import setup_logging

__all__ = [
    "Signal",
    "AsyncSignal",
    "CancellationToken",
    "check_cancelled",
    "ModelSettings",
    "ValueSettings",
    "DateSettings",
    "NumberSettings",
    "CriteriaSettings",
    "ListSettings",
    "load_settings",
    "save_settings",
    "setup_logging",
]
