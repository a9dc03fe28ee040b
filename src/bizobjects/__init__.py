"""
bizobjects - typed properties and data objects for business record screens.

Import order matters: properties must be loaded before the binding and
object packages that build on them.
"""
from .core import (
    Signal,
    AsyncSignal,
    CancellationToken,
    ModelSettings,
    load_settings,
    save_settings,
    setup_logging,
)
from .errors import (
    ErrorSeverity,
    ErrorType,
    ErrorMessage,
    ErrorList,
    ErrorAbortException,
    Messages,
    MessageProvider,
)
from .properties import (
    ValueFormat,
    PropertyChange,
    AccessLevel,
    PropertyChangeEventArgs,
    BaseProperty,
    DataProperty,
    ComboProperty,
    ActionProperty,
    Header,
    LookupTable,
    EnumKind,
    create_kind,
)
from .binding import ComputedBinding
from .objects import (
    CrudOptions,
    ReadOptions,
    DataObject,
    DataListObject,
    DataRow,
    SortCriteria,
    SortDirection,
    SortField,
    SelectionMode,
    PagingMode,
)
from .criteria import CriteriaObject, OperatorProperty, get_operator

__version__ = "0.1.0"

__all__ = [
    "Signal",
    "AsyncSignal",
    "CancellationToken",
    "ModelSettings",
    "load_settings",
    "save_settings",
    "setup_logging",
    "ErrorSeverity",
    "ErrorType",
    "ErrorMessage",
    "ErrorList",
    "ErrorAbortException",
    "Messages",
    "MessageProvider",
    "ValueFormat",
    "PropertyChange",
    "AccessLevel",
    "PropertyChangeEventArgs",
    "BaseProperty",
    "DataProperty",
    "ComboProperty",
    "ActionProperty",
    "Header",
    "LookupTable",
    "EnumKind",
    "create_kind",
    "ComputedBinding",
    "CrudOptions",
    "ReadOptions",
    "DataObject",
    "DataListObject",
    "DataRow",
    "SortCriteria",
    "SortDirection",
    "SortField",
    "SelectionMode",
    "PagingMode",
    "CriteriaObject",
    "OperatorProperty",
    "get_operator",
]
