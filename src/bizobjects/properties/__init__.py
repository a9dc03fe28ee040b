"""
Properties: value formats, base/data/action properties and value kinds.
"""
from .value_format import ValueFormat, PropertyChange, AccessLevel, PropertyChangeEventArgs
from .base import BaseProperty, split_pascal_case
from .kinds import (
    ValueKind,
    TextKind,
    GuidKind,
    IntegerKind,
    SmallIntegerKind,
    TinyIntegerKind,
    IntegerKeyKind,
    DecimalKind,
    MoneyKind,
    PercentKind,
    BooleanKind,
    DateTimeKind,
    DateKind,
    TimeKind,
    KIND_TYPES,
    create_kind,
    register_kind,
)
from .enum import Header, LookupTable, EnumKind
from .data_property import DataProperty, validate_required
from .combo import ComboProperty
from .action import ActionProperty

__all__ = [
    "ValueFormat",
    "PropertyChange",
    "AccessLevel",
    "PropertyChangeEventArgs",
    "BaseProperty",
    "split_pascal_case",
    "ValueKind",
    "TextKind",
    "GuidKind",
    "IntegerKind",
    "SmallIntegerKind",
    "TinyIntegerKind",
    "IntegerKeyKind",
    "DecimalKind",
    "MoneyKind",
    "PercentKind",
    "BooleanKind",
    "DateTimeKind",
    "DateKind",
    "TimeKind",
    "KIND_TYPES",
    "create_kind",
    "register_kind",
    "Header",
    "LookupTable",
    "EnumKind",
    "DataProperty",
    "validate_required",
    "ComboProperty",
    "ActionProperty",
]
