"""
Shared vocabulary of the property engine.

- ValueFormat: the four representations a value can be requested in
- PropertyChange: bitmask of change kinds carried by change notifications
- AccessLevel: ordinal security level of a property or object
- PropertyChangeEventArgs: payload of property change notifications
"""
from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import Any, Optional


class ValueFormat(Enum):
    INTERNAL = "internal"
    TRANSPORT = "transport"
    EDIT_STRING = "edit_string"
    DISPLAY_STRING = "display_string"

    def is_string(self) -> bool:
        return self in (ValueFormat.EDIT_STRING, ValueFormat.DISPLAY_STRING)

    def is_typed(self) -> bool:
        return self in (ValueFormat.INTERNAL, ValueFormat.TRANSPORT)


class PropertyChange(IntFlag):
    NONE = 0
    VALUE = 0x01
    EDITABLE = 0x02
    EDITING = 0x04
    REQUIRED = 0x08
    ITEMS = 0x10
    VISIBLE = 0x20
    VALIDATION = 0x40
    ALL = 0xFFFF

    def includes(self, change: "PropertyChange") -> bool:
        return bool(self & change)

    def includes_value(self) -> bool:
        return self.includes(PropertyChange.VALUE)

    def includes_editable(self) -> bool:
        return self.includes(PropertyChange.EDITABLE)

    def includes_editing(self) -> bool:
        return self.includes(PropertyChange.EDITING)

    def includes_required(self) -> bool:
        return self.includes(PropertyChange.REQUIRED)

    def includes_items(self) -> bool:
        return self.includes(PropertyChange.ITEMS)

    def includes_visible(self) -> bool:
        return self.includes(PropertyChange.VISIBLE)

    def includes_validation(self) -> bool:
        return self.includes(PropertyChange.VALIDATION)


class AccessLevel(IntEnum):
    NONE = 0
    READ_ONLY = 1
    FULL = 2


@dataclass
class PropertyChangeEventArgs:
    change: PropertyChange
    old_value: Any = None
    new_value: Any = None
    row: Optional[Any] = None
    is_async: bool = False
