"""
DataRow: positional value vector of a list object.

Each row stores one value per list column plus parallel per-row
overrides of editable, editing and modified state and a per-cell
validation cache.
"""
from typing import Any, List, Optional

from loguru import logger

from ..properties.value_format import ValueFormat
from .sort import SortDirection


class DataRow:
    """A single row of a DataListObject."""

    def __init__(self, list_object, values: Optional[List[Any]] = None):
        self.list = list_object
        n = list_object.column_count
        self.values: List[Any] = [None] * n
        self.editable: List[Optional[bool]] = [None] * n
        self.editing: List[Optional[bool]] = [None] * n
        self.modified: List[Optional[bool]] = [None] * n
        self.errors: List[Any] = [None] * n
        self._selected = False
        if values:
            for i, v in enumerate(values[:n]):
                self.values[i] = v

    @property
    def selected(self) -> bool:
        return self._selected

    def add_column(self):
        self.values.append(None)
        self.editable.append(None)
        self.editing.append(None)
        self.modified.append(None)
        self.errors.append(None)

    def get_at(self, column: int) -> Any:
        if 0 <= column < len(self.values):
            return self.values[column]
        return None

    def set_at(self, column: int, value: Any):
        while column >= len(self.values):
            self.add_column()
        self.values[column] = value

    def get(self, name: str, fmt: ValueFormat = ValueFormat.INTERNAL) -> Any:
        """Value of the named list property in this row, in the given format."""
        prop = self.list.get_property(name)
        if prop is None or prop.column < 0:
            return None
        return prop.resolve_value(self.get_at(prop.column), fmt)

    def get_string(self, name: str) -> str:
        prop = self.list.get_property(name)
        if prop is None or prop.column < 0:
            return ""
        return prop.value_to_string(self.get_at(prop.column), ValueFormat.DISPLAY_STRING)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def copy_from(self, other: "DataRow"):
        for i, v in enumerate(other.values):
            self.set_at(i, v)

    def compare_to(self, other: "DataRow", criteria=None) -> int:
        """
        Compare with another row of the same list.

        Args:
            other: Row to compare with.
            criteria: Sort criteria; the list's sort criteria when omitted.

        Returns:
            Negative, zero or positive, like a classic ``cmp``.
        """
        if criteria is None:
            criteria = self.list.sort_criteria
        if not criteria or other is None or other.list is not self.list:
            return 0
        default_nulls_first = self.list.settings.lists.nulls_first
        for field in criteria:
            prop = self.list.get_property(field.property_name)
            if prop is None:
                logger.warning(f"Unknown sort field '{field.property_name}'")
                continue
            v1, v2 = self.get_at(prop.column), other.get_at(prop.column)
            null1 = prop.is_value_null(v1, ValueFormat.INTERNAL)
            null2 = prop.is_value_null(v2, ValueFormat.INTERNAL)
            if null1 and null2:
                continue
            if null1 or null2:
                nulls_first = default_nulls_first if field.nulls_first is None else field.nulls_first
                res = -1 if null1 else 1
                return res if nulls_first else -res
            res = self._compare_values(prop, v1, v2)
            if res != 0:
                return -res if field.direction == SortDirection.DESCENDING else res
        return 0

    @staticmethod
    def _compare_values(prop, v1, v2) -> int:
        try:
            if v1 == v2:
                return 0
            return (v1 > v2) - (v1 < v2)
        except TypeError:
            s1 = prop.value_to_string(v1, ValueFormat.DISPLAY_STRING)
            s2 = prop.value_to_string(v2, ValueFormat.DISPLAY_STRING)
            return (s1 > s2) - (s1 < s2)

    def is_modified(self) -> Optional[bool]:
        res = None
        for m in self.modified:
            if m is True:
                return True
            if m is False:
                res = False
        return res

    def __repr__(self):
        return f"DataRow({self.values!r})"
