"""
Sort criteria for list objects.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def toggle(self) -> "SortDirection":
        return SortDirection.DESCENDING if self == SortDirection.ASCENDING else SortDirection.ASCENDING


@dataclass
class SortField:
    """
    Attributes:
        property_name: Name of the list property to sort by.
        direction: Sort direction; does not affect where nulls go.
        nulls_first: Put nulls before values; the list settings decide when None.
    """
    property_name: str
    direction: SortDirection = SortDirection.ASCENDING
    nulls_first: Optional[bool] = None


class SortCriteria(list):
    """Ordered list of sort fields; the first non-equal field decides."""

    def __init__(self, fields: Iterable[Union[SortField, str, Tuple[str, SortDirection]]] = ()):
        super().__init__(self._to_field(f) for f in fields)

    @staticmethod
    def _to_field(f) -> SortField:
        if isinstance(f, SortField):
            return f
        if isinstance(f, tuple):
            return SortField(*f)
        return SortField(str(f))

    def add(self, property_name: str, direction: SortDirection = SortDirection.ASCENDING,
            nulls_first: Optional[bool] = None) -> "SortCriteria":
        self.append(SortField(property_name, direction, nulls_first))
        return self
