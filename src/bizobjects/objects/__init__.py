"""
Data objects, lists and their rows.
"""
from .options import CrudOptions, ReadOptions
from .contract import ContractMapping, ContractField, MappingKind
from .data_object import DataObject
from .sort import SortDirection, SortField, SortCriteria
from .data_row import DataRow
from .data_list import (
    DataListObject,
    SelectionMode,
    PagingMode,
    CollectionChangeAction,
    CollectionChangeEventArgs,
)

__all__ = [
    "CrudOptions",
    "ReadOptions",
    "ContractMapping",
    "ContractField",
    "MappingKind",
    "DataObject",
    "SortDirection",
    "SortField",
    "SortCriteria",
    "DataRow",
    "DataListObject",
    "SelectionMode",
    "PagingMode",
    "CollectionChangeAction",
    "CollectionChangeEventArgs",
]
