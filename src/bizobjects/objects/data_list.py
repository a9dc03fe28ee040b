"""
DataListObject: a column-indexed row store for homogeneous lists.

Every property registered on the list gets a stable column index, and each
row is a DataRow holding one value per column. The list adds sorting,
selection, paging and tracking of the criteria that produced its data.
"""
import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Iterable, List, Optional, Union

from loguru import logger

from ..core.cancellation import CancellationToken
from ..core.events import Signal
from ..errors.error_list import ErrorList
from ..properties.value_format import ValueFormat
from .contract import ContractMapping, MappingKind, get_member, has_member, set_member
from .data_object import DataObject, tri_state_or
from .data_row import DataRow
from .options import CrudOptions, ReadOptions
from .sort import SortCriteria


class SelectionMode(Enum):
    NONE = "none"
    SINGLE = "single"
    MULTIPLE = "multiple"


class PagingMode(Enum):
    NONE = "none"
    CLIENT = "client"
    SERVER = "server"


class CollectionChangeAction(Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    RESET = "reset"


@dataclass
class CollectionChangeEventArgs:
    action: CollectionChangeAction
    new_items: List[DataRow] = field(default_factory=list)
    old_items: List[DataRow] = field(default_factory=list)
    index: int = -1


RowRef = Union[int, DataRow]


class DataListObject(DataObject):
    """
    List of data rows described by the list's properties.

    Subclasses implement ``do_read`` to fetch the data for
    ``options.criteria`` and load it with ``from_data_contract`` or ``set_rows``.
    """
    is_list = True

    def __init__(self, parent: Optional[DataObject] = None, settings=None):
        self.column_count = 0
        self._rows: List[DataRow] = []
        self.collection_changed = Signal(f"{type(self).__name__}.CollectionChanged")
        self.selection_changed = Signal(f"{type(self).__name__}.SelectionChanged")
        self.sort_criteria: Optional[SortCriteria] = None
        self.selection_mode = SelectionMode.SINGLE
        self.criteria_object = None
        self.applied_criteria = None
        self._paging_mode: Optional[PagingMode] = None
        self._page_size: Optional[int] = None
        self.current_page = 1
        self.total_row_count: Optional[int] = None
        super().__init__(parent, settings)

    # --- Columns ---
    def add_property(self, prop):
        super().add_property(prop)
        prop.column = self.column_count
        self.column_count += 1
        for row in self._rows:
            row.add_column()
        logger.debug(f"{type(self).__name__}: column {prop.column} assigned to '{prop.name}'")

    def get_column(self, name: str) -> int:
        prop = self.get_property(name)
        return prop.column if prop is not None else -1

    # --- Rows ---
    @property
    def rows(self) -> List[DataRow]:
        return list(self._rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def get_row(self, index: int) -> Optional[DataRow]:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def index_of(self, row: DataRow) -> int:
        for i, r in enumerate(self._rows):
            if r is row:
                return i
        return -1

    def new_row(self, values: Optional[List[Any]] = None) -> DataRow:
        return DataRow(self, values)

    def _notify(self, args: CollectionChangeEventArgs):
        self.collection_changed.emit(self, args)

    def insert_rows(self, index: int, rows: Iterable[DataRow], suppress_notification: bool = False):
        """
        Insert rows at the given index.

        With ``suppress_notification`` the list is not marked modified and a
        single RESET notification replaces the per-row ADD notifications.
        """
        rows = list(rows)
        index = max(0, min(index, len(self._rows)))
        self._rows[index:index] = rows
        if suppress_notification:
            self._notify(CollectionChangeEventArgs(CollectionChangeAction.RESET))
            return
        self._modified = True
        for i, row in enumerate(rows):
            self._notify(CollectionChangeEventArgs(CollectionChangeAction.ADD, new_items=[row], index=index + i))

    def add_rows(self, rows: Iterable[DataRow], suppress_notification: bool = False):
        self.insert_rows(len(self._rows), rows, suppress_notification)

    def add_row(self, row: DataRow):
        self.insert_rows(len(self._rows), [row])

    def remove_rows(self, rows: Iterable[RowRef], suppress_notification: bool = False):
        targets = [self._resolve_row(r) for r in rows]
        removed = []
        for row in targets:
            idx = self.index_of(row) if row is not None else -1
            if idx < 0:
                continue
            del self._rows[idx]
            removed.append(row)
            if not suppress_notification:
                self._notify(CollectionChangeEventArgs(CollectionChangeAction.REMOVE, old_items=[row], index=idx))
        if suppress_notification:
            self._notify(CollectionChangeEventArgs(CollectionChangeAction.RESET))
        elif removed:
            self._modified = True
        if any(r.selected for r in removed):
            self.selection_changed.emit(self)

    def remove_row(self, row: RowRef):
        self.remove_rows([row])

    def replace_row(self, index: int, row: DataRow, suppress_notification: bool = False):
        old = self._rows[index]
        self._rows[index] = row
        if suppress_notification:
            self._notify(CollectionChangeEventArgs(CollectionChangeAction.RESET))
            return
        self._modified = True
        self._notify(CollectionChangeEventArgs(CollectionChangeAction.REPLACE, [row], [old], index))

    def set_rows(self, rows: Iterable[DataRow]):
        """Replace all rows with a single RESET notification."""
        had_selection = any(r.selected for r in self._rows)
        self._rows = list(rows)
        self._notify(CollectionChangeEventArgs(CollectionChangeAction.RESET))
        if had_selection or any(r.selected for r in self._rows):
            self.selection_changed.emit(self)

    def clear(self):
        self.set_rows([])

    def _resolve_row(self, ref: RowRef) -> Optional[DataRow]:
        if isinstance(ref, DataRow):
            return ref if ref.list is self else None
        return self.get_row(ref)

    # --- Modification and validation ---
    def is_modified(self) -> Optional[bool]:
        if not self.track_modifications:
            return False
        res = super().is_modified()
        for row in self._rows:
            res = tri_state_or(res, row.is_modified())
            if res is True:
                break
        return res

    def set_modified(self, modified: Optional[bool], recursive: bool = False):
        super().set_modified(modified, recursive)
        if recursive:
            for row in self._rows:
                for i in range(len(row.modified)):
                    row.modified[i] = modified

    def validate(self, force: bool = False):
        """Validate every cell; list properties have no value of their own."""
        for row in self._rows:
            for p in self.properties.values():
                p.validate(force, row)
        for child in self.child_objects.values():
            child.validate(force)
        self._validate_self(force)

    async def validate_async(self, force: bool = False, token: Optional[CancellationToken] = None):
        for row in list(self._rows):
            for p in self.properties.values():
                await p.validate_async(force, row, token)
        for child in self.child_objects.values():
            await child.validate_async(force, token)
        self._validate_self(force)

    def get_validation_errors(self) -> ErrorList:
        errors = ErrorList()
        errors.merge_with(self.validation_errors)
        for row in self._rows:
            for p in self.properties.values():
                errors.merge_with(p.get_validation_errors(row))
        for child in self.child_objects.values():
            errors.merge_with(child.get_validation_errors())
        return errors

    def reset_all_validation(self):
        super().reset_all_validation()
        for row in self._rows:
            for p in self.properties.values():
                p.reset_validation(row)

    # --- Sorting ---
    def sort(self, criteria: Optional[SortCriteria] = None):
        """Sort rows by the given or current sort criteria with one RESET notification."""
        if criteria is not None:
            self.sort_criteria = criteria
        if not self.sort_criteria:
            return
        logger.debug(f"Sorting {type(self).__name__} by {[f.property_name for f in self.sort_criteria]}")
        crit = self.sort_criteria
        self._rows = sorted(self._rows, key=cmp_to_key(lambda a, b: a.compare_to(b, crit)))
        self._notify(CollectionChangeEventArgs(CollectionChangeAction.RESET))

    # --- Selection ---
    def get_selected_rows(self) -> List[DataRow]:
        return [r for r in self._rows if r.selected]

    @property
    def selected_row_indexes(self) -> List[int]:
        return [i for i, r in enumerate(self._rows) if r.selected]

    def _set_selected(self, row: DataRow, selected: bool) -> bool:
        if row.selected == selected:
            return False
        row._selected = selected
        return True

    def _clear_selection(self, keep: Optional[DataRow] = None) -> bool:
        changed = False
        for r in self._rows:
            if r is not keep:
                changed = self._set_selected(r, False) or changed
        return changed

    def select_row(self, ref: RowRef, selected: bool = True) -> bool:
        """
        Select or deselect a row; in single mode other rows are deselected first.

        Returns:
            True if the selection changed.
        """
        if self.selection_mode == SelectionMode.NONE:
            return False
        row = self._resolve_row(ref)
        if row is None:
            logger.warning(f"Cannot select row {ref!r}: not in {type(self).__name__}")
            return False
        changed = False
        if selected and self.selection_mode == SelectionMode.SINGLE:
            changed = self._clear_selection(keep=row)
        changed = self._set_selected(row, selected) or changed
        if changed:
            logger.debug(f"Selection of {type(self).__name__} changed")
            self.selection_changed.emit(self)
        return changed

    def toggle_selection(self, ref: RowRef) -> bool:
        row = self._resolve_row(ref)
        if row is None:
            logger.warning(f"Cannot toggle selection of row {ref!r}: not in {type(self).__name__}")
            return False
        return self.select_row(row, not row.selected)

    def select_rows(self, start: int, end: int, clear_others: bool = False) -> bool:
        """
        Select the rows from ``start`` to ``end`` inclusive.

        Args:
            start: Index of the first row.
            end: Index of the last row.
            clear_others: Deselect rows outside the range.
        """
        if self.selection_mode == SelectionMode.NONE:
            return False
        if self.selection_mode == SelectionMode.SINGLE:
            return self.select_row(end)
        lo, hi = min(start, end), max(start, end)
        if lo < 0 or hi >= len(self._rows):
            logger.warning(f"Selection range {start}..{end} is out of bounds of {len(self._rows)} rows")
            lo, hi = max(lo, 0), min(hi, len(self._rows) - 1)
        changed = False
        for i, row in enumerate(self._rows):
            if lo <= i <= hi:
                changed = self._set_selected(row, True) or changed
            elif clear_others:
                changed = self._set_selected(row, False) or changed
        if changed:
            self.selection_changed.emit(self)
        return changed

    def clear_selected_rows(self) -> bool:
        changed = self._clear_selection()
        if changed:
            self.selection_changed.emit(self)
        return changed

    @property
    def key_properties(self) -> List[Any]:
        return [p for p in self.properties.values() if p.is_key]

    def same_entity(self, row1: DataRow, row2: DataRow) -> bool:
        """Rows represent the same entity when all key properties compare equal."""
        keys = self.key_properties
        if not keys or row1 is None or row2 is None:
            return False
        criteria = SortCriteria(p.name for p in keys)
        return row1.compare_to(row2, criteria) == 0

    def _restore_selection(self, previous: List[DataRow]):
        if not previous or self.selection_mode == SelectionMode.NONE:
            return
        changed = False
        for row in self._rows:
            if any(self.same_entity(row, old) for old in previous):
                changed = self._set_selected(row, True) or changed
                if self.selection_mode == SelectionMode.SINGLE:
                    break
        if changed:
            self.selection_changed.emit(self)

    # --- Paging ---
    @property
    def paging_mode(self) -> PagingMode:
        if self._paging_mode is None:
            return PagingMode(self.settings.lists.paging_mode)
        return self._paging_mode

    @paging_mode.setter
    def paging_mode(self, value: PagingMode):
        self._paging_mode = value

    @property
    def page_size(self) -> int:
        if self._page_size is None:
            return self.settings.lists.page_size
        return self._page_size

    @property
    def page_count(self) -> int:
        total = self.total_row_count if self.paging_mode == PagingMode.SERVER else len(self._rows)
        if not total:
            return 0
        return math.ceil(total / self.page_size)

    @property
    def skip(self) -> int:
        return (self.current_page - 1) * self.page_size

    @property
    def take(self) -> int:
        return self.page_size

    def page_rows(self) -> List[DataRow]:
        """Rows visible on the current page."""
        if self.paging_mode != PagingMode.CLIENT:
            return list(self._rows)
        return self._rows[self.skip:self.skip + self.page_size]

    def _apply_page_size(self, size: int):
        if size <= 0:
            raise ValueError(f"Invalid page size: {size}")
        first = (self.current_page - 1) * self.page_size
        self._page_size = size
        self.current_page = first // size + 1

    def _paging_read_options(self) -> ReadOptions:
        return ReadOptions(is_paging=True, recursive=False)

    def set_page(self, page: int) -> Optional[ErrorList]:
        """Go to a page; server paging re-reads and keeps the old page on failure."""
        old = self.current_page
        self.current_page = max(1, page)
        logger.debug(f"{type(self).__name__}: page {old} -> {self.current_page}")
        if self.paging_mode != PagingMode.SERVER:
            self.on_property_changed("current_page")
            return None
        errors = self.read(self._paging_read_options())
        if errors.has_errors():
            self.current_page = old
        self.on_property_changed("current_page")
        return errors

    async def set_page_async(self, page: int, token: Optional[CancellationToken] = None) -> Optional[ErrorList]:
        old = self.current_page
        self.current_page = max(1, page)
        if self.paging_mode != PagingMode.SERVER:
            self.on_property_changed("current_page")
            return None
        errors = await self.read_async(self._paging_read_options(), token)
        if errors.has_errors():
            self.current_page = old
        self.on_property_changed("current_page")
        return errors

    def set_page_size(self, size: int) -> Optional[ErrorList]:
        """
        Change the page size keeping the first visible record on the current page.
        """
        if size == self.page_size:
            return None
        old_page, old_size = self.current_page, self._page_size
        self._apply_page_size(size)
        logger.debug(f"{type(self).__name__}: page size {size}, page {old_page} -> {self.current_page}")
        if self.paging_mode != PagingMode.SERVER:
            self.on_property_changed("page_size")
            return None
        errors = self.read(self._paging_read_options())
        if errors.has_errors():
            self.current_page, self._page_size = old_page, old_size
        self.on_property_changed("page_size")
        return errors

    async def set_page_size_async(self, size: int, token: Optional[CancellationToken] = None) -> Optional[ErrorList]:
        if size == self.page_size:
            return None
        old_page, old_size = self.current_page, self._page_size
        self._apply_page_size(size)
        if self.paging_mode != PagingMode.SERVER:
            self.on_property_changed("page_size")
            return None
        errors = await self.read_async(self._paging_read_options(), token)
        if errors.has_errors():
            self.current_page, self._page_size = old_page, old_size
        self.on_property_changed("page_size")
        return errors

    # --- Reading ---
    def _prepare_read(self, options: Optional[CrudOptions]):
        if options is None:
            options = ReadOptions()
        elif not isinstance(options, ReadOptions):
            options = ReadOptions(**dataclasses.asdict(options))
        if options.is_reload or options.is_paging:
            criteria = self.applied_criteria.clone() if self.applied_criteria is not None else None
        else:
            source = options.criteria if options.criteria is not None else self.criteria_object
            criteria = source.clone() if source is not None else None
            if self.paging_mode != PagingMode.NONE:
                self.current_page = 1
        previous = self.get_selected_rows() if options.preserve_selection else []
        return dataclasses.replace(options, criteria=criteria), previous

    def _finish_read(self, options: ReadOptions, previous: List[DataRow], errors: ErrorList):
        if errors.has_errors():
            # keep the previously applied criteria
            return
        self.applied_criteria = options.criteria
        self._restore_selection(previous)

    def read(self, options: Optional[CrudOptions] = None) -> ErrorList:
        """
        Read the list for the live criteria, or for the applied criteria when
        reloading or paging.
        """
        old_page = self.current_page
        options, previous = self._prepare_read(options)
        errors = super().read(options)
        if errors.has_errors():
            self.current_page = old_page
        self._finish_read(options, previous, errors)
        return errors

    async def read_async(self, options: Optional[CrudOptions] = None,
                         token: Optional[CancellationToken] = None) -> ErrorList:
        old_page = self.current_page
        options, previous = self._prepare_read(options)
        errors = await super().read_async(options, token)
        if errors.has_errors():
            self.current_page = old_page
        self._finish_read(options, previous, errors)
        return errors

    @property
    def applied_criteria_text(self) -> str:
        if self.applied_criteria is None:
            return ""
        return self.applied_criteria.criteria_text

    def filter_rows(self, criteria=None) -> List[DataRow]:
        """Rows matching the given criteria object, or the applied criteria."""
        criteria = criteria if criteria is not None else self.applied_criteria
        if criteria is None:
            return list(self._rows)
        return [r for r in self._rows if criteria.matches_row(self, r)]

    # --- Data contracts ---
    def from_data_contract(self, contracts: Any):
        """Replace the rows with rows loaded from a list of data contracts."""
        if contracts is None:
            return
        rows = []
        for item in contracts:
            row = DataRow(self)
            for entry in ContractMapping.for_object(self, item).fields:
                if not has_member(item, entry.member):
                    continue
                value = get_member(item, entry.member)
                if entry.kind == MappingKind.PROPERTY:
                    prop = self[entry.target]
                    row.set_at(prop.column, prop.resolve_value(value, ValueFormat.INTERNAL, row))
                elif entry.kind == MappingKind.FLATTENED and value is not None:
                    for sub, name in entry.fields:
                        if has_member(value, sub):
                            prop = self[name]
                            row.set_at(prop.column, prop.resolve_value(get_member(value, sub), ValueFormat.INTERNAL, row))
            rows.append(row)
        self.set_rows(rows)

    def to_data_contract(self, contracts: Optional[List[Any]] = None,
                         item_factory: Callable[[], Any] = dict) -> List[Any]:
        """Export rows in Transport format, one contract per row."""
        if contracts is None:
            contracts = []
        for row in self._rows:
            item = item_factory()
            if isinstance(item, dict) and not item:
                item.update({name: None for name in self.properties})
            for entry in ContractMapping.for_object(self, item).fields:
                if entry.kind == MappingKind.PROPERTY:
                    prop = self[entry.target]
                    if prop.is_valid(True, row):
                        set_member(item, entry.member, prop.get_value(ValueFormat.TRANSPORT, row))
            contracts.append(item)
        return contracts
