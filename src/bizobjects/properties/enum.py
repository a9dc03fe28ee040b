"""
Enumerated values backed by lookup tables.

- Header: a lookup value with id, text and arbitrary attributes
- LookupTable: indexed collection of headers of one type
- EnumKind: value kind resolving ids or formatted keys to headers
"""
import inspect
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

from ..core.cancellation import check_cancelled
from ..errors.messages import Messages
from .kinds import KIND_TYPES, ValueKind, default_is_null
from .value_format import ValueFormat


class Header:
    """
    A single lookup value.

    A header created from an id only (``is_valid`` False) stands for a value
    that could not be found in its lookup table.
    """
    FIELD_ID = "[i]"
    FIELD_TEXT = "[t]"
    ATTR_PATTERN = "[a:{0}]"

    _FIELD_RE = re.compile(r"\[(i|t|a:)(.*?)\]")

    def __init__(self, type: str, id: str, text: Optional[str] = None,
                 attributes: Optional[Dict[str, Any]] = None, is_active: bool = True):
        self.type = type
        self.id = id
        self.is_valid = text is not None
        self.text = text if text is not None else id
        self.is_active = is_active
        self.default_format = Header.FIELD_ID
        self._attributes: Dict[str, Any] = dict(attributes or {})

    def clone(self) -> "Header":
        h = Header(self.type, self.id, self.text, self._attributes, self.is_active)
        h.is_valid = self.is_valid
        h.default_format = self.default_format
        return h

    def __getitem__(self, attribute: str) -> Any:
        return self._attributes.get(attribute)

    def __setitem__(self, attribute: str, value: Any):
        self._attributes[attribute] = value

    @property
    def attributes(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def add_to_attribute(self, attribute: str, value: Any):
        """Add a value to an attribute, turning it into a list when needed."""
        current = self[attribute]
        if current is None:
            if value is not None:
                self[attribute] = value
            return
        if value is None or value == current:
            return
        if not isinstance(current, list):
            current = [current]
            self[attribute] = current
        if value not in current:
            current.append(value)

    def to_string(self, fmt: Optional[str] = None) -> str:
        """
        Format the header, e.g. ``"[i] - [t]"`` or ``"[a:code]"``.
        """
        fmt = fmt or self.default_format
        if fmt == Header.FIELD_ID or not self.is_valid:
            return self.id
        if fmt == Header.FIELD_TEXT:
            return self.text
        return Header._FIELD_RE.sub(self._evaluate_match, fmt)

    def _evaluate_match(self, m) -> str:
        field, attr_name = m.group(1), m.group(2)
        if not attr_name:
            if field == "i":
                return self.id
            if field == "t":
                return self.text
        elif field == "a:":
            attr = self[attr_name]
            if isinstance(attr, list):
                return ", ".join(str(a) for a in attr)
            return "" if attr is None else str(attr)
        return m.group(0)

    def __str__(self):
        return self.to_string(self.default_format)

    def __repr__(self):
        return f"Header({self.type!r}, {self.id!r}, {self.text!r})"

    def __eq__(self, other):
        if isinstance(other, Header):
            return other.type == self.type and other.id == self.id
        return NotImplemented

    def __hash__(self):
        return hash((self.type, self.id))

    def __lt__(self, other):
        if isinstance(other, Header):
            return (self.text or "") < (other.text or "")
        return NotImplemented


class LookupTable:
    """
    Lookup values of one type, indexed lazily by any header format.

    Args:
        type: Lookup table type; assigned to every header.
        data: Headers in the table.
        case_sensitive: Whether lookups by key are case sensitive.
    """
    GROUP_ATTR_PREFIX = "Group:"

    def __init__(self, type: str, data: Iterable[Header], case_sensitive: bool = False):
        self.type = type
        self.case_sensitive = case_sensitive
        self._data: List[Header] = [h for h in data if h is not None]
        for h in self._data:
            h.type = type
        self._indexes: Dict[str, Dict[str, Header]] = {}

    @property
    def data(self) -> List[Header]:
        return list(self._data)

    def _key(self, value: str) -> str:
        return value if self.case_sensitive else value.upper()

    def get_values(self, filter_func: Optional[Callable[[Header, Any], bool]] = None, row=None) -> List[Header]:
        values = self._data
        if filter_func is not None:
            values = [h for h in values if filter_func(h, row)]
        return [h.clone() for h in values]

    def lookup_by_id(self, id: str) -> Optional[Header]:
        return self.lookup_by_format(Header.FIELD_ID, id)

    def lookup_by_format(self, fmt: str, value: str) -> Optional[Header]:
        index = self._indexes.get(fmt)
        if index is None:
            index = self._build_index(fmt)
        if value is None:
            return None
        return index.get(self._key(value))

    def _build_index(self, fmt: str) -> Dict[str, Header]:
        index: Dict[str, Header] = {}
        for h in self._data:
            key = self._key(h.to_string(fmt))
            if key in index:
                index[key].add_to_attribute(LookupTable.GROUP_ATTR_PREFIX + fmt, h)
            else:
                index[key] = h
        self._indexes[fmt] = index
        return index

    def reset_indexes(self):
        self._indexes.clear()

    def clear_index(self, fmt: str) -> bool:
        return self._indexes.pop(fmt, None) is not None


# --- Validators ---
def validate_enumeration(prop, value, row):
    if isinstance(value, Header) and not value.is_valid:
        prop.add_validation_error(row, Messages.VALIDATION_LOOKUP_VALUE, prop, prop.kind.enum_type, value.id)
    elif value is not None and not isinstance(value, Header):
        prop.add_validation_error(row, Messages.VALIDATION_LOOKUP_VALUE, prop, prop.kind.enum_type, value)


def validate_active(prop, value, row):
    if isinstance(value, Header) and value.is_valid and not value.is_active:
        prop.add_validation_error(row, Messages.VALIDATION_LOOKUP_VALUE_ACTIVE, prop, value.to_string(prop.kind.display_format))


class EnumKind(ValueKind):
    """
    Enumerated value kind.

    Internal values are ``Header`` objects, Transport values are header ids,
    and the string formats use ``key_format`` and ``display_format``.

    Args:
        enum_type: Lookup table type.
        lookup_table: Local table to use instead of a provider.
        lookup_provider: Callable returning the table for a type, possibly async.
        key_format: Header format for edit strings and key lookups.
        display_format: Header format for display strings.
    """
    name = "enum"

    def __init__(self, enum_type: str = "", lookup_table: Optional[LookupTable] = None,
                 lookup_provider: Optional[Callable] = None,
                 key_format: str = Header.FIELD_ID, display_format: str = Header.FIELD_TEXT):
        self.enum_type = enum_type
        self.lookup_table = lookup_table
        self.lookup_provider = lookup_provider
        self.key_format = key_format
        self.display_format = display_format
        self.filter_func: Optional[Callable[[Header, Any], bool]] = None
        self.sort_field: Optional[Callable[[Header], Any]] = None

    # --- Lookup ---
    def get_lookup_table(self) -> Optional[LookupTable]:
        if self.lookup_table is not None:
            return self.lookup_table
        if self.lookup_provider is None or inspect.iscoroutinefunction(self.lookup_provider):
            return None
        tbl = self.lookup_provider(self.enum_type)
        if inspect.isawaitable(tbl):
            if inspect.iscoroutine(tbl):
                tbl.close()
            return None
        return tbl

    async def get_lookup_table_async(self, prop=None, token=None) -> Optional[LookupTable]:
        if self.lookup_table is not None:
            return self.lookup_table
        if self.lookup_provider is None:
            return None
        check_cancelled(token)
        tbl = self.lookup_provider(self.enum_type)
        if inspect.isawaitable(tbl):
            tbl = await tbl
        check_cancelled(token)
        if tbl is None:
            logger.warning(f"Lookup table '{self.enum_type}' is not available")
            return None
        self.lookup_table = tbl
        if prop is not None:
            prop.refresh_items()
        return tbl

    def find(self, tbl: Optional[LookupTable], key: str) -> Header:
        if tbl is not None:
            h = None
            if self.key_format != Header.FIELD_ID:
                h = tbl.lookup_by_format(self.key_format, key)
            if h is None:
                h = tbl.lookup_by_id(key)
            if h is not None:
                h = h.clone()
                h.default_format = self.key_format
                return h
        return Header(self.enum_type, key)

    def is_allowed(self, h: Header, row=None) -> bool:
        if h is None or not h.is_active:
            return False
        return self.filter_func is None or self.filter_func(h, row)

    # --- Conversion ---
    def _to_header(self, value, tbl) -> Header:
        if isinstance(value, Header) and value.type == self.enum_type:
            return value
        text = value.id if isinstance(value, Header) else str(value)
        if text.strip():
            text = text.strip()
        return self.find(tbl, text)

    def _format(self, h: Header, fmt: ValueFormat):
        if fmt == ValueFormat.TRANSPORT:
            return h.id
        if fmt == ValueFormat.EDIT_STRING:
            return h.to_string(self.key_format)
        if fmt == ValueFormat.DISPLAY_STRING:
            return h.to_string(self.display_format)
        return h

    def convert(self, prop, value, fmt):
        h = value if isinstance(value, Header) else None
        if h is None or fmt == ValueFormat.INTERNAL:
            h = self._to_header(value, self.get_lookup_table())
        return self._format(h, fmt)

    async def convert_async(self, prop, value, fmt, token=None):
        tbl = self.get_lookup_table()
        if tbl is None and not isinstance(value, Header):
            tbl = await self.get_lookup_table_async(prop, token)
        h = value if isinstance(value, Header) else None
        if h is None or fmt == ValueFormat.INTERNAL:
            h = self._to_header(value, tbl)
        return self._format(h, fmt)

    def is_null(self, prop, value, fmt) -> bool:
        if isinstance(value, Header):
            return False
        if isinstance(value, str) and value.strip() == "":
            tbl = self.get_lookup_table()
            h = tbl.lookup_by_id(value) if tbl is not None else None
            if h is not None:
                return False
        return default_is_null(prop, value)

    def validators(self):
        return [validate_enumeration, validate_active]

    # --- Items ---
    def _sorted_items(self, tbl: Optional[LookupTable], row=None) -> List[Header]:
        if tbl is None:
            return []
        res = tbl.get_values(self.is_allowed, row)
        for h in res:
            h.default_format = self.key_format
        key = self.sort_field or (lambda h: h.to_string(self.display_format))
        return sorted(res, key=key)

    def items(self, prop, row=None) -> List[Header]:
        return self._sorted_items(self.get_lookup_table(), row)

    async def items_async(self, prop, row=None, token=None) -> List[Header]:
        tbl = await self.get_lookup_table_async(None, token)
        return self._sorted_items(tbl, row)


KIND_TYPES["enum"] = EnumKind
