"""
Value kinds: per-type conversion and validation strategies for DataProperty.

A kind converts a single (non-list) value to a requested ValueFormat and
supplies validators for the Internal value. Conversions never raise for
bad input: a value that cannot be converted to Internal is kept as is so
that validators can report it, while Transport falls back to None.
"""
import copy
import uuid
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, Type

from loguru import logger

from ..errors.messages import Messages
from .value_format import ValueFormat

Validator = Callable[[Any, Any, Any], None]


def default_is_null(prop, value) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return True
    if isinstance(value, str):
        s = value.strip()
        return s == "" or s == prop.null_string
    return False


def localize_number(text: str, numbers) -> str:
    """Swap invariant separators for the configured ones."""
    if numbers.group_separator == "," and numbers.decimal_separator == ".":
        return text
    return (text.replace(",", "\0")
            .replace(".", numbers.decimal_separator)
            .replace("\0", numbers.group_separator))


class ValueKind:
    """
    Generic kind: values are stored as given and shown via ``str``.
    """
    name = "generic"

    def convert(self, prop, value: Any, fmt: ValueFormat) -> Any:
        if fmt.is_string():
            return str(value)
        return value

    async def convert_async(self, prop, value: Any, fmt: ValueFormat, token=None) -> Any:
        return self.convert(prop, value, fmt)

    def is_null(self, prop, value: Any, fmt: ValueFormat) -> bool:
        return default_is_null(prop, value)

    def validators(self) -> List[Validator]:
        return []

    def items(self, prop, row=None) -> Optional[List[Any]]:
        return None

    def clone(self) -> "ValueKind":
        return copy.copy(self)

    @classmethod
    def matches_type(cls, type_name: str) -> bool:
        """True if this kind or any of its base kinds is named ``type_name``."""
        return any(getattr(k, "name", None) == type_name for k in cls.__mro__ if issubclass(k, ValueKind))

    def __repr__(self):
        return f"{type(self).__name__}()"


# --- Text ---
def validate_size(prop, value, row):
    if prop.size > 0 and value is not None and len(str(value)) > prop.size:
        prop.add_validation_error(row, Messages.VALIDATION_MAX_LENGTH, prop, prop.size, value)


class TextKind(ValueKind):
    name = "text"

    def convert(self, prop, value, fmt):
        return str(value)

    def validators(self):
        return [validate_size]


def validate_guid(prop, value, row):
    if not prop.is_value_null(value, ValueFormat.INTERNAL) and not isinstance(value, uuid.UUID):
        prop.add_validation_error(row, Messages.VALIDATION_GUID_FORMAT, prop, value)


class GuidKind(TextKind):
    name = "guid"

    def convert(self, prop, value, fmt):
        if fmt.is_typed():
            if isinstance(value, uuid.UUID):
                return value
            try:
                return uuid.UUID(str(value).strip())
            except ValueError:
                return None if fmt == ValueFormat.TRANSPORT else value
        return str(value)

    def validators(self):
        return [validate_guid]


# --- Integers ---
def validate_integer(prop, value, row):
    if not prop.is_value_null(value, ValueFormat.INTERNAL) and (
            not isinstance(value, int) or isinstance(value, bool)):
        prop.add_validation_error(row, Messages.VALIDATION_INTEGER_FORMAT, prop)


def validate_minimum(prop, value, row):
    minimum = getattr(prop.kind, "minimum", None)
    if minimum is not None and isinstance(value, (int, Decimal)) and not isinstance(value, bool) \
            and value < minimum:
        prop.add_validation_error(row, Messages.VALIDATION_NUMBER_MINIMUM, prop, minimum)


def validate_maximum(prop, value, row):
    maximum = getattr(prop.kind, "maximum", None)
    if maximum is not None and isinstance(value, (int, Decimal)) and not isinstance(value, bool) \
            and value > maximum:
        prop.add_validation_error(row, Messages.VALIDATION_NUMBER_MAXIMUM, prop, maximum)


class IntegerKind(ValueKind):
    name = "integer"

    def __init__(self, minimum: Optional[int] = None, maximum: Optional[int] = None):
        self.minimum = minimum
        self.maximum = maximum

    def convert(self, prop, value, fmt):
        if fmt.is_typed():
            if isinstance(value, bool):
                return int(value)
            if isinstance(value, int):
                return value
            if isinstance(value, (float, Decimal)):
                try:
                    return int(value)
                except (ValueError, OverflowError):
                    return None if fmt == ValueFormat.TRANSPORT else value
            text = str(value).strip()
            sep = prop.settings.numbers.group_separator
            if sep:
                text = text.replace(sep, "")
            try:
                return int(text)
            except ValueError:
                return None if fmt == ValueFormat.TRANSPORT else value
        return str(value)

    def validators(self):
        return [validate_integer, validate_minimum, validate_maximum]

    def __repr__(self):
        return f"{type(self).__name__}(minimum={self.minimum}, maximum={self.maximum})"


class SmallIntegerKind(IntegerKind):
    name = "small_integer"

    def __init__(self, minimum: Optional[int] = -32768, maximum: Optional[int] = 32767):
        super().__init__(minimum, maximum)


class TinyIntegerKind(IntegerKind):
    name = "tiny_integer"

    def __init__(self, minimum: Optional[int] = 0, maximum: Optional[int] = 255):
        super().__init__(minimum, maximum)


class IntegerKeyKind(IntegerKind):
    name = "integer_key"


# --- Decimals ---
def validate_decimal(prop, value, row):
    if not prop.is_value_null(value, ValueFormat.INTERNAL) and not isinstance(value, Decimal):
        prop.add_validation_error(row, Messages.VALIDATION_DECIMAL_FORMAT, prop)


class DecimalKind(ValueKind):
    """
    Decimal values parsed with the configured separators.

    Args:
        minimum: Smallest allowed value.
        maximum: Largest allowed value.
        display_format: Format spec used for DisplayString, defaults to settings.
    """
    name = "decimal"

    def __init__(self, minimum: Optional[Decimal] = None, maximum: Optional[Decimal] = None,
                 display_format: Optional[str] = None):
        self.minimum = Decimal(str(minimum)) if minimum is not None else None
        self.maximum = Decimal(str(maximum)) if maximum is not None else None
        self.display_format = display_format

    def _display_format(self, prop) -> str:
        if self.display_format is not None:
            return self.display_format
        return prop.settings.numbers.decimal_display_format

    def parse(self, prop, text: str) -> Decimal:
        numbers = prop.settings.numbers
        s = text.strip()
        if numbers.group_separator:
            s = s.replace(numbers.group_separator, "")
        if numbers.decimal_separator != ".":
            s = s.replace(numbers.decimal_separator, ".")
        d = Decimal(s.strip())
        if not d.is_finite():
            raise InvalidOperation(text)
        return d

    def format_display(self, prop, value: Decimal) -> str:
        fmt = self._display_format(prop)
        return localize_number(format(value, fmt) if fmt else str(value), prop.settings.numbers)

    def convert(self, prop, value, fmt):
        if fmt.is_typed():
            if isinstance(value, bool):
                return None if fmt == ValueFormat.TRANSPORT else value
            if isinstance(value, Decimal):
                return value
            if isinstance(value, int):
                return Decimal(value)
            if isinstance(value, float):
                return Decimal(str(value))
            try:
                return self.parse(prop, str(value))
            except (InvalidOperation, ValueError):
                return None if fmt == ValueFormat.TRANSPORT else value
        if isinstance(value, Decimal):
            if fmt == ValueFormat.DISPLAY_STRING:
                return self.format_display(prop, value)
            return localize_number(str(value), prop.settings.numbers)
        return str(value)

    def validators(self):
        return [validate_decimal, validate_minimum, validate_maximum]


class MoneyKind(DecimalKind):
    name = "money"

    def _display_format(self, prop) -> str:
        if self.display_format is not None:
            return self.display_format
        return prop.settings.numbers.money_display_format

    def parse(self, prop, text: str) -> Decimal:
        s = text.strip()
        negative = False
        if s.startswith("(") and s.endswith(")"):
            negative = True
            s = s[1:-1]
        symbol = prop.settings.numbers.currency_symbol
        if symbol:
            s = s.replace(symbol, "")
        s = s.strip()
        if s.startswith("-"):
            negative = not negative
            s = s[1:]
        d = super().parse(prop, s)
        return -d if negative else d

    def format_display(self, prop, value: Decimal) -> str:
        text = localize_number(format(abs(value), self._display_format(prop)), prop.settings.numbers)
        text = prop.settings.numbers.currency_symbol + text
        return "-" + text if value < 0 else text


class PercentKind(DecimalKind):
    """Percentages stored as fractions, e.g. 0.125 for 12.5%."""
    name = "percent"

    def _display_format(self, prop) -> str:
        if self.display_format is not None:
            return self.display_format
        return prop.settings.numbers.percent_display_format

    def parse(self, prop, text: str) -> Decimal:
        s = text.strip()
        if s.endswith("%"):
            return super().parse(prop, s[:-1]) / 100
        return super().parse(prop, s)


# --- Boolean ---
def validate_boolean(prop, value, row):
    if not prop.is_value_null(value, ValueFormat.INTERNAL) and not isinstance(value, bool):
        vocabulary = prop.settings.values
        prop.add_validation_error(row, Messages.VALIDATION_BOOLEAN_FORMAT, prop, value,
                                  ", ".join(vocabulary.true_strings + vocabulary.false_strings))


class BooleanKind(ValueKind):
    name = "boolean"

    def convert(self, prop, value, fmt):
        if fmt.is_typed():
            if isinstance(value, bool):
                return value
            if value == 1:
                return True
            if value == 0:
                return False
            vocabulary = prop.settings.values
            s = str(value).strip().lower()
            if s in vocabulary.true_strings:
                return True
            if s in vocabulary.false_strings:
                return False
            return False if fmt == ValueFormat.TRANSPORT else value
        return str(value)

    def validators(self):
        return [validate_boolean]


# --- Date and time ---
def validate_datetime(prop, value, row):
    if not prop.is_value_null(value, ValueFormat.INTERNAL) and not isinstance(value, datetime):
        prop.add_validation_error(row, Messages.VALIDATION_DATETIME_FORMAT, prop, value,
                                  prop.kind.get_format(prop))


class DateTimeKind(ValueKind):
    """
    Date and time values; strings are parsed with ``format`` or the
    configured patterns, falling back to ISO 8601.
    """
    name = "datetime"

    def __init__(self, format: Optional[str] = None):
        self.format = format

    def get_format(self, prop) -> str:
        return self.format or prop.settings.dates.datetime_format

    def _patterns(self, prop) -> List[str]:
        dates = prop.settings.dates
        patterns = [self.get_format(prop), dates.datetime_format, dates.date_format]
        return list(dict.fromkeys(patterns))

    def parse(self, prop, text: str) -> Optional[datetime]:
        for pattern in self._patterns(prop):
            try:
                return datetime.strptime(text, pattern)
            except ValueError:
                continue
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None

    def to_internal(self, dt: datetime) -> datetime:
        return dt

    def convert(self, prop, value, fmt):
        if fmt.is_typed():
            dt = None
            if isinstance(value, datetime):
                dt = value
            elif isinstance(value, date):
                dt = datetime.combine(value, time())
            elif isinstance(value, time):
                dt = datetime.combine(date.today(), value)
            else:
                dt = self.parse(prop, str(value).strip())
            if dt is None:
                return None if fmt == ValueFormat.TRANSPORT else value
            return self.to_internal(dt)
        if isinstance(value, datetime):
            return value.strftime(self.get_format(prop))
        return str(value)

    def validators(self):
        return [validate_datetime]


class DateKind(DateTimeKind):
    name = "date"

    def get_format(self, prop) -> str:
        return self.format or prop.settings.dates.date_format

    def to_internal(self, dt: datetime) -> datetime:
        return dt.replace(hour=0, minute=0, second=0, microsecond=0)


class TimeKind(DateTimeKind):
    """
    Time of day on today's date.

    Bare digit strings are read as hours below 24 (or as minutes when
    ``minutes_centric``), as minutes from 24 to 59, and as ``HHMM`` when
    four digits long.
    """
    name = "time"

    def __init__(self, format: Optional[str] = None, minutes_centric: bool = False):
        super().__init__(format)
        self.minutes_centric = minutes_centric

    def get_format(self, prop) -> str:
        return self.format or prop.settings.dates.time_format

    def _patterns(self, prop) -> List[str]:
        dates = prop.settings.dates
        return list(dict.fromkeys([self.get_format(prop), dates.time_format, "%H:%M:%S"]))

    def parse(self, prop, text: str) -> Optional[datetime]:
        if text.isdigit():
            i = int(text)
            today = date.today()
            if 23 < i < 60 or (i < 24 and self.minutes_centric):
                return datetime.combine(today, time(0, i))
            if i < 24:
                return datetime.combine(today, time(i, 0))
            if len(text) == 4:
                hours, minutes = int(text[:2]), int(text[2:])
                if hours < 24 and minutes < 60:
                    return datetime.combine(today, time(hours, minutes))
            return None
        for pattern in self._patterns(prop):
            try:
                return datetime.combine(date.today(), datetime.strptime(text, pattern).time())
            except ValueError:
                continue
        try:
            return datetime.combine(date.today(), time.fromisoformat(text))
        except ValueError:
            return None


# --- Kind registry ---
KIND_TYPES: Dict[str, Type[ValueKind]] = {
    "generic": ValueKind,
    "text": TextKind,
    "guid": GuidKind,
    "integer": IntegerKind,
    "small_integer": SmallIntegerKind,
    "tiny_integer": TinyIntegerKind,
    "integer_key": IntegerKeyKind,
    "decimal": DecimalKind,
    "money": MoneyKind,
    "percent": PercentKind,
    "boolean": BooleanKind,
    "datetime": DateTimeKind,
    "date": DateKind,
    "time": TimeKind,
}


def register_kind(name: str, kind_class: Type[ValueKind]):
    KIND_TYPES[name] = kind_class


def create_kind(kind_type: str, params: Optional[Dict[str, Any]] = None) -> Optional[ValueKind]:
    """
    Create a value kind from its registered name and parameters.

    Args:
        kind_type: Registered kind name
        params: Constructor parameters

    Returns:
        ValueKind instance, or None if the name is unknown
    """
    kind_class = KIND_TYPES.get(kind_type)
    if not kind_class:
        logger.warning(f"Unknown value kind: {kind_type}")
        return None

    return kind_class(**(params or {}))
