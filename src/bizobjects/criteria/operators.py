"""
Criteria operators.

Operators evaluate a value against zero or more criteria values and are
registered under all of their names and aliases (case-insensitive).
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from ..properties.enum import Header, LookupTable

OPERATOR_TABLE_TYPE = "operators"

# Header attributes of operator lookup values
ATTR_ADDL_PROPS = "addl props"
ATTR_MULTIVAL = "multival"
ATTR_TYPE = "type"
ATTR_EXCLUDE_TYPE = "exclude type"
ATTR_NULL_CHECK = "null check"
ATTR_SORT_ORDER = "sort order"


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class Operator(ABC):
    """
    Base operator.

    Attributes:
        number_of_values: Number of criteria values (0-2), or -1 for a list.
        negate: Whether the result of the match is negated.
    """
    number_of_values = 1

    def __init__(self, negate: bool = False):
        self.negate = negate

    @abstractmethod
    def get_names(self) -> Tuple[str, ...]:
        """All names and aliases of the operator; the first one is its id."""
        pass

    @property
    def name(self) -> str:
        return self.get_names()[0]

    def matches(self, value: Any, *criteria: Any) -> bool:
        """
        Check a value against the criteria values.

        Raises:
            ValueError: if fewer criteria values are given than the operator needs.
        """
        if len(criteria) < self.number_of_values:
            raise ValueError(f"Operator {type(self).__name__} expects {self.number_of_values} "
                             f"value(s), but only {len(criteria)} were provided.")
        match = self._match(value, *criteria)
        return not match if self.negate else match

    @abstractmethod
    def _match(self, value: Any, *criteria: Any) -> bool:
        pass

    def __repr__(self):
        return f"{type(self).__name__}({self.name})"


class IsNullOperator(Operator):
    number_of_values = 0

    def get_names(self):
        return ("NL", "Null", "IsNull")

    def _match(self, value, *criteria):
        return value is None or value == [] or (isinstance(value, str) and value.strip() == "")


class IsNotNullOperator(IsNullOperator):
    def __init__(self):
        super().__init__(negate=True)

    def get_names(self):
        return ("NNL", "NotNull", "IsNotNull")


class EqualToOperator(Operator):
    def get_names(self):
        return ("EQ", "=", "==", "Is", "Equal", "Equals")

    def _match(self, value, *criteria):
        return value == criteria[0]


class NotEqualToOperator(EqualToOperator):
    def __init__(self):
        super().__init__(negate=True)

    def get_names(self):
        return ("NEQ", "!=", "<>", "IsNot", "NotEqual")


class OneOfOperator(Operator):
    number_of_values = -1

    def get_names(self):
        if self.negate:
            return ("NIN", "NoneOf", "NotIn")
        return ("IN", "OneOf")

    def _match(self, value, *criteria):
        return len(criteria) == 0 or value in criteria


class ContainsOperator(Operator):
    def get_names(self):
        if self.negate:
            return ("NCN", "NotCont", "NotContains")
        return ("CN", "Cont", "Contains")

    def _match(self, value, *criteria):
        return _as_text(criteria[0]) in _as_text(value)


class StartsWithOperator(Operator):
    def get_names(self):
        if self.negate:
            return ("NSW", "NotStart", "NotStartWith")
        return ("SW", "Start", "StartsWith")

    def _match(self, value, *criteria):
        return _as_text(value).startswith(_as_text(criteria[0]))


class ComparisonOperator(Operator):
    """Operator comparing a value with one bound; null or incomparable values never match."""

    def _match(self, value, *criteria):
        if value is None or criteria[0] is None:
            return False
        try:
            return self._compare(value, criteria[0])
        except TypeError:
            return False

    @abstractmethod
    def _compare(self, value, bound) -> bool:
        pass


class LessThanOperator(ComparisonOperator):
    def get_names(self):
        return ("LT", "<", "Less", "LessThan")

    def _compare(self, value, bound):
        return value < bound


class LessThanOrEqualOperator(ComparisonOperator):
    def get_names(self):
        return ("LE", "<=", "LessOrEqual")

    def _compare(self, value, bound):
        return value <= bound


class GreaterThanOperator(ComparisonOperator):
    def get_names(self):
        return ("GT", ">", "Greater", "GreaterThan")

    def _compare(self, value, bound):
        return value > bound


class GreaterThanOrEqualOperator(ComparisonOperator):
    def get_names(self):
        return ("GE", ">=", "GreaterOrEqual")

    def _compare(self, value, bound):
        return value >= bound


class BetweenOperator(Operator):
    """Inclusive range; a null bound leaves that side open."""
    number_of_values = 2

    def get_names(self):
        if self.negate:
            return ("NBW", "NotBetween")
        return ("BW", "Between")

    def _match(self, value, *criteria):
        lower, upper = criteria[0], criteria[1]
        if value is None:
            return False
        try:
            return (lower is None or value >= lower) and (upper is None or value <= upper)
        except TypeError:
            return False


# Operator registry, keyed by upper-cased name
OPERATOR_TYPES: Dict[str, Operator] = {}


def register_operator(*operators: Operator):
    for op in operators:
        for name in op.get_names():
            OPERATOR_TYPES[name.upper()] = op


def get_operator(name: str) -> Optional[Operator]:
    """
    Look up an operator by any of its names.

    Args:
        name: Operator name or alias, case-insensitive

    Returns:
        Operator instance, or None if unknown
    """
    op = OPERATOR_TYPES.get(name.upper()) if name else None
    if op is None:
        logger.warning(f"Unknown operator: {name}")
    return op


register_operator(
    IsNullOperator(), IsNotNullOperator(),
    EqualToOperator(), NotEqualToOperator(),
    OneOfOperator(False), OneOfOperator(True),
    ContainsOperator(False), ContainsOperator(True),
    StartsWithOperator(False), StartsWithOperator(True),
    LessThanOperator(), LessThanOrEqualOperator(),
    GreaterThanOperator(), GreaterThanOrEqualOperator(),
    BetweenOperator(False), BetweenOperator(True),
)

_ORDERED_TYPES = ["integer", "decimal", "datetime"]

# id, text, addl props, multival, type, exclude type, null check
_DEFAULT_OPERATORS = [
    ("NL", "is null", "0", None, None, None, "1"),
    ("NNL", "is not null", "0", None, None, None, "1"),
    ("EQ", "=", "1", "0", None, None, None),
    ("NEQ", "!=", "1", "0", None, None, None),
    ("IN", "is one of", "1", "1", None, None, None),
    ("NIN", "is none of", "1", "1", None, None, None),
    ("LT", "<", "1", "0", _ORDERED_TYPES, None, None),
    ("LE", "<=", "1", "0", _ORDERED_TYPES, None, None),
    ("GT", ">", "1", "0", _ORDERED_TYPES, None, None),
    ("GE", ">=", "1", "0", _ORDERED_TYPES, None, None),
    ("BW", "between", "2", "0", _ORDERED_TYPES, None, None),
    ("NBW", "not between", "2", "0", _ORDERED_TYPES, None, None),
    ("CN", "contains", "1", "0", "text", "guid", None),
    ("NCN", "doesn't contain", "1", "0", "text", "guid", None),
    ("SW", "starts with", "1", "0", "text", "guid", None),
    ("NSW", "doesn't start with", "1", "0", "text", "guid", None),
]


def default_operator_table() -> LookupTable:
    """Build the lookup table of the built-in operators with their applicability attributes."""
    headers: List[Header] = []
    for order, (id, text, addl, multival, types, excl, null_check) in enumerate(_DEFAULT_OPERATORS, 1):
        attrs = {ATTR_ADDL_PROPS: addl, ATTR_SORT_ORDER: order}
        if multival is not None:
            attrs[ATTR_MULTIVAL] = multival
        if types is not None:
            attrs[ATTR_TYPE] = list(types) if isinstance(types, list) else types
        if excl is not None:
            attrs[ATTR_EXCLUDE_TYPE] = excl
        if null_check is not None:
            attrs[ATTR_NULL_CHECK] = null_check
        headers.append(Header(OPERATOR_TABLE_TYPE, id, text, attrs))
    return LookupTable(OPERATOR_TABLE_TYPE, headers)
