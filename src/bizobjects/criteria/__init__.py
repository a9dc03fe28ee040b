"""
Criteria: operators, operator properties and criteria objects.
"""
from .operators import (
    Operator,
    IsNullOperator,
    IsNotNullOperator,
    EqualToOperator,
    NotEqualToOperator,
    OneOfOperator,
    ContainsOperator,
    StartsWithOperator,
    LessThanOperator,
    LessThanOrEqualOperator,
    GreaterThanOperator,
    GreaterThanOrEqualOperator,
    BetweenOperator,
    OPERATOR_TYPES,
    register_operator,
    get_operator,
    default_operator_table,
)
from .operator_property import OperatorProperty
from .criteria_object import CriteriaObject, FieldCriteriaSetting

__all__ = [
    "Operator",
    "IsNullOperator",
    "IsNotNullOperator",
    "EqualToOperator",
    "NotEqualToOperator",
    "OneOfOperator",
    "ContainsOperator",
    "StartsWithOperator",
    "LessThanOperator",
    "LessThanOrEqualOperator",
    "GreaterThanOperator",
    "GreaterThanOrEqualOperator",
    "BetweenOperator",
    "OPERATOR_TYPES",
    "register_operator",
    "get_operator",
    "default_operator_table",
    "OperatorProperty",
    "CriteriaObject",
    "FieldCriteriaSetting",
]
