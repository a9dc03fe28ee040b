"""
CriteriaObject: a data object holding search criteria for a list.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from ..objects.data_object import DataObject
from ..properties.data_property import DataProperty
from ..properties.value_format import ValueFormat
from .operator_property import OperatorProperty
from .operators import OneOfOperator, get_operator


@dataclass
class FieldCriteriaSetting:
    """Display summary of one applied criteria field."""
    label: str
    operator: Optional[str] = None
    value: List[str] = field(default_factory=list)
    # two operand values form a range
    is_range: bool = False

    def to_text(self, and_text: str = "and", separator: str = ", ") -> str:
        if self.operator is None:
            return f"{self.label}: {separator.join(self.value)}"
        if not self.value:
            return f"{self.label} {self.operator}"
        joiner = f" {and_text} " if len(self.value) == 2 and self.is_range else separator
        return f"{self.label} {self.operator} {joiner.join(self.value)}"


class CriteriaObject(DataObject):
    """
    Search criteria made of plain value properties and operator properties
    bound to them.
    """

    @property
    def operator_properties(self) -> List[OperatorProperty]:
        return [p for p in self.properties.values() if isinstance(p, OperatorProperty)]

    def _operand_names(self) -> set:
        names = set()
        for op in self.operator_properties:
            names.update(n for n in (op.additional_property_name, op.additional_property_name2) if n)
        return names

    def adjust_operators(self):
        """Clear every operator whose operands are all blank."""
        for op in self.operator_properties:
            blank = True
            for name in (op.additional_property_name, op.additional_property_name2):
                if name and self.has_property(name) and not self[name].is_null():
                    blank = False
            if blank and not op.is_null():
                logger.debug(f"Clearing operator '{op.name}': no operand values")
                op.set_value(None)

    def set_values(self, values: Dict[str, Any]):
        super().set_values(values)
        self.adjust_operators()

    def from_data_contract(self, contract: Any):
        super().from_data_contract(contract)
        self.adjust_operators()

    def has_criteria(self) -> bool:
        """True if any non-operator property has a value."""
        return any(not p.is_null() for p in self.properties.values() if not isinstance(p, OperatorProperty))

    def clone(self) -> "CriteriaObject":
        """Independent copy with the same values, used as an applied criteria snapshot."""
        copy = type(self)(settings=self.settings)
        copy.copy_from(self)
        return copy

    def get_field_criteria_settings(self) -> List[FieldCriteriaSetting]:
        """
        Summarize the current criteria for display.

        Operand properties are reported through their operators, so each
        field appears once: operators with their operand values, plain
        properties with their display value.
        """
        props: Dict[str, DataProperty] = dict(self.properties)
        for name in self._operand_names():
            props.pop(name, None)

        res = []
        for p in props.values():
            if p.is_null() or not p.visible:
                continue
            if isinstance(p, OperatorProperty):
                label = str(p.additional_property) if p.additional_property is not None else str(p)
                values = []
                for operand in p.operands:
                    if operand.is_null():
                        continue
                    val = operand.resolve_value(operand.value, ValueFormat.DISPLAY_STRING)
                    if isinstance(val, list):
                        values.extend(str(v) for v in val)
                    else:
                        values.append(str(val))
                setting = FieldCriteriaSetting(label, p.display_string, values, p.operand_count > 1)
            else:
                setting = FieldCriteriaSetting(str(p), None, [p.display_string])
            res.append(setting)
        return res

    @property
    def criteria_text(self) -> str:
        separator = self.settings.values.display_list_separator
        return "; ".join(s.to_text(separator=separator) for s in self.get_field_criteria_settings())

    # --- Client-side filtering ---
    def matches_row(self, list_object, row) -> bool:
        """
        Evaluate the active criteria against a row of the given list.

        Operators are applied to the list column named after their operand;
        plain properties require equality, or membership for multi-valued ones.
        """
        operand_names = self._operand_names()
        for op in self.operator_properties:
            if op.is_null() or not op.additional_property_name:
                continue
            column = list_object.get_property(op.additional_property_name)
            if column is None:
                logger.warning(f"Cannot filter by '{op.additional_property_name}': no such list property")
                continue
            operator = get_operator(op.value.id)
            if operator is None:
                continue
            criteria = self._operand_values(op, operator)
            if not operator.matches(row.get_at(column.column), *criteria):
                return False

        for p in self.properties.values():
            if isinstance(p, OperatorProperty) or p.name in operand_names or p.is_null():
                continue
            column = list_object.get_property(p.name)
            if column is None:
                continue
            value = row.get_at(column.column)
            if p.is_multi_valued:
                if value not in p.value:
                    return False
            elif value != p.value:
                return False
        return True

    @staticmethod
    def _operand_values(op: OperatorProperty, operator) -> List[Any]:
        if operator.number_of_values == 0:
            return []
        values = []
        for operand in op.operands[:max(operator.number_of_values, 1)]:
            value = operand.value
            if operand.is_multi_valued or isinstance(operator, OneOfOperator):
                values.extend(value if isinstance(value, list) else ([] if value is None else [value]))
            else:
                values.append(value)
        while len(values) < operator.number_of_values:
            values.append(None)
        return values
