"""
OperatorProperty: a criteria property selecting a comparison operator.

The operator is bound to one or two operand properties of the same
criteria object. The operand names default to the operator's own name
with the operator suffix stripped, e.g. ``"Amount Operator"`` binds to
``"Amount"`` and ``"Amount2"``.
"""
from typing import Any, Optional

from loguru import logger

from ..properties.data_property import DataProperty
from ..properties.enum import EnumKind, Header, LookupTable
from ..properties.value_format import PropertyChange, PropertyChangeEventArgs
from .operators import (
    ATTR_ADDL_PROPS,
    ATTR_EXCLUDE_TYPE,
    ATTR_MULTIVAL,
    ATTR_NULL_CHECK,
    ATTR_SORT_ORDER,
    ATTR_TYPE,
    OPERATOR_TABLE_TYPE,
    default_operator_table,
)


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_names(value: Any):
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


class OperatorProperty(DataProperty):
    """
    Enumerated property whose values are operators.

    Args:
        parent: Criteria object owning the operator and its operands.
        name: Property name, normally ending with the operator suffix.
        lookup_table: Operator table; the built-in operators by default.
        settings: Settings for a standalone property.
    """

    def __init__(self, parent=None, name: str = "", lookup_table: Optional[LookupTable] = None,
                 settings=None):
        super().__init__(parent, name, settings=settings)
        self.kind = EnumKind(OPERATOR_TABLE_TYPE, lookup_table or default_operator_table())
        self._bind_kind()

        criteria_settings = self.settings.criteria
        self.has_null_check = criteria_settings.null_check_operators
        self.additional_property_name: Optional[str] = None
        self.additional_property_name2: Optional[str] = None
        suffix = criteria_settings.operator_suffix
        if suffix and name.endswith(suffix):
            base = name[:-len(suffix)].rstrip(" _")
            if base:
                self.additional_property_name = base
                self.additional_property_name2 = base + criteria_settings.second_operand_suffix
        self.additional_property: Optional[DataProperty] = None
        self.additional_property2: Optional[DataProperty] = None

        self.change.connect(self._on_value_changed)

    def _bind_kind(self):
        self.kind.filter_func = self.is_applicable
        self.kind.sort_field = lambda h: _to_int(h[ATTR_SORT_ORDER])

    def initialize(self):
        super().initialize()
        if self.parent is not None:
            if self.additional_property_name:
                self.additional_property = self.parent.get_property(self.additional_property_name)
            if self.additional_property_name2:
                self.additional_property2 = self.parent.get_property(self.additional_property_name2)
        if self.additional_property_name and self.additional_property is None:
            logger.warning(f"Operator '{self.name}' has no operand '{self.additional_property_name}'")
        self._on_value_changed(self, PropertyChangeEventArgs(PropertyChange.ALL))

    def copy_from(self, other: DataProperty):
        if isinstance(other, OperatorProperty):
            self.has_null_check = other.has_null_check
        super().copy_from(other)
        self._bind_kind()

    @property
    def operands(self):
        return [p for p in (self.additional_property, self.additional_property2) if p is not None]

    @property
    def operand_count(self) -> int:
        """Number of operands the selected operator takes; 0 when none is selected."""
        if self.is_null():
            return 0
        return _to_int(self.value[ATTR_ADDL_PROPS])

    def is_applicable(self, oper: Header, row=None) -> bool:
        """
        Check whether an operator can be offered for the bound operands.

        Exclude types are probed before include types, and a type name
        matches its value kind or any of the kind's base kinds.
        """
        prop = self.additional_property
        multival = oper[ATTR_MULTIVAL]
        if prop is None and multival is not None:
            return False
        if prop is not None and (multival == "0" and prop.is_multi_valued
                                 or multival == "1" and not prop.is_multi_valued):
            return False

        dep_cnt = _to_int(oper[ATTR_ADDL_PROPS])
        if dep_cnt > 0 and prop is None or dep_cnt > 1 and self.additional_property2 is None:
            return False

        if oper[ATTR_NULL_CHECK] == "1" and not self.has_null_check:
            return False

        types, excl_types = oper[ATTR_TYPE], oper[ATTR_EXCLUDE_TYPE]
        if types is None and excl_types is None:
            return True
        if prop is None:
            return False
        kind = type(prop.kind)
        if any(kind.matches_type(t) for t in _as_names(excl_types)):
            return False
        if types is None:
            return True
        return any(kind.matches_type(t) for t in _as_names(types))

    def _on_value_changed(self, sender, args: PropertyChangeEventArgs):
        if sender is not self or self.additional_property is None:
            return
        if not args.change.includes_value() and not args.change.includes_visible():
            return
        dep_cnt = self.operand_count
        visible = self.visible
        for prop, needed in ((self.additional_property, 1), (self.additional_property2, 2)):
            if prop is None:
                continue
            show = visible and dep_cnt >= needed
            prop.visible = show
            prop.required = show
            if not show and not prop.is_null():
                prop.set_value(None)
