"""
DataProperty: a property that holds a value.

Values are converted between the four ValueFormats by a value kind
(see ``kinds``), optionally preceded by a custom converter. A property
that belongs to a list object keeps its values in the list rows under its
column index instead of its own slot; every row-aware operation takes the
row as an optional argument.
"""
import inspect
import re
from typing import Any, Awaitable, Callable, List, Optional, Tuple, Union

from ..binding.computed import ComputedValueBinding
from ..core.cancellation import CancellationToken, check_cancelled
from ..errors.error_list import ErrorList
from ..errors.messages import Messages
from .base import BaseProperty
from .kinds import ValueKind, create_kind
from .value_format import PropertyChange, PropertyChangeEventArgs, ValueFormat

ValueConverter = Callable[[Any, ValueFormat], Tuple[bool, Any]]
AsyncValueConverter = Callable[[Any, ValueFormat], Awaitable[Tuple[bool, Any]]]
ValueValidator = Callable[["DataProperty", Any, Any], None]


def validate_required(prop: "DataProperty", value, row):
    if prop.is_required(row) and prop.is_value_null(value, ValueFormat.INTERNAL):
        prop.add_validation_error(row, Messages.VALIDATION_REQUIRED, prop)


class DataProperty(BaseProperty):
    """
    Property with a value, multi-format conversion, change tracking
    and validation.

    Args:
        parent: Owning data object or list object.
        name: Property name.
        kind: Value kind instance or registered kind name; generic by default.
        multi_valued: Whether the property holds a list of values.
        required: Initial required flag.
        size: Maximum text length, or -1 for unlimited.
        settings: Settings for a standalone property.
    """

    def __init__(self, parent=None, name: str = "", kind: Union[ValueKind, str, None] = None,
                 multi_valued: bool = False, required: bool = False, size: int = -1, settings=None):
        super().__init__(parent, name, settings)
        self._kind: ValueKind = ValueKind()
        self.kind = kind
        self.is_multi_valued = multi_valued
        self.size = size
        self._required = required

        self._value: Any = None
        self.column = -1
        self._modified: Optional[bool] = None
        self._validation_errors: Optional[ErrorList] = None

        self._null_string: Optional[str] = None
        self._restricted_string: Optional[str] = None
        self._parse_list_separators: Optional[List[str]] = None
        self._display_list_separator: Optional[str] = None

        self.value_converter: Optional[ValueConverter] = None
        self.async_value_converter: Optional[AsyncValueConverter] = None
        self.items_provider: Optional[Callable] = None
        self._validators: List[ValueValidator] = []
        self._async_validators: List[Callable] = []
        self._computed_value: Optional[ComputedValueBinding] = None

        self.change.connect(self._validate_on_stop_editing)
        if parent is not None:
            parent.add_property(self)

    # --- Kind ---
    @property
    def kind(self) -> ValueKind:
        return self._kind

    @kind.setter
    def kind(self, value: Union[ValueKind, str, None]):
        if isinstance(value, str):
            created = create_kind(value)
            if created is None:
                raise ValueError(f"Unknown value kind: {value}")
            value = created
        self._kind = value if value is not None else ValueKind()

    # --- Value configuration ---
    @property
    def null_string(self) -> str:
        if self._null_string is not None:
            return self._null_string
        return self.settings.values.null_string

    @null_string.setter
    def null_string(self, value: str):
        self._null_string = value

    @property
    def restricted_string(self) -> str:
        if self._restricted_string is not None:
            return self._restricted_string
        return self.settings.values.restricted_string

    @restricted_string.setter
    def restricted_string(self, value: str):
        self._restricted_string = value

    @property
    def parse_list_separators(self) -> List[str]:
        if self._parse_list_separators is not None:
            return self._parse_list_separators
        return self.settings.values.parse_list_separators

    @parse_list_separators.setter
    def parse_list_separators(self, value: List[str]):
        self._parse_list_separators = list(value)

    @property
    def display_list_separator(self) -> str:
        if self._display_list_separator is not None:
            return self._display_list_separator
        return self.settings.values.display_list_separator

    @display_list_separator.setter
    def display_list_separator(self, value: str):
        self._display_list_separator = value

    # --- Storage ---
    def _is_cell(self, row) -> bool:
        return row is not None and self.column >= 0

    def get_internal(self, row=None) -> Any:
        if self._is_cell(row):
            return row.get_at(self.column)
        return self._value

    def _set_internal(self, value, row=None):
        if self._is_cell(row):
            row.set_at(self.column, value)
        else:
            self._value = value

    # --- Value access ---
    def get_value(self, fmt: ValueFormat = ValueFormat.INTERNAL, row=None) -> Any:
        return self.resolve_value(self.get_internal(row), fmt, row)

    @property
    def value(self) -> Any:
        return self.get_internal()

    @value.setter
    def value(self, val: Any):
        self.set_value(val)

    @property
    def display_string(self) -> str:
        return self.value_to_string(self.get_internal(), ValueFormat.DISPLAY_STRING)

    @property
    def edit_string(self) -> str:
        return self.value_to_string(self.get_internal(), ValueFormat.EDIT_STRING)

    @property
    def transport_value(self) -> Any:
        return self.resolve_value(self.get_internal(), ValueFormat.TRANSPORT)

    def get_string_value(self, fmt: ValueFormat, row=None) -> str:
        return self.value_to_string(self.get_internal(row), fmt)

    def is_null(self, row=None) -> bool:
        return self.is_value_null(self.get_internal(row), ValueFormat.INTERNAL)

    def set_value(self, value: Any, row=None):
        """
        Resolve the value to Internal format, store it and notify listeners.

        Args:
            value: New value in any format.
            row: List row to update, or None for the property's own value.
        """
        old = self.get_internal(row)
        new = self.resolve_value(value, ValueFormat.INTERNAL, row)
        self._store_value(old, new, row)
        self.fire_change(PropertyChangeEventArgs(PropertyChange.VALUE, old, new, row))

    async def set_value_async(self, value: Any, row=None, token: Optional[CancellationToken] = None):
        """
        Asynchronous form of ``set_value``: conversion may suspend, and
        async change listeners are awaited before returning.

        Raises:
            asyncio.CancelledError: if the token is cancelled.
        """
        check_cancelled(token)
        old = self.get_internal(row)
        new = await self.resolve_value_async(value, ValueFormat.INTERNAL, row, token)
        check_cancelled(token)
        self._store_value(old, new, row)
        await self.fire_change_async(PropertyChangeEventArgs(PropertyChange.VALUE, old, new, row))

    def _store_value(self, old, new, row=None):
        self._set_internal(new, row)
        changed = old != new
        # never let an explicit change regress back to False
        if self.get_modified(row) is None:
            self.set_modified(False, row)
        elif changed:
            self.set_modified(True, row)
        if changed:
            self.reset_validation(row)

    def reset_value(self, row=None):
        self.set_value(None, row)
        self.set_modified(None, row)

    def copy_from(self, other: "DataProperty"):
        if other is None:
            return
        if isinstance(other.kind, type(self.kind)):
            self._kind = other.kind.clone()
        self.set_value(other.get_internal())
        self.editable = other.editable
        self.required = other.required
        self.access_level = other.access_level
        self.visible = other.visible

    # --- Conversion ---
    def is_value_null(self, value: Any, fmt: ValueFormat = ValueFormat.INTERNAL) -> bool:
        return self.kind.is_null(self, value, fmt)

    def _to_list(self, value: Any) -> List[Any]:
        if isinstance(value, (list, tuple, set)):
            return list(value)
        if isinstance(value, str):
            pattern = "|".join(re.escape(s) for s in self.parse_list_separators if s)
            parts = re.split(pattern, value) if pattern else [value]
            return [p.strip() for p in parts if not self.is_value_null(p, ValueFormat.INTERNAL)]
        return [value]

    def _convert(self, value: Any, fmt: ValueFormat) -> Any:
        if self.value_converter is not None:
            handled, converted = self.value_converter(value, fmt)
            if handled:
                return converted
        return self.kind.convert(self, value, fmt)

    async def _convert_async(self, value: Any, fmt: ValueFormat, token=None) -> Any:
        if self.async_value_converter is not None:
            handled, converted = await self.async_value_converter(value, fmt)
            if handled:
                return converted
        if self.value_converter is not None:
            handled, converted = self.value_converter(value, fmt)
            if handled:
                return converted
        return await self.kind.convert_async(self, value, fmt, token)

    def resolve_value(self, value: Any, fmt: ValueFormat, row=None) -> Any:
        """
        Convert a value to the given format.

        Restricted properties return the restricted string for string formats,
        null values become None (or the null string for DisplayString), and
        multi-valued properties convert each element of the parsed list.
        """
        if self.is_restricted():
            return self.restricted_string if fmt.is_string() else value
        if self.is_value_null(value, fmt):
            return self.null_string if fmt == ValueFormat.DISPLAY_STRING else None
        if self.is_multi_valued:
            res = []
            for val in self._to_list(value):
                cval = self._convert(val, fmt)
                if not self.is_value_null(cval, fmt):
                    res.append(cval)
            return res
        return self._convert(value, fmt)

    async def resolve_value_async(self, value: Any, fmt: ValueFormat, row=None,
                                  token: Optional[CancellationToken] = None) -> Any:
        if self.is_restricted():
            return self.restricted_string if fmt.is_string() else value
        if self.is_value_null(value, fmt):
            return self.null_string if fmt == ValueFormat.DISPLAY_STRING else None
        if self.is_multi_valued:
            res = []
            for val in self._to_list(value):
                check_cancelled(token)
                cval = await self._convert_async(val, fmt, token)
                if not self.is_value_null(cval, fmt):
                    res.append(cval)
            return res
        return await self._convert_async(value, fmt, token)

    def list_to_string(self, values: List[Any], fmt: ValueFormat) -> str:
        return self.display_list_separator.join(str(v) for v in values)

    def value_to_string(self, value: Any, fmt: ValueFormat) -> str:
        cval = self.resolve_value(value, fmt)
        if isinstance(cval, list):
            return self.list_to_string(cval, fmt)
        return "" if cval is None else str(cval)

    # --- Possible values ---
    def get_possible_values(self, row=None) -> Optional[List[Any]]:
        if self.items_provider is not None:
            return list(self.items_provider(row))
        return self.kind.items(self, row)

    async def get_possible_values_async(self, row=None, token: Optional[CancellationToken] = None):
        check_cancelled(token)
        if self.items_provider is not None:
            res = self.items_provider(row)
            if inspect.isawaitable(res):
                res = await res
            return list(res)
        items_async = getattr(self.kind, "items_async", None)
        if items_async is not None:
            return await items_async(self, row, token)
        return self.kind.items(self, row)

    def refresh_items(self, row=None):
        self.fire_change(PropertyChangeEventArgs(PropertyChange.ITEMS, None, None, row))

    # --- Row overrides ---
    def _local_editable(self, row=None) -> bool:
        if self._computed_editable is not None:
            return self._computed_editable.resolve(row)
        if self._is_cell(row):
            override = row.editable[self.column]
            if override is not None:
                return override
        return self._editable

    def _store_editable(self, value: bool, row=None):
        if self._is_cell(row):
            row.editable[self.column] = value
        else:
            self._editable = value

    def is_editing(self, row=None) -> bool:
        if self._is_cell(row):
            return bool(row.editing[self.column])
        return self._editing

    def _store_editing(self, value: bool, row=None):
        if self._is_cell(row):
            row.editing[self.column] = value
        else:
            self._editing = value

    # --- Modification tracking ---
    def get_modified(self, row=None) -> Optional[bool]:
        if self._is_cell(row):
            return row.modified[self.column]
        return self._modified

    def set_modified(self, value: Optional[bool], row=None):
        if self._is_cell(row):
            row.modified[self.column] = value
        else:
            self._modified = value

    @property
    def modified(self) -> Optional[bool]:
        return self.get_modified()

    @modified.setter
    def modified(self, value: Optional[bool]):
        self.set_modified(value)

    # --- Validation ---
    @property
    def validators(self) -> List[ValueValidator]:
        return [validate_required] + self.kind.validators() + self._validators

    def add_validator(self, validator: ValueValidator):
        self._validators.append(validator)

    def remove_validator(self, validator: ValueValidator):
        if validator in self._validators:
            self._validators.remove(validator)

    def add_async_validator(self, validator: Callable):
        self._async_validators.append(validator)

    def get_validation_errors(self, row=None) -> Optional[ErrorList]:
        if self._is_cell(row):
            return row.errors[self.column]
        return self._validation_errors

    def _set_validation_errors(self, errors: Optional[ErrorList], row=None):
        if self._is_cell(row):
            row.errors[self.column] = errors
        else:
            self._validation_errors = errors

    @property
    def validation_errors(self) -> Optional[ErrorList]:
        return self.get_validation_errors()

    def add_validation_error(self, row, code: str, *params):
        errors = self.get_validation_errors(row)
        if errors is None:
            errors = ErrorList()
            self._set_validation_errors(errors, row)
        errors.add_validation_error(code, *params)

    def reset_validation(self, row=None):
        self._set_validation_errors(None, row)
        self.fire_change(PropertyChangeEventArgs(PropertyChange.VALIDATION, None, None, row))

    def _values_to_validate(self, row=None) -> List[Any]:
        value = self.get_internal(row)
        if isinstance(value, list) and len(value) > 0:
            return value
        return [value]

    def _begin_validation(self, force: bool, row) -> Tuple[ErrorList, bool]:
        if force:
            self.reset_validation(row)
        errors = self.get_validation_errors(row)
        if errors is not None:
            return errors, False
        errors = ErrorList()
        self._set_validation_errors(errors, row)
        return errors, self.is_editable(row) and self.is_visible(row)

    def validate(self, force: bool = False, row=None) -> ErrorList:
        """
        Run the validators unless results are already cached.

        Args:
            force: Discard cached results first.
            row: List row to validate.

        Returns:
            The validation errors of the property (or row cell).
        """
        errors, run = self._begin_validation(force, row)
        if not run:
            return errors
        for val in self._values_to_validate(row):
            for validator in self.validators:
                validator(self, val, row)
        self.fire_change(PropertyChangeEventArgs(PropertyChange.VALIDATION, None, None, row))
        return errors

    async def validate_async(self, force: bool = False, row=None,
                             token: Optional[CancellationToken] = None) -> ErrorList:
        check_cancelled(token)
        errors, run = self._begin_validation(force, row)
        if not run:
            return errors
        for val in self._values_to_validate(row):
            for validator in self.validators:
                validator(self, val, row)
            for validator in self._async_validators:
                check_cancelled(token)
                await validator(self, val, row)
        await self.fire_change_async(PropertyChangeEventArgs(PropertyChange.VALIDATION, None, None, row))
        return errors

    def is_valid(self, validate: bool = True, row=None) -> bool:
        if validate:
            self.validate(False, row)
        errors = self.get_validation_errors(row)
        return errors is None or not errors.has_errors()

    def get_errors_text(self, row=None) -> str:
        errors = self.get_validation_errors(row)
        if errors is None or not (self.is_editable(row) and self.is_visible(row)):
            return ""
        return errors.errors_text

    @property
    def errors_text(self) -> str:
        return self.get_errors_text()

    def _validate_on_stop_editing(self, sender, args: PropertyChangeEventArgs):
        if sender is self and args.change.includes_editing() and not self.is_editing(args.row):
            self.validate(False, args.row)

    # --- Computed value ---
    def set_computed_value(self, compute: Optional[Callable], *dependencies):
        """
        Make the value computed; the property becomes non-editable and not required.
        """
        if self._computed_value is not None:
            self._computed_value.dispose()
            self._computed_value = None
        if compute is None:
            return
        self.set_computed_editable(None)
        self.set_computed_required(None)
        self.set_editable(False)
        self.set_required(False)
        self._computed_value = ComputedValueBinding(self, compute, dependencies)
        if not self._in_list():
            self._computed_value.update()

    def update_computed_value(self, row=None):
        if self._computed_value is not None:
            self._computed_value.update(row)

    async def update_computed_value_async(self, row=None):
        if self._computed_value is not None:
            await self._computed_value.update_async(row)

    # --- UI state ---
    def get_state_string(self, states: PropertyChange = PropertyChange.ALL, row=None) -> str:
        """
        Describe the property state as space-separated words for UI styling:
        required, modified, valid/invalid, readonly or hidden.
        """
        state = []
        if self.is_visible(row):
            if self.is_editable(row):
                if self.is_required(row) and states.includes_required():
                    state.append("required")
                if self.get_modified(row) is True and states.includes_value():
                    state.append("modified")
                if self.get_validation_errors(row) is not None and states.includes_validation():
                    state.append("valid" if self.is_valid(False, row) else "invalid")
            elif states.includes_editable():
                state.append("readonly")
        elif states.includes_visible():
            state.append("hidden")
        return " ".join(state)
