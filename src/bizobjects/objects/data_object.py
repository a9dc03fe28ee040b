"""
DataObject: a named registry of properties, actions and child objects.

Aggregates modification and validation state of its subtree and
orchestrates Read, Save and Delete operations over it. Subclasses declare
their members in ``initialize`` and implement the ``do_*`` hooks that call
the external data layer.
"""
import asyncio
import weakref
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from loguru import logger

from ..binding.computed import ComputedEditableObjectBinding
from ..core.cancellation import CancellationToken, check_cancelled
from ..core.config import ModelSettings, resolve_settings
from ..core.events import Signal
from ..errors.error_list import ErrorAbortException, ErrorList
from ..properties.action import ActionProperty
from ..properties.data_property import DataProperty
from ..properties.value_format import AccessLevel, PropertyChange, PropertyChangeEventArgs
from .contract import (
    ContractMapping,
    MappingKind,
    get_member,
    has_member,
    new_member_value,
    set_member,
)
from .options import CrudOptions


def tri_state_or(a: Optional[bool], b: Optional[bool]) -> Optional[bool]:
    """OR of two tri-state flags where None means 'not set' and is ignored."""
    if a is True or b is True:
        return True
    if a is None:
        return b
    if b is None:
        return a
    return False


class DataObject:
    """
    Base data object.

    Args:
        parent: Parent data object, held by weak reference.
        settings: Settings shared by the object tree, or the path of a settings file;
            inherited from the parent when omitted.
    """
    is_list = False

    def __init__(self, parent: Optional["DataObject"] = None,
                 settings: Union[ModelSettings, str, None] = None):
        self._parent = weakref.ref(parent) if parent is not None else None
        self._settings = resolve_settings(settings)
        self.properties: Dict[str, DataProperty] = {}
        self.actions: Dict[str, ActionProperty] = {}
        self.child_objects: Dict[str, "DataObject"] = {}

        self._editable = True
        self._access_level = AccessLevel.FULL
        self._modified: Optional[bool] = None
        self._is_new = True
        self.track_modifications = True
        self._computed_editable: Optional[ComputedEditableObjectBinding] = None
        self.validation_errors: Optional[ErrorList] = None

        self.property_changed = Signal(f"{type(self).__name__}.PropertyChanged")

        self.initialize()
        self.on_initialized()

    def initialize(self):
        """Declare properties, actions and child objects here."""
        pass

    def on_initialized(self):
        for p in self.properties.values():
            p.initialize()
        for a in self.actions.values():
            a.initialize()

    # --- Tree ---
    @property
    def parent(self) -> Optional["DataObject"]:
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, value: Optional["DataObject"]):
        self._parent = weakref.ref(value) if value is not None else None

    @property
    def settings(self) -> ModelSettings:
        if self._settings is None:
            parent = self.parent
            if parent is not None:
                return parent.settings
            self._settings = ModelSettings()
        return self._settings

    @settings.setter
    def settings(self, value: ModelSettings):
        self._settings = value

    def on_property_changed(self, member: str):
        self.property_changed.emit(self, member)

    # --- Registration ---
    def add_property(self, prop: DataProperty):
        self.properties[prop.name] = prop

    def add_action(self, action: ActionProperty):
        self.actions[action.name] = action

    def add_child_object(self, name: str, child: "DataObject") -> "DataObject":
        child.parent = self
        self.child_objects[name] = child
        return child

    def has_property(self, name: str) -> bool:
        return name in self.properties

    def get_property(self, name: str) -> Optional[DataProperty]:
        return self.properties.get(name)

    def __getitem__(self, name: str) -> DataProperty:
        prop = self.properties.get(name)
        if prop is None:
            raise KeyError(f"{type(self).__name__} has no property '{name}'")
        return prop

    def __contains__(self, name: str) -> bool:
        return name in self.properties

    def get_action(self, name: str) -> Optional[ActionProperty]:
        return self.actions.get(name)

    def get_child_object(self, name: str) -> Optional["DataObject"]:
        return self.child_objects.get(name)

    @property
    def is_new(self) -> bool:
        return self._is_new

    @is_new.setter
    def is_new(self, value: bool):
        if value != self._is_new:
            self._is_new = value
            self.on_property_changed("is_new")

    # --- Editability and security ---
    def is_editable(self) -> bool:
        if self._computed_editable is not None:
            b = self._computed_editable.resolve()
        else:
            b = self._editable
        parent = self.parent
        if parent is not None:
            b = b and parent.editable
        return b and self.access_level > AccessLevel.READ_ONLY

    @property
    def editable(self) -> bool:
        return self.is_editable()

    @editable.setter
    def editable(self, value: bool):
        if self._computed_editable is not None:
            logger.warning(f"Ignoring manual editable change of {type(self).__name__}: it is computed")
            return
        old = self.is_editable()
        self._editable = value
        if self.is_editable() != old:
            self.on_editable_changed()

    def on_editable_changed(self):
        new = self.is_editable()
        self.fire_property_change(PropertyChangeEventArgs(PropertyChange.EDITABLE, not new, new))
        self.on_property_changed("editable")

    def set_computed_editable(self, compute: Optional[Callable], *dependencies):
        old = self.is_editable()
        if self._computed_editable is not None:
            self._computed_editable.dispose()
            self._computed_editable = None
        if compute is not None:
            self._computed_editable = ComputedEditableObjectBinding(self, compute, dependencies)
        if self.is_editable() != old:
            self.on_editable_changed()

    def update_computed_editable(self):
        if self._computed_editable is not None:
            self._computed_editable.update()

    @property
    def access_level(self) -> AccessLevel:
        return self._access_level

    @access_level.setter
    def access_level(self, value: AccessLevel):
        old = self._access_level
        self._access_level = AccessLevel(value)
        self.fire_property_change(PropertyChangeEventArgs(
            PropertyChange.EDITABLE | PropertyChange.VISIBLE, old, self._access_level))
        self.on_property_changed("access_level")

    def fire_property_change(self, args: PropertyChangeEventArgs):
        """Broadcast a change to every property and action of the subtree."""
        for p in self.properties.values():
            p.fire_change(args)
        for a in self.actions.values():
            a.fire_change(args)
        for child in self.child_objects.values():
            child.fire_property_change(args)

    def is_property_editable(self, prop, row=None) -> bool:
        parent = self.parent
        return self.editable and (parent is None or parent.is_property_editable(prop, row))

    def is_property_visible(self, prop, row=None) -> bool:
        parent = self.parent
        return self.access_level > AccessLevel.NONE and (
            parent is None or parent.is_property_visible(prop, row))

    def is_property_required(self, prop, row=None) -> bool:
        parent = self.parent
        return parent is None or parent.is_property_required(prop, row)

    # --- Modification tracking ---
    def is_modified(self) -> Optional[bool]:
        """
        Tri-state OR of the object's own flag, its properties and its children.
        Always False when modification tracking is disabled.
        """
        if not self.track_modifications:
            return False
        res = self._modified
        for p in self.properties.values():
            res = tri_state_or(res, p.modified)
        for child in self.child_objects.values():
            res = tri_state_or(res, child.is_modified())
        return res

    def set_modified(self, modified: Optional[bool], recursive: bool = False):
        self._modified = modified
        if recursive:
            for p in self.properties.values():
                p.modified = modified
            for child in self.child_objects.values():
                child.set_modified(modified, True)

    # --- Data ---
    def copy_from(self, other: "DataObject"):
        if other is None:
            return
        for p in self.properties.values():
            source = other.get_property(p.name)
            if source is not None:
                p.copy_from(source)
        for name, child in self.child_objects.items():
            child.copy_from(other.get_child_object(name))

    def reset_data(self):
        for p in self.properties.values():
            p.reset_value()
        for child in self.child_objects.values():
            child.reset_data()
        self._modified = None

    def set_values(self, values: Dict[str, Any]):
        for name, value in values.items():
            if self.has_property(name):
                self[name].set_value(value)

    def to_value_map(self, include_nulls: bool = False) -> Dict[str, str]:
        res = {}
        for p in self.properties.values():
            if p.is_null() and not include_nulls:
                continue
            res[p.name] = p.edit_string
        return res

    # --- Validation ---
    def validate(self, force: bool = False):
        for p in self.properties.values():
            p.validate(force)
        for child in self.child_objects.values():
            child.validate(force)
        self._validate_self(force)

    async def validate_async(self, force: bool = False, token: Optional[CancellationToken] = None):
        """Like ``validate``, but also awaits the async validators of every property."""
        for p in self.properties.values():
            await p.validate_async(force, token=token)
        for child in self.child_objects.values():
            await child.validate_async(force, token)
        self._validate_self(force)

    def _validate_self(self, force: bool):
        if force:
            self.reset_validation()
        if self.validation_errors is None:
            self.validation_errors = ErrorList()
            self.validate_object(self.validation_errors)

    def validate_object(self, errors: ErrorList):
        """Object-level validation across several properties."""
        pass

    def get_validation_errors(self) -> ErrorList:
        errors = ErrorList()
        errors.merge_with(self.validation_errors)
        for p in self.properties.values():
            errors.merge_with(p.validation_errors)
        for child in self.child_objects.values():
            errors.merge_with(child.get_validation_errors())
        return errors

    def reset_validation(self):
        self.validation_errors = None

    def reset_all_validation(self):
        self.reset_validation()
        for p in self.properties.values():
            p.reset_validation()
        for child in self.child_objects.values():
            child.reset_all_validation()

    # --- Data contracts ---
    def from_data_contract(self, contract: Any):
        """Load property values and children from a data contract."""
        if contract is None:
            return
        self.set_modified(False, False)
        for entry in ContractMapping.for_object(self, contract).fields:
            if not has_member(contract, entry.member):
                continue
            value = get_member(contract, entry.member)
            if entry.kind == MappingKind.PROPERTY:
                prop = self[entry.target]
                prop.modified = None
                prop.set_value(value)
            elif entry.kind == MappingKind.CHILD:
                self.child_objects[entry.target].from_data_contract(value)
            elif value is not None:
                for sub, name in entry.fields:
                    if has_member(value, sub):
                        prop = self[name]
                        prop.modified = None
                        prop.set_value(get_member(value, sub))

    def to_data_contract(self, contract: Any = None) -> Any:
        """
        Export valid property values in Transport format to a data contract.

        Args:
            contract: Contract to fill; a new dict of all members when omitted.

        Returns:
            The filled contract.
        """
        if contract is None:
            contract = {}
        if isinstance(contract, dict) and not contract:
            contract.update({name: None for name in self.properties})
            contract.update({name: None for name in self.child_objects})
        for entry in ContractMapping.for_object(self, contract).fields:
            if entry.kind == MappingKind.PROPERTY:
                prop = self[entry.target]
                if prop.is_valid(True):
                    set_member(contract, entry.member, prop.transport_value)
                continue
            nested = get_member(contract, entry.member)
            if nested is None:
                nested = new_member_value(contract, entry.member)
            if nested is None:
                continue
            if entry.kind == MappingKind.CHILD:
                self.child_objects[entry.target].to_data_contract(nested)
            else:
                for sub, name in entry.fields:
                    prop = self[name]
                    if prop.is_valid(True):
                        set_member(nested, sub, prop.transport_value)
            set_member(contract, entry.member, nested)
        return contract

    # --- CRUD hooks ---
    def do_read(self, options: CrudOptions) -> Optional[ErrorList]:
        return None

    def do_save(self, options: CrudOptions) -> Optional[ErrorList]:
        return None

    def do_delete(self, options: CrudOptions) -> Optional[ErrorList]:
        return None

    async def do_read_async(self, options: CrudOptions, token: Optional[CancellationToken] = None) -> Optional[ErrorList]:
        return self.do_read(options)

    async def do_save_async(self, options: CrudOptions, token: Optional[CancellationToken] = None) -> Optional[ErrorList]:
        return self.do_save(options)

    async def do_delete_async(self, options: CrudOptions, token: Optional[CancellationToken] = None) -> Optional[ErrorList]:
        return self.do_delete(options)

    # --- CRUD orchestration ---
    @staticmethod
    def _abort_on_critical(errors: ErrorList):
        if errors.has_critical():
            errors.abort(errors.errors_text)

    @staticmethod
    def _rethrow_with(ex: ErrorAbortException, errors: ErrorList):
        if ex.errors is not errors:
            errors.merge_with(ex.errors)
            ex.errors = errors
        raise ex

    def _run(self, hook: Callable[[CrudOptions], Optional[ErrorList]], child_op: str,
             options: CrudOptions) -> ErrorList:
        errors = ErrorList()
        try:
            errors.merge_with(hook(options))
            self._abort_on_critical(errors)
            if options.recursive:
                for child in self.child_objects.values():
                    if options.abort_on_errors and errors.has_errors():
                        break
                    errors.merge_with(getattr(child, child_op)(options))
                    self._abort_on_critical(errors)
        except ErrorAbortException as ex:
            self._rethrow_with(ex, errors)
        return errors

    async def _run_async(self, hook: Callable[..., Awaitable[Optional[ErrorList]]], child_op: str,
                         options: CrudOptions, token: Optional[CancellationToken]) -> ErrorList:
        check_cancelled(token)
        errors = ErrorList()
        try:
            errors.merge_with(await hook(options, token))
            self._abort_on_critical(errors)
            children = list(self.child_objects.values())
            if options.recursive and children:
                if options.parallel:
                    results = await asyncio.gather(
                        *(getattr(child, child_op)(options, token) for child in children),
                        return_exceptions=True)
                    abort = None
                    for res in results:
                        if isinstance(res, ErrorAbortException):
                            errors.merge_with(res.errors)
                            abort = abort or res
                        elif isinstance(res, BaseException):
                            raise res
                        else:
                            errors.merge_with(res)
                    if abort is not None:
                        abort.errors = errors
                        raise abort
                else:
                    for child in children:
                        if options.abort_on_errors and errors.has_errors():
                            break
                        check_cancelled(token)
                        errors.merge_with(await getattr(child, child_op)(options, token))
                        self._abort_on_critical(errors)
        except ErrorAbortException as ex:
            self._rethrow_with(ex, errors)
        return errors

    def _log_result(self, op: str, errors: ErrorList):
        if errors.has_errors():
            logger.debug(f"{op} of {type(self).__name__} failed: {errors.errors_text}")
        else:
            logger.debug(f"{op} of {type(self).__name__} finished")

    def read(self, options: Optional[CrudOptions] = None) -> ErrorList:
        """
        Read the object via ``do_read`` and, if recursive, its children.

        Returns:
            Merged errors of the object and its children.

        Raises:
            ErrorAbortException: on a critical error, carrying all errors collected so far.
        """
        options = options or CrudOptions()
        logger.debug(f"Reading {type(self).__name__}")
        errors = self._run(self.do_read, "read", options)
        if not errors.has_errors():
            self.is_new = False
        self._log_result("Read", errors)
        return errors

    async def read_async(self, options: Optional[CrudOptions] = None,
                         token: Optional[CancellationToken] = None) -> ErrorList:
        options = options or CrudOptions()
        logger.debug(f"Reading {type(self).__name__} asynchronously")
        errors = await self._run_async(self.do_read_async, "read_async", options, token)
        if not errors.has_errors():
            self.is_new = False
        self._log_result("Read", errors)
        return errors

    def _validate_for_save(self) -> ErrorList:
        self.validate(True)
        return self.get_validation_errors()

    def save(self, options: Optional[CrudOptions] = None) -> ErrorList:
        """
        Validate the subtree and, if valid, save the object and its children.

        Validation errors are returned without invoking any save hook.
        """
        options = options or CrudOptions()
        errors = self._validate_for_save()
        if errors.has_errors():
            logger.debug(f"Save of {type(self).__name__} skipped: validation failed")
            return errors
        logger.debug(f"Saving {type(self).__name__}")
        errors = self._run(self.do_save, "save", options)
        if not errors.has_errors():
            self.set_modified(False, True)
            self.is_new = False
        self._log_result("Save", errors)
        return errors

    async def save_async(self, options: Optional[CrudOptions] = None,
                         token: Optional[CancellationToken] = None) -> ErrorList:
        options = options or CrudOptions()
        check_cancelled(token)
        await self.validate_async(True, token)
        errors = self.get_validation_errors()
        if errors.has_errors():
            logger.debug(f"Save of {type(self).__name__} skipped: validation failed")
            return errors
        logger.debug(f"Saving {type(self).__name__} asynchronously")
        errors = await self._run_async(self.do_save_async, "save_async", options, token)
        if not errors.has_errors():
            self.set_modified(False, True)
            self.is_new = False
        self._log_result("Save", errors)
        return errors

    def delete(self, options: Optional[CrudOptions] = None) -> ErrorList:
        """Delete the object via its own ``do_delete`` hook; children are not visited."""
        options = options or CrudOptions()
        logger.debug(f"Deleting {type(self).__name__}")
        errors = ErrorList()
        try:
            errors.merge_with(self.do_delete(options))
            self._abort_on_critical(errors)
        except ErrorAbortException as ex:
            self._rethrow_with(ex, errors)
        self._log_result("Delete", errors)
        return errors

    async def delete_async(self, options: Optional[CrudOptions] = None,
                           token: Optional[CancellationToken] = None) -> ErrorList:
        options = options or CrudOptions()
        check_cancelled(token)
        logger.debug(f"Deleting {type(self).__name__} asynchronously")
        errors = ErrorList()
        try:
            errors.merge_with(await self.do_delete_async(options, token))
            self._abort_on_critical(errors)
        except ErrorAbortException as ex:
            self._rethrow_with(ex, errors)
        self._log_result("Delete", errors)
        return errors
