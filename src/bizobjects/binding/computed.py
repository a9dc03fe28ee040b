"""
Computed bindings keep a derived value or state of a property in sync
with the properties and objects it depends on.

A binding is declared with a plain compute callback and an explicit list
of dependencies. Each dependency may be:

- a property: recompute on any change of it
- a ``(property, PropertyChange)`` tuple: recompute only on the given changes
- a data object: recompute when one of its members is reported changed
- a ``(data object, "member")`` tuple: recompute when that member changes
- a data list object: recompute when its selection changes

The compute callback takes either no arguments or a single ``row`` argument,
which receives the list row the change happened on (or None).
"""
import inspect
import weakref
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from loguru import logger

from ..properties.value_format import PropertyChange, PropertyChangeEventArgs


_NO_ROW = object()


class ComputedBinding(ABC):
    """
    Base class for computed bindings.

    Subclasses implement ``update`` to push the computed result
    into the bound property or object.
    """

    def __init__(self, prop, compute: Callable, dependencies=()):
        if not callable(compute):
            raise TypeError("Computed binding requires a callable")
        self.property = prop
        self.compute = compute
        self._takes_row = self._accepts_row(compute)
        self._properties: Dict[Any, PropertyChange] = {}
        self._objects: Dict[Any, Optional[Set[str]]] = {}
        self._lists: List[Any] = []
        self._last = weakref.WeakKeyDictionary()
        self._last_no_row = _NO_ROW
        for dep in dependencies:
            self._add_dependency(dep)
        self._subscribe()

    @staticmethod
    def _accepts_row(compute: Callable) -> bool:
        try:
            params = inspect.signature(compute).parameters
        except (TypeError, ValueError):
            return False
        return len(params) > 0

    # --- Dependencies ---
    def _add_dependency(self, dep):
        if isinstance(dep, tuple):
            target, what = dep
            if isinstance(what, PropertyChange):
                self._add_property(target, what)
            else:
                self._add_object(target, str(what))
        elif hasattr(dep, "selection_changed"):
            self._lists.append(dep)
            self._add_object(dep, None)
        elif hasattr(dep, "property_changed"):
            self._add_object(dep, None)
        elif hasattr(dep, "change"):
            self._add_property(dep, PropertyChange.ALL)
        else:
            raise TypeError(f"Unsupported computed binding dependency: {dep!r}")

    def _add_property(self, prop, change: PropertyChange):
        if prop in self._properties:
            self._properties[prop] = self._properties[prop] | change
        else:
            self._properties[prop] = change

    def _add_object(self, obj, member: Optional[str]):
        if obj in self._objects:
            members = self._objects[obj]
            if members is None or member is None:
                self._objects[obj] = None
            else:
                members.add(member)
        else:
            self._objects[obj] = None if member is None else {member}

    @property
    def dependencies(self) -> List[Any]:
        return list(self._properties) + [o for o in self._objects if o not in self._lists] + list(self._lists)

    def _subscribe(self):
        for p in self._properties:
            p.change.connect(self._on_property_change)
            p.async_change.connect(self._on_property_change_async)
        for o in self._objects:
            o.property_changed.connect(self._on_object_change)
        for lst in self._lists:
            lst.selection_changed.connect(self._on_selection_change)

    def dispose(self):
        """Unsubscribe from all dependencies."""
        for p in self._properties:
            p.change.disconnect(self._on_property_change)
            p.async_change.disconnect(self._on_property_change_async)
        for o in self._objects:
            o.property_changed.disconnect(self._on_object_change)
        for lst in self._lists:
            lst.selection_changed.disconnect(self._on_selection_change)

    # --- Notification handlers ---
    def _on_property_change(self, sender, args: PropertyChangeEventArgs):
        if args.is_async:
            return
        change = self._properties.get(sender)
        if change is not None and args.change & change:
            self.update(args.row)

    async def _on_property_change_async(self, sender, args: PropertyChangeEventArgs):
        if not args.is_async:
            return
        change = self._properties.get(sender)
        if change is not None and args.change & change:
            await self.update_async(args.row)

    def _on_object_change(self, sender, member: str):
        if sender not in self._objects:
            return
        members = self._objects[sender]
        if members is None or member in members:
            self.update(None)

    def _on_selection_change(self, sender):
        self.update(None)

    # --- Evaluation ---
    def evaluate(self, row=None) -> Any:
        if self._takes_row:
            return self.compute(row)
        return self.compute()

    def _remember(self, row, value) -> Tuple[bool, Any]:
        """Store the latest result for a row and report whether it changed."""
        if row is None:
            old = self._last_no_row
            self._last_no_row = value
        else:
            old = self._last.get(row, _NO_ROW)
            self._last[row] = value
        return old is _NO_ROW or old != value, (None if old is _NO_ROW else old)

    @abstractmethod
    def update(self, row=None):
        """Recompute and apply the result for the given row."""
        pass

    async def update_async(self, row=None):
        self.update(row)


class ComputedStateBinding(ComputedBinding):
    """Boolean computed state of a property: editable, visible or required."""
    change_type = PropertyChange.NONE

    def resolve(self, row=None) -> bool:
        return bool(self.evaluate(row))

    def update(self, row=None):
        value = self.resolve(row)
        changed, old = self._remember(row, value)
        if changed:
            self.property.fire_change(PropertyChangeEventArgs(self.change_type, old, value, row))


class ComputedEditableBinding(ComputedStateBinding):
    change_type = PropertyChange.EDITABLE


class ComputedVisibleBinding(ComputedStateBinding):
    change_type = PropertyChange.VISIBLE


class ComputedRequiredBinding(ComputedStateBinding):
    change_type = PropertyChange.REQUIRED


class ComputedValueBinding(ComputedBinding):
    """Keeps the value of a data property equal to the computed result."""

    def update(self, row=None):
        self.property.set_value(self.evaluate(row), row)

    async def update_async(self, row=None):
        await self.property.set_value_async(self.evaluate(row), row)


class ComputedEditableObjectBinding(ComputedBinding):
    """Drives the object-level editable flag of a data object."""

    def __init__(self, data_object, compute: Callable, dependencies=()):
        if data_object is None:
            raise ValueError("Data object cannot be null")
        super().__init__(data_object, compute, dependencies)

    def resolve(self, row=None) -> bool:
        return bool(self.evaluate(row))

    def update(self, row=None):
        value = self.resolve(row)
        changed, _ = self._remember(None, value)
        if changed:
            logger.debug(f"Computed editable of {type(self.property).__name__} is now {value}")
            self.property.on_editable_changed()
