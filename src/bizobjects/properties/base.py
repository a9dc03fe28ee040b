"""
Base property: editable, visible, required and access level state.

Each of the editable, visible and required flags resolves as
``local flag AND parent delegation AND access level threshold``, where the
local flag is either set manually or computed from a binding.
"""
import re
from typing import Callable, Optional

from loguru import logger

from ..binding.computed import (
    ComputedEditableBinding,
    ComputedRequiredBinding,
    ComputedVisibleBinding,
)
from ..core.config import ModelSettings
from ..core.events import AsyncSignal, Signal
from .value_format import AccessLevel, PropertyChange, PropertyChangeEventArgs


def split_pascal_case(name: str) -> str:
    """Convert a Pascal-cased name to space-separated words."""
    res = re.sub(r"([a-z])([A-Z])", r"\1 \2", name)
    res = re.sub(r"([A-Z][A-Z])([A-Z])([a-z])", r"\1 \2\3", res)
    return res


class BaseProperty:
    """
    Base class for all properties of a data object.

    Args:
        parent: Owning data object, or None for a standalone property.
        name: Name of the property, unique within the parent.
        settings: Settings to use when the property has no parent.
    """

    def __init__(self, parent=None, name: str = "", settings: Optional[ModelSettings] = None):
        self.parent = parent
        self.name = name
        self.label: Optional[str] = None
        self.is_key = False
        self._settings = settings

        self.change = Signal(f"{name}.Change")
        self.async_change = AsyncSignal(f"{name}.AsyncChange")

        self._editable = True
        self._visible = True
        self._required = False
        self._editing = False
        self._access_level = AccessLevel.FULL

        self._computed_editable: Optional[ComputedEditableBinding] = None
        self._computed_visible: Optional[ComputedVisibleBinding] = None
        self._computed_required: Optional[ComputedRequiredBinding] = None

    def initialize(self):
        """Additional initialization after the parent object is fully constructed."""
        pass

    @property
    def settings(self) -> ModelSettings:
        if self._settings is None:
            if self.parent is not None:
                return self.parent.settings
            self._settings = ModelSettings()
        return self._settings

    @settings.setter
    def settings(self, value: ModelSettings):
        self._settings = value

    def __str__(self):
        if self.label is not None:
            return self.label
        return split_pascal_case(self.name)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

    # --- Notifications ---
    def fire_change(self, args: PropertyChangeEventArgs):
        self.change.emit(self, args)

    async def fire_change_async(self, args: PropertyChangeEventArgs):
        """Notify synchronous listeners, then await the asynchronous ones."""
        args.is_async = True
        self.change.emit(self, args)
        await self.async_change.emit(self, args)

    def _in_list(self) -> bool:
        return getattr(self.parent, "is_list", False)

    # --- Editable ---
    def _local_editable(self, row=None) -> bool:
        if self._computed_editable is not None:
            return self._computed_editable.resolve(row)
        return self._editable

    def is_editable(self, row=None) -> bool:
        b = self._local_editable(row)
        if self.parent is not None:
            b = b and self.parent.is_property_editable(self, row)
        return b and self.access_level > AccessLevel.READ_ONLY

    def set_editable(self, value: bool, row=None):
        if self._computed_editable is not None:
            logger.warning(f"Ignoring manual editable change of '{self.name}': it is computed")
            return
        old = self.is_editable(row)
        self._store_editable(value, row)
        new = self.is_editable(row)
        if new != old:
            self.fire_change(PropertyChangeEventArgs(PropertyChange.EDITABLE, old, new, row))

    def _store_editable(self, value: bool, row=None):
        self._editable = value

    @property
    def editable(self) -> bool:
        return self.is_editable()

    @editable.setter
    def editable(self, value: bool):
        self.set_editable(value)

    def set_computed_editable(self, compute: Optional[Callable], *dependencies):
        """
        Make the editable flag computed from the given dependencies.

        Args:
            compute: Callback returning a bool, optionally taking the row.
                Passing None restores manual editability.
            *dependencies: Properties or objects the result depends on.
        """
        if self._computed_editable is not None:
            self._computed_editable.dispose()
            self._computed_editable = None
        if compute is not None:
            self._computed_editable = ComputedEditableBinding(self, compute, dependencies)
            if not self._in_list():
                self._computed_editable.update()

    def update_computed_editable(self, row=None):
        if self._computed_editable is not None:
            self._computed_editable.update(row)

    # --- Editing ---
    def is_editing(self, row=None) -> bool:
        return self._editing

    def set_editing(self, value: bool, row=None):
        old = self.is_editing(row)
        self._store_editing(value, row)
        if value != old:
            change = PropertyChange.EDITING
            if not value:
                change |= PropertyChange.VALUE
            self.fire_change(PropertyChangeEventArgs(change, old, value, row))

    def _store_editing(self, value: bool, row=None):
        self._editing = value

    @property
    def editing(self) -> bool:
        return self.is_editing()

    @editing.setter
    def editing(self, value: bool):
        self.set_editing(value)

    # --- Visible ---
    def is_visible(self, row=None) -> bool:
        if self._computed_visible is not None:
            b = self._computed_visible.resolve(row)
        else:
            b = self._visible
        if self.parent is not None:
            b = b and self.parent.is_property_visible(self, row)
        return b and self.access_level > AccessLevel.NONE

    def set_visible(self, value: bool, row=None):
        if self._computed_visible is not None:
            logger.warning(f"Ignoring manual visible change of '{self.name}': it is computed")
            return
        old = self.is_visible(row)
        self._visible = value
        new = self.is_visible(row)
        if new != old:
            self.fire_change(PropertyChangeEventArgs(PropertyChange.VISIBLE, old, new, row))

    @property
    def visible(self) -> bool:
        return self.is_visible()

    @visible.setter
    def visible(self, value: bool):
        self.set_visible(value)

    def set_computed_visible(self, compute: Optional[Callable], *dependencies):
        if self._computed_visible is not None:
            self._computed_visible.dispose()
            self._computed_visible = None
        if compute is not None:
            self._computed_visible = ComputedVisibleBinding(self, compute, dependencies)
            if not self._in_list():
                self._computed_visible.update()

    def update_computed_visible(self, row=None):
        if self._computed_visible is not None:
            self._computed_visible.update(row)

    # --- Required ---
    def is_required(self, row=None) -> bool:
        if self._computed_required is not None:
            b = self._computed_required.resolve(row)
        else:
            b = self._required
        if self.parent is not None:
            b = b and self.parent.is_property_required(self, row)
        return b

    def set_required(self, value: bool, row=None):
        if self._computed_required is not None:
            logger.warning(f"Ignoring manual required change of '{self.name}': it is computed")
            return
        old = self.is_required(row)
        self._required = value
        new = self.is_required(row)
        if new != old:
            self.fire_change(PropertyChangeEventArgs(PropertyChange.REQUIRED, old, new, row))

    @property
    def required(self) -> bool:
        return self.is_required()

    @required.setter
    def required(self, value: bool):
        self.set_required(value)

    def set_computed_required(self, compute: Optional[Callable], *dependencies):
        if self._computed_required is not None:
            self._computed_required.dispose()
            self._computed_required = None
        if compute is not None:
            self._computed_required = ComputedRequiredBinding(self, compute, dependencies)
            if not self._in_list():
                self._computed_required.update()

    def update_computed_required(self, row=None):
        if self._computed_required is not None:
            self._computed_required.update(row)

    # --- Security ---
    @property
    def access_level(self) -> AccessLevel:
        return self._access_level

    @access_level.setter
    def access_level(self, value: AccessLevel):
        old = self._access_level
        self._access_level = AccessLevel(value)
        self.fire_change(PropertyChangeEventArgs(
            PropertyChange.EDITABLE | PropertyChange.VISIBLE, old, self._access_level))

    def is_restricted(self) -> bool:
        return self.access_level == AccessLevel.NONE
