"""
Action property: enablement state of a command, bound like any other property.
"""
from typing import Callable, Optional

from .base import BaseProperty


class ActionProperty(BaseProperty):
    """
    Property representing an action such as Save or Search.

    It can be standalone or registered with a data object, in which case
    the object's editability and access level apply to it.
    """

    def __init__(self, parent=None, name: str = "", settings=None):
        super().__init__(parent, name, settings)
        if parent is not None:
            parent.add_action(self)

    @property
    def enabled(self) -> bool:
        return self.is_editable()

    @enabled.setter
    def enabled(self, value: bool):
        self.set_editable(value)

    def set_computed_enabled(self, compute: Optional[Callable], *dependencies):
        self.set_computed_editable(compute, *dependencies)

    def update_computed_enabled(self):
        self.update_computed_editable()
