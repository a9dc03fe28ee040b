"""
ComboProperty: read-only text combined from several component properties.

The ``format`` string holds a placeholder per component, numbered by the
component's position in ``set_component_properties``:

- ``{0}`` is replaced with the display string of the first component
- ``{ ($1)}`` shows the second component wrapped in the surrounding text,
  and the whole section disappears when that component is blank

So an address formatted with ``"{0}{, $1}{ $2}"`` reads ``"Paris 75001"``
when the state in the middle is blank, without a stray comma.
"""
import re
from typing import List, Optional

from .data_property import DataProperty
from .value_format import ValueFormat


def _placeholder(index: int) -> "re.Pattern":
    return re.compile(r"\{%d\}|\{([^{}$]*)\$%d(?!\d)([^{}]*)\}" % (index, index))


class ComboProperty(DataProperty):
    """
    Computed, non-editable text property that follows its components.

    Args:
        parent: Owning data object or list object.
        name: Property name.
        format: Format string with ``{n}`` and ``{pre$npost}`` placeholders.
        trim_values: Strip whitespace around component values.
    """

    def __init__(self, parent=None, name: str = "", format: str = "", trim_values: bool = True, **kwargs):
        super().__init__(parent, name, "text", **kwargs)
        self.format = format
        self.trim_values = trim_values
        self.components: List[DataProperty] = []

    def set_component_properties(self, *properties: DataProperty):
        """Combine the given properties from now on; no properties clears the combination."""
        self.components = list(properties)
        self.set_computed_value(self.combine if properties else None, *properties)
        self.set_modified(False)

    def combine(self, row=None) -> Optional[str]:
        """Format the component values for a row, or None when every component is null."""
        if not self.components or all(p.is_null(row) for p in self.components):
            return None
        res = self.format
        for i, prop in enumerate(self.components):
            val = "" if prop.is_null(row) else prop.get_string_value(ValueFormat.DISPLAY_STRING, row)
            if self.trim_values:
                val = val.strip()
            res = _placeholder(i).sub(lambda m: (m.group(1) or "") + val + (m.group(2) or "") if val else "", res)
        return res

    def _store_value(self, old, new, row=None):
        # derived text never marks the object modified
        self._set_internal(new, row)
        if old != new:
            self.reset_validation(row)
