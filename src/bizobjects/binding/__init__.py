from .computed import (
    ComputedBinding,
    ComputedStateBinding,
    ComputedEditableBinding,
    ComputedVisibleBinding,
    ComputedRequiredBinding,
    ComputedValueBinding,
    ComputedEditableObjectBinding,
)

__all__ = [
    "ComputedBinding",
    "ComputedStateBinding",
    "ComputedEditableBinding",
    "ComputedVisibleBinding",
    "ComputedRequiredBinding",
    "ComputedValueBinding",
    "ComputedEditableObjectBinding",
]
