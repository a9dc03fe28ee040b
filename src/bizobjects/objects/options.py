"""
Options controlling CRUD operations on data objects and lists.
"""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class CrudOptions:
    """
    Attributes:
        recursive: Repeat the operation for child objects.
        abort_on_errors: Stop processing further children once errors are present.
        parallel: Run child operations concurrently (async operations only).
        preserve_selection: Keep selected list rows across a read.
    """
    recursive: bool = True
    abort_on_errors: bool = True
    parallel: bool = False
    preserve_selection: bool = True


@dataclass
class ReadOptions(CrudOptions):
    """
    Read options for list objects.

    Attributes:
        is_reload: Re-read with the previously applied criteria, keeping the page.
        is_paging: Read another page with the previously applied criteria.
        criteria: Criteria object to apply instead of the list's own.
    """
    is_reload: bool = False
    is_paging: bool = False
    criteria: Optional[Any] = field(default=None, repr=False)
