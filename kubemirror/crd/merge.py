"""Field-level deep merge for typed custom resource specs.

``merge_from`` follows merge-patch semantics specialised per schema:

* an unset (``None``) field in the patch leaves the base value alone;
* a field unset in the base takes the patch value wholesale;
* two nested ``DeepMerge`` values merge recursively, field by field;
* any other value (including required scalars) is replaced by the patch.

The operation is total: it never fails, whatever combination of fields is set.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any, TypeVar

T = TypeVar("T", bound="DeepMerge")


class DeepMerge:
    """Mixin for dataclasses whose fields merge recursively."""

    def merge_from(self, other: Any) -> None:
        """Merge *other* into ``self`` in place; *other* is never modified."""
        for f in dataclasses.fields(self):  # type: ignore[arg-type]
            incoming = getattr(other, f.name)
            if incoming is None:
                continue
            current = getattr(self, f.name)
            if isinstance(current, DeepMerge):
                if incoming is not current:
                    current.merge_from(incoming)
            else:
                setattr(self, f.name, copy.deepcopy(incoming))


def merged(base: T, patch: T) -> T:
    """Return a copy of *base* with *patch* merged on top."""
    result = copy.deepcopy(base)
    result.merge_from(patch)
    return result
