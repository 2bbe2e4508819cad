"""Discovery package: resolve a runtime resource type and its watch scope.

Submodules:
    resolver -- group/version + kind to ResourceDescriptor via one discovery query.
    target   -- scope validation producing a WatchTarget.
"""

from kubemirror.discovery.resolver import resolve_descriptor, split_api_version
from kubemirror.discovery.target import check_scope_flags, resolve_target

__all__ = [
    "check_scope_flags",
    "resolve_descriptor",
    "resolve_target",
    "split_api_version",
]
