"""Cache layer for kubemirror.

Provides the in-memory reflector store fed by the watch pipeline.

Submodules:
    transform -- strips bookkeeping metadata from events before storage.
    store     -- Store: single-writer, many-reader snapshot map.
    reflector -- async combinators folding events into a Store.
"""

from kubemirror.cache.reflector import reflector, touched_objects
from kubemirror.cache.store import Store
from kubemirror.cache.transform import strip_metadata, transform, trim_event

__all__ = ["Store", "reflector", "strip_metadata", "touched_objects", "transform", "trim_event"]
