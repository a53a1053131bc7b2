"""Opaque references to Python objects held on the host side.

The ForeignRuntime owns every Python object that has no host representation
(modules, classes, DataFrames, sessions, placeholders...). The host only ever
sees a PyHandle: a reference id into the runtime's ObjectTable. Reading an
attribute or calling through a handle always goes back to the live object;
nothing is cached or copied host-side.

The table keeps a strong reference to every registered object until the
handle is released with `py-release` (or `ForeignRuntime.release`). Programs
that run for a long time should release handles to transient results.
"""

from __future__ import annotations

import logging
from itertools import count
from typing import Any

from kappa.errors import KappaStaleHandle

logger = logging.getLogger(__name__)


class ObjectTable:
    """Reference table of Python objects owned by a runtime.

    Objects are interned by identity: registering the same object twice yields
    the same reference id, so handles to one object compare equal.
    """

    def __init__(self):
        self._objects: dict[int, Any] = {}
        self._by_identity: dict[int, int] = {}
        self._refs = count(1)

    def register(self, obj: Any) -> int:
        ref = self._by_identity.get(id(obj))
        if ref is not None:
            return ref
        ref = next(self._refs)
        self._objects[ref] = obj
        # id() is stable while the table holds the object
        self._by_identity[id(obj)] = ref
        logger.debug("registered %s as handle %d", type(obj).__name__, ref)
        return ref

    def get(self, ref: int) -> Any:
        try:
            return self._objects[ref]
        except KeyError:
            raise KappaStaleHandle(f"Handle {ref} has been released") from None

    def release(self, ref: int) -> bool:
        if ref not in self._objects:
            return False
        obj = self._objects.pop(ref)
        self._by_identity.pop(id(obj), None)
        logger.debug("released handle %d", ref)
        return True

    def __contains__(self, ref: int) -> bool:
        return ref in self._objects

    def __len__(self) -> int:
        return len(self._objects)


class PyHandle:
    """Non-owning host reference to a runtime-owned Python object."""

    __slots__ = ("ref", "_table")

    def __init__(self, ref: int, table: ObjectTable):
        self.ref = ref
        self._table = table

    @property
    def target(self) -> Any:
        """The live Python object. Raises KappaStaleHandle once released."""
        return self._table.get(self.ref)

    @property
    def alive(self) -> bool:
        return self.ref in self._table

    def owned_by(self, table: ObjectTable) -> bool:
        return self._table is table

    def __eq__(self, other) -> bool:
        return isinstance(other, PyHandle) and other._table is self._table and other.ref == self.ref

    def __hash__(self) -> int:
        return hash((id(self._table), self.ref))

    def __repr__(self) -> str:
        if not self.alive:
            return f"#<py-handle {self.ref} released>"
        return f"#<py-handle {self.ref} {type(self.target).__name__}>"
