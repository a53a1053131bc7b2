"""Explicit type hints and pre-marshalled values for the Python bridge."""

from __future__ import annotations

from enum import Enum
from typing import Any


class Hint(Enum):
    """Caller intent the host type system cannot express on its own."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    INTEGER = "integer"
    FLOAT = "float"
    TUPLE = "tuple"
    MAPPING = "mapping"
    ARRAY = "array"

    @classmethod
    def parse(cls, name: str | Hint) -> Hint:
        if isinstance(name, Hint):
            return name
        return cls(name.lstrip(":").lower())


class ForeignValue:
    """A value already in Python form.

    Returned by the explicit conversion helpers (forced sequences, identity-keyed
    mappings, hinted scalars) so that passing it on to a Python call does not
    run the default rules a second time.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self):
        return f"#<py {self.value!r}>"
