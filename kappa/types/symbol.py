from __future__ import annotations
import sys


class Symbol:
    __slots__ = ("id",)

    def __init__(self, name: str):
        # Intern to ensure fast equality/hash and reduce memory
        self.id = sys.intern(name)

    def __eq__(self, other: Symbol) -> bool:
        return isinstance(other, Symbol) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self):
        return f"Symbol({self.id!r})"

    def __str__(self):
        return self.id

    @property
    def is_keyword(self) -> bool:
        """Keywords (:name) are self-evaluating and name keyword arguments."""
        return len(self.id) > 1 and self.id.startswith(":")

    @property
    def keyword_name(self) -> str:
        return self.id[1:] if self.is_keyword else self.id


# Host booleans
TRUE = Symbol("#t")
FALSE = Symbol("#f")


def is_true(value) -> bool:
    """Lisp truthiness: anything other than Nil or #f."""
    from kappa.types.nil import Nil
    return not (value is Nil or value == FALSE)


def to_bool_symbol(flag: bool) -> Symbol:
    return TRUE if flag else FALSE
