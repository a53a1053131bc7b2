"""The Python bridge: value marshalling, handles and scoped contexts."""

from kappa.bridge.hints import Hint, ForeignValue
from kappa.bridge.handles import PyHandle, ObjectTable
from kappa.bridge.scope import ScopeHandle, ScopeStack
from kappa.bridge.marshal import (
    to_foreign,
    to_host,
    build_forced_sequence,
    build_identity_keyed_mapping,
)
from kappa.bridge.runtime import ForeignRuntime, HostCallable

__all__ = [
    "Hint",
    "ForeignValue",
    "PyHandle",
    "ObjectTable",
    "ScopeHandle",
    "ScopeStack",
    "to_foreign",
    "to_host",
    "build_forced_sequence",
    "build_identity_keyed_mapping",
    "ForeignRuntime",
    "HostCallable",
]
