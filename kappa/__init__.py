# Core type aliases for Kappa's data model.
# Host values are plain Python types (int, float, str, list, tuple-for-dotted-lists,
# dict) plus the few sentinels in kappa.types. Values that belong to the Python
# side of the bridge are carried as kappa.bridge.handles.PyHandle.
#
# Naming guidance:
# - SExpression: reader/parser code, syntactic forms (code-as-data).
# - LispValue:  evaluator/runtime code, evaluated host values.

from typing import Any, Callable

__version__ = "0.3.0"

# Runtime value alias
LispValue = Any
SExpression = LispValue

# Evaluator function type: Python evaluator used inside special forms
EvaluatorFn = Callable[..., LispValue]
