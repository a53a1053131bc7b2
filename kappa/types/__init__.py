from kappa.types.nil import Nil, NilType
from kappa.types.symbol import Symbol, TRUE, FALSE, is_true, to_bool_symbol
from kappa.types.environment import Environment
from kappa.types.lambda_fn import Lambda
from kappa.types.tail_call import TailCall

__all__ = [
    "Nil",
    "NilType",
    "Symbol",
    "TRUE",
    "FALSE",
    "is_true",
    "to_bool_symbol",
    "Environment",
    "Lambda",
    "TailCall",
]
