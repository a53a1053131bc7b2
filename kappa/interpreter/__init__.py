from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from kappa import SExpression, LispValue
from kappa.bridge.runtime import ForeignRuntime
from kappa.builtin.env_builtin import register
from kappa.config import BridgeConfig
from kappa.errors import KappaError
from kappa.evaluation.apply import apply, resolve_tail
from kappa.evaluation.evaluator import evaluate, evaluate0
from kappa.reader.parser import lex, TokenStream
from kappa.types.environment import Environment
from kappa.types.lambda_fn import Lambda
from kappa.types.nil import Nil

logger = logging.getLogger(__name__)


class Interpreter:
    """
    Reads and evaluates Kappa code.

    Owns one Environment and one ForeignRuntime across calls. The runtime is
    the only path into Python: every call, conversion, handle and scope made
    by code run here goes through it. A runtime belongs to one interpreter:
    it applies Lambdas handed to Python through that interpreter, so passing
    a runtime that another interpreter already owns is an error.
    """

    def __init__(
        self,
        prelude: str | None = None,
        *,
        runtime: Optional[ForeignRuntime] = None,
        config: Optional[BridgeConfig] = None,
    ):
        if runtime is None:
            runtime = ForeignRuntime(config)
        elif runtime.host_apply is not None:
            raise KappaError("The runtime already belongs to another interpreter")
        self.runtime = runtime
        self.env: Environment = Environment(runtime=runtime)
        register(self.env)
        # Lambdas handed to Python are applied back through this interpreter
        self.runtime.host_apply = self._apply_from_python

        if prelude:
            self.eval(prelude)

    def _apply_from_python(self, fn: Lambda, args: list[LispValue]) -> LispValue:
        return resolve_tail(apply(fn, args, self.env, evaluate0, False), evaluate0)

    def eval_expr(self, expr: SExpression) -> LispValue:
        return evaluate(expr, self.env)

    def eval(self, code: str) -> LispValue:
        """Evaluate every form in `code`; a single form returns its value, several a list."""
        stream = TokenStream(lex(code))
        results: list[LispValue] = []
        while (expr := stream.parse_expr()) is not None:
            results.append(self.eval_expr(expr))
        if not results:
            return Nil
        if len(results) == 1:
            return results[0]
        return results

    def load(self, path: str | Path) -> LispValue:
        """Evaluate a source file; returns the value of its last form."""
        path = Path(path)
        logger.debug("loading %s", path)
        stream = TokenStream(lex(path.read_text(encoding="utf-8")))
        result: LispValue = Nil
        while (expr := stream.parse_expr()) is not None:
            result = self.eval_expr(expr)
        return result
