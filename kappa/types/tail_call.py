from kappa.types.lambda_fn import Lambda
from kappa.types.environment import Environment


class TailCall:
    """A pending lambda body evaluation, stepped by the evaluator trampoline."""

    __slots__ = ("fn", "env")

    def __init__(self, fn: Lambda, env: Environment):
        self.fn = fn
        self.env = env
