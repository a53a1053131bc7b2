import os

import pytest

from kappa.bridge.runtime import ForeignRuntime
from kappa.config import BridgeConfig
from kappa.interpreter import Interpreter

# Helper modules used by the interop tests live in <repo>/ext
EXT_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "ext")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    # Keep the developer's shell settings out of the tests
    for var in ("KAPPA_PRESERVE_KEY_ORDER", "KAPPA_COLLAPSE_SINGLETONS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("KAPPA_HELPERS_PATH", EXT_DIR)


@pytest.fixture
def runtime():
    return ForeignRuntime(BridgeConfig())


@pytest.fixture
def itp():
    return Interpreter()
