import os
from pathlib import Path

import pytest

from kappa.bridge.runtime import ForeignRuntime
from kappa.config import BridgeConfig, flag_from_env, get_helpers_roots, paths_from_env


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1", True),
        ("true", True),
        (" Yes ", True),
        ("on", True),
        ("0", False),
        ("FALSE", False),
        ("no", False),
        ("off", False),
    ]
)
def test_flag_from_env(raw, expected):
    assert flag_from_env("FLAG", not expected, {"FLAG": raw}) is expected


@pytest.mark.parametrize("environ", [{}, {"FLAG": ""}, {"FLAG": "   "}])
def test_flag_default(environ):
    assert flag_from_env("FLAG", True, environ) is True
    assert flag_from_env("FLAG", False, environ) is False


def test_flag_rejects_garbage():
    with pytest.raises(ValueError):
        flag_from_env("FLAG", True, {"FLAG": "maybe"})


def test_bridge_config_defaults():
    config = BridgeConfig.from_env({})
    assert config == BridgeConfig()
    assert config.preserve_key_order is True
    assert config.collapse_singletons is True


def test_bridge_config_from_env():
    config = BridgeConfig.from_env({"KAPPA_PRESERVE_KEY_ORDER": "0", "KAPPA_COLLAPSE_SINGLETONS": "no"})
    assert config == BridgeConfig(preserve_key_order=False, collapse_singletons=False)


def test_bridge_config_overrides_win():
    config = BridgeConfig.from_env({"KAPPA_PRESERVE_KEY_ORDER": "0"}, preserve_key_order=True, collapse_singletons=None)
    assert config.preserve_key_order is True
    assert config.collapse_singletons is True


def test_bridge_config_is_frozen():
    with pytest.raises(AttributeError):
        BridgeConfig().preserve_key_order = False


def test_runtime_reads_the_process_environment(monkeypatch):
    monkeypatch.setenv("KAPPA_COLLAPSE_SINGLETONS", "off")
    assert ForeignRuntime().config.collapse_singletons is False
    assert ForeignRuntime().to_foreign([1]) == [1]


def test_paths_from_env(monkeypatch):
    monkeypatch.setenv("SOME_PATH", os.pathsep.join(["/a", " /b ", ""]))
    assert paths_from_env("SOME_PATH", [Path("/default")]) == [Path("/a"), Path("/b")]
    monkeypatch.delenv("SOME_PATH")
    assert paths_from_env("SOME_PATH", [Path("/default")]) == [Path("/default")]


def test_helpers_roots_default_to_ext(monkeypatch):
    monkeypatch.delenv("KAPPA_HELPERS_PATH")
    [root] = get_helpers_roots()
    assert root.name == "ext"
    assert (root / "np_helpers.py").is_file()
