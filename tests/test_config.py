# MIT License © 2025 Motohiro Suzuki
from pathlib import Path

import pytest

from dhlink.protocol.config import DEFAULT_PARAMS, LinkConfig, load_config
from dhlink.protocol.errors import ConfigError
from dhlink.protocol.types import DHParameters, Role, SecurityLevel

ENV_VARS = ("DHLINK_ROLE", "DHLINK_LEVEL", "DHLINK_RNG_SEED", "DHLINK_AUDIT_LOG", "DHLINK_PORT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = LinkConfig(role="initiator")
    assert cfg.role is Role.INITIATOR
    assert cfg.params == DEFAULT_PARAMS == DHParameters(p=2089, g=2)
    assert cfg.level is SecurityLevel.CLEARTEXT
    assert cfg.send_interval_s == 3.0
    assert cfg.rng_seed is None and cfg.audit_log_path is None


def test_yaml_then_env_then_overrides(tmp_path, monkeypatch):
    path = tmp_path / "link.yml"
    path.write_text(
        "role: responder\nlevel: secured\nparams: {p: 23, g: 5}\nsend_interval_s: 1.5\nport: 9200\n",
        encoding="utf-8",
    )

    cfg = load_config(path)
    assert cfg.role is Role.RESPONDER
    assert cfg.level is SecurityLevel.SECURED
    assert cfg.params == DHParameters(p=23, g=5)
    assert cfg.send_interval_s == 1.5
    assert cfg.port == 9200

    monkeypatch.setenv("DHLINK_ROLE", "initiator")
    monkeypatch.setenv("DHLINK_PORT", "9300")
    cfg = load_config(path)
    assert cfg.role is Role.INITIATOR
    assert cfg.port == 9300

    cfg = load_config(path, role="responder", port=None)
    assert cfg.role is Role.RESPONDER
    assert cfg.port == 9300


def test_role_is_required():
    with pytest.raises(ConfigError):
        load_config()


def test_hardened_level_rejected():
    with pytest.raises(ConfigError):
        load_config(role="initiator", level="hardened")


@pytest.mark.parametrize("params", [{"p": 3, "g": 2}, {"p": "x", "g": 2}, {"p": 23}, [23, 5]])
def test_bad_params_rejected(params):
    with pytest.raises(ConfigError):
        LinkConfig(role="initiator", params=params)


def test_bad_values_rejected(tmp_path):
    with pytest.raises(ConfigError):
        LinkConfig(role="observer")
    with pytest.raises(ConfigError):
        LinkConfig(role="initiator", send_interval_s=0)
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yml")

    bad = tmp_path / "bad.yml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(bad)


def test_seed_from_env(monkeypatch):
    monkeypatch.setenv("DHLINK_RNG_SEED", "42")
    monkeypatch.setenv("DHLINK_AUDIT_LOG", "  ")
    cfg = load_config(role="initiator")
    assert cfg.rng_seed == 42
    assert cfg.audit_log_path is None


def test_shipped_configs_load():
    root = Path(__file__).resolve().parents[1] / "configs"
    ini = load_config(root / "initiator.yml")
    res = load_config(root / "responder.yml")
    assert ini.role is Role.INITIATOR and res.role is Role.RESPONDER
    assert ini.port == res.port
