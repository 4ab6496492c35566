from __future__ import annotations

from pathlib import Path

import pytest

from ibancheck.utils.config import DEFAULT_CONFIG_NAME, deep_get, load_yaml, resolve_config_path


def test_load_yaml_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_yaml(tmp_path / "nope.yaml") == {}


def test_load_yaml_empty_file_is_empty(tmp_path: Path) -> None:
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_yaml(p) == {}


def test_load_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    p = tmp_path / "list.yaml"
    p.write_text("- DE\n- GB\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(p)


def test_deep_get() -> None:
    cfg = {"logging": {"level": "INFO"}, "registry": None}
    assert deep_get(cfg, ["logging", "level"]) == "INFO"
    assert deep_get(cfg, ["logging", "log_dir"], "x") == "x"
    assert deep_get(cfg, ["registry", "countries"]) is None


def test_resolve_config_path_priority(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IBANCHECK_CONFIG", raising=False)
    assert resolve_config_path(None) == tmp_path / DEFAULT_CONFIG_NAME
    monkeypatch.setenv("IBANCHECK_CONFIG", "/etc/ibancheck.yaml")
    assert resolve_config_path(None) == Path("/etc/ibancheck.yaml")
    assert resolve_config_path("own.yaml") == Path("own.yaml")
