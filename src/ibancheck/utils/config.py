from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml


DEFAULT_CONFIG_NAME = "ibancheck.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping; a missing or empty file gives {}."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"{path}: invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level of the config must be a mapping")
    return data


def deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def resolve_config_path(explicit: str | None) -> Path:
    """--config wins, then IBANCHECK_CONFIG, then ./ibancheck.yaml."""
    if explicit:
        return Path(explicit)
    env = os.environ.get("IBANCHECK_CONFIG", "").strip()
    if env:
        return Path(env)
    return Path.cwd() / DEFAULT_CONFIG_NAME
