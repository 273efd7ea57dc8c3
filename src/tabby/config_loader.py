"""Load TabbyConfig from tabby.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from tabby._errors import ConfigurationError
from tabby.config import TabbyConfig

_KNOWN_KEYS = frozenset({
    "runtime_dir", "templates_dir", "output", "minifier", "pixi", "cocos",
})


def load_config(root: Path, **overrides: object) -> TabbyConfig:
    """Load TabbyConfig from root, optionally merging tabby.yaml.

    Looks for tabby.yaml, tabby.yml, or tabby.toml in root. If found, loads
    and merges with overrides. Overrides take precedence.  ``None`` values
    in overrides are ignored so CLI flags left unset do not mask the file.
    """
    file_config = _read_tabby_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    unknown = sorted(set(merged) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown configuration keys: {', '.join(unknown)}"
        raise ConfigurationError(msg, stage="config")
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    if "minifier" in merged:
        merged["minifier"] = _normalize_command(merged["minifier"])
    return TabbyConfig(root=root, **merged)


def _read_tabby_config(root: Path) -> dict[str, object]:
    """Read tabby config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("tabby.yaml", "tabby.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "tabby.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigurationError(msg, stage="config", artifact=str(path)) from exc
    if not isinstance(data, dict):
        msg = f"Expected a mapping at the top of {path}"
        raise ConfigurationError(msg, stage="config", artifact=str(path))
    return _flatten_tabby_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigurationError(msg, stage="config", artifact=str(path)) from exc
    return _flatten_tabby_section(data)


def _flatten_tabby_section(data: dict[str, object]) -> dict[str, object]:
    """Extract tabby.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("tabby")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "tabby" and k in _KNOWN_KEYS:
            result[k] = v
    return result


def _normalize_command(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, (list, tuple)):
        return tuple(str(part) for part in value)
    msg = f"minifier must be a string or a list, got {type(value).__name__}"
    raise ConfigurationError(msg, stage="config", artifact="minifier")
