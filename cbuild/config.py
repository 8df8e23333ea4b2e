"""Configuration loading for cbuild (.cbuild.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError
from .models import BuildOptions

CONFIG_NAME = ".cbuild.yml"


@dataclass
class CBuildConfig:
    """Represents the settings defined in .cbuild.yml."""

    root: Path
    debug: bool = False
    sfx: bool = False
    bundle_path: Optional[str] = None
    source_path: Optional[str] = None
    out_config_path: Optional[str] = None
    include_config_list: List[str] = field(default_factory=list)
    map_packages: List[str] = field(default_factory=list)
    container: Optional[str] = None
    shim_package: Optional[str] = None
    concurrency: Optional[int] = None
    bundler: Optional[str] = None

    def to_options(self, **overrides: Any) -> BuildOptions:
        """Return build options, letting non-empty ``overrides`` win over file values."""
        values: Dict[str, Any] = {}
        for option in fields(BuildOptions):
            value = overrides.get(option.name)
            if value is None or value == []:
                value = getattr(self, option.name)
            if value is None:
                continue
            values[option.name] = value
        return BuildOptions(**values)


def load_config(config_path: Path) -> CBuildConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CBuildConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_NAME} must contain a mapping at the root")

    return CBuildConfig(
        root=root,
        debug=_as_bool(data.get("debug")) or False,
        sfx=_as_bool(data.get("sfx")) or False,
        bundle_path=_as_path(root, data.get("bundle")),
        source_path=_as_path(root, data.get("source")),
        out_config_path=_as_path(root, data.get("out_config")),
        include_config_list=[
            str(root / item) for item in _as_str_list(data.get("include_config"))
        ],
        map_packages=_as_str_list(data.get("map_packages")),
        container=_as_str(data.get("container")),
        shim_package=_as_str(data.get("shim_package")),
        concurrency=_as_int(data.get("concurrency")),
        bundler=_as_str(data.get("bundler")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_NAME).resolve()
    if config_path.name != CONFIG_NAME:
        return (config_path.parent / CONFIG_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_path(root: Path, value: Any) -> Optional[str]:
    text = _as_str(value)
    return str(root / text) if text else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CBuildConfig", "CONFIG_NAME", "load_config"]
