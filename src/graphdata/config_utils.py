"""Hydra config composition and structured config loading."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from pathlib import Path
from typing import Any, Optional, Union

from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra
from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException

from graphdata.aliases import resolve_aliases
from graphdata.config import set_config
from graphdata.config.schema import GraphDataConfig, register_configs
from graphdata.errors import ConfigError, SchemaError
from graphdata.logging_utils import DEFAULT_LOGGER_NAME, configure_logging
from graphdata.types import KeyKind

DEFAULT_CONFIG_PATH = "configs"
DEFAULT_CONFIG_NAME = "graphdata"


def _normalize_config_name(config_name: str) -> str:
    if config_name.endswith((".yaml", ".yml")):
        return Path(config_name).stem
    return config_name


def _config_dir(config_path: Union[Path, str]) -> Path:
    config_dir = Path(config_path)
    if not config_dir.is_absolute():
        config_dir = (Path.cwd() / config_dir).resolve()
    if not config_dir.exists():
        raise ConfigError(f"Config directory not found: {config_dir}")
    return config_dir


def compose_config(
    *,
    config_path: Union[Path, str] = DEFAULT_CONFIG_PATH,
    config_name: str = DEFAULT_CONFIG_NAME,
    overrides: Optional[Sequence[str]] = None,
) -> DictConfig:
    register_configs()
    config_dir = _config_dir(config_path)
    if GlobalHydra.instance().is_initialized():
        GlobalHydra.instance().clear()
    with initialize_config_dir(config_dir=str(config_dir), version_base=None):
        return compose(
            config_name=_normalize_config_name(config_name),
            overrides=list(overrides or []),
        )


def resolve_config(cfg: Any) -> dict[str, Any]:
    if not OmegaConf.is_config(cfg):
        if isinstance(cfg, Mapping):
            return dict(cfg)
        raise ConfigError("Config must be a mapping or an OmegaConf config.")
    resolved = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=False)
    if not isinstance(resolved, dict):
        raise ConfigError("Resolved config must be a mapping.")
    return resolved


def to_graphdata_config(cfg: Any) -> GraphDataConfig:
    """Merge a raw config over the structured defaults and validate it."""
    schema = OmegaConf.structured(GraphDataConfig)
    try:
        if cfg is not None:
            if not OmegaConf.is_config(cfg):
                cfg = OmegaConf.create(dict(cfg))
            schema = OmegaConf.merge(schema, cfg)
        result = OmegaConf.to_object(schema)
    except OmegaConfBaseException as exc:
        raise ConfigError(f"Invalid graphdata config: {exc}") from exc
    if not isinstance(result, GraphDataConfig):
        raise ConfigError("Config did not resolve to a GraphDataConfig.")
    validate_config(result)
    return result


def validate_config(cfg: GraphDataConfig) -> None:
    if cfg.max_alternatives < 2:
        raise ConfigError(
            f"max_alternatives must be >= 2, got {cfg.max_alternatives}."
        )
    if cfg.max_display < 2:
        raise ConfigError(f"max_display must be >= 2, got {cfg.max_display}.")
    if not isinstance(logging.getLevelName(str(cfg.log_level).upper()), int):
        raise ConfigError(f"Invalid log_level: {cfg.log_level!r}.")
    try:
        KeyKind.from_any(cfg.default_key_kind)
    except ValueError as exc:
        raise ConfigError(f"Invalid default_key_kind: {exc}") from exc
    names: set[str] = set()
    for entry in cfg.fields:
        if entry.name in names:
            raise ConfigError(f"Field '{entry.name}' is declared twice.")
        names.add(entry.name)
        try:
            resolve_aliases(entry.shapes, entry.dtype)
        except SchemaError as exc:
            raise ConfigError(
                f"Invalid shapes for field '{entry.name}': {exc}"
            ) from exc
        if entry.broadcast not in (None, "row", "col"):
            raise ConfigError(
                f"Invalid broadcast for field '{entry.name}': {entry.broadcast!r}."
            )


def load_config(
    path: Optional[Union[Path, str]] = None,
    overrides: Optional[Sequence[str]] = None,
) -> GraphDataConfig:
    """Load a YAML config file (or only the defaults) with dotlist overrides."""
    try:
        raw = OmegaConf.create()
        if path is not None:
            config_path = Path(path)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_path}")
            raw = OmegaConf.load(config_path)
            if isinstance(raw, DictConfig) and "defaults" in raw:
                # Hydra defaults lists only apply when composing.
                raw.pop("defaults")
        if overrides:
            raw = OmegaConf.merge(raw, OmegaConf.from_dotlist(list(overrides)))
    except OmegaConfBaseException as exc:
        raise ConfigError(f"Failed to read graphdata config: {exc}") from exc
    return to_graphdata_config(raw)


def apply_config(cfg: GraphDataConfig) -> GraphDataConfig:
    """Activate the settings and their log level, returning the previous settings."""
    validate_config(cfg)
    previous = set_config(cfg)
    configure_logging(cfg.log_level, logger_name=DEFAULT_LOGGER_NAME)
    return previous


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_NAME",
    "compose_config",
    "resolve_config",
    "to_graphdata_config",
    "validate_config",
    "load_config",
    "apply_config",
]
