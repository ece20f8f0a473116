"""Active graphdata settings."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from graphdata.config.schema import (
    DEFAULT_MAX_ALTERNATIVES,
    DEFAULT_MAX_DISPLAY,
    FieldConfig,
    GraphDataConfig,
    register_configs,
)

_ACTIVE = GraphDataConfig()


def get_config() -> GraphDataConfig:
    return _ACTIVE


def set_config(cfg: GraphDataConfig) -> GraphDataConfig:
    """Replace the active settings, returning the previous ones."""
    global _ACTIVE
    if not isinstance(cfg, GraphDataConfig):
        raise TypeError("cfg must be a GraphDataConfig instance.")
    previous = _ACTIVE
    _ACTIVE = cfg
    return previous


@contextmanager
def use_config(cfg: GraphDataConfig) -> Iterator[GraphDataConfig]:
    previous = set_config(cfg)
    try:
        yield cfg
    finally:
        set_config(previous)


__all__ = [
    "DEFAULT_MAX_ALTERNATIVES",
    "DEFAULT_MAX_DISPLAY",
    "FieldConfig",
    "GraphDataConfig",
    "register_configs",
    "get_config",
    "set_config",
    "use_config",
]
