"""Structured config schema for Hydra."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import List, Optional

from omegaconf import MISSING

DEFAULT_MAX_ALTERNATIVES = 12
DEFAULT_MAX_DISPLAY = 5


@dataclass
class FieldConfig:
    name: str = MISSING
    # Alias tokens, eg. "SNK" or "scalar+sparse-vector+map".
    shapes: str = MISSING
    # float, int, bool or bin; omitted for label-only fields.
    dtype: Optional[str] = None
    item: Optional[str] = None
    dense: bool = False
    values: bool = False
    broadcast: Optional[str] = None
    labels: List[str] = field(default_factory=list)


@dataclass
class GraphDataConfig:
    max_alternatives: int = DEFAULT_MAX_ALTERNATIVES
    max_display: int = DEFAULT_MAX_DISPLAY
    default_key_kind: str = "index"
    log_level: str = "INFO"
    fields: List[FieldConfig] = field(default_factory=list)


def register_configs() -> None:
    from hydra.core.config_store import ConfigStore

    cs = ConfigStore.instance()
    try:
        cs.store(name="graphdata_schema", node=GraphDataConfig)
    except Exception as exc:
        logging.getLogger(__name__).warning(
            "Hydra config store registration failed: %s", exc
        )


__all__ = [
    "DEFAULT_MAX_ALTERNATIVES",
    "DEFAULT_MAX_DISPLAY",
    "FieldConfig",
    "GraphDataConfig",
    "register_configs",
]
