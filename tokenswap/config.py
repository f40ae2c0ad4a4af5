"""
Deployment configuration.

A config file is a small YAML mapping:

    program_id: "0x..."          # 32-byte hex address of the swap program
    constraints:
      fee_multiplier: 3           # trade fee denominator must exceed numerator * this
    log_level: INFO

Unknown keys are rejected so typos do not silently fall back to defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .core.constraints import DEFAULT_FEE_MULTIPLIER, SwapConstraints
from .state.canonical import address_from_hex

_TOP_LEVEL_KEYS = frozenset({"program_id", "constraints", "log_level"})
_CONSTRAINT_KEYS = frozenset({"fee_multiplier"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class SwapConfig:
    program_id: bytes
    constraints: SwapConstraints = field(default_factory=SwapConstraints)
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not isinstance(self.program_id, bytes) or len(self.program_id) != 32:
            raise ValueError("program_id must be 32 bytes")
        if not isinstance(self.constraints, SwapConstraints):
            raise TypeError("constraints must be SwapConstraints")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"unknown log_level: {self.log_level!r}")


def _reject_unknown(obj: Mapping[str, Any], allowed: frozenset, *, where: str) -> None:
    unknown = sorted(set(obj) - allowed)
    if unknown:
        raise ValueError(f"unknown {where} keys: {', '.join(map(str, unknown))}")


def config_from_mapping(obj: Any) -> SwapConfig:
    if not isinstance(obj, Mapping):
        raise TypeError("config must be a mapping")
    _reject_unknown(obj, _TOP_LEVEL_KEYS, where="config")

    program_id_hex = obj.get("program_id")
    if not isinstance(program_id_hex, str):
        raise TypeError("program_id must be a hex string")
    program_id = address_from_hex(program_id_hex, name="program_id")

    constraints_obj = obj.get("constraints") or {}
    if not isinstance(constraints_obj, Mapping):
        raise TypeError("constraints must be a mapping")
    _reject_unknown(constraints_obj, _CONSTRAINT_KEYS, where="constraints")
    fee_multiplier = constraints_obj.get("fee_multiplier", DEFAULT_FEE_MULTIPLIER)

    log_level = obj.get("log_level", "WARNING")
    if not isinstance(log_level, str):
        raise TypeError("log_level must be a string")

    return SwapConfig(
        program_id=program_id,
        constraints=SwapConstraints(fee_multiplier=fee_multiplier),
        log_level=log_level.upper(),
    )


def load_config(path: Union[str, Path]) -> SwapConfig:
    with open(path, "r", encoding="utf-8") as f:
        obj = yaml.safe_load(f)
    return config_from_mapping(obj)


def configure_logging(config: SwapConfig) -> None:
    """Apply ``config.log_level`` to the package logger."""
    logging.getLogger("tokenswap").setLevel(config.log_level)
