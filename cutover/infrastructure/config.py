"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to all Cutover settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os
from cutover.application.orchestration.plan_builder import DEFAULT_REWIND_FAILURE_MESSAGE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CFConfig:
    """cf CLI invocation settings."""
    binary: str = "cf"
    ssh_host: str = ""  # run cf on this jump host instead of locally
    ssh_user: str = "root"
    ssh_port: int = 22
    command_timeout: int = 0  # seconds, 0 disables


@dataclass(frozen=True)
class RolloutConfig:
    """Rollout defaults."""
    keep_old_app: bool = False
    show_app_log: bool = False
    rewind_failure_message: str = DEFAULT_REWIND_FAILURE_MESSAGE


@dataclass(frozen=True)
class CutoverConfig:
    """Root configuration for the Cutover application."""
    cf: CFConfig = field(default_factory=CFConfig)
    rollout: RolloutConfig = field(default_factory=RolloutConfig)
    log_level: str = "WARNING"


def _env_override(data: dict, prefix: str = "CUTOVER") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern CUTOVER_SECTION_KEY.
    For example: CUTOVER_CF_SSH_HOST=bastion, CUTOVER_ROLLOUT_KEEP_OLD_APP=true
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        parts = key[len(prefix) + 1:].lower().split("_", 1)
        if len(parts) == 2 and parts[0] in ("cf", "rollout"):
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
        else:
            data["_".join(parts)] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Convert string numbers to int/bool
    for f in dataclasses.fields(cls):
        if f.name in filtered and isinstance(filtered[f.name], str):
            if f.type == "int":
                filtered[f.name] = int(filtered[f.name])
            elif f.type == "bool":
                filtered[f.name] = filtered[f.name].lower() in ("true", "1", "yes")

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "CUTOVER",
) -> CutoverConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (CUTOVER_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to cutover.json in CWD.
        env_prefix: Environment variable prefix. Defaults to CUTOVER.
    """
    config_path = Path(path) if path else Path("cutover.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return CutoverConfig(
        cf=_build_sub_config(CFConfig, data.get("cf", {})),
        rollout=_build_sub_config(RolloutConfig, data.get("rollout", {})),
        log_level=data.get("log_level", "WARNING"),
    )
