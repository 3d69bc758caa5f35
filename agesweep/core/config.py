# agesweep/core/config.py
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

DEFAULT_CONFIG_FILE = "configs/config.yaml"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

class ConfigError(Exception):
    """Raised when the configuration file cannot be read or does not validate."""

class SystemConfig(BaseModel):
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {v!r}; expected one of {', '.join(LOG_LEVELS)}")
        return level

class SweepConfig(BaseModel):
    timestamp: Literal["atime", "mtime"] = "atime"
    confirm_word: str = "yes"

class RootConfig(BaseModel):
    system: SystemConfig = SystemConfig()
    sweep: SweepConfig = SweepConfig()

def load_config(file: Optional[str] = None) -> RootConfig:
    """Load YAML config (if any) and validate against the Pydantic schema.

    Lookup order: explicit ``file``, then ``AGESWEEP_CONFIG``, then
    ``configs/config.yaml``. Only the implicit default may be absent.
    ``AGESWEEP_LOG_LEVEL`` overrides ``system.log_level``.
    """
    load_dotenv()
    explicit = file or os.getenv("AGESWEEP_CONFIG")
    path = Path(explicit or DEFAULT_CONFIG_FILE)

    raw: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read {path}: {e}") from e
    elif explicit:
        raise ConfigError(f"config file {path} not found")

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    level = os.getenv("AGESWEEP_LOG_LEVEL")
    system = raw.get("system") or {}
    if level and isinstance(system, dict):
        raw["system"] = {**system, "log_level": level}

    try:
        return RootConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
