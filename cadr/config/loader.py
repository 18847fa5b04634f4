"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from .models import AnalysisConfig, ConfigError, ConfigErrorKind

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "cadr.yaml"


class ConfigValidation(BaseModel):
    valid: bool
    errors: list[str] = []


def validate_config(raw: object) -> ConfigValidation:
    """Validate a parsed YAML document against the AnalysisConfig schema."""
    if not isinstance(raw, dict):
        return ConfigValidation(valid=False, errors=["configuration must be a mapping"])
    try:
        AnalysisConfig(**raw)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        ]
        return ConfigValidation(valid=False, errors=errors)
    return ConfigValidation(valid=True)


def read_config(path: str | Path = DEFAULT_CONFIG_PATH) -> AnalysisConfig:
    """Load and validate cadr.yaml, raising ConfigError on any problem."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(ConfigErrorKind.NOT_FOUND, f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(ConfigErrorKind.INVALID, f"Invalid YAML in {path}: {e}") from e

    raw = _expand_env_vars(raw)
    report = validate_config(raw)
    if not report.valid:
        raise ConfigError(
            ConfigErrorKind.INVALID,
            f"Invalid config in {path}: " + "; ".join(report.errors),
        )
    return AnalysisConfig(**raw)


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> AnalysisConfig | None:
    """Load cadr.yaml, returning None (and logging why) when it is unusable."""
    try:
        config = read_config(path)
    except ConfigError as e:
        if e.kind is ConfigErrorKind.NOT_FOUND:
            logger.warning("configuration file not found: %s", path)
        else:
            logger.error("configuration invalid: %s", e)
        return None

    if not os.environ.get(config.api_key_env):
        logger.warning("API key environment variable %s is not set", config.api_key_env)
    logger.info("configuration loaded from %s (provider: %s)", path, config.provider)
    return config


def write_config(config: AnalysisConfig, path: str | Path = DEFAULT_CONFIG_PATH) -> Path:
    """Serialize a config to YAML, omitting unset optional fields."""
    path = Path(path)
    data = config.model_dump(exclude_none=True)
    path.write_text(
        yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    logger.info("configuration written to %s", path)
    return path


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj
