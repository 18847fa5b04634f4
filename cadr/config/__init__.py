from .loader import (
    DEFAULT_CONFIG_PATH,
    ConfigValidation,
    load_config,
    read_config,
    validate_config,
    write_config,
)
from .models import AnalysisConfig, ConfigError, ConfigErrorKind

__all__ = [
    "AnalysisConfig",
    "ConfigError",
    "ConfigErrorKind",
    "ConfigValidation",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "read_config",
    "validate_config",
    "write_config",
]
