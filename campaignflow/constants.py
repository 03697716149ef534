"""Constants and default values for campaignflow configuration.

This module centralizes the environment variable names and defaults the
engine reads its configuration from.
"""

import os
from typing import Final

from .common.exceptions import ConfigurationError

# =============================================================================
# Environment Variable Names
# =============================================================================

ENV_VAR_PREFIX: Final[str] = "CAMPAIGNFLOW_"

# Documents
ENV_SCHEMA_PATH: Final[str] = f"{ENV_VAR_PREFIX}SCHEMA_PATH"
ENV_STANDARD_PATH: Final[str] = f"{ENV_VAR_PREFIX}STANDARD_PATH"

# Engine settings
ENV_HELPER_FIELDS: Final[str] = f"{ENV_VAR_PREFIX}HELPER_FIELDS"
ENV_FORM_CACHE_ENABLED: Final[str] = f"{ENV_VAR_PREFIX}FORM_CACHE_ENABLED"
ENV_FORM_CACHE_SIZE: Final[str] = f"{ENV_VAR_PREFIX}FORM_CACHE_SIZE"
ENV_LOG_LEVEL: Final[str] = f"{ENV_VAR_PREFIX}LOG_LEVEL"


# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_FORM_CACHE_ENABLED: Final[bool] = True
DEFAULT_FORM_CACHE_SIZE: Final[int] = 128
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# File Format Constants
# =============================================================================

FILE_EXT_YAML: Final[str] = "yaml"
FILE_EXT_YML: Final[str] = "yml"
FILE_EXT_JSON: Final[str] = "json"

BUNDLED_SCHEMA: Final[str] = "iea43-schema.json"
BUNDLED_STANDARD: Final[str] = "standard.yaml"


# =============================================================================
# Boolean String Parsing
# =============================================================================

TRUTHY_VALUES: Final[tuple[str, ...]] = ("true", "1", "yes", "on")
FALSY_VALUES: Final[tuple[str, ...]] = ("false", "0", "no", "off")


# =============================================================================
# Helper Functions
# =============================================================================


def get_env_bool(env_var: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Raises:
        ConfigurationError: If the value is neither truthy nor falsy
    """
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    value = value.strip().lower()
    if value in TRUTHY_VALUES:
        return True
    if value in FALSY_VALUES:
        return False
    raise ConfigurationError(
        f"Invalid boolean for {env_var}: '{value}'", config_section="environment", config_key=env_var
    )


def get_env_int(env_var: str, default: int) -> int:
    """
    Get integer value from environment variable.

    Raises:
        ConfigurationError: If the value is not an integer
    """
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid integer for {env_var}: '{value}'",
            config_section="environment",
            config_key=env_var,
        ) from e


def get_env_str(env_var: str, default: str | None = None) -> str | None:
    """Get string value from environment variable."""
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_env_list(env_var: str) -> tuple[str, ...] | None:
    """Get a comma separated list from environment variable; None when unset."""
    value = os.getenv(env_var)
    if value is None:
        return None
    return tuple(item.strip() for item in value.split(",") if item.strip())


# =============================================================================
# Documentation
# =============================================================================

ENVIRONMENT_VARIABLE_DOCS = """
Environment Variables Reference:

Documents:
  CAMPAIGNFLOW_SCHEMA_PATH         - Canonical schema document (JSON or YAML)
                                     Default: bundled IEA Task 43 schema
  CAMPAIGNFLOW_STANDARD_PATH       - Standard definition (steps, rules)
                                     Default: bundled standard.yaml

Engine Settings:
  CAMPAIGNFLOW_HELPER_FIELDS       - Comma separated helper field names
                                     Default: helper_fields of the standard
  CAMPAIGNFLOW_FORM_CACHE_ENABLED  - Cache form models: true|false
                                     Default: true
  CAMPAIGNFLOW_FORM_CACHE_SIZE     - Maximum cached form models
                                     Default: 128
  CAMPAIGNFLOW_LOG_LEVEL           - CLI log level
                                     Default: WARNING
"""
