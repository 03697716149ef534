"""Engine configuration for campaignflow."""

from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict

from .common.exceptions import ConfigurationError
from .constants import (
    DEFAULT_FORM_CACHE_ENABLED,
    DEFAULT_FORM_CACHE_SIZE,
    DEFAULT_LOG_LEVEL,
    ENV_FORM_CACHE_ENABLED,
    ENV_FORM_CACHE_SIZE,
    ENV_HELPER_FIELDS,
    ENV_LOG_LEVEL,
    ENV_SCHEMA_PATH,
    ENV_STANDARD_PATH,
    LOG_LEVELS,
    get_env_bool,
    get_env_int,
    get_env_list,
    get_env_str,
)


class EngineConfigDict(TypedDict, total=False):
    """TypedDict for engine configuration dictionary"""

    schema_path: str | None
    standard_path: str | None
    helper_fields: list[str] | None
    form_cache_enabled: bool
    form_cache_size: int
    log_level: str


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for a CampaignEngine.

    ``None`` paths select the bundled documents; ``None`` helper fields
    select the helper list of the standard definition.
    """

    schema_path: Path | None = None
    standard_path: Path | None = None
    helper_fields: tuple[str, ...] | None = None
    form_cache_enabled: bool = DEFAULT_FORM_CACHE_ENABLED
    form_cache_size: int = DEFAULT_FORM_CACHE_SIZE
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        """Validate configuration after initialization"""
        if self.form_cache_size < 1:
            raise ConfigurationError(
                "form_cache_size must be at least 1", config_key="form_cache_size"
            )
        level = self.log_level.upper()
        if level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log_level '{self.log_level}'. Must be one of: {', '.join(LOG_LEVELS)}",
                config_key="log_level",
            )
        object.__setattr__(self, "log_level", level)
        if self.helper_fields is not None:
            object.__setattr__(self, "helper_fields", tuple(self.helper_fields))

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create configuration from CAMPAIGNFLOW_* environment variables"""
        schema_path = get_env_str(ENV_SCHEMA_PATH)
        standard_path = get_env_str(ENV_STANDARD_PATH)
        return cls(
            schema_path=Path(schema_path).expanduser() if schema_path else None,
            standard_path=Path(standard_path).expanduser() if standard_path else None,
            helper_fields=get_env_list(ENV_HELPER_FIELDS),
            form_cache_enabled=get_env_bool(ENV_FORM_CACHE_ENABLED, DEFAULT_FORM_CACHE_ENABLED),
            form_cache_size=get_env_int(ENV_FORM_CACHE_SIZE, DEFAULT_FORM_CACHE_SIZE),
            log_level=get_env_str(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL,
        )

    @classmethod
    def from_dict(cls, config_dict: EngineConfigDict) -> "EngineConfig":
        """Create configuration from typed dictionary"""
        unknown = set(config_dict) - set(EngineConfigDict.__annotations__)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}",
                config_key=sorted(unknown)[0],
            )

        schema_path = config_dict.get("schema_path")
        standard_path = config_dict.get("standard_path")
        helper_fields = config_dict.get("helper_fields")

        cache_size = config_dict.get("form_cache_size", DEFAULT_FORM_CACHE_SIZE)
        if not isinstance(cache_size, int) or isinstance(cache_size, bool):
            raise ConfigurationError(
                f"form_cache_size must be an integer, got {cache_size!r}",
                config_key="form_cache_size",
            )

        return cls(
            schema_path=Path(schema_path).expanduser() if schema_path else None,
            standard_path=Path(standard_path).expanduser() if standard_path else None,
            helper_fields=tuple(helper_fields) if helper_fields is not None else None,
            form_cache_enabled=bool(config_dict.get("form_cache_enabled", DEFAULT_FORM_CACHE_ENABLED)),
            form_cache_size=cache_size,
            log_level=config_dict.get("log_level", DEFAULT_LOG_LEVEL),
        )

    def to_dict(self) -> EngineConfigDict:
        """Convert configuration to typed dictionary"""
        return EngineConfigDict(
            schema_path=str(self.schema_path) if self.schema_path else None,
            standard_path=str(self.standard_path) if self.standard_path else None,
            helper_fields=list(self.helper_fields) if self.helper_fields is not None else None,
            form_cache_enabled=self.form_cache_enabled,
            form_cache_size=self.form_cache_size,
            log_level=self.log_level,
        )
