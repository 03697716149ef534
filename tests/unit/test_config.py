"""Unit tests for campaignflow.config.EngineConfig."""

from pathlib import Path

import pytest

from campaignflow.common.exceptions import ConfigurationError
from campaignflow.config import EngineConfig
from campaignflow.constants import (
    DEFAULT_FORM_CACHE_SIZE,
    DEFAULT_LOG_LEVEL,
    ENV_FORM_CACHE_ENABLED,
    ENV_FORM_CACHE_SIZE,
    ENV_HELPER_FIELDS,
    ENV_LOG_LEVEL,
    ENV_SCHEMA_PATH,
    ENV_STANDARD_PATH,
)

ALL_ENV_VARS = (
    ENV_SCHEMA_PATH,
    ENV_STANDARD_PATH,
    ENV_HELPER_FIELDS,
    ENV_FORM_CACHE_ENABLED,
    ENV_FORM_CACHE_SIZE,
    ENV_LOG_LEVEL,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ALL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEngineConfigDefaults:
    """Test suite for default configuration values."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.schema_path is None
        assert config.standard_path is None
        assert config.helper_fields is None
        assert config.form_cache_enabled is True
        assert config.form_cache_size == DEFAULT_FORM_CACHE_SIZE
        assert config.log_level == DEFAULT_LOG_LEVEL

    def test_log_level_is_uppercased(self):
        assert EngineConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError, match="Invalid log_level"):
            EngineConfig(log_level="chatty")

    def test_cache_size_must_be_positive(self):
        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig(form_cache_size=0)

        assert exc_info.value.config_key == "form_cache_size"

    def test_helper_fields_become_tuple(self):
        assert EngineConfig(helper_fields=["unit"]).helper_fields == ("unit",)


class TestEngineConfigFromEnv:
    """Test suite for reading CAMPAIGNFLOW_* variables."""

    def test_empty_environment_gives_defaults(self, clean_env):
        assert EngineConfig.from_env() == EngineConfig()

    def test_reads_all_variables(self, clean_env, tmp_path):
        clean_env.setenv(ENV_SCHEMA_PATH, str(tmp_path / "schema.json"))
        clean_env.setenv(ENV_STANDARD_PATH, str(tmp_path / "standard.yaml"))
        clean_env.setenv(ENV_HELPER_FIELDS, "unit, ui_*,")
        clean_env.setenv(ENV_FORM_CACHE_ENABLED, "off")
        clean_env.setenv(ENV_FORM_CACHE_SIZE, "16")
        clean_env.setenv(ENV_LOG_LEVEL, "info")

        config = EngineConfig.from_env()

        assert config.schema_path == tmp_path / "schema.json"
        assert config.standard_path == tmp_path / "standard.yaml"
        assert config.helper_fields == ("unit", "ui_*")
        assert config.form_cache_enabled is False
        assert config.form_cache_size == 16
        assert config.log_level == "INFO"

    def test_empty_helper_list_disables_helpers(self, clean_env):
        clean_env.setenv(ENV_HELPER_FIELDS, "")

        assert EngineConfig.from_env().helper_fields == ()

    @pytest.mark.parametrize(
        "name,value",
        [(ENV_FORM_CACHE_ENABLED, "maybe"), (ENV_FORM_CACHE_SIZE, "many")],
    )
    def test_invalid_values(self, clean_env, name, value):
        clean_env.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig.from_env()

        assert exc_info.value.config_key == name
        assert exc_info.value.config_section == "environment"


class TestEngineConfigDict:
    """Test suite for dictionary conversion."""

    def test_from_dict(self):
        config = EngineConfig.from_dict(
            {"schema_path": "schema.json", "helper_fields": ["unit"], "form_cache_size": 4}
        )

        assert config.schema_path == Path("schema.json")
        assert config.helper_fields == ("unit",)
        assert config.form_cache_size == 4

    def test_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys: colour"):
            EngineConfig.from_dict({"colour": "blue"})

    @pytest.mark.parametrize("size", ["8", True, 2.5])
    def test_non_integer_cache_size(self, size):
        with pytest.raises(ConfigurationError, match="must be an integer"):
            EngineConfig.from_dict({"form_cache_size": size})

    def test_to_dict_round_trip(self):
        config = EngineConfig(
            schema_path=Path("schema.json"), helper_fields=("unit",), form_cache_enabled=False
        )

        data = config.to_dict()

        assert data == {
            "schema_path": "schema.json",
            "standard_path": None,
            "helper_fields": ["unit"],
            "form_cache_enabled": False,
            "form_cache_size": DEFAULT_FORM_CACHE_SIZE,
            "log_level": DEFAULT_LOG_LEVEL,
        }
        assert EngineConfig.from_dict(data) == config
