"""
Pydantic Settings for quickbuild configuration.

Provides settings loading from TOML files, environment variables, and defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .exceptions import ConfigFileError, ConfigValidationError
from .models.config import (
    BuildConfig,
    GateConfig,
    InputsConfig,
    LoggingConfig,
    RunConfig,
    ServicesConfig,
    TestingConfig,
    WorkspaceConfig,
)

CONFIG_DIR_NAME = ".quickbuild"
CONFIG_FILE_NAME = "config.toml"
TOOL_TABLE = "quickbuild"

# Legacy environment variables, honoured when the setting is unset.
LEGACY_SPEC_FILE_VAR = "VSS_SPEC_FILE"
LEGACY_SPEC_URL_VAR = "VSS_SPEC_URL"
LEGACY_VERBOSE_VAR = "VERBOSE_BUILD"


def _get_logger():
    from ..services.logging import NullLogger
    from .di import resolve_or_default
    from .interfaces.logger import ILogger

    return resolve_or_default(ILogger, NullLogger)


def find_config_file(start_dir: str | None = None) -> Path | None:
    """
    Find .quickbuild/config.toml by walking up from start_dir (or cwd).

    Returns:
        Path to config file, or None if not found.
    """
    start = Path(start_dir) if start_dir else Path.cwd()

    for parent in [start, *list(start.parents)]:
        config_path = parent / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

        # Also check for pyproject.toml with [tool.quickbuild] section
        pyproject = parent / "pyproject.toml"
        if pyproject.exists():
            try:
                with open(pyproject, "rb") as f:
                    data = tomllib.load(f)
                if TOOL_TABLE in data.get("tool", {}):
                    return pyproject
            except tomllib.TOMLDecodeError as e:
                _get_logger().debug("Failed to parse pyproject.toml at %s: %s", pyproject, e)
            except OSError as e:
                _get_logger().debug("Failed to read pyproject.toml at %s: %s", pyproject, e)

    return None


class TomlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from TOML config files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        config_path: Path | None = None,
        start_dir: str | None = None,
    ):
        super().__init__(settings_cls)
        self._config_path = config_path
        self._start_dir = start_dir
        self._data: dict[str, Any] | None = None
        self.config_file: str | None = None

    def _load_toml(self) -> dict[str, Any]:
        """Load and cache TOML data."""
        if self._data is not None:
            return self._data

        self._data = {}

        path = self._config_path
        if path is None:
            path = find_config_file(self._start_dir)

        if path is None:
            return self._data

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigFileError(
                f"Failed to parse config file: {e}", file_path=str(path), cause=e
            ) from e
        except OSError as e:
            raise ConfigFileError(
                f"Failed to read config file: {e}", file_path=str(path), cause=e
            ) from e

        if path.name == "pyproject.toml":
            data = data.get("tool", {}).get(TOOL_TABLE, {})

        self._data = data
        self.config_file = str(path)
        return self._data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from TOML data."""
        data = self._load_toml()
        field_value = data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all TOML data for settings initialization."""
        return self._load_toml()


class QuickbuildSettings(BaseSettings):
    """quickbuild configuration settings with TOML and environment variable support.

    Priority (highest to lowest):
    1. Explicit init values
    2. Environment variables (QUICKBUILD_<section>__<field>)
    3. TOML config file (.quickbuild/config.toml or pyproject.toml [tool.quickbuild])
    4. Model defaults
    """

    model_config = {
        "env_prefix": "QUICKBUILD_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    workspace: WorkspaceConfig = WorkspaceConfig()
    inputs: InputsConfig = InputsConfig()
    build: BuildConfig = BuildConfig()
    run: RunConfig = RunConfig()
    services: ServicesConfig = ServicesConfig()
    testing: TestingConfig = TestingConfig()
    gate: GateConfig = GateConfig()
    logging: LoggingConfig = LoggingConfig()
    verbose: bool = False
    quiet: bool = False

    _config_file: str | None = None

    @model_validator(mode="before")
    @classmethod
    def handle_legacy_env_vars(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Map legacy environment variables onto unset settings."""
        inputs = data.get("inputs", {})
        if isinstance(inputs, InputsConfig):
            inputs = inputs.model_dump()
        if isinstance(inputs, dict):
            if os.environ.get(LEGACY_SPEC_FILE_VAR) and not inputs.get("spec_file"):
                inputs["spec_file"] = os.environ[LEGACY_SPEC_FILE_VAR]
            if os.environ.get(LEGACY_SPEC_URL_VAR) and not inputs.get("spec_url"):
                inputs["spec_url"] = os.environ[LEGACY_SPEC_URL_VAR]
            if inputs:
                data["inputs"] = inputs

        if os.environ.get(LEGACY_VERBOSE_VAR) == "1" and "verbose" not in data:
            data["verbose"] = True

        return data

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to add TOML loading.

        Note: config_path/start_dir cannot be passed here directly, so a
        module-level variable carries them.
        """
        global _current_toml_source
        toml_source = TomlConfigSource(
            settings_cls,
            config_path=_current_config_path,
            start_dir=_current_start_dir,
        )
        _current_toml_source = toml_source
        return (
            init_settings,
            env_settings,
            toml_source,
        )

    @property
    def config_file(self) -> str | None:
        """Path of the TOML file the settings were loaded from, if any."""
        return self._config_file


# Module-level variables for passing to settings_customise_sources
_current_config_path: Path | None = None
_current_start_dir: str | None = None
_current_toml_source: TomlConfigSource | None = None


def load_settings(
    config_path: Path | None = None,
    start_dir: str | None = None,
    **overrides: Any,
) -> QuickbuildSettings:
    """Load quickbuild settings from config file and environment.

    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching from (if config_path not given)
        **overrides: Explicit init values (highest priority)

    Returns:
        QuickbuildSettings instance with all sources merged

    Raises:
        ConfigFileError: If the config file cannot be read or parsed
        ConfigValidationError: If a configured value is invalid
    """
    global _current_config_path, _current_start_dir, _current_toml_source

    if config_path is not None and not config_path.exists():
        raise ConfigFileError("Config file not found", file_path=str(config_path))

    _current_config_path = config_path
    _current_start_dir = start_dir

    try:
        settings = QuickbuildSettings(**overrides)
        if _current_toml_source is not None:
            settings._config_file = _current_toml_source.config_file
        return settings
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigValidationError(
            f"Invalid configuration: {first.get('msg', e)}", key=key or None, cause=e
        ) from e
    finally:
        _current_config_path = None
        _current_start_dir = None
        _current_toml_source = None
