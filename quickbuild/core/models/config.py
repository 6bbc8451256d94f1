"""
Configuration models.

Provides Pydantic models for quickbuild configuration sections with validation.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field, field_validator

from .base import QuickbuildBaseModel

LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_URL_SCHEMES = ["http://", "https://"]


class ConfigBaseModel(QuickbuildBaseModel):
    """Base model for config sections with relaxed strict mode for TOML loading."""

    model_config = ConfigDict(
        strict=False,  # Allow coercion from TOML types
        validate_assignment=True,
        extra="ignore",  # Ignore unknown fields in config files
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


def _split_list(v: Any) -> Any:
    """Parse comma-separated strings (from environment variables) into lists."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


class WorkspaceConfig(ConfigBaseModel):
    """Build workspace layout. Relative paths are resolved against ``root``."""

    root: str = "/quickbuild"
    source_path: str = "app/src/VehicleApp.cpp"
    manifest_path: str = "app/AppManifest.json"
    dependency_descriptor: str = "conanfile.txt"
    build_dir: str = "build"
    model_dir: str = "app/vehicle_model"
    custom_spec_name: str = "custom-vss.json"
    state_dir: str = ".quickbuild"


class InputsConfig(ConfigBaseModel):
    """Source input channels and specification override."""

    primary_file: str = "/app.cpp"
    input_dir: str = "/input"
    input_dir_file: str = "VehicleApp.cpp"
    secondary_file: str = "/input"
    read_stdin: bool = True
    spec_file: str | None = None
    spec_url: str | None = None
    accepted_url_schemes: list[str] = Field(default_factory=lambda: list(DEFAULT_URL_SCHEMES))

    @field_validator("spec_file", "spec_url", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        """Treat empty strings as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("accepted_url_schemes", mode="before")
    @classmethod
    def parse_schemes(cls, v: Any) -> Any:
        """Parse comma-separated string to list."""
        return _split_list(v)


class BuildConfig(ConfigBaseModel):
    """Toolchain commands and build classification."""

    codegen_commands: list[list[str]] = Field(
        default_factory=lambda: [
            ["velocitas", "exec", "vehicle-signal-interface", "download-vspec"],
            ["velocitas", "exec", "vehicle-signal-interface", "generate-model"],
        ]
    )
    install_command: list[str] = Field(
        default_factory=lambda: ["velocitas", "exec", "build-system", "install"]
    )
    compile_command: list[str] = Field(
        default_factory=lambda: ["velocitas", "exec", "build-system", "build", "-r"]
    )
    failure_markers: list[str] = Field(
        default_factory=lambda: [
            "build stopped",
            "compilation terminated",
            "compilation error",
            "CMake Error",
            "make: ***",
            "fatal error:",
        ]
    )
    log_scan: bool = True
    artifact_candidates: list[str] = Field(
        default_factory=lambda: [
            "build/bin/app",
            "build-linux-x86_64/Release/bin/app",
            "app/build/bin/app",
        ]
    )
    freshness_window: Annotated[float, Field(gt=0)] = 300.0
    log_tail_lines: Annotated[int, Field(ge=1)] = 30
    dependency_caches: list[str] = Field(default_factory=lambda: ["~/.conan2", "~/.conan"])
    extra_path: list[str] = Field(default_factory=lambda: ["~/.local/bin"])
    skip_deps: bool = False
    skip_vss: bool = False
    force: bool = False
    clean: bool = False

    @field_validator(
        "failure_markers", "artifact_candidates", "dependency_caches", "extra_path", mode="before"
    )
    @classmethod
    def parse_comma_separated(cls, v: Any) -> Any:
        """Parse comma-separated string to list."""
        return _split_list(v)

    @field_validator("install_command", "compile_command", mode="before")
    @classmethod
    def parse_command(cls, v: Any) -> Any:
        """Split a command given as a single string."""
        if isinstance(v, str):
            return v.split()
        return v


class ServiceEndpointConfig(ConfigBaseModel):
    """An optional external service probed before each run."""

    name: Annotated[str, Field(min_length=1)]
    host: str = "127.0.0.1"
    port: Annotated[int, Field(ge=1, le=65535)]
    env_var: Annotated[str, Field(min_length=1)]
    disabled_value: str = "disabled"

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class RunConfig(ConfigBaseModel):
    """Run supervision settings."""

    timeout: Annotated[float, Field(gt=0)] = 60.0
    grace_period: Annotated[float, Field(ge=0)] = 5.0
    timeout_exit_codes: list[int] = Field(default_factory=lambda: [124])
    error_sample: Annotated[int, Field(ge=1)] = 5


class ServicesConfig(ConfigBaseModel):
    """External service probes."""

    probe_timeout: Annotated[float, Field(gt=0)] = 1.0
    endpoints: list[ServiceEndpointConfig] = Field(
        default_factory=lambda: [
            ServiceEndpointConfig(
                name="mqtt",
                host="127.0.0.1",
                port=1883,
                env_var="SDV_MQTT_ADDRESS",
            ),
            ServiceEndpointConfig(
                name="vehicledatabroker",
                host="127.0.0.1",
                port=55555,
                env_var="SDV_VEHICLEDATABROKER_ADDRESS",
            ),
        ]
    )


class TestingConfig(ConfigBaseModel):
    """Integration test environment settings."""

    __test__ = False

    docker_binary: str = "docker"
    resource_prefix: str = "velocitas-test"
    broker_image: str = "ghcr.io/eclipse-kuksa/kuksa-databroker:latest"
    broker_port: Annotated[int, Field(ge=1, le=65535)] = 55555
    broker_args: list[str] = Field(default_factory=lambda: ["--insecure"])
    client_image: str = "ghcr.io/eclipse-kuksa/kuksa-python-sdk/kuksa-client:main"
    client_command: list[str] = Field(default_factory=lambda: ["kuksa-client"])
    app_image: str = "ubuntu:22.04"
    app_timeout: Annotated[int, Field(ge=1)] = 30
    readiness_attempts: Annotated[int, Field(ge=1)] = 30
    readiness_interval: Annotated[float, Field(ge=0)] = 1.0
    scenario_file: str | None = None


class GateConfig(ConfigBaseModel):
    """Quality gate settings."""

    min_score: Annotated[float, Field(ge=0, le=100)] = 85.0
    strict: bool = False
    metrics_file: str | None = None
    report_file: str | None = None


class LoggingConfig(ConfigBaseModel):
    """Logging configuration section."""

    level: LogLevel = "info"
    console: bool = False
    file: bool = True
    file_path: str = "/tmp/quickbuild.log"
