"""
Pipeline configuration model.

The immutable configuration every stage receives. It is built once per
invocation from settings plus command-line flags and captures the child
process base environment, so no stage reads the process environment itself.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from pydantic import Field

from .base import ImmutableModel

if TYPE_CHECKING:
    from ..settings import QuickbuildSettings


class InputChannels(ImmutableModel):
    """Input channel locations, in priority order."""

    primary_file: Path
    input_dir: Path
    input_dir_file: Annotated[str, Field(min_length=1)]
    secondary_file: Path
    read_stdin: bool = True


class ServiceEndpoint(ImmutableModel):
    """An optional external dependency probed before launch."""

    name: str
    host: str
    port: int
    env_var: str
    disabled_value: str = "disabled"

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class HarnessSettings(ImmutableModel):
    """Integration test environment settings."""

    docker_binary: str
    resource_prefix: str
    broker_image: str
    broker_port: int
    broker_args: tuple[str, ...]
    client_image: str
    client_command: tuple[str, ...]
    app_image: str
    app_timeout: int
    readiness_attempts: Annotated[int, Field(ge=1)]
    readiness_interval: float


class PipelineConfig(ImmutableModel):
    """Immutable configuration passed to every pipeline stage."""

    workspace: Path
    source_file: Path
    manifest_file: Path
    dependency_descriptor: Path
    build_dir: Path
    model_dir: Path
    state_dir: Path
    custom_spec_file: Path
    inputs: InputChannels

    spec_file: Path | None = None
    spec_url: str | None = None
    accepted_url_schemes: tuple[str, ...] = ("http://", "https://")

    clean: bool = False
    skip_deps: bool = False
    skip_vss: bool = False
    force: bool = False
    verbose: bool = False
    quiet: bool = False

    codegen_commands: tuple[tuple[str, ...], ...]
    install_command: tuple[str, ...]
    compile_command: tuple[str, ...]
    failure_markers: tuple[str, ...]
    log_scan: bool = True
    artifact_candidates: tuple[Path, ...]
    freshness_window: float = 300.0
    log_tail_lines: int = 30
    dependency_caches: tuple[Path, ...] = ()
    extra_path: tuple[str, ...] = ()

    run_timeout: float = 60.0
    grace_period: float = 5.0
    timeout_exit_codes: tuple[int, ...] = (124,)
    error_sample: int = 5
    probe_timeout: float = 1.0
    endpoints: tuple[ServiceEndpoint, ...] = ()

    harness: HarnessSettings
    gate_min_score: float = 85.0
    gate_strict: bool = False

    base_env: dict[str, str] = Field(default_factory=dict)

    @property
    def stamp_file(self) -> Path:
        return self.state_dir / "build-stamp.json"

    @property
    def metrics_file(self) -> Path:
        return self.state_dir / "metrics.json"

    def toolchain_env(self) -> dict[str, str]:
        """Child environment for toolchain commands, with extra PATH entries prepended."""
        env = dict(self.base_env)
        if self.extra_path:
            parts = [*self.extra_path, env.get("PATH", "")]
            env["PATH"] = os.pathsep.join(p for p in parts if p)
        return env

    @classmethod
    def from_settings(
        cls,
        settings: QuickbuildSettings,
        env: Mapping[str, str],
        *,
        workspace: Path | None = None,
        timeout: float | None = None,
        **flags: bool | str | None,
    ) -> PipelineConfig:
        """Build the pipeline configuration.

        Args:
            settings: Loaded settings
            env: Snapshot of the process environment for child processes
            workspace: Workspace root override
            timeout: Run timeout override
            **flags: Command-line overrides (clean, skip_deps, skip_vss, force,
                verbose, quiet, spec_file, spec_url); None means "not given"
        """
        home = Path(env.get("HOME") or Path.home())

        def expand(p: str) -> Path:
            if p.startswith("~"):
                return home / p[1:].lstrip("/")
            return Path(p)

        ws = settings.workspace
        root = (workspace or Path(ws.root)).absolute()

        def in_ws(p: str) -> Path:
            path = expand(p)
            return path if path.is_absolute() else root / path

        def flag(name: str, default: bool) -> bool:
            value = flags.get(name)
            return default if value is None else bool(value)

        spec_file = flags.get("spec_file") or settings.inputs.spec_file
        spec_url = flags.get("spec_url") or settings.inputs.spec_url
        build = settings.build
        testing = settings.testing

        return cls(
            workspace=root,
            source_file=in_ws(ws.source_path),
            manifest_file=in_ws(ws.manifest_path),
            dependency_descriptor=in_ws(ws.dependency_descriptor),
            build_dir=in_ws(ws.build_dir),
            model_dir=in_ws(ws.model_dir),
            state_dir=in_ws(ws.state_dir),
            custom_spec_file=in_ws(ws.custom_spec_name),
            inputs=InputChannels(
                primary_file=Path(settings.inputs.primary_file),
                input_dir=Path(settings.inputs.input_dir),
                input_dir_file=settings.inputs.input_dir_file,
                secondary_file=Path(settings.inputs.secondary_file),
                read_stdin=settings.inputs.read_stdin,
            ),
            spec_file=expand(str(spec_file)) if spec_file else None,
            spec_url=str(spec_url) if spec_url else None,
            accepted_url_schemes=tuple(settings.inputs.accepted_url_schemes),
            clean=flag("clean", build.clean),
            skip_deps=flag("skip_deps", build.skip_deps),
            skip_vss=flag("skip_vss", build.skip_vss),
            force=flag("force", build.force),
            verbose=flag("verbose", settings.verbose),
            quiet=flag("quiet", settings.quiet),
            codegen_commands=tuple(tuple(c) for c in build.codegen_commands),
            install_command=tuple(build.install_command),
            compile_command=tuple(build.compile_command),
            failure_markers=tuple(build.failure_markers),
            log_scan=build.log_scan,
            artifact_candidates=tuple(in_ws(c) for c in build.artifact_candidates),
            freshness_window=float(build.freshness_window),
            log_tail_lines=build.log_tail_lines,
            dependency_caches=tuple(expand(c) for c in build.dependency_caches),
            extra_path=tuple(str(expand(p)) for p in build.extra_path),
            run_timeout=float(timeout if timeout is not None else settings.run.timeout),
            grace_period=float(settings.run.grace_period),
            timeout_exit_codes=tuple(settings.run.timeout_exit_codes),
            error_sample=settings.run.error_sample,
            probe_timeout=float(settings.services.probe_timeout),
            endpoints=tuple(
                ServiceEndpoint(
                    name=e.name,
                    host=e.host,
                    port=e.port,
                    env_var=e.env_var,
                    disabled_value=e.disabled_value,
                )
                for e in settings.services.endpoints
            ),
            harness=HarnessSettings(
                docker_binary=testing.docker_binary,
                resource_prefix=testing.resource_prefix,
                broker_image=testing.broker_image,
                broker_port=testing.broker_port,
                broker_args=tuple(testing.broker_args),
                client_image=testing.client_image,
                client_command=tuple(testing.client_command),
                app_image=testing.app_image,
                app_timeout=testing.app_timeout,
                readiness_attempts=testing.readiness_attempts,
                readiness_interval=float(testing.readiness_interval),
            ),
            gate_min_score=float(settings.gate.min_score),
            gate_strict=settings.gate.strict,
            base_env=dict(env),
        )
