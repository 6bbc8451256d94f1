"""
Workspace preparation.

Cleans prior build output, verifies the fixed configuration artifacts and
applies the specification override to the application manifest.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

from blake3 import blake3

from ...core.di import LazyService
from ...core.exceptions import (
    InvalidSpecificationURL,
    SpecificationFileMissing,
    WorkspaceMisconfigured,
)
from ...core.interfaces.logger import ILogger
from ...core.models.build import SpecSource, SpecSourceKind
from ...core.models.pipeline import PipelineConfig
from ..logging import NullLogger

SIGNAL_INTERFACE_TYPE = "vehicle-signal-interface"


class WorkspacePreparer:
    """Brings the workspace to a buildable state."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(self, config: PipelineConfig, logger: ILogger | None = None) -> None:
        self._config = config
        self.logger = logger

    # -------------------------------------------------------------------------
    # Specification override
    # -------------------------------------------------------------------------

    def resolve_spec_source(self) -> SpecSource:
        """Validate the specification override without touching the workspace.

        A local file beats a remote URL, which beats the built-in default.

        Raises:
            SpecificationFileMissing: If a local file was given but does not exist
            InvalidSpecificationURL: If the URL has no accepted scheme prefix
        """
        spec_file = self._config.spec_file
        if spec_file is not None:
            if not spec_file.is_file():
                raise SpecificationFileMissing(
                    "Specification file not found", path=str(spec_file)
                )
            if self._config.spec_url:
                self.logger.info(
                    "Both a specification file and URL were given; using the file %s", spec_file
                )
            return SpecSource(
                kind=SpecSourceKind.FILE,
                location=str(spec_file),
                fingerprint=f"file:{blake3(spec_file.read_bytes()).hexdigest()}",
            )

        url = self._config.spec_url
        if url is not None:
            if not url.startswith(self._config.accepted_url_schemes):
                raise InvalidSpecificationURL("Invalid VSS URL format", url=url)
            return SpecSource(kind=SpecSourceKind.URL, location=url, fingerprint=f"url:{url}")

        return SpecSource(kind=SpecSourceKind.DEFAULT, fingerprint="default")

    def apply_spec_source(self, spec: SpecSource) -> None:
        """Rewrite the manifest's specification location for a non-default source."""
        if spec.is_default:
            self.logger.info("Using default VSS specification from the manifest")
            return

        if spec.kind == SpecSourceKind.FILE:
            target = self._config.custom_spec_file
            shutil.copyfile(spec.location, target)  # type: ignore[arg-type]
            src = target.absolute().as_uri()
            self.logger.info("Copied custom specification %s to %s", spec.location, target)
        else:
            src = spec.location

        manifest = self._load_manifest()
        interface = self._signal_interface(manifest)
        config = interface.setdefault("config", {})
        if not isinstance(config, dict):
            raise WorkspaceMisconfigured(
                "Manifest interface config is not an object",
                context={"manifest": str(self._config.manifest_file)},
            )
        config["src"] = src
        self._config.manifest_file.write_text(json.dumps(manifest, indent=2) + "\n")
        self.logger.info("Manifest specification source set to %s", src)

    def _load_manifest(self) -> dict[str, Any]:
        path = self._config.manifest_file
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise WorkspaceMisconfigured(
                f"Manifest is not valid JSON: {e}", context={"manifest": str(path)}, cause=e
            ) from e
        if not isinstance(data, dict):
            raise WorkspaceMisconfigured("Manifest is not a JSON object", context={"manifest": str(path)})
        return data

    def _signal_interface(self, manifest: dict[str, Any]) -> dict[str, Any]:
        interfaces = manifest.get("interfaces")
        if not isinstance(interfaces, list) or not interfaces:
            raise WorkspaceMisconfigured(
                "Manifest declares no interfaces to apply the specification override to",
                context={"manifest": str(self._config.manifest_file)},
            )
        for interface in interfaces:
            if isinstance(interface, dict) and interface.get("type") == SIGNAL_INTERFACE_TYPE:
                return interface
        if not isinstance(interfaces[0], dict):
            raise WorkspaceMisconfigured(
                "Manifest interface entry is not an object",
                context={"manifest": str(self._config.manifest_file)},
            )
        return interfaces[0]

    # -------------------------------------------------------------------------
    # Preparation steps
    # -------------------------------------------------------------------------

    def verify_configuration(self) -> None:
        """Raise WorkspaceMisconfigured unless manifest and dependency descriptor exist."""
        required = [self._config.manifest_file, self._config.dependency_descriptor]
        missing = [str(p) for p in required if not p.is_file()]
        if missing:
            raise WorkspaceMisconfigured(
                "Required workspace configuration files are missing", missing=missing
            )

    def clean(self) -> list[Path]:
        """Remove the build output directory and previously produced executables."""
        removed: list[Path] = []
        build_dir = self._config.build_dir
        if build_dir.is_dir():
            shutil.rmtree(build_dir)
            removed.append(build_dir)
        for candidate in self._config.artifact_candidates:
            if candidate.is_file():
                candidate.unlink()
                removed.append(candidate)
        stamp = self._config.stamp_file
        if stamp.is_file():
            stamp.unlink()
            removed.append(stamp)
        for path in removed:
            self.logger.info("Removed %s", path)
        return removed

    def clean_all(self) -> list[Path]:
        """Clean build output plus recorded pipeline metrics."""
        removed = self.clean()
        metrics = self._config.metrics_file
        if metrics.is_file():
            metrics.unlink()
            self.logger.info("Removed %s", metrics)
            removed.append(metrics)
        return removed

    def prepare(self, spec: SpecSource) -> list[Path]:
        """Run the preparation steps in order.

        Returns:
            Paths removed by the clean step (empty unless cleaning was requested)
        """
        removed = self.clean() if self._config.clean else []
        self.verify_configuration()
        self.apply_spec_source(spec)
        return removed
