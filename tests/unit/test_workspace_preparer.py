"""
Unit tests for workspace preparation.

Tests verify:
- Specification override precedence: file over URL over default
- URL scheme validation and missing spec files fail before any change
- Manifest rewriting targets the signal interface entry
- Cleaning removes build output, the stamp and (for clean_all) metrics
"""

import json

import pytest

from quickbuild.core.exceptions import (
    InvalidSpecificationURL,
    SpecificationFileMissing,
    WorkspaceMisconfigured,
)
from quickbuild.core.models.build import SpecSourceKind
from quickbuild.services.workspace import WorkspacePreparer


def _signal_src(workspace) -> str:
    manifest = json.loads(workspace.manifest.read_text())
    return manifest["interfaces"][1]["config"]["src"]


class TestSpecSource:
    """Tests for resolve_spec_source."""

    def test_default_when_nothing_given(self, make_config):
        spec = WorkspacePreparer(make_config()).resolve_spec_source()

        assert spec.is_default
        assert spec.location is None

    def test_file_beats_url(self, tmp_path, make_config):
        spec_file = tmp_path / "vss.json"
        spec_file.write_text("{}")

        spec = WorkspacePreparer(
            make_config(spec_file=str(spec_file), spec_url="https://example.com/vss.json")
        ).resolve_spec_source()

        assert spec.kind == SpecSourceKind.FILE
        assert spec.location == str(spec_file)
        assert spec.fingerprint.startswith("file:")

    def test_file_fingerprint_follows_content(self, tmp_path, make_config):
        spec_file = tmp_path / "vss.json"
        spec_file.write_text("{}")
        preparer = WorkspacePreparer(make_config(spec_file=str(spec_file)))
        first = preparer.resolve_spec_source().fingerprint

        spec_file.write_text('{"Vehicle": {}}')

        assert preparer.resolve_spec_source().fingerprint != first

    def test_missing_file_is_an_error(self, tmp_path, make_config):
        """A spec file that does not exist fails instead of silently using the default."""
        preparer = WorkspacePreparer(make_config(spec_file=str(tmp_path / "missing.json")))

        with pytest.raises(SpecificationFileMissing):
            preparer.resolve_spec_source()

    def test_url_accepted_with_https(self, make_config):
        spec = WorkspacePreparer(
            make_config(spec_url="https://example.com/vss.json")
        ).resolve_spec_source()

        assert spec.kind == SpecSourceKind.URL
        assert spec.fingerprint == "url:https://example.com/vss.json"

    @pytest.mark.parametrize("url", ["ftp://example.com/vss.json", "example.com/vss.json"])
    def test_url_without_accepted_scheme_rejected(self, make_config, url):
        with pytest.raises(InvalidSpecificationURL):
            WorkspacePreparer(make_config(spec_url=url)).resolve_spec_source()


class TestApplySpecSource:
    """Tests for manifest rewriting."""

    def test_default_leaves_manifest_untouched(self, workspace, make_config):
        before = workspace.manifest.read_text()
        preparer = WorkspacePreparer(make_config())

        preparer.apply_spec_source(preparer.resolve_spec_source())

        assert workspace.manifest.read_text() == before

    def test_url_written_to_signal_interface(self, workspace, make_config):
        preparer = WorkspacePreparer(make_config(spec_url="https://example.com/custom.json"))

        preparer.apply_spec_source(preparer.resolve_spec_source())

        assert _signal_src(workspace) == "https://example.com/custom.json"

    def test_file_copied_and_referenced(self, tmp_path, workspace, make_config):
        spec_file = tmp_path / "vss.json"
        spec_file.write_text('{"Vehicle": {}}')
        preparer = WorkspacePreparer(make_config(spec_file=str(spec_file)))

        preparer.apply_spec_source(preparer.resolve_spec_source())

        copied = workspace.root / "custom-vss.json"
        assert copied.read_text() == '{"Vehicle": {}}'
        assert _signal_src(workspace) == copied.absolute().as_uri()

    def test_first_interface_used_without_signal_interface(self, workspace, make_config):
        workspace.manifest.write_text(json.dumps({"interfaces": [{"type": "pubsub"}]}))
        preparer = WorkspacePreparer(make_config(spec_url="https://example.com/vss.json"))

        preparer.apply_spec_source(preparer.resolve_spec_source())

        manifest = json.loads(workspace.manifest.read_text())
        assert manifest["interfaces"][0]["config"]["src"] == "https://example.com/vss.json"

    def test_invalid_manifest_is_misconfiguration(self, workspace, make_config):
        workspace.manifest.write_text("not json")
        preparer = WorkspacePreparer(make_config(spec_url="https://example.com/vss.json"))

        with pytest.raises(WorkspaceMisconfigured):
            preparer.apply_spec_source(preparer.resolve_spec_source())


class TestPrepare:
    """Tests for the preparation sequence."""

    def test_missing_dependency_descriptor(self, workspace, make_config):
        (workspace.root / "conanfile.txt").unlink()

        with pytest.raises(WorkspaceMisconfigured) as exc_info:
            WorkspacePreparer(make_config()).verify_configuration()

        assert any("conanfile.txt" in p for p in exc_info.value.context["missing"])

    def test_prepare_cleans_only_when_requested(self, workspace, make_config):
        workspace.age_artifact(0)
        preparer = WorkspacePreparer(make_config())

        removed = preparer.prepare(preparer.resolve_spec_source())

        assert removed == []
        assert workspace.artifact.exists()

    def test_clean_removes_build_output_and_stamp(self, workspace, make_config):
        config = make_config(clean=True)
        workspace.age_artifact(0)
        config.state_dir.mkdir(parents=True)
        config.stamp_file.write_text("{}")
        config.metrics_file.write_text("{}")

        removed = WorkspacePreparer(config).prepare(WorkspacePreparer(config).resolve_spec_source())

        assert config.build_dir in removed
        assert not workspace.artifact.exists()
        assert not config.stamp_file.exists()
        assert config.metrics_file.exists()

    def test_clean_all_also_removes_metrics(self, workspace, make_config):
        config = make_config()
        config.state_dir.mkdir(parents=True)
        config.metrics_file.write_text("{}")

        removed = WorkspacePreparer(config).clean_all()

        assert removed == [config.metrics_file]
        assert not config.metrics_file.exists()

    def test_clean_on_empty_workspace(self, make_config):
        assert WorkspacePreparer(make_config()).clean() == []
