"""
Shared pytest fixtures for quickbuild tests.

This module provides:
- reset_container: fresh service container and bootstrap state per test
- workspace: a Velocitas-style workspace driven by a scripted fake toolchain
- make_config: PipelineConfig factory for that workspace
"""

import json
import os
import sys
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from quickbuild.core.bootstrap import reset
from quickbuild.core.models.pipeline import PipelineConfig
from quickbuild.core.settings import load_settings

VALID_SOURCE = """\
#include "sdk/VehicleApp.h"
#include "sdk/Logger.h"
#include "vehicle/Vehicle.hpp"

namespace example {

class SpeedApp : public velocitas::VehicleApp {
public:
    SpeedApp() : VehicleApp(velocitas::IVehicleDataBrokerClient::createInstance("vehicledatabroker")) {}

    void onStart() override {
        subscribeDataPoints(velocitas::QueryBuilder::select(Vehicle.Speed).build())
            ->onItem([this](auto&& item) { onSpeedChanged(item); });
    }

    void onSpeedChanged(const velocitas::DataPointReply& reply) {
        try {
            auto speed = reply.get(Vehicle.Speed)->value();
            velocitas::logger().info("Speed received: {}", speed);
        } catch (std::exception& e) {
            velocitas::logger().error("Failed to read speed: {}", e.what());
        }
    }

private:
    int m_count{0};
};

}  // namespace example

int main(int argc, char** argv) {
    example::SpeedApp app;
    app.run();
    return 0;
}
"""

# Fake toolchain: behaviour is steered by files under <workspace>/.fake
FAKE_TOOLCHAIN = '''\
import sys
from pathlib import Path

state = Path(".fake")
state.mkdir(exist_ok=True)


def read(name, default=""):
    path = state / name
    return path.read_text() if path.is_file() else default


step = sys.argv[1]
(state / f"{step}-count").write_text(str(int(read(f"{step}-count", "0")) + 1))
sys.stdout.write(read(f"{step}-output", f"fake {step} done\\n"))
sys.stdout.flush()
code = int(read(f"{step}-exit", "0"))
if step == "compile" and code == 0 and not (state / "no-artifact").exists():
    app = Path("build/bin/app")
    app.parent.mkdir(parents=True, exist_ok=True)
    app.write_text(read("app.sh", "#!/bin/sh\\necho \\"[INFO] VehicleApp started\\"\\n"))
    app.chmod(0o644)
sys.exit(code)
'''

MANIFEST = {
    "manifestVersion": "v3",
    "name": "speedapp",
    "interfaces": [
        {"type": "pubsub", "config": {"reads": [], "writes": []}},
        {
            "type": "vehicle-signal-interface",
            "config": {"src": "https://github.com/COVESA/vehicle_signal_specification/vss.json"},
        },
    ],
}


def _toml_value(value) -> str:
    return json.dumps(value)


class Workspace:
    """Handle on a temporary build workspace and its input channels."""

    def __init__(self, base: Path) -> None:
        self.base = base
        self.root = base / "ws"
        self.inputs = base / "in"
        self.cache = base / "cache"
        self.toolchain = base / "toolchain.py"
        self.config_file = base / "config.toml"

        (self.root / "app").mkdir(parents=True)
        (self.root / ".fake").mkdir()
        self.inputs.mkdir()
        self.manifest.write_text(json.dumps(MANIFEST, indent=2))
        (self.root / "conanfile.txt").write_text("[requires]\nvehicle-app-sdk/0.4.0\n")
        self.toolchain.write_text(FAKE_TOOLCHAIN)
        self.write_config()

    @property
    def manifest(self) -> Path:
        return self.root / "app" / "AppManifest.json"

    @property
    def primary_file(self) -> Path:
        return self.inputs / "app.cpp"

    @property
    def installed_source(self) -> Path:
        return self.root / "app" / "src" / "VehicleApp.cpp"

    @property
    def artifact(self) -> Path:
        return self.root / "build" / "bin" / "app"

    def write_config(self, extra: str = "", read_stdin: bool = False) -> None:
        python = sys.executable
        self.config_file.write_text(
            f"""\
[workspace]
root = {_toml_value(str(self.root))}

[inputs]
primary_file = {_toml_value(str(self.primary_file))}
input_dir = {_toml_value(str(self.inputs / "input"))}
secondary_file = {_toml_value(str(self.inputs / "input-file"))}
read_stdin = {_toml_value(read_stdin)}

[build]
codegen_commands = []
install_command = {_toml_value([python, str(self.toolchain), "install"])}
compile_command = {_toml_value([python, str(self.toolchain), "compile"])}
artifact_candidates = ["build/bin/app"]
dependency_caches = [{_toml_value(str(self.cache))}]
extra_path = []

[run]
timeout = 5
grace_period = 1

[services]
endpoints = []

[logging]
file = false
{extra}"""
        )

    def write_source(self, text: str = VALID_SOURCE) -> Path:
        self.primary_file.write_text(text)
        return self.primary_file

    def set_step(self, step: str, output: str | None = None, exit_code: int = 0) -> None:
        """Script the output and exit code of a fake toolchain step."""
        if output is not None:
            (self.root / ".fake" / f"{step}-output").write_text(output)
        (self.root / ".fake" / f"{step}-exit").write_text(str(exit_code))

    def set_app(self, script: str) -> None:
        """Shell script the fake compiler writes as the executable."""
        (self.root / ".fake" / "app.sh").write_text(script)

    def stop_producing_artifact(self) -> None:
        (self.root / ".fake" / "no-artifact").write_text("")

    def age_artifact(self, seconds: float) -> None:
        self.artifact.parent.mkdir(parents=True, exist_ok=True)
        if not self.artifact.exists():
            self.artifact.write_text("#!/bin/sh\n")
        past = time.time() - seconds
        os.utime(self.artifact, (past, past))

    def count(self, step: str) -> int:
        path = self.root / ".fake" / f"{step}-count"
        return int(path.read_text()) if path.is_file() else 0


@pytest.fixture(autouse=True)
def reset_container():
    """Give every test a fresh service container."""
    reset()
    yield
    reset()


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Create a buildable workspace with a scripted fake toolchain."""
    return Workspace(tmp_path)


@pytest.fixture
def valid_source() -> str:
    """A complete application source that passes the structure check."""
    return VALID_SOURCE


@pytest.fixture
def make_config(workspace: Workspace) -> Callable[..., PipelineConfig]:
    """Factory building a PipelineConfig for the workspace with optional flags."""

    def factory(timeout: float | None = None, env: dict | None = None, **flags) -> PipelineConfig:
        settings = load_settings(config_path=workspace.config_file)
        return PipelineConfig.from_settings(
            settings,
            dict(os.environ) if env is None else env,
            timeout=timeout,
            **flags,
        )

    return factory
