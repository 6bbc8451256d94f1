"""
Ephemeral integration test environment.

An isolated network with a data broker, a client container used for signal
injection and the application container. Used as a context manager:
leftovers of an earlier unclean run are purged on entry, and every resource
this run attempted to create is removed on exit, whatever the outcome.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ...core.di import LazyService
from ...core.exceptions import InjectionFailed, OperatorInterrupt, TestEnvironmentError
from ...core.interfaces.logger import ILogger
from ...core.models.pipeline import HarnessSettings
from ...core.models.scenario import SignalValue
from ..logging import NullLogger
from .docker import DockerCli

APP_MOUNT = "/app"
REMOVE_ATTEMPTS = 2


def format_signal_value(value: SignalValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class EnvironmentNames:
    """Resource names derived from the configured prefix and the scenario name."""

    network: str
    broker: str
    client: str
    app: str

    @classmethod
    def for_scenario(cls, prefix: str, scenario: str) -> EnvironmentNames:
        base = f"{prefix}-{scenario}"
        return cls(
            network=base,
            broker=f"{base}-broker",
            client=f"{base}-client",
            app=f"{base}-app",
        )

    @property
    def containers(self) -> tuple[str, ...]:
        return (self.broker, self.client, self.app)


class TestEnvironment:
    """Scoped container and network lifecycle for one scenario run."""

    __test__ = False

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        docker: DockerCli,
        settings: HarnessSettings,
        scenario: str,
        logger: ILogger | None = None,
    ) -> None:
        self._docker = docker
        self._settings = settings
        self.names = EnvironmentNames.for_scenario(settings.resource_prefix, scenario)
        self._containers: list[str] = []
        self._network = False
        self.teardown_errors: list[str] = []
        self.logger = logger

    @property
    def broker_address(self) -> str:
        return f"{self.names.broker}:{self._settings.broker_port}"

    def __enter__(self) -> TestEnvironment:
        self.purge()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()

    def purge(self) -> None:
        """Remove resources left behind by an earlier run of the same scenario."""
        for name in reversed(self.names.containers):
            if self._docker.remove_container(name):
                self.logger.info("Removed leftover container %s", name)
        if self._docker.remove_network(self.names.network):
            self.logger.info("Removed leftover network %s", self.names.network)

    def create_network(self) -> None:
        self._network = True
        self._docker.create_network(self.names.network)

    def start_broker(self) -> None:
        port = self._settings.broker_port
        self._containers.append(self.names.broker)
        self._docker.run_detached(
            self.names.broker,
            self._settings.broker_image,
            *self._settings.broker_args,
            network=self.names.network,
            ports=[f"{port}:{port}"],
        )

    def start_client(self) -> None:
        self._containers.append(self.names.client)
        self._docker.run_detached(
            self.names.client,
            self._settings.client_image,
            "infinity",
            network=self.names.network,
            entrypoint="sleep",
        )

    def launch_app(self, artifact: Path) -> None:
        self._containers.append(self.names.app)
        self._docker.run_detached(
            self.names.app,
            self._settings.app_image,
            "timeout",
            str(self._settings.app_timeout),
            APP_MOUNT,
            network=self.names.network,
            env={
                "SDV_VEHICLEDATABROKER_ADDRESS": self.broker_address,
                "SDV_MQTT_ADDRESS": "disabled",
            },
            volumes=[f"{artifact.absolute()}:{APP_MOUNT}:ro"],
        )

    def inject(self, values: dict[str, SignalValue]) -> None:
        """Write signal values to the broker through the client container.

        Raises:
            InjectionFailed: If the client command fails
        """
        script = "".join(f"setValue {k} {format_signal_value(v)}\n" for k, v in values.items())
        command = [*self._settings.client_command, f"grpc://{self.broker_address}"]
        rc, stdout, stderr = self._docker.exec(self.names.client, *command, input=script + "quit\n")
        if rc != 0:
            raise InjectionFailed(
                f"Failed to inject {', '.join(values)}",
                command=command,
                stderr=stderr or stdout,
            )
        self.logger.info("Injected %s", ", ".join(f"{k}={v}" for k, v in values.items()))

    def app_logs(self) -> str:
        return self._docker.logs(self.names.app)

    def teardown(self) -> None:
        """Remove every container and the network this run attempted to create.

        An operator interrupt does not cut teardown short: the interrupted
        removal is retried, the remaining resources are removed and the
        interrupt is raised again afterwards.
        """
        interrupt: BaseException | None = None
        for name in reversed(self._containers):
            interrupt = self._remove(self._docker.remove_container, "container", name) or interrupt
        self._containers = []

        if self._network:
            network = self.names.network
            interrupt = self._remove(self._docker.remove_network, "network", network) or interrupt
            self._network = False
        self.logger.info("Torn down test environment %s", self.names.network)
        if interrupt is not None:
            raise interrupt

    def _remove(self, remove: Callable[[str], bool], kind: str, name: str) -> BaseException | None:
        interrupt: BaseException | None = None
        for _ in range(REMOVE_ATTEMPTS):
            try:
                remove(name)
                return interrupt
            except (OperatorInterrupt, KeyboardInterrupt) as e:
                self.logger.warning("Interrupted while removing %s %s, continuing teardown", kind, name)
                interrupt = interrupt or e
            except TestEnvironmentError as e:
                self.logger.error("Failed to remove %s %s: %s", kind, name, e)
                self.teardown_errors.append(f"{kind} {name}: {e.message}")
                return interrupt
        self.teardown_errors.append(f"{kind} {name}: interrupted")
        return interrupt
