"""
Reachability probes for optional external services.
"""

from __future__ import annotations

import socket
from collections.abc import Callable

from ...core.di import LazyService
from ...core.interfaces.logger import ILogger
from ...core.models.pipeline import PipelineConfig, ServiceEndpoint
from ...core.models.run import ServiceAvailability, ServiceStatus
from ..logging import NullLogger

Probe = Callable[[str, int, float], bool]


def probe_endpoint(host: str, port: int, timeout: float) -> bool:
    """True if a TCP connection to ``host:port`` succeeds within ``timeout``."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def parse_address(value: str) -> tuple[str, int] | None:
    """Parse ``[scheme://]host:port``."""
    if "://" in value:
        value = value.split("://", 1)[1]
    value = value.rstrip("/")
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        return None
    return host.strip("[]"), int(port)


class ServiceProber:
    """Probes each configured endpoint immediately before a run; never cached."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        config: PipelineConfig,
        probe: Probe = probe_endpoint,
        logger: ILogger | None = None,
    ) -> None:
        self._config = config
        self._probe = probe
        self.logger = logger

    def _target(self, endpoint: ServiceEndpoint) -> tuple[str, int]:
        configured = self._config.base_env.get(endpoint.env_var)
        if configured:
            parsed = parse_address(configured)
            if parsed is not None:
                return parsed
        return endpoint.host, endpoint.port

    def probe(self) -> tuple[ServiceAvailability, dict[str, str]]:
        """Probe every endpoint.

        Returns:
            Availability, and environment overrides disabling each
            unreachable service
        """
        statuses: list[ServiceStatus] = []
        env: dict[str, str] = {}
        for endpoint in self._config.endpoints:
            if self._config.base_env.get(endpoint.env_var) == endpoint.disabled_value:
                self.logger.info("%s disabled by environment", endpoint.name)
                statuses.append(
                    ServiceStatus(
                        name=endpoint.name,
                        address=endpoint.disabled_value,
                        env_var=endpoint.env_var,
                        available=False,
                    )
                )
                continue

            host, port = self._target(endpoint)
            available = self._probe(host, port, self._config.probe_timeout)
            if available:
                self.logger.info("%s reachable at %s:%d", endpoint.name, host, port)
            else:
                self.logger.warning(
                    "%s unreachable at %s:%d; running with %s=%s",
                    endpoint.name,
                    host,
                    port,
                    endpoint.env_var,
                    endpoint.disabled_value,
                )
                env[endpoint.env_var] = endpoint.disabled_value
            statuses.append(
                ServiceStatus(
                    name=endpoint.name,
                    address=f"{host}:{port}",
                    env_var=endpoint.env_var,
                    available=available,
                )
            )
        return ServiceAvailability(services=statuses), env
