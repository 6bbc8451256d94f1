"""
Thin synchronous wrapper over the docker CLI.
"""

from __future__ import annotations

import subprocess

from ...core.di import LazyService
from ...core.exceptions import TestEnvironmentError
from ...core.interfaces.logger import ILogger
from ..logging import NullLogger


class DockerCli:
    """Runs ``docker`` subcommands and returns (return_code, stdout, stderr)."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(self, binary: str = "docker", logger: ILogger | None = None) -> None:
        self.binary = binary
        self.logger = logger

    def _run(self, *args: str, check: bool = True, input: str | None = None) -> tuple[int, str, str]:
        """Run a docker command synchronously.

        Raises:
            TestEnvironmentError: If the binary is missing, or the command
                fails and ``check`` is set
        """
        cmd = [self.binary, *args]
        self.logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                input=input,
            )
        except FileNotFoundError as e:
            raise TestEnvironmentError(
                f"Container runtime not found: {self.binary}", command=cmd, cause=e
            ) from e

        if result.returncode != 0:
            self.logger.debug("%s exited %d: %s", args[0], result.returncode, result.stderr.strip())
            if check:
                raise TestEnvironmentError(
                    f"docker {args[0]} failed with exit code {result.returncode}",
                    command=cmd,
                    stderr=result.stderr,
                )
        return (result.returncode, result.stdout, result.stderr)

    def create_network(self, name: str) -> None:
        self._run("network", "create", name)

    def remove_network(self, name: str) -> bool:
        """Remove a network; False if it did not exist."""
        rc, _, stderr = self._run("network", "rm", name, check=False)
        if rc == 0:
            return True
        if "not found" in stderr or "No such" in stderr:
            return False
        raise TestEnvironmentError(
            f"docker network rm failed with exit code {rc}",
            command=[self.binary, "network", "rm", name],
            stderr=stderr,
        )

    def run_detached(
        self,
        name: str,
        image: str,
        *command: str,
        network: str | None = None,
        env: dict[str, str] | None = None,
        volumes: list[str] | None = None,
        ports: list[str] | None = None,
        entrypoint: str | None = None,
    ) -> str:
        """Start a container in the background and return its id."""
        args = ["run", "-d", "--name", name]
        if network:
            args += ["--network", network]
        for key, value in (env or {}).items():
            args += ["-e", f"{key}={value}"]
        for volume in volumes or []:
            args += ["-v", volume]
        for port in ports or []:
            args += ["-p", port]
        if entrypoint is not None:
            args += ["--entrypoint", entrypoint]
        args.append(image)
        args.extend(command)
        _, stdout, _ = self._run(*args)
        return stdout.strip()

    def remove_container(self, name: str) -> bool:
        """Force-remove a container; False if it did not exist."""
        rc, _, stderr = self._run("rm", "-f", name, check=False)
        if rc == 0:
            return "No such" not in stderr
        if "No such" in stderr:
            return False
        raise TestEnvironmentError(
            f"docker rm failed with exit code {rc}",
            command=[self.binary, "rm", "-f", name],
            stderr=stderr,
        )

    def exec(self, name: str, *command: str, input: str | None = None) -> tuple[int, str, str]:
        args = ["exec"]
        if input is not None:
            args.append("-i")
        return self._run(*args, name, *command, check=False, input=input)

    def logs(self, name: str) -> str:
        """Combined stdout and stderr of a container."""
        _, stdout, stderr = self._run("logs", name)
        return stdout + stderr
