"""Docker Compose backend for ipeople-pm."""

import subprocess
from typing import IO, List, Optional, Sequence

from ipeoplepm.errors import BackendUnavailable
from ipeoplepm.errors_catalog import actionable_error


class ComposeBackend:
    """Lifecycle primitives over the deployment's compose project."""

    def __init__(self, settings, executor, logger, subprocess_module=subprocess):
        self.settings = settings
        self.executor = executor
        self.logger = logger
        self.subprocess = subprocess_module
        self._compose_cmd: Optional[List[str]] = None

    def get_docker_compose_cmd(self) -> List[str]:
        try:
            self.subprocess.run(["docker", "compose", "version"], check=True, capture_output=True)
            return ["docker", "compose"]
        except (self.subprocess.CalledProcessError, FileNotFoundError):
            try:
                self.subprocess.run(["docker-compose", "--version"], check=True, capture_output=True)
                return ["docker-compose"]
            except (self.subprocess.CalledProcessError, FileNotFoundError):
                raise BackendUnavailable(actionable_error("compose_not_available"))

    @property
    def compose_cmd(self) -> List[str]:
        if self._compose_cmd is None:
            self._compose_cmd = self.get_docker_compose_cmd()
            self.logger.debug("Using compose command: %s", " ".join(self._compose_cmd))
        return self._compose_cmd

    def command(self, *args: str) -> List[str]:
        return self.compose_cmd + [
            "-f",
            self.settings.compose_file,
            "--project-directory",
            self.settings.install_dir,
            *args,
        ]

    def _execute(self, *args: str, bounded: bool = True, **kwargs):
        cmd = self.command(*args)
        timeout = self.settings.command_timeout if bounded else None
        try:
            return self.executor.execute(cmd, timeout=timeout, **kwargs)
        except BackendUnavailable as exc:
            raise BackendUnavailable(
                actionable_error(
                    "backend_failed", message=str(exc), group=self.settings.docker_group
                )
            ) from exc

    def up(self, detached: bool = True):
        args = ["up", "-d"] if detached else ["up"]
        self._execute(*args)

    def down(self, remove_volumes: bool = False):
        args = ["down", "-v"] if remove_volumes else ["down"]
        self._execute(*args)

    def pull(self):
        self._execute("pull")

    def ps(self) -> str:
        result = self._execute("ps", capture_output=True)
        return result.stdout or ""

    def running_services(self) -> List[str]:
        result = self._execute(
            "ps", "--services", "--filter", "status=running", capture_output=True
        )
        return [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]

    def logs(self, service: Optional[str] = None, follow: bool = True):
        args = ["logs"]
        if follow:
            args.append("-f")
        if service:
            args.append(service)
        # Streams until the backend exits or the operator interrupts it.
        self._execute(*args, bounded=False)

    def exec_to(self, service: str, command: Sequence[str], sink: IO[bytes]) -> int:
        return self.executor.execute_to(self.command("exec", "-T", service, *command), sink)
