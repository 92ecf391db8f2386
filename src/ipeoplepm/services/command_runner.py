"""Subprocess execution service for ipeople-pm."""

import subprocess
import tempfile
from typing import IO, List, Optional

from ipeoplepm.errors import BackendUnavailable
from ipeoplepm.errors_catalog import actionable_error


class CommandRunner:
    """Runs external commands with consistent error handling.

    Commands are never retried: the first failure is surfaced to the operator.
    """

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, logger, default_timeout: Optional[float] = None, subprocess_module=subprocess):
        self.logger = logger
        self.default_timeout = default_timeout
        self.subprocess = subprocess_module

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = self.subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                timeout=effective_timeout,
            )
        except FileNotFoundError as exc:
            raise BackendUnavailable(
                actionable_error("command_not_found", command=cmd[0])
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise BackendUnavailable(
                f"Command timed out after {effective_timeout}s: {cmd_str}"
            ) from exc
        except OSError as exc:
            raise BackendUnavailable(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise BackendUnavailable(message)

        self.logger.warning(message)
        return result

    def stream_to(self, cmd: List[str], sink: IO[bytes]) -> int:
        """Copies the command's standard output into ``sink`` and returns the byte count."""
        cmd_str = " ".join(cmd)
        self.logger.debug("Streaming: %s", cmd_str)

        with tempfile.TemporaryFile() as stderr_file:
            try:
                process = self.subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                )
            except FileNotFoundError as exc:
                raise BackendUnavailable(
                    actionable_error("command_not_found", command=cmd[0])
                ) from exc
            except OSError as exc:
                raise BackendUnavailable(f"Failed to execute command: {cmd_str}. {exc}") from exc

            written = 0
            with process:
                while True:
                    chunk = process.stdout.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    sink.write(chunk)
                    written += len(chunk)
                returncode = process.wait()

            stderr_file.seek(0)
            stderr = stderr_file.read().decode("utf-8", errors="replace").strip()

        if returncode != 0:
            message = f"Command failed ({returncode}): {cmd_str}"
            if stderr:
                message = f"{message}\n{stderr}"
            raise BackendUnavailable(message)

        return written
