"""Database backup service for ipeople-pm."""

import gzip
import os
from datetime import datetime
from typing import Callable, IO, Tuple

from ipeoplepm.constants import (
    BACKUP_EXTENSION,
    BACKUP_PREFIX,
    BACKUP_TIMESTAMP_FORMAT,
    DB_NAME,
    DB_SERVICE,
    DB_USER,
)
from ipeoplepm.errors import BackendUnavailable, BackupFailed
from ipeoplepm.errors_catalog import actionable_error


class BackupService:
    """Dumps the database through the backend into timestamped gzip files."""

    DUMP_COMMAND = ("pg_dump", "-U", DB_USER, DB_NAME)
    MAX_SUFFIX = 1000

    def __init__(self, backup_dir: str, backend, logger, console, now: Callable[[], datetime] = datetime.now):
        self.backup_dir = backup_dir
        self.backend = backend
        self.logger = logger
        self.console = console
        self.now = now

    def backup_name(self, timestamp: str, suffix: int = 0) -> str:
        stem = f"{BACKUP_PREFIX}{timestamp}"
        if suffix:
            stem = f"{stem}_{suffix}"
        return f"{stem}{BACKUP_EXTENSION}"

    def _reserve_path(self) -> Tuple[str, IO[bytes]]:
        try:
            os.makedirs(self.backup_dir, exist_ok=True)
        except OSError as exc:
            raise BackupFailed(
                actionable_error("backup_failed", reason=str(exc), path=self.backup_dir)
            ) from exc

        timestamp = self.now().strftime(BACKUP_TIMESTAMP_FORMAT)
        for suffix in range(self.MAX_SUFFIX):
            path = os.path.join(self.backup_dir, self.backup_name(timestamp, suffix))
            try:
                return path, open(path, "xb")
            except FileExistsError:
                continue
            except OSError as exc:
                raise BackupFailed(
                    actionable_error("backup_failed", reason=str(exc), path=self.backup_dir)
                ) from exc

        raise BackupFailed(
            actionable_error(
                "backup_failed",
                reason=f"too many backups for timestamp {timestamp}",
                path=self.backup_dir,
            )
        )

    def _discard(self, path: str):
        try:
            os.remove(path)
        except OSError as exc:
            self.logger.warning("Could not remove incomplete backup %s: %s", path, exc)

    def create_backup(self) -> str:
        if DB_SERVICE not in self.backend.running_services():
            raise BackupFailed(actionable_error("db_not_running"))

        self.console.print("[blue]Creating backup...[/blue]")
        path, raw_file = self._reserve_path()
        self.logger.info("Writing backup to %s", path)

        try:
            with raw_file, gzip.GzipFile(fileobj=raw_file, mode="wb") as gzip_file:
                written = self.backend.exec_to(DB_SERVICE, self.DUMP_COMMAND, gzip_file)
        except (BackendUnavailable, OSError) as exc:
            self._discard(path)
            raise BackupFailed(
                actionable_error("backup_failed", reason=str(exc), path=self.backup_dir)
            ) from exc

        if written == 0:
            self._discard(path)
            raise BackupFailed(
                actionable_error("backup_failed", reason="the dump was empty", path=self.backup_dir)
            )

        self.logger.debug("Backup wrote %s uncompressed bytes", written)
        self.console.print(f"[green]Backup saved to: {path}[/green]")
        return path
