"""Filesystem helpers for ipeople-pm."""

import logging
import os
import shutil
import sys
from typing import Callable

from rich.console import Console

from ipeoplepm.errors import ManagerError


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def set_permissions(self, path: str, mode: int):
        if sys.platform == "win32":
            return

        try:
            os.chmod(path, mode)
        except Exception as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def remove_file(self, path: str, privileged_remove: Callable[[str], None]):
        """Removes ``path``, falling back to ``privileged_remove`` when access is denied."""
        if not os.path.lexists(path):
            self.logger.debug("Nothing to remove at %s", path)
            return

        try:
            os.remove(path)
            self.logger.debug("Removed file: %s", path)
        except PermissionError:
            self.logger.info("Removing %s requires elevated privileges.", path)
            privileged_remove(path)

    def remove_dir(self, path: str, privileged_remove: Callable[[str], None]):
        """Removes the tree at ``path``; raises ManagerError if it survives."""
        if not os.path.lexists(path):
            self.logger.debug("Nothing to remove at %s", path)
            return

        try:
            shutil.rmtree(path)
            self.logger.debug("Removed directory: %s", path)
        except PermissionError:
            self.logger.info("Removing %s requires elevated privileges.", path)
            privileged_remove(path)
        except OSError as exc:
            raise ManagerError(f"Could not remove {path}: {exc}") from exc

        if os.path.lexists(path):
            raise ManagerError(f"Could not remove {path}: directory still exists.")
