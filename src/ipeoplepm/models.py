"""Shared domain models for ipeople-pm."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ipeoplepm.constants import (
    BACKUP_DIR_RELPATH,
    COMPOSE_FILE_NAME,
    DEFAULT_BINARY_PATH,
    DEFAULT_DOCKER_GROUP,
    DEFAULT_SETTLE_DELAY_SECONDS,
    ENV_FILE_NAME,
    INSTALL_DIR_RELPATH,
)


@dataclass(frozen=True)
class ManagerSettings:
    """Locations and knobs shared by every subcommand handler."""

    install_dir: str
    backup_dir: str
    binary_path: str = DEFAULT_BINARY_PATH
    docker_group: str = DEFAULT_DOCKER_GROUP
    settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS
    command_timeout: Optional[float] = None

    @property
    def compose_file(self) -> str:
        return os.path.join(self.install_dir, COMPOSE_FILE_NAME)

    @property
    def env_file(self) -> str:
        return os.path.join(self.install_dir, ENV_FILE_NAME)

    @classmethod
    def for_home(cls, user_home: str, **overrides) -> "ManagerSettings":
        values = {
            "install_dir": os.path.join(user_home, INSTALL_DIR_RELPATH),
            "backup_dir": os.path.join(user_home, BACKUP_DIR_RELPATH),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


class PrivilegeContext(Enum):
    """How a backend call reaches the container runtime."""

    ROOT = "root"
    GROUP_MEMBER = "group_member"
    ESCALATE = "escalate"

    @property
    def needs_escalation(self) -> bool:
        return self is PrivilegeContext.ESCALATE


@dataclass(frozen=True)
class ServiceStatus:
    name: str
    running: bool
