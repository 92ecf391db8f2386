"""Configuration loader for ipeople-pm."""

import os
import pwd
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from ipeoplepm.constants import CONFIG_ENV_VAR, CONFIG_FILE_RELPATH
from ipeoplepm.errors import ManagerError


def resolve_user_home(
    environ: Mapping[str, str] = os.environ,
    getpwnam: Callable[[str], Any] = pwd.getpwnam,
) -> str:
    """Returns the invoking user's home, even when running under sudo."""
    sudo_user = environ.get("SUDO_USER")
    if sudo_user:
        try:
            return getpwnam(sudo_user).pw_dir
        except KeyError:
            pass
    return environ.get("HOME") or os.path.expanduser("~")


class ConfigLoader:
    """Loads the optional YAML settings file of the management tool."""

    SUPPORTED_KEYS = {
        "install_dir",
        "backup_dir",
        "binary_path",
        "docker_group",
        "settle_delay_seconds",
        "command_timeout",
        "verbose",
        "log_file",
    }

    NUMERIC_KEYS = ("settle_delay_seconds", "command_timeout")

    def default_path(self, user_home: str, environ: Mapping[str, str] = os.environ) -> Optional[str]:
        explicit = environ.get(CONFIG_ENV_VAR)
        if explicit:
            return explicit

        candidate = os.path.join(user_home, CONFIG_FILE_RELPATH)
        if os.path.exists(candidate):
            return candidate
        return None

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ManagerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ManagerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ManagerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise ManagerError(f"Unknown configuration keys: {unknown_list}")

        for key in self.NUMERIC_KEYS:
            value = parsed.get(key)
            if value is None:
                continue
            if isinstance(value, bool):
                raise ManagerError(f"Configuration key '{key}' must be a number, got: {value!r}")
            try:
                parsed[key] = float(value)
            except (TypeError, ValueError) as exc:
                raise ManagerError(
                    f"Configuration key '{key}' must be a number, got: {value!r}"
                ) from exc
            if parsed[key] < 0:
                raise ManagerError(f"Configuration key '{key}' must not be negative.")

        return parsed
