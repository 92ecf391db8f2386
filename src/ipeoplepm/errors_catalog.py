"""Actionable error catalog for ipeople-pm."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "deployment_not_found": {
        "what": "Installation directory not found: {path}",
        "next": "Run `ipeople-pm install` or set `install_dir` in the configuration file.",
    },
    "compose_not_available": {
        "what": "Docker Compose is not available.",
        "next": "Install Docker Compose v2 (`docker compose`) or v1 (`docker-compose`) and try again.",
    },
    "command_not_found": {
        "what": "Required command not found: {command}.",
        "next": "Please install it and try again.",
    },
    "backend_failed": {
        "what": "{message}",
        "next": "Check that Docker is running and that you may access it (group `{group}` or sudo).",
    },
    "db_not_running": {
        "what": "The `db` service is not running.",
        "next": "Start the password manager with `ipeople-pm start` before taking a backup.",
    },
    "backup_failed": {
        "what": "Backup failed: {reason}",
        "next": "Inspect `ipeople-pm logs db` and make sure {path} is writable.",
    },
    "unknown_service": {
        "what": "Unknown service `{service}`.",
        "next": "Use one of: {services}.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
