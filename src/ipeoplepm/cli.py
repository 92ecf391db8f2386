import logging

import click
from rich.logging import RichHandler

from .core import OperationsDispatcher
from .errors import ManagerError
from .models import ManagerSettings
from .services.config_loader import ConfigLoader, resolve_user_home

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def _expand_home(value, user_home):
    if value is None:
        return None
    value = str(value)
    if value == "~" or value.startswith("~/"):
        return user_home + value[1:]
    return value


def _build_settings(user_home, config_values) -> ManagerSettings:
    overrides = {
        "install_dir": _expand_home(config_values.get("install_dir"), user_home),
        "backup_dir": _expand_home(config_values.get("backup_dir"), user_home),
        "binary_path": _expand_home(config_values.get("binary_path"), user_home),
        "docker_group": config_values.get("docker_group"),
    }
    if config_values.get("settle_delay_seconds") is not None:
        overrides["settle_delay_seconds"] = float(config_values["settle_delay_seconds"])
    if config_values.get("command_timeout") is not None:
        overrides["command_timeout"] = float(config_values["command_timeout"])

    return ManagerSettings.for_home(user_home, **overrides)


def _configure_logging(logger, verbose: bool, log_file):
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)


@click.command(context_settings={"ignore_unknown_options": True}, add_help_option=False)
@click.argument("command", required=False)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def main(command, args):
    """Manage the iPeople Password Manager deployment."""
    logger = logging.getLogger("ipeoplepm")

    try:
        user_home = resolve_user_home()
        config_loader = ConfigLoader()
        config_values = config_loader.load(config_loader.default_path(user_home))
        settings = _build_settings(user_home, config_values)
    except ManagerError as exc:
        raise click.ClickException(str(exc)) from exc

    _configure_logging(
        logger,
        verbose=bool(config_values.get("verbose", False)),
        log_file=config_values.get("log_file"),
    )

    dispatcher = OperationsDispatcher(settings=settings)
    raise SystemExit(dispatcher.dispatch(command, args))


if __name__ == "__main__":
    main()
