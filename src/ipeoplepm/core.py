import logging
import os
import subprocess
import time
from typing import Callable, Dict, List, Optional, Sequence

import requests
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .constants import (
    APP_NAME,
    APP_SERVICE,
    CONFIRMATION_TOKEN,
    DEFAULT_APP_PORT,
    SERVICES,
    TOOL_NAME,
)
from .errors import DeploymentNotFound, ManagerError, UserCancelled
from .errors_catalog import actionable_error
from .models import ManagerSettings, PrivilegeContext, ServiceStatus
from .services.backup import BackupService
from .services.command_runner import CommandRunner
from .services.compose_backend import ComposeBackend
from .services.filesystem import FileSystemService
from .services.health import HealthService
from .services.privilege import PrivilegedExecutor, PrivilegeResolver
from .services.provisioning import ProvisioningService, read_env_file

console = Console()
error_console = Console(stderr=True)
logger = logging.getLogger("ipeoplepm")

USAGE_LINES = [
    ("install", "Create the deployment and start it"),
    ("start", "Start the password manager"),
    ("stop", "Stop the password manager"),
    ("restart", "Restart the password manager"),
    ("status", "Show running status"),
    ("logs", "View logs (optional: logs app/db)"),
    ("update", "Update to latest version"),
    ("clean-update", "Update with fresh database (removes data)"),
    ("backup", "Create database backup"),
    ("config", "Show configuration location"),
    ("uninstall", "Remove the password manager"),
]


class OperationsDispatcher:
    """Runs one management subcommand against the deployment."""

    def __init__(
        self,
        settings: ManagerSettings,
        input_func: Optional[Callable[[str], str]] = None,
        sleep: Callable[[float], None] = time.sleep,
        command_runner: Optional[CommandRunner] = None,
        privilege_resolver: Optional[PrivilegeResolver] = None,
        requests_module=requests,
    ):
        self.settings = settings
        self.input_func = input_func or console.input
        self.sleep = sleep

        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.privilege_resolver = privilege_resolver or PrivilegeResolver(settings.docker_group)
        self.executor = PrivilegedExecutor(
            resolver=self.privilege_resolver,
            command_runner=self.command_runner,
            logger=logger,
        )
        self.backend = ComposeBackend(
            settings=settings,
            executor=self.executor,
            logger=logger,
            subprocess_module=subprocess,
        )
        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.provisioning_service = ProvisioningService(
            settings=settings,
            logger=logger,
            console=console,
            filesystem_service=self.filesystem_service,
        )
        self.backup_service = BackupService(
            backup_dir=settings.backup_dir,
            backend=self.backend,
            logger=logger,
            console=console,
        )
        self.health_service = HealthService(logger=logger, requests_module=requests_module)

        self.handlers: Dict[str, Callable[[List[str]], None]] = {
            "install": self.install,
            "start": self.start,
            "stop": self.stop,
            "restart": self.restart,
            "status": self.status,
            "logs": self.logs,
            "update": self.update,
            "clean-update": self.clean_update,
            "backup": self.backup,
            "config": self.config,
            "uninstall": self.uninstall,
        }

    def print_usage(self):
        console.print(f"{APP_NAME} Management Tool")
        console.print("")
        console.print(f"Usage: {TOOL_NAME} {{command}}")
        console.print("")
        console.print("Commands:")
        width = max(len(name) for name, _ in USAGE_LINES)
        for name, description in USAGE_LINES:
            console.print(f"  {name.ljust(width)}  - {description}", highlight=False)

    def ensure_deployment(self):
        if not os.path.isdir(self.settings.install_dir):
            raise DeploymentNotFound(
                actionable_error("deployment_not_found", path=self.settings.install_dir)
            )

    def app_url(self) -> str:
        values = read_env_file(self.settings.env_file)
        port = values.get("APP_PORT") or DEFAULT_APP_PORT
        return f"http://localhost:{port}"

    def confirm(self, warning: str, action: str):
        """Raises UserCancelled unless the operator types exactly ``yes``."""
        console.print(f"[bold yellow]{warning}[/bold yellow]")
        try:
            answer = self.input_func("Are you sure? (yes/no): ")
        except EOFError:
            answer = ""

        if answer.strip() != CONFIRMATION_TOKEN:
            raise UserCancelled(f"{action} cancelled")
        logger.info("%s confirmed by operator.", action)

    def install(self, _args: List[str]):
        self.provisioning_service.provision()

        console.print("[blue]Pulling Docker images...[/blue]")
        self.backend.pull()
        console.print("[blue]Starting services...[/blue]")
        self.backend.up(detached=True)

        console.print("")
        console.print(f"[bold green]{APP_NAME} has been installed successfully![/bold green]")
        console.print(f"Access URL: {self.app_url()}")
        console.print(f"Config location: {self.settings.env_file}")

        if self.privilege_resolver.resolve() is PrivilegeContext.ESCALATE:
            console.print(
                f"[yellow]You are not in the '{self.settings.docker_group}' group. "
                "Until you are, commands will use sudo.[/yellow]"
            )

    def start(self, _args: List[str]):
        console.print(f"Starting {APP_NAME}...")
        self.backend.up(detached=True)
        console.print("")
        console.print(f"[bold green]{APP_NAME} is running![/bold green]")
        console.print(f"Access at: {self.app_url()}")
        console.print(f"Configuration: {self.settings.env_file}")

    def stop(self, _args: List[str]):
        console.print(f"Stopping {APP_NAME}...")
        self.backend.down(remove_volumes=False)

    def restart(self, args: List[str]):
        self.stop(args)
        logger.debug("Waiting %.1fs before starting again.", self.settings.settle_delay_seconds)
        self.sleep(self.settings.settle_delay_seconds)
        self.start(args)

    def service_statuses(self) -> List[ServiceStatus]:
        running = set(self.backend.running_services())
        return [ServiceStatus(name=name, running=name in running) for name in SERVICES]

    def status(self, _args: List[str]):
        statuses = self.service_statuses()

        table = Table(title=APP_NAME)
        table.add_column("Service")
        table.add_column("State")
        for service_status in statuses:
            state = "[green]running[/green]" if service_status.running else "[red]stopped[/red]"
            table.add_row(service_status.name, state)
        console.print(table)

        details = self.backend.ps().strip()
        if details:
            console.print(escape(details), highlight=False, soft_wrap=True)

        app_running = any(item.running for item in statuses if item.name == APP_SERVICE)
        if app_running:
            url = self.app_url()
            if self.health_service.is_reachable(url):
                console.print(f"[green]Application reachable at {url}[/green]")
            else:
                console.print(f"[yellow]Application not reachable at {url} yet.[/yellow]")

    def logs(self, args: List[str]):
        service = args[0] if args else None
        if len(args) > 1:
            logger.warning("Ignoring extra arguments: %s", " ".join(args[1:]))
        if service and service not in SERVICES:
            raise ManagerError(
                actionable_error("unknown_service", service=service, services=", ".join(SERVICES))
            )

        try:
            self.backend.logs(service=service, follow=True)
        except KeyboardInterrupt:
            logger.debug("Log stream closed by operator.")

    def update(self, args: List[str]):
        console.print(f"Updating {APP_NAME}...")
        self.backend.pull()
        self.restart(args)
        console.print("[bold green]Update complete![/bold green]")

    def clean_update(self, _args: List[str]):
        self.confirm("This will remove the database and start fresh!", "Clean update")

        console.print("Performing clean update...")
        self.stop([])
        self.backend.down(remove_volumes=True)
        self.backend.pull()
        self.start([])
        console.print("[bold green]Clean update complete![/bold green]")

    def backup(self, _args: List[str]):
        self.backup_service.create_backup()

    def config(self, _args: List[str]):
        console.print(f"Configuration file: {self.settings.env_file}")
        console.print("")
        console.print("To edit configuration:")
        console.print(f"  nano {self.settings.env_file}")
        console.print(f"  {TOOL_NAME} restart")

    def _privileged_remove(self, path: str):
        self.command_runner.run(["sudo", "rm", "-f", path], check=True)

    def _privileged_remove_tree(self, path: str):
        self.command_runner.run(["sudo", "rm", "-rf", path], check=True)

    def uninstall(self, _args: List[str]):
        self.confirm(f"This will remove {APP_NAME} and ALL DATA!", "Uninstall")

        self.stop([])
        self.backend.down(remove_volumes=True)
        self.filesystem_service.remove_dir(self.settings.install_dir, self._privileged_remove_tree)
        self.filesystem_service.remove_file(self.settings.binary_path, self._privileged_remove)
        console.print(f"[bold green]{APP_NAME} has been uninstalled[/bold green]")

    def dispatch(self, command: Optional[str], args: Sequence[str] = ()) -> int:
        handler = self.handlers.get(command or "")
        if handler is None:
            self.print_usage()
            return 0

        logger.debug("Dispatching '%s' with arguments %s", command, list(args))
        try:
            if command != "install":
                self.ensure_deployment()
            handler(list(args))
            return 0
        except UserCancelled as exc:
            console.print(str(exc))
            logger.info(str(exc))
            return 0
        except KeyboardInterrupt:
            error_console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return 1
        except ManagerError as exc:
            error_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            logger.error(str(exc))
            return 1
        except Exception as exc:
            error_console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            logger.exception("Unexpected error")
            return 1
