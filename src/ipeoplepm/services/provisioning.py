"""Deployment directory provisioning: compose description and environment file."""

import os
import secrets
from datetime import datetime
from typing import Dict

from dotenv import dotenv_values

from ipeoplepm.constants import (
    APP_NAME,
    DB_NAME,
    DB_USER,
    DEFAULT_APP_PORT,
    DIR_MODE,
    ENV_FILE_MODE,
    NETWORK_NAME,
    VOLUME_NAME,
)
from ipeoplepm.errors import ManagerError

APP_IMAGE = "jacadasag/ipeople-password-manager:latest"
DB_IMAGE = "postgres:16-alpine"
DEFAULT_LOG_LEVEL = "ipeople_password_manager=debug,tower_http=debug,axum=debug"

COMPOSE_TEMPLATE = f"""
services:
  db:
    image: {DB_IMAGE}
    container_name: ipeople-pm-db
    environment:
      POSTGRES_USER: {DB_USER}
      POSTGRES_PASSWORD: ${{DB_PASSWORD:?DB_PASSWORD must be set in .env}}
      POSTGRES_DB: {DB_NAME}
    volumes:
      - postgres_data:/var/lib/postgresql/data
    healthcheck:
      test: ["CMD-SHELL", "pg_isready -U {DB_USER}"]
      interval: 5s
      timeout: 5s
      retries: 5
    restart: unless-stopped

  app:
    image: {APP_IMAGE}
    container_name: ipeople-pm-app
    ports:
      - "${{APP_PORT:-{DEFAULT_APP_PORT}}}:3000"
    environment:
      DATABASE_URL: postgres://{DB_USER}:${{DB_PASSWORD}}@db:5432/{DB_NAME}
      JWT_SECRET: ${{JWT_SECRET}}
      RUST_LOG: ${{LOG_LEVEL:-{DEFAULT_LOG_LEVEL}}}
      SMTP_HOST: ${{SMTP_HOST:-}}
      SMTP_PORT: ${{SMTP_PORT:-587}}
      SMTP_USERNAME: ${{SMTP_USERNAME:-}}
      SMTP_PASSWORD: ${{SMTP_PASSWORD:-}}
      SMTP_FROM_EMAIL: ${{SMTP_FROM_EMAIL:-noreply@example.com}}
      SMTP_FROM_NAME: ${{SMTP_FROM_NAME:-{APP_NAME}}}
      BASE_URL: ${{BASE_URL:-http://localhost:{DEFAULT_APP_PORT}}}
      SAML_ENTITY_ID: ${{SAML_ENTITY_ID:-https://passwordmanager.yourdomain.com}}
      SAML_ACS_URL: ${{SAML_ACS_URL:-https://passwordmanager.yourdomain.com/saml/acs}}
      SAML_SLO_URL: ${{SAML_SLO_URL:-https://passwordmanager.yourdomain.com/saml/slo}}
      SAML_CERTIFICATE: ${{SAML_CERTIFICATE:-}}
      SAML_PRIVATE_KEY: ${{SAML_PRIVATE_KEY:-}}
    depends_on:
      db:
        condition: service_healthy
    restart: unless-stopped

volumes:
  postgres_data:
    name: {VOLUME_NAME}

networks:
  default:
    name: {NETWORK_NAME}
"""


class ProvisioningService:
    """Creates the installation directory and the files the backend reads."""

    def __init__(self, settings, logger, console, filesystem_service):
        self.settings = settings
        self.logger = logger
        self.console = console
        self.filesystem_service = filesystem_service

    def create_install_dir(self):
        os.makedirs(self.settings.install_dir, exist_ok=True)
        self.filesystem_service.set_permissions(self.settings.install_dir, DIR_MODE)

    def write_compose_file(self):
        with open(self.settings.compose_file, "w", encoding="utf-8", newline="\n") as file_obj:
            file_obj.write(COMPOSE_TEMPLATE.lstrip())
        self.logger.debug("Wrote compose file: %s", self.settings.compose_file)

    def render_env_file(self) -> str:
        jwt_secret = secrets.token_hex(32)
        db_password = secrets.token_hex(16)
        generated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        return f"""# {APP_NAME} Configuration
# Generated on {generated_at}

# Database Configuration
DB_PASSWORD={db_password}

# JWT Secret for token signing
JWT_SECRET={jwt_secret}

# Application Port
APP_PORT={DEFAULT_APP_PORT}

# Logging Level
LOG_LEVEL={DEFAULT_LOG_LEVEL}

# Email Configuration (optional - for email verification)
SMTP_HOST=smtp.gmail.com
SMTP_PORT=587
# SMTP_USERNAME=your-email@gmail.com
# SMTP_PASSWORD=your-app-password
SMTP_FROM_EMAIL=noreply@example.com
SMTP_FROM_NAME={APP_NAME}
BASE_URL=http://localhost:{DEFAULT_APP_PORT}

# SAML Configuration (optional - configure for Azure AD integration)
# SAML_ENTITY_ID=https://passwordmanager.yourdomain.com
# SAML_ACS_URL=https://passwordmanager.yourdomain.com/saml/acs
# SAML_SLO_URL=https://passwordmanager.yourdomain.com/saml/slo
# SAML_CERTIFICATE=base64_encoded_certificate
# SAML_PRIVATE_KEY=base64_encoded_private_key
"""

    def write_env_file(self) -> bool:
        """Writes a fresh environment file; returns False when one already exists."""
        path = self.settings.env_file
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, ENV_FILE_MODE)
        except FileExistsError:
            self.logger.info("Keeping existing configuration: %s", path)
            return False
        except OSError as exc:
            raise ManagerError(f"Could not create configuration file '{path}': {exc}") from exc

        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as file_obj:
            file_obj.write(self.render_env_file())
        self.filesystem_service.set_permissions(path, ENV_FILE_MODE)
        return True

    def provision(self) -> bool:
        self.console.print(f"[blue]Creating installation directory at {self.settings.install_dir}...[/blue]")
        self.create_install_dir()
        self.write_compose_file()
        created = self.write_env_file()
        if created:
            self.console.print("[green]Generated secure configuration.[/green]")
        else:
            self.console.print("[dim]Existing configuration kept unchanged.[/dim]")
        return created


def read_env_file(path: str) -> Dict[str, str]:
    if not os.path.exists(path):
        return {}
    try:
        values = dotenv_values(path)
    except OSError as exc:
        raise ManagerError(f"Could not read configuration file '{path}': {exc}") from exc
    return {key: value for key, value in values.items() if value is not None}
