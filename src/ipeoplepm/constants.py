"""Fixed names and defaults of an iPeople Password Manager deployment."""

APP_NAME = "iPeople Password Manager"
TOOL_NAME = "ipeople-pm"

INSTALL_DIR_RELPATH = ".local/share/ipeople-password-manager"
BACKUP_DIR_RELPATH = "ipeople-pm-backups"
CONFIG_FILE_RELPATH = ".config/ipeople-pm/config.yml"
CONFIG_ENV_VAR = "IPEOPLE_PM_CONFIG"
DEFAULT_BINARY_PATH = "/usr/local/bin/ipeople-pm"
DEFAULT_DOCKER_GROUP = "docker"
DEFAULT_SETTLE_DELAY_SECONDS = 2.0

COMPOSE_FILE_NAME = "docker-compose.yml"
ENV_FILE_NAME = ".env"

DB_SERVICE = "db"
APP_SERVICE = "app"
SERVICES = (DB_SERVICE, APP_SERVICE)

DB_USER = "postgres"
DB_NAME = "ipeople_pm"
VOLUME_NAME = "ipeople_pm_postgres_data"
NETWORK_NAME = "ipeople_pm_network"
DEFAULT_APP_PORT = "3000"

BACKUP_PREFIX = "backup_"
BACKUP_EXTENSION = ".sql.gz"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

DIR_MODE = 0o755
ENV_FILE_MODE = 0o600

CONFIRMATION_TOKEN = "yes"
