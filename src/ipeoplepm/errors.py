"""Domain errors for ipeople-pm."""


class ManagerError(RuntimeError):
    """Raised when a management command cannot continue safely."""


class DeploymentNotFound(ManagerError):
    """Raised when the installation directory does not exist."""


class BackendUnavailable(ManagerError):
    """Raised when a call to the orchestration backend fails."""


class BackupFailed(ManagerError):
    """Raised when the database dump or its compression fails."""


class UserCancelled(ManagerError):
    """Raised when a destructive action is not confirmed."""
