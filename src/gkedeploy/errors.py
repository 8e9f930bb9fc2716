"""Domain errors for gkedeploy."""

from typing import Sequence


class DeployError(RuntimeError):
    """Raised when the deployment cannot continue."""


class ConfigError(DeployError):
    """Raised when the configuration file is missing, unreadable or incomplete."""


class VcsError(DeployError):
    """Raised when commit or branch information cannot be resolved."""


class ProcessLaunchError(DeployError):
    """Raised when an external command cannot be started at all."""

    def __init__(self, executable: str, message: str):
        super().__init__(message)
        self.executable = executable


class ProcessExitError(DeployError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, executable: str, args: Sequence[str], exit_code: int, message: str):
        super().__init__(message)
        self.executable = executable
        self.args_list = list(args)
        self.exit_code = exit_code
