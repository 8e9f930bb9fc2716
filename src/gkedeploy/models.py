"""Shared domain models for gkedeploy."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class Channel(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class Severity(str, Enum):
    NORMAL = "normal"
    ERROR = "error"


@dataclass(frozen=True)
class DeployConfig:
    """Validated contents of the `.gkedeploy` file."""

    gcr_host: str
    project_id: str
    deployment_name: str
    cluster_name: str
    cluster_zone: str


@dataclass(frozen=True)
class RunContext:
    """Image and source-control identifiers resolved once per invocation."""

    image_repository: str
    commit_hash: str
    branch_name: str
    primary_tag: str
    config: DeployConfig

    def image_tag(self, tag: str) -> str:
        return f"{self.image_repository}:{tag}"


@dataclass(frozen=True)
class ClassifiedLine:
    channel: Channel
    severity: Severity
    text: str
    executable: str


@dataclass(frozen=True)
class ProcessResult:
    executable: str
    args: Tuple[str, ...]
    exit_code: int


@dataclass(frozen=True)
class CommandStep:
    """One external command inside a stage."""

    executable: str
    args: Tuple[str, ...]
    announcement: Optional[str] = None
    note: Optional[str] = None

    @property
    def command_line(self) -> str:
        return " ".join((self.executable,) + self.args)


@dataclass(frozen=True)
class Stage:
    """A named pipeline stage activated by one or more operations."""

    name: str
    operations: FrozenSet[str]
    steps: Tuple[CommandStep, ...]
    finished_message: Optional[str] = None

    def is_active(self, operation: str) -> bool:
        return operation in self.operations


@dataclass(frozen=True)
class StageOutcome:
    name: str
    status: str
    error: Optional[str] = None
