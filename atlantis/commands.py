"""Commands issued from pull request comments and their results."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field
from typing import Any

from atlantis.models import PullRequest, Repo, User, VCSHost


class CommandName(enum.Enum):
    """The kind of command requested in a comment."""

    APPLY = "apply"
    PLAN = "plan"
    HELP = "help"

    def __str__(self) -> str:
        return self.value


@dataclass
class Command:
    """A parsed comment command."""

    name: CommandName
    workspace: str = ""
    verbose: bool = False
    flags: list[str] = field(default_factory=list)


@dataclass
class CommandResponse:
    """The result of running a command."""

    error: Exception | None = None
    failure: str = ""
    project_results: list[Any] = field(default_factory=list)


@dataclass
class CommandContext:
    """Everything known about a command that came from a pull request comment."""

    base_repo: Repo = field(default_factory=Repo)
    head_repo: Repo = field(default_factory=Repo)
    pull: PullRequest = field(default_factory=PullRequest)
    user: User = field(default_factory=User)
    command: Command | None = None
    log: Any = None
    vcs_host: VCSHost = VCSHost.GITHUB


class Executor(abc.ABC):
    """Runs one kind of command."""

    @abc.abstractmethod
    def execute(self, ctx: CommandContext) -> CommandResponse:
        """Run the command described by ctx."""


class HelpExecutor(Executor):
    """Executes the help command; the renderer produces the help text."""

    def execute(self, ctx: CommandContext) -> CommandResponse:
        return CommandResponse()