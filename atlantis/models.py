"""Value types describing repositories, pull requests and users."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class VCSHost(enum.Enum):
    """The version control host a request came from."""

    GITHUB = "github"
    GITLAB = "gitlab"


class PullState(enum.Enum):
    """Whether a pull request is still open."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class Repo:
    """A repository on a VCS host."""

    full_name: str = ""
    owner: str = ""
    name: str = ""
    clone_url: str = ""
    sanitized_clone_url: str = ""


@dataclass(frozen=True)
class PullRequest:
    """A pull request (or merge request)."""

    num: int = 0
    head_commit: str = ""
    url: str = ""
    branch: str = ""
    author: str = ""
    state: PullState = PullState.OPEN


@dataclass(frozen=True)
class User:
    """A user on a VCS host."""

    username: str = ""