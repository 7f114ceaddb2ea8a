"""Turns pull request comments and VCS webhook payloads into Atlantis models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from atlantis.commands import Command, CommandName
from atlantis.models import PullRequest, PullState, Repo, User, VCSHost

GITLAB_PULL_OPENED = "opened"
DEFAULT_WORKSPACE = "default"
VERBOSE_FLAG = "--verbose"

_EXECUTABLES = ("run", "atlantis")
_COMMANDS = {
    "plan": CommandName.PLAN,
    "apply": CommandName.APPLY,
    "help": CommandName.HELP,
}


class EventParseError(ValueError):
    """Raised when a comment or payload cannot be turned into Atlantis models."""


def _dig(data: Mapping[str, Any] | None, *keys: str) -> Any:
    """Follow keys through nested mappings, returning None when any step is absent."""
    current: Any = data
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _text(data: Mapping[str, Any] | None, *keys: str) -> str:
    value = _dig(data, *keys)
    return "" if value is None else str(value)


def _number(data: Mapping[str, Any] | None, *keys: str) -> int:
    value = _dig(data, *keys)
    return int(value) if value else 0


def _owner_and_name(path_with_namespace: str) -> tuple[str, str]:
    """Split "owner/repo" into its parts; return empty strings if there is no slash."""
    parts = path_with_namespace.split("/")
    if len(parts) > 1:
        return parts[0], parts[1]
    return "", ""


@dataclass
class EventParser:
    """Parses comments and webhook payloads from GitHub and GitLab."""

    github_user: str = ""
    github_token: str = ""
    gitlab_user: str = ""
    gitlab_token: str = ""

    def determine_command(self, comment: str, vcs_host: VCSHost) -> Command:
        """Parse comment as an Atlantis command or raise EventParseError.

        A command is an executable name ("run", "atlantis" or "@<vcs user>"),
        then "plan", "apply" or "help", then an optional workspace, an optional
        --verbose flag and any other flags.
        """
        args = comment.split()
        if len(args) < 2:
            raise EventParseError("not an Atlantis command")

        vcs_user = self.gitlab_user if vcs_host is VCSHost.GITLAB else self.github_user
        if args[0] not in (*_EXECUTABLES, "@" + vcs_user):
            raise EventParseError("not an Atlantis command")
        name = _COMMANDS.get(args[1])
        if name is None:
            raise EventParseError("not an Atlantis command")
        if name is CommandName.HELP:
            return Command(name=CommandName.HELP)

        workspace = DEFAULT_WORKSPACE
        verbose = False
        flags = args[2:]
        if flags:
            # A third argument that isn't a flag is taken to be the workspace.
            if not flags[0].startswith("-"):
                workspace = flags[0]
                flags = flags[1:]
            if VERBOSE_FLAG in flags:
                verbose = True
                flags = [f for f in flags if f != VERBOSE_FLAG]

        return Command(name=name, workspace=workspace, verbose=verbose, flags=flags)

    def parse_github_issue_comment_event(
        self, event: Mapping[str, Any]
    ) -> tuple[Repo, User, int]:
        """Return the base repo, commenting user and pull number of a comment event."""
        base_repo = self.parse_github_repo(_dig(event, "repository"))
        login = _text(event, "comment", "user", "login")
        if not login:
            raise EventParseError("comment.user.login is null")
        pull_num = _number(event, "issue", "number")
        if pull_num == 0:
            raise EventParseError("issue.number is null")
        return base_repo, User(username=login), pull_num

    def parse_github_pull(self, pull: Mapping[str, Any]) -> tuple[PullRequest, Repo]:
        """Return the pull request and its head repo from a GitHub pull payload."""
        commit = _text(pull, "head", "sha")
        if not commit:
            raise EventParseError("head.sha is null")
        url = _text(pull, "html_url")
        if not url:
            raise EventParseError("html_url is null")
        branch = _text(pull, "head", "ref")
        if not branch:
            raise EventParseError("head.ref is null")
        author = _text(pull, "user", "login")
        if not author:
            raise EventParseError("user.login is null")
        num = _number(pull, "number")
        if num == 0:
            raise EventParseError("number is null")

        head_repo = self.parse_github_repo(_dig(pull, "head", "repo"))
        state = PullState.OPEN if _text(pull, "state") == "open" else PullState.CLOSED
        return (
            PullRequest(
                num=num,
                head_commit=commit,
                url=url,
                branch=branch,
                author=author,
                state=state,
            ),
            head_repo,
        )

    def parse_github_repo(self, repo: Mapping[str, Any] | None) -> Repo:
        """Return a Repo from a GitHub repository payload, with an authenticated clone URL."""
        full_name = _text(repo, "full_name")
        if not full_name:
            raise EventParseError("repository.full_name is null")
        owner = _text(repo, "owner", "login")
        if not owner:
            raise EventParseError("repository.owner.login is null")
        name = _text(repo, "name")
        if not name:
            raise EventParseError("repository.name is null")
        sanitized_clone_url = _text(repo, "clone_url")
        if not sanitized_clone_url:
            raise EventParseError("repository.clone_url is null")

        clone_url = sanitized_clone_url.replace(
            "https://", f"https://{self.github_user}:{self.github_token}@"
        )
        return Repo(
            full_name=full_name,
            owner=owner,
            name=name,
            clone_url=clone_url,
            sanitized_clone_url=sanitized_clone_url,
        )

    def parse_gitlab_merge_event(
        self, event: Mapping[str, Any]
    ) -> tuple[PullRequest, Repo]:
        """Return the merge request and its project from a GitLab merge event."""
        # GitLab's "merged" state is treated as closed.
        state = (
            PullState.OPEN
            if _text(event, "object_attributes", "state") == GITLAB_PULL_OPENED
            else PullState.CLOSED
        )
        pull = PullRequest(
            num=_number(event, "object_attributes", "iid"),
            head_commit=_text(event, "object_attributes", "last_commit", "id"),
            url=_text(event, "object_attributes", "url"),
            branch=_text(event, "object_attributes", "source_branch"),
            author=_text(event, "user", "username"),
            state=state,
        )
        repo = self._gitlab_repo(_dig(event, "project"))
        return pull, repo

    def parse_gitlab_merge_comment_event(
        self, event: Mapping[str, Any]
    ) -> tuple[Repo, Repo, User]:
        """Return the base repo, head repo and commenting user of a GitLab note event."""
        base_repo = self._gitlab_repo(_dig(event, "project"))
        user = User(username=_text(event, "user", "username"))
        head_repo = self._gitlab_repo(_dig(event, "merge_request", "source"))
        return base_repo, head_repo, user

    def parse_gitlab_merge_request(self, mr: Mapping[str, Any]) -> PullRequest:
        """Return a PullRequest from a GitLab merge request payload."""
        state = (
            PullState.OPEN if _text(mr, "state") == GITLAB_PULL_OPENED else PullState.CLOSED
        )
        return PullRequest(
            num=_number(mr, "iid"),
            head_commit=_text(mr, "sha"),
            url=_text(mr, "web_url"),
            branch=_text(mr, "source_branch"),
            author=_text(mr, "author", "username"),
            state=state,
        )

    def _gitlab_repo(self, project: Mapping[str, Any] | None) -> Repo:
        # Owner and name come from the path because the project's own
        # name and owner fields may carry capitals.
        path = _text(project, "path_with_namespace")
        http_url = _text(project, "git_http_url")
        owner, name = _owner_and_name(path)
        return Repo(
            full_name=path,
            owner=owner,
            name=name,
            clone_url=self._add_gitlab_auth(http_url),
            sanitized_clone_url=http_url,
        )

    def _add_gitlab_auth(self, clone_url: str) -> str:
        """Insert the GitLab credentials into an http or https clone URL."""
        creds = f"{self.gitlab_user}:{self.gitlab_token}@"
        replaced = clone_url.replace("https://", f"https://{creds}")
        return replaced.replace("http://", f"http://{creds}")