"""A small GitHub REST client covering what bootstrap and the end-to-end run need."""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

import requests

GITHUB_API_URL = "https://api.github.com"
BOOTSTRAP_HOOK_EVENTS = ("issue_comment", "pull_request", "pull_request_review", "push")
WELCOME_TITLE = "Welcome to Atlantis!"
PULL_REQUEST_BODY = (
    "In this pull request we will learn how to use atlantis. "
    "There are various commands that are available to you:\n"
    "* Start by typing `atlantis help` in the comments.\n"
    "* Next, lets plan by typing `atlantis plan` in the comments. "
    "That will run a `terraform plan`.\n"
    "* Now lets apply that plan. Type `atlantis apply` in the comments. "
    "This will run a `terraform apply`.\n"
    "\nThank you for trying out atlantis."
)


class GitHubError(Exception):
    """Raised when a GitHub API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """Authenticated access to the GitHub API with basic auth."""

    fork_check_attempts = 5
    fork_check_delay = 2.0

    def __init__(self, username: str, token: str, api_url: str = GITHUB_API_URL) -> None:
        self.username = username
        self.api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.auth = (username.strip(), token.strip())
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.api_url}{path}"
        try:
            response = self._session.request(method, url, json=json, timeout=30)
        except requests.RequestException as exc:
            raise GitHubError(f"{method} {url}: {exc}") from exc
        if not 200 <= response.status_code < 300:
            try:
                message = response.json().get("message", "")
            except ValueError:
                message = response.text
            raise GitHubError(
                f"{method} {url}: {response.status_code} {message}".rstrip(),
                response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def create_fork(self, owner: str, repo_name: str) -> None:
        """Fork owner/repo_name into the authenticated user's account.

        GitHub answers 202 while the fork is being made; that counts as success.
        """
        self._request("POST", f"/repos/{owner}/{repo_name}/forks")

    def check_fork_success(self, owner_name: str, fork_repo_name: str) -> bool:
        """Wait for a fork to finish, retrying a few times before giving up."""
        for _ in range(self.fork_check_attempts):
            try:
                self.create_fork(owner_name, fork_repo_name)
            except GitHubError:
                time.sleep(self.fork_check_delay)
                continue
            return True
        return False

    def create_webhook(
        self,
        owner_name: str,
        repo_name: str,
        hook_url: str,
        events: Sequence[str] = BOOTSTRAP_HOOK_EVENTS,
    ) -> int:
        """Create a JSON web hook posting to hook_url and return its id."""
        hook = {
            "name": "web",
            "events": list(events),
            "config": {"url": hook_url, "content_type": "json"},
            "active": True,
        }
        created = self._request("POST", f"/repos/{owner_name}/{repo_name}/hooks", json=hook)
        return int((created or {}).get("id") or 0)

    def delete_webhook(self, owner_name: str, repo_name: str, hook_id: int) -> None:
        """Delete the web hook with hook_id."""
        self._request("DELETE", f"/repos/{owner_name}/{repo_name}/hooks/{hook_id}")

    def create_pull_request(self, owner_name: str, repo_name: str, head: str, base: str) -> str:
        """Return the URL of the open welcome pull request for head into base, creating it if needed."""
        pulls = self._request("GET", f"/repos/{owner_name}/{repo_name}/pulls") or []
        for pull in pulls:
            head_ref = (pull.get("head") or {}).get("ref")
            base_ref = (pull.get("base") or {}).get("ref")
            if head_ref == head and base_ref == base:
                return str(pull.get("html_url") or "")
        created = self.open_pull_request(
            owner_name, repo_name, WELCOME_TITLE, head, base, PULL_REQUEST_BODY
        )
        return str(created.get("html_url") or "")

    def open_pull_request(
        self, owner_name: str, repo_name: str, title: str, head: str, base: str, body: str
    ) -> dict[str, Any]:
        """Open a pull request and return GitHub's description of it."""
        payload = {"title": title, "head": head, "base": base, "body": body}
        return self._request("POST", f"/repos/{owner_name}/{repo_name}/pulls", json=payload) or {}

    def create_comment(self, owner_name: str, repo_name: str, number: int, body: str) -> dict[str, Any]:
        """Comment on the issue or pull request with the given number."""
        return (
            self._request(
                "POST",
                f"/repos/{owner_name}/{repo_name}/issues/{number}/comments",
                json={"body": body},
            )
            or {}
        )

    def close_pull_request(self, owner_name: str, repo_name: str, number: int) -> dict[str, Any]:
        """Close the pull request with the given number."""
        return (
            self._request(
                "PATCH",
                f"/repos/{owner_name}/{repo_name}/pulls/{number}",
                json={"state": "closed"},
            )
            or {}
        )

    def delete_ref(self, owner_name: str, repo_name: str, ref: str) -> None:
        """Delete a git reference such as "heads/branch"."""
        self._request("DELETE", f"/repos/{owner_name}/{repo_name}/git/refs/{ref}")

    def combined_status(self, owner_name: str, repo_name: str, ref: str) -> dict[str, Any]:
        """Return the combined commit status for ref."""
        return self._request("GET", f"/repos/{owner_name}/{repo_name}/commits/{ref}/status") or {}