"""On-disk workspaces where pull request branches are cloned."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from atlantis.models import PullRequest, Repo

WORKSPACE_PREFIX = "repos"


class WorkspaceError(Exception):
    """Raised when a workspace cannot be prepared or found."""


class FileWorkspace:
    """Workspaces stored under a data directory on the file system."""

    def __init__(self, data_dir: str | os.PathLike[str]) -> None:
        self.data_dir = Path(data_dir)

    def clone(
        self,
        log: logging.Logger,
        base_repo: Repo,
        head_repo: Repo,
        pull: PullRequest,
        workspace: str,
    ) -> Path:
        """Clone head_repo, check out the pull's branch and return the clone's path."""
        clone_dir = self._clone_dir(base_repo, pull, workspace)

        # Runs are locked per repo/pull/workspace, so nobody else uses this directory.
        log.info("cleaning clone directory %r", str(clone_dir))
        try:
            if clone_dir.exists():
                shutil.rmtree(clone_dir)
        except OSError as exc:
            raise WorkspaceError(f"deleting old workspace: {exc}") from exc

        log.info("creating dir %r", str(clone_dir))
        try:
            clone_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as exc:
            raise WorkspaceError(f"creating new workspace: {exc}") from exc

        log.info("git cloning %r into %r", head_repo.sanitized_clone_url, str(clone_dir))
        try:
            result = subprocess.run(
                ["git", "clone", head_repo.clone_url, str(clone_dir)],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            raise WorkspaceError(f"cloning {head_repo.sanitized_clone_url}: {exc}") from exc
        if result.returncode != 0:
            output = (result.stdout or b"").decode(errors="replace")
            raise WorkspaceError(
                f"cloning {head_repo.sanitized_clone_url}: "
                f"exit status {result.returncode}: {output}"
            )

        log.info("checking out branch %r", pull.branch)
        try:
            result = subprocess.run(
                ["git", "checkout", pull.branch],
                cwd=str(clone_dir),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            raise WorkspaceError(f"checking out branch {pull.branch}: {exc}") from exc
        if result.returncode != 0:
            raise WorkspaceError(
                f"checking out branch {pull.branch}: exit status {result.returncode}"
            )
        return clone_dir

    def get_workspace(self, repo: Repo, pull: PullRequest, workspace: str) -> Path:
        """Return the path of an existing workspace."""
        repo_dir = self._clone_dir(repo, pull, workspace)
        try:
            repo_dir.stat()
        except OSError as exc:
            raise WorkspaceError(f"checking if workspace exists: {exc}") from exc
        return repo_dir

    def delete(self, repo: Repo, pull: PullRequest) -> None:
        """Remove every workspace for this repo and pull."""
        shutil.rmtree(self._repo_pull_dir(repo, pull), ignore_errors=True)

    def _repo_pull_dir(self, repo: Repo, pull: PullRequest) -> Path:
        return self.data_dir / WORKSPACE_PREFIX / repo.full_name / str(pull.num)

    def _clone_dir(self, repo: Repo, pull: PullRequest, workspace: str) -> Path:
        return self._repo_pull_dir(repo, pull) / workspace