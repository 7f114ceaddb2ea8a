"""Prevents concurrent commands on the same repo, pull and workspace."""

from __future__ import annotations

import threading


class WorkspaceLocker:
    """Tracks which repo/workspace/pull combinations are busy."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._locks: set[tuple[str, str, int]] = set()

    def try_lock(self, repo_full_name: str, workspace: str, pull_num: int) -> bool:
        """Acquire the lock; return False if it is already held."""
        key = (repo_full_name, workspace, pull_num)
        with self._mutex:
            if key in self._locks:
                return False
            self._locks.add(key)
            return True

    def unlock(self, repo_full_name: str, workspace: str, pull_num: int) -> None:
        """Release the lock if held; otherwise do nothing."""
        with self._mutex:
            self._locks.discard((repo_full_name, workspace, pull_num))