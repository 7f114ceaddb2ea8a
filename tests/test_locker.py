from atlantis.locker import WorkspaceLocker

REPO = "repo/owner"
WORKSPACE = "default"


def test_try_lock():
    locker = WorkspaceLocker()
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, WORKSPACE, 1) is False


def test_try_lock_different_workspaces():
    locker = WorkspaceLocker()
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, "new-workspace", 1) is True
    assert locker.try_lock(REPO, WORKSPACE, 1) is False
    assert locker.try_lock(REPO, "new-workspace", 1) is False


def test_try_lock_different_repo():
    locker = WorkspaceLocker()
    new_repo = "owner/newrepo"
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(new_repo, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, WORKSPACE, 1) is False
    assert locker.try_lock(new_repo, WORKSPACE, 1) is False


def test_try_lock_different_pull():
    locker = WorkspaceLocker()
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, WORKSPACE, 2) is True
    assert locker.try_lock(REPO, WORKSPACE, 1) is False
    assert locker.try_lock(REPO, WORKSPACE, 2) is False


def test_unlock():
    locker = WorkspaceLocker()
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    locker.unlock(REPO, WORKSPACE, 1)
    assert locker.try_lock(REPO, WORKSPACE, 1) is True


def test_unlock_different_workspaces():
    locker = WorkspaceLocker()
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, "new-workspace", 1) is True
    locker.unlock(REPO, WORKSPACE, 1)
    locker.unlock(REPO, "new-workspace", 1)
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, "new-workspace", 1) is True


def test_unlock_different_repos():
    locker = WorkspaceLocker()
    new_repo = "owner/newrepo"
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(new_repo, WORKSPACE, 1) is True
    locker.unlock(REPO, WORKSPACE, 1)
    locker.unlock(new_repo, WORKSPACE, 1)
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(new_repo, WORKSPACE, 1) is True


def test_unlock_different_pulls():
    locker = WorkspaceLocker()
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, WORKSPACE, 2) is True
    locker.unlock(REPO, WORKSPACE, 1)
    locker.unlock(REPO, WORKSPACE, 2)
    assert locker.try_lock(REPO, WORKSPACE, 1) is True
    assert locker.try_lock(REPO, WORKSPACE, 2) is True


def test_unlock_without_lock_is_harmless():
    locker = WorkspaceLocker()
    locker.unlock(REPO, WORKSPACE, 1)
    assert locker.try_lock(REPO, WORKSPACE, 1) is True