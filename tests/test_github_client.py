import base64
import json
from unittest import mock

import pytest
import responses

from atlantis.github_client import (
    BOOTSTRAP_HOOK_EVENTS,
    PULL_REQUEST_BODY,
    WELCOME_TITLE,
    GitHubClient,
    GitHubError,
)

API = "http://localhost/api"


@pytest.fixture
def rsps():
    with responses.RequestsMock() as mocked:
        yield mocked


@pytest.fixture
def client():
    return GitHubClient(" user ", " token ", api_url=API)


def test_basic_auth_is_trimmed(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/hooks", status=201, json={"id": 1})
    assert client.create_webhook("owner", "repo", "u") == 1
    header = rsps.calls[0].request.headers["Authorization"]
    assert header.startswith("Basic ")
    assert base64.b64decode(header[len("Basic "):]).decode() == "user:token"


def test_create_fork_accepts_202(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/forks", status=202, json={})
    assert client.create_fork("owner", "repo") is None
    assert len(rsps.calls) == 1


def test_create_fork_error(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/forks", status=404, json={"message": "Not Found"})
    with pytest.raises(GitHubError) as excinfo:
        client.create_fork("owner", "repo")
    assert excinfo.value.status_code == 404
    assert "Not Found" in str(excinfo.value)


def test_check_fork_success_first_try(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/forks", status=202, json={})
    with mock.patch("atlantis.github_client.time.sleep") as sleep:
        assert client.check_fork_success("owner", "repo") is True
    assert sleep.call_count == 0


def test_check_fork_success_gives_up(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/forks", status=500, json={"message": "boom"})
    with mock.patch("atlantis.github_client.time.sleep") as sleep:
        assert client.check_fork_success("owner", "repo") is False
    assert len(rsps.calls) == client.fork_check_attempts
    assert sleep.call_count == client.fork_check_attempts


def test_check_fork_success_after_retry(client, rsps):
    url = f"{API}/repos/owner/repo/forks"
    rsps.add(responses.POST, url, status=500, json={})
    rsps.add(responses.POST, url, status=202, json={})
    with mock.patch("atlantis.github_client.time.sleep"):
        assert client.check_fork_success("owner", "repo") is True
    assert len(rsps.calls) == 2


def test_create_webhook_payload(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/hooks", status=201, json={"id": 42})
    hook_id = client.create_webhook("owner", "repo", "https://hooks.example.com/events")
    assert hook_id == 42
    sent = json.loads(rsps.calls[0].request.body)
    assert sent == {
        "name": "web",
        "events": list(BOOTSTRAP_HOOK_EVENTS),
        "config": {"url": "https://hooks.example.com/events", "content_type": "json"},
        "active": True,
    }


def test_create_webhook_custom_events(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/hooks", status=201, json={"id": 7})
    assert client.create_webhook("owner", "repo", "u", ["push"]) == 7
    assert json.loads(rsps.calls[0].request.body)["events"] == ["push"]


def test_delete_webhook(client, rsps):
    rsps.add(responses.DELETE, f"{API}/repos/owner/repo/hooks/7", status=204)
    assert client.delete_webhook("owner", "repo", 7) is None
    assert rsps.calls[0].request.method == "DELETE"


def test_delete_webhook_error(client, rsps):
    rsps.add(responses.DELETE, f"{API}/repos/owner/repo/hooks/7", status=404, json={"message": "Not Found"})
    with pytest.raises(GitHubError) as excinfo:
        client.delete_webhook("owner", "repo", 7)
    assert excinfo.value.status_code == 404


def test_create_pull_request_existing(client, rsps):
    rsps.add(
        responses.GET,
        f"{API}/repos/owner/repo/pulls",
        json=[
            {"head": {"ref": "other"}, "base": {"ref": "master"}, "html_url": "wrong"},
            {"head": {"ref": "example"}, "base": {"ref": "master"}, "html_url": "right"},
        ],
    )
    assert client.create_pull_request("owner", "repo", "example", "master") == "right"
    assert len(rsps.calls) == 1


def test_create_pull_request_new(client, rsps):
    rsps.add(responses.GET, f"{API}/repos/owner/repo/pulls", json=[])
    rsps.add(responses.POST, f"{API}/repos/owner/repo/pulls", status=201, json={"html_url": "new"})
    assert client.create_pull_request("owner", "repo", "example", "master") == "new"
    sent = json.loads(rsps.calls[1].request.body)
    assert sent == {
        "title": WELCOME_TITLE,
        "head": "example",
        "base": "master",
        "body": PULL_REQUEST_BODY,
    }


def test_create_pull_request_list_error(client, rsps):
    rsps.add(responses.GET, f"{API}/repos/owner/repo/pulls", status=403, json={"message": "nope"})
    with pytest.raises(GitHubError):
        client.create_pull_request("owner", "repo", "example", "master")


def test_open_pull_request_returns_payload(client, rsps):
    rsps.add(
        responses.POST,
        f"{API}/repos/owner/repo/pulls",
        status=201,
        json={"number": 3, "html_url": "pr"},
    )
    pull = client.open_pull_request("owner", "repo", "title", "owner:b", "master", "")
    assert pull["number"] == 3
    assert json.loads(rsps.calls[0].request.body)["head"] == "owner:b"


def test_create_comment(client, rsps):
    rsps.add(responses.POST, f"{API}/repos/owner/repo/issues/3/comments", status=404, json={"message": "Not Found"})
    with pytest.raises(GitHubError) as excinfo:
        client.create_comment("owner", "repo", 3, "run plan")
    assert excinfo.value.status_code == 404
    assert json.loads(rsps.calls[0].request.body) == {"body": "run plan"}


def test_close_pull_request(client, rsps):
    rsps.add(responses.PATCH, f"{API}/repos/owner/repo/pulls/3", json={"number": 3, "state": "closed"})
    closed = client.close_pull_request("owner", "repo", 3)
    assert closed["state"] == "closed"
    assert json.loads(rsps.calls[0].request.body) == {"state": "closed"}


def test_delete_ref(client, rsps):
    rsps.add(responses.DELETE, f"{API}/repos/owner/repo/git/refs/heads/branch", status=204)
    assert client.delete_ref("owner", "repo", "heads/branch") is None
    assert rsps.calls[0].request.url.endswith("/git/refs/heads/branch")


def test_delete_ref_error(client, rsps):
    rsps.add(responses.DELETE, f"{API}/repos/owner/repo/git/refs/heads/x", status=422, body="bad")
    with pytest.raises(GitHubError) as excinfo:
        client.delete_ref("owner", "repo", "heads/x")
    assert excinfo.value.status_code == 422


def test_combined_status(client, rsps):
    payload = {"statuses": [{"context": "Atlantis", "state": "success"}]}
    rsps.add(responses.GET, f"{API}/repos/owner/repo/commits/branch/status", json=payload)
    assert client.combined_status("owner", "repo", "branch") == payload