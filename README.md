# atlantis

Building blocks for a Terraform pull request workflow on GitHub and GitLab:
parsing comment commands such as `atlantis plan staging --verbose`, turning
webhook payloads into models, locking per repo/pull/workspace, managing
cloned workspaces on disk, plus a guided bootstrap and an end-to-end check
against a running server.

## Installation

```
pip install .
```

## Command line

```
atlantis version      # prints "atlantis 0.2.4"
atlantis bootstrap    # guided, interactive quick-start
```

Run with no command, `atlantis` prints its help.

`atlantis bootstrap` asks for a GitHub username and a personal access token
with `repo` scope, then:

- forks the example repository `hootsuite/atlantis-example`;
- if `terraform` is not on `PATH`, downloads terraform 0.10.8 into `/tmp`
  and moves it to `/usr/local/bin`;
- downloads ngrok into `/tmp` and starts a tunnel to port 4141;
- starts `<this program> server ...` with the GitHub credentials, data
  directory `/tmp/atlantis/data` and the tunnel URL;
- creates a web hook pointing at `<tunnel>/events`;
- opens (or reuses) a pull request from `example` into `master` and tries
  to show it with `open`;
- waits for Ctrl-C or SIGTERM, then stops the processes it started.

Errors are printed in red on standard error and the exit status is 1.

## End-to-end tests

`atlantis-e2e` pushes a change for each project type (`standalone`,
`standalone-with-workspace`) to a GitHub repository, comments the plan
command, and polls the commit status with context `Atlantis` until it is
final (up to 20 polls). Each pull request is closed and its branch deleted
afterwards; the web hook is removed at the end. It is configured through
the environment:

| Variable                 | Default                      |
|--------------------------|------------------------------|
| `GITHUB_USERNAME`        | required                     |
| `GITHUB_PASSWORD`        | required                     |
| `ATLANTIS_URL`           | `http://localhost:4141`      |
| `GITHUB_REPO_OWNER_NAME` | `hootsuite`                  |
| `GITHUB_REPO_NAME`       | `atlantis-tests`             |
| `CLONE_DIR`              | `/tmp/atlantis-tests`        |

```
atlantis-e2e
```

The exit status is 0 only if every project's run ended in `success`.

## Library use

```python
from atlantis.event_parser import EventParser
from atlantis.models import VCSHost

parser = EventParser(github_user="bot", github_token="token")
command = parser.determine_command("atlantis plan staging --verbose", VCSHost.GITHUB)
print(command.name, command.workspace, command.verbose)  # plan staging True
```

`determine_command` raises `EventParseError` for comments that are not
commands. The parser also reads GitHub comment and pull request payloads
and GitLab merge, note and merge request payloads (as dictionaries) into
`Repo`, `PullRequest` and `User` from `atlantis.models`.

Other modules:

- `atlantis.commands` – `CommandName`, `Command`, `CommandResponse`,
  `CommandContext`, the `Executor` base class and `HelpExecutor`.
- `atlantis.locker.WorkspaceLocker` – `try_lock` / `unlock` for a repo,
  workspace and pull number.
- `atlantis.workspace.FileWorkspace` – `clone`, `get_workspace` and
  `delete` under `<data_dir>/repos/<owner>/<repo>/<pull>/<workspace>`;
  failures raise `WorkspaceError`.
- `atlantis.github_client.GitHubClient` – forks, web hooks, pull requests,
  comments, refs and combined statuses over the GitHub REST API; failures
  raise `GitHubError`.
- `atlantis.downloads` – downloading, unzipping and starting processes.

## What this package does not do

There is no `server` command and no web server to receive webhooks, so the
server step of `atlantis bootstrap` starts a command this CLI does not
accept. There are no plan or apply executors, no Terraform runner, no
comment renderer and no command handler wiring the parser, locker and
workspaces together; `HelpExecutor` is the only executor provided.

## Development

```
pip install -e .[test]
pytest
```