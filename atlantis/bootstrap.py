"""A guided, interactive quick-start that sets up and runs Atlantis locally."""

from __future__ import annotations

import contextlib
import itertools
import platform
import re
import shutil
import signal
import subprocess
import sys
import threading
import time
from collections.abc import Iterable
from typing import TextIO

from atlantis.downloads import (
    HASHICORP_RELEASES_URL,
    NGROK_DOWNLOAD_URL,
    TERRAFORM_VERSION,
    download_and_unzip,
    execute_cmd,
    get_tunnel_addr,
    read_password,
)
from atlantis.github_client import GitHubClient, GitHubError

TERRAFORM_EXAMPLE_REPO_OWNER = "hootsuite"
TERRAFORM_EXAMPLE_REPO = "atlantis-example"
ATLANTIS_PORT = "4141"
DATA_DIR = "/tmp/atlantis/data"

BOOTSTRAP_DESCRIPTION = """[white]Welcome to Atlantis bootstrap!

This mode walks you through setting up and using Atlantis. We will
- fork an example terraform project to your username
- install terraform (if not already in your PATH)
- install ngrok so we can expose Atlantis to GitHub
- start Atlantis

[bold]Press Ctrl-c at any time to exit
"""

TOKEN_INSTRUCTIONS = """
[white]To continue, we need you to create a GitHub personal access token
with [green]"repo" [white]scope so we can fork an example terraform project.

Follow GitHub's instructions for creating a personal access token for the
command line (we don't store any tokens):
[white]- use "atlantis" for the token description
- add "repo" scope
- copy the access token
"""

# Frames of the braille-dot spinner.
DEFAULT_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

_COLOR_CODES = {
    # foreground
    "default": "39",
    "black": "30",
    "red": "31",
    "green": "32",
    "yellow": "33",
    "blue": "34",
    "magenta": "35",
    "cyan": "36",
    "light_gray": "37",
    "dark_gray": "90",
    "light_red": "91",
    "light_green": "92",
    "light_yellow": "93",
    "light_blue": "94",
    "light_magenta": "95",
    "light_cyan": "96",
    "white": "97",
    # background
    "_default_": "49",
    "_black_": "40",
    "_red_": "41",
    "_green_": "42",
    "_yellow_": "43",
    "_blue_": "44",
    "_magenta_": "45",
    "_cyan_": "46",
    "_light_gray_": "47",
    "_dark_gray_": "100",
    "_light_red_": "101",
    "_light_green_": "102",
    "_light_yellow_": "103",
    "_light_blue_": "104",
    "_light_magenta_": "105",
    "_light_cyan_": "106",
    "_white_": "107",
    # attributes
    "bold": "1",
    "dim": "2",
    "underline": "4",
    "blink_slow": "5",
    "blink_fast": "6",
    "invert": "7",
    "hidden": "8",
    "reset": "0",
    "reset_bold": "21",
}
_CODE_RE = re.compile(r"\[([a-z0-9_-]+)\]", re.IGNORECASE)
_RESET = "\033[0m"


def colorize(text: str) -> str:
    """Replace [color] tags with ANSI escapes, resetting at the end if any were used.

    Bracketed words that are not known tags are left untouched.
    """
    used = False

    def replace(match: re.Match[str]) -> str:
        nonlocal used
        code = _COLOR_CODES.get(match.group(1))
        if code is None:
            return match.group(0)
        used = True
        return f"\033[{code}m"

    result = _CODE_RE.sub(replace, text)
    return result + _RESET if used else result


def _say(text: str, end: str = "\n") -> None:
    print(colorize(text), end=end, flush=True)


class Spinner:
    """A terminal spinner drawn by a background thread."""

    def __init__(
        self,
        frames: Iterable[str] = DEFAULT_FRAMES,
        delay: float = 0.1,
        stream: TextIO | None = None,
    ) -> None:
        self.frames = tuple(frames)
        self.delay = delay
        self._stream = stream
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None
        self._last = ""

    @property
    def running(self) -> bool:
        """Whether the spinner is currently drawing."""
        return self._thread is not None

    def _out(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _write(self, text: str) -> None:
        out = self._out()
        out.write(text)
        out.flush()

    def _spin(self) -> None:
        for frame in itertools.cycle(self.frames):
            if self._stopping.is_set():
                return
            self._write("\b" * len(self._last) + frame)
            self._last = frame
            if self._stopping.wait(self.delay):
                return

    def start(self) -> None:
        """Start drawing; does nothing if already running."""
        if self._thread is not None:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop drawing and erase the last frame; does nothing if not running."""
        if self._thread is None:
            return
        self._stopping.set()
        self._thread.join()
        self._thread = None
        if self._last:
            width = len(self._last)
            self._write("\b" * width + " " * width + "\b" * width)
            self._last = ""

    def __enter__(self) -> Spinner:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def terraform_download_url(version: str, os_name: str, arch: str) -> str:
    """Return the release archive URL for terraform on the given platform."""
    return (
        f"{HASHICORP_RELEASES_URL}/terraform/{version}/"
        f"terraform_{version}_{os_name}_{arch}.zip"
    )


def ngrok_download_url(os_name: str, arch: str) -> str:
    """Return the archive URL for ngrok on the given platform."""
    return f"{NGROK_DOWNLOAD_URL}/ngrok-stable-{os_name}-{arch}.zip"


def _platform() -> tuple[str, str]:
    """Return the current operating system and architecture in release naming."""
    os_name = platform.system().lower()
    machine = platform.machine().lower()
    arch = {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "i386": "386",
        "i686": "386",
        "x86": "386",
    }.get(machine, machine)
    return os_name, arch


def _terminate(proc: subprocess.Popen) -> None:
    if proc.poll() is None:
        proc.kill()
        proc.wait()


def _read_username() -> str:
    _say("\n[white][bold]GitHub username: ", end="")
    try:
        words = input().split()
    except EOFError:
        return ""
    return words[0] if words else ""


def _read_token() -> str:
    _say("[white][bold]GitHub access token (will be hidden): ", end="")
    try:
        return read_password()
    except (EOFError, OSError):
        return ""


def _wait_for_shutdown() -> None:
    received = threading.Event()

    def handler(signum: int, frame: object) -> None:
        received.set()

    previous = {
        sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        while not received.wait(0.5):
            pass
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


def start() -> None:
    """Walk the user through forking the example project and running Atlantis.

    Raises RuntimeError when a step fails.
    """
    spinner = Spinner()
    with contextlib.ExitStack() as cleanup:
        cleanup.callback(spinner.stop)
        _run(spinner, cleanup)


def _run(spinner: Spinner, cleanup: contextlib.ExitStack) -> None:
    _say(BOOTSTRAP_DESCRIPTION)
    username = _read_username()
    if not username:
        raise RuntimeError("please enter a valid github username")
    _say(TOKEN_INSTRUCTIONS)
    token = _read_token()
    client = GitHubClient(username, token)

    owner, repo = TERRAFORM_EXAMPLE_REPO_OWNER, TERRAFORM_EXAMPLE_REPO
    _say("\n[white]=> forking repo ", end="")
    spinner.start()
    try:
        client.create_fork(owner, repo)
    except GitHubError as exc:
        raise RuntimeError(f"forking repo {owner}/{repo}: {exc}") from exc
    if not client.check_fork_success(owner, repo):
        raise RuntimeError(f"didn't find forked repo {owner}/{repo}. fork unsuccessful")
    spinner.stop()
    _say("\n[green]=> fork completed!")

    os_name, arch = _platform()
    if shutil.which("terraform") is None:
        _say("[yellow]=> terraform not found in $PATH.")
        _say("[white]=> downloading terraform ", end="")
        spinner.start()
        url = terraform_download_url(TERRAFORM_VERSION, os_name, arch)
        try:
            download_and_unzip(url, "/tmp/terraform.zip", "/tmp")
        except Exception as exc:
            raise RuntimeError(f"downloading and unzipping terraform: {exc}") from exc
        spinner.stop()
        _say("\n[green]=> downloaded terraform successfully!")
        try:
            mover = execute_cmd("mv", ["/tmp/terraform", "/usr/local/bin/"])
        except OSError as exc:
            raise RuntimeError(f"moving terraform binary into /usr/local/bin: {exc}") from exc
        mover.wait()
        _say("[green]=> installed terraform successfully at /usr/local/bin")
    else:
        _say("[green]=> terraform found in $PATH!")

    _say("[white]=> downloading ngrok  ", end="")
    spinner.start()
    try:
        download_and_unzip(ngrok_download_url(os_name, arch), "/tmp/ngrok.zip", "/tmp")
    except Exception as exc:
        raise RuntimeError(f"downloading and unzipping ngrok: {exc}") from exc
    spinner.stop()
    _say("\n[green]=> downloaded ngrok successfully!")

    _say("[white]=> creating secure tunnel ", end="")
    spinner.start()
    try:
        ngrok = execute_cmd("/tmp/ngrok", ["http", ATLANTIS_PORT])
    except OSError as exc:
        raise RuntimeError(f"creating ngrok tunnel: {exc}") from exc
    cleanup.callback(_terminate, ngrok)

    # Give the tunnel time to come up.
    time.sleep(2)
    spinner.stop()
    _say("\n[green]=> started tunnel!")
    try:
        tunnel_url = get_tunnel_addr()
    except Exception as exc:
        raise RuntimeError(f"getting tunnel url: {exc}") from exc

    _say("[white]=> starting atlantis server ", end="")
    spinner.start()
    try:
        server = execute_cmd(
            sys.argv[0],
            [
                "server",
                "--gh-user", username,
                "--gh-token", token,
                "--data-dir", DATA_DIR,
                "--atlantis-url", tunnel_url,
            ],
        )
    except OSError as exc:
        raise RuntimeError(f"creating atlantis server: {exc}") from exc
    cleanup.callback(_terminate, server)
    spinner.stop()
    _say(f"\n[green]=> atlantis server is now securely exposed at [bold][underline]{tunnel_url}")

    _say("[white]=> creating atlantis webhook ", end="")
    spinner.start()
    try:
        client.create_webhook(username, repo, f"{tunnel_url}/events")
    except GitHubError as exc:
        raise RuntimeError(f"creating atlantis webhook: {exc}") from exc
    spinner.stop()
    _say("\n[green]=> atlantis webhook created!")

    _say("[white]=> creating a new pull request ", end="")
    spinner.start()
    try:
        pull_url = client.create_pull_request(username, repo, "example", "master")
    except GitHubError as exc:
        raise RuntimeError(
            f"creating new pull request for repo {username}/{repo}: {exc}"
        ) from exc
    spinner.stop()
    _say("\n[green]=> pull request created!")

    _say("[white]=> opening pull request ", end="")
    spinner.start()
    time.sleep(2)
    try:
        execute_cmd("open", [pull_url])
    except OSError:
        _say(f"[red]=> opening pull request failed. please go to: {pull_url} on the browser", end="")
    spinner.stop()

    _say("\n[_green_][light_green]atlantis is running ", end="")
    spinner.start()
    _say("[green] [press Ctrl-c to exit]")

    _wait_for_shutdown()
    spinner.stop()
    _say("\n[red]shutdown signal received, exiting....")
    _say("\n[green]Thank you for using atlantis :) \n[white]See the Atlantis documentation "
         "for more information about how to use atlantis in production.")