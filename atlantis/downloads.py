"""Helpers for fetching, unpacking and launching the tools bootstrap needs."""

from __future__ import annotations

import getpass
import os
import subprocess
import zipfile
from collections.abc import Sequence
from pathlib import Path

import requests

HASHICORP_RELEASES_URL = "https://releases.hashicorp.com"
TERRAFORM_VERSION = "0.10.8"
NGROK_DOWNLOAD_URL = "https://bin.equinox.io/c/4VmDzA7iaHb"
NGROK_API_URL = "http://localhost:4040"

_CHUNK_SIZE = 64 * 1024
_DEFAULT_FILE_MODE = 0o666
_DEFAULT_DIR_MODE = 0o777


def read_password() -> str:
    """Read a line from the terminal without echoing it."""
    return getpass.getpass(prompt="")


def download_file(url: str, path: str | os.PathLike[str]) -> None:
    """Save the body fetched from url to path."""
    with open(path, "wb") as output:
        with requests.get(url, stream=True, timeout=60) as response:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if chunk:
                    output.write(chunk)


def _member_mode(info: zipfile.ZipInfo, default: int) -> int:
    mode = (info.external_attr >> 16) & 0o777
    return mode or default


def unzip(archive: str | os.PathLike[str], target: str | os.PathLike[str]) -> None:
    """Extract every member of archive into the target directory."""
    target_dir = Path(target)
    with zipfile.ZipFile(archive) as reader:
        for info in reader.infolist():
            path = target_dir / info.filename
            if info.is_dir():
                os.makedirs(path, mode=_member_mode(info, _DEFAULT_DIR_MODE), exist_ok=True)
                continue
            fd = os.open(
                path,
                os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
                _member_mode(info, _DEFAULT_FILE_MODE),
            )
            with os.fdopen(fd, "wb") as target_file, reader.open(info) as member:
                while chunk := member.read(_CHUNK_SIZE):
                    target_file.write(chunk)


def get_tunnel_addr(api_url: str = NGROK_API_URL) -> str:
    """Return the public URL of the second tunnel reported by the ngrok API."""
    response = requests.get(f"{api_url}/api/tunnels", timeout=30)
    data = response.json()
    tunnels = data.get("tunnels") if isinstance(data, dict) else None
    if not isinstance(tunnels, list) or len(tunnels) != 2:
        raise ValueError("didn't find tunnels that were expected to be created")
    return str(tunnels[1].get("public_url", ""))


def download_and_unzip(
    url: str, path: str | os.PathLike[str], target: str | os.PathLike[str]
) -> None:
    """Download the zip at url to path, then extract it into target."""
    download_file(url, path)
    unzip(path, target)


def execute_cmd(cmd: str, args: Sequence[str]) -> subprocess.Popen:
    """Start cmd with args and return the running process without waiting."""
    return subprocess.Popen([cmd, *args])