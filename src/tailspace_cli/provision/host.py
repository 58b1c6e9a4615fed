"""Host inspection and command helpers.

Thin wrappers over subprocess, shutil and httpx. Detectors built from these
are plain predicates; actions raise CommandError on failure.
"""

from __future__ import annotations

import os
import pwd
import shutil
import subprocess
from pathlib import Path

import httpx

from ..errors import CommandError

DOWNLOAD_TIMEOUT = 120.0


def run_command(
    args: list[str],
    input: str | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """Run a command, raising CommandError unless it exits 0."""
    try:
        result = subprocess.run(
            args,
            input=input,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise CommandError(args, None) from None
    if result.returncode != 0:
        raise CommandError(args, result.returncode, result.stderr or "")
    return result


def command_succeeds(args: list[str], timeout: float | None = 10) -> bool:
    """Return True if the command runs and exits 0."""
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def command_exists(name: str) -> bool:
    """Equivalent of ``command -v NAME``."""
    return shutil.which(name) is not None


def command_version(args: list[str]) -> str | None:
    """First line of a version command's output, or None."""
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=10)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    output = result.stdout.strip() or result.stderr.strip()
    return output.splitlines()[0] if output else None


def dpkg_listing() -> str:
    """Output of ``dpkg -l``; empty when dpkg is unavailable."""
    try:
        result = subprocess.run(["dpkg", "-l"], capture_output=True, text=True)
    except FileNotFoundError:
        return ""
    return result.stdout


def package_installed(package: str, listing: str | None = None) -> bool:
    """Check for a ``dpkg -l`` line beginning with ``ii  <package>``.

    This is a prefix match: ``git`` is also satisfied by ``git-man``.
    """
    if listing is None:
        listing = dpkg_listing()
    marker = f"ii  {package}"
    return any(line.startswith(marker) for line in listing.splitlines())


def apt_install(*packages: str) -> None:
    run_command(["apt-get", "install", "-y", *packages])


def user_exists(user: str) -> bool:
    try:
        pwd.getpwnam(user)
    except KeyError:
        return False
    return True


def fetch_text(url: str) -> str:
    """GET a URL and return the body as text."""
    response = httpx.get(url, follow_redirects=True, timeout=DOWNLOAD_TIMEOUT)
    response.raise_for_status()
    return response.text


def download_file(url: str, dest: Path, mode: int = 0o755) -> Path:
    """Stream a URL to ``dest`` and set its mode."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_name(f".{dest.name}.part")
    with httpx.stream("GET", url, follow_redirects=True, timeout=DOWNLOAD_TIMEOUT) as response:
        response.raise_for_status()
        with open(tmp, "wb") as f:
            for chunk in response.iter_bytes():
                f.write(chunk)
    os.chmod(tmp, mode)
    tmp.replace(dest)
    return dest


def run_script(url: str, interpreter: list[str]) -> None:
    """Fetch an installer script and pipe it to ``interpreter``."""
    script = fetch_text(url)
    run_command(interpreter, input=script)
