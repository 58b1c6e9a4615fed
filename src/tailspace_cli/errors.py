"""Exceptions raised by tailspace-cli."""

from __future__ import annotations


class TailspaceError(Exception):
    """Base error for tailspace-cli."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CommandError(TailspaceError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, args: list[str], returncode: int | None, stderr: str = ""):
        self.argv = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        cmd = " ".join(self.argv)
        if returncode is None:
            message = f"{cmd}: command not found"
        else:
            message = f"{cmd} exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr.splitlines()[-1]}"
        super().__init__(message)


class StepFailedError(TailspaceError):
    """A step marked fatal failed; aborts the provisioning run."""

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        super().__init__(f"Step '{step}' failed: {reason}")
