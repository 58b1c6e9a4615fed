"""Workspace ownership fix-up.

Runs last in a provisioning run so files created as root end up owned by
the container's remote user.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..shared.logging import ProvisionLogger, get_logger
from .host import user_exists


class OwnershipStatus(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class OwnershipResult:
    path: Path
    status: OwnershipStatus
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != OwnershipStatus.FAILED


def chown_tree(path: Path, user: str, group: str, recursive: bool = True) -> None:
    """``chown [-R] user:group path``; raises OSError/LookupError on failure.

    Symlinks below ``path`` are neither followed nor changed.
    """
    shutil.chown(path, user, group)
    if not recursive or not path.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(path):
        for name in dirnames + filenames:
            child = os.path.join(dirpath, name)
            if not os.path.islink(child):
                shutil.chown(child, user, group)


class OwnershipFinalizer:
    """Recursively hand the workspace to the remote user."""

    def __init__(self, logger: ProvisionLogger | None = None):
        self.log = logger or get_logger(__name__)

    def fix_ownership(self, root: Path, user: str, group: str) -> OwnershipResult:
        """Apply ``user:group`` to everything under ``root``.

        Returns:
            OwnershipResult; SKIPPED if the user or root is missing,
            FAILED (logged) if any chown fails.
        """
        self.log.info(f"Setting repo file ownership to {user}:{group}...")
        if not user_exists(user):
            reason = f"user {user} does not exist"
            self.log.info(f"Skipping chown ({reason})")
            return OwnershipResult(root, OwnershipStatus.SKIPPED, reason)
        if not root.is_dir():
            reason = f"repo not found at {root}"
            self.log.info(f"Skipping chown ({reason})")
            return OwnershipResult(root, OwnershipStatus.SKIPPED, reason)

        try:
            chown_tree(root, user, group)
        except (OSError, LookupError) as e:
            self.log.error("Failed to chown repo", path=str(root), reason=str(e))
            return OwnershipResult(root, OwnershipStatus.FAILED, str(e))

        self.log.success(f"Ownership applied to {root}")
        return OwnershipResult(root, OwnershipStatus.APPLIED)
