"""Configuration file materialization.

Resolves a target config file with the precedence: repo-tracked source
(always wins) > embedded default (only when the target is missing) >
existing target (left byte-for-byte untouched).
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..shared.logging import ProvisionLogger, get_logger
from .host import user_exists
from .ownership import chown_tree


class MaterializeOutcome(Enum):
    """How a config artifact's final content was decided."""

    COPIED_FROM_SOURCE = "copied_from_source"
    WROTE_DEFAULT = "wrote_default"
    LEFT_EXISTING = "left_existing"
    FAILED = "failed"


@dataclass
class ConfigArtifact:
    """A config file the provisioner is responsible for."""

    name: str
    target: Path
    default_content: str
    source: Path | None = None
    owner: str | None = None
    group: str | None = None
    mode: int | None = None
    recursive_owner: bool = False  # chown the target's directory tree
    managed: bool = False  # default is rewritten on every run


@dataclass
class MaterializeResult:
    """Result of materializing one artifact."""

    name: str
    target: Path
    outcome: MaterializeOutcome
    ownership_applied: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != MaterializeOutcome.FAILED


class ConfigMaterializer:
    """Write config artifacts without clobbering untracked user edits."""

    def __init__(self, logger: ProvisionLogger | None = None):
        self.log = logger or get_logger(__name__)

    def materialize(self, artifact: ConfigArtifact) -> MaterializeResult:
        """Resolve and write one artifact, then fix its ownership.

        Args:
            artifact: Artifact to materialize.

        Returns:
            MaterializeResult describing which rule applied.
        """
        self.log.info(f"Configuring {artifact.name}...")
        try:
            outcome = self._write(artifact)
        except OSError as e:
            self.log.error(
                f"Failed to write {artifact.name}", path=str(artifact.target), reason=str(e)
            )
            return MaterializeResult(
                artifact.name, artifact.target, MaterializeOutcome.FAILED, error=str(e)
            )

        if outcome == MaterializeOutcome.COPIED_FROM_SOURCE:
            self.log.info(f"Copied {artifact.target.name} from repo", source=str(artifact.source))
        elif outcome == MaterializeOutcome.WROTE_DEFAULT:
            self.log.info(f"Created default {artifact.target.name}", path=str(artifact.target))
        else:
            self.log.info(f"Keeping existing {artifact.target.name}", path=str(artifact.target))

        owned = self._apply_ownership(artifact)
        return MaterializeResult(artifact.name, artifact.target, outcome, ownership_applied=owned)

    def _write(self, artifact: ConfigArtifact) -> MaterializeOutcome:
        target = artifact.target
        target.parent.mkdir(parents=True, exist_ok=True)

        if artifact.source is not None and artifact.source.is_file():
            shutil.copyfile(artifact.source, target)
            outcome = MaterializeOutcome.COPIED_FROM_SOURCE
        elif artifact.managed or not target.exists():
            target.write_text(artifact.default_content, encoding="utf-8")
            outcome = MaterializeOutcome.WROTE_DEFAULT
        else:
            return MaterializeOutcome.LEFT_EXISTING

        if artifact.mode is not None:
            os.chmod(target, artifact.mode)
        return outcome

    def _apply_ownership(self, artifact: ConfigArtifact) -> bool:
        if not artifact.owner or not user_exists(artifact.owner):
            return False
        group = artifact.group or artifact.owner
        path = artifact.target.parent if artifact.recursive_owner else artifact.target
        try:
            chown_tree(path, artifact.owner, group, recursive=artifact.recursive_owner)
        except (OSError, LookupError) as e:
            self.log.error(f"Failed to chown {artifact.name}", path=str(path), reason=str(e))
            return False
        return True
