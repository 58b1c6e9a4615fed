"""Kind cluster provisioning.

Creates the local Kubernetes cluster if no cluster with the same name
exists. Creation output is written to a log file and echoed line by line
through the logger.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..shared.logging import ProvisionLogger, get_logger
from ..shared.paths import KIND_CREATE_LOG


class ClusterStatus(Enum):
    """Outcome of ensuring a Kind cluster."""

    ALREADY_EXISTS = "already_exists"
    CREATED = "created"
    CREATE_FAILED = "create_failed"
    SKIPPED = "skipped"  # Container runtime unavailable


@dataclass
class ClusterResult:
    """Result of ensure_cluster."""

    name: str
    status: ClusterStatus
    log_path: Path | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (ClusterStatus.ALREADY_EXISTS, ClusterStatus.CREATED)


class KindClusterProvisioner:
    """Create-if-absent management of a Kind cluster."""

    def __init__(
        self,
        wait: str = "5m",
        log_path: Path | None = None,
        logger: ProvisionLogger | None = None,
    ):
        """Initialize provisioner.

        Args:
            wait: Value for ``kind create cluster --wait``.
            log_path: Where creation output is written.
            logger: Logger to use.
        """
        self.wait = wait
        self.log_path = log_path or KIND_CREATE_LOG
        self.log = logger or get_logger(__name__)

    def list_clusters(self) -> list[str]:
        """Names reported by ``kind get clusters``; empty on any error."""
        try:
            result = subprocess.run(
                ["kind", "get", "clusters"],
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            return []
        if result.returncode != 0:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def exists(self, name: str) -> bool:
        """Exact-name membership; ``dev`` does not match ``dev-2``."""
        return name in self.list_clusters()

    def ensure_cluster(self, name: str) -> ClusterResult:
        """Create cluster ``name`` unless it already exists.

        Args:
            name: Cluster name.

        Returns:
            ClusterResult; failures are reported, never raised.
        """
        if self.exists(name):
            self.log.info(f"Kind cluster '{name}' already exists")
            return ClusterResult(name, ClusterStatus.ALREADY_EXISTS)

        self.log.info(f"Creating Kind cluster '{name}'...", log=str(self.log_path))
        ok, message = self._create(name)
        if ok:
            self.log.success(f"Kind cluster '{name}' created successfully")
            return ClusterResult(name, ClusterStatus.CREATED, self.log_path, message)

        self.log.error(
            f"Failed to create Kind cluster (see {self.log_path})", reason=message
        )
        return ClusterResult(name, ClusterStatus.CREATE_FAILED, self.log_path, message)

    def skip(self, name: str, reason: str) -> ClusterResult:
        """Record that cluster creation was not attempted."""
        self.log.error(f"{reason}, skipping Kind cluster creation")
        return ClusterResult(name, ClusterStatus.SKIPPED, message=reason)

    def _create(self, name: str) -> tuple[bool, str]:
        args = ["kind", "create", "cluster", "--name", name, "--wait", self.wait]
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "w") as log_file:
                try:
                    process = subprocess.Popen(
                        args,
                        stdout=subprocess.PIPE,
                        stderr=subprocess.STDOUT,
                        text=True,
                    )
                except FileNotFoundError:
                    log_file.write("kind: command not found\n")
                    return False, "kind not found. Is Kind installed?"
                # Tee: the log file keeps the full output, the console follows along
                for line in process.stdout:
                    log_file.write(line)
                    self.log.info(line.rstrip("\n"), cluster=name)
                returncode = process.wait()
        except OSError as e:
            return False, str(e)

        if returncode != 0:
            return False, f"kind exited with status {returncode}"
        return True, "Cluster created"
