"""Provisioning package for the Tailspace dev container.

This package provides the `tailspace install-local` run which:
1. Installs CLI tools (skipping any already present)
2. Materializes prompt, alias and editor config files
3. Waits for the Docker daemon
4. Creates the Kind cluster if it does not exist
5. Hands the workspace to the remote user
"""

from .kind import ClusterResult, ClusterStatus, KindClusterProvisioner
from .materialize import (
    ConfigArtifact,
    ConfigMaterializer,
    MaterializeOutcome,
    MaterializeResult,
)
from .ownership import OwnershipFinalizer, OwnershipResult, OwnershipStatus
from .provisioner import DevcontainerProvisioner, catalog_names, default_artifacts
from .readiness import ReadinessPoller, ReadinessResult, docker_daemon_ready
from .report import ReportEntry, RunReport
from .steps import ProvisioningStep, StepOutcome, StepResult, StepRunner
from .tools import starship_init_step, tool_steps

__all__ = [
    # Steps
    "ProvisioningStep",
    "StepOutcome",
    "StepResult",
    "StepRunner",
    "tool_steps",
    "starship_init_step",
    # Config files
    "ConfigArtifact",
    "ConfigMaterializer",
    "MaterializeOutcome",
    "MaterializeResult",
    "default_artifacts",
    # Readiness
    "ReadinessPoller",
    "ReadinessResult",
    "docker_daemon_ready",
    # Cluster
    "KindClusterProvisioner",
    "ClusterResult",
    "ClusterStatus",
    # Ownership
    "OwnershipFinalizer",
    "OwnershipResult",
    "OwnershipStatus",
    # Run
    "DevcontainerProvisioner",
    "RunReport",
    "ReportEntry",
    "catalog_names",
]
