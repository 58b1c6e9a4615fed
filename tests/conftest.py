"""Shared test fixtures for tailspace-cli tests.

- provision_config: ProvisionConfig pointing every host path into tmp_path
- StepRecorder: fake detector/action pair that counts calls
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import pytest
import structlog

from tailspace_cli.config import ProvisionConfig
from tailspace_cli.provision import ProvisioningStep


@pytest.fixture(autouse=True)
def reset_logging():
    """Keep structlog/logging configuration from leaking between tests."""
    yield
    structlog.reset_defaults()
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


@pytest.fixture
def provision_config(tmp_path: Path) -> ProvisionConfig:
    """Config whose workspace, home and system paths live under tmp_path."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return ProvisionConfig(
        remote_user="nobody-tailspace-test",
        workspace_dir=workspace,
        home_root=tmp_path / "home",
        bin_dir=tmp_path / "bin",
        aliases_path=tmp_path / "profile.d" / "kubectl-aliases.sh",
        kind_log_path=tmp_path / "kind-create.log",
    )


@dataclass
class StepRecorder:
    """A fake tool: installing it flips the detector to True."""

    name: str
    installed: bool = False
    fail_with: Exception | None = None
    detector_calls: int = 0
    action_calls: int = 0

    def detect(self) -> bool:
        self.detector_calls += 1
        return self.installed

    def install(self) -> None:
        self.action_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.installed = True

    def step(self, fatal: bool = False) -> ProvisioningStep:
        return ProvisioningStep(
            name=self.name,
            detector=self.detect,
            action=self.install,
            fatal=fatal,
        )


@pytest.fixture
def make_tool():
    """Factory for StepRecorder fakes."""
    return StepRecorder
