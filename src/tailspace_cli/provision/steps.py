"""Idempotent provisioning steps.

A step pairs a detector (is the tool already present?) with an install
action. The runner skips steps whose detector holds, runs the action
otherwise, and turns any failure into a FAILED result so the rest of the
run can proceed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from ..errors import StepFailedError
from ..shared.logging import ProvisionLogger, get_logger


class StepOutcome(Enum):
    """Result of running a single provisioning step."""

    SKIPPED = "skipped"  # Detector reported already present
    INSTALLED = "installed"  # Action completed
    FAILED = "failed"  # Action raised; run continues


@dataclass
class ProvisioningStep:
    """A detect-then-install unit of work."""

    name: str
    detector: Callable[[], bool]
    action: Callable[[], None]
    fatal: bool = False
    describe: Callable[[], str | None] | None = None
    label: str | None = None

    @property
    def title(self) -> str:
        return self.label or self.name


@dataclass
class StepResult:
    """Outcome of a step run."""

    name: str
    outcome: StepOutcome
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != StepOutcome.FAILED


class StepRunner:
    """Run provisioning steps with a continue-on-error policy."""

    def __init__(self, logger: ProvisionLogger | None = None):
        self.log = logger or get_logger(__name__)

    def run(self, step: ProvisioningStep) -> StepResult:
        """Run one step.

        Args:
            step: Step to evaluate.

        Returns:
            StepResult; never raises unless the step is fatal.

        Raises:
            StepFailedError: If a fatal step's detector or action fails.
        """
        try:
            present = step.detector()
        except Exception as e:
            reason = str(e) or type(e).__name__
            self.log.error(f"Failed to check {step.title}", reason=reason)
            if step.fatal:
                raise StepFailedError(step.name, reason) from e
            return StepResult(step.name, StepOutcome.FAILED, reason)

        if present:
            detail = self._describe(step)
            if detail:
                self.log.info(f"{step.title} already installed: {detail}")
            else:
                self.log.info(f"{step.title} already installed")
            return StepResult(step.name, StepOutcome.SKIPPED, detail)

        self.log.info(f"Installing {step.title}...")
        try:
            step.action()
        except Exception as e:
            reason = str(e) or type(e).__name__
            self.log.error(f"Failed to install {step.title}", reason=reason)
            if step.fatal:
                raise StepFailedError(step.name, reason) from e
            return StepResult(step.name, StepOutcome.FAILED, reason)

        self.log.success(f"Installed {step.title}")
        return StepResult(step.name, StepOutcome.INSTALLED)

    def run_all(self, steps: Iterable[ProvisioningStep]) -> list[StepResult]:
        """Run steps in order, collecting every result."""
        return [self.run(step) for step in steps]

    def _describe(self, step: ProvisioningStep) -> str | None:
        if step.describe is None:
            return None
        try:
            return step.describe()
        except Exception:
            return None
