"""Unit tests for provisioning step runner."""

from __future__ import annotations

import pytest

from tailspace_cli.errors import CommandError, StepFailedError
from tailspace_cli.provision import ProvisioningStep, StepOutcome, StepRunner


class TestStepRunner:
    """Tests for StepRunner."""

    def test_skips_when_detector_true(self, make_tool):
        """Test a present tool is skipped without running its action."""
        tool = make_tool("node", installed=True)
        result = StepRunner().run(tool.step())

        assert result.outcome == StepOutcome.SKIPPED
        assert tool.action_calls == 0

    def test_installs_when_detector_false(self, make_tool):
        """Test a missing tool is installed."""
        tool = make_tool("node")
        result = StepRunner().run(tool.step())

        assert result.outcome == StepOutcome.INSTALLED
        assert result.ok is True
        assert tool.action_calls == 1

    def test_failure_is_captured(self, make_tool):
        """Test an action error becomes a FAILED result, not an exception."""
        tool = make_tool("kind", fail_with=CommandError(["curl"], 22, "404 Not Found"))
        result = StepRunner().run(tool.step())

        assert result.outcome == StepOutcome.FAILED
        assert result.ok is False
        assert "404 Not Found" in result.detail

    def test_failure_with_empty_message_uses_type(self, make_tool):
        """Test exceptions without text still produce a reason."""
        tool = make_tool("kind", fail_with=RuntimeError())
        result = StepRunner().run(tool.step())

        assert result.detail == "RuntimeError"

    def test_fatal_step_raises(self, make_tool):
        """Test a fatal step aborts with StepFailedError."""
        tool = make_tool("base", fail_with=OSError("disk full"))

        with pytest.raises(StepFailedError) as exc_info:
            StepRunner().run(tool.step(fatal=True))

        assert exc_info.value.step == "base"
        assert "disk full" in exc_info.value.message

    def test_run_all_continues_past_failures(self, make_tool):
        """Test later steps still run after an earlier failure."""
        broken = make_tool("broken", fail_with=RuntimeError("boom"))
        after = make_tool("after")

        results = StepRunner().run_all([broken.step(), after.step()])

        assert [r.outcome for r in results] == [StepOutcome.FAILED, StepOutcome.INSTALLED]
        assert after.action_calls == 1

    def test_second_run_is_idempotent(self, make_tool):
        """Test re-running the same steps installs nothing twice."""
        tools = [make_tool("a"), make_tool("b", installed=True), make_tool("c")]
        steps = [t.step() for t in tools]
        runner = StepRunner()

        first = runner.run_all(steps)
        second = runner.run_all(steps)

        assert [r.outcome for r in first] == [
            StepOutcome.INSTALLED,
            StepOutcome.SKIPPED,
            StepOutcome.INSTALLED,
        ]
        assert all(r.outcome == StepOutcome.SKIPPED for r in second)
        assert [t.action_calls for t in tools] == [1, 0, 1]

    def test_describe_used_for_skip_detail(self):
        """Test the version probe feeds the skip detail."""
        step = ProvisioningStep(
            name="node",
            detector=lambda: True,
            action=lambda: None,
            describe=lambda: "v20.11.0",
        )
        result = StepRunner().run(step)

        assert result.detail == "v20.11.0"

    def test_describe_errors_are_ignored(self):
        """Test a failing version probe does not fail the step."""

        def describe():
            raise OSError("no tty")

        step = ProvisioningStep(
            name="node", detector=lambda: True, action=lambda: None, describe=describe
        )
        result = StepRunner().run(step)

        assert result.outcome == StepOutcome.SKIPPED
        assert result.detail is None

    def test_title_falls_back_to_name(self):
        """Test step title defaults to its name."""
        step = ProvisioningStep(name="kind", detector=lambda: True, action=lambda: None)
        assert step.title == "kind"
        step.label = "Kind v0.20.0"
        assert step.title == "Kind v0.20.0"

    def test_detector_error_is_captured(self, make_tool):
        """Test a detector that raises yields FAILED and skips the action."""
        tool = make_tool("starship-init")

        def unreadable() -> bool:
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        step = ProvisioningStep(name="starship-init", detector=unreadable, action=tool.install)
        result = StepRunner().run(step)

        assert result.outcome == StepOutcome.FAILED
        assert "invalid start byte" in result.detail
        assert tool.action_calls == 0

    def test_detector_error_on_fatal_step_raises(self):
        """Test a fatal step whose detector raises aborts with StepFailedError."""

        def broken() -> bool:
            raise PermissionError("Permission denied")

        step = ProvisioningStep(name="base", detector=broken, action=lambda: None, fatal=True)

        with pytest.raises(StepFailedError, match="Permission denied"):
            StepRunner().run(step)

    def test_run_all_continues_past_detector_error(self, make_tool):
        after = make_tool("after")

        def broken() -> bool:
            raise OSError("I/O error")

        steps = [ProvisioningStep(name="x", detector=broken, action=lambda: None), after.step()]
        results = StepRunner().run_all(steps)

        assert [r.outcome for r in results] == [StepOutcome.FAILED, StepOutcome.INSTALLED]
