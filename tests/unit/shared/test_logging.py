"""Unit tests for tailspace_cli.shared.logging module."""

import json

from tailspace_cli.shared.logging import PrefixedRenderer, configure_logging, get_logger


class TestPrefixedRenderer:
    """Tests for the human-readable line format."""

    def test_line_format(self):
        line = PrefixedRenderer()(
            None,
            "info",
            {"timestamp": "2026-01-02T03:04:05Z", "level": "info", "event": "Installing kind..."},
        )
        assert line == "2026-01-02T03:04:05Z [devcontainer-setup] INFO: Installing kind..."

    def test_extra_keys(self):
        line = PrefixedRenderer()(
            None,
            "error",
            {"level": "error", "event": "Failed", "reason": "boom", "logger": "x"},
        )
        assert line == "[devcontainer-setup] ERROR: Failed reason=boom"


class TestConfigureLogging:
    """Tests for configure_logging and ProvisionLogger."""

    def test_levels_to_stderr(self, capsys):
        configure_logging("info")
        log = get_logger("test")

        log.info("Checking Docker daemon...")
        log.error("Docker did not become ready within timeout")
        log.success("Docker is ready")
        log.debug("hidden")

        err = capsys.readouterr().err
        assert "[devcontainer-setup] INFO: Checking Docker daemon..." in err
        assert "[devcontainer-setup] ERROR: Docker did not become ready" in err
        assert "[devcontainer-setup] SUCCESS: Docker is ready" in err
        assert "hidden" not in err

    def test_json_output(self, capsys):
        configure_logging("info", json_output=True)

        get_logger("test").success("Installed Kind", version="v0.20.0")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["event"] == "Installed Kind"
        assert record["level"] == "success"
        assert record["version"] == "v0.20.0"
        assert "timestamp" in record

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "setup.log"
        configure_logging("debug", log_file=log_file)

        get_logger("test").bind(step="kind").debug("probing")

        assert "DEBUG: probing step=kind" in log_file.read_text()
