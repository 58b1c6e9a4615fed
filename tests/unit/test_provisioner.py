"""Scenario tests for the full provisioning run."""

from __future__ import annotations

import io
from unittest.mock import MagicMock, patch

import pytest

from tailspace_cli.errors import StepFailedError
from tailspace_cli.provision import (
    DevcontainerProvisioner,
    KindClusterProvisioner,
    ProvisioningStep,
    ReadinessPoller,
    catalog_names,
    default_artifacts,
)
from tailspace_cli.shared.logging import configure_logging


class DockerProbe:
    def __init__(self, ready_on: int | None):
        self.ready_on = ready_on
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.ready_on is not None and self.calls >= self.ready_on


class KindBinary:
    """Fake `kind` for subprocess.run and Popen inside the kind module."""

    def __init__(self):
        self.clusters: list[str] = []
        self.creates = 0

    def __call__(self, cmd, *args, **kwargs):
        assert cmd[:3] == ["kind", "get", "clusters"]
        return MagicMock(returncode=0, stdout="".join(f"{c}\n" for c in self.clusters))

    def popen(self, cmd, *args, **kwargs):
        self.creates += 1
        self.clusters.append(cmd[cmd.index("--name") + 1])
        process = MagicMock()
        process.stdout = io.StringIO("Creating cluster ...\n")
        process.wait.return_value = 0
        return process


@pytest.fixture
def kind_binary():
    fake = KindBinary()
    with patch("tailspace_cli.provision.kind.subprocess.run", side_effect=fake):
        with patch("tailspace_cli.provision.kind.subprocess.Popen", side_effect=fake.popen):
            yield fake


@pytest.fixture
def owner_exists():
    with patch("tailspace_cli.provision.ownership.user_exists", return_value=True):
        with patch("tailspace_cli.provision.ownership.chown_tree") as mock_chown:
            yield mock_chown


def _provisioner(config, tools, probe, max_attempts=3):
    return DevcontainerProvisioner(
        config,
        steps=[t.step() for t in tools],
        docker_probe=probe,
        poller=ReadinessPoller(
            max_attempts=max_attempts, interval_seconds=2.0, sleep=lambda s: None
        ),
        cluster=KindClusterProvisioner(log_path=config.kind_log_path),
    )


class TestDevcontainerProvisioner:
    """Tests for DevcontainerProvisioner."""

    def test_fresh_host(self, provision_config, make_tool, kind_binary, owner_exists):
        """Test fresh host: installs, Docker ready on check 2, cluster created."""
        tools = [make_tool("nodejs"), make_tool("kubectl"), make_tool("kind")]
        probe = DockerProbe(ready_on=2)

        report = _provisioner(provision_config, tools, probe).run()

        assert report.outcomes("tools") == ["installed"] * 3
        assert report.outcomes("config") == ["wrote_default"] * 3
        assert report.outcomes("docker") == ["ready"]
        assert report.outcomes("cluster") == ["created"]
        assert report.outcomes("ownership") == ["applied"]
        assert probe.calls == 2
        assert report.succeeded is True
        owner_exists.assert_called_once_with(
            provision_config.workspace_dir, provision_config.remote_user, provision_config.group
        )

    def test_second_run_is_idempotent(self, provision_config, make_tool, kind_binary, owner_exists):
        """Test a repeat run installs nothing and keeps the cluster."""
        tools = [make_tool("nodejs"), make_tool("neovim")]
        provisioner = _provisioner(provision_config, tools, DockerProbe(ready_on=1))

        provisioner.run()
        starship = provision_config.home_dir / ".config" / "starship.toml"
        starship.write_text("# tweaked by hand\n")
        report = provisioner.run()

        assert report.outcomes("tools") == ["skipped", "skipped"]
        assert report.outcomes("config") == ["left_existing", "wrote_default", "left_existing"]
        assert report.outcomes("cluster") == ["already_exists"]
        assert kind_binary.creates == 1
        assert [t.action_calls for t in tools] == [1, 1]
        assert starship.read_text() == "# tweaked by hand\n"

    def test_repo_override_wins(self, provision_config, make_tool, kind_binary, owner_exists):
        """Test repo-tracked config replaces an existing user file."""
        devcontainer = provision_config.devcontainer_dir
        devcontainer.mkdir()
        (devcontainer / "nvim_init.lua").write_text("-- repo config\n")
        target = provision_config.home_dir / ".config" / "nvim" / "init.lua"
        target.parent.mkdir(parents=True)
        target.write_text("-- local config\n")

        report = _provisioner(provision_config, [], DockerProbe(ready_on=1)).run()

        assert report.outcomes("config")[2] == "copied_from_source"
        assert target.read_text() == "-- repo config\n"

    def test_failures_do_not_abort(self, provision_config, make_tool, kind_binary, owner_exists):
        """Test install failure and Docker timeout still reach ownership."""
        tools = [make_tool("nodejs", fail_with=RuntimeError("apt locked")), make_tool("kind")]
        probe = DockerProbe(ready_on=None)

        report = _provisioner(provision_config, tools, probe, max_attempts=3).run()

        assert report.outcomes("tools") == ["failed", "installed"]
        assert report.outcomes("docker") == ["timed_out"]
        assert report.outcomes("cluster") == ["skipped"]
        assert report.outcomes("ownership") == ["applied"]
        # Three polls plus the pre-cluster re-check
        assert probe.calls == 4
        assert kind_binary.creates == 0
        assert {e.name for e in report.failures} == {"nodejs", "docker-daemon", "dev"}
        assert report.succeeded is False

    def test_late_docker_still_gets_cluster(self, provision_config, kind_binary, owner_exists):
        """Test the re-check lets the cluster proceed after a poll timeout."""
        probe = DockerProbe(ready_on=3)

        report = _provisioner(provision_config, [], probe, max_attempts=2).run()

        assert report.outcomes("docker") == ["timed_out"]
        assert report.outcomes("cluster") == ["created"]

    def test_fatal_step_aborts(self, provision_config, make_tool):
        tools = [make_tool("base", fail_with=OSError("read-only file system"))]
        provisioner = DevcontainerProvisioner(
            provision_config,
            steps=[tools[0].step(fatal=True)],
            docker_probe=DockerProbe(ready_on=1),
        )

        with pytest.raises(StepFailedError):
            provisioner.run()

    def test_logs_use_prefix_and_levels(
        self, provision_config, make_tool, kind_binary, owner_exists, capsys
    ):
        configure_logging("info")
        tools = [make_tool("kind", fail_with=RuntimeError("download failed"))]

        _provisioner(provision_config, tools, DockerProbe(ready_on=1)).run()

        err = capsys.readouterr().err
        assert "[devcontainer-setup] INFO: Starting dev container setup" in err
        assert "[devcontainer-setup] ERROR: Failed to install kind" in err
        assert "[devcontainer-setup] SUCCESS: Dev container setup completed" in err

    def test_binary_bashrc_still_reaches_ownership(
        self, provision_config, kind_binary, owner_exists
    ):
        """Test a .bashrc with non-UTF-8 bytes gets hooked and the run completes."""
        bashrc = provision_config.home_dir / ".bashrc"
        bashrc.parent.mkdir(parents=True)
        bashrc.write_bytes(b"export PS1='\xff\xfe'\n")

        report = _provisioner(provision_config, [], DockerProbe(ready_on=1)).run()

        assert report.outcomes("shell") == ["installed"]
        assert bashrc.read_bytes().endswith(b'eval "$(starship init bash)"\n')
        assert report.outcomes("cluster") == ["created"]
        assert report.outcomes("ownership") == ["applied"]
        owner_exists.assert_called_once()

    def test_shell_and_config_failures_reach_ownership(
        self, provision_config, kind_binary, owner_exists
    ):
        """Test a raising shell detector and an unwritable config do not abort."""

        def unreadable() -> bool:
            raise PermissionError("Permission denied: '.bashrc'")

        blocked = provision_config.home_dir / ".config"
        blocked.parent.mkdir(parents=True)
        blocked.write_text("not a directory\n")
        provisioner = DevcontainerProvisioner(
            provision_config,
            steps=[],
            shell_steps=[
                ProvisioningStep(name="starship-init", detector=unreadable, action=lambda: None)
            ],
            docker_probe=DockerProbe(ready_on=1),
            poller=ReadinessPoller(max_attempts=1, sleep=lambda s: None),
            cluster=KindClusterProvisioner(log_path=provision_config.kind_log_path),
        )

        report = provisioner.run()

        assert report.outcomes("config") == ["failed", "wrote_default", "failed"]
        assert report.outcomes("shell") == ["failed"]
        assert report.outcomes("docker") == ["ready"]
        assert report.outcomes("cluster") == ["created"]
        assert report.outcomes("ownership") == ["applied"]
        assert {e.name for e in report.failures} == {
            "starship-config",
            "nvim-config",
            "starship-init",
        }


class TestCatalog:
    """Tests for catalog helpers."""

    def test_default_artifacts(self, provision_config):
        artifacts = {a.name: a for a in default_artifacts(provision_config)}

        assert artifacts["starship-config"].target == (
            provision_config.home_dir / ".config" / "starship.toml"
        )
        assert artifacts["kubectl-aliases"].managed is True
        assert "alias k='kubectl'" in artifacts["kubectl-aliases"].default_content
        assert "lazy.nvim" in artifacts["nvim-config"].default_content
        assert artifacts["nvim-config"].recursive_owner is True

    def test_catalog_names(self, provision_config):
        names = catalog_names(provision_config)
        assert {"apt-update", "nodejs", "kind", "starship-init", "nvim-config"} <= names
