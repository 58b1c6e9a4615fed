"""Dev container provisioning run.

Executes the fixed sequence: tools, config files, Docker readiness,
Kind cluster, workspace ownership. Every phase reports into a RunReport;
only a fatal step or an unexpected error outside a phase aborts the run.
"""

from __future__ import annotations

from collections.abc import Callable

from ..config import ProvisionConfig
from ..defaults import read_default
from ..shared.logging import ProvisionLogger, get_logger
from .kind import KindClusterProvisioner
from .materialize import ConfigArtifact, ConfigMaterializer
from .ownership import OwnershipFinalizer
from .readiness import ReadinessPoller, docker_daemon_ready
from .report import RunReport
from .steps import ProvisioningStep, StepRunner
from .tools import starship_init_step, tool_steps


def default_artifacts(config: ProvisionConfig) -> list[ConfigArtifact]:
    """Prompt, alias and editor config files, in write order."""
    config_dir = config.home_dir / ".config"
    return [
        ConfigArtifact(
            name="starship-config",
            target=config_dir / "starship.toml",
            source=config.devcontainer_dir / "starship.toml",
            default_content=read_default("starship.toml"),
            owner=config.remote_user,
            group=config.group,
        ),
        ConfigArtifact(
            name="kubectl-aliases",
            target=config.aliases_path,
            default_content=read_default("kubectl-aliases.sh"),
            mode=0o644,
            managed=True,
        ),
        ConfigArtifact(
            name="nvim-config",
            target=config_dir / "nvim" / "init.lua",
            source=config.devcontainer_dir / "nvim_init.lua",
            default_content=read_default("init.lua"),
            owner=config.remote_user,
            group=config.group,
            recursive_owner=True,
        ),
    ]


def catalog_names(config: ProvisionConfig) -> set[str]:
    """Names of every step and artifact a run would process."""
    names = {step.name for step in tool_steps(config)}
    names.add(starship_init_step(config.home_dir / ".bashrc").name)
    names.update(artifact.name for artifact in default_artifacts(config))
    return names


class DevcontainerProvisioner:
    """Run the full provisioning sequence for one container."""

    def __init__(
        self,
        config: ProvisionConfig,
        steps: list[ProvisioningStep] | None = None,
        artifacts: list[ConfigArtifact] | None = None,
        shell_steps: list[ProvisioningStep] | None = None,
        docker_probe: Callable[[], bool] = docker_daemon_ready,
        poller: ReadinessPoller | None = None,
        cluster: KindClusterProvisioner | None = None,
        logger: ProvisionLogger | None = None,
    ):
        self.config = config
        self.log = logger or get_logger(__name__)
        self.steps = tool_steps(config) if steps is None else steps
        self.artifacts = default_artifacts(config) if artifacts is None else artifacts
        if shell_steps is None:
            shell_steps = [starship_init_step(config.home_dir / ".bashrc")]
        self.shell_steps = shell_steps
        self.docker_probe = docker_probe
        self.poller = poller or ReadinessPoller(
            max_attempts=config.docker_max_attempts,
            interval_seconds=config.docker_interval_seconds,
        )
        self.cluster = cluster or KindClusterProvisioner(
            wait=config.kind_wait,
            log_path=config.kind_log_path,
            logger=self.log,
        )
        self.runner = StepRunner(self.log)
        self.materializer = ConfigMaterializer(self.log)
        self.finalizer = OwnershipFinalizer(self.log)

    def run(self) -> RunReport:
        """Execute every phase in order and return the collected outcomes."""
        report = RunReport()
        self.log.info(f"Starting dev container setup for user: {self.config.remote_user}")

        self._install_tools(report)
        self._write_configs(report)
        docker_ready = self._wait_for_docker(report)
        self._ensure_cluster(report, docker_ready)
        self._fix_ownership(report)

        failed = len(report.failures)
        if failed:
            self.log.error(f"{failed} step(s) failed", failed=[e.name for e in report.failures])
        self.log.success("Dev container setup completed")
        return report

    def _install_tools(self, report: RunReport) -> None:
        for result in self.runner.run_all(self.steps):
            report.add("tools", result.name, result.outcome.value, result.ok, result.detail)

    def _write_configs(self, report: RunReport) -> None:
        for artifact in self.artifacts:
            result = self.materializer.materialize(artifact)
            report.add("config", result.name, result.outcome.value, result.ok, result.error)
        for result in self.runner.run_all(self.shell_steps):
            report.add("shell", result.name, result.outcome.value, result.ok, result.detail)

    def _wait_for_docker(self, report: RunReport) -> bool:
        self.log.info("Checking Docker daemon...")

        def on_attempt(attempt: int, max_attempts: int) -> None:
            self.log.info(f"Docker not ready, waiting... ({attempt}/{max_attempts})")

        result = self.poller.poll(self.docker_probe, on_attempt)
        if result.ready:
            self.log.success("Docker is ready", attempts=result.attempts)
            report.add("docker", "docker-daemon", "ready")
        else:
            self.log.error("Docker did not become ready within timeout", attempts=result.attempts)
            report.add("docker", "docker-daemon", "timed_out", ok=False, detail=result.error)
        return result.ready

    def _ensure_cluster(self, report: RunReport, docker_ready: bool) -> None:
        self.log.info("Setting up Kind cluster...")
        name = self.config.cluster_name
        # Re-check: the daemon may have come up after the poll budget ran out
        if docker_ready or self.docker_probe():
            result = self.cluster.ensure_cluster(name)
        else:
            result = self.cluster.skip(name, "Docker is not available")
        detail = result.message or None
        if result.log_path and not result.ok:
            detail = str(result.log_path)
        report.add("cluster", name, result.status.value, result.ok, detail)

    def _fix_ownership(self, report: RunReport) -> None:
        result = self.finalizer.fix_ownership(
            self.config.workspace_dir,
            self.config.remote_user,
            self.config.group,
        )
        report.add("ownership", str(result.path), result.status.value, result.ok, result.reason)
