"""Tool catalog for the dev container.

Builds the ordered list of provisioning steps: base apt packages, then
Node.js, Python, Docker CLI, kubectl, Kind, Starship and Neovim.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from ..config import ProvisionConfig
from . import host
from .steps import ProvisioningStep

NODESOURCE_SETUP_URL = "https://deb.nodesource.com/setup_{major}.x"
KUBECTL_STABLE_URL = "https://dl.k8s.io/release/stable.txt"
KUBECTL_BINARY_URL = "https://dl.k8s.io/release/{version}/bin/linux/amd64/kubectl"
KIND_BINARY_URL = (
    "https://github.com/kubernetes-sigs/kind/releases/download/{version}/kind-linux-amd64"
)
STARSHIP_INSTALL_URL = "https://starship.rs/install.sh"

STARSHIP_INIT_LINE = 'eval "$(starship init bash)"'


def _has(command: str):
    return lambda: host.command_exists(command)


def _version(*args: str):
    return lambda: host.command_version(list(args))


def apt_steps(packages: list[str]) -> list[ProvisioningStep]:
    """Package-index refresh plus one step per base package.

    The refresh is skipped when every package is already listed.
    """

    def all_present() -> bool:
        listing = host.dpkg_listing()
        return all(host.package_installed(pkg, listing) for pkg in packages)

    steps = [
        ProvisioningStep(
            name="apt-update",
            label="APT package index",
            detector=all_present,
            action=lambda: host.run_command(["apt-get", "update"]),
        )
    ]
    for pkg in packages:
        steps.append(
            ProvisioningStep(
                name=f"apt:{pkg}",
                label=f"package {pkg}",
                detector=lambda pkg=pkg: host.package_installed(pkg),
                action=lambda pkg=pkg: host.apt_install(pkg),
            )
        )
    return steps


def install_nodejs(major: int) -> None:
    host.run_script(NODESOURCE_SETUP_URL.format(major=major), ["bash", "-"])
    host.apt_install("nodejs")


def install_docker_cli(user: str) -> None:
    host.apt_install("docker.io")
    # Group membership is best-effort; the user may not exist yet
    try:
        subprocess.run(["usermod", "-aG", "docker", user], capture_output=True)
    except FileNotFoundError:
        pass


def install_kubectl(bin_dir: Path) -> str:
    version = host.fetch_text(KUBECTL_STABLE_URL).strip()
    host.download_file(KUBECTL_BINARY_URL.format(version=version), bin_dir / "kubectl")
    return version


def install_kind(bin_dir: Path, version: str) -> None:
    host.download_file(KIND_BINARY_URL.format(version=version), bin_dir / "kind")


def install_starship() -> None:
    host.run_script(STARSHIP_INSTALL_URL, ["sh", "-s", "--", "--yes"])


def tool_steps(config: ProvisionConfig) -> list[ProvisioningStep]:
    """All tool installation steps in execution order."""
    return [
        *apt_steps(config.apt_packages),
        ProvisioningStep(
            name="nodejs",
            label="Node.js",
            detector=_has("node"),
            action=lambda: install_nodejs(config.node_major),
            describe=_version("node", "--version"),
        ),
        ProvisioningStep(
            name="python3",
            label="python3",
            detector=_has("python3"),
            action=lambda: host.apt_install("python3", "python3-pip"),
            describe=_version("python3", "--version"),
        ),
        ProvisioningStep(
            name="docker",
            label="Docker CLI",
            detector=_has("docker"),
            action=lambda: install_docker_cli(config.remote_user),
        ),
        ProvisioningStep(
            name="kubectl",
            label="kubectl",
            detector=_has("kubectl"),
            action=lambda: install_kubectl(config.bin_dir),
            describe=_version("kubectl", "version", "--client"),
        ),
        ProvisioningStep(
            name="kind",
            label=f"Kind {config.kind_version}",
            detector=_has("kind"),
            action=lambda: install_kind(config.bin_dir, config.kind_version),
            describe=_version("kind", "version"),
        ),
        ProvisioningStep(
            name="starship",
            label="Starship",
            detector=_has("starship"),
            action=install_starship,
            describe=_version("starship", "--version"),
        ),
        ProvisioningStep(
            name="neovim",
            label="Neovim",
            detector=_has("nvim"),
            action=lambda: host.apt_install("neovim"),
            describe=_version("nvim", "--version"),
        ),
    ]


def starship_init_step(bashrc: Path) -> ProvisioningStep:
    """Hook the Starship prompt into an existing ``.bashrc``.

    A missing ``.bashrc`` counts as satisfied; it is never created.
    """

    def hooked() -> bool:
        if not bashrc.exists():
            return True
        return STARSHIP_INIT_LINE.encode() in bashrc.read_bytes()

    def append() -> None:
        existing = bashrc.read_bytes()
        separator = "\n" if existing and not existing.endswith(b"\n") else ""
        with open(bashrc, "a", encoding="utf-8") as f:
            f.write(f"{separator}{STARSHIP_INIT_LINE}\n")

    return ProvisioningStep(
        name="starship-init",
        label="Starship bash hook",
        detector=hooked,
        action=append,
    )
