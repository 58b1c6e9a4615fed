"""Path defaults for tailspace-cli.

Host locations the provisioner reads from and writes to.
"""

from pathlib import Path

# Per-user CLI settings
TAILSPACE_DIR = Path.home() / ".tailspace"

# Repository checkout inside the dev container
DEFAULT_WORKSPACE = Path("/workspaces/tailspace")

# Where downloaded binaries are installed
LOCAL_BIN = Path("/usr/local/bin")

# System-wide shell profile snippets
PROFILE_DIR = Path("/etc/profile.d")

# Parent of user home directories
HOME_ROOT = Path("/home")

# Captured output of the last `kind create cluster`
KIND_CREATE_LOG = Path("/tmp/kind-create.log")


def get_config_path() -> Path:
    """Get the CLI config file path.

    Returns:
        Path to ~/.tailspace/config.yaml
    """
    return TAILSPACE_DIR / "config.yaml"


def devcontainer_dir(workspace: Path) -> Path:
    """Directory holding repo-tracked container configuration."""
    return workspace / ".devcontainer"
