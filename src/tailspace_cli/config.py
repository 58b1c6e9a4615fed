"""Provisioning configuration.

Settings live in ~/.tailspace/config.yaml (or a file given with --config).
Supports environment variable overrides; every value records its source.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .shared.paths import (
    DEFAULT_WORKSPACE,
    HOME_ROOT,
    KIND_CREATE_LOG,
    LOCAL_BIN,
    PROFILE_DIR,
    devcontainer_dir,
    get_config_path,
)

# Default values
DEFAULT_USER = "vscode"
DEFAULT_CLUSTER = "dev"
DEFAULT_DOCKER_MAX_ATTEMPTS = 30
DEFAULT_DOCKER_INTERVAL = 2.0
DEFAULT_KIND_WAIT = "5m"
DEFAULT_KIND_VERSION = "v0.20.0"
DEFAULT_NODE_MAJOR = 20
DEFAULT_APT_PACKAGES = [
    "curl",
    "git",
    "ca-certificates",
    "build-essential",
    "pkg-config",
    "cmake",
    "unzip",
    "ripgrep",
]

# Environment variable mappings
ENV_VARS = {
    "remote_user": "REMOTE_USER",
    "workspace_dir": "TAILSPACE_WORKSPACE",
    "cluster_name": "TAILSPACE_CLUSTER",
}


@dataclass
class ProvisionConfig:
    """Provisioning settings."""

    remote_user: str = DEFAULT_USER
    remote_group: str | None = None
    workspace_dir: Path = DEFAULT_WORKSPACE
    home_root: Path = HOME_ROOT
    bin_dir: Path = LOCAL_BIN
    aliases_path: Path = PROFILE_DIR / "kubectl-aliases.sh"
    cluster_name: str = DEFAULT_CLUSTER
    docker_max_attempts: int = DEFAULT_DOCKER_MAX_ATTEMPTS
    docker_interval_seconds: float = DEFAULT_DOCKER_INTERVAL
    kind_wait: str = DEFAULT_KIND_WAIT
    kind_version: str = DEFAULT_KIND_VERSION
    kind_log_path: Path = KIND_CREATE_LOG
    node_major: int = DEFAULT_NODE_MAJOR
    apt_packages: list[str] = field(default_factory=lambda: list(DEFAULT_APT_PACKAGES))

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    @property
    def group(self) -> str:
        """Group for ownership fix-ups; same name as the user unless set."""
        return self.remote_group or self.remote_user

    @property
    def home_dir(self) -> Path:
        return self.home_root / self.remote_user

    @property
    def devcontainer_dir(self) -> Path:
        return devcontainer_dir(self.workspace_dir)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    def as_dict(self) -> dict[str, Any]:
        """Public settings as plain values (paths as strings)."""
        values: dict[str, Any] = {}
        for f in fields(self):
            if f.name.startswith("_"):
                continue
            value = getattr(self, f.name)
            values[f.name] = str(value) if isinstance(value, Path) else value
        return values


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw file/env value to the type of the dataclass field."""
    default = getattr(ProvisionConfig(), key)
    if value is None:
        if default is None:
            return None
        raise ValueError("a value is required")
    if isinstance(default, Path):
        return Path(str(value))
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    if isinstance(default, list):
        if isinstance(value, str):
            return value.split()
        return [str(v) for v in value]
    return str(value)


def load_config(config_path: Path | None = None) -> ProvisionConfig:
    """Load provisioning configuration.

    Precedence (highest to lowest):
    1. Environment variables
    2. Config file (~/.tailspace/config.yaml or ``config_path``)
    3. Defaults

    Args:
        config_path: Explicit config file; a missing explicit file is an error.

    Returns:
        ProvisionConfig with values and sources

    Raises:
        FileNotFoundError: If ``config_path`` is given and does not exist.
        ValueError: If the file holds an unknown key or a malformed value.
    """
    config = ProvisionConfig()
    known = {f.name for f in fields(ProvisionConfig) if not f.name.startswith("_")}
    sources: dict[str, str] = {key: "default" for key in known}

    path = config_path or get_config_path()
    if config_path is not None and not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        for key, value in file_config.items():
            if key not in known:
                raise ValueError(f"Unknown config key '{key}' in {path}")
            try:
                setattr(config, key, _coerce(key, value))
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid value for '{key}' in {path}: {e}") from e
            sources[key] = "config file"

    for key, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            setattr(config, key, _coerce(key, os.environ[env_var]))
            sources[key] = "environment"

    config._sources = sources
    return config
