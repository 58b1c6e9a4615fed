"""Shared modules for tailspace-cli.

This module provides functionality used across commands:
- Logging (structlog setup and the provisioning logger)
- Host path defaults
"""

from .logging import ProvisionLogger, configure_logging, get_logger
from .paths import (
    DEFAULT_WORKSPACE,
    HOME_ROOT,
    KIND_CREATE_LOG,
    LOCAL_BIN,
    PROFILE_DIR,
    TAILSPACE_DIR,
    get_config_path,
)

__all__ = [
    # Paths
    "TAILSPACE_DIR",
    "DEFAULT_WORKSPACE",
    "HOME_ROOT",
    "KIND_CREATE_LOG",
    "LOCAL_BIN",
    "PROFILE_DIR",
    "get_config_path",
    # Logging
    "configure_logging",
    "get_logger",
    "ProvisionLogger",
]
