"""
swbuild.core - Foundation layer for the swbuild CLI.

Exports logging, subprocess helpers, timing and the error types.
"""

from swbuild.core.utils import (
    # Logging
    log,
    Logger,
    # Constants
    SHOP_ROOT_PREFIX,
    CONFIG_DIR,
    # Path utilities
    shop_path,
    # Runtime utilities
    run_cmd,
)
from swbuild.core.timing import TaskTimings, format_duration
from swbuild.core.errors import (
    SwBuildError,
    ConfigError,
    ToolError,
    LintError,
    TaskFailure,
)

__all__ = [
    "log",
    "Logger",
    "SHOP_ROOT_PREFIX",
    "CONFIG_DIR",
    "shop_path",
    "run_cmd",
    "TaskTimings",
    "format_duration",
    "SwBuildError",
    "ConfigError",
    "ToolError",
    "LintError",
    "TaskFailure",
]
