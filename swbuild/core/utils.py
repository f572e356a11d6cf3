"""
Shared utilities for swbuild: console logging and subprocess helpers.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Every shop path in config_<id>.json is relative to the shop root, which is
# the parent of the directory the build runs from.
SHOP_ROOT_PREFIX = "../"

# Shop configs are dumped by Shopware into the web cache.
CONFIG_DIR = "web/cache"


# =============================================================================
# Logging
# =============================================================================


class Logger:
    """Simple colored logger with --no-color support."""

    COLORS = {
        "reset": "\033[0m",
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "cyan": "\033[96m",
        "bold": "\033[1m",
        "dim": "\033[2m",
    }

    def __init__(self, use_color: Optional[bool] = None):
        if use_color is None:
            self._use_color = sys.stdout.isatty()
        else:
            self._use_color = use_color

    def set_color(self, use_color: bool) -> None:
        """Set whether to use color output."""
        self._use_color = use_color

    def _color(self, text: str, color: str) -> str:
        if not self._use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def header(self, message: str) -> None:
        """Print a section header."""
        print(f"\n{self._color('===', 'cyan')} {self._color(message, 'bold')} {self._color('===', 'cyan')}")

    def info(self, message: str) -> None:
        print(f"  {message}")

    def success(self, message: str) -> None:
        print(f"  {self._color('[OK]', 'green')} {message}")

    def warning(self, message: str) -> None:
        print(f"  {self._color('[WARN]', 'yellow')} {message}")

    def error(self, message: str) -> None:
        print(f"  {self._color('[ERROR]', 'red')} {message}")

    def dim(self, message: str) -> None:
        """Print a dim/secondary message."""
        print(f"  {self._color(message, 'dim')}")

    def table_row(self, col1: str, col2: str, col1_width: int = 30) -> None:
        """Print a table row with two columns."""
        print(f"  {col1:<{col1_width}} {col2}")


# Global logger instance
log = Logger()


# =============================================================================
# Path Utilities
# =============================================================================


def shop_path(work_dir: Path, relative: str) -> Path:
    """Resolve a shop-relative path (as written in config_<id>.json)."""
    return work_dir / (SHOP_ROOT_PREFIX + relative)


# =============================================================================
# Runtime Utilities
# =============================================================================


def run_cmd(
    cmd: list[str],
    cwd: Optional[Path] = None,
    capture: bool = False,
    check: bool = True,
    env: Optional[dict[str, str]] = None,
    dry_run: bool = False,
) -> subprocess.CompletedProcess:
    """Run a command with proper error handling and dry-run support.

    ``env`` entries are added on top of the current process environment.
    """
    if dry_run:
        log.info(f"[DRY-RUN] Would run: {' '.join(cmd)}" + (f" in {cwd}" if cwd else ""))
        return subprocess.CompletedProcess(cmd, 0, "", "")

    full_env = None
    if env:
        full_env = {**os.environ, **env}

    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=check,
            env=full_env,
        )
    except subprocess.CalledProcessError as e:
        if capture:
            log.error(f"Command failed: {' '.join(cmd)}")
            if e.stdout:
                log.error(f"stdout: {e.stdout}")
            if e.stderr:
                log.error(f"stderr: {e.stderr}")
        raise
