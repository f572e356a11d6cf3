"""
Generated sources for swbuild.

Builds the LESS import manifest, the ordered JS file list and the variable
map handed to the LESS compiler.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from swbuild.build.config import RESPONSIVE_THEME_LESS
from swbuild.core.utils import SHOP_ROOT_PREFIX, log


def build_less_manifest(less_entries: Iterable[str], exclude_responsive_theme: bool = False) -> str:
    """Render one line per partial, in order.

    Each non-empty entry becomes ``@import "../<path>";``. The responsive
    theme entry (when excluded) and empty entries become blank lines, so
    the line count always equals the number of entries.
    """
    lines = []
    for item in less_entries:
        if exclude_responsive_theme and item == RESPONSIVE_THEME_LESS:
            item = ""
        if item:
            lines.append(f'@import "{SHOP_ROOT_PREFIX}{item}";\n')
        else:
            lines.append("\n")
    return "".join(lines)


def write_less_manifest(content: str, path: Path) -> Path:
    """Write the manifest, replacing whatever was there."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    log.info(f"Wrote LESS manifest: {path} ({content.count(chr(10))} entries)")
    return path


def build_js_file_list(js_entries: Iterable[str]) -> list[str]:
    """Prefix each JS entry with the shop root, preserving order."""
    return [SHOP_ROOT_PREFIX + item for item in js_entries]


def merge_variables(builtins: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Merge LESS variables: built-ins first, shop theme settings second.

    Later keys win, so a shop may override a built-in path variable.
    """
    merged = dict(builtins)
    for key, value in overrides.items():
        merged[key] = value
    return merged
