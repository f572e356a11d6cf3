"""
Shared pytest fixtures for swbuild tests.

Builds a throwaway shop tree:

    <tmp>/shop/
        build/                 <- work dir the pipeline runs from
        web/cache/config_1.json
        themes/Frontend/...

Test Tier Markers:
  @pytest.mark.evergreen - Tests that always run, never skip
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from swbuild.build.config import (
    BUILTIN_VARIABLES,
    BuildContext,
    Settings,
    derive_paths,
    load_shop_config,
)
from swbuild.build.manifest import build_js_file_list, merge_variables


# =============================================================================
# Test Data Constants
# =============================================================================

SAMPLE_CONFIG: dict[str, Any] = {
    "less": [
        "themes/Frontend/Responsive/frontend/_public/src/less/all.less",
        "themes/Frontend/MyTheme/frontend/_public/src/less/all.less",
    ],
    "js": [
        "themes/Frontend/MyTheme/frontend/_public/src/js/app.js",
        "themes/Frontend/MyTheme/frontend/_public/src/js/cart.js",
    ],
    "config": {"brand-primary": "#d9400b", "font-directory": '"fonts"'},
    "lessTarget": "web/cache/1700000000_abc123.css",
}


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test tiers."""
    config.addinivalue_line(
        "markers",
        "evergreen: tests that always run, never skip (production tests)"
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def shop_root(tmp_path: Path) -> Path:
    root = tmp_path / "shop"
    (root / "build").mkdir(parents=True)
    (root / "web" / "cache").mkdir(parents=True)
    return root


@pytest.fixture
def work_dir(shop_root: Path) -> Path:
    return shop_root / "build"


@pytest.fixture
def write_config(shop_root: Path) -> Callable[..., Path]:
    """Write config_<shop_id>.json; returns its path."""

    def _write(data: Optional[dict[str, Any]] = None, shop_id: int = 1, raw: Optional[str] = None) -> Path:
        path = shop_root / "web" / "cache" / f"config_{shop_id}.json"
        path.write_text(raw if raw is not None else json.dumps(data if data is not None else SAMPLE_CONFIG))
        return path

    return _write


@pytest.fixture
def theme_sources(shop_root: Path) -> dict[str, Path]:
    """Create the JS files named in SAMPLE_CONFIG plus a vendor file."""
    js_dir = shop_root / "themes" / "Frontend" / "MyTheme" / "frontend" / "_public" / "src" / "js"
    (js_dir / "vendors").mkdir(parents=True)
    files = {
        "app": js_dir / "app.js",
        "cart": js_dir / "cart.js",
        "vendor": js_dir / "vendors" / "jquery.js",
    }
    files["app"].write_text("var app = 1;")
    files["cart"].write_text("var cart = 2;")
    files["vendor"].write_text("/* vendor */")

    less_dir = shop_root / "themes" / "Frontend" / "MyTheme" / "frontend" / "_public" / "src" / "less"
    less_dir.mkdir(parents=True)
    files["less"] = less_dir / "all.less"
    files["less"].write_text("@brand-primary: #000;")
    return files


@pytest.fixture
def make_context(work_dir: Path, write_config: Callable[..., Path]) -> Callable[..., BuildContext]:
    """Build a BuildContext for SAMPLE_CONFIG (or a given config)."""

    def _make(data: Optional[dict[str, Any]] = None, **overrides: Any) -> BuildContext:
        write_config(data)
        shop = load_shop_config(1, work_dir)
        kwargs: dict[str, Any] = dict(
            shop=shop,
            paths=derive_paths(shop, work_dir),
            variables=merge_variables(BUILTIN_VARIABLES, shop.config),
            js_files=tuple(build_js_file_list(shop.js)),
            work_dir=work_dir,
            settings=Settings(notify=False),
        )
        kwargs.update(overrides)
        return BuildContext(**kwargs)

    return _make
