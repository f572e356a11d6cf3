"""
Build configuration for swbuild.

Constants, dataclasses, shop config loading and settings.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Mapping, Optional

import yaml

from swbuild.core.errors import ConfigError
from swbuild.core.utils import CONFIG_DIR, SHOP_ROOT_PREFIX, shop_path

# =============================================================================
# Constants
# =============================================================================

DEFAULT_SHOP_ID = 1
SHOP_ID_ENV = "SHOP_ID"
EXCLUDE_THEME_ENV = "EXCLUDE_SW_THEME"

# The Shopware responsive theme entry, the only partial --excludeSWtheme drops
RESPONSIVE_THEME_LESS = "themes/Frontend/Responsive/frontend/_public/src/less/all.less"

# Path variables every shop gets before its own theme settings are applied
BUILTIN_VARIABLES: dict[str, str] = {
    "font-directory": '"../../themes/Frontend/Responsive/frontend/_public/src/fonts"',
    "OpenSansPath": '"../../themes/Frontend/Responsive/frontend/_public/vendors/fonts/open-sans-fontface"',
}

# Source globs, relative to the working directory
WATCH_LESS: tuple[str, ...] = (
    "../engine/Shopware/Plugins/**/*.less",
    "../themes/Frontend/**/*.less",
)
WATCH_JS: tuple[str, ...] = (
    "../themes/Frontend/**/frontend/_public/src/js/*.js",
)
WATCH_JS_EXCLUDE: tuple[str, ...] = (
    "../themes/Frontend/**/frontend/_public/src/js/vendors/*.js",
)

SETTINGS_FILENAME = "swbuild.yaml"

DEFAULT_TOOLS: dict[str, str] = {
    "lessc": "lessc",
    "postcss": "postcss",
    "cleancss": "cleancss",
    "uglifyjs": "uglifyjs",
    "eslint": "eslint",
}

_REQUIRED_FIELDS: dict[str, type] = {
    "less": list,
    "js": list,
    "config": dict,
    "lessTarget": str,
}

_TRUTHY = {"1", "true", "yes", "on"}


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ShopConfig:
    """A shop's build configuration as dumped to config_<id>.json."""

    shop_id: int
    less: tuple[str, ...]
    js: tuple[str, ...]
    config: Mapping[str, Any]
    less_target: str


@dataclass(frozen=True)
class BuildPaths:
    """Output locations derived from ``ShopConfig.less_target``.

    For a lessTarget of ``web/cache/1700000000_abc.css``:
        build_dir         -> <work_dir>/../web/cache
        less_source       -> <build_dir>/1700000000_abc.less
        css_target        -> 1700000000_abc.css
        js_target         -> 1700000000_abc.js
        source_map_prefix -> web/cache
    """

    build_dir: Path
    less_source: Path
    css_target: str
    js_target: str
    source_map_prefix: str

    @property
    def css_path(self) -> Path:
        return self.build_dir / self.css_target

    @property
    def js_path(self) -> Path:
        return self.build_dir / self.js_target

    @property
    def source_map_path(self) -> Path:
        return self.build_dir / f"{self.css_target}.map"


@dataclass
class Settings:
    """Tool locations and behaviour switches from swbuild.yaml."""

    tools: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TOOLS))
    notify: bool = True

    def tool(self, name: str) -> str:
        return self.tools.get(name, name)


@dataclass
class BuildOptions:
    """Options for a build run, as given on the command line."""

    work_dir: Path
    shop_id: int = DEFAULT_SHOP_ID
    exclude_responsive_theme: bool = False
    settings_path: Optional[Path] = None
    dry_run: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class BuildContext:
    """Everything a task needs, computed once at startup."""

    shop: ShopConfig
    paths: BuildPaths
    variables: Mapping[str, Any]
    js_files: tuple[str, ...]
    work_dir: Path
    settings: Settings = field(default_factory=Settings)
    dry_run: bool = False
    verbose: bool = False


# =============================================================================
# Loading
# =============================================================================


def resolve_shop_id(
    cli_value: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Pick the shop id: CLI flag, then $SHOP_ID, then the default."""
    if environ is None:
        environ = os.environ

    raw = cli_value if cli_value is not None else environ.get(SHOP_ID_ENV)
    if raw is None or str(raw).strip() == "":
        return DEFAULT_SHOP_ID

    try:
        return int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"Shop id must be an integer, got {raw!r}") from None


def exclude_theme_from_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether $EXCLUDE_SW_THEME asks for the responsive theme to be dropped."""
    if environ is None:
        environ = os.environ
    return environ.get(EXCLUDE_THEME_ENV, "").strip().lower() in _TRUTHY


def get_config_path(shop_id: int, work_dir: Path) -> Path:
    return shop_path(work_dir, f"{CONFIG_DIR}/config_{shop_id}.json")


def load_shop_config(shop_id: int, work_dir: Path) -> ShopConfig:
    """Load and validate config_<shop_id>.json.

    Raises:
        ConfigError: If the file is missing, not JSON, or lacks a field.
    """
    config_path = get_config_path(shop_id, work_dir)

    if not config_path.exists():
        raise ConfigError(f"Shop config not found: {config_path}")

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"{config_path.name} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    for key, expected in _REQUIRED_FIELDS.items():
        if key not in data:
            raise ConfigError(f"{config_path.name} missing required '{key}' field")
        if not isinstance(data[key], expected):
            raise ConfigError(
                f"{config_path.name}: '{key}' must be a {expected.__name__}, "
                f"got {type(data[key]).__name__}"
            )

    for key in ("less", "js"):
        if not all(isinstance(item, str) for item in data[key]):
            raise ConfigError(f"{config_path.name}: '{key}' must only contain strings")

    return ShopConfig(
        shop_id=shop_id,
        less=tuple(data["less"]),
        js=tuple(data["js"]),
        config=dict(data["config"]),
        less_target=data["lessTarget"],
    )


def derive_paths(shop: ShopConfig, work_dir: Path) -> BuildPaths:
    """Derive build dir and target names from the configured lessTarget."""
    target = PurePosixPath(shop.less_target)
    target_dir = str(target.parent) if str(target.parent) != "." else ""
    name = target.stem

    build_dir = work_dir / (SHOP_ROOT_PREFIX + target_dir)
    return BuildPaths(
        build_dir=build_dir,
        less_source=build_dir / f"{name}.less",
        css_target=f"{name}.css",
        js_target=f"{name}.js",
        source_map_prefix=target_dir,
    )


def load_settings(path: Optional[Path] = None, work_dir: Optional[Path] = None) -> Settings:
    """Load swbuild.yaml.

    An explicit ``path`` must exist. Without one, ``<work_dir>/swbuild.yaml``
    is used when present and defaults otherwise.
    """
    if path is None:
        candidate = (work_dir or Path.cwd()) / SETTINGS_FILENAME
        if not candidate.exists():
            return Settings()
        path = candidate
    elif not path.exists():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{path.name} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping")

    unknown = set(data) - {"tools", "notify"}
    if unknown:
        raise ConfigError(f"{path.name}: unknown setting(s): {', '.join(sorted(unknown))}")

    tools = dict(DEFAULT_TOOLS)
    tool_overrides = data.get("tools") or {}
    if not isinstance(tool_overrides, dict):
        raise ConfigError(f"{path.name}: 'tools' must be a mapping")
    unknown_tools = set(tool_overrides) - set(DEFAULT_TOOLS)
    if unknown_tools:
        raise ConfigError(f"{path.name}: unknown tool(s): {', '.join(sorted(unknown_tools))}")
    tools.update({k: str(v) for k, v in tool_overrides.items()})

    return Settings(tools=tools, notify=bool(data.get("notify", True)))
