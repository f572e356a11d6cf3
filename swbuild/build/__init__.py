"""
swbuild.build - Build orchestration for swbuild.

Provides shop config loading, manifest generation, tool phases and the
task graph.
"""

from swbuild.build.config import (
    RESPONSIVE_THEME_LESS,
    BUILTIN_VARIABLES,
    ShopConfig,
    BuildPaths,
    BuildOptions,
    BuildContext,
    Settings,
    load_shop_config,
    load_settings,
    resolve_shop_id,
    derive_paths,
)
from swbuild.build.manifest import (
    build_less_manifest,
    write_less_manifest,
    build_js_file_list,
    merge_variables,
)
from swbuild.build.tasks import Task, TaskGraph, build_task_graph
from swbuild.build.orchestrator import BuildOrchestrator

__all__ = [
    # Constants
    "RESPONSIVE_THEME_LESS",
    "BUILTIN_VARIABLES",
    # Data classes
    "ShopConfig",
    "BuildPaths",
    "BuildOptions",
    "BuildContext",
    "Settings",
    # Config
    "load_shop_config",
    "load_settings",
    "resolve_shop_id",
    "derive_paths",
    # Manifest
    "build_less_manifest",
    "write_less_manifest",
    "build_js_file_list",
    "merge_variables",
    # Tasks
    "Task",
    "TaskGraph",
    "build_task_graph",
    "BuildOrchestrator",
]
