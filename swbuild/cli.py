"""
Main CLI for swbuild.

    swbuild [task] [--shopId N] [--excludeSWtheme] ...
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from swbuild import __version__
from swbuild.build.config import BuildOptions, exclude_theme_from_env, resolve_shop_id
from swbuild.build.orchestrator import BuildOrchestrator
from swbuild.core.errors import SwBuildError, TaskFailure
from swbuild.core.utils import log

TASK_NAMES = (
    "default",
    "dist",
    "watch",
    "style-dev",
    "style-dist",
    "script-dev",
    "script-dist",
    "lint",
)


# =============================================================================
# Argument Parsing
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swbuild",
        description="Shopware theme build pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Tasks:
  default      Development build (styles, lint, scripts), then watch
  dist         Production build (minified styles and scripts, lint)
  watch        Rebuild styles/scripts when sources change
  style-dev    Compile LESS with source maps
  style-dist   Compile, prefix and minify LESS
  script-dev   Concatenate JS
  script-dist  Concatenate and minify JS
  lint         Lint theme JS sources

Examples:
  swbuild                          # Develop shop 1 and watch
  swbuild dist --shopId 3          # Production build for shop 3
  swbuild --excludeSWtheme         # Leave out the Responsive theme LESS
        """,
    )

    parser.add_argument(
        "task",
        nargs="?",
        default="default",
        choices=TASK_NAMES,
        metavar="task",
        help="Task to run (default: default)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--shopId", "--shop-id",
        dest="shop_id",
        help="Shopware shop id (default: $SHOP_ID or 1)",
    )

    parser.add_argument(
        "--excludeSWtheme", "--exclude-sw-theme",
        dest="exclude_sw_theme",
        action="store_true",
        help="Exclude the Shopware Responsive theme from the LESS manifest",
    )

    parser.add_argument(
        "--work-dir",
        type=Path,
        default=Path("."),
        help="Directory shop paths are resolved from (default: current directory)",
    )

    parser.add_argument(
        "--settings",
        type=Path,
        help="Settings YAML (default: swbuild.yaml in the work dir, if present)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose debug output",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List tasks and their dependencies, then exit",
    )

    return parser


def list_tasks(orchestrator: BuildOrchestrator) -> None:
    log.header("Tasks")
    for name in TASK_NAMES:
        task = orchestrator.graph.get(name)
        deps = f"[{', '.join(task.deps)}]" if task.deps else ""
        log.table_row(name, f"{task.description} {deps}".strip(), col1_width=14)


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        log.set_color(False)

    try:
        options = BuildOptions(
            work_dir=args.work_dir,
            shop_id=resolve_shop_id(args.shop_id),
            exclude_responsive_theme=args.exclude_sw_theme or exclude_theme_from_env(),
            settings_path=args.settings,
            dry_run=args.dry_run,
            verbose=args.verbose,
        )
        orchestrator = BuildOrchestrator(options)

        if args.list:
            list_tasks(orchestrator)
            return 0

        orchestrator.run(args.task)
        return 0

    except KeyboardInterrupt:
        log.warning("Build interrupted")
        return 130
    except TaskFailure as e:
        log.error(str(e))
        if args.verbose:
            for name, cause in e.failed.items():
                log.dim(f"{name}: {cause!r}")
        return 1
    except SwBuildError as e:
        log.error(str(e))
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
