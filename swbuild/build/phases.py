"""
Build phases for swbuild.

Individual tool invocations (lessc, postcss, cleancss, uglifyjs, eslint)
and the task bodies that chain them. Each task body takes the
``BuildContext`` and raises on failure after notifying the operator.
"""

from __future__ import annotations

import functools
import json
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

from swbuild.build.config import (
    WATCH_JS,
    WATCH_JS_EXCLUDE,
    BuildContext,
    Settings,
)
from swbuild.build.sources import GlobSet
from swbuild.core.errors import LintError, ToolError
from swbuild.core.utils import log, run_cmd

# =============================================================================
# Lint Rules
# =============================================================================

# Rules: http://eslint.org/docs/rules/
LINT_RULES: dict[str, int] = {
    "no-console": 0,
    "no-extra-semi": 0,
    "no-unused-vars": 1,
    "no-underscore-dangle": 0,
    "no-shadow-restricted-names": 1,
    "no-shadow": 1,
    "no-undef": 1,
    "no-sequences": 1,
    "strict": 1,
    "quotes": 0,
    "no-unused-expressions": 1,
}

LINT_GLOBALS: tuple[str, ...] = ("Modernizr", "jQuery", "$", "StateManager")

LINT_ENVS: tuple[str, ...] = ("browser",)

# The rule set above is an eslintrc-style configuration
ESLINT_ENV = {"ESLINT_USE_FLAT_CONFIG": "false"}

# gulp-concat's default separator
JS_SEPARATOR = "\n"


# =============================================================================
# Notifications
# =============================================================================


def notify(title: str, message: str, settings: Optional[Settings] = None) -> None:
    """Report a failure on the console and, if enabled, as a desktop notification."""
    log.error(f"{title}: {message}")

    if settings is not None and not settings.notify:
        return

    if sys.platform == "darwin":
        # AppleScript string literals take raw UTF-8, not \u escapes
        quoted_message = json.dumps(message, ensure_ascii=False)
        quoted_title = json.dumps(title, ensure_ascii=False)
        script = f"display notification {quoted_message} with title {quoted_title}"
        cmd = ["osascript", "-e", script]
    elif shutil.which("notify-send"):
        cmd = ["notify-send", title, message]
    else:
        return

    try:
        subprocess.run(cmd, capture_output=True, check=False)
    except OSError as e:
        log.dim(f"Desktop notification unavailable: {e}")


def notify_on_error(title: str) -> Callable:
    """Decorate a task body so any failure raises a notification before propagating."""

    def decorator(func: Callable[[BuildContext], None]) -> Callable[[BuildContext], None]:
        @functools.wraps(func)
        def wrapper(ctx: BuildContext) -> None:
            try:
                func(ctx)
            except Exception as e:
                notify(title, _error_message(e), ctx.settings)
                raise

        return wrapper

    return decorator


def _error_message(error: Exception) -> str:
    if not isinstance(error, ToolError):
        return f"{type(error).__name__}: {error}"
    detail = (error.stderr or error.stdout).strip().splitlines()
    if detail:
        return f"{error} ({detail[0][:200]})"
    return str(error)


# =============================================================================
# Tool Runner
# =============================================================================


def run_tool(
    ctx: BuildContext,
    tool: str,
    args: list[str],
    error_cls: type[ToolError] = ToolError,
    env: Optional[dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """Run an external tool from the working directory.

    Raises:
        ToolError: If the executable is missing or exits non-zero.
    """
    cmd = [ctx.settings.tool(tool), *args]
    if ctx.verbose:
        log.dim(" ".join(cmd))

    try:
        result = run_cmd(
            cmd,
            cwd=ctx.work_dir,
            capture=True,
            check=False,
            env=env,
            dry_run=ctx.dry_run,
        )
    except FileNotFoundError:
        raise ToolError(tool, f"executable not found: {cmd[0]}", cmd=cmd) from None

    if result.returncode != 0:
        raise error_cls(
            tool,
            f"exited with code {result.returncode}",
            cmd=cmd,
            returncode=result.returncode,
            stderr=result.stderr or "",
            stdout=result.stdout or "",
        )
    return result


def less_value(value) -> str:
    """Render a config value the way LESS reads it (JSON literals for bool/null)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def modify_var_args(variables) -> list[str]:
    return [f"--modify-var={name}={less_value(value)}" for name, value in variables.items()]


# =============================================================================
# Styles
# =============================================================================


def compile_less(ctx: BuildContext, source_map: bool = False) -> Path:
    """Compile the generated manifest into ``<build_dir>/<name>.css``."""
    paths = ctx.paths
    if not ctx.dry_run:
        paths.build_dir.mkdir(parents=True, exist_ok=True)

    args = [str(paths.less_source), str(paths.css_path), "--rewrite-urls=all"]
    if source_map:
        map_url = f"{paths.source_map_prefix}/{paths.css_target}.map".lstrip("/")
        args += [
            f"--source-map={paths.source_map_path}",
            f"--source-map-url={map_url}",
            "--line-numbers=all",
        ]
    args += modify_var_args(ctx.variables)

    run_tool(ctx, "lessc", args)
    return paths.css_path


def autoprefix_css(ctx: BuildContext, css_path: Path) -> None:
    run_tool(ctx, "postcss", [str(css_path), "--use", "autoprefixer", "--no-map", "--replace"])


def minify_css(ctx: BuildContext, css_path: Path) -> None:
    """Minify in place and log the size change."""
    original_size = css_path.stat().st_size if not ctx.dry_run else 0

    run_tool(ctx, "cleancss", ["-o", str(css_path), str(css_path)])

    if ctx.dry_run:
        return
    minified_size = css_path.stat().st_size
    log.info(f"before Compress: {css_path.name}: {original_size / 1000} Kb")
    log.info(f"after  Compress: {css_path.name}: {minified_size / 1000} Kb")


@notify_on_error("LESS Error")
def style_dev(ctx: BuildContext) -> None:
    """LESS development build with source map and line numbers."""
    css = compile_less(ctx, source_map=True)
    log.success(f"Compiled {css.name} (+ source map)")


@notify_on_error("LESS Error")
def style_dist(ctx: BuildContext) -> None:
    """LESS production build: compile, vendor-prefix, minify."""
    css = compile_less(ctx)
    autoprefix_css(ctx, css)
    minify_css(ctx, css)
    log.success(f"Built {css.name}")


# =============================================================================
# Scripts
# =============================================================================


def concat_scripts(ctx: BuildContext) -> Path:
    """Concatenate the shop's JS files, in configured order, into the build dir."""
    target = ctx.paths.js_path
    sources = [ctx.work_dir / rel for rel in ctx.js_files]

    missing = [str(p) for p in sources if not p.is_file()]
    if missing:
        raise ToolError("concat", f"missing source file(s): {', '.join(missing)}")

    if ctx.dry_run:
        log.info(f"[DRY-RUN] Would concatenate {len(sources)} file(s) into {target}")
        return target

    contents = [p.read_text(encoding="utf-8") for p in sources]
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(JS_SEPARATOR.join(contents), encoding="utf-8")
    return target


@notify_on_error("JS Error")
def script_dev(ctx: BuildContext) -> None:
    target = concat_scripts(ctx)
    log.success(f"Concatenated {len(ctx.js_files)} file(s) into {target.name}")


@notify_on_error("JS Error")
def script_dist(ctx: BuildContext) -> None:
    """Concatenate, then minify with console calls stripped."""
    target = concat_scripts(ctx)
    run_tool(
        ctx,
        "uglifyjs",
        [str(target), "--compress", "drop_console=true", "-o", str(target)],
    )
    log.success(f"Minified {target.name}")


# =============================================================================
# Lint
# =============================================================================


def lint_args(files: list[Path]) -> list[str]:
    args = ["--no-eslintrc"]
    for env in LINT_ENVS:
        args += ["--env", env]
    args += ["--global", ",".join(LINT_GLOBALS)]
    for rule, level in LINT_RULES.items():
        args += ["--rule", json.dumps({rule: level})]
    args += [str(f) for f in files]
    return args


def _print_report(stdout: str, stderr: str) -> None:
    if stdout:
        print(stdout)
    if stderr:
        print(stderr)


@notify_on_error("Lint Error")
def lint(ctx: BuildContext) -> None:
    """Run eslint over the theme sources. Errors fail the task, warnings don't."""
    files = GlobSet(WATCH_JS, WATCH_JS_EXCLUDE, ctx.work_dir).expand()
    if not files:
        log.warning("No JS sources found to lint")
        return

    try:
        result = run_tool(ctx, "eslint", lint_args(files), error_cls=LintError, env=ESLINT_ENV)
    except LintError as e:
        # eslint exits 1 for lint errors; the report is on stdout, warnings on stderr
        _print_report(e.stdout, e.stderr)
        raise

    _print_report(result.stdout, result.stderr)
    log.success(f"Linted {len(files)} file(s)")
