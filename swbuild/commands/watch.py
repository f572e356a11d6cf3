"""
Watch mode for swbuild.

Monitors LESS and JS sources and re-runs the matching development task.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from swbuild.build.config import WATCH_JS, WATCH_JS_EXCLUDE, WATCH_LESS, BuildContext
from swbuild.build.sources import GlobSet
from swbuild.core.errors import SwBuildError
from swbuild.core.utils import log

if TYPE_CHECKING:
    from swbuild.build.tasks import TaskGraph


# =============================================================================
# Watch Rules
# =============================================================================


@dataclass
class WatchRule:
    """Files matching ``sources`` re-run ``task``."""

    label: str
    sources: GlobSet
    task: str


def default_rules(work_dir: Path) -> list[WatchRule]:
    return [
        WatchRule("LESS", GlobSet(WATCH_LESS, (), work_dir), "style-dev"),
        WatchRule("JS", GlobSet(WATCH_JS, WATCH_JS_EXCLUDE, work_dir), "script-dev"),
    ]


# =============================================================================
# File System Event Handler
# =============================================================================


class TaskTriggerHandler(FileSystemEventHandler):
    """Re-runs the task of every rule a changed file matches.

    Tasks run synchronously on the observer thread, one event at a time.
    """

    def __init__(self, rules: list[WatchRule], graph: "TaskGraph", ctx: BuildContext):
        super().__init__()
        self.rules = rules
        self.graph = graph
        self.ctx = ctx
        self.run_count = 0
        self.failure_count = 0

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.dest_path)

    def tasks_for(self, path: Path | str) -> list[str]:
        """Tasks to re-run for a changed path, in rule order, without repeats."""
        tasks: list[str] = []
        for rule in self.rules:
            if rule.task not in tasks and rule.sources.matches(path):
                tasks.append(rule.task)
        return tasks

    def _handle(self, src_path) -> None:
        if isinstance(src_path, bytes):
            src_path = src_path.decode()
        for task in self.tasks_for(src_path):
            log.info(f"Change detected: {Path(src_path).name} -> {task}")
            self.trigger(task)

    def trigger(self, task: str) -> None:
        """Run a task; failures are reported and the loop keeps going."""
        self.run_count += 1
        try:
            self.graph.run(task, self.ctx)
        except SwBuildError as e:
            self.failure_count += 1
            log.error(f"{e} (still watching)")


# =============================================================================
# Watch Loop
# =============================================================================


def schedule_watches(
    observer,
    handler: TaskTriggerHandler,
    rules: list[WatchRule],
) -> list[Path]:
    """Schedule recursive watches on the static root of every rule pattern."""
    watched: list[Path] = []
    for rule in rules:
        for root in rule.sources.roots():
            if root in watched:
                continue
            if not root.is_dir():
                log.warning(f"Watch root not found ({rule.label}): {root}")
                continue
            observer.schedule(handler, str(root), recursive=True)
            watched.append(root)
            log.info(f"Watching: {rule.label} ({root})")
    return watched


def run_watch(
    ctx: BuildContext,
    graph: "TaskGraph",
    rules: Optional[list[WatchRule]] = None,
    observer=None,
) -> None:
    """Block until Ctrl+C, re-running tasks as sources change."""
    if rules is None:
        rules = default_rules(ctx.work_dir)
    if observer is None:
        observer = Observer()

    handler = TaskTriggerHandler(rules, graph, ctx)
    watched = schedule_watches(observer, handler, rules)
    if not watched:
        raise SwBuildError("No watch roots exist; nothing to watch")

    log.header(f"Watching shop {ctx.shop.shop_id}")
    observer.start()
    log.info("Watching for changes... (Ctrl+C to stop)")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        log.info("")
        log.header("Shutting down")
    finally:
        observer.stop()
        observer.join(timeout=5)

    log.info(f"Rebuilds performed: {handler.run_count} ({handler.failure_count} failed)")
    log.success("Watch mode stopped")
