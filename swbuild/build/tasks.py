"""
Task graph for swbuild.

Tasks are nodes of an explicit DAG. Running a target resolves its
transitive dependencies into topological batches; every task of a batch
runs concurrently, and the next batch starts only when the whole batch
has succeeded.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
from typing import Callable, Iterable, Optional

from swbuild.build import phases
from swbuild.build.config import BuildContext
from swbuild.core.errors import TaskFailure
from swbuild.core.timing import TaskTimings, format_duration
from swbuild.core.utils import log

TaskAction = Callable[[BuildContext], None]


@dataclass(frozen=True)
class Task:
    """A named build step.

    ``action`` runs after every task in ``deps`` has succeeded. Tasks with
    no action only group their dependencies (``dist``).
    """

    name: str
    action: Optional[TaskAction] = None
    deps: tuple[str, ...] = ()
    description: str = ""


class TaskGraph:
    """A validated set of tasks and the scheduler that runs them."""

    def __init__(self, tasks: Iterable[Task], max_workers: int = 4):
        self.tasks: dict[str, Task] = {}
        for task in tasks:
            if task.name in self.tasks:
                raise ValueError(f"Duplicate task: {task.name}")
            self.tasks[task.name] = task
        self.max_workers = max_workers
        self.timings = TaskTimings()

        for task in self.tasks.values():
            for dep in task.deps:
                if dep not in self.tasks:
                    raise KeyError(f"Task '{task.name}' depends on unknown task '{dep}'")

        # Fail fast on cycles rather than at run time
        try:
            TopologicalSorter({t.name: t.deps for t in self.tasks.values()}).prepare()
        except CycleError as e:
            raise ValueError(f"Task graph has a cycle: {e.args[1]}") from e

    def get(self, name: str) -> Task:
        try:
            return self.tasks[name]
        except KeyError:
            raise KeyError(
                f"Unknown task: {name}. Known tasks: {', '.join(sorted(self.tasks))}"
            ) from None

    def closure(self, target: str) -> set[str]:
        """``target`` plus everything it transitively depends on."""
        seen: set[str] = set()
        stack = [target]
        while stack:
            name = stack.pop()
            if name in seen:
                continue
            seen.add(name)
            stack.extend(self.get(name).deps)
        return seen

    def plan(self, target: str) -> list[list[str]]:
        """Topological batches for ``target``; tasks within a batch are independent."""
        names = self.closure(target)
        sorter = TopologicalSorter({n: self.tasks[n].deps for n in names})
        sorter.prepare()

        batches: list[list[str]] = []
        while sorter.is_active():
            ready = sorted(sorter.get_ready())
            batches.append(ready)
            sorter.done(*ready)
        return batches

    def run(self, target: str, ctx: BuildContext) -> None:
        """Run ``target`` and its dependencies batch by batch.

        Raises:
            TaskFailure: If any task of a batch fails. Later batches do not start.
        """
        for batch in self.plan(target):
            self._run_batch(batch, ctx)

    def _run_batch(self, batch: list[str], ctx: BuildContext) -> None:
        runnable = [n for n in batch if self.tasks[n].action is not None]
        if not runnable:
            return

        failed: dict[str, BaseException] = {}
        if len(runnable) == 1:
            error = self._run_task(runnable[0], ctx)
            if error is not None:
                failed[runnable[0]] = error
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(runnable))) as pool:
                futures = {name: pool.submit(self._run_task, name, ctx) for name in runnable}
            for name, future in futures.items():
                error = future.result()
                if error is not None:
                    failed[name] = error

        if failed:
            raise TaskFailure(failed)

    def _run_task(self, name: str, ctx: BuildContext) -> Optional[BaseException]:
        """Run one task, returning its exception instead of raising it."""
        task = self.tasks[name]
        log.info(f"Starting '{name}'...")
        try:
            with self.timings.measure(name):
                task.action(ctx)
        except Exception as e:
            log.error(f"'{name}' failed after {format_duration(self.timings.get(name))}: {e}")
            return e
        log.success(f"Finished '{name}' after {format_duration(self.timings.get(name))}")
        return None


# =============================================================================
# Default Graph
# =============================================================================


def build_task_graph(watch_action: TaskAction) -> TaskGraph:
    """The fixed pipeline: dev/dist styles and scripts, lint, watch and entry points.

    ``watch_action`` blocks for the lifetime of the watch loop; it is passed
    in so the graph stays independent of the watcher.
    """
    return TaskGraph([
        Task("style-dev", phases.style_dev, description="Compile LESS with source maps"),
        Task("style-dist", phases.style_dist, description="Compile, prefix and minify LESS"),
        Task("script-dev", phases.script_dev, description="Concatenate JS"),
        Task("script-dist", phases.script_dist, description="Concatenate and minify JS"),
        Task("lint", phases.lint, description="Lint theme JS sources"),
        Task("watch", watch_action, description="Rebuild on source changes"),
        Task(
            "default",
            watch_action,
            deps=("style-dev", "lint", "script-dev"),
            description="Development build, then watch",
        ),
        Task(
            "dist",
            deps=("style-dist", "lint", "script-dist"),
            description="Production build",
        ),
    ])
