"""
Build orchestrator for swbuild.

Loads the shop config once, writes the LESS manifest, and runs an entry
point of the task graph against the resulting context.
"""

from __future__ import annotations

import time
from typing import Optional

from swbuild.build.config import (
    BUILTIN_VARIABLES,
    BuildContext,
    BuildOptions,
    derive_paths,
    load_settings,
    load_shop_config,
)
from swbuild.build.manifest import (
    build_js_file_list,
    build_less_manifest,
    merge_variables,
    write_less_manifest,
)
from swbuild.build.tasks import TaskGraph, build_task_graph
from swbuild.core.timing import format_duration
from swbuild.core.utils import log


class BuildOrchestrator:
    """Prepares the build context and runs task graph entry points."""

    def __init__(self, options: BuildOptions, graph: Optional[TaskGraph] = None):
        self.options = options
        self.graph = graph if graph is not None else build_task_graph(self._watch)
        self.context: Optional[BuildContext] = None

    def _watch(self, ctx: BuildContext) -> None:
        from swbuild.commands.watch import run_watch
        run_watch(ctx, self.graph)

    def prepare(self) -> BuildContext:
        """Load configuration and write the generated manifest.

        Raises:
            ConfigError: If the shop config or settings cannot be loaded.
        """
        opts = self.options
        work_dir = opts.work_dir.resolve()

        shop = load_shop_config(opts.shop_id, work_dir)
        settings = load_settings(opts.settings_path, work_dir)
        paths = derive_paths(shop, work_dir)

        manifest = build_less_manifest(shop.less, opts.exclude_responsive_theme)
        if opts.dry_run:
            log.info(f"[DRY-RUN] Would write LESS manifest: {paths.less_source}")
        else:
            write_less_manifest(manifest, paths.less_source)

        if opts.exclude_responsive_theme:
            log.info("Responsive theme excluded from manifest")

        self.context = BuildContext(
            shop=shop,
            paths=paths,
            variables=merge_variables(BUILTIN_VARIABLES, shop.config),
            js_files=tuple(build_js_file_list(shop.js)),
            work_dir=work_dir,
            settings=settings,
            dry_run=opts.dry_run,
            verbose=opts.verbose,
        )
        return self.context

    def run(self, target: str) -> None:
        """Run ``target``; raises TaskFailure if any task fails."""
        task = self.graph.get(target)
        ctx = self.context if self.context is not None else self.prepare()

        log.header(f"{task.name} (shop {ctx.shop.shop_id})")
        if self.options.verbose:
            for i, batch in enumerate(self.graph.plan(target), 1):
                log.dim(f"batch {i}: {', '.join(batch)}")

        start = time.monotonic()
        self.graph.run(target, ctx)

        log.header("BUILD COMPLETE")
        log.info(f"Output: {ctx.paths.build_dir}")
        log.info(f"Total time: {format_duration(time.monotonic() - start)}")
        if self.options.verbose:
            for line in self.graph.timings.batch_summary(self.graph.plan(target)):
                log.dim(line)
