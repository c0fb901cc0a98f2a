"""Fan-out of verdict requests over a bounded pool of workers.

Dependencies are processed one kind at a time. For each kind a pool of
``min(cpu count, number of dependencies)`` workers pulls jobs from a single
queue and calls the retrieval function. Failed jobs are counted and dropped
and the run goes on; jq failures are the exception and abort it. Once the
run context is done the workers stop at their next job and nothing produced
afterwards is kept.
"""

import logging
import os
import queue
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from ..context import RunContext
from ..errors import CancelledError, JQError, LstnError
from ..models.verdicts import Response

logger = logging.getLogger(__name__)

Dependency = tuple[str, str | None]
RetrievalFunc = Callable[[str, str | None], Response]

_EXIT = object()


@dataclass
class _Failure:
    name: str
    version: str | None
    error: Exception


@dataclass
class KindStats:
    total: int = 0
    completed: int = 0
    errors: int = 0


def _label(name: str, version: str | None) -> str:
    return f"{name} {version}" if version else name


@dataclass
class PackagesTracker:
    """Run the retrieval of many dependencies, tracking progress per kind."""

    ctx: RunContext
    retrieve: RetrievalFunc
    console: Console | None = None
    workers: int | None = None
    stats: dict[str, KindStats] = field(default_factory=dict)

    def _width(self, count: int) -> int:
        return max(1, min(self.workers or os.cpu_count() or 1, count))

    def _work(self, jobs: "queue.Queue[Dependency]", results: "queue.Queue[object]") -> None:
        try:
            while True:
                err = self.ctx.error()
                if err is not None:
                    results.put(err)
                    return
                try:
                    name, version = jobs.get_nowait()
                except queue.Empty:
                    return
                logger.debug(f"processing {_label(name, version)}")
                try:
                    results.put(self.retrieve(name, version))
                except CancelledError as e:
                    results.put(e)
                    return
                except JQError:
                    raise
                except LstnError as e:
                    results.put(_Failure(name, version, e))
        finally:
            results.put(_EXIT)

    def _track_kind(self, progress: Progress, kind: str, items: list[Dependency]) -> Response:
        stats = self.stats.setdefault(kind, KindStats())
        stats.total = len(items)
        task = progress.add_task(kind, total=len(items), errors=0)

        jobs: queue.Queue[Dependency] = queue.Queue()
        for item in items:
            jobs.put(item)
        results: queue.Queue[object] = queue.Queue()

        combined: Response = []
        cancelled: CancelledError | None = None
        width = self._width(len(items))
        with ThreadPoolExecutor(max_workers=width, thread_name_prefix=f"lstn-{kind}") as pool:
            futures = [pool.submit(self._work, jobs, results) for _ in range(width)]
            running = width
            while running:
                item = results.get()
                if item is _EXIT:
                    running -= 1
                    continue
                if isinstance(item, CancelledError):
                    cancelled = cancelled or item
                    continue
                if self.ctx.done():
                    cancelled = cancelled or self.ctx.error()
                    continue
                if cancelled is not None:
                    continue
                if isinstance(item, _Failure):
                    stats.errors += 1
                    logger.warning(f"error processing {_label(item.name, item.version)}: {item.error}")
                    progress.update(task, advance=1, errors=stats.errors)
                    continue
                assert isinstance(item, list)
                combined.extend(item)
                stats.completed += 1
                progress.update(task, advance=1)
        for future in futures:
            future.result()

        if cancelled is not None:
            raise self.ctx.error() or cancelled
        return combined

    def track(self, deps: Mapping[str, list[Dependency]]) -> Response:
        """Retrieve every dependency, kind by kind, concatenating the responses.

        Raises:
            CancelledError: If the run context gets done meanwhile
        """
        console = self.console or Console(stderr=True)
        progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[red]{task.fields[errors]} errors"),
            console=console,
            transient=True,
            disable=not console.is_terminal,
        )
        combined: Response = []
        with progress:
            for kind, items in deps.items():
                if items:
                    combined.extend(self._track_kind(progress, str(kind), list(items)))
        return combined


def track_packages(
    ctx: RunContext,
    deps: Mapping[str, list[Dependency]],
    retrieve: RetrievalFunc,
    console: Console | None = None,
) -> Response:
    return PackagesTracker(ctx, retrieve, console).track(deps)
