import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from tsforward.errors import FetchError, TranslateError
from tsforward.extractors.registry import ExtractorRegistry
from tsforward.models.config import TargetConfig
from tsforward.models.metrics import MetricFamily, NormalizedSeries
from tsforward.services.dispatcher import Dispatcher
from tsforward.services.fetcher import fetch_metric_families
from tsforward.services.filter import select_families
from tsforward.services.translator import to_time_series

logger = structlog.get_logger(__name__)

FetchFunc = Callable[[str, float], Awaitable[Dict[str, MetricFamily]]]


class Worker:
    """Polling loop for a single target.

    Ticks fire on a fixed schedule regardless of how long a cycle takes. When a
    tick fires while the previous cycle of this target is still running, the
    tick is skipped, so cycles of one target never overlap.
    """

    def __init__(
        self,
        config: TargetConfig,
        dispatcher: Dispatcher,
        fetch: FetchFunc = fetch_metric_families,
        registry: Optional[ExtractorRegistry] = None,
    ):
        self.config = config
        self.dispatcher = dispatcher
        self.fetch = fetch
        self.registry = registry
        self.log = logger.bind(target=config.source_url)
        self._cycle: Optional[asyncio.Task] = None

    async def collect_series(self) -> List[NormalizedSeries]:
        families = await self.fetch(self.config.source_url, self.config.timeout)
        selected = select_families(families, self.config.name_pattern)
        self.log.debug("Selected families", fetched=len(families), selected=len(selected))

        series: List[NormalizedSeries] = []
        for name, family in selected.items():
            try:
                series.extend(to_time_series(self.config, family, self.registry))
            except TranslateError as e:
                raise TranslateError(f"family {name}: {e.message}") from e
        return series

    async def run_cycle(self) -> int:
        """One fetch, filter, translate and dispatch pass. Returns batches sent."""
        try:
            series = await self.collect_series()
        except FetchError as e:
            self.log.error("Failed to fetch metrics, skipping cycle", error=str(e))
            return 0
        except TranslateError as e:
            self.log.error("Failed to translate metrics, discarding cycle", error=str(e))
            return 0
        except Exception:
            self.log.exception("Unexpected error while collecting metrics")
            return 0

        return await self.dispatcher.dispatch(self.config.project, series)

    def tick(self) -> bool:
        if self._cycle is not None and not self._cycle.done():
            self.log.warning("Previous cycle still running, skipping tick")
            return False
        self._cycle = asyncio.create_task(self.run_cycle())
        return True

    async def run(self):
        loop = asyncio.get_running_loop()
        interval = self.config.poll_interval
        next_tick = loop.time() + interval
        self.log.info("Worker started", interval=interval)
        try:
            while True:
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
                self.tick()
                next_tick += interval
                now = loop.time()
                while next_tick <= now:
                    next_tick += interval
        finally:
            if self._cycle is not None and not self._cycle.done():
                self._cycle.cancel()
            self.log.info("Worker stopped")


class Scheduler:
    """Owns one worker task per target for the lifetime of the process"""

    def __init__(
        self,
        configs: Sequence[TargetConfig],
        dispatcher: Dispatcher,
        fetch: FetchFunc = fetch_metric_families,
    ):
        self.workers = [Worker(config, dispatcher, fetch) for config in configs]
        self.tasks: List[asyncio.Task] = []

    def start(self):
        if self.tasks:
            raise RuntimeError("scheduler already started")
        self.tasks = [
            asyncio.create_task(worker.run(), name=f"worker:{worker.config.source_url}")
            for worker in self.workers
        ]
        logger.info(f"Started {len(self.tasks)} worker(s)")

    async def stop(self):
        for task in self.tasks:
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks = []

    async def run_forever(self):
        self.start()
        try:
            await asyncio.gather(*self.tasks)
        finally:
            await self.stop()
