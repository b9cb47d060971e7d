"""
Analysis Session - Debounced, generation-guarded analysis for one subject.

Each user edit calls submit(). A quiet-period timer restarts on every
submit and the analysis only runs once input has been idle for the
debounce interval. Every request captures a monotonically increasing
generation number; a result is published only if its generation is
still the newest when it resolves, so a slow in-flight response can
never overwrite newer state.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from .analyzer import AffectAnalyzer
from .models import AnalysisOptions, AnalysisResult


logger = logging.getLogger(__name__)


ResultCallback = Callable[[AnalysisResult], Any]


class AnalysisSession:
    """
    Latest-analysis cell shared with a presentation layer.

    Single event loop, sequential mutation: no locking needed.

    Usage:
        session = AnalysisSession(analyzer, options, debounce_seconds=0.5)
        session.submit(text_box.value)   # on every input event
        ...
        await session.flush()
        render(session.latest)
    """

    DEFAULT_DEBOUNCE_SECONDS = 0.5

    def __init__(
        self,
        analyzer: AffectAnalyzer,
        options: Optional[AnalysisOptions] = None,
        debounce_seconds: Optional[float] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        self.analyzer = analyzer
        self.options = options or AnalysisOptions()
        self.debounce_seconds = (
            self.DEFAULT_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.on_result = on_result

        self.latest: Optional[AnalysisResult] = None
        self.latest_generation = 0

        self._generation = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

        # Statistics
        self._stats = {
            "submitted": 0,
            "debounced": 0,
            "published": 0,
            "discarded_stale": 0,
        }

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, text: str) -> int:
        """
        Schedule analysis after the quiet period. Returns the generation.

        Must be called from within a running event loop.
        """
        self._stats["submitted"] += 1
        generation = self._next_generation()

        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
            self._stats["debounced"] += 1

        self._debounce_task = asyncio.create_task(self._debounced(generation, text))
        return generation

    async def analyze_now(self, text: str) -> Optional[AnalysisResult]:
        """
        Analyze immediately, bypassing the debounce timer.

        Returns the result if it was published, None if it went stale.
        """
        generation = self._next_generation()
        return await self._run(generation, text)

    async def flush(self) -> None:
        """Wait for the pending debounce timer and every in-flight analysis."""
        while True:
            pending = [t for t in self._inflight if not t.done()]
            if self._debounce_task is not None and not self._debounce_task.done():
                pending.append(self._debounce_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def reset(self) -> None:
        """Forget the latest result; anything still in flight becomes stale."""
        self._next_generation()
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self.latest = None
        self.latest_generation = 0

    async def close(self) -> None:
        """Cancel pending work and release the analyzer's HTTP sessions."""
        self.reset()
        for task in list(self._inflight):
            task.cancel()
        await self.flush()
        await self.analyzer.close()

    def get_stats(self) -> dict[str, Any]:
        return {
            **self._stats,
            "generation": self._generation,
            "latest_generation": self.latest_generation,
            "inflight": sum(1 for t in self._inflight if not t.done()),
        }

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    async def _debounced(self, generation: int, text: str) -> None:
        await asyncio.sleep(self.debounce_seconds)

        if generation != self._generation:
            return

        # Past the quiet period: a later submit must not cancel this call,
        # it only makes the result stale.
        task = asyncio.create_task(self._run(generation, text))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, generation: int, text: str) -> Optional[AnalysisResult]:
        result = await self.analyzer.analyze(text, self.options)

        if generation != self._generation:
            self._stats["discarded_stale"] += 1
            logger.debug(
                f"Discarding stale analysis (generation {generation}, current {self._generation})"
            )
            return None

        self.latest = result
        self.latest_generation = generation
        self._stats["published"] += 1

        if self.on_result is not None:
            self.on_result(result)

        return result
