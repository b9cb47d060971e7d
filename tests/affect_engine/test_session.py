"""
Analysis Session Tests.

============================================================
PURPOSE
============================================================
Tests for debouncing and stale-response discard.

TEST CATEGORIES:
- Debounce tests: quiet period collapses bursts of edits
- Generation tests: slow in-flight results never overwrite newer ones
- Lifecycle tests: reset, close, callbacks

============================================================
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from affect_engine.analyzer import AffectAnalyzer
from affect_engine.models import AnalysisResult, Intent, SentimentScore
from affect_engine.session import AnalysisSession


# ============================================================
# HELPERS
# ============================================================

class FakeAnalyzer:
    """Records calls; texts with a gate block until the gate is set."""

    def __init__(self):
        self.calls = []
        self.gates = {}
        self.close = AsyncMock()

    async def analyze(self, text, options=None):
        self.calls.append(text)
        gate = self.gates.get(text)
        if gate is not None:
            await gate.wait()
        return AnalysisResult(
            sentiment=SentimentScore.from_score(0),
            intent=Intent.UNKNOWN,
            suggestions=(text,),
        )


# ============================================================
# DEBOUNCE TESTS
# ============================================================

class TestDebounce:
    """Tests for the quiet-period timer."""

    @pytest.mark.asyncio
    async def test_burst_runs_once_with_last_text(self):
        analyzer = FakeAnalyzer()
        session = AnalysisSession(analyzer, debounce_seconds=0.01)

        session.submit("h")
        session.submit("he")
        generation = session.submit("hey")
        await session.flush()

        assert analyzer.calls == ["hey"]
        assert session.latest.suggestions == ("hey",)
        assert session.latest_generation == generation
        assert session.get_stats()["debounced"] == 2

    @pytest.mark.asyncio
    async def test_default_debounce(self):
        session = AnalysisSession(FakeAnalyzer())

        assert session.debounce_seconds == 0.5

    @pytest.mark.asyncio
    async def test_with_real_analyzer(self):
        session = AnalysisSession(AffectAnalyzer(), debounce_seconds=0)

        session.submit("The app keeps crashing, this is so frustrating")
        await session.flush()

        assert session.latest.intent == Intent.BUG_REPORT


# ============================================================
# GENERATION TESTS
# ============================================================

class TestStaleDiscard:
    """Tests for the generation counter."""

    @pytest.mark.asyncio
    async def test_in_flight_result_discarded(self):
        analyzer = FakeAnalyzer()
        analyzer.gates["slow"] = asyncio.Event()
        published = []
        session = AnalysisSession(analyzer, debounce_seconds=0, on_result=published.append)

        session.submit("slow")
        await asyncio.sleep(0.01)
        assert analyzer.calls == ["slow"]

        session.submit("fast")
        await asyncio.sleep(0.01)
        analyzer.gates["slow"].set()
        await session.flush()

        assert analyzer.calls == ["slow", "fast"]
        assert session.latest.suggestions == ("fast",)
        assert [r.suggestions for r in published] == [("fast",)]
        assert session.get_stats()["discarded_stale"] == 1

    @pytest.mark.asyncio
    async def test_analyze_now_returns_none_when_stale(self):
        analyzer = FakeAnalyzer()
        analyzer.gates["first"] = asyncio.Event()
        session = AnalysisSession(analyzer)

        first = asyncio.create_task(session.analyze_now("first"))
        await asyncio.sleep(0)
        second = await session.analyze_now("second")
        analyzer.gates["first"].set()

        assert await first is None
        assert second.suggestions == ("second",)
        assert session.latest is second

    @pytest.mark.asyncio
    async def test_generation_increases(self):
        session = AnalysisSession(FakeAnalyzer(), debounce_seconds=0)

        first = session.submit("a")
        second = session.submit("b")
        await session.flush()

        assert second > first
        assert session.generation == second


# ============================================================
# LIFECYCLE TESTS
# ============================================================

class TestSessionLifecycle:
    """Tests for reset and close."""

    @pytest.mark.asyncio
    async def test_reset_makes_in_flight_stale(self):
        analyzer = FakeAnalyzer()
        analyzer.gates["text"] = asyncio.Event()
        session = AnalysisSession(analyzer, debounce_seconds=0)

        session.submit("text")
        await asyncio.sleep(0.01)
        session.reset()
        analyzer.gates["text"].set()
        await session.flush()

        assert session.latest is None
        assert session.latest_generation == 0

    @pytest.mark.asyncio
    async def test_reset_cancels_pending_debounce(self):
        analyzer = FakeAnalyzer()
        session = AnalysisSession(analyzer, debounce_seconds=0.05)

        session.submit("text")
        session.reset()
        await session.flush()

        assert analyzer.calls == []

    @pytest.mark.asyncio
    async def test_close(self):
        analyzer = FakeAnalyzer()
        analyzer.gates["text"] = asyncio.Event()
        session = AnalysisSession(analyzer, debounce_seconds=0)

        session.submit("text")
        await asyncio.sleep(0.01)
        await session.close()

        analyzer.close.assert_awaited_once()
        assert session.get_stats()["inflight"] == 0
        assert session.latest is None

    @pytest.mark.asyncio
    async def test_callback_receives_result(self):
        callback = MagicMock()
        session = AnalysisSession(FakeAnalyzer(), debounce_seconds=0, on_result=callback)

        result = await session.analyze_now("hello")

        callback.assert_called_once_with(result)
