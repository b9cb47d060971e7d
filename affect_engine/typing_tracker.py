"""
Typing Behavior Tracker - Mood from keystroke timing alone.

No text content is ever seen: samples carry a timestamp, a deletion
flag and the key name. Mood is re-evaluated after every sample with an
ordered rule cascade; when no rule fires the previous mood is kept
(hysteresis), so the label only changes when a rule strictly fires.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .models import MoodLabel, TypingMetrics, TypingSample, TypingState


logger = logging.getLogger(__name__)


@dataclass
class TrackerConfig:
    """Thresholds for the typing tracker."""
    # Inter-keystroke gaps
    fast_gap_ms: int = 1000
    slow_gap_ms: int = 5000

    # Speed estimate adjustments
    speed_increment: float = 10.0
    speed_decrement: float = 5.0
    speed_floor: float = 30.0
    speed_ceiling: float = 150.0

    # Rolling window
    retention_ms: int = 120_000

    # Mood cascade. Fast counts are inclusive minimums of sub-second gaps;
    # ten keystrokes in a burst produce nine gaps.
    frustrated_min_fast: int = 9
    frustrated_error_rate: float = 0.3
    anxious_min_fast: int = 7
    anxious_error_rate: float = 0.2
    excited_min_fast: int = 9
    excited_error_rate: float = 0.1
    calm_speed: float = 60.0
    calm_error_rate: float = 0.1

    def __post_init__(self) -> None:
        """Validate thresholds."""
        if self.fast_gap_ms >= self.slow_gap_ms:
            raise ValueError("fast_gap_ms must be < slow_gap_ms")
        if self.speed_floor > self.speed_ceiling:
            raise ValueError("speed_floor must be <= speed_ceiling")
        if self.retention_ms <= 0:
            raise ValueError("retention_ms must be positive")

    def to_dict(self) -> dict:
        return dict(self.__dict__)


class TypingBehaviorTracker:
    """
    Rolling keystroke statistics and mood classification.

    Per sample:
    - gap < fast_gap_ms  -> speed += increment (clamped to ceiling)
    - gap > slow_gap_ms  -> speed -= decrement (clamped to floor)
    - deletion           -> error count + 1
    - samples older than retention_ms are dropped before the error rate
      (window deletions / window size) is recomputed

    Cascade, first match wins:
    1. many fast samples + high error rate     -> frustrated
    2. fairly many fast + moderate error rate  -> anxious
    3. many fast samples + low error rate      -> excited
    4. low speed estimate + low error rate     -> calm
    otherwise the mood is left unchanged.

    O(window) per sample. Owns its state; not shared between sessions.
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        enabled: bool = True,
    ) -> None:
        self.config = config or TrackerConfig()
        self.enabled = enabled
        self.state = TypingState()

    @property
    def mood(self) -> MoodLabel:
        return self.state.mood

    def record(self, sample: TypingSample) -> MoodLabel:
        """Fold one sample into the rolling state and return the mood."""
        if not self.enabled:
            return self.state.mood

        cfg = self.config
        state = self.state

        was_fast = False
        if state.last_timestamp_ms is not None:
            gap = sample.timestamp_ms - state.last_timestamp_ms
            if gap < cfg.fast_gap_ms:
                was_fast = True
                state.speed_estimate = min(cfg.speed_ceiling, state.speed_estimate + cfg.speed_increment)
            elif gap > cfg.slow_gap_ms:
                state.speed_estimate = max(cfg.speed_floor, state.speed_estimate - cfg.speed_decrement)

        if sample.is_deletion:
            state.error_count += 1
            state.total_deletions += 1

        state.total_keystrokes += 1
        state.window_samples.append((sample, was_fast))
        state.last_timestamp_ms = sample.timestamp_ms

        self._prune(sample.timestamp_ms)
        return self._evaluate()

    def record_key(self, key: str, timestamp_ms: int) -> MoodLabel:
        """Convenience wrapper for raw key events."""
        return self.record(TypingSample.from_key(key, timestamp_ms))

    def reevaluate(self, now_ms: int) -> MoodLabel:
        """Periodic re-evaluation: age out old samples, then re-run the cascade."""
        if not self.enabled:
            return self.state.mood
        self._prune(now_ms)
        return self._evaluate()

    def reset(self) -> None:
        """Clear all rolling state; mood returns to neutral."""
        self.state = TypingState()

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable tracking. Disabling discards state."""
        self.enabled = enabled
        if not enabled:
            self.reset()

    def snapshot(self) -> TypingMetrics:
        """Current metrics for display."""
        state = self.state
        keystrokes = state.total_keystrokes
        accuracy = (
            round((keystrokes - state.total_deletions) / keystrokes * 100)
            if keystrokes > 0 else 100
        )
        return TypingMetrics(
            keystrokes=keystrokes,
            deletions=state.total_deletions,
            window_size=state.sample_count,
            fast_count=state.fast_count,
            error_rate=state.error_rate,
            accuracy_pct=accuracy,
            speed_estimate=state.speed_estimate,
            mood=state.mood,
        )

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    def _prune(self, now_ms: int) -> None:
        """Drop samples older than the retention window."""
        cutoff = now_ms - self.config.retention_ms
        window = self.state.window_samples

        while window and window[0][0].timestamp_ms <= cutoff:
            old_sample, _ = window.popleft()
            if old_sample.is_deletion:
                self.state.error_count -= 1

    def _evaluate(self) -> MoodLabel:
        cfg = self.config
        state = self.state

        fast = state.fast_count
        error_rate = state.error_rate
        previous = state.mood

        if fast >= cfg.frustrated_min_fast and error_rate > cfg.frustrated_error_rate:
            state.mood = MoodLabel.FRUSTRATED
        elif fast >= cfg.anxious_min_fast and error_rate > cfg.anxious_error_rate:
            state.mood = MoodLabel.ANXIOUS
        elif fast >= cfg.excited_min_fast and error_rate < cfg.excited_error_rate:
            state.mood = MoodLabel.EXCITED
        elif state.speed_estimate < cfg.calm_speed and error_rate < cfg.calm_error_rate:
            state.mood = MoodLabel.CALM

        if state.mood != previous:
            logger.debug(f"Typing mood changed: {previous.value} -> {state.mood.value}")

        return state.mood
