"""
Mode Selector - Mood or sentiment label to presentation mode.

Pure and total: every MoodLabel and SentimentLabel maps to exactly one
mode, and anything unrecognized maps to the default mode.
"""

from .models import AffectLabel, MoodLabel, PresentationMode, SentimentLabel


CALMING_LABELS = frozenset({
    MoodLabel.NEGATIVE.value,
    MoodLabel.ANXIOUS.value,
    MoodLabel.FRUSTRATED.value,
})

UPLIFTING_LABELS = frozenset({
    MoodLabel.POSITIVE.value,
    MoodLabel.EXCITED.value,
})


def select_mode(label: AffectLabel) -> PresentationMode:
    """Map a mood or sentiment label (enum or string value) to a mode."""
    if isinstance(label, (MoodLabel, SentimentLabel)):
        value = label.value
    elif isinstance(label, str):
        value = label.strip().lower()
    else:
        return PresentationMode.DEFAULT

    if value in CALMING_LABELS:
        return PresentationMode.CALM
    if value in UPLIFTING_LABELS:
        return PresentationMode.UPLIFTING
    return PresentationMode.DEFAULT


class ModeSelector:
    """Stateless wrapper for callers that want an injectable object."""

    def select(self, label: AffectLabel) -> PresentationMode:
        return select_mode(label)
