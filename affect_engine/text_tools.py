"""
Text Tools - Readability scoring and extractive summarization.

Both are deliberately simple heuristics: vowel-group syllable counting for
a Flesch reading-ease estimate, and sentence picking for summaries.
"""

import re
from dataclasses import dataclass
from typing import Union


SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")
VOWEL_GROUP_PATTERN = re.compile(r"[aeiouy]+")

SUMMARY_KEYWORDS = ("important", "significant", "therefore", "result", "conclude", "summary")
MIN_SUMMARY_CHARS = 100
LONG_SENTENCE_CHARS = 100

NO_TEXT_MESSAGE = "No text to analyze."
TOO_SHORT_FOR_READABILITY = "Text is too short for readability analysis."
TOO_SHORT_TO_SUMMARIZE = "Text is too short to summarize."

# (minimum score, level), checked top-down
READABILITY_LEVELS = [
    (90, "Very Easy"),
    (80, "Easy"),
    (70, "Fairly Easy"),
    (60, "Standard"),
    (50, "Fairly Difficult"),
    (30, "Difficult"),
]
LOWEST_LEVEL = "Very Difficult"


@dataclass(frozen=True)
class ReadabilityReport:
    """Flesch reading ease estimate with basic text statistics."""
    score: int
    level: str
    words: int
    sentences: int
    avg_words_per_sentence: float

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "level": self.level,
            "stats": {
                "words": self.words,
                "sentences": self.sentences,
                "avg_words_per_sentence": round(self.avg_words_per_sentence, 1),
            },
        }


def split_sentences(text: str) -> list[str]:
    """Sentences are runs ending in terminal punctuation; a trailing fragment is dropped."""
    return SENTENCE_PATTERN.findall(text)


def estimate_syllables(word: str) -> int:
    groups = VOWEL_GROUP_PATTERN.findall(word.lower())
    return len(groups) if groups else 1


def readability_level(score: float) -> str:
    for minimum, level in READABILITY_LEVELS:
        if score >= minimum:
            return level
    return LOWEST_LEVEL


def check_readability(text: str) -> Union[ReadabilityReport, str]:
    """
    Simplified Flesch reading ease.

    Returns a ReadabilityReport, or a message string when the text is
    empty or has no complete sentence.
    """
    if not text or not text.strip():
        return NO_TEXT_MESSAGE

    words = text.split()
    sentences = split_sentences(text)

    if not words or not sentences:
        return TOO_SHORT_FOR_READABILITY

    avg_words = len(words) / len(sentences)
    syllables = sum(estimate_syllables(word) for word in words)
    score = 206.835 - 1.015 * avg_words - 84.6 * (syllables / len(words))

    return ReadabilityReport(
        score=round(score),
        level=readability_level(score),
        words=len(words),
        sentences=len(sentences),
        avg_words_per_sentence=avg_words,
    )


def summarize_text(text: str) -> str:
    """
    Extractive summary: the first sentence, then middle sentences that
    contain a keyword or run long, then the last sentence if room remains.

    Target length is max(3, 30% of the sentences).
    """
    if not text or len(text) < MIN_SUMMARY_CHARS:
        return TOO_SHORT_TO_SUMMARIZE

    sentences = split_sentences(text)
    if len(sentences) <= 3:
        return text

    target = max(3, int(len(sentences) * 0.3))
    selected = [sentences[0]]

    for sentence in sentences[1:-1]:
        lowered = sentence.lower()
        if any(keyword in lowered for keyword in SUMMARY_KEYWORDS) or len(sentence) > LONG_SENTENCE_CHARS:
            selected.append(sentence)

        # Leave room for the closing sentence
        if len(selected) >= target - 1:
            break

    if len(selected) < target:
        selected.append(sentences[-1])

    return " ".join(s.strip() for s in selected)
