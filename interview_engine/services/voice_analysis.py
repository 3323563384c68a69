"""Voice metadata analysis.

Derives delivery statistics from a speech transcript and recording duration:
filler-word counts, speaking pace and a pause estimate. The summary string is
handed to the voice evaluator as context.
"""

import re
from typing import List

from interview_engine.domain.models.session import VoiceMetadata

FILLER_WORDS: List[str] = [
    "um", "uh", "uhh", "umm", "erm",
    "like", "you know", "basically", "actually",
    "so", "well", "i mean", "sort of", "kind of",
    "right", "okay so", "literally",
]

SLOW_WPM = 80
FAST_WPM = 180
HIGH_FILLER_COUNT = 10
MODERATE_FILLER_COUNT = 4

_PAUSE_PATTERN = re.compile(r"\.{3,}|--|–|—")


def count_filler_words(text: str) -> int:
    """Count filler words and phrases, case-insensitive."""
    lower = text.lower()
    count = 0
    for filler in FILLER_WORDS:
        if " " in filler:
            count += len(re.findall(re.escape(filler), lower))
        else:
            count += len(re.findall(rf"\b{re.escape(filler)}\b", lower))
    return count


def calculate_wpm(text: str, duration_seconds: float) -> float:
    """Words per minute, 0 for a non-positive duration."""
    if duration_seconds <= 0:
        return 0
    word_count = len(text.split())
    return round(word_count / (duration_seconds / 60))


def estimate_pause_count(text: str) -> int:
    """Ellipses and dashes in the transcript stand in for pauses."""
    return len(_PAUSE_PATTERN.findall(text))


def analyze_voice_metadata(text: str, duration_seconds: float) -> VoiceMetadata:
    """Build VoiceMetadata from a transcript and its recording duration."""
    return VoiceMetadata(
        duration_seconds=round(max(duration_seconds, 0), 2),
        filler_word_count=count_filler_words(text),
        pause_count=estimate_pause_count(text),
        words_per_minute=calculate_wpm(text, duration_seconds),
    )


def summarize_delivery(meta: VoiceMetadata) -> str:
    """One-line human-readable delivery summary."""
    parts = []

    if meta.words_per_minute < SLOW_WPM:
        parts.append("Slow speaking pace (may indicate hesitation)")
    elif meta.words_per_minute > FAST_WPM:
        parts.append("Very fast speaking pace (may indicate nervousness)")
    else:
        parts.append("Normal speaking pace")

    if meta.filler_word_count > HIGH_FILLER_COUNT:
        parts.append(f"High filler word usage ({meta.filler_word_count} detected)")
    elif meta.filler_word_count > MODERATE_FILLER_COUNT:
        parts.append(f"Moderate filler word usage ({meta.filler_word_count} detected)")
    else:
        parts.append(f"Low filler word usage ({meta.filler_word_count} detected)")

    parts.append(f"Response duration: {meta.duration_seconds:g}s")

    return ". ".join(parts) + "."
