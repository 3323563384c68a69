"""Tests for voice metadata analysis."""

from interview_engine.domain.models.session import VoiceMetadata
from interview_engine.services.voice_analysis import (
    analyze_voice_metadata,
    calculate_wpm,
    count_filler_words,
    estimate_pause_count,
    summarize_delivery,
)


class TestFillerWords:
    def test_counts_single_words_on_boundaries(self):
        assert count_filler_words("Um, I basically think, uh, it works") == 3

    def test_does_not_match_inside_words(self):
        assert count_filler_words("The summary is solid") == 0

    def test_counts_phrases(self):
        assert count_filler_words("You know, it is kind of slow") == 2


class TestPace:
    def test_wpm(self):
        text = " ".join(["word"] * 60)
        assert calculate_wpm(text, 30) == 120

    def test_zero_duration(self):
        assert calculate_wpm("some words here", 0) == 0

    def test_pauses(self):
        assert estimate_pause_count("Well... I think -- maybe... yes") == 3


class TestAnalyze:
    def test_builds_metadata(self):
        meta = analyze_voice_metadata("Um... caching stores results -- for reuse", 6)
        assert meta.filler_word_count == 1
        assert meta.pause_count == 2
        # Seven whitespace-separated tokens in six seconds
        assert meta.words_per_minute == 70
        assert meta.duration_seconds == 6

    def test_negative_duration_clamped(self):
        meta = analyze_voice_metadata("hello", -3)
        assert meta.duration_seconds == 0
        assert meta.words_per_minute == 0


class TestSummary:
    def test_slow_and_low_fillers(self):
        meta = VoiceMetadata(
            duration_seconds=40, filler_word_count=1, pause_count=0, words_per_minute=60
        )
        summary = summarize_delivery(meta)
        assert "Slow speaking pace" in summary
        assert "Low filler word usage (1 detected)" in summary
        assert "Response duration: 40s" in summary

    def test_fast_and_high_fillers(self):
        meta = VoiceMetadata(
            duration_seconds=12.5, filler_word_count=11, pause_count=2, words_per_minute=200
        )
        summary = summarize_delivery(meta)
        assert "Very fast speaking pace" in summary
        assert "High filler word usage" in summary
        assert "12.5s" in summary

    def test_normal_and_moderate(self):
        meta = VoiceMetadata(
            duration_seconds=30, filler_word_count=5, pause_count=0, words_per_minute=130
        )
        summary = summarize_delivery(meta)
        assert "Normal speaking pace" in summary
        assert "Moderate filler word usage" in summary
