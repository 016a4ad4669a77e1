"""Unit tests for the transcript dataclasses.

WHY: The store, filter, and save path all trust Word and Transcript to
hold valid timing and to write back exactly what the service sent. A
dropped metadata key or an ``edited`` flag on every word would change
the saved file.

RULES:
- Parsing uses the same response shape as the /upload endpoint
- Malformed payloads raise InvalidTranscriptError
"""

from __future__ import annotations

import pytest

from transcript_editor.core.ir import (
    InvalidTranscriptError,
    TimeRange,
    Transcript,
    Word,
    seconds_to_ms,
)


class TestWord:
    """Word parsing, invariants, and serialization."""

    def test_from_dict_reads_all_fields(self):
        word = Word.from_dict({
            "word": "dog", "start_time": 6000, "end_time": 6500,
            "qc": False, "qc_word": "Expected 'dot'",
        })
        assert word.text == "dog"
        assert word.start_time == 6000
        assert word.end_time == 6500
        assert word.qc is False
        assert word.qc_word == "Expected 'dot'"
        assert word.edited is False

    def test_seconds_properties(self):
        word = Word("cat", 250, 1500)
        assert word.start_s == 0.25
        assert word.end_s == 1.5

    def test_start_after_end_rejected(self):
        with pytest.raises(InvalidTranscriptError, match="starts after it ends"):
            Word("cat", 600, 500)

    def test_negative_time_rejected(self):
        with pytest.raises(InvalidTranscriptError, match="negative"):
            Word("cat", -1, 500)

    def test_zero_length_word_allowed(self):
        word = Word("uh", 700, 700)
        assert word.start_time == word.end_time

    def test_unknown_keys_round_trip(self):
        raw = {"word": "cat", "start_time": 0, "end_time": 500, "qc": True,
               "qc_word": None, "confidence": 0.93}
        word = Word.from_dict(raw)
        assert word.extra == {"confidence": 0.93}
        assert word.to_dict() == raw

    def test_edited_only_written_when_true(self):
        word = Word("cat", 0, 500, qc=True)
        assert "edited" not in word.to_dict()
        assert word.with_edit("kat", 0, 600).to_dict()["edited"] is True

    def test_with_edit_keeps_qc_and_extra(self):
        word = Word("dog", 6000, 6500, qc=False, qc_word="Expected 'dot'",
                    extra={"confidence": 0.4})
        edited = word.with_edit("dot", 6000, 6400)
        assert edited.text == "dot"
        assert edited.end_time == 6400
        assert edited.qc is False
        assert edited.qc_word == "Expected 'dot'"
        assert edited.extra == {"confidence": 0.4}
        assert edited.edited is True
        assert word.edited is False


class TestTranscript:
    """Transcript.from_dict validation and metadata pass-through."""

    def test_parses_words_in_order(self, sample_response):
        transcript = Transcript.from_dict(sample_response)
        assert [w.text for w in transcript.words] == ["cat", "dog"]

    def test_metadata_round_trips(self, sample_response):
        transcript = Transcript.from_dict(sample_response)
        assert transcript.metadata == {"language": "en", "task": "verbal_fluency"}
        assert transcript.to_dict() == sample_response

    def test_missing_words_rejected(self):
        with pytest.raises(InvalidTranscriptError, match="malformed"):
            Transcript.from_dict({"text": "cat dog"})

    def test_non_object_rejected(self):
        with pytest.raises(InvalidTranscriptError):
            Transcript.from_dict(["cat", "dog"])

    def test_string_times_rejected(self):
        with pytest.raises(InvalidTranscriptError):
            Transcript.from_dict({"words": [
                {"word": "cat", "start_time": "0", "end_time": 500},
            ]})

    def test_inverted_word_rejected(self):
        with pytest.raises(InvalidTranscriptError):
            Transcript.from_dict({"words": [
                {"word": "cat", "start_time": 900, "end_time": 500},
            ]})

    def test_empty_word_list_allowed(self):
        transcript = Transcript.from_dict({"words": []})
        assert transcript.words == []


class TestTimeRange:
    """TimeRange invariants and millisecond display."""

    def test_to_ms(self):
        assert TimeRange(0.1, 9.9996).to_ms() == (100, 10000)

    def test_start_must_precede_end(self):
        with pytest.raises(ValueError):
            TimeRange(2.0, 2.0)

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError):
            TimeRange(-0.5, 2.0)

    def test_length(self):
        assert TimeRange(1.0, 3.5).length == 2.5


class TestSecondsToMs:
    """Seconds → milliseconds rounds to nearest."""

    def test_exact(self):
        assert seconds_to_ms(0.6) == 600

    def test_rounds_down(self):
        assert seconds_to_ms(1.0004) == 1000

    def test_rounds_up(self):
        assert seconds_to_ms(1.0006) == 1001

    def test_zero(self):
        assert seconds_to_ms(0.0) == 0
