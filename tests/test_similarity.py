"""Tests for token similarity scoring."""

import pytest

from typo_learn.config import ALIGNMENT_THRESHOLD, CORRECTION_THRESHOLD
from typo_learn.learning.similarity import similarity


class TestSimilarity:
    """Tests for the similarity function."""

    def test_dissimilar_words(self):
        """Test that unrelated words fall below the correction threshold."""
        assert similarity("hello", "world") < CORRECTION_THRESHOLD

    def test_transposed_letters(self):
        """Test a classic i/e swap scores as a typo."""
        assert similarity("recieve", "receive") >= CORRECTION_THRESHOLD

    def test_short_word_transposition(self):
        """Test three-letter transpositions are still recognised."""
        assert similarity("teh", "the") >= CORRECTION_THRESHOLD
        assert similarity("teh", "the") == pytest.approx(0.9)

    def test_identical(self):
        """Test identical tokens score 1.0."""
        assert similarity("package", "package") == 1.0
        assert similarity("a", "a") == 1.0

    def test_empty(self):
        """Test an empty token never matches a non-empty one."""
        assert similarity("", "word") == 0.0
        assert similarity("word", "") == 0.0

    def test_no_common_characters(self):
        """Test tokens sharing no characters score 0."""
        assert similarity("cat", "dog") == 0.0
        assert similarity("now", "right") == 0.0

    def test_case_sensitive(self):
        """Test case differences lower the score."""
        assert similarity("The", "the") < 1.0

    @pytest.mark.parametrize("a,b", [
        ("teh", "the"),
        ("recieve", "receive"),
        ("hello", "world"),
        ("adn", "and"),
        ("definately", "definitely"),
        ("ab", "ba"),
    ])
    def test_symmetric_and_bounded(self, a, b):
        """Test the score is symmetric and within [0, 1]."""
        score = similarity(a, b)
        assert score == pytest.approx(similarity(b, a))
        assert 0.0 <= score <= 1.0

    def test_thresholds_ordered(self):
        """Test alignment is more permissive than acceptance."""
        assert ALIGNMENT_THRESHOLD < CORRECTION_THRESHOLD
