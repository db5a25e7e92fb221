"""Tests for case matching."""

from typo_learn.learning.casing import match_case


class TestMatchCase:
    """Tests for match_case."""

    def test_all_caps(self):
        """Test an all-caps original upper-cases the replacement."""
        assert match_case("the", "TEH") == "THE"

    def test_title_case(self):
        """Test a capitalised original capitalises the replacement."""
        assert match_case("the", "Teh") == "The"

    def test_lowercase(self):
        """Test a lowercase original keeps the stored casing."""
        assert match_case("the", "teh") == "the"
        assert match_case("iPhone", "iphon") == "iPhone"

    def test_title_case_lowers_rest(self):
        """Test title case lower-cases the rest of the replacement."""
        assert match_case("GitHub", "Githb") == "Github"

    def test_single_capital_letter(self):
        """Test a lone capital letter counts as title case."""
        assert match_case("a", "I") == "A"

    def test_mixed_case_keeps_stored(self):
        """Test irregular casing falls back to the stored replacement."""
        assert match_case("McDonald", "MacDonald") == "McDonald"
        assert match_case("the", "tEH") == "the"

    def test_punctuation_ignored(self):
        """Test non-alphabetic characters do not affect the pattern."""
        assert match_case("the", "TEH!") == "THE"
        assert match_case("the", "Teh,") == "The"

    def test_empty_strings(self):
        """Test empty inputs return the replacement unchanged."""
        assert match_case("", "Teh") == ""
        assert match_case("the", "") == "the"
