"""Tests for the typo-learn command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from typo_learn import __version__
from typo_learn.cli import app
from typo_learn.config import EngineSettings

runner = CliRunner()

ORIGINAL = "I will recieve teh package"
EDITED = "I will receive the package"


@pytest.fixture
def store_path(tmp_path, monkeypatch):
    """Isolated data directory and store file for each test."""
    monkeypatch.setenv("TYPO_LEARN_HOME", str(tmp_path / "home"))
    for name in EngineSettings.model_fields:
        monkeypatch.delenv(f"TYPO_LEARN_{name.upper()}", raising=False)
    return tmp_path / "corrections.json"


@pytest.fixture
def invoke(store_path):
    """Run the CLI against the test store."""

    def _invoke(*args):
        return runner.invoke(app, ["--store", str(store_path), *args])

    return _invoke


class TestVersion:
    """Tests for --version."""

    def test_version(self):
        """Test the version flag prints and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestLearnCommand:
    """Tests for the learn command."""

    def test_learn(self, invoke, store_path):
        """Test learning from an edit reports the corrections."""
        result = invoke("learn", ORIGINAL, EDITED)

        assert result.exit_code == 0
        assert "Learned 2 correction(s)" in result.output
        assert "recieve" in result.output
        assert "Active corrections: 0" in result.output
        assert len(json.loads(store_path.read_text())["corrections"]) == 2

    def test_learn_activates_after_repeats(self, invoke):
        """Test the third observation activates the corrections."""
        invoke("learn", ORIGINAL, EDITED)
        invoke("learn", ORIGINAL, EDITED)
        result = invoke("learn", ORIGINAL, EDITED)

        assert result.exit_code == 0
        assert "Active corrections: 2" in result.output

    def test_nothing_learned(self, invoke, store_path):
        """Test an edit without typos."""
        result = invoke("learn", "I like cats", "I like dogs")

        assert result.exit_code == 0
        assert "No typo corrections found" in result.output
        assert not store_path.exists()


class TestApplyCommand:
    """Tests for the apply command."""

    def test_apply_without_corrections(self, invoke):
        """Test text passes through untouched on an empty store."""
        result = invoke("apply", "hello   world")

        assert result.exit_code == 0
        assert result.output == "hello   world\n"

    def test_apply_learned(self, invoke):
        """Test corrections apply once active."""
        for _ in range(3):
            invoke("learn", ORIGINAL, EDITED)

        result = invoke("apply", "Teh package will recieve care")

        assert result.exit_code == 0
        assert result.output == "The package will receive care\n"

    def test_apply_not_yet_active(self, invoke):
        """Test a single observation is not applied by default."""
        invoke("learn", ORIGINAL, EDITED)

        result = invoke("apply", ORIGINAL)

        assert result.output == ORIGINAL + "\n"

    def test_min_confidence_override(self, invoke):
        """Test lowering the threshold for one run."""
        invoke("learn", ORIGINAL, EDITED)

        result = invoke("apply", ORIGINAL, "--min-confidence", "0.4")

        assert result.exit_code == 0
        assert EDITED in result.output

    def test_show(self, invoke):
        """Test listing applied corrections."""
        invoke("add", "teh", "the", "--times", "5")

        result = invoke("apply", "teh end", "--show")

        assert result.exit_code == 0
        assert "the end" in result.output
        assert "Applied 1 correction(s)" in result.output

    def test_corrupt_store_falls_back(self, invoke, store_path):
        """Test an unreadable store does not stop apply by default."""
        store_path.write_text("{broken")

        result = invoke("apply", ORIGINAL)

        assert result.exit_code == 0
        assert ORIGINAL in result.output

    def test_corrupt_store_propagate(self, invoke, store_path, monkeypatch):
        """Test the propagate policy turns load failures into errors."""
        store_path.write_text("{broken")
        monkeypatch.setenv("TYPO_LEARN_LOAD_FAILURE", "propagate")

        result = invoke("apply", ORIGINAL)

        assert result.exit_code == 1
        assert "Error" in result.output
        assert "[storage]" in result.output


class TestAddCommand:
    """Tests for the add command."""

    def test_add(self, invoke):
        """Test adding a manual correction."""
        result = invoke("add", "Adn", "and", "--times", "3")

        assert result.exit_code == 0
        assert "Saved 'adn' -> 'and'" in result.output
        assert "active" in result.output
        assert "not yet active" not in result.output

    def test_add_once_not_active(self, invoke):
        """Test a single manual observation is stored but inactive."""
        result = invoke("add", "adn", "and")

        assert result.exit_code == 0
        assert "not yet active" in result.output

    def test_add_rejects_phrases(self, invoke, store_path):
        """Test corrections must be single words."""
        result = invoke("add", "teh cat", "the cat")

        assert result.exit_code == 1
        assert "single word" in result.output
        assert not store_path.exists()


class TestListCommand:
    """Tests for the list command."""

    def test_list_empty(self, invoke):
        """Test listing an empty store."""
        result = invoke("list")

        assert result.exit_code == 0
        assert "No corrections stored." in result.output

    def test_list(self, invoke):
        """Test listing stored corrections."""
        invoke("add", "teh", "the", "--times", "5")
        invoke("add", "adn", "and")

        result = invoke("list")

        assert result.exit_code == 0
        assert "Corrections (2)" in result.output
        assert "manual" in result.output

    def test_list_min_confidence(self, invoke):
        """Test filtering the listing."""
        invoke("add", "teh", "the", "--times", "5")
        invoke("add", "adn", "and")

        result = invoke("list", "--min-confidence", "0.55")

        assert "Corrections (1)" in result.output


class TestForgetCommand:
    """Tests for the forget command."""

    def test_forget(self, invoke):
        """Test forgetting a word."""
        invoke("add", "teh", "the")
        invoke("add", "teh", "ten")

        result = invoke("forget", "teh")

        assert result.exit_code == 0
        assert "Removed 2 correction(s)" in result.output
        assert "No corrections stored." in invoke("list").output

    def test_forget_one_replacement(self, invoke):
        """Test forgetting a single replacement."""
        invoke("add", "teh", "the")
        invoke("add", "teh", "ten")

        result = invoke("forget", "teh", "--corrected", "ten")

        assert "Removed 1 correction(s)" in result.output
        assert "Corrections (1)" in invoke("list").output

    def test_forget_missing(self, invoke):
        """Test forgetting an unknown word fails."""
        result = invoke("forget", "nothing")

        assert result.exit_code == 1
        assert "No corrections stored for 'nothing'" in result.output


class TestConfigCommand:
    """Tests for the config command."""

    def test_config(self, invoke):
        """Test the effective settings are shown."""
        result = invoke("config")

        assert result.exit_code == 0
        assert "min_confidence" in result.output
        assert "0.55" in result.output

    def test_invalid_settings(self, invoke, monkeypatch):
        """Test a bad override stops every command."""
        monkeypatch.setenv("TYPO_LEARN_MIN_CONFIDENCE", "lots")

        result = invoke("list")

        assert result.exit_code == 1
        assert "[configuration]" in result.output
