"""Tests for configuration loading and saving."""

import json

import pytest

from typo_learn.config import (
    ALIGNMENT_THRESHOLD,
    CORRECTION_THRESHOLD,
    MAX_LENGTH_DIFF,
    MIN_AUTO_APPLY_CONFIDENCE,
    EngineSettings,
    LoadFailurePolicy,
    get_data_dir,
    get_settings_path,
    load_settings,
    save_settings,
)
from typo_learn.errors import ConfigurationError


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the data directory at a temporary path and clear overrides."""
    home = tmp_path / "home"
    monkeypatch.setenv("TYPO_LEARN_HOME", str(home))
    for name in EngineSettings.model_fields:
        # setenv first so values loaded from .env files are undone too
        monkeypatch.setenv(f"TYPO_LEARN_{name.upper()}", "")
        monkeypatch.delenv(f"TYPO_LEARN_{name.upper()}")
    return home


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self):
        """Test default values match the engine constants."""
        settings = EngineSettings()

        assert settings.alignment_threshold == ALIGNMENT_THRESHOLD
        assert settings.correction_threshold == CORRECTION_THRESHOLD
        assert settings.min_confidence == MIN_AUTO_APPLY_CONFIDENCE
        assert settings.max_length_diff == MAX_LENGTH_DIFF
        assert settings.load_failure == LoadFailurePolicy.FALLBACK_EMPTY

    def test_thresholds_ordered(self):
        """Test alignment is looser than learning."""
        assert ALIGNMENT_THRESHOLD < CORRECTION_THRESHOLD

    def test_out_of_range_rejected(self):
        """Test thresholds outside [0, 1] are invalid."""
        with pytest.raises(Exception):
            EngineSettings(min_confidence=1.5)
        with pytest.raises(Exception):
            EngineSettings(max_length_diff=-1)

    def test_store_path_default(self, data_dir):
        """Test the store lives in the data directory by default."""
        assert EngineSettings().resolved_store_path() == data_dir / "corrections.json"

    def test_store_path_override(self, tmp_path):
        """Test an explicit store path is used as given."""
        settings = EngineSettings(store_path=str(tmp_path / "mine.json"))

        assert settings.resolved_store_path() == tmp_path / "mine.json"


class TestDataDir:
    """Tests for data directory resolution."""

    def test_home_override(self, data_dir):
        """Test TYPO_LEARN_HOME relocates the data directory."""
        assert get_data_dir() == data_dir
        assert get_settings_path() == data_dir / "settings.json"

    def test_default_location(self, monkeypatch, tmp_path):
        """Test the fallback under the user's home directory."""
        monkeypatch.delenv("TYPO_LEARN_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert get_data_dir() == tmp_path / ".typo-learn"


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_file_gives_defaults(self, data_dir):
        """Test loading with no settings file."""
        assert load_settings(use_env=False) == EngineSettings()

    def test_file_values(self, data_dir):
        """Test values from settings.json are applied."""
        path = data_dir / "settings.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"min_confidence": 0.8, "load_failure": "propagate"}))

        settings = load_settings(use_env=False)

        assert settings.min_confidence == 0.8
        assert settings.load_failure == LoadFailurePolicy.PROPAGATE

    def test_env_overrides_file(self, data_dir, monkeypatch):
        """Test TYPO_LEARN_* variables win over the file."""
        path = data_dir / "settings.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"min_confidence": 0.8}))
        monkeypatch.setenv("TYPO_LEARN_MIN_CONFIDENCE", "0.3")

        settings = load_settings()

        assert settings.min_confidence == 0.3

    def test_env_file_in_data_dir(self, data_dir, monkeypatch):
        """Test a .env file in the data directory is read."""
        data_dir.mkdir(parents=True)
        (data_dir / ".env").write_text("TYPO_LEARN_MAX_LENGTH_DIFF=3\n")

        settings = load_settings()

        assert settings.max_length_diff == 3

    def test_invalid_env_value(self, data_dir, monkeypatch):
        """Test a bad override is a configuration error."""
        monkeypatch.setenv("TYPO_LEARN_MIN_CONFIDENCE", "very")

        with pytest.raises(ConfigurationError):
            load_settings()

    def test_invalid_json(self, tmp_path):
        """Test a corrupt settings file is a configuration error."""
        path = tmp_path / "settings.json"
        path.write_text("{oops")

        with pytest.raises(ConfigurationError):
            load_settings(path, use_env=False)

    def test_non_object(self, tmp_path):
        """Test a settings file must hold an object."""
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError):
            load_settings(path, use_env=False)


class TestSaveSettings:
    """Tests for save_settings."""

    def test_round_trip(self, tmp_path):
        """Test saved settings load back unchanged."""
        path = tmp_path / "conf" / "settings.json"
        settings = EngineSettings(min_confidence=0.7, load_failure=LoadFailurePolicy.PROPAGATE)

        saved = save_settings(settings, path)

        assert saved == path
        assert load_settings(path, use_env=False) == settings
        assert not path.with_suffix(".json.tmp").exists()

    def test_default_location(self, data_dir):
        """Test saving to the data directory."""
        save_settings(EngineSettings())

        assert (data_dir / "settings.json").exists()
