"""
Unit tests for environment-based configuration.
"""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError
from devops_kb.config import Settings, load_env_files, load_settings


class TestLoadSettings:
    """Test reading settings from environment variables"""

    def test_defaults(self):
        settings = load_settings()

        assert settings.patterns_dir == Path("patterns")
        assert settings.knowledge_dir == Path("knowledge")
        assert settings.extra_sources_dir == Path(".document-sources")
        assert settings.patterns_index == Path("patterns_index.bm25")
        assert settings.knowledge_index == Path("knowledge_index.bm25")
        assert settings.result_limit == 0
        assert settings.strict_load is False
        assert settings.log_level == "INFO"

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KB_PATTERNS_DIR", str(tmp_path / "p"))
        monkeypatch.setenv("KB_KNOWLEDGE_INDEX", str(tmp_path / "k.bm25"))
        monkeypatch.setenv("KB_RESULT_LIMIT", "5")
        monkeypatch.setenv("KB_STRICT_LOAD", "True")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.patterns_dir == tmp_path / "p"
        assert settings.knowledge_index == tmp_path / "k.bm25"
        assert settings.result_limit == 5
        assert settings.strict_load is True
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("false", False), ("0", False), ("", False)])
    def test_bool_parsing(self, monkeypatch, value, expected):
        monkeypatch.setenv("KB_STRICT_LOAD", value)
        assert load_settings().strict_load is expected

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("KB_RESULT_LIMIT", "lots")
        with pytest.raises(ValueError, match="KB_RESULT_LIMIT"):
            load_settings()

    def test_settings_immutable(self):
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.result_limit = 3


class TestEnvFiles:
    """Test .env.local / .env discovery"""

    def test_prefers_env_local(self, tmp_path, monkeypatch):
        # registered with monkeypatch so the value loaded below is undone afterwards
        monkeypatch.setenv("KB_RESULT_LIMIT", "0")
        (tmp_path / ".env.local").write_text("KB_RESULT_LIMIT=7\n")
        (tmp_path / ".env").write_text("KB_RESULT_LIMIT=9\n")

        loaded = load_env_files(tmp_path)

        assert loaded == tmp_path / ".env.local"
        assert os.environ["KB_RESULT_LIMIT"] == "7"
        assert load_settings().result_limit == 7

    def test_falls_back_to_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KB_PATTERNS_DIR", "patterns")
        (tmp_path / ".env").write_text("KB_PATTERNS_DIR=/srv/patterns\n")

        assert load_env_files(tmp_path) == tmp_path / ".env"
        assert load_settings().patterns_dir == Path("/srv/patterns")

    def test_no_env_files(self, tmp_path):
        assert load_env_files(tmp_path) is None
