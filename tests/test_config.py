"""Tests for gitwapp.lib.config and gitwapp.lib.envparse."""

import pytest
from pathlib import Path
from unittest.mock import patch

from gitwapp.lib.config import (
    AppConfig,
    default_config_dir,
    load_app_config,
)
from gitwapp.lib.envparse import parse_env


class TestLoadAppConfig:
    """Test load_app_config defaults and validation."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_app_config(tmp_path)
        assert config == AppConfig(config_dir=tmp_path)
        assert config.remote_name == "origin"
        assert config.traversal_limit == 10000
        assert config.registry_path == tmp_path / "repositories.json"
        assert config.locks_dir == tmp_path / "locks"

    def test_reads_env_file(self, tmp_path):
        (tmp_path / "gitwapp.env").write_text(
            "# gitwapp settings\n"
            "REMOTE_NAME=upstream\n"
            "NETWORK_TIMEOUT=120\n"
            "TRAVERSAL_LIMIT=500\n"
            "POLL_INTERVAL=2\n"
            "LOG_LEVEL=debug\n"
            f"LOG_FILE={tmp_path / 'gitwapp.log'}\n"
        )
        config = load_app_config(tmp_path)
        assert config.remote_name == "upstream"
        assert config.network_timeout == 120
        assert config.traversal_limit == 500
        assert config.poll_interval == 2
        assert config.log_level == "DEBUG"
        assert config.log_file == tmp_path / "gitwapp.log"

    @patch("gitwapp.lib.config.envparse.load_env")
    def test_invalid_integer_falls_back_with_warning(self, mock_load_env, caplog):
        mock_load_env.return_value = {"TRAVERSAL_LIMIT": "lots"}
        config = load_app_config(Path("/fake/config"))
        assert config.traversal_limit == 10000
        assert "Invalid TRAVERSAL_LIMIT 'lots'" in caplog.text

    @patch("gitwapp.lib.config.envparse.load_env")
    def test_non_positive_integer_falls_back(self, mock_load_env, caplog):
        mock_load_env.return_value = {"POLL_INTERVAL": "0"}
        config = load_app_config(Path("/fake/config"))
        assert config.poll_interval == 5
        assert "POLL_INTERVAL must be positive" in caplog.text

    @patch("gitwapp.lib.config.envparse.load_env")
    def test_unknown_log_level_falls_back(self, mock_load_env, caplog):
        mock_load_env.return_value = {"LOG_LEVEL": "chatty"}
        config = load_app_config(Path("/fake/config"))
        assert config.log_level == "INFO"
        assert "Unknown LOG_LEVEL 'CHATTY'" in caplog.text

    def test_unsafe_value_rejected(self, tmp_path):
        (tmp_path / "gitwapp.env").write_text("REMOTE_NAME=$(rm -rf /)\n")
        with pytest.raises(ValueError):
            load_app_config(tmp_path)


class TestDefaultConfigDir:
    """Test config directory resolution order."""

    def test_override_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GITWAPP_CONFIG_DIR", str(tmp_path / "custom"))
        assert default_config_dir() == tmp_path / "custom"

    def test_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert default_config_dir() == tmp_path / "xdg" / "gitwapp"

    def test_home_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_CONFIG_HOME")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_config_dir() == tmp_path / ".config" / "gitwapp"


class TestParseEnv:
    """Test the safe KEY=value parser."""

    def test_quotes_comments_and_export(self):
        env = parse_env('# comment\n\nexport A="one"\nB=\'two\'\nC=three\n')
        assert env == {"A": "one", "B": "two", "C": "three"}

    def test_value_may_contain_equals(self):
        assert parse_env("A=b=c") == {"A": "b=c"}

    @pytest.mark.parametrize("line", [
        "A=`whoami`",
        "A=${HOME}",
        "A=x; rm -rf /",
        "A=x | cat",
        "A=x && y",
    ])
    def test_forbidden_patterns(self, line):
        with pytest.raises(ValueError, match="Forbidden pattern"):
            parse_env(line)

    def test_missing_equals(self):
        with pytest.raises(ValueError, match="Line 2"):
            parse_env("A=1\nnonsense\n")

    def test_lowercase_key_rejected(self):
        with pytest.raises(ValueError, match="Invalid key"):
            parse_env("remote_name=origin")
