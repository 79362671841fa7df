"""Tests for Lending Desk configuration.

1. Default values
2. Environment variable loading
3. Field validation
4. Singleton access
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lending_desk.config import AppConfig, get_config, reset_config


class TestAppConfig:
    """Test configuration behavior."""

    def test_default_configuration(self, clean_env, tmp_path, monkeypatch):
        """Defaults describe a seeded stdio server and a local notes service."""
        monkeypatch.chdir(tmp_path)
        config = AppConfig(_env_file=None)

        assert config.server_name == "lending-desk"
        assert config.server_version == "0.1.0"
        assert config.transport == "stdio"
        assert config.seed_sample_data is True
        assert config.notes_port == 3000
        assert config.notes_data_file == (tmp_path / "data" / "notes.json").absolute()
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_environment_variable_loading(self, clean_env, tmp_path):
        env_vars = {
            "LENDING_DESK_SERVER_NAME": "branch-desk",
            "LENDING_DESK_SERVER_VERSION": "2.0.0",
            "LENDING_DESK_NOTES_DATA_FILE": str(tmp_path / "notes.json"),
            "LENDING_DESK_NOTES_PORT": "4000",
            "LENDING_DESK_SEED_SAMPLE_DATA": "false",
            "LENDING_DESK_DEBUG": "true",
        }

        with patch.dict(os.environ, env_vars):
            config = AppConfig(_env_file=None)

        assert config.server_name == "branch-desk"
        assert config.server_version == "2.0.0"
        assert config.notes_data_file == tmp_path / "notes.json"
        assert config.notes_port == 4000
        assert config.seed_sample_data is False
        assert config.debug is True

    def test_notes_directory_is_created(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "notes.json"

        config = AppConfig(notes_data_file=target)

        assert config.notes_data_file == target
        assert target.parent.is_dir()
        assert not target.exists()

    def test_relative_notes_path_becomes_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = AppConfig(notes_data_file=Path("store/notes.json"))

        assert config.notes_data_file.is_absolute()
        assert config.notes_data_file == tmp_path / "store" / "notes.json"

    @pytest.mark.parametrize("name", ["Lending_Desk", "lending desk", "ld"])
    def test_invalid_server_names(self, name, tmp_path):
        with pytest.raises(ValidationError):
            AppConfig(server_name=name, notes_data_file=tmp_path / "n.json")

    @pytest.mark.parametrize("version", ["1.0", "v1.0.0", "1.0.0.0"])
    def test_invalid_versions(self, version, tmp_path):
        with pytest.raises(ValidationError):
            AppConfig(server_version=version, notes_data_file=tmp_path / "n.json")

    def test_transport_must_be_known(self, tmp_path):
        with pytest.raises(ValidationError):
            AppConfig(transport="websocket", notes_data_file=tmp_path / "n.json")

        config = AppConfig(transport="streamable-http", notes_data_file=tmp_path / "n.json")
        assert config.server_info["transport"] == "streamable-http"

    def test_port_range(self, tmp_path):
        with pytest.raises(ValidationError):
            AppConfig(notes_port=80, notes_data_file=tmp_path / "n.json")

    def test_is_development(self, tmp_path):
        path = tmp_path / "n.json"
        assert AppConfig(notes_data_file=path).is_development is False
        assert AppConfig(notes_data_file=path, debug=True).is_development is True
        assert AppConfig(notes_data_file=path, log_level="DEBUG").is_development is True


class TestConfigSingleton:
    def test_get_config_is_cached(self, clean_env, tmp_path):
        reset_config()
        with patch.dict(os.environ, {"LENDING_DESK_NOTES_DATA_FILE": str(tmp_path / "n.json")}):
            first = get_config()
            second = get_config()
        assert first is second
        reset_config()

    def test_reset_config_drops_instance(self, clean_env, tmp_path):
        reset_config()
        with patch.dict(os.environ, {"LENDING_DESK_NOTES_DATA_FILE": str(tmp_path / "n.json")}):
            first = get_config()
            reset_config()
            second = get_config()
        assert first is not second
        reset_config()
