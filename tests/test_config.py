"""Tests for configuration loading."""

import pytest
from pathlib import Path

from meetbook.config import load_config

_ENV_KEYS = [
    "MEETBOOK_ENGINE",
    "MEETBOOK_MODEL",
    "MEETBOOK_TIMEOUT",
    "MEETBOOK_HOST",
    "MEETBOOK_BASE_URL",
    "MEETBOOK_DATA_DIR",
    "MEETBOOK_DOWNLOADS_DIR",
    "MEETBOOK_TIMEZONE",
    "MEETBOOK_LOG_LEVEL",
    "ANTHROPIC_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self):
        config = load_config()
        assert config.engine.name == "template"
        assert config.engine.timeout == 60
        assert config.host == "web"
        assert config.data_dir.name == "data"
        assert config.log_level == "INFO"

    def test_api_key_selects_anthropic(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        config = load_config()
        assert config.engine.name == "anthropic_api"

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("MEETBOOK_ENGINE", "anthropic_api")
        monkeypatch.setenv("MEETBOOK_TIMEOUT", "15")
        monkeypatch.setenv("MEETBOOK_HOST", "Desktop")
        monkeypatch.setenv("MEETBOOK_DATA_DIR", str(tmp_path / "store"))

        config = load_config()
        assert config.engine.name == "anthropic_api"
        assert config.engine.timeout == 15
        assert config.host == "desktop"
        assert config.data_dir == tmp_path / "store"

    def test_toml_file(self, tmp_path: Path):
        toml_path = tmp_path / "meetbook.toml"
        toml_path.write_text("""
host = "desktop"
base_url = "https://meet.example.com"
timezone = "Europe/Paris"

[engine]
name = "anthropic_api"
model = "claude-haiku"
max_tokens = 256

[backup]
downloads_dir = "/tmp/backups"
""")
        config = load_config(toml_path)
        assert config.host == "desktop"
        assert config.base_url == "https://meet.example.com"
        assert config.timezone == "Europe/Paris"
        assert config.engine.name == "anthropic_api"
        assert config.engine.model == "claude-haiku"
        assert config.engine.max_tokens == 256
        assert config.backup.downloads_dir == Path("/tmp/backups")

    def test_toml_discovered_in_cwd(self, tmp_path: Path):
        (tmp_path / "meetbook.toml").write_text('log_level = "DEBUG"\n')
        config = load_config()
        assert config.log_level == "DEBUG"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("MEETBOOK_ENGINE", "template")

        toml_path = tmp_path / "meetbook.toml"
        toml_path.write_text("""
[engine]
name = "anthropic_api"
""")
        config = load_config(toml_path)
        assert config.engine.name == "template"  # env wins
