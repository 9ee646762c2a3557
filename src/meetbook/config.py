"""Configuration loading from environment variables and meetbook.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_HOME_DIR = Path.home() / ".meetbook"
_DEFAULT_DATA_DIR = _HOME_DIR / "data"
_CONFIG_FILENAME = "meetbook.toml"


def _default_engine() -> str:
    return "anthropic_api" if os.getenv("ANTHROPIC_API_KEY") else "template"


@dataclass
class EngineConfig:
    """Configuration for the invitation drafting engine."""

    name: str = "template"
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 1024
    timeout: int = 60


@dataclass
class BackupConfig:
    """Where the web host puts downloaded backups."""

    downloads_dir: Path = Path.home() / "Downloads"


@dataclass
class MeetbookConfig:
    """Top-level meetbook configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)
    data_dir: Path = _DEFAULT_DATA_DIR
    host: str = "web"
    base_url: str = "http://localhost:8080"
    timezone: str = "America/New_York"
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> MeetbookConfig:
    """Load configuration from environment variables and optional meetbook.toml.

    Priority: environment variables > meetbook.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.meetbook/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _HOME_DIR / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    engine_data = file_data.get("engine", {})
    backup_data = file_data.get("backup", {})
    defaults = BackupConfig()

    return MeetbookConfig(
        engine=EngineConfig(
            name=os.getenv("MEETBOOK_ENGINE", engine_data.get("name", _default_engine())),
            model=os.getenv("MEETBOOK_MODEL", engine_data.get("model", EngineConfig.model)),
            max_tokens=int(engine_data.get("max_tokens", 1024)),
            timeout=int(os.getenv("MEETBOOK_TIMEOUT", engine_data.get("timeout", 60))),
        ),
        backup=BackupConfig(
            downloads_dir=Path(
                os.getenv(
                    "MEETBOOK_DOWNLOADS_DIR",
                    backup_data.get("downloads_dir", str(defaults.downloads_dir)),
                )
            ).expanduser(),
        ),
        data_dir=Path(
            os.getenv("MEETBOOK_DATA_DIR", file_data.get("data_dir", str(_DEFAULT_DATA_DIR)))
        ).expanduser(),
        host=os.getenv("MEETBOOK_HOST", file_data.get("host", "web")).lower(),
        base_url=os.getenv("MEETBOOK_BASE_URL", file_data.get("base_url", "http://localhost:8080")),
        timezone=os.getenv("MEETBOOK_TIMEZONE", file_data.get("timezone", "America/New_York")),
        log_level=os.getenv("MEETBOOK_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
