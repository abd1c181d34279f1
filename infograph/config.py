"""Configuration management for infograph."""

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel


class StorageConfig(BaseModel):
    backend: Literal["json", "memory"] = "json"
    notebooks_dir: str = ""


class FetchConfig(BaseModel):
    timeout_seconds: float = 15.0
    user_agent: str = "infograph/0.1"
    # e.g. "https://transcripts.example.com/v1/{video_id}.txt"; empty means placeholder transcripts
    transcript_url_template: str = ""
    # fetch real pages over HTTP; False uses placeholder content
    fetch_pages: bool = True


class RenderConfig(BaseModel):
    font_path: str = ""
    bold_font_path: str = ""


class InfographConfig(BaseModel):
    storage: StorageConfig = StorageConfig()
    fetch: FetchConfig = FetchConfig()
    render: RenderConfig = RenderConfig()


def _config_dir() -> Path:
    env = os.getenv("INFOGRAPH_HOME")
    return Path(env) if env else Path.home() / ".infograph"


def _config_path() -> Path:
    return _config_dir() / "config.json"


def notebooks_dir(config: InfographConfig | None = None) -> Path:
    """Return the notebooks directory, honouring a configured override."""
    if config is not None and config.storage.notebooks_dir:
        return Path(config.storage.notebooks_dir).expanduser()
    return _config_dir() / "notebooks"


def ensure_dirs() -> None:
    """Create required infograph directories."""
    _config_dir().mkdir(parents=True, exist_ok=True)


def load_config() -> InfographConfig:
    """Load config from ~/.infograph/config.json, returning defaults if missing."""
    path = _config_path()
    if not path.exists():
        return InfographConfig()
    text = path.read_text()
    return InfographConfig.model_validate_json(text)


def save_config(config: InfographConfig) -> None:
    """Save config to ~/.infograph/config.json."""
    ensure_dirs()
    path = _config_path()
    path.write_text(json.dumps(config.model_dump(), indent=2) + "\n")
