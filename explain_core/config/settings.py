"""Configuration management.

Settings come from init kwargs, environment variables, .env and config.yaml,
in that order of priority.
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from explain_core.domain.exceptions import ConfigurationError


def _load_config_from_yaml() -> Dict[str, Any]:
    """Load settings from config.yaml when one exists."""
    candidates = []
    explicit = os.getenv("EXPLAIN_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """Application settings."""

    # ---- Chat completion endpoint ----
    api_endpoint: Optional[str] = Field(
        default=None,
        description="Chat-completion endpoint URL, e.g. https://host/v1/chat/completions",
    )
    chat_model: str = Field(default="gpt-3.5-turbo", description="Model id sent with every request")
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP timeout in seconds")
    prompt_locale: str = Field(default="en", description="System prompt locale directory")

    # ---- Conversation behaviour ----
    surface_failures: bool = Field(
        default=True,
        description="Show a generic failure message instead of keeping the previous result",
    )
    record_assistant_replies: bool = Field(
        default=False,
        description="Append successful replies to the conversation history",
    )

    # ---- Logging ----
    log_dir: str = Field(default="logs", description="Log directory")
    log_redact_content: bool = Field(default=False, description="Truncate logged messages")

    # ---- Producers ----
    ocr_language: str = Field(default="eng", description="Tesseract language code")
    tesseract_cmd: Optional[str] = Field(default=None, description="Path to the tesseract binary")
    whisper_model: str = Field(default="small.en", description="faster-whisper model name")
    whisper_device: str = Field(default="cpu")
    whisper_compute_type: str = Field(default="int8")
    speech_language: str = Field(default="en", description="Transcription language")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("api_endpoint")
    @classmethod
    def validate_endpoint(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"Invalid endpoint URL: {v!r}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


def require_endpoint(cfg: Any) -> str:
    """Return the configured endpoint or fail.

    A missing endpoint is a startup error: nothing in the app works without it.
    """

    endpoint = getattr(cfg, "api_endpoint", None)
    if not endpoint:
        raise ConfigurationError(code="CONFIG_ERROR", message="API_ENDPOINT not set")
    parsed = urlparse(endpoint)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ConfigurationError(code="CONFIG_ERROR", message=f"Invalid endpoint URL: {endpoint!r}")
    return endpoint


settings = Settings()
