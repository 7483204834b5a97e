# Config
"""
Configuration for the question paper solver.

Values come from the environment (a local .env file is honoured) and are
read once per process. The Gemini credential lives here and is handed to
the language model adapter explicitly.
"""

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from paper_solver.utils.errors import ConfigurationError

load_dotenv()

DEFAULT_MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10MB


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {name} must be an integer, got {raw!r}",
            {"name": name, "value": raw},
        )


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {name} must be a number, got {raw!r}",
            {"name": name, "value": raw},
        )


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Process-wide settings. Keyword arguments override the environment."""

    def __init__(self, **overrides: Any) -> None:
        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_file: Optional[Path] = (
            Path(os.environ["LOG_FILE"]) if os.getenv("LOG_FILE") else None
        )
        self.dev_mode = _env_bool("DEV_MODE")

        # Gemini
        self.gemini_api_key = (
            os.getenv("GEMINI_API_KEY") or os.getenv("GEMINI_API_KEY_ENV_VAR") or ""
        )
        self.gemini_model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

        # Uploads and extraction
        self.max_upload_size_bytes = _env_int(
            "MAX_UPLOAD_SIZE_BYTES", DEFAULT_MAX_UPLOAD_SIZE_BYTES
        )
        self.ocr_language = os.getenv("OCR_LANGUAGE", "eng")

        # Stage timeouts, disabled unless set
        self.extraction_timeout_seconds = _env_float("EXTRACTION_TIMEOUT_SECONDS")
        self.generation_timeout_seconds = _env_float("GENERATION_TIMEOUT_SECONDS")

        # HTTP server
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = _env_int("PORT", 5000)

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise ConfigurationError(f"Unknown setting '{key}'", {"name": key})
            setattr(self, key, value)

        if self.max_upload_size_bytes <= 0:
            raise ConfigurationError(
                "max_upload_size_bytes must be positive",
                {"max_upload_size_bytes": self.max_upload_size_bytes},
            )

    @property
    def max_upload_size_mb(self) -> float:
        return self.max_upload_size_bytes / 1024 / 1024

    def get_log_file_path(self) -> Optional[Path]:
        return self.log_file


# Singleton instance
_settings = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
