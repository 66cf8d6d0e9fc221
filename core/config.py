"""
Engine Configuration Module for ApplyMate

Process-wide settings read from the environment (and a .env file).
Per-owner run settings live in core.settings.
Import from this module: from core.config import config
"""

import os
from typing import Optional
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppConfig:
    """Unified engine configuration."""

    # === Browser ===
    HEADLESS: bool = _env_bool("HEADLESS", "true")
    BROWSER_USER_DATA_DIR: Optional[str] = os.getenv("BROWSER_USER_DATA_DIR") or None
    NAVIGATION_TIMEOUT_MS: int = int(os.getenv("NAVIGATION_TIMEOUT_MS", "30000"))
    ACTION_TIMEOUT_MS: int = int(os.getenv("ACTION_TIMEOUT_MS", "10000"))

    # === Job board ===
    JOB_BOARD: str = os.getenv("JOB_BOARD", "seek")

    # === Content generation ===
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    AI_MAX_TOKENS: int = int(os.getenv("AI_MAX_TOKENS", "800"))
    AI_TEMPERATURE: float = float(os.getenv("AI_TEMPERATURE", "0.4"))
    AI_MAX_RETRIES: int = int(os.getenv("AI_MAX_RETRIES", "2"))
    AI_TIMEOUT_SECONDS: int = int(os.getenv("AI_TIMEOUT_SECONDS", "60"))

    # === Apply flow ===
    # Textareas taller than this are treated as essay fields, not short answers
    ESSAY_FIELD_HEIGHT_PX: int = int(os.getenv("ESSAY_FIELD_HEIGHT_PX", "200"))
    MAX_FOLLOWUP_PAGES: int = int(os.getenv("MAX_FOLLOWUP_PAGES", "6"))

    # === Logging ===
    LOG_DIR: str = os.getenv("LOG_DIR", "./logs")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


# Global config instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the engine configuration."""
    return config
