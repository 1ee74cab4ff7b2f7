"""
Runtime settings for the HTTP service and CLI.

The normalization rules themselves are fixed in rules.py; only the outer
surfaces are configurable, from environment variables or a .env file:

    UTF8N_LOG_LEVEL         (default "INFO")
    UTF8N_MAX_UPLOAD_BYTES  (default 10 MiB)
    UTF8N_SUGGEST           (default "true") attach a charset-normalizer
                            guess to strict failures
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class AppConfig:
    log_level: str = "INFO"
    max_upload_bytes: int = 10 * 1024 * 1024
    suggest: bool = True


_config_instance: Optional[AppConfig] = None


def load_config() -> AppConfig:
    """Build a fresh AppConfig from the environment."""
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    return AppConfig(
        log_level=os.getenv("UTF8N_LOG_LEVEL", "INFO").upper(),
        max_upload_bytes=int(os.getenv("UTF8N_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
        suggest=os.getenv("UTF8N_SUGGEST", "true").strip().lower() in _TRUE_VALUES,
    )


def get_config() -> AppConfig:
    """Return the process-wide AppConfig, loading it on first use."""
    global _config_instance

    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance
