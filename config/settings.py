"""Environment-driven rule configuration.

Values come from the process environment, with the nearest ``.env`` file
loaded first (existing variables win). Anything unset falls back to
``config.defaults``.
"""

import os
from typing import Optional

from dotenv import load_dotenv

from config.defaults import (
    ALLOCATION_STRATEGY, OPENAI_MODEL, LLM_TIMEOUT_SECONDS, LLM_MAX_RETRIES,
    LLM_FALLBACK_TO_DETERMINISTIC, LLM_TEMPERATURE, LOG_LEVEL, API_HOST, API_PORT,
)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def load_rule_config(env_file: Optional[str] = None) -> dict:
    """Build the rule config dict shared by the API, strategies and dashboard."""
    load_dotenv(env_file, override=False)

    timeout = _env_float("LLM_TIMEOUT_SECONDS", LLM_TIMEOUT_SECONDS)
    if timeout <= 0:
        raise ValueError("LLM_TIMEOUT_SECONDS must be positive.")
    retries = _env_int("LLM_MAX_RETRIES", LLM_MAX_RETRIES)
    if retries < 0:
        raise ValueError("LLM_MAX_RETRIES cannot be negative.")

    return {
        "allocation_strategy": os.getenv("ALLOCATION_STRATEGY", ALLOCATION_STRATEGY).strip().lower(),
        "openai_api_key": os.getenv("OPENAI_API_KEY"),
        "openai_model": os.getenv("OPENAI_MODEL", OPENAI_MODEL),
        "llm_timeout_seconds": timeout,
        "llm_max_retries": retries,
        "llm_temperature": _env_float("LLM_TEMPERATURE", LLM_TEMPERATURE),
        "llm_fallback_to_deterministic": _env_bool(
            "LLM_FALLBACK_TO_DETERMINISTIC", LLM_FALLBACK_TO_DETERMINISTIC
        ),
        "log_level": os.getenv("LOG_LEVEL", LOG_LEVEL).upper(),
        "api_host": os.getenv("API_HOST", API_HOST),
        "api_port": _env_int("API_PORT", API_PORT),
    }
