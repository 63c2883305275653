"""
Configuration management for the sentiment service
"""

import os
from typing import Any, List, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

ANALYZER_BACKENDS = ("rules", "openai")


@dataclass
class Config:
    # Environment
    APP_ENV: str
    PORT: int

    # Analyzer selection
    ANALYZER_BACKEND: str

    # Hosted language model
    OPENAI_API_KEY: str
    OPENAI_MODEL: str
    LLM_MAX_RETRIES: int
    LLM_BACKOFF_SECONDS: float
    LLM_MAX_BACKOFF_SECONDS: float
    LLM_TIMEOUT_SECONDS: float

    # History
    HISTORY_LIMIT: int

    # Auth
    JWT_SECRET: str
    JWT_ISSUER: Optional[str]
    JWT_AUDIENCE: Optional[str]

    # Network
    ALLOWED_ORIGINS: List[str]

    # Request observability
    REQUEST_ID_HEADER: str

    @property
    def active_backend(self) -> str:
        """Backend actually used; ``openai`` without a key degrades to ``rules``."""
        if self.ANALYZER_BACKEND == "openai" and self.OPENAI_API_KEY:
            return "openai"
        return "rules"


_CONFIG_INSTANCE: Optional[Config] = None


def _env_int(var: str, default: int) -> int:
    try:
        return int(os.getenv(var, default))
    except ValueError:
        return default


def _env_float(var: str, default: float) -> float:
    try:
        return float(os.getenv(var, default))
    except ValueError:
        return default


def _parse_backend(raw: str) -> str:
    backend = raw.strip().lower()
    return backend if backend in ANALYZER_BACKENDS else "rules"


def _build_config() -> Config:
    """Create a new ``Config`` instance from environment variables."""

    return Config(
        # Environment
        APP_ENV=os.getenv("APP_ENV", "prod"),
        PORT=_env_int("PORT", 8000),

        # Analyzer selection
        ANALYZER_BACKEND=_parse_backend(os.getenv("ANALYZER_BACKEND", "rules")),

        # Hosted language model
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY", ""),
        OPENAI_MODEL=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
        LLM_MAX_RETRIES=max(1, _env_int("LLM_MAX_RETRIES", 3)),
        LLM_BACKOFF_SECONDS=_env_float("LLM_BACKOFF_SECONDS", 1.0),
        LLM_MAX_BACKOFF_SECONDS=_env_float("LLM_MAX_BACKOFF_SECONDS", 30.0),
        LLM_TIMEOUT_SECONDS=_env_float("LLM_TIMEOUT_SECONDS", 30.0),

        # History
        HISTORY_LIMIT=_env_int("HISTORY_LIMIT", 10),

        # Auth
        JWT_SECRET=os.getenv("JWT_SECRET", "change-me-please"),
        JWT_ISSUER=os.getenv("JWT_ISSUER", None),
        JWT_AUDIENCE=os.getenv("JWT_AUDIENCE", None),

        # Network
        ALLOWED_ORIGINS=[origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()],

        # Request observability
        REQUEST_ID_HEADER=os.getenv("REQUEST_ID_HEADER", "X-Request-ID"),
    )


def get_config() -> Config:
    """Return the shared configuration object."""

    global _CONFIG_INSTANCE
    if _CONFIG_INSTANCE is None:
        _CONFIG_INSTANCE = _build_config()
    return _CONFIG_INSTANCE


def update_config(**updates: Any) -> Config:
    """Mutate the shared config in place."""

    cfg = get_config()
    for key, value in updates.items():
        if not hasattr(cfg, key):
            raise AttributeError(f"Config has no attribute '{key}'")
        setattr(cfg, key, value)
    return cfg


def reset_config() -> Config:
    """Reload configuration from the environment."""

    global _CONFIG_INSTANCE
    _CONFIG_INSTANCE = _build_config()
    return _CONFIG_INSTANCE
