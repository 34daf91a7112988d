"""
core/config.py
──────────────
Centralised forecasting-engine settings via ``pydantic-settings``.

All configuration is driven by environment variables (or a ``.env`` file
in the ``backend/`` directory).  ``pydantic-settings`` validates types and
bounds at startup, so a bad value fails fast with a clear error message.

Usage
-----
    from core.config import get_settings

    settings = get_settings()
    print(settings.SEQUENCE_LENGTH)
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the backend/ directory so relative .env paths work from any cwd.
_BACKEND_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables / ``.env`` file.

    Attributes:
        DEBUG:                    Enable verbose logging.
        LOG_LEVEL:                Root log level used by ``configure_logging``.
        SUPABASE_URL:             Supabase project URL (history store).
        SUPABASE_KEY:             Supabase anon or service-role key.
        HISTORY_LIMIT:            Most-recent observations fetched per request.
        SEQUENCE_LENGTH:          Window length L fed to the sequence model.
        TRAINING_EPOCHS:          Number of ``train`` calls per training run.
        MODEL_TYPE:               Registry key of the sequence model.
        MODEL_TTL_HOURS:          How long a trained model stays valid.
        TRAINING_TIMEOUT_SECONDS: Upper bound on waiting for a training run.
        CONFIDENCE_LEVEL:         Probability mass of the prediction interval.
        INTERVAL_SCALE:           Damping applied to the interval half-width.
        FORECAST_NOISE_SCALE:     Volatility-scaled perturbation on the model
                                  path (0 disables it).
        FALLBACK_NOISE_RANGE:     Width of the uniform perturbation on the
                                  fallback path (0 disables it).
        RANDOM_SEED:              Seed for every request's random generator;
                                  ``None`` means non-reproducible noise.
    """

    model_config = SettingsConfigDict(
        env_file=str(_BACKEND_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        # Unknown env vars are ignored.
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────────────────
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Supabase (only needed by SupabaseHistoryProvider) ─────────────────
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # ── Data window ───────────────────────────────────────────────────────
    HISTORY_LIMIT: int = Field(default=100, ge=1)
    SEQUENCE_LENGTH: int = Field(default=30, ge=2)

    # ── Model lifecycle ───────────────────────────────────────────────────
    MODEL_TYPE: str = "ridge"
    TRAINING_EPOCHS: int = Field(default=200, ge=1)
    MODEL_TTL_HOURS: float = Field(default=24.0, gt=0)
    TRAINING_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0)

    # ── Uncertainty & noise ───────────────────────────────────────────────
    CONFIDENCE_LEVEL: float = Field(default=0.95, gt=0, lt=1)
    INTERVAL_SCALE: float = Field(default=0.5, gt=0)
    FORECAST_NOISE_SCALE: float = Field(default=0.1, ge=0)
    FALLBACK_NOISE_RANGE: float = Field(default=0.02, ge=0)
    RANDOM_SEED: Optional[int] = None

    @field_validator("MODEL_TYPE", "LOG_LEVEL")
    @classmethod
    def _normalise_case(cls, v: str, info) -> str:
        """Model keys are lower-case, log levels upper-case."""
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} must not be empty")
        return v.upper() if info.field_name == "LOG_LEVEL" else v.lower()

    @property
    def effective_log_level(self) -> str:
        """``DEBUG`` wins over ``LOG_LEVEL`` when the debug flag is on."""
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return a cached ``Settings`` singleton.

    The instance is created (and the ``.env`` file parsed) only once per
    process lifetime, courtesy of ``functools.lru_cache``.

    Returns:
        Settings: Validated engine configuration.
    """
    return Settings()
