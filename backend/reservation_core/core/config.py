from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Any, ClassVar
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'reservations.db'}"

    # CORS origins
    CORS_ORIGINS: list[str] = ["http://localhost:8080", "http://localhost:5173"]

    # Currency label attached to quotes and folio totals
    DEFAULT_CURRENCY: str = "BRL"

    LOG_LEVEL: str = "INFO"

    # What to do when a room is assigned while another active booking holds it
    # over an intersecting stay window: "reject" raises, "warn" only logs.
    ROOM_CONFLICT_POLICY: str = "reject"

    # Tracing knobs, read by core.observability
    ENABLE_CONSOLE_TRACING: bool = False
    OTEL_TRACES_SAMPLER_RATIO: float = 1.0

    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=os.getenv(
            "ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")
        ),
        case_sensitive=True,
    )

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("ROOM_CONFLICT_POLICY", mode="before")
    def normalize_conflict_policy(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("reject", "warn"):
                raise ValueError("ROOM_CONFLICT_POLICY must be 'reject' or 'warn'")
        return v

    @field_validator("DEFAULT_CURRENCY", mode="before")
    def upper_currency(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


def load_settings() -> "Settings":
    return Settings()


settings = load_settings()
