# backend/tandemboard/config.py

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/tandemboard.db"
    redis_url: str = "redis://localhost:6379/0"

    # Realtime invalidation consumer (pub/sub on the "changes" channel)
    realtime_enabled: bool = True

    # Cached per-date query results
    snapshot_ttl_seconds: int = 3600

    # Daily grid policy
    grid_column_order: Literal["first_seen", "display_name"] = "first_seen"
    grid_max_booking_width: Optional[int] = None
    grid_fixed_columns: Optional[int] = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite paths are resolved against the repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
