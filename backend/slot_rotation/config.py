"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - slot_count is an exact multiple of group_size (equal-size pages)
    - batch_limit never exceeds the store's per-transaction ceiling

Design Decisions:
    - Defaults describe the production marketplace: 2000 slots, 10 pages of 200,
      rotation every 2 hours, 500 writes per batch
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slot_rotation.core.batching import STORE_MAX_BATCH_OPS
from slot_rotation.core.rotation_policy import RotationPolicy


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://slots:slots@db:5432/slots"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Slot layout
    slot_count: int = Field(2000, ge=1)
    group_size: int = Field(200, ge=1)

    # Rotation
    rotation_interval_ms: int = Field(2 * 60 * 60 * 1000, gt=0)
    batch_limit: int = Field(STORE_MAX_BATCH_OPS, ge=1, le=STORE_MAX_BATCH_OPS)
    allowed_asset_prefixes: list[str] = ["http://", "https://", "data:"]
    compact_slots: bool = False
    rotation_lease_ttl_seconds: int = Field(600, ge=1)

    # Scheduler (replaces the external cron job when enabled)
    rotation_scheduler_enabled: bool = False
    rotation_scheduler_jitter_seconds: int = Field(15, ge=0)

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @model_validator(mode="after")
    def check_slot_layout(self) -> "Settings":
        if self.slot_count % self.group_size != 0:
            raise ValueError(
                f"slot_count ({self.slot_count}) must be a multiple of "
                f"group_size ({self.group_size})",
            )
        return self

    def rotation_policy(self) -> RotationPolicy:
        """The subset of settings the pure rotation pipeline needs."""
        return RotationPolicy(
            slot_count=self.slot_count,
            group_size=self.group_size,
            batch_limit=self.batch_limit,
            allowed_asset_prefixes=tuple(self.allowed_asset_prefixes),
            compact_slots=self.compact_slots,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
