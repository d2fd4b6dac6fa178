# phenoattr/config.py
"""
phenoattr Configuration — Single source of truth via Pydantic Settings.

Resolution order: explicit arguments > env vars (PHENOATTR_*) > .env file > defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PhenoattrConfig(BaseSettings):
    """Central configuration for phenoattr."""

    model_config = SettingsConfigDict(
        env_prefix="PHENOATTR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Codec limits ---
    # Container nesting bound for decode and for every deep traversal.
    max_depth: int = Field(default=64, ge=1, le=100_000)
    # Per list/map element count accepted from a length prefix.
    max_collection_size: int = Field(default=10_000, ge=0)
    # Largest string or structured payload accepted from a length prefix.
    max_payload_bytes: int = Field(default=16 * 1024 * 1024, ge=0)

    # --- Paths ---
    home_dir: Path = Field(default_factory=lambda: Path.home() / ".phenoattr")

    @property
    def log_dir(self) -> Path:
        return self.home_dir / "logs"


class CodecLimits(BaseModel):
    """Immutable snapshot of the limits applied by one codec or traversal."""

    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(default=64, ge=1)
    max_collection_size: int = Field(default=10_000, ge=0)
    max_payload_bytes: int = Field(default=16 * 1024 * 1024, ge=0)

    @classmethod
    def from_config(cls, cfg: PhenoattrConfig | None = None) -> CodecLimits:
        cfg = cfg or get_config()
        return cls(
            max_depth=cfg.max_depth,
            max_collection_size=cfg.max_collection_size,
            max_payload_bytes=cfg.max_payload_bytes,
        )


@lru_cache(maxsize=1)
def get_config() -> PhenoattrConfig:
    """Return the global config singleton."""
    return PhenoattrConfig()


def resolve_max_depth(max_depth: int | None) -> int:
    """Return *max_depth* or the configured default when it is ``None``."""
    if max_depth is None:
        return get_config().max_depth
    if max_depth < 1:
        raise ValueError(f"max_depth must be >= 1, got {max_depth}")
    return max_depth
