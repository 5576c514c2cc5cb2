"""Environment-driven settings for the Mongo data source."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .updates.queue import DEFAULT_BATCH_SIZE
from .updates.retry import DEFAULT_RETRY_DELAY


def _csv(raw: str) -> list[str]:
    return [s.strip() for s in raw.split(",")]


class SourceSettings(BaseSettings):
    """
    Settings read from the environment (or a ``.env`` file).

    ``source_features`` and ``source_features_types`` are parallel
    comma-separated lists; a missing or unknown type means ``text``.
    """

    # Storage
    mongo_uri: str = "mongodb://localhost:27017/deepint"
    mongo_database: str | None = None
    mongo_collection: str = "instances"

    # Schema (CSV)
    source_features: str = ""
    source_features_types: str = ""

    # Remote consumer
    deepint_url: str = "https://app.deepint.net/api/v1/"
    pub_key: str = ""
    secret_key: str = ""
    log_events: bool = True

    # Update delivery
    update_batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    update_retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)
    delivery_timeout: float | None = Field(default=None, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def feature_names(self) -> list[str]:
        return [name for name, _ in self._feature_pairs()]

    @property
    def feature_types(self) -> list[str]:
        """One entry per feature name; ``""`` where no type was given."""
        return [kind for _, kind in self._feature_pairs()]

    def _feature_pairs(self) -> list[tuple[str, str]]:
        # An empty name drops the type at the same position.
        names = _csv(self.source_features)
        types = _csv(self.source_features_types)
        types += [""] * (len(names) - len(types))
        return [(name, kind) for name, kind in zip(names, types) if name]


@lru_cache
def get_settings() -> SourceSettings:
    return SourceSettings()
