"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with DOTSTORE_ prefix
3. .env file (if DOTSTORE_ENV_FILE points to one, or ./.env exists)
4. Field defaults (lowest)

Nested config uses double underscore delimiter:
  DOTSTORE_CACHE__ENABLED=false
  DOTSTORE_CACHE__SUFFIX=.compiled
"""

from __future__ import annotations

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import dotstore.constants as constants
import dotstore.store as store


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Priority:
    1. DOTSTORE_ENV_FILE if set (explicit override)
    2. .env in the current directory
    3. None (rely on environment variables)
    """
    if env_file := _os.environ.get("DOTSTORE_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
        # Explicitly set but missing: don't fall back silently
        return None

    if _pathlib.Path(".env").exists():
        return ".env"
    return None


class CacheConfig(_pydantic.BaseModel):
    """
    Compiled snapshot cache settings.

    Env section: DOTSTORE_CACHE__*
    """

    enabled: bool = True
    """Use the compiled cache. When off, saving without a logger fails."""

    suffix: str = _pydantic.Field(default=constants.DEFAULT_CACHE_SUFFIX, min_length=1)
    """Appended to the snapshot path to name the cache sidecar."""


class Settings(_pydantic_settings.BaseSettings):
    """
    dotstore configuration settings.

    All settings can be overridden via environment variables with the
    DOTSTORE_ prefix. For nested config, use double underscore:
    DOTSTORE_CACHE__ENABLED=false
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="DOTSTORE_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    delimiter: str = _pydantic.Field(default=constants.DEFAULT_DELIMITER, min_length=1)
    """Path delimiter for stores opened through these settings."""

    autosave: bool = True
    """Save stores on close."""

    readonly: bool = False
    """Initial readonly flag of stores (recorded, not enforced)."""

    log_level: _typing.Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    """Log level used by the command line."""

    cache: CacheConfig = _pydantic.Field(default_factory=CacheConfig)

    @_pydantic.field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: _typing.Any) -> _typing.Any:
        """Accept log levels in any case."""
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> Settings:
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation and for reproducing issues without
        .env interference.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    @property
    def log_level_number(self) -> int:
        """The log level as a ``logging`` constant."""
        level: int = _logging.getLevelName(self.log_level)
        return level

    def build_cache(self) -> store.CompiledSnapshotCache:
        """Create the compiled snapshot cache described by these settings."""
        return store.CompiledSnapshotCache(
            enabled=self.cache.enabled,
            suffix=self.cache.suffix,
        )

    def open_store(
        self,
        path: _pathlib.Path | str,
        name: str | None = None,
        *,
        logger: _logging.Logger | None = None,
    ) -> store.PersistentStore:
        """
        Open a PersistentStore configured from these settings.

        Args:
            path: Snapshot file location.
            name: Store name. Derived from the file name if omitted.
            logger: Optional diagnostics sink.
        """
        return store.PersistentStore(
            path,
            name,
            readonly=self.readonly,
            autosave=self.autosave,
            logger=logger,
            cache=self.build_cache(),
            delimiter=self.delimiter,
        )
