"""Runtime configuration: env-driven via pydantic-settings.

Reads from a .env file and AOTCACHE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from aotcache.models.phases import FlagVocabulary, Runtime

DEFAULT_CACHE_FILE_NAME = ".aot"


class AotSettings(BaseSettings):
    """Controller configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export AOTCACHE_CACHE_FILE_NAME=build/app.aot
        export AOTCACHE_RESTART_WITHOUT_CONSUME_FLAG=true
        export AOTCACHE_LOG_LEVEL=DEBUG
        export AOTCACHE_RUNTIME=hotspot
        export AOTCACHE_BUILDER='["-m", "mybuilder"]'

    Or via .env file::

        AOTCACHE_CLASSPATH_SEPARATOR=;
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="AOTCACHE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cache_file_name: Path = Path(DEFAULT_CACHE_FILE_NAME)
    log_level: str = "INFO"

    # Relaunch even when the process was not started with the cache flag.
    restart_without_consume_flag: bool = False

    # Flag vocabulary preset; python matches InvocationDescriptor.current().
    runtime: Runtime = Runtime.PYTHON

    # Per-token overrides of the preset (None keeps the preset value)
    reserved_prefix: str | None = None
    record_flag: str | None = None
    create_flag: str | None = None
    configuration_option: str | None = None
    cache_option: str | None = None
    classpath_option: str | None = None
    classpath_separator: str | None = None
    classpath_env: str | None = None
    builder: tuple[str, ...] | None = None

    @property
    def vocabulary(self) -> FlagVocabulary:
        """The runtime preset with any configured token overrides applied."""
        overrides: dict[str, Any] = {
            name: getattr(self, name)
            for name in _VOCABULARY_OVERRIDES
            if getattr(self, name) is not None
        }
        return FlagVocabulary.for_runtime(self.runtime).model_copy(update=overrides)


_VOCABULARY_OVERRIDES = (
    "reserved_prefix",
    "record_flag",
    "create_flag",
    "configuration_option",
    "cache_option",
    "classpath_option",
    "classpath_separator",
    "classpath_env",
    "builder",
)

# Module-level singleton: import as `from aotcache.config import settings`
settings = AotSettings()
