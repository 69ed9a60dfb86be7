"""Phase classification models: artifact paths and the runtime flag vocabulary."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

# Suffix appended to the cache path to name the training data file.
CONFIG_SUFFIX = "conf"


class Phase(str, Enum):
    """Which step of the record/create workflow the current process is in."""

    CACHE_READY = "cache_ready"  # artifact exists, nothing to do
    RECORDING = "recording"  # training run, build artifact at exit
    NEEDS_TRAINING = "needs_training"  # relaunch in record mode
    INERT = "inert"  # no relevant flags, pass-through restart disabled


class CacheArtifact(BaseModel):
    """The cache file and its companion training data file.

    Only the presence of ``cache_path`` matters; its contents are owned by
    the runtime and never inspected here.
    """

    model_config = ConfigDict(frozen=True)

    cache_path: Path

    @property
    def config_path(self) -> Path:
        """Training data path, derived by suffixing the cache path."""
        return self.cache_path.with_name(self.cache_path.name + CONFIG_SUFFIX)

    def exists(self) -> bool:
        return self.cache_path.exists()


class Runtime(str, Enum):
    """Host runtimes with a built-in flag vocabulary."""

    PYTHON = "python"
    HOTSPOT = "hotspot"


class FlagVocabulary(BaseModel):
    """Runtime flags understood by the host's ahead-of-time cache support.

    Field defaults follow the HotSpot AOT cache options; ``for_runtime``
    returns the preset matching a host runtime.
    """

    model_config = ConfigDict(frozen=True)

    reserved_prefix: str = "-XX:AOT"
    record_flag: str = "-XX:AOTMode=record"
    create_flag: str = "-XX:AOTMode=create"
    configuration_option: str = "-XX:AOTConfiguration="
    cache_option: str = "-XX:AOTCache="
    classpath_option: str = "-cp"
    classpath_aliases: tuple[str, ...] = ("-classpath", "--class-path")
    classpath_separator: str = os.pathsep
    # Module path carried through the environment when there is no option.
    classpath_env: str = ""
    # Options after which everything belongs to the application.
    main_options: tuple[str, ...] = ("-jar", "-m", "--module")
    # Options whose value follows as a separate argument.
    options_with_value: tuple[str, ...] = (
        "-p",
        "--module-path",
        "--upgrade-module-path",
        "--add-modules",
        "--limit-modules",
        "--add-reads",
        "--add-exports",
        "--add-opens",
        "--patch-module",
        "--enable-native-access",
    )
    # False when create mode must run an external builder program.
    runtime_builds_cache: bool = True
    builder: tuple[str, ...] = ()

    @classmethod
    def for_runtime(cls, runtime: Runtime | str) -> FlagVocabulary:
        if Runtime(runtime) == Runtime.PYTHON:
            return cls(
                reserved_prefix="-Xaot_",
                record_flag="-Xaot_mode=record",
                create_flag="-Xaot_mode=create",
                configuration_option="-Xaot_configuration=",
                cache_option="-Xaot_cache=",
                classpath_option="",
                classpath_aliases=(),
                classpath_env="PYTHONPATH",
                main_options=("-m", "-c", "-"),
                options_with_value=("-X", "-W", "--check-hash-based-pycs"),
                runtime_builds_cache=False,
            )
        return cls()

    def is_classpath_option(self, token: str) -> bool:
        return bool(self.classpath_option) and (
            token == self.classpath_option or token in self.classpath_aliases
        )

    def configuration_flag(self, artifact: CacheArtifact) -> str:
        return f"{self.configuration_option}{artifact.config_path}"

    def cache_flag(self, artifact: CacheArtifact) -> str:
        """The flag a run consuming *artifact* is launched with."""
        return f"{self.cache_option}{artifact.cache_path}"
