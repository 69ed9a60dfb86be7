"""Relaunch controller: the record/create cache state machine.

Call ``enable()`` as early as possible in process startup.  Depending on
the phase the process is in, it:

- returns immediately when the cache already exists,
- registers an exit hook that builds the cache when this is a recording run,
- relaunches the process in record mode and exits otherwise.

Phases are classified in a fixed order; the first match wins:

1. cache file exists              -> CACHE_READY
2. record flag present            -> RECORDING
3. launched with the cache flag   -> NEEDS_TRAINING
4. anything else                  -> NEEDS_TRAINING if pass-through restart
                                     is enabled, INERT otherwise
"""

from __future__ import annotations

import atexit
import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from aotcache.config import AotSettings
from aotcache.config import settings as default_settings
from aotcache.core.commands import (
    classpath_env,
    create_command,
    filter_classpath,
    restart_command,
)
from aotcache.core.spawner import (
    AotCacheError,
    SpawnError,
    Spawner,
    SpawnResult,
    SubprocessSpawner,
)
from aotcache.models.invocation import InvocationDescriptor
from aotcache.models.phases import CacheArtifact, Phase

logger = logging.getLogger(__name__)


class RelaunchError(AotCacheError):
    """Raised when the record-mode relaunch could not be started."""


class ArtifactBuildError(AotCacheError):
    """Raised by the exit hook when the cache could not be built."""


class Relaunch:
    """Two-step relaunch action: ``attempt`` the spawn, then ``finalize``.

    ``run()`` always calls ``finalize()``, so the current process is
    terminated with status 0 whether or not the child was started.

    Parameters
    ----------
    command:
        Argument vector of the replacement process.
    artifact:
        The cache whose parent directory must exist before spawning.
    spawner:
        Backend used to start the child.
    terminate:
        Called with the exit status to end the current process.
    env:
        Environment overrides for the replacement process.
    """

    EXIT_STATUS = 0

    def __init__(
        self,
        command: Sequence[str],
        artifact: CacheArtifact,
        spawner: Spawner,
        terminate: Callable[[int], Any],
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.command = list(command)
        self.env = dict(env or {})
        self.artifact = artifact
        self._spawner = spawner
        self._terminate = terminate

    def attempt(self) -> SpawnResult:
        """Create the cache directory and start the replacement process."""
        parent = self.artifact.cache_path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.critical("Cannot create cache directory %s: %s", parent, e)
            raise RelaunchError(f"Cannot create cache directory {parent}: {e}") from e

        try:
            result = self._spawner.spawn(self.command, blocking=False, env=self.env)
        except SpawnError as e:
            logger.critical("Relaunch in record mode failed, this run is lost: %s", e)
            raise RelaunchError(str(e)) from e

        logger.info("Relaunched in record mode (pid %s)", result.pid)
        return result

    def finalize(self) -> None:
        self._terminate(self.EXIT_STATUS)

    def run(self) -> SpawnResult:
        try:
            return self.attempt()
        finally:
            self.finalize()


class RelaunchController:
    """Decides what the current process must do to obtain its cache.

    Parameters
    ----------
    cache_file_name:
        Path of the cache file.  Defaults to ``settings.cache_file_name``.
    descriptor:
        How the process was launched.  Captured from the running
        interpreter when omitted.
    spawner:
        Child process backend.  Defaults to ``SubprocessSpawner``.
    settings:
        Flag vocabulary and restart policy.
    terminate:
        Ends the current process; defaults to ``sys.exit``.
    register_exit_hook:
        Registers a callable to run at orderly shutdown; defaults to
        ``atexit.register``.
    """

    def __init__(
        self,
        cache_file_name: str | Path | None = None,
        *,
        descriptor: InvocationDescriptor | None = None,
        spawner: Spawner | None = None,
        settings: AotSettings | None = None,
        terminate: Callable[[int], Any] = sys.exit,
        register_exit_hook: Callable[[Callable[[], Any]], Any] = atexit.register,
    ) -> None:
        self._settings = settings or default_settings
        self._vocabulary = self._settings.vocabulary
        self.artifact = CacheArtifact(
            cache_path=Path(cache_file_name or self._settings.cache_file_name)
        )
        self.descriptor = descriptor or InvocationDescriptor.current()
        self._spawner = spawner or SubprocessSpawner()
        self._terminate = terminate
        self._register_exit_hook = register_exit_hook
        self._hook_registered = False

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_consuming_cache(self) -> bool:
        """Whether the process was launched with the cache flag for this artifact."""
        option = self._vocabulary.cache_option
        return any(
            Path(flag[len(option):]) == self.artifact.cache_path
            for flag in self.descriptor.flags_with_prefix(option)
        )

    def classify(self) -> Phase:
        if self.artifact.exists():
            return Phase.CACHE_READY
        if self.descriptor.has_flag(self._vocabulary.record_flag):
            return Phase.RECORDING
        if self.is_consuming_cache():
            return Phase.NEEDS_TRAINING
        if self._settings.restart_without_consume_flag:
            return Phase.NEEDS_TRAINING
        return Phase.INERT

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def enable(self) -> Phase:
        """Perform the action for the current phase.

        Returns the phase when control returns to the caller.  In the
        NEEDS_TRAINING phase the process is terminated instead.
        """
        phase = self.classify()

        if phase == Phase.CACHE_READY:
            logger.info("Cache %s is found, do nothing.", self.artifact.cache_path)
        elif phase == Phase.RECORDING:
            self._register_build_hook()
        elif phase == Phase.NEEDS_TRAINING:
            self.relaunch().run()
        else:
            logger.debug(
                "No %s flags for %s, running without a cache.",
                self._vocabulary.reserved_prefix,
                self.artifact.cache_path,
            )
        return phase

    def relaunch(self) -> Relaunch:
        """The record-mode relaunch for the current invocation."""
        command = restart_command(self.descriptor, self.artifact, self._vocabulary)
        env = classpath_env(self.descriptor.classpath, self._vocabulary)
        return Relaunch(command, self.artifact, self._spawner, self._terminate, env)

    def build_artifact(self) -> SpawnResult:
        """Run the cache builder and wait for it to finish.

        Raises
        ------
        ArtifactBuildError
            If no builder is configured for a runtime that needs one, or the
            builder cannot be started or exits with a non-zero status.
        """
        if not self._vocabulary.runtime_builds_cache and not self._vocabulary.builder:
            raise ArtifactBuildError(
                f"No cache builder configured for {self.descriptor.executable}; "
                "set AOTCACHE_BUILDER"
            )
        command = create_command(self.descriptor, self.artifact, self._vocabulary)
        env = classpath_env(filter_classpath(self.descriptor.classpath), self._vocabulary)
        logger.info("Creating cache %s", self.artifact.cache_path)
        try:
            result = self._spawner.spawn(command, blocking=True, env=env)
        except SpawnError as e:
            raise ArtifactBuildError(f"Cannot start cache builder: {e}") from e

        if not result.ok:
            raise ArtifactBuildError(
                f"Cache builder exited with status {result.returncode}: "
                f"{' '.join(result.args)}"
            )
        return result

    def _register_build_hook(self) -> None:
        if self._hook_registered:
            return
        self._register_exit_hook(self.build_artifact)
        self._hook_registered = True
        logger.info(
            "Recording training data, cache %s will be created at exit.",
            self.artifact.cache_path,
        )


def enable(cache_file_name: str | Path | None = None, **kwargs: Any) -> None:
    """Enable ahead-of-time caching for the current process.

    Keyword arguments are passed through to ``RelaunchController``.
    """
    RelaunchController(cache_file_name, **kwargs).enable()
