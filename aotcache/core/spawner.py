"""Child process spawning behind a narrow Protocol.

The controller only ever needs two shapes of spawn: fire-and-forget
(relaunch, then exit) and spawn-and-wait (artifact build at exit).
Both inherit the parent's standard streams.

Backends:
1. **SubprocessSpawner**: real child processes via ``subprocess.Popen``.
2. **RecordingSpawner**: records argument vectors without launching
   anything; used by tests and the CLI dry run.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class AotCacheError(RuntimeError):
    """Base class for controller failures."""


class SpawnError(AotCacheError):
    """Raised when a child process could not be created."""


class SpawnResult(BaseModel):
    """Outcome of a spawn request."""

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...]
    pid: int | None = None
    returncode: int | None = None  # None when the child was not waited on

    @property
    def ok(self) -> bool:
        return self.returncode is None or self.returncode == 0


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Spawner(Protocol):
    """Protocol for child process backends."""

    def spawn(
        self,
        args: Sequence[str],
        *,
        blocking: bool,
        env: Mapping[str, str] | None = None,
    ) -> SpawnResult:
        """Launch *args* with inherited standard I/O.

        Parameters
        ----------
        args:
            Full argument vector, executable first.
        blocking:
            Wait for the child to exit and report its return code.
        env:
            Variables set for the child on top of the inherited environment.

        Raises
        ------
        SpawnError
            If the child could not be started.
        """
        ...


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------


class SubprocessSpawner:
    """Spawns real child processes sharing this process's stdin/stdout/stderr."""

    def spawn(
        self,
        args: Sequence[str],
        *,
        blocking: bool,
        env: Mapping[str, str] | None = None,
    ) -> SpawnResult:
        argv = tuple(args)
        logger.debug("Spawning %s (blocking=%s)", argv, blocking)
        try:
            process = subprocess.Popen(argv, env={**os.environ, **env} if env else None)
        except OSError as e:
            raise SpawnError(f"Cannot start {argv[0] if argv else '<empty>'}: {e}") from e

        if not blocking:
            return SpawnResult(args=argv, pid=process.pid)

        returncode = process.wait()
        logger.debug("Child %d exited with %d", process.pid, returncode)
        return SpawnResult(args=argv, pid=process.pid, returncode=returncode)


class RecordingSpawner:
    """In-memory spawner that records every request.

    Parameters
    ----------
    returncode:
        Return code reported for blocking spawns.
    fail:
        When ``True`` every spawn raises ``SpawnError``.
    """

    def __init__(self, returncode: int = 0, fail: bool = False) -> None:
        self.returncode = returncode
        self.fail = fail
        self.calls: list[tuple[tuple[str, ...], bool]] = []
        self.envs: list[dict[str, str]] = []

    def spawn(
        self,
        args: Sequence[str],
        *,
        blocking: bool,
        env: Mapping[str, str] | None = None,
    ) -> SpawnResult:
        argv = tuple(args)
        self.calls.append((argv, blocking))
        self.envs.append(dict(env or {}))
        if self.fail:
            raise SpawnError(f"Refusing to start {argv[0] if argv else '<empty>'}")
        return SpawnResult(
            args=argv,
            returncode=self.returncode if blocking else None,
        )
