"""Shared test fixtures for aotcache."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from aotcache.config import AotSettings
from aotcache.core.controller import RelaunchController
from aotcache.core.spawner import RecordingSpawner
from aotcache.models.invocation import InvocationDescriptor

EXECUTABLE = "/opt/jdk/bin/java"


@pytest.fixture
def settings() -> AotSettings:
    """Provide settings isolated from the environment and any .env file."""
    return AotSettings(_env_file=None, runtime="hotspot", classpath_separator=":")


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    """Cache file inside a directory that does not exist yet."""
    return tmp_path / "build" / "app.aot"


@pytest.fixture
def spawner() -> RecordingSpawner:
    return RecordingSpawner()


@pytest.fixture
def exits() -> list[int]:
    """Exit statuses passed to the fake terminator."""
    return []


@pytest.fixture
def hooks() -> list[Callable[[], Any]]:
    """Callables registered through the fake exit hook registry."""
    return []


@pytest.fixture
def make_descriptor() -> Callable[..., InvocationDescriptor]:
    """Factory fixture: build an InvocationDescriptor with sensible defaults."""

    def _factory(
        runtime_flags: tuple[str, ...] = ("-Xmx1g",),
        app_args: tuple[str, ...] = ("com.example.Main", "--port", "8080"),
        classpath: tuple[str, ...] = ("app.jar", "classes"),
        **overrides: Any,
    ) -> InvocationDescriptor:
        defaults: dict[str, Any] = {
            "executable": EXECUTABLE,
            "runtime_flags": runtime_flags,
            "app_args": app_args,
            "classpath": classpath,
        }
        defaults.update(overrides)
        return InvocationDescriptor(**defaults)

    return _factory


@pytest.fixture
def make_controller(
    settings: AotSettings,
    cache_path: Path,
    spawner: RecordingSpawner,
    exits: list[int],
    hooks: list[Callable[[], Any]],
    make_descriptor: Callable[..., InvocationDescriptor],
) -> Callable[..., RelaunchController]:
    """Factory fixture: a controller wired to fakes for spawning and exiting."""

    def _factory(
        descriptor: InvocationDescriptor | None = None,
        **overrides: Any,
    ) -> RelaunchController:
        kwargs: dict[str, Any] = {
            "descriptor": descriptor or make_descriptor(),
            "spawner": spawner,
            "settings": settings,
            "terminate": exits.append,
            "register_exit_hook": hooks.append,
        }
        kwargs.update(overrides)
        return RelaunchController(cache_path, **kwargs)

    return _factory
