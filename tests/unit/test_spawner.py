"""Unit tests for the spawner backends."""

from __future__ import annotations

import sys

import pytest

from aotcache.core.spawner import (
    RecordingSpawner,
    SpawnError,
    Spawner,
    SpawnResult,
    SubprocessSpawner,
)


class TestProtocol:
    def test_backends_satisfy_protocol(self):
        assert isinstance(SubprocessSpawner(), Spawner)
        assert isinstance(RecordingSpawner(), Spawner)


class TestSpawnResult:
    def test_ok_when_not_waited(self):
        assert SpawnResult(args=("x",)).ok is True

    def test_not_ok_on_nonzero(self):
        assert SpawnResult(args=("x",), returncode=3).ok is False


class TestSubprocessSpawner:
    def test_blocking_reports_returncode(self):
        result = SubprocessSpawner().spawn(
            [sys.executable, "-c", "import sys; sys.exit(7)"], blocking=True
        )
        assert result.returncode == 7
        assert result.pid is not None

    def test_non_blocking_does_not_wait(self):
        result = SubprocessSpawner().spawn([sys.executable, "-c", "pass"], blocking=False)
        assert result.returncode is None
        assert result.pid is not None

    def test_missing_executable_raises(self, tmp_path):
        with pytest.raises(SpawnError):
            SubprocessSpawner().spawn([str(tmp_path / "no-such-binary")], blocking=True)


class TestRecordingSpawner:
    def test_records_calls(self):
        spawner = RecordingSpawner()
        spawner.spawn(["a", "b"], blocking=False)
        spawner.spawn(["c"], blocking=True)
        assert spawner.calls == [(("a", "b"), False), (("c",), True)]

    def test_returncode_only_for_blocking(self):
        spawner = RecordingSpawner(returncode=2)
        assert spawner.spawn(["a"], blocking=False).returncode is None
        assert spawner.spawn(["a"], blocking=True).returncode == 2

    def test_fail(self):
        spawner = RecordingSpawner(fail=True)
        with pytest.raises(SpawnError):
            spawner.spawn(["a"], blocking=False)
        assert spawner.calls == [(("a",), False)]
