"""Argument vector construction for the two child commands.

- ``restart_command``: the current invocation relaunched in record mode.
- ``create_command``: the runtime asked to build the cache from the
  recorded training data.

Both reuse the current executable, and neither ever carries a flag with
the reserved prefix other than the ones injected here.  Runtimes without a
classpath option receive the module path through ``classpath_env``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from aotcache.models.invocation import InvocationDescriptor
from aotcache.models.phases import CacheArtifact, FlagVocabulary


def strip_reserved(flags: Iterable[str], prefix: str) -> list[str]:
    """Drop every flag starting with *prefix*, keeping the others in order."""
    return [f for f in flags if not f.startswith(prefix)]


def _is_regular_file(entry: str) -> bool:
    return Path(entry).is_file()


def filter_classpath(
    entries: Iterable[str],
    is_file: Callable[[str], bool] = _is_regular_file,
) -> list[str]:
    """Keep only entries that currently resolve to a regular file.

    Directories and missing entries are not accepted by the cache builder.
    """
    return [e for e in entries if is_file(e)]


def classpath_args(entries: Iterable[str], vocabulary: FlagVocabulary) -> list[str]:
    entries = list(entries)
    if not vocabulary.classpath_option or not entries:
        return []
    return [vocabulary.classpath_option, vocabulary.classpath_separator.join(entries)]


def classpath_env(entries: Iterable[str], vocabulary: FlagVocabulary) -> dict[str, str]:
    """Environment overrides carrying the module path, for runtimes without a
    classpath option."""
    entries = list(entries)
    if vocabulary.classpath_option or not vocabulary.classpath_env or not entries:
        return {}
    return {vocabulary.classpath_env: vocabulary.classpath_separator.join(entries)}


def restart_command(
    descriptor: InvocationDescriptor,
    artifact: CacheArtifact,
    vocabulary: FlagVocabulary,
) -> list[str]:
    """Relaunch the current invocation with record-mode flags substituted."""
    command = [descriptor.executable]
    command.extend(strip_reserved(descriptor.runtime_flags, vocabulary.reserved_prefix))
    command.append(vocabulary.record_flag)
    command.append(vocabulary.configuration_flag(artifact))
    command.extend(classpath_args(descriptor.classpath, vocabulary))
    command.extend(descriptor.app_args)
    return command


def create_command(
    descriptor: InvocationDescriptor,
    artifact: CacheArtifact,
    vocabulary: FlagVocabulary,
    is_file: Callable[[str], bool] = _is_regular_file,
) -> list[str]:
    """Build the cache from the training data recorded by this run."""
    command = [descriptor.executable]
    command.append(vocabulary.create_flag)
    command.append(vocabulary.configuration_flag(artifact))
    command.append(vocabulary.cache_flag(artifact))
    command.extend(
        classpath_args(filter_classpath(descriptor.classpath, is_file), vocabulary)
    )
    command.extend(vocabulary.builder)
    return command
