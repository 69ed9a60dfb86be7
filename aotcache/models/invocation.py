"""Invocation descriptor: an immutable snapshot of how a process was launched.

The controller never reads ``sys`` directly; it receives one of these,
either captured from the running interpreter with ``current()`` or parsed
from an explicit command line with ``from_command()``.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from aotcache.models.phases import FlagVocabulary, Runtime


class InvocationDescriptor(BaseModel):
    """How the current process was started.

    Attributes
    ----------
    executable:
        Path of the runtime executable, reused verbatim for relaunches.
    runtime_flags:
        Options given to the runtime itself, in order.
    app_args:
        The application target and its arguments, as the user typed them.
    classpath:
        Classpath or module path entries.
    """

    model_config = ConfigDict(frozen=True)

    executable: str
    runtime_flags: tuple[str, ...] = ()
    app_args: tuple[str, ...] = ()
    classpath: tuple[str, ...] = ()

    def has_flag(self, flag: str) -> bool:
        return flag in self.runtime_flags

    def flags_with_prefix(self, prefix: str) -> list[str]:
        return [f for f in self.runtime_flags if f.startswith(prefix)]

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def current(cls) -> InvocationDescriptor:
        """Snapshot the running interpreter's invocation.

        ``-X``/``-W`` values given as a separate argument are attached to
        their option (``-X dev`` becomes ``-Xdev``) so flag lookups match
        either spelling.
        """
        argv = list(getattr(sys, "orig_argv", [sys.executable, *sys.argv]))
        vocab = FlagVocabulary.for_runtime(Runtime.PYTHON)
        flags, _, app_args = _split_command(argv[1:], vocab)
        return cls(
            executable=sys.executable,
            runtime_flags=tuple(_attach_short_values(flags, ("-X", "-W"))),
            app_args=tuple(app_args),
            classpath=tuple(p for p in sys.path if p),
        )

    @classmethod
    def from_command(
        cls,
        argv: Sequence[str],
        vocabulary: FlagVocabulary | None = None,
    ) -> InvocationDescriptor:
        """Parse a full runtime command line into a descriptor.

        ``argv[0]`` is the executable.  Options are collected until the
        first token that is not an option or until a main option such as
        ``-jar``; the classpath option and its value are lifted out into
        ``classpath``.
        """
        if not argv:
            raise ValueError("Cannot describe an empty command line")
        flags, classpath, app_args = _split_command(argv[1:], vocabulary or FlagVocabulary())
        return cls(
            executable=argv[0],
            runtime_flags=tuple(flags),
            app_args=tuple(app_args),
            classpath=tuple(classpath),
        )


def _split_command(
    args: Sequence[str], vocab: FlagVocabulary
) -> tuple[list[str], list[str], list[str]]:
    """Split runtime arguments into (flags, classpath entries, application args)."""
    flags: list[str] = []
    classpath: list[str] = []
    i = 0
    while i < len(args):
        token = args[i]
        if vocab.is_classpath_option(token):
            if i + 1 >= len(args):
                raise ValueError(f"Option {token} requires a value")
            classpath.extend(e for e in args[i + 1].split(vocab.classpath_separator) if e)
            i += 2
            continue
        option, sep, value = token.partition("=")
        if sep and option.startswith("--") and vocab.is_classpath_option(option):
            classpath.extend(e for e in value.split(vocab.classpath_separator) if e)
            i += 1
            continue
        if token in vocab.main_options or not token.startswith("-"):
            return flags, classpath, list(args[i:])
        flags.append(token)
        if token in vocab.options_with_value:
            if i + 1 >= len(args):
                raise ValueError(f"Option {token} requires a value")
            flags.append(args[i + 1])
            i += 1
        i += 1
    return flags, classpath, []


def _attach_short_values(flags: Sequence[str], options: Sequence[str]) -> list[str]:
    attached: list[str] = []
    i = 0
    while i < len(flags):
        if flags[i] in options and i + 1 < len(flags):
            attached.append(flags[i] + flags[i + 1])
            i += 2
        else:
            attached.append(flags[i])
            i += 1
    return attached
