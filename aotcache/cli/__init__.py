"""aotcache CLI: Typer-based command-line interface.

Provides the ``aotcache`` command with subcommands for previewing what the
controller would do with a command line, checking cache status, and
enabling the cache for the current interpreter.

All output uses Rich for formatted terminal display.
"""
