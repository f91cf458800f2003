# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fan lifecycle events out to every configured formatter."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console

from ..console import get_console_manager
from ..models import Offense
from ..options import FormatterSpec
from .formatters import FORMATTERS, BaseFormatter


class ReportingSetupError(RuntimeError):
    """Raised when a formatter or its output destination cannot be created."""


def resolve_formatter_key(key: str) -> str:
    """Return the formatter name matching ``key`` exactly or by unique prefix.

    Args:
        key: Formatter name or abbreviation supplied by the user.

    Returns:
        str: Canonical formatter name.

    Raises:
        ReportingSetupError: If ``key`` matches no formatter or is ambiguous.
    """

    lowered = key.strip().lower()
    if lowered in FORMATTERS:
        return lowered
    matches = [name for name in FORMATTERS if lowered and name.startswith(lowered)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise ReportingSetupError(f'Formatter "{key}" is ambiguous: {", ".join(matches)}')
    raise ReportingSetupError(f'No formatter for "{key}"')


class FormatterSet:
    """Ordered collection of formatters sharing the run lifecycle."""

    def __init__(self, *, color: bool = True) -> None:
        """Create an empty set.

        Args:
            color: ``True`` to allow ANSI colour on terminal output.
        """

        self._color = color
        self._formatters: list[BaseFormatter] = []
        self._handles: list[TextIO] = []

    def add_formatter(self, key: str, output_path: Path | None = None) -> BaseFormatter:
        """Create and register the formatter named by ``key``.

        Args:
            key: Formatter name or unique prefix.
            output_path: File receiving the output; stdout when ``None``.

        Returns:
            BaseFormatter: Newly registered formatter.

        Raises:
            ReportingSetupError: If the formatter is unknown or ``output_path``
                cannot be opened for writing.
        """

        formatter_cls = FORMATTERS[resolve_formatter_key(key)]
        formatter = formatter_cls(self._console_for(output_path))
        self._formatters.append(formatter)
        return formatter

    def _console_for(self, output_path: Path | None) -> Console:
        if output_path is None:
            return get_console_manager().get(color=self._color, emoji=False)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            handle = output_path.open("w", encoding="utf-8")
        except OSError as exc:
            raise ReportingSetupError(f"Cannot write formatter output to {output_path}: {exc}") from exc
        self._handles.append(handle)
        return Console(file=handle, color_system=None, no_color=True, emoji=False, highlight=False, soft_wrap=True)

    def started(self, files: Sequence[Path]) -> None:
        for formatter in self._formatters:
            formatter.started(files)

    def file_started(self, path: Path, context: Mapping[str, Any]) -> None:
        for formatter in self._formatters:
            formatter.file_started(path, context)

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        for formatter in self._formatters:
            formatter.file_finished(path, offenses)

    def finished(self, inspected: Sequence[Path]) -> None:
        for formatter in self._formatters:
            formatter.finished(inspected)

    def close_output_files(self) -> None:
        """Close every file opened for formatter output; stdout is left open."""

        while self._handles:
            self._handles.pop().close()

    def __iter__(self) -> Iterator[BaseFormatter]:
        return iter(self._formatters)

    def __len__(self) -> int:
        return len(self._formatters)


def build_formatter_set(specs: Iterable[FormatterSpec], *, color: bool = True) -> FormatterSet:
    """Return a :class:`FormatterSet` for ``specs``.

    Args:
        specs: Formatter keys and optional output files.
        color: ``True`` to allow ANSI colour on terminal output.

    Returns:
        FormatterSet: Set holding one formatter per spec.

    Raises:
        ReportingSetupError: If any formatter cannot be created; files opened
            for earlier specs are closed first.
    """

    formatter_set = FormatterSet(color=color)
    try:
        for spec in specs:
            formatter_set.add_formatter(spec.key, spec.output_path)
    except ReportingSetupError:
        formatter_set.close_output_files()
        raise
    return formatter_set


__all__ = ["FormatterSet", "ReportingSetupError", "build_formatter_set", "resolve_formatter_key"]
