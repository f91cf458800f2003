# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Source processing: turn a file on disk into a parsed representation."""

from __future__ import annotations

import ast
import io
import re
import tokenize
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, TypeAlias

from .models import PARSER_COP_NAME, Location, Offense
from .severity import Severity

ALL_COPS: Final[str] = "all"
LineRange = tuple[int, int]
NUL_BYTE_MESSAGE: Final[str] = "source code string cannot contain null bytes"
DEFAULT_ENCODING: Final[str] = "utf-8"

_DIRECTIVE_RE: Final[re.Pattern[str]] = re.compile(
    r"#\s*pycop\s*:\s*(?P<action>disable|enable)\s*=?\s*(?P<names>[\w/]+(?:\s*,\s*[\w/]+)*)",
)


@dataclass(frozen=True, slots=True)
class ProcessedSource:
    """Parsed state of a file's current on-disk content.

    Attributes:
        path: File the source was read from.
        text: Decoded file content.
        tree: Parsed module, ``None`` when the content has a syntax error.
        syntax_error: Syntax error raised by the parser, if any.
        disabled_ranges: Inclusive line ranges per cop name (or ``"all"``)
            disabled by inline ``# pycop: disable=...`` comments.
        encoding: Codec the file was decoded with, reused when writing it back.
    """

    path: Path
    text: str
    tree: ast.Module | None = None
    syntax_error: SyntaxError | None = None
    disabled_ranges: Mapping[str, tuple[LineRange, ...]] = field(default_factory=dict)
    encoding: str = DEFAULT_ENCODING

    @property
    def lines(self) -> list[str]:
        """Return the content split into lines without line terminators."""

        return self.text.splitlines()

    @property
    def valid_syntax(self) -> bool:
        """Return ``True`` when the content parsed without syntax errors."""

        return self.syntax_error is None

    def line_disabled(self, cop_name: str, line: int) -> bool:
        """Return ``True`` when ``cop_name`` is disabled on ``line``.

        Args:
            cop_name: Fully qualified cop name.
            line: 1-based line number to check.

        Returns:
            bool: ``True`` if an inline directive disables the cop there.
        """

        for key in (cop_name, ALL_COPS):
            for start, end in self.disabled_ranges.get(key, ()):
                if start <= line <= end:
                    return True
        return False


@dataclass(frozen=True, slots=True)
class ParseFailure:
    """Structural failure reported when a file cannot be parsed."""

    path: Path
    message: str


ParseResult: TypeAlias = ProcessedSource | ParseFailure


def parse_file(path: Path) -> ParseResult:
    """Parse ``path`` into a :class:`ProcessedSource`.

    Encoding and argument problems (undecodable bytes, NUL bytes, unreadable
    files) yield a :class:`ParseFailure`. Syntax errors do not: the source is
    returned with :attr:`ProcessedSource.syntax_error` populated so that cops
    can report it.

    Args:
        path: File to read and parse.

    Returns:
        ParseResult: Parsed source or the failure describing why parsing failed.
    """

    try:
        raw = path.read_bytes()
        encoding, _ = tokenize.detect_encoding(io.BytesIO(raw).readline)
        text = raw.decode(encoding)
    except (OSError, SyntaxError, UnicodeDecodeError, LookupError) as exc:
        return ParseFailure(path=path, message=_failure_message(exc))
    return parse_text(path, text, encoding=encoding)


def parse_text(path: Path, text: str, *, encoding: str = DEFAULT_ENCODING) -> ParseResult:
    """Parse already decoded ``text`` attributed to ``path``.

    Args:
        path: File the text belongs to.
        text: Decoded source text.
        encoding: Codec the text was decoded with.

    Returns:
        ParseResult: Parsed source or a failure for NUL bytes in the input.
    """

    if "\x00" in text:
        return ParseFailure(path=path, message=NUL_BYTE_MESSAGE)
    try:
        tree = ast.parse(text, filename=str(path))
    except SyntaxError as exc:
        return ProcessedSource(
            path=path,
            text=text,
            syntax_error=exc,
            disabled_ranges=_disabled_ranges(text),
            encoding=encoding,
        )
    except ValueError as exc:
        return ParseFailure(path=path, message=_failure_message(exc))
    return ProcessedSource(path=path, text=text, tree=tree, disabled_ranges=_disabled_ranges(text), encoding=encoding)


def fatal_offense(failure: ParseFailure) -> Offense:
    """Return the fatal offense standing in for an unparseable file.

    Args:
        failure: Parse failure produced by the source processor.

    Returns:
        Offense: Fatal offense at line 1, column 0 attributed to the parser.
    """

    return Offense(
        severity=Severity.FATAL,
        location=Location(line=1, column=0, source_line=""),
        message=f"{failure.message.capitalize()}.",
        cop_name=PARSER_COP_NAME,
    )


def _failure_message(exc: Exception) -> str:
    """Return the human-readable description of ``exc``."""

    if isinstance(exc, UnicodeDecodeError):
        return f"invalid byte sequence in {exc.encoding}"
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc).rstrip(".") or type(exc).__name__


def _disabled_ranges(text: str) -> dict[str, tuple[LineRange, ...]]:
    """Collect line ranges disabled by inline directives in ``text``.

    A directive on a line that also holds code disables that line only. A
    directive on its own line opens a range that lasts until the matching
    ``enable`` directive or the end of the file.

    Args:
        text: Source text to scan.

    Returns:
        dict[str, tuple[LineRange, ...]]: Ranges keyed by cop name.
    """

    ranges: dict[str, list[LineRange]] = {}
    open_ranges: dict[str, int] = {}
    lines = text.splitlines()
    for number, line in enumerate(lines, start=1):
        match = _DIRECTIVE_RE.search(line)
        if match is None:
            continue
        names = [name.strip() for name in match.group("names").split(",") if name.strip()]
        standalone = line.lstrip().startswith("#")
        for name in names:
            if match.group("action") == "disable":
                if not standalone:
                    ranges.setdefault(name, []).append((number, number))
                elif name not in open_ranges:
                    open_ranges[name] = number
            elif name in open_ranges:
                ranges.setdefault(name, []).append((open_ranges.pop(name), number))
    last_line = max(len(lines), 1)
    for name, start in open_ranges.items():
        ranges.setdefault(name, []).append((start, last_line))
    return {name: tuple(values) for name, values in ranges.items()}


__all__ = [
    "ALL_COPS",
    "DEFAULT_ENCODING",
    "ParseFailure",
    "ParseResult",
    "ProcessedSource",
    "fatal_offense",
    "parse_file",
    "parse_text",
]
