# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Line-oriented layout cops."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

from ..config import CopConfig
from .base import Cop, CopContext, Correction, Finding, Position

DEFAULT_MAX_LINE_LENGTH: Final[int] = 100
DEFAULT_INDENTATION_WIDTH: Final[int] = 4
_HORIZONTAL_WHITESPACE: Final[str] = " \t"


def _split_ending(line: str) -> tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body) :]


def check_trailing_whitespace(context: CopContext) -> Iterator[Finding]:
    for number, line in enumerate(context.source.lines, start=1):
        stripped = line.rstrip(_HORIZONTAL_WHITESPACE)
        if stripped != line:
            yield Finding(line=number, column=len(stripped), message="Trailing whitespace detected.")


def correct_trailing_whitespace(text: str, _config: CopConfig) -> Correction:
    corrected: list[str] = []
    fixed: set[Position] = set()
    for number, line in enumerate(text.splitlines(keepends=True), start=1):
        body, ending = _split_ending(line)
        stripped = body.rstrip(_HORIZONTAL_WHITESPACE)
        if stripped != body:
            fixed.add((number, len(stripped)))
        corrected.append(stripped + ending)
    return Correction(text="".join(corrected), fixed=frozenset(fixed))


def check_tab_indentation(context: CopContext) -> Iterator[Finding]:
    for number, line in enumerate(context.source.lines, start=1):
        indentation = line[: len(line) - len(line.lstrip(_HORIZONTAL_WHITESPACE))]
        column = indentation.find("\t")
        if column >= 0:
            yield Finding(line=number, column=column, message="Tab detected in indentation.")


def correct_tab_indentation(text: str, config: CopConfig) -> Correction:
    width = int(config.option("indentation_width", DEFAULT_INDENTATION_WIDTH))
    corrected: list[str] = []
    fixed: set[Position] = set()
    for number, line in enumerate(text.splitlines(keepends=True), start=1):
        content = line.lstrip(_HORIZONTAL_WHITESPACE)
        indentation = line[: len(line) - len(content)]
        column = indentation.find("\t")
        if column >= 0:
            fixed.add((number, column))
        corrected.append(indentation.replace("\t", " " * width) + content)
    return Correction(text="".join(corrected), fixed=frozenset(fixed))


def _trailing_blank_lines(text: str) -> Finding | None:
    if not text:
        return None
    if not text.endswith("\n"):
        lines = text.splitlines()
        return Finding(line=len(lines), column=len(lines[-1]), message="Final newline missing.")
    content = text.rstrip("\r\n")
    blank_lines = text[len(content) :].count("\n") - 1
    if blank_lines <= 0:
        return None
    suffix = "line" if blank_lines == 1 else "lines"
    return Finding(
        line=len(content.splitlines()) + 1,
        column=0,
        message=f"{blank_lines} trailing blank {suffix} detected.",
    )


def check_trailing_blank_lines(context: CopContext) -> Iterator[Finding]:
    finding = _trailing_blank_lines(context.source.text)
    if finding is not None:
        yield finding


def correct_trailing_blank_lines(text: str, _config: CopConfig) -> Correction:
    finding = _trailing_blank_lines(text)
    if finding is None:
        return Correction(text=text)
    return Correction(text=text.rstrip("\r\n") + "\n", fixed=frozenset({(finding.line, finding.column)}))


def check_line_length(context: CopContext) -> Iterator[Finding]:
    maximum = int(context.config.option("max", DEFAULT_MAX_LINE_LENGTH))
    for number, line in enumerate(context.source.lines, start=1):
        if len(line) > maximum:
            yield Finding(line=number, column=maximum, message=f"Line is too long. [{len(line)}/{maximum}]")


LAYOUT_COPS: Final[tuple[Cop, ...]] = (
    Cop(
        name="Layout/TabIndentation",
        description="Indent with spaces rather than tabs.",
        check=check_tab_indentation,
        correct=correct_tab_indentation,
    ),
    Cop(
        name="Layout/TrailingWhitespace",
        description="Avoid trailing whitespace.",
        check=check_trailing_whitespace,
        correct=correct_trailing_whitespace,
    ),
    Cop(
        name="Layout/TrailingBlankLines",
        description="End files with exactly one newline.",
        check=check_trailing_blank_lines,
        correct=correct_trailing_blank_lines,
    ),
    Cop(
        name="Layout/LineLength",
        description="Limit lines to a configurable maximum length.",
        check=check_line_length,
    ),
)

__all__ = ["LAYOUT_COPS"]
