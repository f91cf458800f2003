# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for single-round team execution and auto-correction."""

from __future__ import annotations

from pathlib import Path

from pycop.config import Config, CopConfig
from pycop.cops import Cop, CopContext, Correction, Finding, default_registry
from pycop.options import RunOptions
from pycop.severity import Severity
from pycop.source import ProcessedSource, parse_text
from pycop.team import SYNTAX_COP_NAME, Team


class RecordingWriter:
    def __init__(self) -> None:
        self.writes: list[tuple[Path, str]] = []
        self.encodings: list[str] = []

    def __call__(self, path: Path, text: str, encoding: str) -> None:
        self.writes.append((path, text))
        self.encodings.append(encoding)


class ReadOnlyWriter:
    def __call__(self, path: Path, text: str, encoding: str) -> None:
        raise PermissionError(13, "Permission denied", str(path))


def _source(text: str) -> ProcessedSource:
    source = parse_text(Path("sample.py"), text)
    assert isinstance(source, ProcessedSource)
    return source


def _cops(*names: str) -> list[Cop]:
    registry = default_registry()
    return [registry[name] for name in names]


def test_team_reports_offenses_without_writing() -> None:
    writer = RecordingWriter()
    team = Team(_cops("Layout/TrailingWhitespace"), Config(), RunOptions(), writer=writer)

    report = team.inspect_file(_source("x = 1  \n"))

    assert [offense.cop_name for offense in report.offenses] == ["Layout/TrailingWhitespace"]
    assert report.offenses[0].location.source_line == "x = 1  "
    assert not report.updated
    assert writer.writes == []


def test_autocorrect_applies_first_effective_cop_only() -> None:
    writer = RecordingWriter()
    cops = _cops("Layout/TabIndentation", "Layout/TrailingWhitespace")
    team = Team(cops, Config(), RunOptions(autocorrect=True), writer=writer)

    report = team.inspect_file(_source("if True:\n\tx = 1  \n"))

    assert report.updated
    assert writer.writes == [(Path("sample.py"), "if True:\n    x = 1  \n")]
    statuses = {offense.cop_name: offense.corrected for offense in report.offenses}
    assert statuses == {"Layout/TabIndentation": True, "Layout/TrailingWhitespace": False}


def test_config_disables_cops_and_overrides_severity() -> None:
    config = Config(
        cops={
            "Layout/TrailingWhitespace": CopConfig(enabled=False),
            "Style/LambdaAssignment": CopConfig(severity="error"),
        },
    )
    team = Team(_cops("Layout/TrailingWhitespace", "Style/LambdaAssignment"), config, RunOptions())

    report = team.inspect_file(_source("f = lambda: 1  \n"))

    assert [(offense.cop_name, offense.severity) for offense in report.offenses] == [
        ("Style/LambdaAssignment", Severity.ERROR),
    ]


def test_inline_directive_suppresses_offense() -> None:
    team = Team(_cops("Style/LambdaAssignment"), Config(), RunOptions())

    report = team.inspect_file(_source("f = lambda: 1  # pycop: disable=Style/LambdaAssignment\ng = lambda: 2\n"))

    assert [offense.line for offense in report.offenses] == [2]


def test_syntax_error_yields_single_error_offense() -> None:
    team = Team(_cops("Layout/TrailingWhitespace", "Lint/Debugger"), Config(), RunOptions(autocorrect=True))

    report = team.inspect_file(_source("def broken(:  \n"))

    assert len(report.offenses) == 1
    offense = report.offenses[0]
    assert offense.cop_name == SYNTAX_COP_NAME
    assert offense.severity is Severity.ERROR
    assert offense.line == 1
    assert offense.message.endswith(".")
    assert not report.updated


def test_cop_exceptions_are_recorded_as_errors() -> None:
    def explode(_context: CopContext) -> list[Finding]:
        raise RuntimeError("boom")

    failing = Cop(name="Style/Explodes", description="fails", check=explode)
    team = Team([failing, *_cops("Layout/TrailingWhitespace")], Config(), RunOptions())

    report = team.inspect_file(_source("x = 1 \n"))

    assert [offense.cop_name for offense in report.offenses] == ["Layout/TrailingWhitespace"]
    assert [(error.cop_name, error.message) for error in team.errors] == [("Style/Explodes", "RuntimeError: boom")]

    team.inspect_file(_source("x = 1\n"))
    assert len(team.errors) == 1


def test_correction_that_changes_nothing_is_skipped() -> None:
    writer = RecordingWriter()
    noop = Cop(
        name="Style/Noop",
        description="reports without changing",
        check=lambda _context: [Finding(line=1, column=0, message="Noop.")],
        correct=lambda text, _config: Correction(text=text),
    )
    team = Team([noop, *_cops("Layout/TrailingWhitespace")], Config(), RunOptions(autocorrect=True), writer=writer)

    report = team.inspect_file(_source("x = 1 \n"))

    assert writer.writes == [(Path("sample.py"), "x = 1\n")]
    assert {offense.cop_name: offense.corrected for offense in report.offenses} == {
        "Style/Noop": False,
        "Layout/TrailingWhitespace": True,
    }


def test_only_offenses_the_correction_resolved_are_marked() -> None:
    def first_line_only(text: str, _config: CopConfig) -> Correction:
        lines = text.splitlines(keepends=True)
        return Correction(text="".join(["fixed = 1\n", *lines[1:]]), fixed=frozenset({(1, 0)}))

    partial = Cop(
        name="Style/Partial",
        description="fixes the first line only",
        check=lambda context: [Finding(line=n, column=0, message="Odd.") for n in (1, 2)],
        correct=first_line_only,
    )
    writer = RecordingWriter()
    team = Team([partial], Config(), RunOptions(autocorrect=True), writer=writer)

    report = team.inspect_file(_source("a = 1\nb = 2\n"))

    assert report.updated
    assert [(offense.line, offense.corrected) for offense in report.offenses] == [(1, True), (2, False)]


def test_multiline_comparison_is_corrected_in_place() -> None:
    writer = RecordingWriter()
    team = Team(_cops("Style/ComparisonToNone"), Config(), RunOptions(autocorrect=True), writer=writer)

    report = team.inspect_file(_source("a = x == None\nb = (y ==\n     None)\n"))

    assert writer.writes == [(Path("sample.py"), "a = x is None\nb = (y is\n     None)\n")]
    assert [(offense.line, offense.corrected) for offense in report.offenses] == [(1, True), (2, True)]


def test_write_failure_is_recorded_and_round_not_updated() -> None:
    team = Team(_cops("Layout/TrailingWhitespace"), Config(), RunOptions(autocorrect=True), writer=ReadOnlyWriter())

    report = team.inspect_file(_source("x = 1 \n"))

    assert not report.updated
    assert [offense.corrected for offense in report.offenses] == [False]
    (error,) = team.errors
    assert error.cop_name == "Layout/TrailingWhitespace"
    assert error.message.startswith("PermissionError")


def test_writer_receives_the_source_encoding() -> None:
    writer = RecordingWriter()
    source = parse_text(Path("sample.py"), "# -*- coding: latin-1 -*-\ns = 'café'  \n", encoding="iso-8859-1")
    assert isinstance(source, ProcessedSource)

    Team(_cops("Layout/TrailingWhitespace"), Config(), RunOptions(autocorrect=True), writer=writer).inspect_file(source)

    assert writer.encodings == ["iso-8859-1"]
