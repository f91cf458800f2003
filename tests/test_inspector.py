# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the per-file convergence loop."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pycop.config import Config
from pycop.cops import default_registry
from pycop.inspector import RUNNER_ERROR_NAME, FileInspector
from pycop.models import PARSER_COP_NAME, CopError, Location, Offense
from pycop.options import RunOptions
from pycop.severity import Severity
from pycop.source import ParseFailure, ParseResult, ProcessedSource, parse_file
from pycop.team import Team, TeamReport, write_source


def _offense(line: int, *, corrected: bool = False, severity: Severity = Severity.CONVENTION) -> Offense:
    return Offense(
        severity=severity,
        location=Location(line=line, column=0),
        message=f"Problem on line {line}.",
        cop_name="Style/Scripted",
        corrected=corrected,
    )


class ScriptedProcessor:
    """Return queued parse results, repeating the last one."""

    def __init__(self, results: Sequence[ParseResult]) -> None:
        self._results = list(results)
        self.calls = 0

    def __call__(self, path: Path) -> ParseResult:
        self.calls += 1
        if len(self._results) > 1:
            return self._results.pop(0)
        return self._results[0]


class ScriptedTeam:
    def __init__(self, report: TeamReport, errors: Sequence[CopError] = ()) -> None:
        self._report = report
        self._errors = tuple(errors)

    @property
    def errors(self) -> tuple[CopError, ...]:
        return self._errors

    def inspect_file(self, source: ProcessedSource) -> TeamReport:
        return self._report


class ScriptedTeamFactory:
    """Hand out one scripted team per round, repeating the last one."""

    def __init__(self, teams: Sequence[ScriptedTeam]) -> None:
        self._teams = list(teams)
        self.rounds = 0

    def __call__(self, path: Path) -> ScriptedTeam:
        self.rounds += 1
        if len(self._teams) > 1:
            return self._teams.pop(0)
        return self._teams[0]


def _source(path: Path) -> ProcessedSource:
    return ProcessedSource(path=path, text="x = 1\n")


def test_parse_failure_short_circuits_without_running_cops(tmp_path: Path, reporter) -> None:
    path = tmp_path / "bad.py"
    factory = ScriptedTeamFactory([ScriptedTeam(TeamReport(offenses=(_offense(1),)))])
    processor = ScriptedProcessor([ParseFailure(path=path, message="invalid byte sequence in utf-8")])
    inspector = FileInspector(processor, factory, reporter, errors={})

    offenses = inspector.inspect(path)

    assert factory.rounds == 0
    assert len(offenses) == 1
    fatal = offenses[0]
    assert (fatal.severity, fatal.line, fatal.column, fatal.cop_name) == (Severity.FATAL, 1, 0, PARSER_COP_NAME)
    assert reporter.event_names() == ["file_started", "file_finished"]
    assert reporter.reported[path] == (fatal,)
    assert reporter.contexts[path] == {"offenses": (fatal,)}


def test_single_round_without_update(tmp_path: Path, reporter) -> None:
    path = tmp_path / "a.py"
    factory = ScriptedTeamFactory([ScriptedTeam(TeamReport(offenses=(_offense(3), _offense(1))))])
    processor = ScriptedProcessor([_source(path)])
    inspector = FileInspector(processor, factory, reporter, errors={})

    offenses = inspector.inspect(path)

    assert [offense.line for offense in offenses] == [1, 3]
    assert processor.calls == 1
    assert factory.rounds == 1


def test_convergence_keeps_corrected_and_drops_stale_offenses(tmp_path: Path, reporter) -> None:
    path = tmp_path / "a.py"
    factory = ScriptedTeamFactory(
        [
            ScriptedTeam(TeamReport(offenses=(_offense(1, corrected=True), _offense(2)), updated=True)),
            ScriptedTeam(TeamReport(offenses=(_offense(4, corrected=True),), updated=True)),
            ScriptedTeam(TeamReport(offenses=(_offense(5),))),
        ],
    )
    processor = ScriptedProcessor([_source(path)])
    inspector = FileInspector(processor, factory, reporter, errors={})

    offenses = inspector.inspect(path)

    # Line 2 was uncorrected in round one and not re-detected afterwards.
    assert [(offense.line, offense.corrected) for offense in offenses] == [(1, True), (4, True), (5, False)]
    assert factory.rounds == 3
    assert processor.calls == 3


def test_redetected_offense_is_not_duplicated(tmp_path: Path, reporter) -> None:
    path = tmp_path / "a.py"
    factory = ScriptedTeamFactory(
        [
            ScriptedTeam(TeamReport(offenses=(_offense(1, corrected=True),), updated=True)),
            ScriptedTeam(TeamReport(offenses=(_offense(1), _offense(2)))),
        ],
    )
    inspector = FileInspector(ScriptedProcessor([_source(path)]), factory, reporter, errors={})

    offenses = inspector.inspect(path)

    assert [(offense.line, offense.corrected) for offense in offenses] == [(1, True), (2, False)]


def test_reparse_failure_appends_fatal_and_stops(tmp_path: Path, reporter) -> None:
    path = tmp_path / "a.py"
    factory = ScriptedTeamFactory([ScriptedTeam(TeamReport(offenses=(_offense(2, corrected=True),), updated=True))])
    failure = ParseFailure(path=path, message="source code string cannot contain null bytes")
    processor = ScriptedProcessor([_source(path), failure])
    inspector = FileInspector(processor, factory, reporter, errors={})

    offenses = inspector.inspect(path)

    assert factory.rounds == 1
    assert [(offense.cop_name, offense.line) for offense in offenses] == [(PARSER_COP_NAME, 1), ("Style/Scripted", 2)]
    assert offenses[0].severity is Severity.FATAL


def test_team_errors_are_accumulated_per_file(tmp_path: Path, reporter) -> None:
    path = tmp_path / "a.py"
    error = CopError(cop_name="Style/Broken", path=path, message="RuntimeError: boom")
    factory = ScriptedTeamFactory([ScriptedTeam(TeamReport(offenses=()), errors=[error])])
    errors: dict[Path, list[CopError]] = {}
    inspector = FileInspector(ScriptedProcessor([_source(path)]), factory, reporter, errors=errors)

    assert inspector.inspect(path) == []
    assert errors == {path: [error]}


def test_max_iterations_bounds_a_file_that_never_settles(tmp_path: Path, reporter) -> None:
    path = tmp_path / "a.py"
    factory = ScriptedTeamFactory([ScriptedTeam(TeamReport(offenses=(_offense(1, corrected=True),), updated=True))])
    errors: dict[Path, list[CopError]] = {}
    inspector = FileInspector(ScriptedProcessor([_source(path)]), factory, reporter, errors=errors, max_iterations=3)

    offenses = inspector.inspect(path)

    assert factory.rounds == 3
    assert offenses == [_offense(1)]
    assert [error.cop_name for error in errors[path]] == [RUNNER_ERROR_NAME]
    assert "3 inspection rounds" in errors[path][0].message


def test_real_team_converges_after_multiple_corrections(write_file, reporter) -> None:
    path = write_file("a.py", "if True:\n\tx = 1  \n\n\n")
    registry = default_registry()
    names = ("Layout/TabIndentation", "Layout/TrailingWhitespace", "Layout/TrailingBlankLines")
    cops = [registry[name] for name in names]
    options = RunOptions(autocorrect=True)
    inspector = FileInspector(parse_file, lambda _path: Team(cops, Config(), options), reporter, errors={})

    offenses = inspector.inspect(path)

    assert path.read_text(encoding="utf-8") == "if True:\n    x = 1\n"
    assert all(offense.corrected for offense in offenses)
    assert sorted(offense.cop_name for offense in offenses) == [
        "Layout/TabIndentation",
        "Layout/TrailingBlankLines",
        "Layout/TrailingWhitespace",
    ]


def _autocorrecting_inspector(reporter, names: Sequence[str], writes: list[Path] | None = None) -> FileInspector:
    registry = default_registry()
    cops = [registry[name] for name in names]
    options = RunOptions(autocorrect=True)

    def writer(path: Path, text: str, encoding: str) -> None:
        if writes is not None:
            writes.append(path)
        write_source(path, text, encoding)

    return FileInspector(parse_file, lambda _path: Team(cops, Config(), options, writer=writer), reporter, errors={})


def test_converged_file_is_a_fixed_point(write_file, reporter) -> None:
    path = write_file("a.py", "if value == None:\n\tx = (y) != None  \n\n\n")
    names = [cop.name for cop in default_registry().cops() if cop.supports_autocorrect]

    first = _autocorrecting_inspector(reporter, names).inspect(path)
    converged = path.read_text(encoding="utf-8")
    writes: list[Path] = []
    second = _autocorrecting_inspector(reporter, names, writes).inspect(path)

    assert converged == "if value is None:\n    x = (y) is not None\n"
    assert first and all(offense.corrected for offense in first)
    assert second == []
    assert writes == []
    assert path.read_text(encoding="utf-8") == converged


def test_correction_preserves_declared_encoding(write_file, reporter) -> None:
    path = write_file("latin.py", b"# -*- coding: latin-1 -*-\ns = 'caf\xe9'  \n")

    offenses = _autocorrecting_inspector(reporter, ["Layout/TrailingWhitespace"]).inspect(path)

    assert path.read_bytes() == b"# -*- coding: latin-1 -*-\ns = 'caf\xe9'\n"
    assert [offense.corrected for offense in offenses] == [True]


def test_correction_keeps_utf8_byte_order_mark(write_file, reporter) -> None:
    path = write_file("bom.py", b"\xef\xbb\xbfs = 'caf\xc3\xa9'  \n")

    _autocorrecting_inspector(reporter, ["Layout/TrailingWhitespace"]).inspect(path)

    assert path.read_bytes() == b"\xef\xbb\xbfs = 'caf\xc3\xa9'\n"


def test_parenthesized_comparison_converges_to_valid_source(write_file, reporter) -> None:
    path = write_file("paren.py", "ok = (x) == None\n")

    offenses = _autocorrecting_inspector(reporter, ["Style/ComparisonToNone"]).inspect(path)

    assert path.read_text(encoding="utf-8") == "ok = (x) is None\n"
    assert [(offense.cop_name, offense.corrected) for offense in offenses] == [("Style/ComparisonToNone", True)]
