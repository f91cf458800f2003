# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run the active cops against one parsed source for a single round."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .config import Config, CopConfig
from .cops.base import Cop, CopContext, Finding, Position
from .models import CopError, Location, Offense
from .options import RunOptions
from .severity import Severity
from .source import DEFAULT_ENCODING, ProcessedSource

SYNTAX_COP_NAME: Final[str] = "Lint/Syntax"

SourceWriter = Callable[[Path, str, str], None]


def write_source(path: Path, text: str, encoding: str = DEFAULT_ENCODING) -> None:
    """Write corrected ``text`` back to ``path`` in its original ``encoding``.

    Line endings are written untouched and a ``utf-8-sig`` source keeps its
    byte order mark.
    """

    with path.open("w", encoding=encoding, newline="") as handle:
        handle.write(text)


@dataclass(frozen=True, slots=True)
class TeamReport:
    """Offenses found in one round and whether the file was rewritten."""

    offenses: tuple[Offense, ...]
    updated: bool = False


@dataclass(frozen=True, slots=True)
class _CopResult:
    cop: Cop
    config: CopConfig
    offenses: tuple[Offense, ...]


@dataclass(frozen=True, slots=True)
class _AppliedCorrection:
    cop_name: str
    fixed: frozenset[Position]


def syntax_offense(source: ProcessedSource) -> Offense:
    """Return the offense describing the syntax error held by ``source``.

    Args:
        source: Processed source whose :attr:`ProcessedSource.syntax_error` is set.

    Returns:
        Offense: Error-level offense attributed to ``Lint/Syntax``.
    """

    error = source.syntax_error
    line = max(error.lineno or 1, 1) if error is not None else 1
    column = max((error.offset or 1) - 1, 0) if error is not None else 0
    message = error.msg if error is not None else "invalid syntax"
    return Offense(
        severity=Severity.ERROR,
        location=Location(line=line, column=column, source_line=_source_line(source, line)),
        message=f"{message[:1].upper()}{message[1:]}.",
        cop_name=SYNTAX_COP_NAME,
    )


def _source_line(source: ProcessedSource, line: int) -> str:
    lines = source.lines
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""


class Team:
    """Aggregate execution of the active cops for one round.

    A team is built for every round. :meth:`inspect_file` runs each enabled
    cop, and when auto-correction is requested applies the correction of the
    first cop able to change the file, writing the result to disk. Only the
    offenses that correction resolved are marked as corrected.
    """

    def __init__(
        self,
        cops: Sequence[Cop],
        config: Config,
        options: RunOptions,
        *,
        writer: SourceWriter = write_source,
    ) -> None:
        """Create a team for ``cops`` under ``config`` and ``options``.

        Args:
            cops: Active cops selected for the configuration.
            config: Configuration governing the inspected file.
            options: Run options; ``autocorrect`` enables rewriting.
            writer: Callable persisting corrected content in a given encoding.
        """

        self._cops = tuple(cops)
        self._config = config
        self._options = options
        self._writer = writer
        self._errors: list[CopError] = []

    @property
    def errors(self) -> tuple[CopError, ...]:
        """Return cop failures raised during the last :meth:`inspect_file` call."""

        return tuple(self._errors)

    def inspect_file(self, source: ProcessedSource) -> TeamReport:
        """Run the cops against ``source`` and optionally correct the file.

        Args:
            source: Parsed content of the file for this round.

        Returns:
            TeamReport: Offenses for the round and the rewrite flag.
        """

        self._errors = []
        if not source.valid_syntax:
            return TeamReport(offenses=(syntax_offense(source),))

        results = [result for cop in self._cops if (result := self._run_cop(cop, source)) is not None]
        applied = self._autocorrect(source, results) if self._options.autocorrect else None
        offenses: list[Offense] = []
        for result in results:
            if applied is not None and result.cop.name == applied.cop_name:
                offenses.extend(_mark_fixed(result.offenses, applied.fixed))
            else:
                offenses.extend(result.offenses)
        return TeamReport(offenses=tuple(offenses), updated=applied is not None)

    def _run_cop(self, cop: Cop, source: ProcessedSource) -> _CopResult | None:
        """Return the offenses reported by ``cop`` or ``None`` when it is skipped or fails."""

        cop_config = self._config.for_cop(cop.name)
        if not cop_config.enabled:
            return None
        if cop.requires_ast and source.tree is None:
            return None
        context = CopContext(source=source, config=cop_config)
        try:
            findings = list(cop.check(context))
        except Exception as exc:  # cop failures are recorded rather than aborting the file
            self._record(cop, source, exc)
            return None
        severity = cop_config.severity or cop.severity
        offenses = tuple(
            self._build_offense(cop, severity, finding, source)
            for finding in findings
            if not source.line_disabled(cop.name, finding.line)
        )
        return _CopResult(cop=cop, config=cop_config, offenses=offenses)

    def _build_offense(self, cop: Cop, severity: Severity, finding: Finding, source: ProcessedSource) -> Offense:
        line = max(finding.line, 1)
        return Offense(
            severity=severity,
            location=Location(line=line, column=max(finding.column, 0), source_line=_source_line(source, line)),
            message=finding.message,
            cop_name=cop.name,
        )

    def _autocorrect(self, source: ProcessedSource, results: Sequence[_CopResult]) -> _AppliedCorrection | None:
        """Apply the first effective correction and describe what it fixed.

        A correction that cannot be written leaves the file untouched and is
        recorded as an error of the correcting cop.
        """

        for result in results:
            cop = result.cop
            if not result.offenses or cop.correct is None:
                continue
            try:
                correction = cop.correct(source.text, result.config)
            except Exception as exc:  # cop failures are recorded rather than aborting the file
                self._record(cop, source, exc)
                continue
            if correction.text == source.text:
                continue
            try:
                self._writer(source.path, correction.text, source.encoding)
            except (OSError, UnicodeEncodeError) as exc:
                self._record(cop, source, exc)
                return None
            return _AppliedCorrection(cop_name=cop.name, fixed=correction.fixed)
        return None

    def _record(self, cop: Cop, source: ProcessedSource, exc: Exception) -> None:
        self._errors.append(CopError(cop_name=cop.name, path=source.path, message=_describe(exc)))


def _mark_fixed(offenses: Sequence[Offense], fixed: frozenset[Position]) -> list[Offense]:
    return [
        offense.mark_corrected() if (offense.location.line, offense.location.column) in fixed else offense
        for offense in offenses
    ]


def _describe(exc: Exception) -> str:
    detail = str(exc)
    return f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__


__all__ = ["SYNTAX_COP_NAME", "SourceWriter", "Team", "TeamReport", "syntax_offense", "write_source"]
