# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-file inspection driving the auto-correction convergence loop."""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from pathlib import Path
from typing import Final

from .interfaces import FileReporter, SourceProcessor, TeamProtocol
from .models import CopError, Offense, sort_offenses
from .source import ParseFailure, ProcessedSource, fatal_offense

RUNNER_ERROR_NAME: Final[str] = "Runner"

TeamFactory = Callable[[Path], TeamProtocol]
ErrorAccumulator = MutableMapping[Path, list[CopError]]


class FileInspector:
    """Produce the final, de-duplicated offenses for one file at a time.

    The inspector parses the file and lets a team inspect it. When the team
    rewrites the file, the new content is parsed again and inspected again,
    until a round leaves the file untouched or the rewritten content can no
    longer be parsed.
    """

    def __init__(
        self,
        process: SourceProcessor,
        team_factory: TeamFactory,
        reporter: FileReporter,
        *,
        errors: ErrorAccumulator,
        max_iterations: int | None = None,
    ) -> None:
        """Create an inspector bound to its collaborators.

        Args:
            process: Source processor used for the initial parse and re-parses.
            team_factory: Callable building a team for the file of each round.
            reporter: Receives ``file_started`` / ``file_finished`` events.
            errors: Session-wide accumulator of cop failures keyed by file.
            max_iterations: Optional bound on inspection rounds per file; ``None``
                means the loop runs until the file stops changing.
        """

        self._process = process
        self._team_factory = team_factory
        self._reporter = reporter
        self._errors = errors
        self._max_iterations = max_iterations

    def inspect(self, path: Path) -> list[Offense]:
        """Inspect ``path`` and report its final offenses.

        Args:
            path: File to inspect.

        Returns:
            list[Offense]: Final offenses in deterministic order.
        """

        parsed = self._process(path)
        if isinstance(parsed, ParseFailure):
            offenses = [fatal_offense(parsed)]
            self._reporter.file_started(path, {"offenses": tuple(offenses)})
            self._reporter.file_finished(path, tuple(offenses))
            return offenses

        self._reporter.file_started(path, {"disabled_ranges": parsed.disabled_ranges})
        offenses = sort_offenses(self._converge(path, parsed))
        self._reporter.file_finished(path, tuple(offenses))
        return offenses

    def _converge(self, path: Path, source: ProcessedSource) -> list[Offense]:
        """Run inspection rounds until the file stops changing.

        Args:
            path: File being inspected.
            source: Initial processed source.

        Returns:
            list[Offense]: Accumulated offenses, unsorted.
        """

        offenses: list[Offense] = []
        iterations = 0
        while True:
            iterations += 1
            if self._max_iterations is not None and iterations > self._max_iterations:
                message = f"Infinite loop detected: file still changing after {self._max_iterations} inspection rounds"
                self._record(path, CopError(cop_name=RUNNER_ERROR_NAME, path=path, message=message))
                break
            # Uncorrected offenses are re-detected by this round when still present.
            offenses = [offense for offense in offenses if offense.corrected]
            new_offenses, updated = self._inspect_round(path, source)
            for offense in new_offenses:
                if offense not in offenses:
                    offenses.append(offense)
            if not updated:
                break
            reparsed = self._process(path)
            if isinstance(reparsed, ParseFailure):
                offenses.append(fatal_offense(reparsed))
                break
            source = reparsed
        return offenses

    def _inspect_round(self, path: Path, source: ProcessedSource) -> tuple[tuple[Offense, ...], bool]:
        team = self._team_factory(path)
        report = team.inspect_file(source)
        for error in team.errors:
            self._record(path, error)
        return report.offenses, report.updated

    def _record(self, path: Path, error: CopError) -> None:
        self._errors.setdefault(path, []).append(error)


__all__ = ["ErrorAccumulator", "FileInspector", "RUNNER_ERROR_NAME", "TeamFactory"]
