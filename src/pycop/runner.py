# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run session: inspect target files in order and aggregate pass/fail."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from .cops import default_registry
from .cops.base import Cop
from .discovery import TargetFinder
from .inspector import FileInspector
from .interfaces import ConfigStoreProtocol, RunReporter, SourceProcessor, TargetFinderProtocol
from .models import CopError, FileReport
from .options import RunOptions
from .reporting import build_formatter_set
from .selection import SelectionCache
from .severity import Severity
from .source import parse_file
from .team import SourceWriter, Team, write_source


class Runner:
    """Drive one inspection session over a sequence of paths.

    The runner owns the session state: the cop selection cache, the
    accumulator of cop failures, and the abort flag. Files are inspected
    strictly in the order the target finder returns them.
    """

    def __init__(
        self,
        options: RunOptions,
        config_store: ConfigStoreProtocol,
        *,
        catalog: Sequence[Cop] | None = None,
        target_finder: TargetFinderProtocol | None = None,
        process: SourceProcessor = parse_file,
        reporter: RunReporter | None = None,
        writer: SourceWriter = write_source,
        debug_logger: Callable[[str], None] | None = None,
    ) -> None:
        """Create a runner for ``options`` and ``config_store``.

        Args:
            options: Run options for the session.
            config_store: Store resolving the configuration of each file.
            catalog: Cops to select from; the built-in catalog by default.
            target_finder: Finder expanding paths into files.
            process: Source processor parsing each file.
            reporter: Reporter receiving lifecycle events; built from
                ``options.formatters`` when omitted.
            writer: Callable persisting corrected file content.
            debug_logger: Sink for debug tracing enabled by ``options.debug``.
        """

        self._options = options
        self._config_store = config_store
        catalog_cops = tuple(catalog) if catalog is not None else default_registry().cops()
        self._selection = SelectionCache(catalog=catalog_cops, options=options)
        self._target_finder = target_finder or TargetFinder(config_store)
        self._process = process
        self._reporter = reporter
        self._writer = writer
        self._debug_logger = debug_logger
        self._errors: dict[Path, list[CopError]] = {}
        self._aborting = False

    @property
    def errors(self) -> Mapping[Path, list[CopError]]:
        """Return cop failures recorded during the session, keyed by file."""

        return self._errors

    @property
    def aborting(self) -> bool:
        """Return ``True`` once :meth:`abort` has been requested."""

        return self._aborting

    @property
    def fail_level(self) -> Severity:
        """Return the minimum severity that fails the run."""

        return self._options.fail_level

    def abort(self) -> None:
        """Stop the run at the next file boundary.

        Safe to call from a signal handler; the file currently being inspected
        is finished and reported before the run stops.
        """

        self._aborting = True

    def run(self, paths: Sequence[Path]) -> bool:
        """Inspect the files designated by ``paths``.

        Args:
            paths: Files and directories supplied by the user.

        Returns:
            bool: ``True`` when no inspected file has an offense at or above
            the fail level.

        Raises:
            ReportingSetupError: If the formatters cannot be created; raised
                before any file is inspected.
            TargetNotFoundError: If a supplied path does not exist.
        """

        target_files = self._target_finder.find(paths)
        reporter = self._reporter or build_formatter_set(self._options.formatters, color=self._options.color)
        inspector = FileInspector(
            self._process,
            self._build_team,
            reporter,
            errors=self._errors,
            max_iterations=self._options.max_iterations,
        )
        inspected: list[Path] = []
        all_passed = True
        try:
            reporter.started(target_files)
            for path in target_files:
                if self._aborting:
                    self._debug("run aborted")
                    break
                self._debug(f"Scanning {path}")
                report = FileReport(path=path, offenses=tuple(inspector.inspect(path)))
                if report.failed(self.fail_level):
                    all_passed = False
                inspected.append(path)
                if self._options.fail_fast and not all_passed:
                    self._debug(f"fail_fast triggered by {path}")
                    break
            reporter.finished(tuple(inspected))
        finally:
            reporter.close_output_files()
        return all_passed

    def _build_team(self, path: Path) -> Team:
        """Return a team for ``path`` using the cops selected for its configuration."""

        config = self._config_store.for_file(path)
        return Team(self._selection.cops_for(config), config, self._options, writer=self._writer)

    def _debug(self, message: str) -> None:
        if self._options.debug and self._debug_logger is not None:
            self._debug_logger(message)


__all__ = ["Runner"]
