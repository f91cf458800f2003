# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concrete formatters rendering run progress and offenses."""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Final

from rich.console import Console
from rich.text import Text

from .. import __version__
from ..models import Offense
from ..severity import Severity

SEVERITY_STYLES: Final[dict[Severity, str]] = {
    Severity.REFACTOR: "yellow",
    Severity.CONVENTION: "yellow",
    Severity.WARNING: "magenta",
    Severity.ERROR: "red",
    Severity.FATAL: "bold red",
}
CORRECTED_LABEL: Final[str] = "[Corrected] "


def display_path(path: Path) -> str:
    """Return ``path`` relative to the working directory when possible."""

    try:
        return path.resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def pluralize(count: int, noun: str) -> str:
    """Return ``"<count> <noun>"`` with a naive plural suffix."""

    suffix = "" if count == 1 else "s"
    return f"{count} {noun}{suffix}"


@dataclass(slots=True)
class RunSummary:
    """Counters accumulated while files are reported."""

    inspected: int = 0
    offenses: int = 0
    corrected: int = 0

    def add(self, offenses: Sequence[Offense]) -> None:
        self.inspected += 1
        self.offenses += len(offenses)
        self.corrected += sum(1 for offense in offenses if offense.corrected)

    def describe(self) -> str:
        text = f"{pluralize(self.inspected, 'file')} inspected, "
        text += f"{pluralize(self.offenses, 'offense') if self.offenses else 'no offenses'} detected"
        if self.corrected:
            text += f", {pluralize(self.corrected, 'offense')} corrected"
        return text


class BaseFormatter:
    """Formatter with no-op lifecycle hooks writing to a rich console."""

    def __init__(self, console: Console) -> None:
        """Create a formatter writing to ``console``.

        Args:
            console: Destination console (stdout or a file-backed console).
        """

        self.console = console
        self.summary = RunSummary()

    def started(self, files: Sequence[Path]) -> None:
        """Handle the start of a run over ``files``."""

    def file_started(self, path: Path, context: Mapping[str, Any]) -> None:
        """Handle the start of ``path``'s inspection."""

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        """Record ``offenses`` reported for ``path``."""

        self.summary.add(offenses)

    def finished(self, inspected: Sequence[Path]) -> None:
        """Handle the end of the run."""

    def _offense_line(self, offense: Offense, *, prefix: str = "") -> Text:
        text = Text(prefix)
        text.append(offense.severity.code, style=SEVERITY_STYLES[offense.severity])
        text.append(f": {offense.line:>3}:{offense.column + 1:>3}: ")
        if offense.corrected:
            text.append(CORRECTED_LABEL, style="green")
        text.append(offense.message)
        return text


class SimpleTextFormatter(BaseFormatter):
    """Print offenses grouped by file as each file finishes."""

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        super().file_finished(path, offenses)
        if offenses:
            self._report_file(path, offenses)

    def finished(self, inspected: Sequence[Path]) -> None:
        self.console.print()
        self.console.print(self.summary.describe(), highlight=False)

    def _report_file(self, path: Path, offenses: Sequence[Offense]) -> None:
        self.console.print(Text(f"== {display_path(path)} ==", style="cyan"))
        for offense in offenses:
            self.console.print(self._offense_line(offense), highlight=False)


class ProgressFormatter(SimpleTextFormatter):
    """Print one character per file, then the offenses at the end of the run."""

    def __init__(self, console: Console) -> None:
        super().__init__(console)
        self._reports: list[tuple[Path, tuple[Offense, ...]]] = []

    def started(self, files: Sequence[Path]) -> None:
        self.console.print(f"Inspecting {pluralize(len(files), 'file')}", highlight=False)

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        self.summary.add(offenses)
        if offenses:
            self._reports.append((path, tuple(offenses)))
        self.console.print(self._progress_mark(offenses), end="")

    def finished(self, inspected: Sequence[Path]) -> None:
        self.console.print()
        if self._reports:
            self.console.print()
            self.console.print("Offenses:")
            for path, offenses in self._reports:
                self.console.print()
                self._report_file(path, offenses)
        super().finished(inspected)

    @staticmethod
    def _progress_mark(offenses: Sequence[Offense]) -> Text:
        if not offenses:
            return Text(".", style="green")
        if all(offense.corrected for offense in offenses):
            return Text("_", style="green")
        worst = max(offense.severity for offense in offenses if not offense.corrected)
        return Text(worst.code, style=SEVERITY_STYLES[worst])


class EmacsStyleFormatter(BaseFormatter):
    """Print one ``path:line:column: S: message`` line per offense."""

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        super().file_finished(path, offenses)
        for offense in offenses:
            label = CORRECTED_LABEL if offense.corrected else ""
            line = (
                f"{path.as_posix()}:{offense.line}:{offense.column + 1}: "
                f"{offense.severity.code}: {label}{offense.message}"
            )
            self.console.print(line, highlight=False, markup=False, soft_wrap=True)


class FileListFormatter(BaseFormatter):
    """Print the path of every file that has offenses."""

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        super().file_finished(path, offenses)
        if offenses:
            self.console.print(path.as_posix(), highlight=False, markup=False, soft_wrap=True)


class OffenseCountFormatter(BaseFormatter):
    """Print how many offenses each cop reported, most frequent first."""

    def __init__(self, console: Console) -> None:
        super().__init__(console)
        self.counts: Counter[str] = Counter()

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        super().file_finished(path, offenses)
        self.counts.update(offense.cop_name for offense in offenses)

    def finished(self, inspected: Sequence[Path]) -> None:
        self.console.print()
        width = max((len(str(count)) for count in self.counts.values()), default=1)
        for cop_name, count in sorted(self.counts.items(), key=lambda item: (-item[1], item[0])):
            self.console.print(f"{count:<{width}}  {cop_name}", highlight=False, markup=False)
        self.console.print("--")
        self.console.print(f"{self.summary.offenses:<{width}}  Total", highlight=False)


@dataclass(slots=True)
class _JSONReport:
    files: list[dict[str, Any]] = field(default_factory=list)
    target_count: int = 0


class JSONFormatter(BaseFormatter):
    """Emit a single JSON document describing the whole run."""

    def __init__(self, console: Console) -> None:
        super().__init__(console)
        self._report = _JSONReport()

    def started(self, files: Sequence[Path]) -> None:
        self._report.target_count = len(files)

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        super().file_finished(path, offenses)
        self._report.files.append(
            {"path": display_path(path), "offenses": [offense.to_payload() for offense in offenses]},
        )

    def finished(self, inspected: Sequence[Path]) -> None:
        document = {
            "metadata": {
                "pycop_version": __version__,
                "generated_at": datetime.now(timezone.utc).isoformat(),
            },
            "files": self._report.files,
            "summary": {
                "target_file_count": self._report.target_count,
                "inspected_file_count": len(inspected),
                "offense_count": self.summary.offenses,
                "corrected_count": self.summary.corrected,
            },
        }
        self.console.print(json.dumps(document, indent=2), highlight=False, markup=False, soft_wrap=True)


FORMATTERS: Final[dict[str, type[BaseFormatter]]] = {
    "progress": ProgressFormatter,
    "simple": SimpleTextFormatter,
    "emacs": EmacsStyleFormatter,
    "json": JSONFormatter,
    "files": FileListFormatter,
    "offenses": OffenseCountFormatter,
}

__all__ = [
    "BaseFormatter",
    "EmacsStyleFormatter",
    "FORMATTERS",
    "FileListFormatter",
    "JSONFormatter",
    "OffenseCountFormatter",
    "ProgressFormatter",
    "RunSummary",
    "SimpleTextFormatter",
    "display_path",
]
