# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Collaborator contracts consumed by the inspector and the runner."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .config import Config
    from .models import CopError, Offense
    from .source import ParseResult, ProcessedSource
    from .team import TeamReport


@runtime_checkable
class SourceProcessor(Protocol):
    """Parse a file into a processed source or a parse failure."""

    def __call__(self, path: Path) -> ParseResult:
        """Return the parse result for ``path``.

        Args:
            path: File to parse.

        Returns:
            ParseResult: Processed source or :class:`ParseFailure`.
        """
        raise NotImplementedError


@runtime_checkable
class TeamProtocol(Protocol):
    """Run the active cops against one processed source."""

    @property
    @abstractmethod
    def errors(self) -> Sequence[CopError]:
        """Return cop failures raised during the last inspection."""
        raise NotImplementedError

    @abstractmethod
    def inspect_file(self, source: ProcessedSource) -> TeamReport:
        """Return offenses for ``source`` and whether the file was rewritten.

        Args:
            source: Parsed content of the file for this round.

        Returns:
            TeamReport: Offenses and rewrite flag.
        """
        raise NotImplementedError


@runtime_checkable
class ConfigStoreProtocol(Protocol):
    """Resolve the configuration governing a file."""

    @abstractmethod
    def for_file(self, path: Path) -> Config:
        """Return the configuration for ``path``."""
        raise NotImplementedError


@runtime_checkable
class TargetFinderProtocol(Protocol):
    """Expand user-supplied paths into the ordered list of target files."""

    @abstractmethod
    def find(self, paths: Sequence[Path]) -> tuple[Path, ...]:
        """Return de-duplicated target files in inspection order."""
        raise NotImplementedError


@runtime_checkable
class FileReporter(Protocol):
    """Per-file lifecycle notifications used by the file inspector."""

    @abstractmethod
    def file_started(self, path: Path, context: Mapping[str, Any]) -> None:
        """Notify that inspection of ``path`` begins."""
        raise NotImplementedError

    @abstractmethod
    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        """Deliver the final, sorted offenses of ``path``."""
        raise NotImplementedError


@runtime_checkable
class RunReporter(FileReporter, Protocol):
    """Full reporting lifecycle driven by the runner."""

    @abstractmethod
    def started(self, files: Sequence[Path]) -> None:
        """Notify that the run begins with ``files`` as targets."""
        raise NotImplementedError

    @abstractmethod
    def finished(self, inspected: Sequence[Path]) -> None:
        """Notify that the run ended after inspecting ``inspected``."""
        raise NotImplementedError

    @abstractmethod
    def close_output_files(self) -> None:
        """Release output resources held by the reporter."""
        raise NotImplementedError


__all__ = [
    "ConfigStoreProtocol",
    "FileReporter",
    "RunReporter",
    "SourceProcessor",
    "TargetFinderProtocol",
    "TeamProtocol",
]
