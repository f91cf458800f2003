# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the pycop package."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field

from .severity import Severity

PARSER_COP_NAME: Final[str] = "Parser"


class Location(BaseModel):
    """Position of an offense within a source file."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    column: int = Field(ge=0)
    source_line: str = ""


class Offense(BaseModel):
    """Single finding reported by a cop or by the source processor.

    Offenses are immutable once emitted. Correcting an offense produces a new
    instance through :meth:`mark_corrected`; equality and hashing ignore the
    ``corrected`` flag so that a corrected offense and a re-detected one are
    treated as the same finding.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    location: Location
    message: str
    cop_name: str
    corrected: bool = False

    @property
    def line(self) -> int:
        """Return the 1-based line number of the offense."""

        return self.location.line

    @property
    def column(self) -> int:
        """Return the 0-based column of the offense."""

        return self.location.column

    @property
    def identity(self) -> tuple[Severity, int, int, str, str]:
        """Return the structural identity used for deduplication.

        Returns:
            tuple[Severity, int, int, str, str]: Severity, line, column,
            message and cop name.
        """

        return (self.severity, self.line, self.column, self.message, self.cop_name)

    def sort_key(self) -> tuple[int, int, int, str, str, bool]:
        """Return the key implementing the deterministic offense ordering.

        Offenses sort by line, then column, then severity (lowest first), then
        cop name and message. The corrected flag is the final tie-break.

        Returns:
            tuple[int, int, int, str, str, bool]: Sort key for :func:`sorted`.
        """

        return (self.line, self.column, self.severity.rank, self.cop_name, self.message, self.corrected)

    def mark_corrected(self) -> Offense:
        """Return a copy of the offense flagged as corrected.

        Returns:
            Offense: New offense with ``corrected`` set to ``True``.
        """

        if self.corrected:
            return self
        return self.model_copy(update={"corrected": True})

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable mapping describing the offense."""

        return {
            "severity": self.severity.value,
            "message": self.message,
            "cop_name": self.cop_name,
            "corrected": self.corrected,
            "location": {"line": self.line, "column": self.column},
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Offense):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


def sort_offenses(offenses: list[Offense] | tuple[Offense, ...]) -> list[Offense]:
    """Return ``offenses`` ordered by :meth:`Offense.sort_key`.

    Args:
        offenses: Offenses accumulated for a single file.

    Returns:
        list[Offense]: New list in deterministic order.
    """

    return sorted(offenses, key=Offense.sort_key)


@dataclass(frozen=True, slots=True)
class CopError:
    """Internal failure of a cop while inspecting or correcting a file."""

    cop_name: str
    path: Path
    message: str

    def describe(self) -> str:
        """Return a one-line description suitable for console output."""

        return f"An error occurred while {self.cop_name} cop was inspecting {self.path}: {self.message}"


@dataclass(frozen=True, slots=True)
class FileReport:
    """Final offenses reported for a single inspected file."""

    path: Path
    offenses: tuple[Offense, ...]

    def failed(self, fail_level: Severity) -> bool:
        """Return ``True`` when any offense reaches ``fail_level``.

        Args:
            fail_level: Minimum severity considered a failure.

        Returns:
            bool: ``True`` if the file fails under ``fail_level``.
        """

        return any(offense.severity >= fail_level for offense in self.offenses)


__all__ = [
    "PARSER_COP_NAME",
    "CopError",
    "FileReport",
    "Location",
    "Offense",
    "sort_offenses",
]
