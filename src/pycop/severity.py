# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels ordered from lowest to highest impact."""

    REFACTOR = "refactor"
    CONVENTION = "convention"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def rank(self) -> int:
        """Return the position of the level within the total ordering.

        Returns:
            int: Zero for :attr:`REFACTOR` up to four for :attr:`FATAL`.
        """

        return _SEVERITY_RANK[self]

    @property
    def code(self) -> str:
        """Return the single-letter code used by compact output formats.

        Returns:
            str: Upper-case letter identifying the severity.
        """

        return self.value[0].upper()

    # str already defines the rich comparisons, so all four are overridden.
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Severity | str) -> Severity:
        """Return the severity named by ``value``.

        Args:
            value: Severity instance, level name, or single-letter code.

        Returns:
            Severity: Matching severity level.

        Raises:
            ValueError: If ``value`` does not name a known severity.
        """

        if isinstance(value, Severity):
            return value
        token = str(value).strip().lower()
        if token in _CODE_LOOKUP:
            return _CODE_LOOKUP[token]
        try:
            return cls(token)
        except ValueError as exc:
            choices = ", ".join(level.value for level in cls)
            raise ValueError(f"unknown severity '{value}' (expected one of: {choices})") from exc


_SEVERITY_RANK: Final[dict[Severity, int]] = {level: index for index, level in enumerate(Severity)}
_CODE_LOOKUP: Final[dict[str, Severity]] = {level.value[0]: level for level in Severity}

DEFAULT_FAIL_LEVEL: Final[Severity] = Severity.REFACTOR

__all__ = ["DEFAULT_FAIL_LEVEL", "Severity"]
