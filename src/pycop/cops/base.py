# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cop definitions and the registry holding the cop catalog."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Final

from ..config import CopConfig
from ..source import ProcessedSource
from ..severity import Severity

LINT_DEPARTMENT: Final[str] = "Lint"
FRAMEWORK_DEPARTMENT: Final[str] = "Framework"


@dataclass(frozen=True, slots=True)
class Finding:
    """Raw finding yielded by a cop before it becomes an offense."""

    line: int
    column: int
    message: str


@dataclass(frozen=True, slots=True)
class CopContext:
    """Inputs handed to a cop's check and correct callables."""

    source: ProcessedSource
    config: CopConfig


Position = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Correction:
    """Corrected file content and the finding positions the rewrite resolved.

    Attributes:
        text: Full file content after the correction.
        fixed: ``(line, column)`` positions of the findings that no longer apply.
    """

    text: str
    fixed: frozenset[Position] = frozenset()


CheckFn = Callable[[CopContext], Iterable[Finding]]
CorrectFn = Callable[[str, CopConfig], Correction]


@dataclass(frozen=True, slots=True)
class Cop:
    """Independent detector, optionally able to correct what it detects.

    Attributes:
        name: Qualified name in ``Department/CopName`` form.
        description: One-line summary shown by ``--show-cops``.
        check: Callable yielding findings for a parsed source.
        severity: Default severity of the offenses it reports.
        correct: Optional callable returning a :class:`Correction`.
        requires_ast: ``True`` when ``check`` needs a parsed syntax tree.
    """

    name: str
    description: str
    check: CheckFn
    severity: Severity = Severity.CONVENTION
    correct: CorrectFn | None = None
    requires_ast: bool = False

    @property
    def department(self) -> str:
        """Return the department prefix of the cop name."""

        return self.name.split("/", 1)[0]

    @property
    def lint(self) -> bool:
        """Return ``True`` for cops classified as lint cops."""

        return self.department == LINT_DEPARTMENT

    @property
    def framework(self) -> bool:
        """Return ``True`` for cops belonging to the framework family."""

        return self.department == FRAMEWORK_DEPARTMENT

    @property
    def supports_autocorrect(self) -> bool:
        """Return ``True`` when the cop can rewrite the file it inspects."""

        return self.correct is not None


class CopRegistry(Mapping[str, Cop]):
    """Ordered, read-only mapping of cop names to :class:`Cop` values."""

    def __init__(self, cops: Iterable[Cop] = ()) -> None:
        """Create a registry pre-populated with ``cops``.

        Args:
            cops: Cops registered in the given order.
        """

        self._cops: dict[str, Cop] = {}
        for cop in cops:
            self.register(cop)

    def register(self, cop: Cop) -> None:
        """Register ``cop`` enforcing uniqueness by name.

        Args:
            cop: Cop to add to the catalog.

        Raises:
            ValueError: If a cop with the same name is already registered.
        """

        if cop.name in self._cops:
            raise ValueError(f"Cop '{cop.name}' already registered")
        self._cops[cop.name] = cop

    def cops(self) -> tuple[Cop, ...]:
        """Return every registered cop in registration order."""

        return tuple(self._cops.values())

    def __len__(self) -> int:
        return len(self._cops)

    def __iter__(self) -> Iterator[str]:
        return iter(self._cops)

    def __getitem__(self, name: str) -> Cop:
        return self._cops[name]


__all__ = [
    "CheckFn",
    "Cop",
    "CopContext",
    "CopRegistry",
    "CorrectFn",
    "Correction",
    "Finding",
    "Position",
]
