# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from pycop.models import Offense


@dataclass
class RecordingReporter:
    """Reporter double capturing every lifecycle call in order."""

    events: list[tuple[str, Any]] = field(default_factory=list)
    reported: dict[Path, tuple[Offense, ...]] = field(default_factory=dict)
    contexts: dict[Path, Mapping[str, Any]] = field(default_factory=dict)
    closed: bool = False

    def started(self, files: Sequence[Path]) -> None:
        self.events.append(("started", tuple(files)))

    def file_started(self, path: Path, context: Mapping[str, Any]) -> None:
        self.events.append(("file_started", path))
        self.contexts[path] = context

    def file_finished(self, path: Path, offenses: Sequence[Offense]) -> None:
        self.events.append(("file_finished", path))
        self.reported[path] = tuple(offenses)

    def finished(self, inspected: Sequence[Path]) -> None:
        self.events.append(("finished", tuple(inspected)))

    def close_output_files(self) -> None:
        self.events.append(("close_output_files", None))
        self.closed = True

    def event_names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def reporter() -> RecordingReporter:
    """Return a fresh recording reporter."""
    return RecordingReporter()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper writing text or bytes below ``tmp_path``."""

    def _write(relative: str, content: str | bytes) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write
