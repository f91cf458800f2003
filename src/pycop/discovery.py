# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate the files a run inspects."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from fnmatch import fnmatch
from pathlib import Path
from typing import Final

from .interfaces import ConfigStoreProtocol

PYTHON_SUFFIXES: Final[frozenset[str]] = frozenset({".py", ".pyi"})
ALWAYS_EXCLUDED_DIRS: Final[frozenset[str]] = frozenset(
    {
        ".git",
        ".hg",
        ".mypy_cache",
        ".tox",
        ".venv",
        "__pycache__",
        "build",
        "dist",
        "node_modules",
        "venv",
    },
)


class TargetNotFoundError(FileNotFoundError):
    """Raised when an explicitly requested path does not exist."""

    def __init__(self, path: Path) -> None:
        """Create the error for the missing ``path``.

        Args:
            path: Path supplied by the user that could not be found.
        """

        super().__init__(f"No such file or directory: {path}")
        self.path = path


class TargetFinder:
    """Expand paths into the ordered, de-duplicated list of target files."""

    def __init__(self, config_store: ConfigStoreProtocol) -> None:
        """Create a finder consulting ``config_store`` for exclusions.

        Args:
            config_store: Store resolving the configuration of each candidate.
        """

        self._config_store = config_store

    def find(self, paths: Sequence[Path]) -> tuple[Path, ...]:
        """Return target files for ``paths``.

        Explicit files are always kept. Directories are walked recursively in
        sorted order, collecting Python files that no exclusion matches. An
        empty ``paths`` sequence means the current directory.

        Args:
            paths: Files and directories supplied by the user.

        Returns:
            tuple[Path, ...]: Target files in inspection order.

        Raises:
            TargetNotFoundError: If a supplied path does not exist.
        """

        results: list[Path] = []
        seen: set[Path] = set()
        for raw in paths or (Path.cwd(),):
            path = Path(raw)
            if not path.exists():
                raise TargetNotFoundError(path)
            candidates = [path] if path.is_file() else self._walk(path)
            for candidate in candidates:
                resolved = candidate.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                results.append(resolved)
        return tuple(results)

    def _walk(self, directory: Path) -> Iterator[Path]:
        for entry in sorted(directory.iterdir()):
            if entry.is_dir():
                if entry.name not in ALWAYS_EXCLUDED_DIRS and not self._excluded(entry):
                    yield from self._walk(entry)
            elif entry.suffix in PYTHON_SUFFIXES and not self._excluded(entry):
                yield entry

    def _excluded(self, path: Path) -> bool:
        config = self._config_store.for_file(path if path.is_file() else path / "__init__.py")
        patterns = config.all_cops.exclude
        if not patterns:
            return False
        base = config.source.parent if config.source is not None else Path.cwd()
        try:
            relative = path.resolve().relative_to(base.resolve()).as_posix()
        except ValueError:
            relative = path.as_posix()
        return any(fnmatch(relative, pattern) or fnmatch(path.name, pattern) for pattern in patterns)


__all__ = ["ALWAYS_EXCLUDED_DIRS", "TargetFinder", "TargetNotFoundError"]
