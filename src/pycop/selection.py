# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cop selection policy and the per-session selection cache."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .config import Config
from .cops.base import Cop
from .options import RunOptions


def select_cops(catalog: Sequence[Cop], options: RunOptions, config: Config) -> tuple[Cop, ...]:
    """Return the cops active for ``config`` under ``options``.

    Args:
        catalog: Every known cop in catalog order.
        options: Run options carrying ``only``, ``lint`` and ``framework``.
        config: Configuration providing the framework-family toggle.

    Returns:
        tuple[Cop, ...]: Active cops in catalog order, possibly empty.
    """

    if options.only:
        return _select_with_only(catalog, options)
    return _select_standard(catalog, options, config)


def _select_with_only(catalog: Sequence[Cop], options: RunOptions) -> tuple[Cop, ...]:
    """Return cops named by ``--only`` plus every lint cop when ``--lint`` is set."""

    requested = set(options.only)
    return tuple(cop for cop in catalog if cop.name in requested or (options.lint and cop.lint))


def _select_standard(catalog: Sequence[Cop], options: RunOptions, config: Config) -> tuple[Cop, ...]:
    """Return the catalog minus framework cops (unless enabled), narrowed by ``--lint``."""

    run_framework = options.framework or config.all_cops.run_framework_cops
    selected = [cop for cop in catalog if run_framework or not cop.framework]
    if options.lint:
        selected = [cop for cop in selected if cop.lint]
    return tuple(selected)


def unknown_cop_names(catalog: Sequence[Cop], names: Sequence[str]) -> list[str]:
    """Return entries of ``names`` that do not match a catalog cop.

    Args:
        catalog: Every known cop.
        names: Cop names requested by the user.

    Returns:
        list[str]: Unknown names, de-duplicated in request order.
    """

    known = {cop.name for cop in catalog}
    return [name for name in dict.fromkeys(names) if name not in known]


@dataclass(slots=True)
class SelectionCache:
    """Memoise :func:`select_cops` per configuration object for one session.

    Entries are keyed by the identity of the configuration object, which the
    configuration store keeps alive for the whole session. Entries are never
    invalidated.
    """

    catalog: Sequence[Cop]
    options: RunOptions
    _entries: dict[int, tuple[Config, tuple[Cop, ...]]] = field(default_factory=dict, init=False, repr=False)

    def cops_for(self, config: Config) -> tuple[Cop, ...]:
        """Return the active cops for ``config``, computing them on first use.

        Args:
            config: Configuration governing the file being inspected.

        Returns:
            tuple[Cop, ...]: Cached active cops.
        """

        key = id(config)
        entry = self._entries.get(key)
        if entry is None:
            # The config is stored alongside the result so its id stays unique.
            entry = (config, select_cops(self.catalog, self.options, config))
            self._entries[key] = entry
        return entry[1]

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["SelectionCache", "select_cops", "unknown_cop_names"]
