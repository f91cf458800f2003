# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Framework cops targeting web-framework projects.

These cops only run when enabled through ``--framework`` or the
``all_cops.run_framework_cops`` configuration toggle.
"""

from __future__ import annotations

import ast
from collections.abc import Iterator
from typing import Final

from ..severity import Severity
from .base import Cop, CopContext, Finding

_RAW_SQL_METHODS: Final[frozenset[str]] = frozenset({"raw", "extra"})


def check_raw_sql(context: CopContext) -> Iterator[Finding]:
    tree = context.source.tree
    if tree is None:
        return
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and node.func.attr in _RAW_SQL_METHODS
        ):
            yield Finding(
                line=node.lineno,
                column=node.col_offset,
                message=f"Avoid raw SQL through `.{node.func.attr}()`; use the query API.",
            )


def check_debug_setting(context: CopContext) -> Iterator[Finding]:
    tree = context.source.tree
    if tree is None:
        return
    for node in tree.body:
        if not isinstance(node, ast.Assign):
            continue
        targets = [target.id for target in node.targets if isinstance(target, ast.Name)]
        if "DEBUG" in targets and isinstance(node.value, ast.Constant) and node.value.value is True:
            yield Finding(line=node.lineno, column=node.col_offset, message="Do not enable DEBUG in settings modules.")


FRAMEWORK_COPS: Final[tuple[Cop, ...]] = (
    Cop(
        name="Framework/RawSql",
        description="Prefer the ORM query API over raw SQL helpers.",
        check=check_raw_sql,
        severity=Severity.WARNING,
        requires_ast=True,
    ),
    Cop(
        name="Framework/DebugSetting",
        description="Keep DEBUG disabled in committed settings.",
        check=check_debug_setting,
        severity=Severity.WARNING,
        requires_ast=True,
    ),
)

__all__ = ["FRAMEWORK_COPS"]
