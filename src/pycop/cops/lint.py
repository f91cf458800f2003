# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lint cops detecting likely bugs through the syntax tree."""

from __future__ import annotations

import ast
from collections.abc import Iterator
from typing import Final

from ..severity import Severity
from .base import Cop, CopContext, Finding

_DEBUGGER_MODULES: Final[frozenset[str]] = frozenset({"pdb", "ipdb", "pudb"})
_MUTABLE_LITERALS: Final[tuple[type[ast.expr], ...]] = (ast.List, ast.Dict, ast.Set)
_MUTABLE_FACTORIES: Final[frozenset[str]] = frozenset({"list", "dict", "set"})


def _walk(context: CopContext) -> Iterator[ast.AST]:
    tree = context.source.tree
    if tree is None:
        return iter(())
    return ast.walk(tree)


def check_bare_except(context: CopContext) -> Iterator[Finding]:
    for node in _walk(context):
        if isinstance(node, ast.ExceptHandler) and node.type is None:
            yield Finding(
                line=node.lineno,
                column=node.col_offset,
                message="Avoid bare `except:` clauses; catch a specific exception.",
            )


def _debugger_call_name(call: ast.Call) -> str | None:
    func = call.func
    if isinstance(func, ast.Name) and func.id == "breakpoint":
        return "breakpoint()"
    if (
        isinstance(func, ast.Attribute)
        and func.attr == "set_trace"
        and isinstance(func.value, ast.Name)
        and func.value.id in _DEBUGGER_MODULES
    ):
        return f"{func.value.id}.set_trace()"
    return None


def check_debugger(context: CopContext) -> Iterator[Finding]:
    for node in _walk(context):
        if not isinstance(node, ast.Call):
            continue
        name = _debugger_call_name(node)
        if name is not None:
            yield Finding(line=node.lineno, column=node.col_offset, message=f"Remove debugger entry point `{name}`.")


def check_duplicate_key(context: CopContext) -> Iterator[Finding]:
    for node in _walk(context):
        if not isinstance(node, ast.Dict):
            continue
        seen: set[object] = set()
        for key in node.keys:
            if not isinstance(key, ast.Constant):
                continue
            marker = (type(key.value), key.value)
            if marker in seen:
                yield Finding(line=key.lineno, column=key.col_offset, message="Duplicated key in dict literal.")
            seen.add(marker)


def _is_mutable_default(node: ast.expr) -> bool:
    if isinstance(node, _MUTABLE_LITERALS):
        return True
    return (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _MUTABLE_FACTORIES
        and not node.args
        and not node.keywords
    )


def check_mutable_default(context: CopContext) -> Iterator[Finding]:
    for node in _walk(context):
        if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)):
            continue
        defaults = [*node.args.defaults, *(value for value in node.args.kw_defaults if value is not None)]
        for default in defaults:
            if _is_mutable_default(default):
                yield Finding(
                    line=default.lineno,
                    column=default.col_offset,
                    message="Do not use mutable values as argument defaults.",
                )


LINT_COPS: Final[tuple[Cop, ...]] = (
    Cop(
        name="Lint/BareExcept",
        description="Catch specific exceptions instead of using a bare except.",
        check=check_bare_except,
        severity=Severity.WARNING,
        requires_ast=True,
    ),
    Cop(
        name="Lint/Debugger",
        description="Do not leave debugger entry points in code.",
        check=check_debugger,
        severity=Severity.WARNING,
        requires_ast=True,
    ),
    Cop(
        name="Lint/DuplicateKey",
        description="Dict literals must not repeat constant keys.",
        check=check_duplicate_key,
        severity=Severity.WARNING,
        requires_ast=True,
    ),
    Cop(
        name="Lint/MutableDefault",
        description="Argument defaults must not be mutable.",
        check=check_mutable_default,
        severity=Severity.WARNING,
        requires_ast=True,
    ),
)

__all__ = ["LINT_COPS"]
