# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

import signal
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import Annotated, Final

import typer

from .. import __version__
from ..config import ConfigError, ConfigStore
from ..cops import default_registry
from ..discovery import TargetNotFoundError
from ..options import FormatterSpec, RunOptions
from ..reporting import ReportingSetupError
from ..runner import Runner
from ..selection import unknown_cop_names
from ..severity import Severity
from .shared import CLIError, CLILogger, build_cli_logger

EXIT_SUCCESS: Final[int] = 0
EXIT_OFFENSES: Final[int] = 1
EXIT_ERROR: Final[int] = 2
FORMAT_PATH_SEPARATOR: Final[str] = ":"

app = typer.Typer(
    help="Inspect Python sources with a configurable set of cops.",
    add_completion=False,
    no_args_is_help=False,
)


def parse_formatter_specs(values: Sequence[str]) -> list[FormatterSpec]:
    """Convert ``--format`` values into :class:`FormatterSpec` entries.

    Each value is either a formatter name or ``NAME:PATH`` to write that
    formatter's output to ``PATH``.

    Args:
        values: Raw ``--format`` option values.

    Returns:
        list[FormatterSpec]: Parsed specs; the default formatter when empty.
    """

    specs: list[FormatterSpec] = []
    for value in values:
        key, separator, output = value.partition(FORMAT_PATH_SEPARATOR)
        specs.append(FormatterSpec(key=key, output_path=Path(output) if separator and output else None))
    return specs or [FormatterSpec()]


def split_names(values: Sequence[str]) -> list[str]:
    """Split comma separated option values into a flat list of names."""

    return [name.strip() for value in values for name in value.split(",") if name.strip()]


@dataclass(slots=True)
class _InterruptHandler:
    """Abort the run on the first SIGINT and exit on the second."""

    runner: Runner
    logger: CLILogger

    def __call__(self, _signum: int, _frame: FrameType | None) -> None:
        if self.runner.aborting:
            raise typer.Exit(code=EXIT_ERROR)
        self.runner.abort()
        self.logger.warn("Exiting... Interrupt again to exit immediately.")


def _show_cops(logger: CLILogger) -> None:
    registry = default_registry()
    for cop in registry.cops():
        flags = []
        if cop.supports_autocorrect:
            flags.append("autocorrect")
        if cop.framework:
            flags.append("framework")
        suffix = f" ({', '.join(flags)})" if flags else ""
        typer.echo(f"{cop.name} [{cop.severity.value}]{suffix}: {cop.description}")
    logger.debug(f"cops={len(registry)}")


def _report_errors(runner: Runner, logger: CLILogger) -> None:
    errors = [error for path_errors in runner.errors.values() for error in path_errors]
    if not errors:
        return
    for error in errors:
        logger.warn(error.describe())
    noun = "error" if len(errors) == 1 else "errors"
    logger.warn(f"{len(errors)} {noun} occurred while inspecting files.")


def _build_options(
    *,
    only: Sequence[str],
    lint: bool,
    framework: bool,
    fail_level: str,
    fail_fast: bool,
    debug: bool,
    autocorrect: bool,
    formats: Sequence[str],
    config_path: Path | None,
    max_iterations: int | None,
    no_color: bool,
) -> RunOptions:
    try:
        level = Severity.parse(fail_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--fail-level") from exc
    return RunOptions(
        only=split_names(only),
        lint=lint,
        framework=framework,
        fail_level=level,
        fail_fast=fail_fast,
        debug=debug,
        autocorrect=autocorrect,
        formatters=parse_formatter_specs(formats),
        max_iterations=max_iterations,
        config_path=config_path,
        color=not no_color,
    )


def _execute(paths: Sequence[Path], options: RunOptions, logger: CLILogger) -> int:
    """Run an inspection session and return the process exit status."""

    unknown = unknown_cop_names(default_registry().cops(), options.only)
    if unknown:
        logger.warn(f"Unrecognized cop names given to --only: {', '.join(unknown)}")
    store = ConfigStore(override=options.config_path)
    runner = Runner(options, store, debug_logger=logger.debug)
    previous_handler = signal.signal(signal.SIGINT, _InterruptHandler(runner=runner, logger=logger))
    try:
        passed = runner.run(paths)
    except (ReportingSetupError, ConfigError, TargetNotFoundError) as exc:
        raise CLIError(str(exc), exit_code=EXIT_ERROR) from exc
    finally:
        signal.signal(signal.SIGINT, previous_handler)
    _report_errors(runner, logger)
    return EXIT_SUCCESS if passed else EXIT_OFFENSES


@app.command()
def inspect(
    paths: Annotated[list[Path] | None, typer.Argument(help="Files or directories to inspect.")] = None,
    only: Annotated[
        list[str] | None,
        typer.Option("--only", help="Run only the given cop(s); comma separated or repeated."),
    ] = None,
    lint: Annotated[bool, typer.Option("--lint", "-l", help="Run only lint cops.")] = False,
    framework: Annotated[bool, typer.Option("--framework", "-R", help="Run framework cops.")] = False,
    fail_level: Annotated[
        str,
        typer.Option("--fail-level", help="Minimum severity for exiting with an error status."),
    ] = Severity.REFACTOR.value,
    fail_fast: Annotated[
        bool,
        typer.Option("--fail-fast", "-F", help="Stop after the first file with offenses at the fail level."),
    ] = False,
    autocorrect: Annotated[bool, typer.Option("--auto-correct", "-a", help="Auto-correct offenses.")] = False,
    formats: Annotated[
        list[str] | None,
        typer.Option("--format", "-f", help="Formatter name, optionally NAME:PATH. Repeatable."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Use this configuration file for every inspected file."),
    ] = None,
    max_iterations: Annotated[
        int | None,
        typer.Option("--max-iterations", min=1, help="Bound the number of inspection rounds per file."),
    ] = None,
    debug: Annotated[bool, typer.Option("--debug", "-d", help="Display debug info.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable coloured output.")] = False,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji in log output.")] = False,
    show_cops: Annotated[bool, typer.Option("--show-cops", help="List the available cops and exit.")] = False,
    version: Annotated[bool, typer.Option("--version", "-v", help="Display version.")] = False,
) -> None:
    """Inspect PATHS and report offenses."""

    logger = build_cli_logger(emoji=not no_emoji, debug=debug, no_color=no_color)
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=EXIT_SUCCESS)
    if show_cops:
        _show_cops(logger)
        raise typer.Exit(code=EXIT_SUCCESS)
    options = _build_options(
        only=only or [],
        lint=lint,
        framework=framework,
        fail_level=fail_level,
        fail_fast=fail_fast,
        debug=debug,
        autocorrect=autocorrect,
        formats=formats or [],
        config_path=config_path,
        max_iterations=max_iterations,
        no_color=no_color,
    )
    try:
        exit_code = _execute(paths or [], options, logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=exit_code)


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main", "parse_formatter_specs", "split_names"]
