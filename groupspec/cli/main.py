# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

import logging
from pathlib import Path
from typing import Any, Optional

import errorhandler
import typer
from typing_extensions import Annotated

import groupspec
from groupspec.cli.options import file_options
from groupspec.core.constants import EXIT_FAILURE, EXIT_INVALID_ARGS
from groupspec.core.errors import GroupSpecError, InvalidOptionError
from groupspec.reporting.console import ConsoleReporter
from groupspec.runner.configuration_options import ConfigurationOptions, tag_options
from groupspec.runner.runner import Runner
from groupspec.utils.logging import VerbosityLevel, configure_logging

app = typer.Typer(add_completion=False)

logger = logging.getLogger(__name__)

error_handler = errorhandler.ErrorHandler()

DEFAULT_PATH = "spec"


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"groupspec, version {groupspec.__version__}")
        raise typer.Exit()


Paths = Annotated[
    Optional[list[str]],
    typer.Argument(
        help="Spec files or directories, optionally with line numbers (path:12).",
        show_default=False,
    ),
]


Verbosity = Annotated[
    VerbosityLevel,
    typer.Option(
        "-v",
        "--verbosity",
        help="Verbosity level.",
        envvar="GROUPSPEC_VERBOSITY",
        is_eager=True,
    ),
]


Include = Annotated[
    list[str],
    typer.Option(
        "-i",
        "--include",
        help="Only run examples with the given tag (tag or tag:value, ~tag excludes).",
        envvar="GROUPSPEC_INCLUDE",
    ),
]


Exclude = Annotated[
    list[str],
    typer.Option(
        "-e",
        "--exclude",
        help="Do not run examples with the given tag (tag or tag:value).",
        envvar="GROUPSPEC_EXCLUDE",
    ),
]


ExamplePattern = Annotated[
    list[str],
    typer.Option(
        "-E",
        "--example",
        help="Only run examples whose full description matches the pattern.",
        envvar="GROUPSPEC_EXAMPLE",
    ),
]


Order = Annotated[
    Optional[str],
    typer.Option(
        "--order",
        help="Run order: defined, random, random:SEED or a registered ordering.",
        envvar="GROUPSPEC_ORDER",
    ),
]


Seed = Annotated[
    Optional[int],
    typer.Option(
        "--seed",
        help="Seed for random ordering (implies --order random).",
        envvar="GROUPSPEC_SEED",
    ),
]


FailFast = Annotated[
    bool,
    typer.Option(
        "--fail-fast",
        help="Stop running examples after the first failure.",
        envvar="GROUPSPEC_FAIL_FAST",
    ),
]


FailFastThreshold = Annotated[
    Optional[int],
    typer.Option(
        "--fail-fast-threshold",
        help="Stop running examples after this many failures.",
        envvar="GROUPSPEC_FAIL_FAST_THRESHOLD",
        min=1,
    ),
]


DryRun = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Report examples without executing bodies or hooks.",
        envvar="GROUPSPEC_DRY_RUN",
    ),
]


Profile = Annotated[
    int,
    typer.Option(
        "--profile",
        help="List the N slowest examples after the run.",
        envvar="GROUPSPEC_PROFILE",
        min=0,
    ),
]


OptionsFile = Annotated[
    Optional[Path],
    typer.Option(
        "--options",
        exists=True,
        dir_okay=False,
        file_okay=True,
        help="Custom YAML options file, replacing ~/.groupspec.yaml and ./.groupspec.yaml.",
        envvar="GROUPSPEC_OPTIONS",
    ),
]


Version = Annotated[
    bool,
    typer.Option(
        "--version",
        callback=version_callback,
        help="Display version number.",
        is_eager=True,
    ),
]


def command_line_options(
    paths: list[str],
    include: list[str],
    exclude: list[str],
    example: list[str],
    order: str | None,
    seed: int | None,
    fail_fast: bool,
    fail_fast_threshold: int | None,
    dry_run: bool,
) -> dict[str, Any]:
    """Option mapping for the command line source."""
    options: dict[str, Any] = tag_options(include, exclude)
    options["files_or_directories_to_run"] = paths
    if example:
        options["full_description"] = example
    if seed is not None:
        options["seed"] = seed
    if order is not None:
        options["order"] = order
    if fail_fast_threshold is not None:
        options["fail_fast"] = fail_fast_threshold
    elif fail_fast:
        options["fail_fast"] = True
    if dry_run:
        options["dry_run"] = True
    return options


@app.command()
def main(
    paths: Paths = None,
    include: Include = [],
    exclude: Exclude = [],
    example: ExamplePattern = [],
    order: Order = None,
    seed: Seed = None,
    fail_fast: FailFast = False,
    fail_fast_threshold: FailFastThreshold = None,
    dry_run: DryRun = False,
    profile: Profile = 0,
    options: OptionsFile = None,
    verbosity: Verbosity = VerbosityLevel.WARNING,
    version: Version = False,
) -> None:
    """Run example groups defined in Python spec files."""
    configure_logging(verbosity, error_handler)

    cli_options = command_line_options(
        paths or [DEFAULT_PATH],
        include,
        exclude,
        example,
        order,
        seed,
        fail_fast,
        fail_fast_threshold,
        dry_run,
    )
    try:
        configuration_options = ConfigurationOptions(*file_options(options), cli_options)
        runner = Runner(configuration_options, ConsoleReporter(profile_examples=profile))
        exit_code = runner.run()
    except InvalidOptionError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_INVALID_ARGS)
    except (GroupSpecError, OSError, ImportError, SyntaxError) as exc:
        logger.error(f"{type(exc).__name__}: {exc}")
        exit_code = EXIT_FAILURE
    exit(exit_code)


def exit(exit_code: int = 0) -> None:
    if error_handler.fired or exit_code != 0:
        raise typer.Exit(EXIT_FAILURE)
    else:
        raise typer.Exit(0)
