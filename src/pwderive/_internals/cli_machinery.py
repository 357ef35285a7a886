# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib


"""Command-line machinery for pwderive.

Warning:
    Non-public module (implementation detail), provided for didactical and
    educational purposes only. Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import contextlib
import importlib.metadata
import inspect
import logging
import textwrap
import warnings
from typing import TYPE_CHECKING, Callable, TextIO, TypeVar

import click
from typing_extensions import Any, ParamSpec

from pwderive import _internals, primitives

if TYPE_CHECKING:
    from collections.abc import Iterator

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION
PACKAGE_LOGGER = PROG_NAME
WARNINGS_LOGGER = f'{PACKAGE_LOGGER}.warnings'
VERSION_OUTPUT_WRAPPING_WIDTH = 72


# Logging
# =======


class ClickEchoStderrHandler(logging.Handler):
    """A [`logging.Handler`][] writing to standard error via [`click.echo`][].

    The record's `color` attribute, if any, is passed on to
    [`click.echo`][], so that the command's color setting applies.

    """

    def emit(self, record: logging.LogRecord) -> None:
        click.echo(
            self.format(record),
            err=True,
            color=getattr(record, 'color', None),
        )


class PwderiveFormatter(logging.Formatter):
    """Format `pwderive` log records as console diagnostics.

    Every line of the message is prefixed with `pwderive: ` and a level
    label: `Debug: ` for debug records, a bold `Warning: ` for warnings,
    and nothing for informational and error records.

    """

    LEVEL_LABELS = {
        logging.DEBUG: 'Debug',
        logging.WARNING: 'Warning',
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno)
        prefix = f'{PROG_NAME}: '
        if label == 'Warning':
            prefix += f'{click.style(label, bold=True)}: '
        elif label is not None:
            prefix += f'{label}: '
        text = textwrap.indent(
            record.getMessage(), prefix, predicate=lambda _line: True
        )
        if record.exc_info:
            text += '\n' + self.formatException(record.exc_info)
        return text


cli_handler = ClickEchoStderrHandler()
cli_handler.addFilter(logging.Filter(name=PACKAGE_LOGGER))
cli_handler.setFormatter(PwderiveFormatter())
cli_handler.setLevel(logging.WARNING)


def _log_warning(  # noqa: PLR0913,PLR0917
    message: Warning | str,
    category: type[Warning],
    filename: str,
    lineno: int,
    file: TextIO | None = None,
    line: str | None = None,
) -> None:
    """Log a Python warning on the `pwderive.warnings` logger.

    Used as [`warnings.showwarning`][] while [`cli_logging`][] is
    active.

    """
    del filename, lineno, file, line
    logging.getLogger(WARNINGS_LOGGER).warning(
        '%s: %s', category.__name__, message
    )


@contextlib.contextmanager
def cli_logging(
    *, divert_warnings: bool = True
) -> Iterator[logging.Handler]:
    """Emit `pwderive` log records and Python warnings on standard error.

    Attaches [`cli_handler`][] to the `pwderive` logger, unless it is
    already attached, and (if `divert_warnings` is true) diverts Python
    warnings to that logger.  Both changes are undone upon exit.
    Reentrant, but not thread safe: the logging and warnings setup is
    global state.

    Yields:
        The attached handler.

    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    attach = cli_handler not in logger.handlers
    if attach:
        logger.addHandler(cli_handler)
    try:
        with warnings.catch_warnings():
            if divert_warnings:
                warnings.showwarning = _log_warning
            yield cli_handler
    finally:
        if attach:
            logger.removeHandler(cli_handler)


def adjust_logging_level(
    ctx: click.Context,
    /,
    param: click.Parameter | None = None,
    value: int | None = None,
) -> None:
    """Emit log records at `value` and above on standard error.

    Callback for the `--debug`, `--verbose` and `--quiet` flags.  Both
    the handler and the `pwderive` logger are adjusted, so that debug
    records are created at all.

    """
    # All three flags share this callback; repeated calls are harmless.
    if param is None or value is None or ctx.resilient_parsing:
        return
    cli_handler.setLevel(value)
    logging.getLogger(PACKAGE_LOGGER).setLevel(value)


# Commands and option groups
# ==========================


class OptionGroupOption(click.Option):
    """A [`click.Option`][] listed under its own heading in `--help`.

    Attributes:
        option_group_name:
            The heading for this group of options.
        epilog:
            Text to print after the options of this group.

    """

    option_group_name: str = ''
    epilog: str = ''


class PwderiveCommand(click.Command):
    """The `pwderive` command.

    The `--help` listing groups options by their
    [`option_group_name`][OptionGroupOption]; other options come last,
    under "Other options".  When called as a function, the command
    runs within [`cli_logging`][].  ([`click.testing.CliRunner`][]
    calls `.main` directly, bypassing this.)

    """

    def format_options(
        self,
        ctx: click.Context,
        formatter: click.HelpFormatter,
    ) -> None:
        groups: dict[str, tuple[list[tuple[str, str]], str]] = {}
        others: list[tuple[str, str]] = []
        for param in self.get_params(ctx):
            record = param.get_help_record(ctx)
            if record is None:
                continue
            if isinstance(param, OptionGroupOption):
                records, _epilog = groups.setdefault(
                    param.option_group_name, ([], param.epilog)
                )
                records.append(record)
            else:
                others.append(record)
        for name, (records, epilog) in groups.items():
            with formatter.section(name):
                formatter.write_dl(records)
            if epilog:
                formatter.write_paragraph()
                with formatter.indentation():
                    formatter.write_text(inspect.cleandoc(epilog))
        if others:
            with formatter.section('Other options'):
                formatter.write_dl(others)

    def __call__(  # pragma: no cover [external-api]
        self,
        *args: Any,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """"""  # noqa: D419
        with cli_logging():
            return self.main(*args, **kwargs)


class PasswordGenerationOption(OptionGroupOption):
    """Password generation options for the CLI."""

    option_group_name = 'Password generation'
    epilog = """
        The master phrase is always read interactively, with hidden
        input, or from standard input if it is not a terminal.  It is
        never stored.
    """


class ConfigurationOption(OptionGroupOption):
    """Configuration options for the CLI."""

    option_group_name = 'Configuration'
    epilog = """
        Defaults for all options in this and the previous section may
        be set in the "generate" table of the configuration file
        config.toml.
    """


class LoggingOption(OptionGroupOption):
    """Logging options for the CLI."""

    option_group_name = 'Options concerning logging'


# Callbacks and reusable options
# ==============================


def color_forcing_callback(
    ctx: click.Context,
    param: click.Parameter,
    value: Any,  # noqa: ANN401
) -> None:
    """Disable automatic color (and text highlighting).

    Passwords and diagnostics are plain text; styling would only get
    in the way of copying them.

    """
    del param, value
    ctx.color = False


def format_provider_list(label: str, names: list[str]) -> str:
    """Format a labelled, comma-separated list of provider names.

    Examples:
        >>> format_provider_list('Available providers:', ['a', 'b'])
        'Available providers: a, b.'

    """
    return textwrap.fill(
        f'{label} {", ".join(names)}.',
        width=VERSION_OUTPUT_WRAPPING_WIDTH,
        subsequent_indent='    ',
        break_on_hyphens=False,
    )


def version_option_callback(
    ctx: click.Context,
    param: click.Parameter,
    value: bool,  # noqa: FBT001
) -> None:
    """Print version information, and the available providers."""
    del param
    if not value or ctx.resilient_parsing:
        return
    dependencies = ['cryptography', 'click']
    click.echo(
        f'{click.style(PROG_NAME, bold=True)} {VERSION}', color=ctx.color
    )
    for name in dependencies:
        try:
            version = importlib.metadata.version(name)
        except importlib.metadata.PackageNotFoundError:
            continue
        click.echo(f'Using {name} {version}', color=ctx.color)
    click.echo()
    available = primitives.available_providers()
    unavailable = [
        name for name in primitives.known_providers() if name not in available
    ]
    for label, names in [
        ('Available cryptographic providers:', list(available)),
        ('Unavailable cryptographic providers:', unavailable),
    ]:
        if names:
            text = format_provider_list(label, names)
            click.echo(
                click.style(label, bold=True) + text[len(label) :],
                color=ctx.color,
            )
    ctx.exit()


version_option = click.option(
    '--version',
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=version_option_callback,
    help='Show the version and exit.',
)


color_forcing_pseudo_option = click.option(
    '--_pseudo-option-color-forcing',
    '_color_forcing',
    is_flag=True,
    is_eager=True,
    expose_value=False,
    hidden=True,
    callback=color_forcing_callback,
    help='(pseudo-option)',
)


P = ParamSpec('P')
R = TypeVar('R')

LOGGING_FLAGS: tuple[tuple[tuple[str, ...], int, str], ...] = (
    (
        ('--debug',),
        logging.DEBUG,
        'Also emit debug information.  Implies --verbose.',
    ),
    (
        ('-v', '--verbose'),
        logging.INFO,
        'Emit extra/progress information to standard error.',
    ),
    (
        ('-q', '--quiet'),
        logging.ERROR,
        'Suppress even warnings; emit only errors.',
    ),
)


def standard_logging_options(f: Callable[P, R]) -> Callable[P, R]:
    """Decorate the function with the `pwderive` logging flags.

    Adds `--debug`, `-v`/`--verbose` and `-q`/`--quiet` (listed in
    this order), each setting the logging level via
    [`adjust_logging_level`][].

    """
    for flags, level, help_text in reversed(LOGGING_FLAGS):
        f = click.option(
            *flags,
            'logging_level',
            is_flag=True,
            flag_value=level,
            expose_value=False,
            callback=adjust_logging_level,
            help=help_text,
            cls=LoggingOption,
        )(f)
    return f
