# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

# ruff: noqa: TRY400

"""Command-line interface for pwderive."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, NoReturn

import click
from typing_extensions import Any

from pwderive import _internals, _types, errors, generator, kdf, primitives
from pwderive._internals import cli_helpers, cli_machinery

if TYPE_CHECKING:
    from pwderive import salt

__all__ = ('pwderive',)

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION
DEFAULT_ROTATION = 1


class _GenerateContext:
    """Logging helpers for a single `pwderive` invocation.

    Errors abort the command with exit status 1, after logging them.
    Color handling is done properly before anything is logged.

    """

    def __init__(self, ctx: click.Context, /) -> None:
        self.ctx = ctx
        self.logger = logging.getLogger(PROG_NAME)

    def err(self, msg: Any, /, *args: Any, **kwargs: Any) -> NoReturn:  # noqa: ANN401
        """Log an error, then abort the function call."""
        stacklevel = kwargs.pop('stacklevel', 1) + 1
        extra = kwargs.pop('extra', {})
        extra.setdefault('color', self.ctx.color)
        self.logger.error(
            msg, *args, stacklevel=stacklevel, extra=extra, **kwargs
        )
        self.ctx.exit(1)

    def info(self, msg: Any, /, *args: Any, **kwargs: Any) -> None:  # noqa: ANN401
        """Log an informational message."""
        stacklevel = kwargs.pop('stacklevel', 1) + 1
        extra = kwargs.pop('extra', {})
        extra.setdefault('color', self.ctx.color)
        self.logger.info(
            msg, *args, stacklevel=stacklevel, extra=extra, **kwargs
        )

    def get_user_config(self) -> _types.UserConfig:
        """Return the user config, or an empty one if there is none.

        The config is validated before it is returned.  Unreadable or
        invalid configurations are fatal.

        """
        try:
            user_config = cli_helpers.load_user_config()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            self.err(
                'Cannot load user config: %s: %r',
                exc.strerror,
                exc.filename,
            )
        except ValueError as exc:
            self.err('Cannot load user config: %s', exc)
        try:
            _types.validate_user_config(user_config)
        except (TypeError, ValueError) as exc:
            self.err('Invalid user config: %s', exc)
        return user_config  # type: ignore[return-value]

    def read_master_phrase(self) -> str:
        """Read the master phrase from the terminal or standard input.

        On a terminal, prompt with hidden input.  Otherwise, read the
        first line of standard input, without its line terminator.

        """
        if sys.stdin.isatty():  # pragma: no cover [external-api]
            return cli_helpers.prompt_for_passphrase()
        return sys.stdin.readline().rstrip('\r\n')


@click.command(
    context_settings={
        'help_option_names': ['-h', '--help'],
    },
    cls=cli_machinery.PwderiveCommand,
    help=(
        'Derive a strong password for CONTEXT (e.g. a site name), '
        'deterministically, from a master phrase.  The password always '
        'contains at least one lowercase letter, one uppercase letter, '
        'one digit and one symbol.'
    ),
    epilog=(
        'The same master phrase, context, rotation number and settings '
        'always yield the same password.  Nothing is stored.'
    ),
)
@click.option(
    '-r',
    '--rotation',
    'rotation',
    metavar='ROTATION',
    help=(
        'Use rotation number ROTATION (an integer or a label such as '
        '"v2"; default: 1).  Change it to get a new, unrelated password '
        'for the same context.'
    ),
    cls=cli_machinery.PasswordGenerationOption,
)
@click.option(
    '-l',
    '--length',
    'length',
    metavar='NUMBER',
    type=click.IntRange(min=1),
    help=(
        f'Ensure a password length of NUMBER characters '
        f'(at least 8; default: {generator.DEFAULT_LENGTH}).'
    ),
    cls=cli_machinery.PasswordGenerationOption,
)
@click.option(
    '-i',
    '--iterations',
    'iterations',
    metavar='NUMBER',
    type=click.IntRange(min=1),
    help=(
        f'Stretch the master phrase with NUMBER PBKDF2 iterations '
        f'(at least {kdf.MIN_ITERATIONS:,}; '
        f'default: {kdf.DEFAULT_ITERATIONS:,}).'
    ),
    cls=cli_machinery.ConfigurationOption,
)
@click.option(
    '--provider',
    'provider',
    type=click.Choice(primitives.known_providers()),
    help=(
        f'Use this cryptographic provider '
        f'(default: {primitives.DEFAULT_PROVIDER}).'
    ),
    cls=cli_machinery.ConfigurationOption,
)
@cli_machinery.version_option
@cli_machinery.color_forcing_pseudo_option
@cli_machinery.standard_logging_options
@click.argument('context', metavar='CONTEXT', required=False)
@click.pass_context
def pwderive(  # noqa: PLR0913
    ctx: click.Context,
    /,
    context: str | None = None,
    *,
    rotation: str | None = None,
    length: int | None = None,
    iterations: int | None = None,
    provider: str | None = None,
) -> None:
    """Derive a strong password, deterministically, from a master phrase.

    Using a master phrase, derive a password for CONTEXT (e.g. a site
    name), subject to length and work factor constraints.  The derived
    password always contains at least one lowercase letter, one
    uppercase letter, one digit and one symbol.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  Call with arguments
    `['--help']` to see full documentation of the interface.  (See also
    [`click.testing.CliRunner`][] for controlled, programmatic
    invocation.)

    [CLICK]: https://pypi.org/package/click/

    Parameters:
        ctx (click.Context):
            The `click` context.

    Other Parameters:
        context:
            The context to derive a password for.  Falls back to the
            user configuration, then to the empty context.
        rotation:
            Command-line argument: the rotation number.
        length:
            Command-line argument: the password length.
        iterations:
            Command-line argument: the PBKDF2 iteration count.
        provider:
            Command-line argument: the cryptographic provider.

    """
    gen_ctx = _GenerateContext(ctx)
    settings: _types.GenerateSettings = gen_ctx.get_user_config().get(
        'generate', {}
    )
    rotation_number: salt.RotationNumber = (
        rotation
        if rotation is not None
        else settings.get('rotation', DEFAULT_ROTATION)
    )
    try:
        password_generator = generator.PasswordGenerator(
            context=(
                context if context is not None else settings.get('context', '')
            ),
            length=(
                length
                if length is not None
                else settings.get('length', generator.DEFAULT_LENGTH)
            ),
            iterations=(
                iterations
                if iterations is not None
                else settings.get('iterations', kdf.DEFAULT_ITERATIONS)
            ),
            provider=(
                provider if provider is not None else settings.get('provider')
            ),
        )
    except errors.DerivationError as exc:
        gen_ctx.err('Cannot derive password: %s', exc)
    phrase = gen_ctx.read_master_phrase()
    if not phrase:
        gen_ctx.err('No master phrase given')
    cli_helpers.check_for_misleading_passphrase(phrase, ctx=ctx)
    gen_ctx.info(
        'Deriving a %d-character password with %s iterations, using '
        'the %s provider',
        password_generator.length,
        f'{password_generator.iterations:,}',
        password_generator.provider.name,
    )
    try:
        password = password_generator.generate(phrase, rotation_number)
    except errors.DerivationError as exc:
        gen_ctx.err('Cannot derive password: %s', exc)
    click.echo(password)


if __name__ == '__main__':
    pwderive(prog_name=PROG_NAME)
