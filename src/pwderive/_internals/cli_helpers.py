# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Helper functions for the pwderive command-line.

Warning:
    Non-public module (implementation detail), provided for didactical and
    educational purposes only. Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import logging
import os
import pathlib
import sys
import unicodedata
from typing import cast

import click
from typing_extensions import Any

from pwderive import _internals, salt

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

PROG_NAME = _internals.PROG_NAME
CONFIG_FILENAME = 'config.toml'


def config_filename(*, directory_only: bool = False) -> pathlib.Path:
    """Return the filename of the user configuration file.

    The file is named `config.toml`, located within the configuration
    directory as determined by the `PWDERIVE_PATH` environment
    variable, or by [`click.get_app_dir`][] in POSIX mode.

    Args:
        directory_only:
            If true, return the configuration directory instead.

    """
    path = pathlib.Path(
        os.getenv(PROG_NAME.upper() + '_PATH')
        or click.get_app_dir(PROG_NAME, force_posix=True)
    )
    return path if directory_only else path / CONFIG_FILENAME


def load_user_config() -> dict[str, Any]:
    """Load the user config from the application directory.

    The filename is obtained via [`config_filename`][].

    Returns:
        The user configuration, as a nested `dict`.

    Raises:
        OSError:
            There was an OS error accessing the file.
        ValueError:
            The data loaded from the file is not a valid TOML file.

    """
    filename = config_filename()
    with filename.open('rb') as fileobj:
        return tomllib.load(fileobj)


def prompt_for_passphrase() -> str:
    """Interactively prompt for the master phrase.

    Calls [`click.prompt`][] internally.  Moved into a separate function
    mainly for testing/mocking purposes.

    Returns:
        The user input.

    """
    return cast(
        'str',
        click.prompt(
            'Master phrase',
            default='',
            hide_input=True,
            show_default=False,
            err=True,
        ),
    )


def check_for_misleading_passphrase(
    phrase: str,
    /,
    *,
    ctx: click.Context | None = None,
) -> None:
    """Warn if the master phrase changes under normalization.

    The master phrase is brought into Unicode normalization form NFC and
    stripped of surrounding whitespace before use (see
    [`salt.normalize_text`][]).  If this changes the phrase, issue
    a warning to the user: the phrase that is actually used may not be
    the one the user thinks they typed.

    Args:
        phrase:
            The master phrase to vet.
        ctx:
            The click context.  This is necessary to pass output options
            set on the context to the logging machinery.

    """
    logger = logging.getLogger(PROG_NAME)
    extra = {'color': ctx.color if ctx is not None else None}
    if not unicodedata.is_normalized(salt.NORMALIZATION_FORM, phrase):
        logger.warning(
            (
                'The master phrase is not %s-normalized.  It will be '
                'normalized before use, so the derived password may '
                'not be what you expect, even if the phrase *displays* '
                'correctly.'
            ),
            salt.NORMALIZATION_FORM,
            stacklevel=2,
            extra=extra,
        )
    if phrase != phrase.strip():
        logger.warning(
            (
                'The master phrase has leading or trailing whitespace.  '
                'This whitespace will be removed before use.'
            ),
            stacklevel=2,
            extra=extra,
        )
