# SPDX-FileCopyrightText: 2024 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

import contextlib
import inspect
import logging
import os
from typing import TYPE_CHECKING

import click.testing
from typing_extensions import NamedTuple, Self

from pwderive._internals import cli_helpers, cli_machinery

__all__ = ()

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    import pytest
    from typing_extensions import Any


class GoldenVector(NamedTuple):
    """A known-good derivation, pinned for regression testing.

    Attributes:
        phrase: The master phrase.
        rotation: The rotation number.
        context: The context.
        length: The password length.
        iterations: The PBKDF2 iteration count.
        password: The expected password.

    """

    phrase: str
    rotation: int | str
    context: str
    length: int
    iterations: int
    password: str


DUMMY_PHRASE = 'correct horse battery staple'
DUMMY_CONTEXT = 'example.com'
FAST_ITERATIONS = 100_000
"""The smallest permissible iteration count, for faster tests."""

DUMMY_SALT_HEX = '33908e2a152008fea5e9e2d43cb0acec'
"""The salt for `DUMMY_CONTEXT` at rotation number 1."""
DUMMY_KEY_HEX = (
    '499674c0b6dcbc688d12a3f8eac0fa3e35e38def79f2ed3a01251bfece8b1b70'
    'a352825d5c3b165392edc4d1935d61cfcdded0b1201e98e7d120ed740d62f40d'
)
"""The 512-bit key for `DUMMY_PHRASE`, `DUMMY_SALT_HEX` and
`FAST_ITERATIONS`."""

GOLDEN_VECTORS: tuple[GoldenVector, ...] = (
    GoldenVector(
        DUMMY_PHRASE, 1, DUMMY_CONTEXT, 16, FAST_ITERATIONS, 'Ui>=6X#sY!%mvKe)'
    ),
    GoldenVector(
        DUMMY_PHRASE, 2, DUMMY_CONTEXT, 16, FAST_ITERATIONS, 'Q[k|CAQ=<AbhFw61'
    ),
    GoldenVector(
        DUMMY_PHRASE, 1, 'example.org', 16, FAST_ITERATIONS, 'xV|*Sn&3mG-b^Ah]'
    ),
    GoldenVector(
        DUMMY_PHRASE, 1, '', 20, FAST_ITERATIONS, '&vi\\cN=oY5t27h)HdFDb'
    ),
    GoldenVector(
        'She cells C shells bye the sea shoars',
        1,
        'google',
        8,
        FAST_ITERATIONS,
        "6_'PfB7G",
    ),
    GoldenVector(
        'She cells C shells bye the sea shoars',
        'v2',
        'google',
        120,
        FAST_ITERATIONS,
        (
            "J5SD,tfeiQ]S5fe<Hi*#Ai/D8'1}Y\\yGD>{V&Wxd_E8H*#HPc,^9~6{L]2$%7Q"
            'fL-h!O0o0Tm3nPgMsBPRj@,A-#kyO1EA4)fZk0^rq!L$e;aQVE0dcE=q,e'
        ),
    ),
)
"""Known-good derivations at the minimum work factor."""

DEFAULT_ITERATIONS_VECTOR = GoldenVector(
    DUMMY_PHRASE, 1, DUMMY_CONTEXT, 20, 600_000, 'q>Mw)=87EsaiN!M01e7k'
)
"""A known-good derivation at the default work factor."""


@contextlib.contextmanager
def isolated_config(
    monkeypatch: pytest.MonkeyPatch,
    runner: CliRunner,
) -> Iterator[None]:
    """Run within an isolated filesystem with an empty config directory."""
    env_name = cli_machinery.PROG_NAME.replace(' ', '_').upper() + '_PATH'
    with runner.isolated_filesystem():
        monkeypatch.setenv('HOME', os.getcwd())
        monkeypatch.setenv('USERPROFILE', os.getcwd())
        monkeypatch.delenv(env_name, raising=False)
        config_dir = cli_helpers.config_filename(directory_only=True)
        os.makedirs(config_dir, exist_ok=True)
        yield


@contextlib.contextmanager
def isolated_user_config(
    monkeypatch: pytest.MonkeyPatch,
    runner: CliRunner,
    config_text: str,
) -> Iterator[None]:
    """Run within an isolated filesystem with the given TOML config."""
    with isolated_config(monkeypatch=monkeypatch, runner=runner):
        config_filename = cli_helpers.config_filename()
        with open(config_filename, 'w', encoding='UTF-8') as outfile:
            outfile.write(config_text)
        yield


class ReadableResult(NamedTuple):
    """Helper class for formatting and testing click.testing.Result objects."""

    exception: BaseException | None
    exit_code: int
    output: str
    stderr: str

    @classmethod
    def parse(cls, r: click.testing.Result, /) -> Self:
        try:
            stderr = r.stderr
        except ValueError:
            stderr = r.output
        return cls(r.exception, r.exit_code, r.stdout or '', stderr or '')

    def clean_exit(
        self, *, output: str = '', empty_stderr: bool = False
    ) -> bool:
        """Return whether the invocation exited cleanly.

        Args:
            output:
                An expected output string.
            empty_stderr:
                If true, additionally require that nothing was written
                to standard error.

        """
        return (
            (
                not self.exception
                or (
                    isinstance(self.exception, SystemExit)
                    and self.exit_code == 0
                )
            )
            and (not output or output in self.output)
            and (not empty_stderr or not self.stderr)
        )

    def error_exit(
        self, *, error: str | type[BaseException] = BaseException
    ) -> bool:
        """Return whether the invocation exited uncleanly.

        Args:
            error:
                An expected error message, or an expected exception
                type.

        """
        # Use match/case here once Python 3.9 becomes unsupported.
        if isinstance(error, str):
            return (
                isinstance(self.exception, SystemExit)
                and self.exit_code > 0
                and (not error or error in self.stderr)
            )
        else:  # noqa: RET505
            return isinstance(self.exception, error)


class CliRunner:
    """A [`click.testing.CliRunner`][] with standard CLI logging.

    Papers over the `mix_stderr` API change in click 8.2, installs the
    standard CLI logging handler for the duration of each invocation,
    and restores the logging levels afterwards (the `--verbose`,
    `--quiet` and `--debug` options change them globally).  Results
    are returned as [`ReadableResult`][] objects.

    """

    def __init__(self, *, mix_stderr: bool = False) -> None:
        kwargs: dict[str, Any] = {}
        if 'mix_stderr' in inspect.signature(click.testing.CliRunner).parameters:
            kwargs['mix_stderr'] = mix_stderr
        self.click_testing_clirunner = click.testing.CliRunner(**kwargs)

    def isolated_filesystem(self) -> contextlib.AbstractContextManager[str]:
        return self.click_testing_clirunner.isolated_filesystem()

    def invoke(
        self,
        cli: click.Command,
        args: Sequence[str] | str | None = None,
        **kwargs: Any,
    ) -> ReadableResult:
        handler = cli_machinery.cli_handler
        logger = logging.getLogger(cli_machinery.PACKAGE_LOGGER)
        handler_level = handler.level
        logger_level = logger.level
        try:
            with cli_machinery.cli_logging(divert_warnings=False):
                return ReadableResult.parse(
                    self.click_testing_clirunner.invoke(cli, args, **kwargs)
                )
        finally:
            handler.setLevel(handler_level)
            logger.setLevel(logger_level)
