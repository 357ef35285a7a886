# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Types used by pwderive."""

from __future__ import annotations

from typing import TYPE_CHECKING

from typing_extensions import TypedDict

from pwderive import charset, kdf, primitives

if TYPE_CHECKING:
    from typing_extensions import Any, TypeIs

__all__ = (
    'GenerateSettings',
    'UserConfig',
    'is_user_config',
    'toml_key',
    'validate_user_config',
)


class GenerateSettings(TypedDict, total=False):
    r"""User configuration: password generation defaults.

    Attributes:
        context:
            The default context, if none is given on the command-line.
        rotation:
            The default rotation number.  An integer or a string.
        length:
            The default password length.  At least 8.
        iterations:
            The default PBKDF2 iteration count.  At least 100,000.
        provider:
            The name of the cryptographic provider to use.

    """

    context: str
    """"""
    rotation: int | str
    """"""
    length: int
    """"""
    iterations: int
    """"""
    provider: str
    """"""


class UserConfig(TypedDict, total=False):
    """User configuration, as stored in the TOML configuration file.

    The configuration holds settings only; it never holds a master
    phrase.

    Attributes:
        generate:
            Password generation defaults.

    """

    generate: GenerateSettings
    """"""


def toml_key(*parts: str) -> str:
    """Return a formatted TOML key, given its parts.

    Examples:
        >>> toml_key('generate', 'length')
        'generate.length'
        >>> toml_key('generate', 'some key')
        'generate."some key"'

    """
    bare = frozenset(
        'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-'
    )

    def escape(string: str) -> str:
        if string and set(string) <= bare:
            return string
        translated = string.translate({
            8: r'\b',
            9: r'\t',
            10: r'\n',
            12: r'\f',
            13: r'\r',
            ord('"'): r'\"',
            ord('\\'): r'\\',
        })
        return f'"{translated}"'

    return '.'.join(map(escape, parts))


def validate_user_config(obj: Any, /) -> None:  # noqa: ANN401,C901
    """Check that `obj` is a valid user configuration.

    Args:
        obj:
            The object to test.

    Raises:
        TypeError:
            An entry in the user config, or the user config itself, has
            the wrong type.
        ValueError:
            An entry in the user config is not allowed, or has
            a disallowed value.

    """
    err_obj_not_a_dict = 'user config is not a table'

    def err_not_a(kind: str, *path: str) -> str:
        return f'user config entry {toml_key(*path)} is not {kind}'

    def err_unknown_setting(*path: str) -> str:
        return f'user config uses unknown setting {toml_key(*path)}'

    def err_bad_value(*path: str, reason: str) -> str:
        return f'user config entry {toml_key(*path)} is {reason}'

    if not isinstance(obj, dict):
        raise TypeError(err_obj_not_a_dict)
    for section in obj:
        if section != 'generate':
            raise ValueError(err_unknown_setting(section))
    settings = obj.get('generate', {})
    if not isinstance(settings, dict):
        raise TypeError(err_not_a('a table', 'generate'))
    for key, value in settings.items():
        path = ('generate', key)
        # Use match/case here once Python 3.9 becomes unsupported.
        if key == 'context':
            if not isinstance(value, str):
                raise TypeError(err_not_a('a string', *path))
        elif key == 'rotation':
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise TypeError(err_not_a('an integer or a string', *path))
        elif key in {'length', 'iterations'}:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(err_not_a('an integer', *path))
            minimum = (
                charset.MIN_LENGTH if key == 'length' else kdf.MIN_ITERATIONS
            )
            if value < minimum:
                raise ValueError(
                    err_bad_value(*path, reason=f'less than {minimum}')
                )
        elif key == 'provider':
            if not isinstance(value, str):
                raise TypeError(err_not_a('a string', *path))
            if value not in primitives.known_providers():
                raise ValueError(
                    err_bad_value(
                        *path, reason=f'an unknown provider: {value!r}'
                    )
                )
        else:
            raise ValueError(err_unknown_setting(*path))


def is_user_config(obj: Any) -> TypeIs[UserConfig]:  # noqa: ANN401
    """Check if `obj` is a valid user config, according to typing.

    Args:
        obj: The object to test.

    Returns:
        True if this is a user config, false otherwise.

    """
    try:
        validate_user_config(obj)
    except (TypeError, ValueError) as exc:
        if 'user config ' not in str(exc):  # pragma: no cover
            raise  # noqa: DOC501
        return False
    return True
