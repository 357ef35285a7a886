# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Character policy, and mapping of key material onto characters."""

from __future__ import annotations

import collections
import types
from typing import TYPE_CHECKING

from pwderive import errors

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = (
    'CHARSETS',
    'CLASS_ORDER',
    'MIN_LENGTH',
    'character_class',
    'covers_all_classes',
    'map_key_bytes',
)

MIN_LENGTH = 8
"""The shortest permissible password length."""

CLASS_ORDER = ('lower', 'upper', 'digit', 'symbol')
"""The character classes, in the order of the coverage slots."""

CHARSETS = types.MappingProxyType(
    collections.OrderedDict([
        ('lower', 'abcdefghijklmnopqrstuvwxyz'),
        ('upper', 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'),
        ('digit', '0123456789'),
        ('symbol', '!@#$%^&*()-_=+[]{};:,.?/\\|~<>\''),
        (
            'all',
            (
                # CHARSETS['lower']
                'abcdefghijklmnopqrstuvwxyz'
                # CHARSETS['upper']
                'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
                # CHARSETS['digit']
                '0123456789'
                # CHARSETS['symbol']
                '!@#$%^&*()-_=+[]{};:,.?/\\|~<>\''
            ),
        ),
    ])
)
"""
    Known character sets from which to draw password characters.
    Relies on a certain, fixed order for their definition and their
    contents: changing either changes every derived password.

    The four classes are disjoint, and `all` is their concatenation
    (92 characters).  Visually ambiguous characters such as `l`, `1`,
    `O` and `0` are included on purpose.

"""


def character_class(char: str, /) -> str | None:
    """Return the name of the character class containing `char`.

    Returns:
        One of the names in [`CLASS_ORDER`][], or `None` if the
        character is not part of the policy.

    """
    for name in CLASS_ORDER:
        if char in CHARSETS[name]:
            return name
    return None


def covers_all_classes(password: Iterable[str], /) -> bool:
    """Return true if the password has a character from every class."""
    seen = {character_class(c) for c in password}
    return all(name in seen for name in CLASS_ORDER)


def map_key_bytes(key_bytes: bytes | bytearray, length: int, /) -> list[str]:
    """Map key material onto password characters.

    The first four positions draw from the lowercase, uppercase, digit
    and symbol class, respectively, guaranteeing class coverage.  All
    further positions draw from the combined character set.  Position
    `i` uses key byte `i` (cyclically, should the key material be too
    short), reduced modulo the size of the respective character set.

    The class-coverage characters thus sit at fixed positions; callers
    must shuffle the result (see [`pwderive.shuffle`][]).

    Args:
        key_bytes:
            The key material.
        length:
            The desired password length.

    Returns:
        A list of `length` single-character strings.

    Raises:
        errors.ValidationError:
            The length is less than [`MIN_LENGTH`][], or the key
            material is empty.

    Examples:
        >>> ''.join(map_key_bytes(bytes(range(8)), 8))
        'aB2$efgh'

    """
    if length < MIN_LENGTH:
        msg = f'length must be at least {MIN_LENGTH}'
        raise errors.ValidationError(msg)
    if not key_bytes:
        msg = 'key material must not be empty'
        raise errors.ValidationError(msg)
    n = len(key_bytes)
    result: list[str] = []
    for i, name in enumerate(CLASS_ORDER):
        charset = CHARSETS[name]
        result.append(charset[key_bytes[i % n] % len(charset)])
    combined = CHARSETS['all']
    for i in range(len(CLASS_ORDER), length):
        result.append(combined[key_bytes[i % n] % len(combined)])
    return result
