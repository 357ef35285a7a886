# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Deterministic salt derivation from context and rotation number."""

from __future__ import annotations

import math
import unicodedata

from typing_extensions import TypeAlias

from pwderive import errors, primitives

__all__ = (
    'SALT_SIZE',
    'SALT_VERSION_TAG',
    'canonical_rotation',
    'derive_salt',
    'normalize_text',
)

RotationNumber: TypeAlias = 'int | float | str'

SALT_SIZE = 16
"""The salt size, in bytes."""
SALT_VERSION_TAG = 'pwgen-salt-v1'
"""A tag prepended to the salt payload, versioning the salt format."""
NORMALIZATION_FORM = 'NFC'


def normalize_text(text: str, /) -> str:
    """Return the canonical form of a text input.

    The text is brought into Unicode normalization form NFC, and then
    stripped of surrounding whitespace.  Two inputs that merely differ
    in their Unicode representation of the same characters thus yield
    the same derived password.

    Examples:
        >>> normalize_text('  Cafe\\u0301 ')
        'Café'

    """
    return unicodedata.normalize(NORMALIZATION_FORM, text).strip()


def canonical_rotation(value: RotationNumber, /) -> str:
    """Return the canonical string form of a rotation number.

    Integers are written in decimal.  Floats are accepted only if they
    are finite and integral, and are then written like the equivalent
    integer.  Strings are normalized via [`normalize_text`][].

    Raises:
        errors.ValidationError:
            The value has no canonical form: it is a boolean, a fractional
            or non-finite float, or of some other type.

    Examples:
        >>> canonical_rotation(1)
        '1'
        >>> canonical_rotation(2.0)
        '2'
        >>> canonical_rotation(' v2 ')
        'v2'

    """
    # bool is a subclass of int, but True is not a rotation number.
    if isinstance(value, bool):
        msg = f'invalid rotation number: {value!r}'
        raise errors.ValidationError(msg)
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            msg = f'invalid rotation number: {value!r}'
            raise errors.ValidationError(msg)
        return str(int(value))
    if isinstance(value, str):
        return normalize_text(value)
    msg = f'invalid rotation number: not an int or str: {value!r}'
    raise errors.ValidationError(msg)


def derive_salt(
    context: str,
    rotation_number: RotationNumber,
    /,
    *,
    provider: primitives.CryptoProvider | None = None,
) -> bytes:
    """Derive the salt for a context and rotation number.

    The payload `SALT_VERSION_TAG|context|rotation` (after
    normalization, and encoded as UTF-8) is hashed with SHA-256, and the
    first [`SALT_SIZE`][] bytes of the digest are the salt.

    Args:
        context:
            The context, e.g. a site name.
        rotation_number:
            The rotation number.  See [`canonical_rotation`][].
        provider:
            The cryptographic provider.  If not given, use the default
            provider.

    Returns:
        The salt, [`SALT_SIZE`][] bytes long.

    Raises:
        errors.ValidationError:
            The rotation number has no canonical form.
        errors.CryptoEnvironmentError:
            No provider was given, and the default provider is
            unavailable.

    """
    rotation = canonical_rotation(rotation_number)
    if provider is None:
        provider = primitives.get_provider()
    payload = '|'.join([SALT_VERSION_TAG, normalize_text(context), rotation])
    return provider.hash256(payload.encode('UTF-8'))[:SALT_SIZE]
