# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Key stretching of the master phrase.

The master phrase is stretched with PBKDF2 (HMAC-SHA-256) into a long
byte sequence.  The iteration count is a work factor: it keeps offline
brute-force search of the master phrase expensive, and may not drop
below [`MIN_ITERATIONS`][].

Warning:
    The returned key material is as sensitive as the master phrase
    itself.  Never log, persist, or cache it.

"""

from __future__ import annotations

from pwderive import errors, primitives, salt

__all__ = (
    'DEFAULT_ITERATIONS',
    'MIN_ITERATIONS',
    'MIN_OUTPUT_BITS',
    'derive_key',
    'output_bits_for_length',
)

MIN_ITERATIONS = 100_000
"""The smallest permissible PBKDF2 iteration count."""
DEFAULT_ITERATIONS = 600_000
"""The default PBKDF2 iteration count."""
MIN_OUTPUT_BITS = 512
"""The smallest permissible amount of key material, in bits."""


def output_bits_for_length(length: int, /) -> int:
    """Return the amount of key material needed for a password length.

    We request 16 bits per password character, but at least
    [`MIN_OUTPUT_BITS`][].

    Examples:
        >>> output_bits_for_length(20)
        512
        >>> output_bits_for_length(120)
        1920

    """
    return max(MIN_OUTPUT_BITS, length * 16)


def derive_key(
    phrase: str,
    salt_bytes: bytes,
    /,
    *,
    iterations: int,
    output_bits: int,
    provider: primitives.CryptoProvider | None = None,
) -> bytes:
    """Stretch the master phrase into key material.

    Args:
        phrase:
            The master phrase.  It is normalized via
            [`salt.normalize_text`][] and then encoded as UTF-8.
        salt_bytes:
            The salt, as returned by [`salt.derive_salt`][].
        iterations:
            The PBKDF2 iteration count.
        output_bits:
            The amount of key material to derive, in bits.
        provider:
            The cryptographic provider.  If not given, use the default
            provider.

    Returns:
        Exactly `output_bits // 8` bytes of key material.

    Raises:
        errors.ConfigurationError:
            The iteration count is below [`MIN_ITERATIONS`][], or the
            output size is smaller than [`MIN_OUTPUT_BITS`][] or not
            a whole number of bytes.
        errors.ValidationError:
            The salt has the wrong size, or the normalized master
            phrase is empty.
        errors.CryptoEnvironmentError:
            No provider was given, and the default provider is
            unavailable.

    """
    if (
        isinstance(iterations, bool)
        or not isinstance(iterations, int)
        or iterations < MIN_ITERATIONS
    ):
        msg = f'iterations must be an integer >= {MIN_ITERATIONS:,}'
        raise errors.ConfigurationError(msg)
    if output_bits < MIN_OUTPUT_BITS or output_bits % 8:
        msg = f'invalid key material size: {output_bits!r} bits'
        raise errors.ConfigurationError(msg)
    if len(salt_bytes) != salt.SALT_SIZE:
        msg = f'salt must be {salt.SALT_SIZE} bytes long'
        raise errors.ValidationError(msg)
    secret = salt.normalize_text(phrase).encode('UTF-8')
    if not secret:
        msg = 'master phrase must not be empty'
        raise errors.ValidationError(msg)
    if provider is None:
        provider = primitives.get_provider()
    return provider.stretch(
        secret,
        bytes(salt_bytes),
        iterations=iterations,
        length=output_bits // 8,
    )
