# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Deterministic password generation from a master phrase."""

from __future__ import annotations

import logging

from pwderive import charset, errors, kdf, primitives, salt, shuffle

__all__ = ('DEFAULT_LENGTH', 'PasswordGenerator', 'generate')

DEFAULT_LENGTH = 20
"""The default password length."""

logger = logging.getLogger(__name__)


class PasswordGenerator:
    """Derive passwords from a master phrase, for a fixed context.

    Store the non-secret settings for generating (actually: deriving)
    passwords: the context (e.g. a site name), the password length, the
    PBKDF2 work factor, and the cryptographic provider.  The master
    phrase and the rotation number are only supplied per call, and the
    generator keeps no state between calls: neither the master phrase
    nor any derived material outlives a call to [`generate`][].

    The derivation runs in four stages, each consuming the output of the
    previous one:

     1. A 16-byte salt is derived from the context and the rotation
        number ([`salt.derive_salt`][]).
     2. The master phrase is stretched with PBKDF2-HMAC-SHA-256 into
        `max(512, 16 * length)` bits of key material
        ([`kdf.derive_key`][]).
     3. The key material is mapped onto characters, with one character
        from each character class ([`charset.map_key_bytes`][]).
     4. The characters are shuffled by a Fisher–Yates shuffle keyed by
        the key material ([`shuffle.deterministic_shuffle`][]).

    """

    def __init__(
        self,
        *,
        context: str | None = '',
        length: int = DEFAULT_LENGTH,
        iterations: int = kdf.DEFAULT_ITERATIONS,
        provider: primitives.CryptoProvider | str | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            context:
                The context, e.g. a site name.  Distinct contexts
                yield unrelated passwords.  `None` is the empty
                context.
            length:
                Desired password length.  Must be at least
                [`charset.MIN_LENGTH`][].
            iterations:
                The PBKDF2 iteration count.  Must be at least
                [`kdf.MIN_ITERATIONS`][].
            provider:
                The cryptographic provider, or its registry name.  If
                not given, use the default provider.

        Raises:
            errors.ValidationError:
                The length is invalid.
            errors.ConfigurationError:
                The iteration count is invalid.
            errors.CryptoEnvironmentError:
                The cryptographic provider is unavailable.
            ValueError:
                No cryptographic provider is registered under the given
                name.

        """
        if (
            isinstance(length, bool)
            or not isinstance(length, int)
            or length < charset.MIN_LENGTH
        ):
            msg = f'length must be at least {charset.MIN_LENGTH}'
            raise errors.ValidationError(msg)
        if (
            isinstance(iterations, bool)
            or not isinstance(iterations, int)
            or iterations < kdf.MIN_ITERATIONS
        ):
            msg = f'iterations must be an integer >= {kdf.MIN_ITERATIONS:,}'
            raise errors.ConfigurationError(msg)
        self.context = context if context is not None else ''
        self.length = length
        self.iterations = iterations
        self.provider = (
            provider
            if provider is not None and not isinstance(provider, str)
            else primitives.get_provider(provider)
        )

    def generate(
        self,
        master_phrase: str,
        rotation_number: salt.RotationNumber,
        /,
    ) -> str:
        """Generate a password.

        Args:
            master_phrase:
                The master phrase.  Normalized before use.
            rotation_number:
                The rotation number.  Changing it yields an unrelated
                password for the same master phrase and context.

        Returns:
            The password, exactly `self.length` characters long.

        Raises:
            errors.ValidationError:
                The master phrase is empty, or the rotation number is
                invalid.

        """
        if not salt.normalize_text(master_phrase):
            msg = 'master phrase must not be empty'
            raise errors.ValidationError(msg)
        output_bits = kdf.output_bits_for_length(self.length)
        logger.debug(
            'deriving %d-character password: %d iterations, '
            '%d bits of key material, provider %s',
            self.length,
            self.iterations,
            output_bits,
            self.provider.name,
        )
        salt_bytes = salt.derive_salt(
            self.context, rotation_number, provider=self.provider
        )
        key_bytes = kdf.derive_key(
            master_phrase,
            salt_bytes,
            iterations=self.iterations,
            output_bits=output_bits,
            provider=self.provider,
        )
        chars = charset.map_key_bytes(key_bytes, self.length)
        shuffle.deterministic_shuffle(chars, key_bytes, provider=self.provider)
        return ''.join(chars[: self.length])


def generate(
    master_phrase: str,
    rotation_number: salt.RotationNumber,
    /,
    *,
    context: str | None = '',
    length: int = DEFAULT_LENGTH,
    iterations: int = kdf.DEFAULT_ITERATIONS,
    provider: primitives.CryptoProvider | str | None = None,
) -> str:
    """Generate a password.

    A shorthand for constructing a [`PasswordGenerator`][] and calling
    its [`generate`][PasswordGenerator.generate] method.  See there for
    details on the arguments and exceptions.

    Examples:
        >>> pw = generate(
        ...     'correct horse battery staple',
        ...     1,
        ...     context='example.com',
        ...     length=16,
        ...     iterations=100_000,
        ... )
        >>> len(pw)
        16

    """
    return PasswordGenerator(
        context=context,
        length=length,
        iterations=iterations,
        provider=provider,
    ).generate(master_phrase, rotation_number)
