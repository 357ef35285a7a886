# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Cryptographic capabilities used by the derivation pipeline.

The pipeline needs exactly three primitives: SHA-256, HMAC-SHA-256, and
PBKDF2-HMAC-SHA-256.  They are bundled as a [`CryptoProvider`][], and
the pipeline never asks *where* they come from.  Choosing a backend is
a start-up time decision (see [`get_provider`][]), made once by the
caller.

Two backends are registered:

  * `hashlib`, the Python standard library (default), and
  * `cryptography`, the [cryptography][CRYPTOGRAPHY] package, which is
    an optional dependency.

Both backends produce byte-identical output.

[CRYPTOGRAPHY]: https://pypi.org/project/cryptography/

"""

from __future__ import annotations

import hashlib
import hmac as _hmac
import importlib
from typing import TYPE_CHECKING, Protocol

from pwderive import errors

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from cryptography.hazmat.primitives import hashes, hmac
    from cryptography.hazmat.primitives.kdf import pbkdf2

    STUBBED = False
else:
    try:
        importlib.import_module('cryptography')
    except ModuleNotFoundError:
        STUBBED = True
    else:
        from cryptography.hazmat.primitives import hashes, hmac
        from cryptography.hazmat.primitives.kdf import pbkdf2

        STUBBED = False

__all__ = (
    'DEFAULT_PROVIDER',
    'CryptoProvider',
    'CryptographyProvider',
    'HashlibProvider',
    'available_providers',
    'get_provider',
    'known_providers',
    'register_provider',
)

DEFAULT_PROVIDER = 'hashlib'
DIGEST_SIZE = 32


class CryptoProvider(Protocol):
    """Typing protocol for the cryptographic capabilities.

    Implementations must be stateless: every method depends only on its
    arguments, so a single provider may be shared by concurrent calls.

    """

    name: str
    """The registry name of this provider."""

    def hash256(self, data: bytes, /) -> bytes:
        """Return the SHA-256 digest of `data`."""

    def hmac256(self, key: bytes, message: bytes, /) -> bytes:
        """Return the HMAC-SHA-256 of `message` under `key`."""

    def stretch(
        self,
        secret: bytes,
        salt: bytes,
        /,
        *,
        iterations: int,
        length: int,
    ) -> bytes:
        """Stretch `secret` via PBKDF2-HMAC-SHA-256.

        Args:
            secret:
                The (normalized, encoded) master phrase.
            salt:
                The salt.
            iterations:
                The PBKDF2 iteration count per output block.
            length:
                The number of output bytes.

        Returns:
            Exactly `length` pseudorandom bytes.

        """


_provider_registry: dict[str, Callable[[], CryptoProvider]] = {}


def register_provider(
    *names: str,
) -> Callable[[Callable[[], CryptoProvider]], Callable[[], CryptoProvider]]:
    """Register a provider factory under the given names.

    Raises:
        ValueError:
            No names, an empty name, or an already registered name was
            given.

    """
    if not names:
        msg = 'No names given to provider registry'
        raise ValueError(msg)
    if '' in names:
        msg = 'Cannot register provider under an empty name'
        raise ValueError(msg)

    def wrapper(
        f: Callable[[], CryptoProvider],
    ) -> Callable[[], CryptoProvider]:
        for name in names:
            if name in _provider_registry:
                msg = f'provider already registered: {name!r}'
                raise ValueError(msg)
            _provider_registry[name] = f
        return f

    return wrapper


@register_provider('hashlib')
class HashlibProvider:
    """Cryptographic capabilities from the Python standard library."""

    name = 'hashlib'

    def __init__(self) -> None:
        """Initialize the provider.

        Raises:
            errors.CryptoEnvironmentError:
                This Python does not offer SHA-256, e.g. because it is
                linked against a restricted OpenSSL build.

        """
        if 'sha256' not in hashlib.algorithms_available:
            raise errors.CryptoEnvironmentError(
                self.name, 'SHA-256 not supported by hashlib'
            )

    def hash256(self, data: bytes, /) -> bytes:
        return hashlib.sha256(data).digest()

    def hmac256(self, key: bytes, message: bytes, /) -> bytes:
        return _hmac.new(key, message, 'sha256').digest()

    def stretch(
        self,
        secret: bytes,
        salt: bytes,
        /,
        *,
        iterations: int,
        length: int,
    ) -> bytes:
        return hashlib.pbkdf2_hmac(
            hash_name='sha256',
            password=secret,
            salt=salt,
            iterations=iterations,
            dklen=length,
        )


@register_provider('cryptography')
class CryptographyProvider:
    """Cryptographic capabilities from the `cryptography` package."""

    name = 'cryptography'

    def __init__(self) -> None:
        """Initialize the provider.

        Raises:
            errors.CryptoEnvironmentError:
                The `cryptography` package is not installed.

        """
        if STUBBED:
            raise errors.CryptoEnvironmentError(
                self.name, 'cannot load the Python module "cryptography"'
            )

    def hash256(self, data: bytes, /) -> bytes:
        digest = hashes.Hash(hashes.SHA256())
        digest.update(data)
        return digest.finalize()

    def hmac256(self, key: bytes, message: bytes, /) -> bytes:
        mac = hmac.HMAC(key, hashes.SHA256())
        mac.update(message)
        return mac.finalize()

    def stretch(
        self,
        secret: bytes,
        salt: bytes,
        /,
        *,
        iterations: int,
        length: int,
    ) -> bytes:
        return pbkdf2.PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=length,
            salt=salt,
            iterations=iterations,
        ).derive(secret)


def get_provider(name: str | None = None, /) -> CryptoProvider:
    """Return a fresh provider for the given name.

    Args:
        name:
            The registry name of the provider.  If not given, use
            [`DEFAULT_PROVIDER`][].

    Raises:
        ValueError:
            No provider is registered under this name.
        errors.CryptoEnvironmentError:
            The provider is registered, but cannot run on this host.

    """
    if name is None:
        name = DEFAULT_PROVIDER
    try:
        factory = _provider_registry[name]
    except KeyError:
        msg = f'unknown cryptographic provider: {name!r}'
        raise ValueError(msg) from None
    return factory()


def known_providers() -> tuple[str, ...]:
    """Return the names of all registered providers."""
    return tuple(_provider_registry)


def available_providers() -> tuple[str, ...]:
    """Return the names of all providers that can run on this host."""
    names: list[str] = []
    for name in _provider_registry:
        try:
            get_provider(name)
        except errors.CryptoEnvironmentError:
            continue
        names.append(name)
    return tuple(names)
