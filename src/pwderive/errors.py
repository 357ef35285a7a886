# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Exceptions raised by the password derivation pipeline.

All exceptions derive from [`DerivationError`][], so callers may catch
every failure of a single derivation at once.  The concrete classes
additionally derive from the closest built-in exception type, so code
that only expects [`ValueError`][] (for bad parameters) or
[`RuntimeError`][] (for a broken host) keeps working.

"""

from __future__ import annotations

__all__ = (
    'ConfigurationError',
    'CryptoEnvironmentError',
    'DerivationError',
    'ValidationError',
)


class DerivationError(Exception):
    """A password derivation request failed."""


class ValidationError(DerivationError, ValueError):
    """Malformed or out-of-range request parameters.

    Raised for passwords that would be too short, empty master phrases,
    and rotation numbers without a canonical string form.

    """


class ConfigurationError(DerivationError, ValueError):
    """Unsafe or nonsensical security parameters.

    Raised chiefly for iteration counts below the work factor floor.
    The floor keeps offline brute-force search of the master phrase
    computationally expensive.

    """


class CryptoEnvironmentError(DerivationError, RuntimeError):
    """A required cryptographic capability is unavailable on this host.

    Attributes:
        provider:
            The name of the cryptographic provider that failed to load.

    """

    def __init__(self, provider: str, reason: str = '') -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(provider, reason)

    def __str__(self) -> str:
        msg = f'cryptographic provider {self.provider!r} unavailable'
        return f'{msg}: {self.reason}' if self.reason else msg
