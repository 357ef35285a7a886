# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Deterministic shuffling of password characters.

The password mapper places one character of each class at fixed
positions.  We remove that positional bias with a Fisher–Yates shuffle
whose random choices come from a pseudorandom byte stream keyed by the
key material: the first block is `HMAC(key, "shuffle-v1")`, and each
further block is `HMAC(key, previous_block + "shuffle-next")`.

Random indices are drawn from the stream by rejection sampling, in the
spirit of James Coglan's "sequin" module, so that every index in the
(shrinking) target range is equally likely.  Unlike sequin, rejected
samples are simply discarded; the stream never runs dry.

"""

# ruff: noqa: RUF002

from __future__ import annotations

from typing import TYPE_CHECKING

from pwderive import errors, primitives

if TYPE_CHECKING:
    from collections.abc import MutableSequence

__all__ = ('ShuffleStream', 'deterministic_shuffle')

SHUFFLE_TAG = b'shuffle-v1'
"""The HMAC message for the first stream block."""
EXTEND_TAG = b'shuffle-next'
"""The HMAC message suffix for all further stream blocks."""


class ShuffleStream:
    """Generate pseudorandom non-negative numbers from key material.

    The stream is consumed strictly in order, and a byte is never used
    twice.  Two streams constructed from the same key material yield
    the same numbers for the same sequence of requests.

    Attributes:
        blocks_used:
            The number of HMAC blocks generated so far.

    """

    def __init__(
        self,
        key_bytes: bytes | bytearray,
        /,
        *,
        provider: primitives.CryptoProvider | None = None,
    ) -> None:
        """Initialize the stream.

        Args:
            key_bytes:
                The key material keying the stream.  Must not be empty.
            provider:
                The cryptographic provider.  If not given, use the
                default provider.

        Raises:
            errors.ValidationError:
                The key material is empty.

        """
        if not key_bytes:
            msg = 'key material must not be empty'
            raise errors.ValidationError(msg)
        self._key = bytes(key_bytes)
        self._provider = (
            provider if provider is not None else primitives.get_provider()
        )
        self._block = self._provider.hmac256(self._key, SHUFFLE_TAG)
        self._pos = 0
        self.blocks_used = 1

    def _extend(self) -> None:
        """Replace the exhausted block with the next block."""
        self._block = self._provider.hmac256(
            self._key, self._block + EXTEND_TAG
        )
        self._pos = 0
        self.blocks_used += 1

    def read(self, count: int, /) -> bytes:
        """Consume and return the next `count` bytes of the stream."""
        out = bytearray()
        while len(out) < count:
            if self._pos >= len(self._block):
                self._extend()
            take = min(count - len(out), len(self._block) - self._pos)
            out.extend(self._block[self._pos : self._pos + take])
            self._pos += take
        return bytes(out)

    def generate(self, n: int, /) -> int:
        """Generate a uniformly distributed integer in `range(n)`.

        We read the smallest number `k` of bytes such that `256**k >= n`
        and interpret them as a big endian number `v`.  If `v` falls
        into the incomplete last "bucket" of size `256**k % n`, it is
        rejected and we try again with fresh bytes; otherwise we return
        `v % n`.

        Args:
            n:
                Generate numbers in the range 0, ..., `n` - 1.
                (Inclusive.)  Must be larger than 0.

        Returns:
            A pseudorandom number in the range 0, ..., `n` - 1.

        Raises:
            ValueError:
                The range is empty.

        Note:
            Using `n = 1` does not consume any bytes.

        """
        if n < 1:
            msg = 'invalid target range'
            raise ValueError(msg)
        if n == 1:
            return 0
        p = 1
        k = 0
        while p < n:
            p *= 256
            k += 1
        limit = p - p % n
        while True:
            v = int.from_bytes(self.read(k), 'big')
            if v < limit:
                return v % n


def deterministic_shuffle(
    chars: MutableSequence[str],
    key_bytes: bytes | bytearray,
    /,
    *,
    provider: primitives.CryptoProvider | None = None,
) -> None:
    """Shuffle `chars` in place, driven by the key material.

    For `i` from `len(chars) - 1` down to 1, swap position `i` with
    a position drawn uniformly from `0, ..., i`.  The permutation
    depends on the key material only, not on the characters.

    Args:
        chars:
            The characters to shuffle.  Modified in place.
        key_bytes:
            The key material.
        provider:
            The cryptographic provider.  If not given, use the default
            provider.

    Raises:
        errors.ValidationError:
            The key material is empty.

    """
    stream = ShuffleStream(key_bytes, provider=provider)
    for i in range(len(chars) - 1, 0, -1):
        j = stream.generate(i + 1)
        chars[i], chars[j] = chars[j], chars[i]
