# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Test text normalization and salt derivation."""

from __future__ import annotations

import math

import hypothesis
import pytest
from hypothesis import strategies

import tests
from pwderive import errors, primitives, salt


class TestNormalization:
    """Test [`salt.normalize_text`][] and [`salt.canonical_rotation`][]."""

    @pytest.mark.parametrize(
        ['text', 'expected'],
        [
            pytest.param('example.com', 'example.com', id='ascii'),
            pytest.param('  example.com\n', 'example.com', id='whitespace'),
            pytest.param('Cafe\u0301', 'Caf\u00e9', id='decomposed'),
            pytest.param('\u212b', '\u00c5', id='angstrom-sign'),
            pytest.param('\ufb01', '\ufb01', id='compatibility-ligature'),
        ],
    )
    def test_100_normalize_text(self, text: str, expected: str) -> None:
        """Text is composed canonically and stripped."""
        assert salt.normalize_text(text) == expected

    @hypothesis.given(text=strategies.text())
    def test_101_normalize_text_idempotent(self, text: str) -> None:
        """Normalizing twice is the same as normalizing once."""
        once = salt.normalize_text(text)
        assert salt.normalize_text(once) == once

    @pytest.mark.parametrize(
        ['value', 'expected'],
        [
            (1, '1'),
            (0, '0'),
            (-3, '-3'),
            (10**20, '100000000000000000000'),
            (2.0, '2'),
            (-0.0, '0'),
            ('1', '1'),
            (' v2 ', 'v2'),
            ('', ''),
        ],
    )
    def test_110_canonical_rotation(
        self, value: int | float | str, expected: str
    ) -> None:
        """Rotation numbers have a canonical string form."""
        assert salt.canonical_rotation(value) == expected

    @pytest.mark.parametrize(
        'value',
        [True, False, 1.5, math.nan, math.inf, -math.inf, None, b'1', [1]],
    )
    def test_111_canonical_rotation_invalid(self, value: object) -> None:
        """Values without a canonical form are rejected."""
        with pytest.raises(errors.ValidationError, match='rotation number'):
            salt.canonical_rotation(value)  # type: ignore[arg-type]


class TestSalt:
    """Test [`salt.derive_salt`][]."""

    def test_200_known_salt(self) -> None:
        """The salt matches a known-good value."""
        assert (
            salt.derive_salt(tests.DUMMY_CONTEXT, 1).hex()
            == tests.DUMMY_SALT_HEX
        )

    def test_201_salt_construction(
        self, provider: primitives.CryptoProvider
    ) -> None:
        """The salt is a truncated SHA-256 of the tagged payload."""
        expected = provider.hash256(b'pwgen-salt-v1|example.com|1')[:16]
        assert (
            salt.derive_salt(tests.DUMMY_CONTEXT, 1, provider=provider)
            == expected
        )

    @hypothesis.given(
        context=strategies.text(max_size=50),
        rotation=strategies.one_of(
            strategies.integers(), strategies.text(max_size=10)
        ),
    )
    def test_202_salt_size(self, context: str, rotation: int | str) -> None:
        """The salt always has the same size."""
        assert len(salt.derive_salt(context, rotation)) == salt.SALT_SIZE

    @pytest.mark.parametrize(
        ['rotation1', 'rotation2'],
        [(1, '1'), (2, 2.0), (7, ' 7 '), ('v2', '\tv2')],
    )
    def test_203_equivalent_rotations(
        self, rotation1: int | float | str, rotation2: int | float | str
    ) -> None:
        """Equivalent rotation numbers yield equal salts."""
        assert salt.derive_salt('ctx', rotation1) == salt.derive_salt(
            'ctx', rotation2
        )

    def test_204_equivalent_contexts(self) -> None:
        """Canonically equivalent contexts yield equal salts."""
        assert salt.derive_salt('caf\u00e9', 1) == salt.derive_salt(
            ' cafe\u0301 ', 1
        )

    @pytest.mark.parametrize(
        ['args1', 'args2'],
        [
            (('example.com', 1), ('example.com', 2)),
            (('example.com', 1), ('example.org', 1)),
            (('', 1), ('', 2)),
        ],
    )
    def test_205_distinct_inputs(
        self, args1: tuple[str, int | str], args2: tuple[str, int | str]
    ) -> None:
        """Distinct contexts or rotation numbers yield distinct salts."""
        assert salt.derive_salt(*args1) != salt.derive_salt(*args2)

    def test_206_invalid_rotation(self) -> None:
        """Invalid rotation numbers are rejected."""
        with pytest.raises(errors.ValidationError):
            salt.derive_salt(tests.DUMMY_CONTEXT, 1.5)
