"""
Tests unitarios para el módulo rc2.py
"""

import pytest

from core.rc2 import MAX_KEY_BITS, RC2Parameters


@pytest.mark.parametrize("length", [1, 5, 16, 128])
def test_default_bits_from_key_length(length):
    """Test: sin bits explícitos se usan len(key) * 8."""
    params = RC2Parameters(bytes(length))
    assert params.effective_key_bits == length * 8


def test_long_key_capped():
    """Test: claves de más de 128 bytes usan 1024 bits."""
    params = RC2Parameters(bytes(129))
    assert params.effective_key_bits == MAX_KEY_BITS == 1024


def test_explicit_bits_win():
    """Test: los bits indicados tienen prioridad."""
    params = RC2Parameters(bytes(16), bits=40)
    assert params.effective_key_bits == 40
    assert params.key == bytes(16)


def test_key_is_copied():
    """Test: modificar el buffer original no afecta a los parámetros."""
    key = bytearray(b"\x01" * 8)
    params = RC2Parameters(key)
    key[0] = 0xFF
    assert params.key == b"\x01" * 8


def test_repr_hides_key():
    assert "\\x01" not in repr(RC2Parameters(b"\x01" * 8))
