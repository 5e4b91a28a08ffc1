"""
Parámetros de clave para RC2.
RC2 admite una longitud de clave efectiva independiente de la longitud real.
"""
from __future__ import annotations

from typing import Optional


MAX_KEY_BITS = 1024


class RC2Parameters:
    """
    Clave RC2 junto con sus bits efectivos.

    Si no se indican los bits, se usan len(key) * 8, o 1024 cuando la clave
    supera los 128 bytes.
    """

    def __init__(self, key: bytes, bits: Optional[int] = None):
        self._key = bytes(key)
        if bits is not None:
            self._effective_key_bits = bits
        elif len(self._key) > 128:
            self._effective_key_bits = MAX_KEY_BITS
        else:
            self._effective_key_bits = len(self._key) * 8

    @property
    def key(self) -> bytes:
        return self._key

    @property
    def effective_key_bits(self) -> int:
        return self._effective_key_bits

    def __repr__(self):
        return f"RC2Parameters(effective_key_bits={self._effective_key_bits})"
