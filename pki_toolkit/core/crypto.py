"""
Primitiva DES de un solo bloque.
- DES (FIPS 46-3) sobre bloques de 8 bytes, sin modo de operación
- La transformación la realiza `cryptography` (TripleDES con k1 = k2 = k3)
- KeySchedule: material de ronda para una subclave y una dirección
"""
from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from .errors import BufferTooShort, InvalidKeyLength


#  CONSTANTES

DES_BLOCK_SIZE = 8      # 64 bits por bloque
DES_KEY_SIZE = 8        # 56 bits efectivos + 8 de paridad


#  KEY SCHEDULE

@dataclass(frozen=True)
class KeySchedule:
    """
    Material de ronda derivado de una subclave de 8 bytes y una dirección.

    Dos schedules son iguales si se construyeron con la misma subclave y la
    misma dirección. El contexto de `cryptography` es opaco y no participa
    en la comparación.
    """
    subkey: bytes = field(repr=False)
    forward: bool
    _context: object = field(repr=False, compare=False)


def build_schedule(forward: bool, subkey: bytes) -> KeySchedule:
    """
    Genera el key schedule de DES para una subclave.

    Argumentos:
        forward: True para cifrar, False para descifrar
        subkey: Subclave DES de 8 bytes

    Returns:
        KeySchedule inmutable

    Raises:
        InvalidKeyLength: Si la subclave no mide 8 bytes
    """
    subkey = bytes(subkey)
    if len(subkey) != DES_KEY_SIZE:
        raise InvalidKeyLength(
            f"Tamaño de subclave DES inválido: {len(subkey)} bytes (esperado: {DES_KEY_SIZE})"
        )

    # EDE con las tres subclaves iguales equivale a un único DES
    cipher = Cipher(
        TripleDES(subkey * 3),
        modes.ECB(),
        backend=default_backend()
    )
    context = cipher.encryptor() if forward else cipher.decryptor()

    return KeySchedule(subkey=subkey, forward=forward, _context=context)


def des_block(schedule: KeySchedule, block: bytes) -> bytes:
    """
    Aplica una vez DES a un bloque de 8 bytes.

    ECB no guarda estado entre bloques, así que el mismo contexto sirve
    para todas las llamadas (nunca se llama a finalize()).
    """
    if len(block) != DES_BLOCK_SIZE:
        raise BufferTooShort(
            f"Tamaño de bloque inválido: {len(block)} bytes (esperado: {DES_BLOCK_SIZE})"
        )
    return schedule._context.update(bytes(block))
