"""
Motor Triple-DES (DESede).
- Construcción EDE (Encrypt-Decrypt-Encrypt) sobre 2 o 3 subclaves de 8 bytes
- Solo la primitiva de bloque: sin modo de operación, sin padding
- Claves de 16 bytes (k3 = k1) o de 24 bytes
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .crypto import KeySchedule, build_schedule, des_block
from .errors import BufferTooShort, EngineNotInitialized, InvalidKeyLength


#  CONSTANTES

BLOCK_SIZE = 8
KEY_SIZES = (16, 24)

TWO_KEY_SECURITY_BITS = 80      # límite por ataque meet-in-the-middle
THREE_KEY_SECURITY_BITS = 112


@dataclass(frozen=True)
class CipherContext:
    """Los tres schedules y la dirección, fijados una sola vez en init()."""
    schedule1: KeySchedule
    schedule2: KeySchedule
    schedule3: KeySchedule
    for_encryption: bool
    two_key: bool


class DESedeEngine:
    """
    Cifrador de bloque Triple-DES.

    Uso:
        engine = DESedeEngine()
        engine.init(True, key)
        ciphertext = engine.process(block)
    """

    algorithm_name = "DESede"
    block_size = BLOCK_SIZE

    def __init__(self):
        self._context: Optional[CipherContext] = None

    @property
    def context(self) -> Optional[CipherContext]:
        return self._context

    @property
    def initialized(self) -> bool:
        return self._context is not None

    def init(self, for_encryption: bool, key: bytes) -> None:
        """
        Prepara los tres key schedules.

        El primer y el tercer schedule van en la dirección pedida y el segundo
        en la contraria; así tres DES simples forman la construcción EDE.

        Argumentos:
            for_encryption: True para cifrar, False para descifrar
            key: Clave de 16 bytes (dos subclaves) o 24 bytes (tres subclaves)

        Raises:
            InvalidKeyLength: Si la clave no mide 16 ni 24 bytes. El motor
                conserva el estado anterior.
        """
        key = bytes(key)
        if len(key) not in KEY_SIZES:
            raise InvalidKeyLength(
                f"Tamaño de clave inválido: {len(key)} bytes (esperado: 16 o 24)"
            )

        k1 = key[0:8]
        k2 = key[8:16]

        schedule1 = build_schedule(for_encryption, k1)
        schedule2 = build_schedule(not for_encryption, k2)

        two_key = len(key) == 16
        if two_key:
            schedule3 = schedule1
        else:
            schedule3 = build_schedule(for_encryption, key[16:24])

        self._context = CipherContext(
            schedule1=schedule1,
            schedule2=schedule2,
            schedule3=schedule3,
            for_encryption=for_encryption,
            two_key=two_key,
        )

    def process_block(self, inp: bytes, inp_off: int, out: bytearray, out_off: int) -> int:
        """
        Cifra o descifra un bloque de 8 bytes.

        Argumentos:
            inp: Buffer de entrada
            inp_off: Posición del bloque dentro de inp
            out: Buffer de salida (mutable, ej: bytearray)
            out_off: Posición donde escribir el resultado

        Returns:
            Número de bytes escritos (siempre 8)

        Raises:
            EngineNotInitialized: Si no se ha llamado a init()
            BufferTooShort: Si inp o out no tienen 8 bytes desde su offset
        """
        ctx = self._context
        if ctx is None:
            raise EngineNotInitialized("Motor DESede no inicializado")

        if inp_off < 0 or inp_off + BLOCK_SIZE > len(inp):
            raise BufferTooShort("Buffer de entrada demasiado corto")
        if out_off < 0 or out_off + BLOCK_SIZE > len(out):
            raise BufferTooShort("Buffer de salida demasiado corto")

        block = bytes(inp[inp_off:inp_off + BLOCK_SIZE])

        if ctx.for_encryption:
            order = (ctx.schedule1, ctx.schedule2, ctx.schedule3)
        else:
            order = (ctx.schedule3, ctx.schedule2, ctx.schedule1)

        for schedule in order:
            block = des_block(schedule, block)

        out[out_off:out_off + BLOCK_SIZE] = block
        return BLOCK_SIZE

    def process(self, block: bytes) -> bytes:
        """Versión pura de process_block: devuelve un bloque nuevo de 8 bytes."""
        out = bytearray(BLOCK_SIZE)
        length = self.process_block(block, 0, out, 0)
        return bytes(out[:length])

    def bits_of_security(self) -> int:
        """
        Seguridad estimada en bits (no es la longitud de la clave).

        Returns:
            80 si schedule1 y schedule3 coinciden (variante de dos claves),
            112 en otro caso
        """
        ctx = self._context
        if ctx is None:
            raise EngineNotInitialized("Motor DESede no inicializado")

        if ctx.schedule1 == ctx.schedule3:
            return TWO_KEY_SECURITY_BITS
        return THREE_KEY_SECURITY_BITS

    def reset(self) -> None:
        # Sin estado por bloque: nada que reiniciar
        pass



#  TESTING

if __name__ == "__main__":
    key = bytes(range(1, 25))
    plaintext = bytes(8)

    print("[TEST] Cifrando bloque con clave de 24 bytes...")
    enc = DESedeEngine()
    enc.init(True, key)
    ciphertext = enc.process(plaintext)
    print(f"  - Ciphertext: {ciphertext.hex()}")
    print(f"  - Seguridad: {enc.bits_of_security()} bits")

    print("\n[TEST] Descifrando bloque...")
    dec = DESedeEngine()
    dec.init(False, key)
    recovered = dec.process(ciphertext)
    print(f"  - Resultado: {'✓ OK' if recovered == plaintext else '✗ ERROR'}")

    print("\n[TEST] Clave de 16 bytes...")
    enc.init(True, key[:16])
    print(f"  - Seguridad: {enc.bits_of_security()} bits")

    print("\n[TEST] Clave de 8 bytes...")
    try:
        DESedeEngine().init(True, key[:8])
        print("  - ✗ ERROR: debería haber fallado")
    except InvalidKeyLength as e:
        print(f"  - ✓ Falló como esperado: {e}")
