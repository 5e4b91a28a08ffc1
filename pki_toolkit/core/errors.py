"""
Errores del toolkit.
Todos derivan de ValueError: son fallos de validación inmediatos y no
reintentables, lanzados antes de modificar ningún estado.
"""


class PkiToolkitError(ValueError):
    """Error base de las operaciones de cifrado y de las estructuras PKI."""


class InvalidKeyLength(PkiToolkitError):
    """La clave no tiene una longitud admitida (16 o 24 bytes para DESede)."""


class EngineNotInitialized(PkiToolkitError):
    """Se ha procesado un bloque antes de llamar a init()."""


class BufferTooShort(PkiToolkitError):
    """El buffer de entrada o de salida no tiene sitio para un bloque completo."""


class StructuralMismatch(PkiToolkitError):
    """Número o tipo de elementos incorrecto al decodificar una SEQUENCE DER."""


class UnexpectedElementType(StructuralMismatch):
    """
    Un elemento de la secuencia no es del tipo esperado.

    Atributos:
        index: Posición del elemento dentro de la secuencia
        expected: Tipo ASN.1 esperado (ej: 'INTEGER')
        actual: Tipo ASN.1 encontrado, o 'ausente' si no existe
    """

    def __init__(self, index: int, expected: str, actual: str):
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Elemento {index}: se esperaba {expected}, encontrado {actual}"
        )


class PemFormatError(PkiToolkitError):
    """El texto PEM no contiene un bloque con la etiqueta buscada."""
