"""
Utilidades PEM.
Extrae los bytes DER de un bloque PEM (-----BEGIN <ETIQUETA>-----).
"""
from __future__ import annotations

import binascii
import io
from pathlib import Path
from typing import Optional

from pyasn1_modules import pem as pem_reader

from .errors import PemFormatError


#  ETIQUETAS CONOCIDAS

CERTIFICATE = "CERTIFICATE"
CERTIFICATE_REQUEST = "CERTIFICATE REQUEST"
NEW_CERTIFICATE_REQUEST = "NEW CERTIFICATE REQUEST"
PRIVATE_KEY = "PRIVATE KEY"
RSA_PRIVATE_KEY = "RSA PRIVATE KEY"
EC_PRIVATE_KEY = "EC PRIVATE KEY"

KNOWN_LABELS = (
    CERTIFICATE,
    CERTIFICATE_REQUEST,
    NEW_CERTIFICATE_REQUEST,
    PRIVATE_KEY,
    RSA_PRIVATE_KEY,
    EC_PRIVATE_KEY,
)


def _markers(label: str) -> tuple[str, str]:
    return f"-----BEGIN {label}-----", f"-----END {label}-----"


def der_from_pem(pem: str | bytes, label: Optional[str] = None) -> bytes:
    """
    Decodifica el primer bloque PEM con la etiqueta indicada.

    Argumentos:
        pem: Texto PEM (str o bytes)
        label: Etiqueta del bloque (ej: 'CERTIFICATE'). Si es None se acepta
            cualquiera de KNOWN_LABELS

    Returns:
        Bytes DER del bloque

    Raises:
        PemFormatError: Si no hay ningún bloque válido
    """
    if isinstance(pem, bytes):
        pem = pem.decode('ascii', errors='replace')

    labels = (label,) if label else KNOWN_LABELS
    markers = [_markers(name) for name in labels]

    try:
        idx, substrate = pem_reader.readPemBlocksFromFile(io.StringIO(pem), *markers)
    except binascii.Error as e:
        raise PemFormatError(f"Contenido base64 inválido: {e}") from e

    if idx < 0 or not substrate:
        expected = label or ", ".join(KNOWN_LABELS)
        raise PemFormatError(f"No se encontró ningún bloque PEM ({expected})")

    return substrate


def load_pem_file(path: str | Path, label: Optional[str] = None) -> bytes:
    """
    Lee un fichero PEM y devuelve los bytes DER de su primer bloque.

    Argumentos:
        path: Ruta al fichero
        label: Etiqueta esperada (opcional)

    Returns:
        Bytes DER
    """
    path = Path(path)
    text = path.read_text(encoding='ascii', errors='replace')
    der = der_from_pem(text, label)
    print(f"[PEM] {len(der)} bytes DER leídos de {path}")
    return der
