"""
Módulo core con el motor Triple-DES y las estructuras PKI.

Módulos disponibles:
- errors: Jerarquía de errores (todos derivan de ValueError)
- crypto: Primitiva DES de un bloque (sobre cryptography)
- desede: Motor Triple-DES EDE con claves de 16 o 24 bytes
- rc2: Parámetros de clave RC2 (bits efectivos)
- pem: Extracción de DER desde bloques PEM
- asn1: Utilidades DER genéricas y AlgorithmIdentifier
- pkcs10: Solicitud de certificado (CertificationRequest)
- pkcs12: CertBag (certificados X.509 y SDSI)
- pkcs8: Clave privada PKCS#8 (PrivateKeyInfo)
"""

# Importar módulos para facilitar el uso
from . import errors
from . import crypto
from . import desede
from . import rc2
from . import pem
from . import asn1
from . import pkcs10
from . import pkcs12
from . import pkcs8

__all__ = ['errors', 'crypto', 'desede', 'rc2', 'pem', 'asn1', 'pkcs10', 'pkcs12', 'pkcs8']
