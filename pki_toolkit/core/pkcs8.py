"""
Clave privada PKCS#8 (PrivateKeyInfo / OneAsymmetricKey).
- Conversión desde claves RSA en PKCS#1 y claves EC (SEC1)
- Lectura de PrivateKeyInfo ya codificados
- Atributos [0] y clave pública [1] opcionales

OneAsymmetricKey ::= SEQUENCE {
    version                   Version,
    privateKeyAlgorithm       PrivateKeyAlgorithmIdentifier,
    privateKey                PrivateKey,
    attributes            [0] Attributes OPTIONAL,
    ...,
    [[2: publicKey        [1] PublicKey OPTIONAL ]],
    ...
}
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509 import ObjectIdentifier
from pyasn1.type import univ

from . import asn1, pem
from .asn1 import AlgorithmIdentifier
from .errors import StructuralMismatch, UnexpectedElementType


#  CONSTANTES

RSA_ENCRYPTION_OID = '1.2.840.113549.1.1.1'
EC_PUBLIC_KEY_OID = '1.2.840.10045.2.1'

DEFAULT_VERSION = 0
V2_VERSION = 1          # OneAsymmetricKey con publicKey (RFC 5958)

ATTRIBUTES_TAG = 0
PUBLIC_KEY_TAG = 1

END_OF_SEQUENCE = 'fin de la secuencia'

# Nombre de curva (ej: 'secp256r1') -> OID en notación de puntos
CURVE_OIDS = {
    ec.get_curve_for_oid(oid).name: oid.dotted_string
    for oid in vars(ec.EllipticCurveOID).values()
    if isinstance(oid, ObjectIdentifier)
}


def _curve_oid(der: bytes) -> str:
    """Carga la clave EC con cryptography y devuelve el OID de su curva."""
    try:
        key = serialization.load_der_private_key(der, password=None, backend=default_backend())
    except (ValueError, TypeError) as e:
        raise StructuralMismatch(f"Clave EC ilegible: {e}") from e

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise StructuralMismatch(f"Se esperaba una clave EC, encontrada {type(key).__name__}")

    try:
        return CURVE_OIDS[key.curve.name]
    except KeyError:
        raise StructuralMismatch(f"Curva desconocida: {key.curve.name}")


@dataclass(frozen=True)
class PrivateKeyInfo:
    version: int
    algorithm: AlgorithmIdentifier
    private_key: bytes
    attributes: Optional[univ.SetOf] = None
    public_key: Optional[univ.BitString] = None

    #  CONSTRUCTORES

    @classmethod
    def from_pkcs1_rsa(cls, key_seq) -> PrivateKeyInfo:
        """
        Envuelve una clave RSA PKCS#1 (RSAPrivateKey) ya decodificada.

        Argumentos:
            key_seq: SEQUENCE genérica con la clave RSA

        Returns:
            PrivateKeyInfo con versión 0 y algoritmo rsaEncryption
        """
        return cls(
            version=DEFAULT_VERSION,
            algorithm=AlgorithmIdentifier.from_identifier(RSA_ENCRYPTION_OID, univ.Null('')),
            private_key=asn1.encode(key_seq),
        )

    @classmethod
    def from_pkcs1_rsa_pem(cls, pem_data: str | bytes) -> PrivateKeyInfo:
        der = pem.der_from_pem(pem_data, pem.RSA_PRIVATE_KEY)
        return cls.from_pkcs1_rsa(asn1.parse(der))

    @classmethod
    def from_ecc_der(cls, der: bytes) -> PrivateKeyInfo:
        """
        Convierte una clave EC en formato SEC1 (ECPrivateKey).

        Se conservan version, privateKey y publicKey (elementos 0, 1 y 3); los
        parámetros de curva pasan al AlgorithmIdentifier como OID de curva.

        Raises:
            StructuralMismatch: Si la estructura tiene menos de 4 elementos,
                no es una clave EC o la curva no es conocida
        """
        seq = asn1.parse(der)
        if not asn1.is_type(seq, asn1.SEQUENCE):
            raise StructuralMismatch(
                f"ECPrivateKey tiene que ser SEQUENCE, encontrado {asn1.type_name(seq)}"
            )

        items = asn1.elements(seq)
        if len(items) < 4:
            raise StructuralMismatch(
                f"ECPrivateKey: se esperaban al menos 4 elementos, encontrados {len(items)}"
            )

        curve_oid = _curve_oid(der)
        key_seq = asn1.build_sequence(items[0], items[1], items[3])

        return cls(
            version=DEFAULT_VERSION,
            algorithm=AlgorithmIdentifier.from_name(
                'ecPublicKey', univ.ObjectIdentifier(curve_oid)
            ),
            private_key=asn1.encode(key_seq),
        )

    @classmethod
    def from_ecc_pem(cls, pem_data: str | bytes) -> PrivateKeyInfo:
        return cls.from_ecc_der(pem.der_from_pem(pem_data, pem.EC_PRIVATE_KEY))

    @classmethod
    def from_sequence(cls, seq) -> PrivateKeyInfo:
        """
        Lee un PrivateKeyInfo ya decodificado.

        Argumentos:
            seq: SEQUENCE genérica

        Returns:
            PrivateKeyInfo

        Raises:
            UnexpectedElementType: Si falta un elemento obligatorio o su tipo
                no es el esperado
        """
        if not asn1.is_type(seq, asn1.SEQUENCE):
            raise StructuralMismatch(
                f"PrivateKeyInfo tiene que ser SEQUENCE, encontrado {asn1.type_name(seq)}"
            )

        items = asn1.elements(seq)
        required = (
            (asn1.INTEGER, 'INTEGER'),
            (asn1.SEQUENCE, 'SEQUENCE'),
            (asn1.OCTET_STRING, 'OCTET STRING'),
        )
        for index, (tag_set, expected) in enumerate(required):
            item = items[index] if index < len(items) else None
            if not asn1.is_type(item, tag_set):
                raise UnexpectedElementType(index, expected, asn1.type_name(item))

        # Cada campo opcional aparece como mucho una vez y en este orden
        optional = [
            ('attributes', '[0]', asn1.context_tag(ATTRIBUTES_TAG), asn1.SET),
            ('public_key', '[1]', asn1.context_tag(PUBLIC_KEY_TAG, constructed=False), asn1.BIT_STRING),
        ]
        found = {}
        for index, item in enumerate(items[3:], start=3):
            expected = ' o '.join(label for _, label, _, _ in optional) or END_OF_SEQUENCE
            while optional and not asn1.has_outer_tag(item, optional[0][2]):
                optional.pop(0)
            if not optional:
                raise UnexpectedElementType(index, expected, asn1.type_name(item))
            field, _, _, tag_set = optional.pop(0)
            found[field] = asn1.unwrap_implicit(item, tag_set)

        return cls(
            version=int(items[0]),
            algorithm=AlgorithmIdentifier.from_sequence(items[1]),
            private_key=bytes(items[2]),
            **found,
        )

    @classmethod
    def from_der(cls, data: bytes) -> PrivateKeyInfo:
        return cls.from_sequence(asn1.parse(data))

    @classmethod
    def from_pkcs8_pem(cls, pem_data: str | bytes) -> PrivateKeyInfo:
        return cls.from_der(pem.der_from_pem(pem_data, pem.PRIVATE_KEY))

    #  CAMPOS OPCIONALES

    def with_attributes(self, attributes) -> PrivateKeyInfo:
        return dataclasses.replace(self, attributes=attributes)

    def with_public_key(self, public_key) -> PrivateKeyInfo:
        """
        Añade la clave pública [1]. Ese campo solo existe en la versión v2,
        así que la versión pasa a ser al menos 1.
        """
        if not isinstance(public_key, univ.BitString):
            public_key = univ.BitString.fromOctetString(bytes(public_key))
        return dataclasses.replace(
            self, public_key=public_key, version=max(self.version, V2_VERSION)
        )

    #  CODIFICACIÓN

    def to_sequence(self) -> univ.Sequence:
        components = [
            univ.Integer(self.version),
            self.algorithm.to_asn1(),
            univ.OctetString(self.private_key),
        ]
        if self.attributes is not None:
            components.append(asn1.implicit(self.attributes, ATTRIBUTES_TAG))
        if self.public_key is not None:
            components.append(asn1.implicit(self.public_key, PUBLIC_KEY_TAG))
        return asn1.build_sequence(*components)

    def encode(self) -> bytes:
        return asn1.encode(self.to_sequence())



#  TESTING

if __name__ == "__main__":
    from cryptography.hazmat.primitives.asymmetric import rsa

    print("[TEST] Generando clave RSA de prueba...")
    rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048, backend=default_backend())
    pkcs1_pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )

    info = PrivateKeyInfo.from_pkcs1_rsa_pem(pkcs1_pem)
    expected = rsa_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    print(f"  - Algoritmo: {info.algorithm.name} ({info.algorithm.algorithm})")
    print(f"  - PKCS#8 igual al de cryptography: {'✓ OK' if info.encode() == expected else '✗ ERROR'}")

    print("\n[TEST] Generando clave EC de prueba...")
    ec_key = ec.generate_private_key(ec.SECP256R1(), backend=default_backend())
    ec_pem = ec_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    info = PrivateKeyInfo.from_ecc_pem(ec_pem)
    loaded = serialization.load_der_private_key(info.encode(), password=None, backend=default_backend())
    same = loaded.private_numbers() == ec_key.private_numbers()
    print(f"  - Curva: {info.algorithm.parameters}")
    print(f"  - Clave recargada: {'✓ OK' if same else '✗ ERROR'}")
