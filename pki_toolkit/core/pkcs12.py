"""
CertBag de PKCS#12.
- Certificados X.509 (OCTET STRING con el DER del certificado)
- Certificados SDSI (IA5String en base64)

CertBag ::= SEQUENCE {
    certId     BAG-TYPE.&id   ({CertTypes}),
    certValue  [0] EXPLICIT BAG-TYPE.&Type ({CertTypes}{@certId})
}
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pyasn1.type import char, univ

from . import asn1, pem
from .errors import StructuralMismatch


#  CONSTANTES

X509_CERTIFICATE_OID = '1.2.840.113549.1.9.22.1'
SDSI_CERTIFICATE_OID = '1.2.840.113549.1.9.22.2'

# OBJECT IDENTIFIER 1.2.840.113549.1.9.22.1 ya codificado
X509_CERTIFICATE_OID_DER = bytes([
    0x06, 0x0A, 0x2A, 0x86, 0x48, 0x86, 0xF7, 0x0D, 0x01, 0x09, 0x16, 0x01
])

CERT_VALUE_TAG = 0


@dataclass(frozen=True)
class CertBag:
    cert_id: univ.ObjectIdentifier
    cert_value: Optional[object] = None

    @classmethod
    def for_x509_certificate(cls, certificate) -> CertBag:
        """
        Argumentos:
            certificate: DER del certificado (bytes) o un OCTET STRING
        """
        if not isinstance(certificate, univ.OctetString):
            certificate = univ.OctetString(bytes(certificate))
        return cls(univ.ObjectIdentifier(X509_CERTIFICATE_OID), certificate)

    @classmethod
    def for_sdsi_certificate(cls, certificate) -> CertBag:
        """
        Argumentos:
            certificate: Certificado SDSI en base64 (str) o un IA5String
        """
        if not isinstance(certificate, char.IA5String):
            certificate = char.IA5String(certificate)
        return cls(univ.ObjectIdentifier(SDSI_CERTIFICATE_OID), certificate)

    @classmethod
    def from_x509_pem(cls, pem_data: str | bytes) -> CertBag:
        """
        Crea el bag a partir de un certificado en PEM.

        El certId se obtiene decodificando el identificador ya codificado, de
        modo que el resultado es igual al de for_x509_certificate().
        """
        der = pem.der_from_pem(pem_data, pem.CERTIFICATE)
        return cls(asn1.parse(X509_CERTIFICATE_OID_DER), univ.OctetString(der))

    @classmethod
    def from_sequence(cls, seq) -> CertBag:
        """
        Crea el bag a partir de una SEQUENCE ya decodificada.

        Si el segundo elemento lleva la etiqueta [0] (0xA0), su contenido se
        vuelve a decodificar como objeto genérico; si no, se guarda tal cual.

        Raises:
            StructuralMismatch: Si no es una SEQUENCE de 1 o 2 elementos cuyo
                primer elemento sea un OBJECT IDENTIFIER
        """
        if not asn1.is_type(seq, asn1.SEQUENCE):
            raise StructuralMismatch(
                f"CertBag tiene que ser SEQUENCE, encontrado {asn1.type_name(seq)}"
            )

        items = asn1.elements(seq)
        if not 1 <= len(items) <= 2:
            raise StructuralMismatch(
                f"CertBag: se esperaban 1 o 2 elementos, encontrados {len(items)}"
            )

        cert_id = asn1.expect(items, 0, asn1.OBJECT_IDENTIFIER, 'certId')

        cert_value = None
        if len(items) == 2:
            value = items[1]
            if asn1.has_outer_tag(value, asn1.context_tag(CERT_VALUE_TAG)):
                cert_value = asn1.unwrap_explicit(value, CERT_VALUE_TAG)
            else:
                cert_value = value

        return cls(cert_id, cert_value)

    @classmethod
    def from_der(cls, data: bytes) -> CertBag:
        return cls.from_sequence(asn1.parse(data))

    @property
    def is_x509(self) -> bool:
        return str(self.cert_id) == X509_CERTIFICATE_OID

    def to_sequence(self) -> univ.Sequence:
        components = [self.cert_id]
        if self.cert_value is not None:
            components.append(asn1.explicit(self.cert_value, CERT_VALUE_TAG))
        return asn1.build_sequence(*components)

    def encode(self) -> bytes:
        return asn1.encode(self.to_sequence())
