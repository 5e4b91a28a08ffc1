"""
Solicitud de certificado PKCS#10 (CSR).

CertificationRequest ::= SEQUENCE {
    certificationRequestInfo  CertificationRequestInfo,
    signatureAlgorithm        AlgorithmIdentifier,
    signature                 BIT STRING
}

El contenido de certificationRequestInfo se guarda tal cual, sin interpretar.
"""
from __future__ import annotations

from dataclasses import dataclass

from pyasn1.type import univ

from . import asn1, pem
from .asn1 import AlgorithmIdentifier
from .errors import PemFormatError, StructuralMismatch


@dataclass(frozen=True)
class CertificationRequest:
    request_info: univ.Sequence
    signature_algorithm: AlgorithmIdentifier
    signature: univ.BitString

    @classmethod
    def from_sequence(cls, seq) -> CertificationRequest:
        """
        Crea la solicitud a partir de una SEQUENCE ya decodificada.

        Argumentos:
            seq: SEQUENCE genérica con exactamente 3 elementos

        Returns:
            CertificationRequest

        Raises:
            StructuralMismatch: Si el número de elementos o alguno de sus
                tipos no coincide
        """
        if not asn1.is_type(seq, asn1.SEQUENCE):
            raise StructuralMismatch(
                f"CertificationRequest tiene que ser SEQUENCE, encontrado {asn1.type_name(seq)}"
            )

        items = asn1.elements(seq)
        if len(items) != 3:
            raise StructuralMismatch(
                f"CertificationRequest: se esperaban 3 elementos, encontrados {len(items)}"
            )

        request_info = asn1.expect(items, 0, asn1.SEQUENCE, 'certificationRequestInfo')
        algorithm_seq = asn1.expect(items, 1, asn1.SEQUENCE, 'signatureAlgorithm')
        signature = asn1.expect(items, 2, asn1.BIT_STRING, 'signature')

        return cls(
            request_info=request_info,
            signature_algorithm=AlgorithmIdentifier.from_sequence(algorithm_seq),
            signature=signature,
        )

    @classmethod
    def from_der(cls, data: bytes) -> CertificationRequest:
        return cls.from_sequence(asn1.parse(data))

    @classmethod
    def from_pem(cls, pem_data: str | bytes) -> CertificationRequest:
        try:
            der = pem.der_from_pem(pem_data, pem.CERTIFICATE_REQUEST)
        except PemFormatError:
            der = pem.der_from_pem(pem_data, pem.NEW_CERTIFICATE_REQUEST)
        return cls.from_der(der)

    def to_sequence(self) -> univ.Sequence:
        return asn1.build_sequence(
            self.request_info,
            self.signature_algorithm.to_asn1(),
            self.signature,
        )

    def encode(self) -> bytes:
        return asn1.encode(self.to_sequence())
