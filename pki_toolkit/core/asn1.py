"""
Utilidades ASN.1/DER sobre pyasn1.
- Decodificación sin esquema a un árbol genérico de objetos pyasn1
- Codificación DER canónica
- Comprobación de tipos por etiqueta (tagSet)
- Envoltorios EXPLICIT / IMPLICIT de clase contexto
- AlgorithmIdentifier
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from pyasn1.codec.ber.decoder import (
    AnyPayloadDecoder,
    SequenceOrSequenceOfPayloadDecoder,
    SetOrSetOfPayloadDecoder,
)
from pyasn1.codec.der import decoder as der_decoder
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import base, char, tag, univ

from .errors import StructuralMismatch


#  TIPOS UNIVERSALES

SEQUENCE = univ.Sequence.tagSet      # también SEQUENCE OF
SET = univ.Set.tagSet                # también SET OF
INTEGER = univ.Integer.tagSet
BIT_STRING = univ.BitString.tagSet
OCTET_STRING = univ.OctetString.tagSet
OBJECT_IDENTIFIER = univ.ObjectIdentifier.tagSet
NULL = univ.Null.tagSet
IA5_STRING = char.IA5String.tagSet

_TYPE_NAMES = {
    SEQUENCE: 'SEQUENCE',
    SET: 'SET',
    INTEGER: 'INTEGER',
    BIT_STRING: 'BIT STRING',
    OCTET_STRING: 'OCTET STRING',
    OBJECT_IDENTIFIER: 'OBJECT IDENTIFIER',
    NULL: 'NULL',
    IA5_STRING: 'IA5String',
    char.UTF8String.tagSet: 'UTF8String',
    char.PrintableString.tagSet: 'PrintableString',
    univ.Boolean.tagSet: 'BOOLEAN',
}

ABSENT = 'ausente'

MAX_LOW_TAG_NUMBER = 30


class DerEncodable(Protocol):
    """Cualquier estructura que sabe producir su codificación DER."""

    def encode(self) -> bytes:
        ...


#  CODEC

class _ContextTaggedDecoder(AnyPayloadDecoder):
    """
    Guarda un elemento con etiqueta de contexto como ANY sin etiquetar que
    contiene el TLV completo. Sin esquema no se puede saber si la etiqueta
    es EXPLICIT o IMPLICIT, así que se deja para quien lo interprete.
    """

    def _createComponent(self, asn1Spec, tagSet, value, **options):
        if asn1Spec is not None:
            return super()._createComponent(asn1Spec, tagSet, value, **options)
        return univ.Any(value)


class _EmptyContainerMixin:
    """
    Sin esquema, pyasn1 no crea contenedor para una SEQUENCE/SET sin
    elementos. Aquí se devuelve un SEQUENCE OF / SET OF vacío, también
    cuando aparece anidado dentro de otra estructura.
    """

    def valueDecoder(self, substrate, asn1Spec, tagSet=None, length=None,
                     state=None, decodeFun=None, substrateFun=None, **options):
        if asn1Spec is None and substrateFun is None and length == 0:
            if tagSet[0].tagFormat != tag.tagFormatConstructed:
                raise PyAsn1Error('Constructed tag format expected')
            proto = self.protoSequenceComponent
            yield proto.clone(
                tagSet=tag.TagSet(proto.tagSet.baseTag, *tagSet.superTags)
            ).clear()
            return

        yield from super().valueDecoder(
            substrate, asn1Spec, tagSet, length, state, decodeFun, substrateFun, **options
        )


class _SequenceDecoder(_EmptyContainerMixin, SequenceOrSequenceOfPayloadDecoder):
    pass


class _SetDecoder(_EmptyContainerMixin, SetOrSetOfPayloadDecoder):
    pass


_context_decoder = _ContextTaggedDecoder()

_TAG_MAP = dict(der_decoder.TAG_MAP)
_TAG_MAP[univ.Sequence.tagSet] = _SequenceDecoder()
_TAG_MAP[univ.Set.tagSet] = _SetDecoder()
for _number in range(MAX_LOW_TAG_NUMBER + 1):
    for _fmt in (tag.tagFormatSimple, tag.tagFormatConstructed):
        _TAG_MAP[tag.TagSet((), tag.Tag(tag.tagClassContext, _fmt, _number))] = _context_decoder


def parse(data: bytes):
    """
    Decodifica un objeto DER completo sin esquema.

    Las SEQUENCE/SET se devuelven como contenedores genéricos de pyasn1 y
    los elementos con etiqueta de contexto ([n]) como univ.Any con su TLV
    completo, que se vuelve a codificar byte a byte.

    Solo se acepta la codificación canónica: el objeto decodificado tiene
    que volver a codificarse exactamente en los mismos bytes.

    Raises:
        StructuralMismatch: Si los bytes no son DER válido, sobran bytes o
            la codificación no es canónica (ej: longitudes no mínimas)
    """
    data = bytes(data)
    try:
        value, rest = der_decoder.decode(data, tagMap=_TAG_MAP)
    except PyAsn1Error as e:
        raise StructuralMismatch(f"DER inválido: {e}") from e

    if rest:
        raise StructuralMismatch(f"{len(rest)} bytes sobrantes tras el objeto DER")

    try:
        canonical = encode(value)
    except PyAsn1Error as e:
        raise StructuralMismatch(f"DER inválido: {e}") from e
    if canonical != data:
        raise StructuralMismatch("Codificación no DER: no coincide con la forma canónica")

    return value


def encode(value) -> bytes:
    """Codifica un objeto pyasn1 en DER."""
    return der_encoder.encode(value)


def build_sequence(*components) -> univ.Sequence:
    """Construye una SEQUENCE genérica con los componentes en el orden dado."""
    seq = univ.Sequence()
    for idx, component in enumerate(components):
        seq.setComponentByPosition(
            idx, component,
            verifyConstraints=False, matchTags=False, matchConstraints=False
        )
    return seq


#  INSPECCIÓN DE TIPOS

def elements(value) -> list:
    """Devuelve los componentes de una SEQUENCE/SET como lista."""
    if value is None or not value.isValue:
        return []
    return [value[idx] for idx in range(len(value))]


def is_type(value, tag_set) -> bool:
    return value is not None and value.tagSet == tag_set


def outer_tag(value) -> Optional[tag.Tag]:
    """
    Etiqueta más externa de un valor.

    Para un ANY sin etiquetar (elementos [n] devueltos por parse) se lee del
    primer octeto de su TLV.
    """
    tag_set = getattr(value, 'tagSet', None)
    if tag_set is None:
        return None
    if len(tag_set):
        return tag_set[-1]

    if isinstance(value, univ.Any) and value.isValue:
        octets = value.asOctets()
        if octets:
            first = octets[0]
            return tag.Tag(first & 0xC0, first & 0x20, first & 0x1F)
    return None


def type_name(value) -> str:
    """Nombre legible del tipo ASN.1 de un valor (para mensajes de error)."""
    if value is None:
        return ABSENT

    tag_set = getattr(value, 'tagSet', None)
    if tag_set is None:
        return value.__class__.__name__

    if tag_set in _TYPE_NAMES:
        return _TYPE_NAMES[tag_set]

    outer = outer_tag(value)
    if outer is not None and outer.tagClass == tag.tagClassContext:
        return f"[{outer.tagId}]"

    return value.__class__.__name__


def expect(items: list, index: int, tag_set, what: str = ''):
    """
    Devuelve items[index] si es del tipo indicado.

    Raises:
        StructuralMismatch: Si falta el elemento o su tipo no coincide
    """
    expected = _TYPE_NAMES.get(tag_set, str(tag_set))
    if index >= len(items):
        raise StructuralMismatch(f"Falta el elemento {index} ({expected})")

    item = items[index]
    if not is_type(item, tag_set):
        label = f" ({what})" if what else ''
        raise StructuralMismatch(
            f"El elemento {index}{label} tiene que ser {expected}, encontrado {type_name(item)}"
        )
    return item


#  ETIQUETAS DE CONTEXTO

def context_tag(number: int, constructed: bool = True) -> tag.Tag:
    fmt = tag.tagFormatConstructed if constructed else tag.tagFormatSimple
    return tag.Tag(tag.tagClassContext, fmt, number)


def has_outer_tag(value, outer: tag.Tag) -> bool:
    """Indica si la etiqueta más externa del valor es `outer` (clase, formato y número)."""
    found = outer_tag(value)
    # Tag.__eq__ de pyasn1 no compara el formato
    return found is not None and found == outer and found.tagFormat == outer.tagFormat


def explicit(value, number: int) -> univ.Any:
    """
    Envuelve la codificación DER de `value` en una etiqueta [number] EXPLICIT.

    La etiqueta se emite siempre como constructed (0xA0 | number).
    """
    return univ.Any(encode(value)).subtype(explicitTag=context_tag(number))


def unwrap_explicit(value, number: int):
    """
    Deshace un envoltorio [number] EXPLICIT: vuelve a decodificar su
    contenido como un objeto genérico independiente.
    """
    wrapper = univ.Any().subtype(explicitTag=context_tag(number))
    try:
        inner, rest = der_decoder.decode(encode(value), asn1Spec=wrapper)
    except PyAsn1Error as e:
        raise StructuralMismatch(f"Envoltorio [{number}] inválido: {e}") from e
    if rest:
        raise StructuralMismatch(f"Envoltorio [{number}] con bytes sobrantes")
    return parse(inner.asOctets())


def implicit(value, number: int):
    """Sustituye la etiqueta externa de `value` por [number] IMPLICIT."""
    implicit_tag = context_tag(number, constructed=False)
    if isinstance(value, base.ConstructedAsn1Type):
        return value.subtype(implicitTag=implicit_tag, cloneValueFlag=True)
    return value.subtype(implicitTag=implicit_tag)


def unwrap_implicit(value, tag_set):
    """
    Recupera el valor universal de un elemento [n] IMPLICIT.

    En DER la etiqueta IMPLICIT solo sustituye el octeto identificador, así
    que basta con restaurar el del tipo universal y decodificar de nuevo.

    Argumentos:
        value: Elemento etiquetado (ej: el ANY que devuelve parse)
        tag_set: Tipo universal esperado (ej: SET, BIT_STRING)
    """
    octets = encode(value)
    universal = tag_set[0]
    identifier = universal.tagClass | universal.tagFormat | universal.tagId
    return parse(bytes([identifier]) + octets[1:])


#  ALGORITHM IDENTIFIER

ALGORITHM_NAMES = {
    'rsaEncryption': '1.2.840.113549.1.1.1',
    'sha256WithRSAEncryption': '1.2.840.113549.1.1.11',
    'sha384WithRSAEncryption': '1.2.840.113549.1.1.12',
    'sha512WithRSAEncryption': '1.2.840.113549.1.1.13',
    'ecPublicKey': '1.2.840.10045.2.1',
    'ecdsa-with-SHA256': '1.2.840.10045.4.3.2',
    'ecdsa-with-SHA384': '1.2.840.10045.4.3.3',
    'ed25519': '1.3.101.112',
}


@dataclass(frozen=True)
class AlgorithmIdentifier:
    """
    AlgorithmIdentifier ::= SEQUENCE {
        algorithm   OBJECT IDENTIFIER,
        parameters  ANY DEFINED BY algorithm OPTIONAL
    }
    """
    algorithm: str
    parameters: Optional[object] = None

    @classmethod
    def from_identifier(cls, identifier: str, parameters=None) -> AlgorithmIdentifier:
        return cls(str(univ.ObjectIdentifier(identifier)), parameters)

    @classmethod
    def from_name(cls, name: str, parameters=None) -> AlgorithmIdentifier:
        try:
            identifier = ALGORITHM_NAMES[name]
        except KeyError:
            raise StructuralMismatch(f"Algoritmo desconocido: {name}") from None
        return cls(identifier, parameters)

    @classmethod
    def from_sequence(cls, seq) -> AlgorithmIdentifier:
        """
        Crea el AlgorithmIdentifier a partir de una SEQUENCE de 1 o 2 elementos.

        Raises:
            StructuralMismatch: Si la secuencia no tiene esa forma
        """
        if not is_type(seq, SEQUENCE):
            raise StructuralMismatch(
                f"AlgorithmIdentifier tiene que ser SEQUENCE, encontrado {type_name(seq)}"
            )
        items = elements(seq)
        if not 1 <= len(items) <= 2:
            raise StructuralMismatch(
                f"AlgorithmIdentifier: se esperaban 1 o 2 elementos, encontrados {len(items)}"
            )
        oid = expect(items, 0, OBJECT_IDENTIFIER, 'algorithm')
        parameters = items[1] if len(items) == 2 else None
        return cls(str(oid), parameters)

    @property
    def name(self) -> Optional[str]:
        for name, identifier in ALGORITHM_NAMES.items():
            if identifier == self.algorithm:
                return name
        return None

    def to_asn1(self) -> univ.Sequence:
        components = [univ.ObjectIdentifier(self.algorithm)]
        if self.parameters is not None:
            components.append(self.parameters)
        return build_sequence(*components)

    def encode(self) -> bytes:
        return encode(self.to_asn1())
