"""
Tests unitarios para el módulo asn1.py
"""

import pytest
from pyasn1.type import char, univ

from core import asn1
from core.asn1 import AlgorithmIdentifier
from core.errors import StructuralMismatch


# SEQUENCE { INTEGER 5, [0] { NULL } }
SEQ_WITH_EXPLICIT = bytes.fromhex("3007020105a0020500")
# SEQUENCE { INTEGER 5, [1] IMPLICIT BIT STRING '' }
SEQ_WITH_IMPLICIT = bytes.fromhex("3006020105810100")
# SEQUENCE { INTEGER 5, [0] vacío }
SEQ_WITH_EMPTY_TAG = bytes.fromhex("3005020105a000")

RSA_ALGORITHM_DER = bytes.fromhex("300d06092a864886f70d0101010500")


# ==============================
#  TEST: PARSE / ENCODE
# ==============================
def test_parse_empty_sequence():
    """Test: una SEQUENCE vacía se devuelve como contenedor vacío."""
    value = asn1.parse(bytes.fromhex("3000"))
    assert asn1.is_type(value, asn1.SEQUENCE)
    assert asn1.elements(value) == []
    assert asn1.encode(value) == bytes.fromhex("3000")


def test_parse_empty_set():
    value = asn1.parse(bytes.fromhex("3100"))
    assert asn1.is_type(value, asn1.SET)


@pytest.mark.parametrize("data, names", [
    (bytes.fromhex("30053000020100"), ["SEQUENCE", "INTEGER"]),   # SEQUENCE { SEQUENCE {}, INTEGER 0 }
    (bytes.fromhex("30053100020100"), ["SET", "INTEGER"]),        # SEQUENCE { SET {}, INTEGER 0 }
    (bytes.fromhex("300430023000"), ["SEQUENCE"]),                # SEQUENCE { SEQUENCE { SEQUENCE {} } }
])
def test_parse_nested_empty_container(data, names):
    """Test: un contenedor vacío anidado se decodifica y se vuelve a codificar igual."""
    value = asn1.parse(data)
    items = asn1.elements(value)

    assert [asn1.type_name(item) for item in items] == names
    assert asn1.encode(value) == data


def test_nested_empty_sequence_has_no_elements():
    items = asn1.elements(asn1.parse(bytes.fromhex("30053000020100")))
    assert asn1.elements(items[0]) == []
    assert int(items[1]) == 0


def test_parse_trailing_bytes():
    with pytest.raises(StructuralMismatch, match="sobrantes"):
        asn1.parse(bytes.fromhex("050000"))


@pytest.mark.parametrize("data", [
    bytes.fromhex("30"),                # cabecera truncada
    bytes.fromhex("3005020105"),        # longitud mayor que el contenido
    bytes.fromhex("30800201050000"),    # longitud indefinida (solo BER)
])
def test_parse_invalid_der(data):
    """Test: DER inválido se traduce a StructuralMismatch."""
    with pytest.raises(StructuralMismatch):
        asn1.parse(data)


@pytest.mark.parametrize("data", [
    bytes.fromhex("308103020100"),      # longitud en forma larga
    bytes.fromhex("02810100"),          # longitud en forma larga en un INTEGER
    bytes.fromhex("02020001"),          # INTEGER con un cero sobrante
    bytes.fromhex("300402810100"),      # forma larga dentro de una SEQUENCE
])
def test_parse_rejects_non_canonical(data):
    """Test: BER válido pero no canónico no se acepta como DER."""
    with pytest.raises(StructuralMismatch, match="no DER"):
        asn1.parse(data)


@pytest.mark.parametrize("data", [SEQ_WITH_EXPLICIT, SEQ_WITH_IMPLICIT, SEQ_WITH_EMPTY_TAG])
def test_context_tagged_elements_reencode(data):
    """Test: los elementos [n] se conservan byte a byte."""
    value = asn1.parse(data)
    assert len(asn1.elements(value)) == 2
    assert asn1.encode(value) == data


def test_build_sequence_keeps_order():
    seq = asn1.build_sequence(univ.Integer(1), univ.Null(''), univ.OctetString(b"x"))
    assert asn1.encode(seq) == bytes.fromhex("30080201010500040178")


# ==============================
#  TEST: INSPECCIÓN DE TIPOS
# ==============================
def test_type_names():
    items = asn1.elements(asn1.parse(SEQ_WITH_EXPLICIT))
    assert asn1.type_name(items[0]) == "INTEGER"
    assert asn1.type_name(items[1]) == "[0]"
    assert asn1.type_name(None) == asn1.ABSENT
    assert asn1.type_name(char.IA5String("a")) == "IA5String"


def test_type_name_of_implicit_element():
    items = asn1.elements(asn1.parse(SEQ_WITH_IMPLICIT))
    assert asn1.type_name(items[1]) == "[1]"


def test_expect_returns_item():
    items = asn1.elements(asn1.parse(SEQ_WITH_EXPLICIT))
    assert int(asn1.expect(items, 0, asn1.INTEGER)) == 5


def test_expect_wrong_type():
    """Test: el mensaje indica índice, tipo esperado y encontrado."""
    items = asn1.elements(asn1.parse(SEQ_WITH_EXPLICIT))
    with pytest.raises(StructuralMismatch, match=r"elemento 1 \(x\) tiene que ser INTEGER, encontrado \[0\]"):
        asn1.expect(items, 1, asn1.INTEGER, "x")


def test_expect_missing_element():
    with pytest.raises(StructuralMismatch, match="Falta el elemento 3"):
        asn1.expect([], 3, asn1.OCTET_STRING)


# ==============================
#  TEST: ETIQUETAS DE CONTEXTO
# ==============================
def test_explicit_wraps_encoding():
    """Test: [0] EXPLICIT se codifica como 0xA0 seguido del DER interior."""
    wrapped = asn1.explicit(univ.Integer(5), 0)
    assert asn1.encode(wrapped) == bytes.fromhex("a003020105")
    assert asn1.has_outer_tag(wrapped, asn1.context_tag(0))


def test_unwrap_explicit_parsed_element():
    """Test: el contenido de un [0] decodificado se vuelve a interpretar."""
    items = asn1.elements(asn1.parse(SEQ_WITH_EXPLICIT))
    assert asn1.has_outer_tag(items[1], asn1.context_tag(0))

    inner = asn1.unwrap_explicit(items[1], 0)
    assert asn1.is_type(inner, asn1.NULL)


def test_has_outer_tag_checks_format():
    """Test: un [1] primitivo no coincide con un [1] constructed."""
    items = asn1.elements(asn1.parse(SEQ_WITH_IMPLICIT))
    assert asn1.has_outer_tag(items[1], asn1.context_tag(1, constructed=False))
    assert not asn1.has_outer_tag(items[1], asn1.context_tag(1))

    items = asn1.elements(asn1.parse(SEQ_WITH_EXPLICIT))
    assert not asn1.has_outer_tag(items[1], asn1.context_tag(0, constructed=False))


def test_unwrap_explicit_wrong_tag():
    with pytest.raises(StructuralMismatch, match=r"\[1\]"):
        asn1.unwrap_explicit(asn1.explicit(univ.Null(''), 0), 1)


def test_implicit_replaces_tag():
    """Test: [n] IMPLICIT conserva el formato del tipo original."""
    assert asn1.encode(asn1.implicit(univ.OctetString(b"ab"), 2)) == bytes.fromhex("82026162")
    assert asn1.encode(asn1.implicit(univ.BitString(()), 1)) == bytes.fromhex("810100")


def test_implicit_constructed_keeps_components():
    inner = asn1.parse(bytes.fromhex("3103020101"))
    assert asn1.encode(asn1.implicit(inner, 0)) == bytes.fromhex("a003020101")


def test_unwrap_implicit():
    """Test: restaurar el tipo universal de un elemento IMPLICIT."""
    items = asn1.elements(asn1.parse(SEQ_WITH_IMPLICIT))
    bits = asn1.unwrap_implicit(items[1], asn1.BIT_STRING)
    assert asn1.is_type(bits, asn1.BIT_STRING)
    assert asn1.encode(bits) == bytes.fromhex("030100")


# ==============================
#  TEST: ALGORITHM IDENTIFIER
# ==============================
def test_algorithm_from_name():
    algorithm = AlgorithmIdentifier.from_name("rsaEncryption", univ.Null(''))
    assert algorithm.algorithm == "1.2.840.113549.1.1.1"
    assert algorithm.name == "rsaEncryption"
    assert algorithm.encode() == RSA_ALGORITHM_DER


def test_algorithm_unknown_name():
    """Test: un nombre desconocido es un error del propio paquete."""
    with pytest.raises(StructuralMismatch, match="Algoritmo desconocido: rot13") as exc_info:
        AlgorithmIdentifier.from_name("rot13")

    assert exc_info.value.__cause__ is None
    assert exc_info.value.__suppress_context__


def test_algorithm_from_identifier_without_parameters():
    algorithm = AlgorithmIdentifier.from_identifier("1.3.101.112")
    assert algorithm.name == "ed25519"
    assert asn1.elements(asn1.parse(algorithm.encode())) == [univ.ObjectIdentifier("1.3.101.112")]


def test_algorithm_unknown_oid_has_no_name():
    assert AlgorithmIdentifier.from_identifier("1.2.3.4").name is None


def test_algorithm_from_sequence_roundtrip():
    algorithm = AlgorithmIdentifier.from_sequence(asn1.parse(RSA_ALGORITHM_DER))
    assert algorithm.algorithm == "1.2.840.113549.1.1.1"
    assert asn1.is_type(algorithm.parameters, asn1.NULL)
    assert algorithm.encode() == RSA_ALGORITHM_DER


def test_algorithm_from_sequence_too_many_elements():
    seq = asn1.build_sequence(univ.ObjectIdentifier("1.2.3"), univ.Null(''), univ.Null(''))
    with pytest.raises(StructuralMismatch, match="1 o 2"):
        AlgorithmIdentifier.from_sequence(seq)


def test_algorithm_from_sequence_requires_oid():
    seq = asn1.build_sequence(univ.Integer(1))
    with pytest.raises(StructuralMismatch, match="OBJECT IDENTIFIER"):
        AlgorithmIdentifier.from_sequence(seq)
