import pytest

from teeclient.pkcs11_ids import (
    ARRAY_ATTRIBUTE,
    VENDOR_DEFINED,
    Attribute,
    CertificateCategory,
    CertificateType,
    KeyType,
    Mechanism,
    MgfType,
    ObjectClass,
    is_array_attribute,
    is_vendor_defined,
)

ARRAY_ATTRIBUTES = {
    Attribute.WRAP_TEMPLATE,
    Attribute.UNWRAP_TEMPLATE,
    Attribute.DERIVE_TEMPLATE,
    Attribute.ALLOWED_MECHANISMS,
}


def test_template_attribute_carries_array_flag():
    assert Attribute(0x40000211) is Attribute.WRAP_TEMPLATE
    assert is_array_attribute(Attribute.WRAP_TEMPLATE)


def test_plain_attribute_is_not_array():
    assert not is_array_attribute(Attribute.WRAP)
    assert not is_array_attribute(Attribute.CLASS)


def test_only_templates_and_allowed_mechanisms_are_arrays():
    arrays = {attr for attr in Attribute if is_array_attribute(attr)}
    assert arrays == ARRAY_ATTRIBUTES


def test_array_attribute_without_flag_is_plain():
    for attr in ARRAY_ATTRIBUTES:
        assert not is_array_attribute(attr & ~ARRAY_ATTRIBUTE)


def test_vendor_defined_range():
    assert is_vendor_defined(VENDOR_DEFINED)
    assert is_vendor_defined(VENDOR_DEFINED | Mechanism.AES_GCM)
    assert not is_vendor_defined(Mechanism.AES_KEY_WRAP_PAD)


@pytest.mark.parametrize(
    "enum_type",
    [Attribute, ObjectClass, KeyType, CertificateType, CertificateCategory, Mechanism, MgfType],
)
def test_no_standard_id_is_vendor_defined(enum_type):
    assert not any(is_vendor_defined(member) for member in enum_type)


def test_ecdsa_key_type_is_alias_of_ec():
    assert KeyType.ECDSA is KeyType.EC
    assert KeyType(3) is KeyType.EC


def test_mechanism_lookup_by_value():
    assert Mechanism(0x01087) is Mechanism.AES_GCM
    assert Mechanism(0x00250) is Mechanism.SHA256


def test_mgf_lookup_by_value():
    assert MgfType(0x0005) is MgfType.MGF1_SHA224


def test_unknown_mechanism_raises():
    with pytest.raises(ValueError):
        Mechanism(0x7FFFFFFF)


def test_negative_identifier_raises():
    with pytest.raises(ValueError):
        is_array_attribute(-1)
    with pytest.raises(ValueError):
        is_vendor_defined(-5)


def test_non_integer_identifier_raises():
    with pytest.raises(ValueError):
        is_vendor_defined("abc")