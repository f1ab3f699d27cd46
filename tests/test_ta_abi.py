import struct

import pytest

from teeclient.pkcs11_api import (
    MechanismFlag,
    SessionFlag,
    SessionState,
    SlotFlag,
    TokenFlag,
    Version,
)
from teeclient.pkcs11_ids import Attribute, Mechanism
from teeclient.ta_abi import (
    PKCS11_SLOT_DESC_SIZE,
    PKCS11_SLOT_MANUFACTURER_SIZE,
    PKCS11_TOKEN_LABEL_SIZE,
    AttributeHead,
    ObjectHead,
    SlotInfo,
    TaMechanismInfo,
    TaSessionInfo,
    TokenInfo,
)


def test_slot_info_round_trip():
    info = SlotInfo(
        "Test slot",
        "Example maker",
        SlotFlag.TOKEN_PRESENT | SlotFlag.HW_SLOT,
        Version(1, 2),
        Version(3, 4),
    )
    raw = info.pack()
    assert len(raw) == SlotInfo.SIZE
    assert SlotInfo.unpack(raw) == info


def test_slot_info_text_is_blank_padded():
    raw = SlotInfo("ab").pack()
    assert raw[:PKCS11_SLOT_DESC_SIZE] == b"ab".ljust(PKCS11_SLOT_DESC_SIZE, b" ")


def test_slot_info_flags_offset():
    buf = bytearray(b" " * SlotInfo.SIZE)
    offset = PKCS11_SLOT_DESC_SIZE + PKCS11_SLOT_MANUFACTURER_SIZE
    struct.pack_into("<IBBBB", buf, offset, int(SlotFlag.REMOVABLE_DEVICE), 7, 8, 9, 10)
    info = SlotInfo.unpack(buf)
    assert info.flags == SlotFlag.REMOVABLE_DEVICE
    assert info.hardware_version == Version(7, 8)
    assert info.firmware_version == Version(9, 10)
    assert info.description == ""


def test_slot_info_rejects_long_text_and_bad_size():
    with pytest.raises(ValueError):
        SlotInfo("x" * (PKCS11_SLOT_DESC_SIZE + 1))
    with pytest.raises(ValueError):
        SlotInfo.unpack(bytes(SlotInfo.SIZE - 1))


def test_token_info_round_trip():
    info = TokenInfo(
        label="token",
        manufacturer_id="Example maker",
        model="model",
        serial_number="0000000000000000",
        flags=TokenFlag.RNG | TokenFlag.LOGIN_REQUIRED | TokenFlag.TOKEN_INITIALIZED,
        max_session_count=10,
        session_count=1,
        max_rw_session_count=5,
        rw_session_count=1,
        max_pin_len=128,
        min_pin_len=4,
        total_public_memory=0xFFFFFFFF,
        free_public_memory=0xFFFFFFFF,
        total_private_memory=0xFFFFFFFF,
        free_private_memory=0xFFFFFFFF,
        hardware_version=(0, 1),
        firmware_version=Version(2, 3),
        utc_time="",
    )
    raw = info.pack()
    assert len(raw) == TokenInfo.SIZE
    back = TokenInfo.unpack(raw)
    assert back == info
    assert back.hardware_version == Version(0, 1)


def test_token_info_label_position():
    raw = TokenInfo(label="abc").pack()
    assert raw[:PKCS11_TOKEN_LABEL_SIZE].rstrip(b" ") == b"abc"


def test_token_info_errors():
    with pytest.raises(ValueError):
        TokenInfo(max_pin_len=1 << 32)
    with pytest.raises(ValueError):
        TokenInfo(label="x" * (PKCS11_TOKEN_LABEL_SIZE + 1))
    with pytest.raises(ValueError):
        TokenInfo.unpack(bytes(TokenInfo.SIZE + 1))


def test_session_info_round_trip_and_layout():
    info = TaSessionInfo(3, SessionState.RW_USER_FUNCTIONS, SessionFlag.RW_SESSION | SessionFlag.SERIAL_SESSION, 0)
    raw = info.pack()
    assert struct.unpack("<IIII", raw) == (
        3,
        int(SessionState.RW_USER_FUNCTIONS),
        int(SessionFlag.RW_SESSION | SessionFlag.SERIAL_SESSION),
        0,
    )
    assert TaSessionInfo.unpack(raw) == info


def test_session_info_bad_state():
    raw = struct.pack("<IIII", 0, 99, 0, 0)
    with pytest.raises(ValueError):
        TaSessionInfo.unpack(raw)


def test_mechanism_info_round_trip():
    info = TaMechanismInfo(128, 256, MechanismFlag.ENCRYPT | MechanismFlag.DECRYPT)
    raw = info.pack()
    assert len(raw) == TaMechanismInfo.SIZE
    back = TaMechanismInfo.unpack(raw)
    assert back == info
    assert MechanismFlag.DECRYPT in back.flags


def test_attribute_head_wire_bytes():
    head = AttributeHead(Attribute.LABEL, b"ab")
    assert head.pack() == b"\x03\x00\x00\x00\x02\x00\x00\x00ab"
    assert head.size == 2


def test_attribute_head_round_trip_and_errors():
    head = AttributeHead(Mechanism.AES_CBC, bytes(range(16)))
    assert AttributeHead.unpack(head.pack()) == head
    with pytest.raises(ValueError):
        AttributeHead.unpack(head.pack()[:-1])
    with pytest.raises(ValueError):
        AttributeHead.unpack(head.pack() + b"\x00")
    with pytest.raises(ValueError):
        AttributeHead.unpack(b"\x00\x00")
    with pytest.raises(ValueError):
        AttributeHead(-1)


def test_object_head_round_trip():
    obj = ObjectHead(
        [
            AttributeHead(Attribute.CLASS, struct.pack("<I", 4)),
            AttributeHead(Attribute.TOKEN, b"\x01"),
            AttributeHead(Attribute.LABEL, b"key"),
        ]
    )
    raw = obj.pack()
    size, count = struct.unpack_from("<II", raw)
    assert count == 3
    assert size == len(raw) - ObjectHead.HEADER_SIZE == obj.attrs_size
    back = ObjectHead.unpack(raw)
    assert back == obj
    assert [a.id for a in back] == [Attribute.CLASS, Attribute.TOKEN, Attribute.LABEL]


def test_empty_object():
    raw = ObjectHead().pack()
    assert raw == bytes(ObjectHead.HEADER_SIZE)
    assert len(ObjectHead.unpack(raw)) == 0


def test_object_head_inconsistent_count():
    body = AttributeHead(Attribute.TOKEN, b"\x01").pack()
    too_few = struct.pack("<II", len(body), 0) + body
    with pytest.raises(ValueError):
        ObjectHead.unpack(too_few)
    too_many = struct.pack("<II", len(body), 2) + body
    with pytest.raises(ValueError):
        ObjectHead.unpack(too_many)


def test_object_head_truncated_and_trailing():
    raw = ObjectHead([AttributeHead(Attribute.VALUE, b"xyz")]).pack()
    with pytest.raises(ValueError):
        ObjectHead.unpack(raw[:-1])
    with pytest.raises(ValueError):
        ObjectHead.unpack(raw + b"\x00")


def test_object_head_rejects_non_attributes():
    with pytest.raises(TypeError):
        ObjectHead([b"raw"])