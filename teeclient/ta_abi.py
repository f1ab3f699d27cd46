"""Binary records exchanged with the PKCS#11 trusted application."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar, List, Tuple

from .pkcs11_api import MechanismFlag, SessionFlag, SessionState, SlotFlag, TokenFlag, Version

PKCS11_SLOT_DESC_SIZE = 64
PKCS11_SLOT_MANUFACTURER_SIZE = 32
PKCS11_SLOT_VERSION_SIZE = 2

PKCS11_TOKEN_LABEL_SIZE = 32
PKCS11_TOKEN_MANUFACTURER_SIZE = 32
PKCS11_TOKEN_MODEL_SIZE = 16
PKCS11_TOKEN_SERIALNUM_SIZE = 16
PKCS11_TOKEN_UTC_TIME_SIZE = 16

_UINT32_MAX = 0xFFFFFFFF
_HEAD = struct.Struct("<II")


def _check_u32(name: str, value) -> int:
    value = int(value)
    if not 0 <= value <= _UINT32_MAX:
        raise ValueError(f"{name} must fit in 32 bits, got {value}")
    return value


def _encode_text(name: str, text: str, size: int) -> bytes:
    raw = str(text).encode("utf-8")
    if len(raw) > size:
        raise ValueError(f"{name} is {len(raw)} bytes, at most {size} fit")
    return raw.ljust(size, b" ")


def _decode_text(raw: bytes) -> str:
    return raw.rstrip(b" \0").decode("utf-8")


def _as_version(value) -> Version:
    return value if isinstance(value, Version) else Version(*value)


def _exact(data, size: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) != size:
        raise ValueError(f"{what} is {size} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class SlotInfo:
    """Slot information returned by the SLOT_INFO command."""

    SIZE: ClassVar[int] = 104
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(
        f"<{PKCS11_SLOT_DESC_SIZE}s{PKCS11_SLOT_MANUFACTURER_SIZE}sIBBBB"
    )

    description: str = ""
    manufacturer_id: str = ""
    flags: SlotFlag = SlotFlag(0)
    hardware_version: Version = Version()
    firmware_version: Version = Version()

    def __post_init__(self):
        _encode_text("description", self.description, PKCS11_SLOT_DESC_SIZE)
        _encode_text("manufacturer_id", self.manufacturer_id, PKCS11_SLOT_MANUFACTURER_SIZE)
        object.__setattr__(self, "flags", SlotFlag(_check_u32("flags", self.flags)))
        object.__setattr__(self, "hardware_version", _as_version(self.hardware_version))
        object.__setattr__(self, "firmware_version", _as_version(self.firmware_version))

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            _encode_text("description", self.description, PKCS11_SLOT_DESC_SIZE),
            _encode_text("manufacturer_id", self.manufacturer_id, PKCS11_SLOT_MANUFACTURER_SIZE),
            int(self.flags),
            self.hardware_version.major,
            self.hardware_version.minor,
            self.firmware_version.major,
            self.firmware_version.minor,
        )

    @classmethod
    def unpack(cls, data):
        data = _exact(data, cls.SIZE, "slot information")
        desc, manuf, flags, hw_major, hw_minor, fw_major, fw_minor = cls._STRUCT.unpack(data)
        return cls(
            _decode_text(desc),
            _decode_text(manuf),
            flags,
            Version(hw_major, hw_minor),
            Version(fw_major, fw_minor),
        )


@dataclass(frozen=True)
class TokenInfo:
    """Token information returned by the TOKEN_INFO command."""

    SIZE: ClassVar[int] = 160
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(
        f"<{PKCS11_TOKEN_LABEL_SIZE}s{PKCS11_TOKEN_MANUFACTURER_SIZE}s"
        f"{PKCS11_TOKEN_MODEL_SIZE}s{PKCS11_TOKEN_SERIALNUM_SIZE}s"
        f"11IBBBB{PKCS11_TOKEN_UTC_TIME_SIZE}s"
    )
    _COUNTERS: ClassVar[Tuple[str, ...]] = (
        "max_session_count",
        "session_count",
        "max_rw_session_count",
        "rw_session_count",
        "max_pin_len",
        "min_pin_len",
        "total_public_memory",
        "free_public_memory",
        "total_private_memory",
        "free_private_memory",
    )
    _TEXTS: ClassVar[Tuple[Tuple[str, int], ...]] = (
        ("label", PKCS11_TOKEN_LABEL_SIZE),
        ("manufacturer_id", PKCS11_TOKEN_MANUFACTURER_SIZE),
        ("model", PKCS11_TOKEN_MODEL_SIZE),
        ("serial_number", PKCS11_TOKEN_SERIALNUM_SIZE),
    )

    label: str = ""
    manufacturer_id: str = ""
    model: str = ""
    serial_number: str = ""
    flags: TokenFlag = TokenFlag(0)
    max_session_count: int = 0
    session_count: int = 0
    max_rw_session_count: int = 0
    rw_session_count: int = 0
    max_pin_len: int = 0
    min_pin_len: int = 0
    total_public_memory: int = 0
    free_public_memory: int = 0
    total_private_memory: int = 0
    free_private_memory: int = 0
    hardware_version: Version = Version()
    firmware_version: Version = Version()
    utc_time: str = ""

    def __post_init__(self):
        for name, size in self._TEXTS:
            _encode_text(name, getattr(self, name), size)
        _encode_text("utc_time", self.utc_time, PKCS11_TOKEN_UTC_TIME_SIZE)
        object.__setattr__(self, "flags", TokenFlag(_check_u32("flags", self.flags)))
        for name in self._COUNTERS:
            object.__setattr__(self, name, _check_u32(name, getattr(self, name)))
        object.__setattr__(self, "hardware_version", _as_version(self.hardware_version))
        object.__setattr__(self, "firmware_version", _as_version(self.firmware_version))

    def pack(self) -> bytes:
        texts = [_encode_text(name, getattr(self, name), size) for name, size in self._TEXTS]
        counters = [getattr(self, name) for name in self._COUNTERS]
        return self._STRUCT.pack(
            *texts,
            int(self.flags),
            *counters,
            self.hardware_version.major,
            self.hardware_version.minor,
            self.firmware_version.major,
            self.firmware_version.minor,
            _encode_text("utc_time", self.utc_time, PKCS11_TOKEN_UTC_TIME_SIZE),
        )

    @classmethod
    def unpack(cls, data):
        data = _exact(data, cls.SIZE, "token information")
        fields = cls._STRUCT.unpack(data)
        texts = [_decode_text(raw) for raw in fields[:4]]
        flags = fields[4]
        counters = fields[5:15]
        hw_major, hw_minor, fw_major, fw_minor = fields[15:19]
        return cls(
            *texts,
            flags,
            *counters,
            Version(hw_major, hw_minor),
            Version(fw_major, fw_minor),
            _decode_text(fields[19]),
        )


@dataclass(frozen=True)
class TaSessionInfo:
    """Session information returned by the SESSION_INFO command."""

    SIZE: ClassVar[int] = 16
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<IIII")

    slot_id: int = 0
    state: SessionState = SessionState.RO_PUBLIC_SESSION
    flags: SessionFlag = SessionFlag.SERIAL_SESSION
    device_error: int = 0

    def __post_init__(self):
        object.__setattr__(self, "slot_id", _check_u32("slot_id", self.slot_id))
        object.__setattr__(self, "state", SessionState(self.state))
        object.__setattr__(self, "flags", SessionFlag(_check_u32("flags", self.flags)))
        object.__setattr__(self, "device_error", _check_u32("device_error", self.device_error))

    def pack(self) -> bytes:
        return self._STRUCT.pack(self.slot_id, int(self.state), int(self.flags), self.device_error)

    @classmethod
    def unpack(cls, data):
        data = _exact(data, cls.SIZE, "session information")
        return cls(*cls._STRUCT.unpack(data))


@dataclass(frozen=True)
class TaMechanismInfo:
    """Mechanism information returned by the MECHANISM_INFO command."""

    SIZE: ClassVar[int] = 12
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<III")

    min_key_size: int = 0
    max_key_size: int = 0
    flags: MechanismFlag = MechanismFlag(0)

    def __post_init__(self):
        object.__setattr__(self, "min_key_size", _check_u32("min_key_size", self.min_key_size))
        object.__setattr__(self, "max_key_size", _check_u32("max_key_size", self.max_key_size))
        object.__setattr__(self, "flags", MechanismFlag(_check_u32("flags", self.flags)))

    def pack(self) -> bytes:
        return self._STRUCT.pack(self.min_key_size, self.max_key_size, int(self.flags))

    @classmethod
    def unpack(cls, data):
        data = _exact(data, cls.SIZE, "mechanism information")
        return cls(*cls._STRUCT.unpack(data))


@dataclass(frozen=True)
class AttributeHead:
    """An attribute (or mechanism) id followed by its value bytes."""

    HEADER_SIZE: ClassVar[int] = _HEAD.size

    id: int
    data: bytes = b""

    def __post_init__(self):
        object.__setattr__(self, "id", _check_u32("id", self.id))
        object.__setattr__(self, "data", bytes(self.data))
        _check_u32("size", len(self.data))

    @property
    def size(self) -> int:
        """Byte size of the value."""
        return len(self.data)

    def pack(self) -> bytes:
        return _HEAD.pack(self.id, self.size) + self.data

    @classmethod
    def _unpack_from(cls, data: bytes, offset: int = 0):
        if len(data) - offset < _HEAD.size:
            raise ValueError("data too short for an attribute header")
        attr_id, size = _HEAD.unpack_from(data, offset)
        start = offset + _HEAD.size
        end = start + size
        if end > len(data):
            raise ValueError(f"attribute 0x{attr_id:08x} claims {size} bytes past the end")
        return cls(attr_id, data[start:end]), end

    @classmethod
    def unpack(cls, data):
        """Decode exactly one attribute; trailing bytes are an error."""
        data = bytes(data)
        head, end = cls._unpack_from(data)
        if end != len(data):
            raise ValueError(f"{len(data) - end} bytes follow the attribute")
        return head


@dataclass(frozen=True)
class ObjectHead:
    """A serialized object: byte size and count, then its attributes."""

    HEADER_SIZE: ClassVar[int] = _HEAD.size

    attrs: List[AttributeHead] = field(default_factory=list)

    def __post_init__(self):
        attrs = list(self.attrs)
        if not all(isinstance(attr, AttributeHead) for attr in attrs):
            raise TypeError("attributes must be AttributeHead instances")
        object.__setattr__(self, "attrs", attrs)

    @property
    def attrs_size(self) -> int:
        return sum(_HEAD.size + attr.size for attr in self.attrs)

    @property
    def attrs_count(self) -> int:
        return len(self.attrs)

    def pack(self) -> bytes:
        body = b"".join(attr.pack() for attr in self.attrs)
        return _HEAD.pack(_check_u32("attrs_size", len(body)), self.attrs_count) + body

    @classmethod
    def _unpack_from(cls, data: bytes, offset: int = 0):
        if len(data) - offset < _HEAD.size:
            raise ValueError("data too short for an object header")
        attrs_size, attrs_count = _HEAD.unpack_from(data, offset)
        start = offset + _HEAD.size
        end = start + attrs_size
        if end > len(data):
            raise ValueError(f"object claims {attrs_size} attribute bytes past the end")
        region = data[:end]
        attrs = []
        pos = start
        for _ in range(attrs_count):
            attr, pos = AttributeHead._unpack_from(region, pos)
            attrs.append(attr)
        if pos != end:
            raise ValueError(
                f"{attrs_count} attributes use {pos - start} bytes, header says {attrs_size}"
            )
        return cls(attrs), end

    @classmethod
    def unpack(cls, data):
        """Decode exactly one object; trailing bytes are an error."""
        data = bytes(data)
        head, end = cls._unpack_from(data)
        if end != len(data):
            raise ValueError(f"{len(data) - end} bytes follow the object")
        return head

    def __iter__(self):
        return iter(self.attrs)

    def __len__(self) -> int:
        return len(self.attrs)