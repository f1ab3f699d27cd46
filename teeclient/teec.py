"""Core types and constants of the TEE client API."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

PAYLOAD_REF_COUNT = 4
"""Number of parameters carried by an open-session or invoke operation."""

_UINT32_MAX = 0xFFFFFFFF
_UINT16_MAX = 0xFFFF
_UUID_STRUCT = struct.Struct(">IHH8s")


class ParamType(enum.IntEnum):
    """Type of one parameter in an operation payload."""

    NONE = 0x0
    VALUE_INPUT = 0x1
    VALUE_OUTPUT = 0x2
    VALUE_INOUT = 0x3
    MEMREF_TEMP_INPUT = 0x5
    MEMREF_TEMP_OUTPUT = 0x6
    MEMREF_TEMP_INOUT = 0x7
    MEMREF_WHOLE = 0xC
    MEMREF_PARTIAL_INPUT = 0xD
    MEMREF_PARTIAL_OUTPUT = 0xE
    MEMREF_PARTIAL_INOUT = 0xF


class MemFlag(enum.IntFlag):
    """Data transfer direction of a shared memory block."""

    INPUT = 0x1
    OUTPUT = 0x2


class Result(enum.IntEnum):
    """Return codes of the TEE client API."""

    SUCCESS = 0x00000000
    ERROR_STORAGE_NOT_AVAILABLE = 0xF0100003
    ERROR_GENERIC = 0xFFFF0000
    ERROR_ACCESS_DENIED = 0xFFFF0001
    ERROR_CANCEL = 0xFFFF0002
    ERROR_ACCESS_CONFLICT = 0xFFFF0003
    ERROR_EXCESS_DATA = 0xFFFF0004
    ERROR_BAD_FORMAT = 0xFFFF0005
    ERROR_BAD_PARAMETERS = 0xFFFF0006
    ERROR_BAD_STATE = 0xFFFF0007
    ERROR_ITEM_NOT_FOUND = 0xFFFF0008
    ERROR_NOT_IMPLEMENTED = 0xFFFF0009
    ERROR_NOT_SUPPORTED = 0xFFFF000A
    ERROR_NO_DATA = 0xFFFF000B
    ERROR_OUT_OF_MEMORY = 0xFFFF000C
    ERROR_BUSY = 0xFFFF000D
    ERROR_COMMUNICATION = 0xFFFF000E
    ERROR_SECURITY = 0xFFFF000F
    ERROR_SHORT_BUFFER = 0xFFFF0010
    ERROR_EXTERNAL_CANCEL = 0xFFFF0011
    ERROR_TARGET_DEAD = 0xFFFF3024
    ERROR_STORAGE_NO_SPACE = 0xFFFF3041


class ErrorOrigin(enum.IntEnum):
    """Where in the software stack an error originated."""

    API = 0x1
    COMMS = 0x2
    TEE = 0x3
    TRUSTED_APP = 0x4


class LoginMethod(enum.IntEnum):
    """Session login methods."""

    PUBLIC = 0x0
    USER = 0x1
    GROUP = 0x2
    APPLICATION = 0x4
    USER_APPLICATION = 0x5
    GROUP_APPLICATION = 0x6


class TeecError(Exception):
    """A TEE client API call that did not return SUCCESS."""

    def __init__(self, result, origin=ErrorOrigin.API, message=None):
        result = int(result)
        if result == Result.SUCCESS:
            raise ValueError("SUCCESS is not an error result")
        try:
            self.result: int = Result(result)
        except ValueError:
            self.result = result
        self.origin = ErrorOrigin(origin)
        self.message = message
        name = self.result.name if isinstance(self.result, Result) else "UNKNOWN"
        text = f"0x{result:08x} ({name}) from {self.origin.name}"
        if message:
            text = f"{message}: {text}"
        super().__init__(text)


def _check_nibble(value) -> int:
    value = int(value)
    if not 0 <= value <= 0xF:
        raise ValueError(f"parameter type {value:#x} does not fit in 4 bits")
    return value


def param_types(p0, p1, p2, p3) -> int:
    """Encode four parameter types into one paramTypes word."""
    return (
        _check_nibble(p0)
        | (_check_nibble(p1) << 4)
        | (_check_nibble(p2) << 8)
        | (_check_nibble(p3) << 12)
    )


def param_type_get(p, i) -> int:
    """Return the type of parameter ``i`` encoded in ``p``."""
    if not 0 <= i < PAYLOAD_REF_COUNT:
        raise IndexError(f"parameter index {i} out of range")
    return (int(p) >> (i * 4)) & 0xF


@dataclass(frozen=True)
class Uuid:
    """Identifier of a trusted application."""

    time_low: int
    time_mid: int
    time_hi_and_version: int
    clock_seq_and_node: bytes

    def __post_init__(self):
        if not 0 <= self.time_low <= _UINT32_MAX:
            raise ValueError("time_low must fit in 32 bits")
        if not 0 <= self.time_mid <= _UINT16_MAX:
            raise ValueError("time_mid must fit in 16 bits")
        if not 0 <= self.time_hi_and_version <= _UINT16_MAX:
            raise ValueError("time_hi_and_version must fit in 16 bits")
        node = bytes(self.clock_seq_and_node)
        if len(node) != 8:
            raise ValueError("clock_seq_and_node must be 8 bytes")
        object.__setattr__(self, "clock_seq_and_node", node)

    @classmethod
    def from_fields(cls, time_low, time_mid, time_hi_and_version, clock_seq_and_node):
        """Build a UUID from its four fields; the last is a sequence of 8 bytes."""
        return cls(time_low, time_mid, time_hi_and_version, bytes(clock_seq_and_node))

    @classmethod
    def from_bytes(cls, data):
        """Decode 16 octets in RFC 4122 (big-endian) order."""
        data = bytes(data)
        if len(data) != _UUID_STRUCT.size:
            raise ValueError(f"a UUID is {_UUID_STRUCT.size} bytes, got {len(data)}")
        return cls(*_UUID_STRUCT.unpack(data))

    def to_bytes(self) -> bytes:
        """Encode as 16 octets in RFC 4122 (big-endian) order."""
        return _UUID_STRUCT.pack(
            self.time_low, self.time_mid, self.time_hi_and_version, self.clock_seq_and_node
        )

    def __str__(self) -> str:
        node = self.clock_seq_and_node
        return (
            f"{self.time_low:08x}-{self.time_mid:04x}-{self.time_hi_and_version:04x}-"
            f"{node[:2].hex()}-{node[2:].hex()}"
        )


@dataclass
class Value:
    """Small raw data container of two 32-bit integers."""

    a: int = 0
    b: int = 0

    def __post_init__(self):
        for name in ("a", "b"):
            if not 0 <= getattr(self, name) <= _UINT32_MAX:
                raise ValueError(f"{name} must fit in 32 bits")