"""Layout of the benchmark timestamp buffers shared with the TEE."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar, List

from .teec import Uuid

PTA_BENCHMARK_UUID = Uuid.from_fields(
    0x0B9A63B0, 0xB4C6, 0x4C85, (0xA2, 0x84, 0xA2, 0x28, 0xEF, 0x54, 0x7B, 0x4E)
)

TEE_BENCH_DIVIDER = 64
"""The cycle counter advances once every this many clock cycles."""
TEE_BENCH_MAX_STAMPS = 32
TEE_BENCH_MAX_MASK = TEE_BENCH_MAX_STAMPS - 1

TEE_BENCH_CLIENT = 0x10000000
TEE_BENCH_KMOD = 0x20000000
TEE_BENCH_CORE = 0x30000000
TEE_BENCH_UTEE = 0x40000000
TEE_BENCH_DUMB_TA = 0xF0000001

_U64_MAX = 0xFFFFFFFFFFFFFFFF
_U64 = struct.Struct("<Q")


def benchmark_cmd(cmd_id) -> int:
    """Command identifier of the benchmark pseudo-TA for ``cmd_id``."""
    return 0xFA190000 | (int(cmd_id) & 0xFFFF)


BENCHMARK_CMD_REGISTER_MEMREF = benchmark_cmd(1)
BENCHMARK_CMD_GET_MEMREF = benchmark_cmd(2)
BENCHMARK_CMD_UNREGISTER = benchmark_cmd(3)


def _check_u64(name: str, value) -> None:
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} must fit in 64 bits")


@dataclass
class TimeStamp:
    """One timestamp: counter value, program counter and subsystem id."""

    SIZE: ClassVar[int] = 24
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<QQQ")

    cnt: int = 0
    addr: int = 0
    src: int = 0

    def __post_init__(self):
        for name in ("cnt", "addr", "src"):
            _check_u64(name, getattr(self, name))

    def pack(self) -> bytes:
        return self._STRUCT.pack(self.cnt, self.addr, self.src)

    @classmethod
    def unpack(cls, data):
        data = bytes(data)
        if len(data) != cls.SIZE:
            raise ValueError(f"a timestamp is {cls.SIZE} bytes, got {len(data)}")
        return cls(*cls._STRUCT.unpack(data))


@dataclass
class CpuBuffer:
    """Per-CPU circular buffer of timestamps; unused slots are zero."""

    SIZE: ClassVar[int] = 16 + TEE_BENCH_MAX_STAMPS * TimeStamp.SIZE

    head: int = 0
    tail: int = 0
    stamps: List[TimeStamp] = field(default_factory=list)

    def __post_init__(self):
        _check_u64("head", self.head)
        _check_u64("tail", self.tail)
        stamps = list(self.stamps)
        if len(stamps) > TEE_BENCH_MAX_STAMPS:
            raise ValueError(f"at most {TEE_BENCH_MAX_STAMPS} timestamps fit in a buffer")
        stamps.extend(TimeStamp() for _ in range(TEE_BENCH_MAX_STAMPS - len(stamps)))
        self.stamps = stamps

    def pack(self) -> bytes:
        return _U64.pack(self.head) + _U64.pack(self.tail) + b"".join(
            stamp.pack() for stamp in self.stamps
        )

    @classmethod
    def unpack(cls, data):
        data = bytes(data)
        if len(data) != cls.SIZE:
            raise ValueError(f"a CPU buffer is {cls.SIZE} bytes, got {len(data)}")
        (head,) = _U64.unpack_from(data, 0)
        (tail,) = _U64.unpack_from(data, 8)
        stamps = [
            TimeStamp.unpack(data[offset : offset + TimeStamp.SIZE])
            for offset in range(16, cls.SIZE, TimeStamp.SIZE)
        ]
        return cls(head, tail, stamps)


@dataclass
class TimestampTable:
    """The shared memory area: a core count followed by one buffer per core."""

    cores: List[CpuBuffer] = field(default_factory=list)

    def pack(self) -> bytes:
        return _U64.pack(len(self.cores)) + b"".join(buf.pack() for buf in self.cores)

    @classmethod
    def unpack(cls, data):
        """Decode the table; bytes past the last buffer are ignored."""
        data = bytes(data)
        if len(data) < _U64.size:
            raise ValueError("data too short for the core count")
        (count,) = _U64.unpack_from(data, 0)
        needed = _U64.size + count * CpuBuffer.SIZE
        if len(data) < needed:
            raise ValueError(f"{count} cores need {needed} bytes, got {len(data)}")
        cores = [
            CpuBuffer.unpack(data[offset : offset + CpuBuffer.SIZE])
            for offset in range(_U64.size, needed, CpuBuffer.SIZE)
        ]
        return cls(cores)