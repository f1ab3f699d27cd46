"""Supplicant plugins: named handlers addressed by UUID."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .teec import Result, TeecError, Uuid

_UINT32_MAX = 0xFFFFFFFF


def _check_command(name: str, value) -> int:
    value = int(value)
    if not 0 <= value <= _UINT32_MAX:
        raise ValueError(f"{name} must fit in 32 bits")
    return value


@dataclass(frozen=True)
class PluginMethod:
    """A plugin with a short name, a UUID and its init and invoke handlers.

    ``invoke`` is called as ``invoke(cmd, sub_cmd, data)`` and returns the
    output bytes, or raises :class:`TeecError`. ``init`` takes no arguments
    and may return ``None`` or a result code; a code other than SUCCESS is
    reported as a :class:`TeecError`.
    """

    name: str
    uuid: Uuid
    invoke: Callable[[int, int, bytes], bytes]
    init: Optional[Callable[[], object]] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("a plugin needs a name")
        if not isinstance(self.uuid, Uuid):
            raise TypeError("uuid must be a Uuid")
        if not callable(self.invoke):
            raise TypeError("invoke must be callable")
        if self.init is not None and not callable(self.init):
            raise TypeError("init must be callable or None")

    def initialize(self) -> Result:
        """Run the plugin's init handler, if it has one."""
        if self.init is None:
            return Result.SUCCESS
        outcome = self.init()
        if outcome is not None and int(outcome) != Result.SUCCESS:
            raise TeecError(outcome, message=f"plugin {self.name!r} failed to initialise")
        return Result.SUCCESS

    def call(self, cmd, sub_cmd, data=b"") -> bytes:
        """Pass a command and its input data to the plugin and return its output."""
        cmd = _check_command("cmd", cmd)
        sub_cmd = _check_command("sub_cmd", sub_cmd)
        payload = b"" if data is None else bytes(data)
        output = self.invoke(cmd, sub_cmd, payload)
        if not isinstance(output, (bytes, bytearray, memoryview)):
            raise TypeError(f"plugin {self.name!r} returned {type(output).__name__}, not bytes")
        return bytes(output)