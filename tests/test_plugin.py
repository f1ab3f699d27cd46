import pytest

from teeclient.plugin import PluginMethod
from teeclient.teec import Result, TeecError, Uuid

UUID = Uuid.from_fields(0x12345678, 0x9ABC, 0xDEF0, range(8))


def _echo(cmd, sub_cmd, data):
    return bytes([cmd, sub_cmd]) + data


def test_call_returns_plugin_output():
    plugin = PluginMethod("echo", UUID, _echo)
    assert plugin.call(1, 2, b"abc") == b"\x01\x02abc"


def test_call_passes_empty_data_for_none():
    seen = []
    plugin = PluginMethod("rec", UUID, lambda c, s, d: seen.append(d) or b"")
    assert plugin.call(0, 0, None) == b""
    assert seen == [b""]


def test_initialize_without_init_succeeds():
    plugin = PluginMethod("echo", UUID, _echo)
    assert plugin.initialize() == Result.SUCCESS


def test_initialize_runs_init_once():
    calls = []
    plugin = PluginMethod("echo", UUID, _echo, init=lambda: calls.append(1))
    assert plugin.initialize() == Result.SUCCESS
    assert calls == [1]


def test_initialize_failure_raises():
    plugin = PluginMethod("bad", UUID, _echo, init=lambda: Result.ERROR_GENERIC)
    with pytest.raises(TeecError) as info:
        plugin.initialize()
    assert info.value.result == Result.ERROR_GENERIC


def test_invoke_error_propagates():
    def failing(cmd, sub_cmd, data):
        raise TeecError(Result.ERROR_NOT_SUPPORTED)

    plugin = PluginMethod("fail", UUID, failing)
    with pytest.raises(TeecError) as info:
        plugin.call(1, 1, b"")
    assert info.value.result == Result.ERROR_NOT_SUPPORTED


def test_call_rejects_out_of_range_command():
    plugin = PluginMethod("echo", UUID, _echo)
    with pytest.raises(ValueError):
        plugin.call(-1, 0, b"")
    with pytest.raises(ValueError):
        plugin.call(0, 1 << 32, b"")


def test_call_rejects_non_bytes_output():
    plugin = PluginMethod("odd", UUID, lambda c, s, d: 5)
    with pytest.raises(TypeError):
        plugin.call(0, 0, b"")


def test_plugin_needs_name_and_uuid():
    with pytest.raises(ValueError):
        PluginMethod("", UUID, _echo)
    with pytest.raises(TypeError):
        PluginMethod("x", "not-a-uuid", _echo)