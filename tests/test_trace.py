import logging

import pytest

from teeclient.trace import (
    DEFAULT_LEVEL,
    FLOW_LOGGING_LEVEL,
    TraceLevel,
    Tracer,
    level_from_config,
)


@pytest.mark.parametrize(
    "config, expected",
    [
        (0, TraceLevel.ERROR),
        (1, TraceLevel.ERROR),
        (2, TraceLevel.INFO),
        (3, TraceLevel.DEBUG),
        (4, TraceLevel.FLOW),
    ],
)
def test_level_from_config(config, expected):
    assert level_from_config(config) == expected


def test_level_from_config_default():
    assert level_from_config(None) == DEFAULT_LEVEL == TraceLevel.INFO


def test_level_from_config_rejects_unknown():
    with pytest.raises(ValueError):
        level_from_config(5)
    with pytest.raises(ValueError):
        level_from_config("high")


def test_enabled_follows_level():
    tracer = Tracer("TEST_ENABLED", TraceLevel.DEBUG)
    assert tracer.enabled(TraceLevel.ERROR)
    assert tracer.enabled(TraceLevel.DEBUG)
    assert not tracer.enabled(TraceLevel.FLOW)


def test_emsg_is_logged_with_caller(caplog):
    caplog.set_level(1, logger="TEST_EMSG")
    tracer = Tracer("TEST_EMSG", TraceLevel.ERROR)
    assert tracer.emsg("value=%d", 42) is True
    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.getMessage() == "value=42"
    assert record.levelno == logging.ERROR
    assert record.funcName == "test_emsg_is_logged_with_caller"


def test_messages_above_level_are_dropped(caplog):
    caplog.set_level(1, logger="TEST_DROP")
    tracer = Tracer("TEST_DROP", TraceLevel.INFO)
    assert tracer.dmsg("hidden") is False
    assert tracer.fmsg("hidden") is False
    assert tracer.imsg("shown") is True
    assert [r.getMessage() for r in caplog.records] == ["shown"]


def test_flow_messages_use_flow_level(caplog):
    caplog.set_level(1, logger="TEST_FLOW")
    tracer = Tracer("TEST_FLOW", TraceLevel.FLOW)
    assert tracer.fmsg("> enter")
    assert caplog.records[0].levelno == FLOW_LOGGING_LEVEL


def test_tracer_needs_prefix_and_valid_level():
    with pytest.raises(ValueError):
        Tracer("")
    with pytest.raises(ValueError):
        Tracer("TEST_BAD", 9)