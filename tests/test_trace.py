import logging

from simload.config import Settings
from simload.trace import CollectingSink, Tracer


def _tracer(**kwargs):
    return Tracer(log=logging.getLogger("simload.test"), time_source=lambda: 12.345, **kwargs)


def test_warning_includes_model_time(caplog):
    with caplog.at_level(logging.DEBUG, logger="simload.test"):
        _tracer().warning("Unused columns: age")
    assert caplog.records[0].levelno == logging.WARNING
    assert caplog.records[0].getMessage() == "WARNING (time 12.35): Unused columns: age"


def test_emit_is_warning_channel(caplog):
    with caplog.at_level(logging.DEBUG, logger="simload.test"):
        _tracer().emit("hello")
    assert [r.getMessage() for r in caplog.records] == ["WARNING (time 12.35): hello"]


def test_channels_respect_toggles(caplog):
    tracer = _tracer(print_warnings=False, print_debugs=True, print_updates=False)
    with caplog.at_level(logging.DEBUG, logger="simload.test"):
        tracer.warning("w")
        tracer.debug("d")
        tracer.update("u")
    assert [r.getMessage() for r in caplog.records] == ["DEBUG (time 12.35): d"]


def test_update_logs_at_info(caplog):
    with caplog.at_level(logging.DEBUG, logger="simload.test"):
        _tracer().update("loaded")
    assert caplog.records[0].levelno == logging.INFO


def test_default_time_source_starts_near_zero():
    tracer = Tracer()
    assert 0.0 <= tracer.time_source() < 60.0


def test_from_settings():
    cfg = Settings(PRINT_WARNINGS=False, PRINT_DEBUGS=True, PRINT_UPDATES=False)
    tracer = Tracer.from_settings(cfg, time_source=lambda: 0.0)
    assert (tracer.print_warnings, tracer.print_debugs, tracer.print_updates) == (False, True, False)


def test_collecting_sink():
    sink = CollectingSink()
    sink.emit("a")
    sink.emit("b")
    assert sink.messages == ["a", "b"]
