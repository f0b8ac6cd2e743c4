"""
Tests for logging configuration
"""
import json
import logging

from lawdesk.core.logging_config import (ContextualFormatter, LoggingConfig,
                                         SensitiveDataFilter)


def _record(msg, *args, **extra):
    record = logging.LogRecord("lawdesk.test", logging.INFO, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_with_context_and_extra():
    LoggingConfig.set_context(request_id="req-1", path="/laws/add")
    try:
        output = ContextualFormatter().format(_record("Created law %s", 7, law_id=7))
    finally:
        LoggingConfig.clear_context()

    payload = json.loads(output)
    assert payload["message"] == "Created law 7"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-1"
    assert payload["path"] == "/laws/add"
    assert payload["law_id"] == 7


def test_clear_context_drops_request_fields():
    LoggingConfig.set_context(request_id="req-2")
    LoggingConfig.clear_context()
    payload = json.loads(ContextualFormatter().format(_record("hello")))
    assert "request_id" not in payload


def test_sensitive_data_is_masked():
    record = _record("connecting with password=hunter2 to postgresql://clerk:hunter2@db/laws")
    SensitiveDataFilter().filter(record)
    assert "hunter2" not in record.getMessage()


def test_sensitive_filter_can_be_disabled():
    record = _record("password=hunter2")
    SensitiveDataFilter(enabled=False).filter(record)
    assert record.getMessage() == "password=hunter2"


def test_module_level_roundtrip():
    LoggingConfig.set_module_level("lawdesk.services", "DEBUG")
    try:
        assert LoggingConfig.get_module_level("lawdesk.services") == "DEBUG"
    finally:
        LoggingConfig.set_module_level("lawdesk.services", "INFO")


def test_log_metrics_count_by_level():
    LoggingConfig.reset_metrics()
    LoggingConfig.get_logger("lawdesk.test").warning("careful")
    assert LoggingConfig.get_metrics()["WARNING"] >= 1


def test_database_url_in_extra_is_masked_in_json_output():
    record = _record(
        "Database engine created",
        database_url="postgresql://clerk:hunter2@db/lawyermanagement",
    )
    SensitiveDataFilter().filter(record)
    output = ContextualFormatter().format(record)

    assert "hunter2" not in output
    assert json.loads(output)["database_url"] == "postgresql://clerk:***@db/lawyermanagement"


def test_non_string_extra_values_are_left_alone():
    record = _record("Created law", law_id=7, tables=["laws"])
    SensitiveDataFilter().filter(record)
    payload = json.loads(ContextualFormatter().format(record))
    assert payload["law_id"] == 7
    assert payload["tables"] == ["laws"]


def test_engine_creation_log_hides_password(monkeypatch, caplog):
    from lawdesk.core import database
    from lawdesk.core.config import Settings

    settings = Settings(_env_file=None, sqlalchemy_database_url=None, postgres_password="hunter2")
    monkeypatch.setattr(database, "get_settings", lambda: settings)
    monkeypatch.setattr(database, "build_engine", lambda url, echo=False: object())
    monkeypatch.setattr(database, "_engine", None)

    with caplog.at_level(logging.INFO, logger="lawdesk.core.database"):
        database.get_engine()

    record = next(r for r in caplog.records if r.getMessage() == "Database engine created")
    assert "hunter2" not in record.database_url
    assert record.database_url.startswith("postgresql://postgres:")
