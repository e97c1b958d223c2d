import io
import json
import logging

from mail_notifier.config import Settings
from mail_notifier.services.logging_config import JsonFormatter, configure_logging


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord("mail_notifier.test", logging.INFO, __file__, 1, "Sent %s", ("message",), None)
    record.event = "telegram_message_sent"
    record.chat_id = "-100200"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Sent message"
    assert payload["level"] == "INFO"
    assert payload["event"] == "telegram_message_sent"
    assert payload["chat_id"] == "-100200"
    assert "msg" not in payload and "args" not in payload


def test_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "-100200")
    monkeypatch.setenv("NOTIFY_INCLUDE_FORWARD_DATE", "true")
    monkeypatch.setenv("API_RETRY_MAX_ATTEMPTS", "5")

    settings = Settings(_env_file=None)

    assert settings.telegram_chat_id == "-100200"
    assert settings.notify_include_forward_date is True
    assert settings.api_retry_max_attempts == 5
    assert settings.telegram_api_base == "https://api.telegram.org"


def test_configure_logging_writes_to_given_stream() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    stream = io.StringIO()
    try:
        configure_logging("info", stream=stream)
        logging.getLogger("mail_notifier.test").info("Hello", extra={"event": "test_event"})
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

    payload = json.loads(stream.getvalue().splitlines()[-1])
    assert payload["message"] == "Hello"
    assert payload["event"] == "test_event"
