import logging

from retrosfx.logging_utils import configure_logging, get_log_dir, get_log_path, log_exception


def test_log_dir_uses_env_override(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("RETROSFX_LOG_DIR", str(tmp_path))
    assert get_log_dir() == tmp_path
    assert get_log_path() == tmp_path / "retrosfx.log"


def test_log_exception_appends_traceback(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("RETROSFX_LOG_DIR", str(tmp_path / "nested"))
    try:
        raise ValueError("boom")
    except ValueError as exc:
        path = log_exception("render", exc)

    assert path == tmp_path / "nested" / "retrosfx.log"
    text = path.read_text(encoding="utf-8")
    assert "render failed: ValueError: boom" in text
    assert "Traceback" in text


def test_configure_logging_adds_one_handler(monkeypatch) -> None:
    monkeypatch.delenv("RETROSFX_LOG_LEVEL", raising=False)
    logger = logging.getLogger("retrosfx")
    monkeypatch.setattr(logger, "level", logger.level)
    monkeypatch.setattr(logger, "handlers", [])

    configure_logging(logging.INFO)
    configure_logging(logging.INFO)

    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_configure_logging_env_level(monkeypatch) -> None:
    monkeypatch.setenv("RETROSFX_LOG_LEVEL", "debug")
    logger = logging.getLogger("retrosfx")
    monkeypatch.setattr(logger, "level", logger.level)
    monkeypatch.setattr(logger, "handlers", [logging.NullHandler()])

    configure_logging()
    assert logger.level == logging.DEBUG

    monkeypatch.setenv("RETROSFX_LOG_LEVEL", "chatty")
    configure_logging()
    assert logger.level == logging.WARNING
