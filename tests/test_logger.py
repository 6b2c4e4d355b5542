import logging

from seatmap.logger import LOGGER_NAME, logger, setup_logging


def test_service_logger_is_named():
    assert logger.name == LOGGER_NAME
    assert logger.handlers


def test_setup_is_idempotent(tmp_path):
    name = "seatmap-test"
    first = setup_logging(str(tmp_path / "logs"), "info", name=name)
    second = setup_logging(str(tmp_path / "logs"), "debug", name=name)
    try:
        assert first is second
        assert len(second.handlers) == 2
        assert second.level == logging.DEBUG

        second.info("Showing 1 imported")
        for handler in second.handlers:
            handler.flush()
        assert "Showing 1 imported" in (tmp_path / "logs" / f"{name}.log").read_text(encoding="utf-8")
    finally:
        for handler in list(second.handlers):
            handler.close()
            second.removeHandler(handler)
