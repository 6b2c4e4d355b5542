"""Журнал сервиса: файл в LOG_DIR и вывод в консоль."""
import logging
import os

from seatmap import settings

LOGGER_NAME = "seatmap-service"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(log_dir: str = settings.LOG_DIR, level: str = settings.LOG_LEVEL,
                  name: str = LOGGER_NAME) -> logging.Logger:
    """
    Подключает к именованному логгеру файловый и консольный обработчики.

    Повторный вызов только меняет уровень, обработчики не дублируются.
    """
    service_logger = logging.getLogger(name)
    service_logger.setLevel(level.upper())
    if service_logger.handlers:
        return service_logger

    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = logging.FileHandler(os.path.join(log_dir, f"{name}.log"), encoding="utf-8")
    for handler in (file_handler, logging.StreamHandler()):
        handler.setFormatter(formatter)
        service_logger.addHandler(handler)
    return service_logger


logger = setup_logging()
