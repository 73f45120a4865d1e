import json
import logging
import sys
from typing import Optional

from .config import Settings, get_settings


class JsonFormatter(logging.Formatter):
    """Single-line JSON records for non-dev environments."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "timestamp": self.formatTime(record, self.datefmt),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure the memberhub logger tree once per process.
    """
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level, logging.INFO)

    logger = logging.getLogger("memberhub")
    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if settings.app_env == "dev":
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    else:
        formatter = JsonFormatter()
    handler.setFormatter(formatter)

    if logger.hasHandlers():
        logger.handlers.clear()
    logger.addHandler(handler)

    # keep driver chatter out of the application log
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
