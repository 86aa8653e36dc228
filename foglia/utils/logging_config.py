"""Logging configuration.

Every record of an evaluation carries its ``evaluation_id`` and ``stage``
(see ``evaluation_logger``). Both are rendered by the console format and
emitted as fields by the JSON format.
"""

import json
import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = "foglia"

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - [%(evaluation_id)s] %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at INFO while reading documents or calling the model.
NOISY_LOGGERS = ("pypdf", "urllib3", "httpx", "multipart")


class EvaluationContextFilter(logging.Filter):
    """Fill in evaluation fields for records logged outside an evaluation."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "evaluation_id"):
            record.evaluation_id = "-"
        if not hasattr(record, "stage"):
            record.stage = None
        return True


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        evaluation_id = getattr(record, "evaluation_id", "-")
        if evaluation_id != "-":
            log_obj["evaluation_id"] = evaluation_id
        stage = getattr(record, "stage", None)
        if stage:
            log_obj["stage"] = stage
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, ensure_ascii=False)


class EvaluationLogger(logging.LoggerAdapter):
    """Logger adapter bound to one evaluation."""

    def process(self, msg, kwargs):
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def at_stage(self, stage: str) -> None:
        self.extra["stage"] = stage


def setup_logging(
    log_file: Optional[Path] = None,
    log_level: str = "INFO",
    json_logs: bool = False,
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        log_file: Path to log file (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Use JSON lines for the file handler

    Returns:
        Configured logger instance
    """
    level = log_level.upper()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    context_filter = EvaluationContextFilter()
    console_formatter = logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.addFilter(context_filter)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(JsonFormatter() if json_logs else console_formatter)
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.propagate = False

    return logger


def get_logger() -> logging.Logger:
    """Get the foglia logger instance."""
    return logging.getLogger(LOGGER_NAME)


def evaluation_logger(evaluation_id: str) -> EvaluationLogger:
    """Get a logger whose records carry the given evaluation id."""
    return EvaluationLogger(get_logger(), {"evaluation_id": evaluation_id, "stage": None})
