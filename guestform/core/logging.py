import logging
import sys

from pythonjsonlogger import jsonlogger

from guestform.core.config import settings

# Client libraries behind the calendar/sheets/e-mail mirrors log every HTTP call
NOISY_LOGGERS = {
    "googleapiclient.discovery_cache": logging.ERROR,
    "googleapiclient.discovery": logging.WARNING,
    "google.auth": logging.WARNING,
    "gspread": logging.WARNING,
    "urllib3": logging.WARNING,
    "httpx": logging.WARNING,
}


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            json_ensure_ascii=False,
        )
    return logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def setup_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(settings.log_format))
    root_logger.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, noisy_level))
