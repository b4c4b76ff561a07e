"""Logging setup shared by the studio modules."""

import logging
import sys

import config

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# chatty client libraries stay at WARNING even in debug mode
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)],
)

for _name in QUIET_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> logging.Logger:
    level = logging.DEBUG if config.DEBUG_MODE else logging.INFO
    logger = logging.getLogger(name or "studio")
    logger.setLevel(level)
    return logger
