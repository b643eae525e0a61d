import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(log_dir="data/logs", level=logging.INFO):
    """Attach console and daily-rotated file output to the ``storefront`` logger.

    Module loggers (``storefront.api``, ``storefront.record_store``, ...)
    propagate here. Only the first call configures handlers, so apps built
    later in the same process share the first app's log file.
    """
    logger = logging.getLogger("storefront")
    logger.setLevel(level)
    if logger.handlers:
        return logger

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [
        TimedRotatingFileHandler(
            filename=log_dir / "storefront.log",
            when="midnight",
            backupCount=7,
            encoding="utf-8",
        ),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info("logging to %s", log_dir / "storefront.log")
    return logger
