import logging

from textile_ledger.config import settings

# Log format with ISO-like timestamp including milliseconds
LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(filename)s - %(funcName)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def setup_logging() -> logging.Logger:
    """
    Configure the package logger once.

    Every module logs through logging.getLogger(__name__), so records from
    textile_ledger.* end up on this logger's console handler.
    """
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.setLevel(settings.LOG_LEVEL.upper())

    # Avoid stacking handlers when the app is imported more than once (reloader, tests)
    if not logger.handlers:
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # Avoid duplicate logs when the root logger is also configured
    logger.propagate = False
    return logger
