import logging

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(level="INFO", name: str = "villa_admin"):
    formatter = logging.Formatter(LOG_FORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logger = logging.getLogger(name)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger
