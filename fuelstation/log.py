import logging

LOG_FORMAT = "%(levelname)s : %(asctime)s | %(name)s  | %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install a single stream handler on the ``fuelstation`` logger."""
    logger = logging.getLogger("fuelstation")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
