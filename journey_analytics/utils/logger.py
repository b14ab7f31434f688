import logging


def get_logger(name: str, level: int = logging.INFO):
    """
    Named logger with a single stream handler.

    Calling it again for the same name returns the configured logger
    without stacking handlers.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s — %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
