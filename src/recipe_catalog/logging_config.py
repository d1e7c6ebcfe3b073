import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger.

    Calling it again only updates the level, so app reloads and repeated
    test setups do not stack handlers.
    """
    logger = logging.getLogger("recipe_catalog")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)

    # SQL echo stays quiet unless explicitly requested
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return logger
