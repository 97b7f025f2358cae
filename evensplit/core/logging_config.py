import logging

from evensplit.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

def configure_logging(level: str | None = None):
    logging.basicConfig(level=level or settings.LOG_LEVEL, format=LOG_FORMAT)
    # sqlalchemy echo goes through its own logger
    if settings.SQL_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
