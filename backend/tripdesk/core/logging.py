"""Logging setup: JSON lines in production, plain text everywhere else."""
import logging
import sys
from pythonjsonlogger import jsonlogger
from tripdesk.core.config import settings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging() -> None:
    if settings.APP_ENV == "production":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            jsonlogger.JsonFormatter(
                LOG_FORMAT,
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
        logging.root.handlers = [handler]
        logging.root.setLevel(logging.INFO)
    else:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    # SQL echo is noisy during CSV imports; keep it at WARNING unless asked for.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
