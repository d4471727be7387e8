import logging
import sys

from laundrybill.settings import settings

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging() -> None:
    """Install a single stderr handler on the root logger.

    Both the API process and the table/seed scripts call this before they
    open a store, so store and service loggers inherit the same format.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)

    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Routes log their own mutations; access lines would duplicate them.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # botocore dumps every request body at DEBUG
    logging.getLogger("botocore").setLevel(max(level, logging.INFO))
