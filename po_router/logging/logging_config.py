import logging
import sys

from pythonjsonlogger.json import JsonFormatter


def configure_logging(log_level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(event)s",
            rename_fields={"levelname": "level"},
        )
    )
    root_logger.addHandler(handler)
