import logging
import sys
import time

from pythonjsonlogger.json import JsonFormatter

# Libraries that are too chatty at INFO outside of local development.
_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class UTCJsonFormatter(JsonFormatter):
    converter = time.gmtime


def setup_logging(level: str = "INFO", *, app_env: str = "dev") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
    handler.setFormatter(UTCJsonFormatter(fmt, static_fields={"app_env": app_env}))
    root.addHandler(handler)

    if app_env != "dev":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel("WARNING")
