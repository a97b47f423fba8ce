import os
import json
import logging
from datetime import datetime, timezone

from settings_api import __version__

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SQL_LOG_LEVEL = os.getenv("SQL_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower()
SERVICE_NAME = os.getenv("SERVICE_NAME", "settings-api")

class JsonFormatter(logging.Formatter):
    """One JSON object per line, stamped with the service name and version."""

    def format(self, record):
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "service": SERVICE_NAME,
            "version": __version__,
            "logger": record.name,
            "where": f"{record.module}:{record.lineno}",
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)

TEXT_FORMATTER = {
    "format": "%(asctime)s %(levelname)-7s [" + SERVICE_NAME + "] %(name)s:%(lineno)d %(message)s",
    "datefmt": "%Y-%m-%dT%H:%M:%S%z",
}

JSON_FORMATTER = {
    "()": JsonFormatter,
}

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": TEXT_FORMATTER if LOG_FORMAT == "text" else JSON_FORMATTER,
    },
    "handlers": {
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
        # Requests are logged by the access middleware instead
        "uvicorn.access": {"handlers": ["default"], "level": "CRITICAL", "propagate": False},
        "sqlalchemy": {"handlers": ["default"], "level": SQL_LOG_LEVEL, "propagate": False},
        "settings_api": {"handlers": ["default"], "level": LOG_LEVEL, "propagate": False},
    },
}
