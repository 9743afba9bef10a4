"""
common/logging_config.py

Log setup for the Octopus shell: JSON lines when LOG_FORMAT=json, plain text otherwise.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# `extra=` keys the registry client attaches to its records
NAV_FIELDS = ("module_id", "route", "tenant_id")

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({key: getattr(record, key) for key in NAV_FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(level: str = "INFO", fmt: str = "text"):
    """Install one stdout handler on the root logger (safe on Streamlit reruns)."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
    # requests' connection pool chatter
    logging.getLogger("urllib3").setLevel(logging.WARNING)
