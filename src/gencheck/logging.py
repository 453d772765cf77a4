"""Structured logging for gencheck.

Controlled via GENCHECK_LOG_FORMAT ("json" or "text") and GENCHECK_LOG_LEVEL.

The registry and the synthesis engine attach ``gencheck_*`` extras to their
records:
    gencheck_type      repr of the type being registered, built or synthesized
    gencheck_shape     ArrayType / ProductType / SumType for synthesized types
    gencheck_family    factory name when a generic family builds the spec
    gencheck_weights   structural weight per case of a synthesized sum
    gencheck_replaced  True when a registration replaced an earlier one

The JSON format emits them as top-level keys; the text format appends them
as ``key=value`` pairs.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone

EXTRA_PREFIX = "gencheck_"

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def record_extras(record: logging.LogRecord) -> dict:
    """The ``gencheck_*`` attributes attached to ``record``, in insertion order."""
    return {key: value for key, value in record.__dict__.items() if key.startswith(EXTRA_PREFIX)}


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(record_extras(record))

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain text with ``gencheck_*`` extras appended as key=value pairs."""

    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if not extras:
            return line
        pairs = " ".join(f"{key[len(EXTRA_PREFIX):]}={value}" for key, value in extras.items())
        return f"{line} [{pairs}]"


def setup_logging(log_format: str, level: int = logging.WARNING) -> None:
    """Route all records to stderr in the given format, replacing root handlers."""
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())
    root.addHandler(handler)
