"""Access record formatters: LTSV and JSON lines."""

import json
from datetime import datetime

from synthlog.models import AccessRecord

VALID_FORMATS = ("ltsv", "json")
TIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _fields(record: AccessRecord, timestamp: datetime) -> list:
    return [
        ("time", timestamp.strftime(TIME_FORMAT)),
        ("host", record.host),
        ("http_host", record.host),
        ("scheme", record.scheme),
        ("status", record.status),
        ("bytes_sent", record.bytes_sent),
        ("sent_http_x_cache", record.cache_status),
    ]


def _escape_ltsv(value) -> str:
    return str(value).replace("\t", "\\t").replace("\n", "\\n")


def format_ltsv(record: AccessRecord, timestamp: datetime) -> str:
    return "\t".join(f"{label}:{_escape_ltsv(value)}" for label, value in _fields(record, timestamp))


def format_json(record: AccessRecord, timestamp: datetime) -> str:
    return json.dumps(dict(_fields(record, timestamp)))


def get_formatter(fmt: str):
    """Return the formatter function for the given format string."""
    formatters = {
        "ltsv": format_ltsv,
        "json": format_json,
    }
    return formatters[fmt]
