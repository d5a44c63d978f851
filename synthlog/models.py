"""Access record data model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AccessRecord:
    host: str
    scheme: str
    status: int
    bytes_sent: int
    cache_status: str


# Value a field takes when its draw failed under the "zero" error policy.
ZERO_VALUES = {
    "host": "",
    "scheme": "",
    "status": 0,
    "bytes_sent": 0,
    "cache_status": "",
}
