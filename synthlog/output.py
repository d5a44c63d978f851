"""Log sink: formats records and appends them to a file, optionally echoing to stdout."""

import logging
import os
import sys
import threading
from datetime import datetime, timezone

from synthlog.errors import SinkError
from synthlog.formatters import get_formatter
from synthlog.models import AccessRecord

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


class LogWriter:
    def __init__(self, output_file: str, log_format: str = "ltsv",
                 console_enabled: bool = False, now_func=None):
        self._output_file = output_file
        self._formatter = get_formatter(log_format)
        self._console_enabled = console_enabled
        self._now_func = now_func or _local_now
        self._lock = threading.Lock()
        self._file_handle = None
        try:
            self._ensure_directory()
            self._file_handle = open(self._output_file, "a", encoding="utf-8")
        except OSError as e:
            raise SinkError(f"failed to open log file {output_file}: {e}") from e
        logger.info("Writing %s records to %s", log_format, output_file)

    def _ensure_directory(self):
        dir_path = os.path.dirname(self._output_file)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

    def emit(self, record: AccessRecord) -> None:
        line = self._formatter(record, self._now_func())
        with self._lock:
            if self._file_handle is None:
                raise SinkError(f"log file {self._output_file} is closed")
            try:
                self._file_handle.write(line + "\n")
                self._file_handle.flush()
                if self._console_enabled:
                    sys.stdout.write(line + "\n")
                    sys.stdout.flush()
            except (OSError, ValueError) as e:
                raise SinkError(f"failed to write to {self._output_file}: {e}") from e

    def close(self):
        with self._lock:
            if self._file_handle:
                self._file_handle.close()
                self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
