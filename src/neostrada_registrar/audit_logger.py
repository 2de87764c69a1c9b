"""
Audit log for registrar traffic.

Every registrar request and every failed operation is recorded as a
LogEntry. Entries at or above the configured level are written to the
output stream as JSON lines, as text lines, or both. Request data is
masked before it is stored, so the access token and transfer auth codes
never appear in an entry.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from .enums import LogLevel
from .exceptions import RegistrarError


LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}

OUTPUT_FORMATS = ("json", "text", "both")


@dataclass
class LogEntry:
    """One audit record."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(
            {
                "timestamp": self.timestamp,
                "level": self.level.value,
                "component": self.component,
                "message": self.message,
                "data": self.data,
            },
            ensure_ascii=False,
        )

    def to_text(self) -> str:
        line = f"[{self.timestamp}] {self.level.value.upper()} [{self.component}] {self.message}"
        if self.data:
            line += " " + json.dumps(self.data, ensure_ascii=False)
        return line


class AuditLogger:
    """
    Audit logger for the registrar adapter.

    All entries are kept in memory (see `entries`); only those at or above
    `min_level` are written out. Keys whose name contains one of
    SENSITIVE_KEYS are replaced by MASK_VALUE at any nesting depth.
    """

    SENSITIVE_KEYS = frozenset({
        'token', 'secret', 'password', 'api_key', 'authcode', 'auth_code',
        'authorization', 'credential', 'credentials', 'access_token',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        min_level: LogLevel = LogLevel.INFO,
    ):
        """
        Args:
            output_format: 'json', 'text' or 'both'
            output_stream: Where entries are written (defaults to sys.stderr)
            min_level: Lowest level that is written out
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._stream = output_stream or sys.stderr
        self._min_level = min_level
        self._entries: list[LogEntry] = []

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def min_level(self) -> LogLevel:
        """Lowest level written to the output stream."""
        return self._min_level

    @property
    def entries(self) -> list[LogEntry]:
        """Copy of every entry recorded so far, written or not."""
        return list(self._entries)

    def clear_entries(self) -> None:
        self._entries.clear()

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> LogEntry:
        """Record an entry and write it if its level passes the filter."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)

        if LEVEL_ORDER[level] >= LEVEL_ORDER[self._min_level]:
            self._write(entry)
        return entry

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
        additional_data: Optional[dict] = None,
    ) -> LogEntry:
        """
        Record an ERROR entry with the failure context.

        Registrar errors also contribute their code, their details and
        whether a retry could help. The request path and HTTP status are
        added when known.
        """
        data = dict(additional_data or {})

        if error is not None:
            data["error_type"] = type(error).__name__
            data["error_message"] = str(error)
            if isinstance(error, RegistrarError):
                data["error_code"] = error.code
                data["retryable"] = error.retryable
                if error.details:
                    data["error_details"] = error.details

        if request_url is not None:
            data["request_url"] = request_url
        if response_status_code is not None:
            data["response_status_code"] = response_status_code

        return self.log(LogLevel.ERROR, component, message, data)

    def is_sensitive_key(self, key: Any) -> bool:
        key = str(key).lower()
        return any(sensitive in key for sensitive in self.SENSITIVE_KEYS)

    def mask_sensitive_data(self, data: Any) -> Any:
        """Return a copy of `data` with sensitive values replaced."""
        if isinstance(data, dict):
            return {
                key: self.MASK_VALUE if self.is_sensitive_key(key) else self.mask_sensitive_data(value)
                for key, value in data.items()
            }
        if isinstance(data, (list, tuple)):
            return [self.mask_sensitive_data(item) for item in data]
        return data

    def _write(self, entry: LogEntry) -> None:
        lines = []
        if self._output_format in ("json", "both"):
            lines.append(entry.to_json())
        if self._output_format in ("text", "both"):
            lines.append(entry.to_text())

        self._stream.write("\n".join(lines) + "\n")
        self._stream.flush()
