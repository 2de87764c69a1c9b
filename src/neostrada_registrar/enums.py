"""
Enumeration types for the registrar adapter.

These enums provide type-safe constants for contact roles, operation
outcomes, error codes, and logging levels.
"""

from enum import Enum


class ContactRole(Enum):
    """Role a WHOIS contact plays for a domain."""

    OWNER = "owner"
    ADMIN = "admin"
    TECH = "tech"


class Outcome(Enum):
    """Tagged outcome of a single adapter operation."""

    SUCCESS = "success"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    FETCH_FAILED = "fetch_failed"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"
    NOT_IMPLEMENTED = "not_implemented"


class SyncStatus(Enum):
    """Per-domain status reported by the sync operation."""

    SUCCESS = "success"
    ERROR = "error"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ClientErrorCode(Enum):
    """Error codes for HTTP client operations."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    PARSE_ERROR = "parse_error"


class DomainNameErrorCode(Enum):
    """Error codes for domain name normalization failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    MISSING_SUFFIX = "missing_suffix"
    IDNA_ERROR = "idna_error"


class ConfigErrorCode(Enum):
    """Error codes for configuration problems."""

    MISSING_TOKEN = "missing_token"
    INSECURE_ENDPOINT = "insecure_endpoint"
