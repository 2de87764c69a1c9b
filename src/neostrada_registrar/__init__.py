"""
Neostrada registrar adapter.

This package adapts the Neostrada domain registrar REST API to the
registrar plugin contract of a billing / host-management application:
availability checks, registration and transfer, listings and status
synchronization, and WHOIS contact management.
"""

__version__ = "0.1.0"
__author__ = "Neostrada Registrar Team"

from neostrada_registrar.exceptions import (
    RegistrarError,
    ValidationError,
    NetworkError,
    ProtocolError,
    ConfigurationError,
)
from neostrada_registrar.enums import (
    ContactRole,
    Outcome,
    SyncStatus,
    LogLevel,
    ClientErrorCode,
    DomainNameErrorCode,
    ConfigErrorCode,
)
from neostrada_registrar.config import (
    RegistrarConfig,
    LoggingConfig,
    AdapterConfig,
)
from neostrada_registrar.models import (
    DomainListing,
    DomainSyncRecord,
    Holder,
    Country,
    Extension,
    Contact,
    WhoisData,
    ContactListEntry,
    DomainSummary,
    SyncEntry,
    OperationResult,
    format_api_date,
    parse_flag,
)
from neostrada_registrar.domain_name import (
    SplitDomain,
    normalize_domain,
    split_domain,
)
from neostrada_registrar.audit_logger import (
    AuditLogger,
    LogEntry,
)
from neostrada_registrar.client import NeostradaClient
from neostrada_registrar.registrar import (
    NeostradaRegistrar,
    NO_HANDLE,
    find_country_by_code,
    find_country_by_id,
    find_extension,
)

__all__ = [
    # Exceptions
    "RegistrarError",
    "ValidationError",
    "NetworkError",
    "ProtocolError",
    "ConfigurationError",
    # Enums
    "ContactRole",
    "Outcome",
    "SyncStatus",
    "LogLevel",
    "ClientErrorCode",
    "DomainNameErrorCode",
    "ConfigErrorCode",
    # Configuration
    "RegistrarConfig",
    "LoggingConfig",
    "AdapterConfig",
    # Models
    "DomainListing",
    "DomainSyncRecord",
    "Holder",
    "Country",
    "Extension",
    "Contact",
    "WhoisData",
    "ContactListEntry",
    "DomainSummary",
    "SyncEntry",
    "OperationResult",
    "format_api_date",
    "parse_flag",
    # Domain names
    "SplitDomain",
    "normalize_domain",
    "split_domain",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Client
    "NeostradaClient",
    # Registrar
    "NeostradaRegistrar",
    "NO_HANDLE",
    "find_country_by_code",
    "find_country_by_id",
    "find_extension",
]
