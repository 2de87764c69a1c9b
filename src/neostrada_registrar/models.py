"""
Data models for the registrar adapter.

This module defines the registrar-side response schemas (domains, holders,
countries, extensions), the host-side contact structures, and the per-call
result object every adapter operation returns.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .enums import ContactRole, Outcome, SyncStatus


def format_api_date(value: Optional[str]) -> Optional[str]:
    """
    Format a registrar date or timestamp as YYYY-MM-DD.

    Args:
        value: Plain date ('2024-05-01') or ISO 8601 timestamp

    Returns:
        Formatted date, or None if the value is empty or unparseable
    """
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    return dt.strftime("%Y-%m-%d")


FALSE_FLAG_VALUES = ("", "0", "false", "no")


def parse_flag(value: Any) -> bool:
    """
    Interpret a registrar boolean flag.

    The API is loose about types: the same flag may arrive as a JSON
    boolean, a number or a string such as "0" or "1".

    Args:
        value: Raw flag value from a response record

    Returns:
        False for None, False, 0 and the strings in FALSE_FLAG_VALUES
    """
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_FLAG_VALUES
    return bool(value)


# ---------------------------------------------------------------------------
# Registrar response schemas
# ---------------------------------------------------------------------------


@dataclass
class DomainListing:
    """Domain record as used for the domain listing (field `paid_until`)."""

    name: str
    is_external: bool
    paid_until: Optional[str]
    start_date: Optional[str]
    status: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "DomainListing":
        return cls(
            name=data["description"],
            is_external=parse_flag(data.get("is_external")),
            paid_until=data.get("paid_until"),
            start_date=data.get("start_date"),
            status=data.get("status"),
        )


@dataclass
class DomainSyncRecord:
    """
    Domain record as used for status synchronization.

    The registrar spells the paid-until field `paid_untill` here. Both
    spellings are kept apart on purpose and normalized to `paid_until`.
    """

    name: str
    is_external: bool
    paid_until: Optional[str]

    @classmethod
    def from_api(cls, data: dict) -> "DomainSyncRecord":
        return cls(
            name=data["description"],
            is_external=parse_flag(data.get("is_external")),
            paid_until=data.get("paid_untill"),
        )


@dataclass
class Holder:
    """A WHOIS contact record as stored by the registrar."""

    holder_id: str
    firstname: str
    lastname: str
    street: str
    zipcode: str
    city: str
    country_id: str
    phone_number: str
    email: str
    company: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Holder":
        return cls(
            holder_id=str(data["holder_id"]),
            firstname=data.get("firstname") or "",
            lastname=data.get("lastname") or "",
            street=data.get("street") or "",
            zipcode=data.get("zipcode") or "",
            city=data.get("city") or "",
            country_id=str(data.get("country_id", "")),
            phone_number=data.get("phone_number") or "",
            email=data.get("email") or "",
            company=data.get("company") or "",
        )

    def to_contact(self, country_code: str) -> "Contact":
        """Map registrar field names to host field names."""
        return Contact(
            company_name=self.company,
            initials=self.firstname,
            surname=self.lastname,
            address=self.street,
            zip_code=self.zipcode,
            city=self.city,
            country=country_code,
            phone_number=self.phone_number,
            email_address=self.email,
        )


@dataclass
class Country:
    """Registrar country record: internal id and ISO code."""

    country_id: str
    code: str

    @classmethod
    def from_api(cls, data: dict) -> "Country":
        return cls(
            country_id=str(data["country_id"]),
            code=str(data.get("code") or "").strip(),
        )


@dataclass
class Extension:
    """Registrar extension (TLD) record; extension has no leading dot."""

    extension_id: str
    extension: str

    @classmethod
    def from_api(cls, data: dict) -> "Extension":
        return cls(
            extension_id=str(data["extension_id"]),
            extension=str(data["extension"]).lstrip("."),
        )


# ---------------------------------------------------------------------------
# Host application structures
# ---------------------------------------------------------------------------


@dataclass
class Contact:
    """
    WHOIS contact as the host application speaks it.

    Fields default to None so a contact that could not be retrieved is
    distinguishable from one with empty values.
    """

    company_name: Optional[str] = None
    initials: Optional[str] = None
    surname: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone_number: Optional[str] = None
    email_address: Optional[str] = None
    # Handles issued earlier by registrars, keyed by registrar handle key.
    registrar_handles: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True if no WHOIS field has been set."""
        return all(
            getattr(self, name) is None
            for name in (
                "company_name", "initials", "surname", "address", "zip_code",
                "city", "country", "phone_number", "email_address",
            )
        )


@dataclass
class WhoisData:
    """The owner, admin and tech contacts supplied for a domain."""

    owner: Contact = field(default_factory=Contact)
    admin: Contact = field(default_factory=Contact)
    tech: Contact = field(default_factory=Contact)

    def contact_for(self, role: ContactRole) -> Contact:
        return getattr(self, role.value)


@dataclass
class ContactListEntry:
    """A registrar holder mapped to host field names, with its handle."""

    handle: str
    contact: Contact


@dataclass
class DomainSummary:
    """A domain in the host's listing format."""

    domain: str
    expiration_date: Optional[str]
    registration_date: Optional[str]


@dataclass
class SyncEntry:
    """Synchronization status of a single requested domain."""

    status: SyncStatus
    expiration_date: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class OperationResult:
    """
    Result of a single adapter operation.

    Errors and warnings belong to this call only. `handles` carries
    contact handles resolved or created during the call, keyed by role,
    for the caller to persist.
    """

    value: Any
    outcome: Outcome
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    handles: dict[ContactRole, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.outcome in (Outcome.SUCCESS, Outcome.NOT_IMPLEMENTED)
