"""
Neostrada registrar adapter.

This module implements the registrar plugin operations a host application
calls: availability checks, registration, transfers, deletion, listings,
status synchronization, WHOIS contact management and nameserver updates.
Each operation performs one or more REST calls through NeostradaClient and
maps the registrar's field names and date formats to the host's.

No exception leaves an operation. Every call returns an OperationResult
carrying the value, a tagged outcome, and the errors and warnings of that
call only.
"""

from typing import Iterable, Optional, Union

import httpx

from .audit_logger import AuditLogger
from .client import NeostradaClient
from .config import RegistrarConfig
from .domain_name import normalize_domain, split_domain
from .enums import ContactRole, LogLevel, Outcome, SyncStatus
from .exceptions import RegistrarError, ValidationError
from .models import (
    Contact,
    ContactListEntry,
    Country,
    DomainSummary,
    Extension,
    OperationResult,
    SyncEntry,
    WhoisData,
    format_api_date,
)


COMPONENT = "registrar"

# Returned by get_contact_handle when no holder matches.
NO_HANDLE = 0


def find_country_by_code(countries: Iterable[Country], code: Optional[str]) -> Optional[Country]:
    """Return the first country with the given ISO code (case-insensitive)."""
    if not code:
        return None
    code = code.strip().upper()
    for country in countries:
        if country.code and country.code.upper() == code:
            return country
    return None


def find_country_by_id(countries: Iterable[Country], country_id: str) -> Optional[Country]:
    """Return the first country with the given registrar id."""
    for country in countries:
        if country.country_id == str(country_id):
            return country
    return None


def find_extension(extensions: Iterable[Extension], suffix: str) -> Optional[Extension]:
    """Return the first extension matching a domain suffix (leading dot ignored)."""
    suffix = suffix.strip().lstrip(".").lower()
    for extension in extensions:
        if extension.extension.lower() == suffix:
            return extension
    return None


class NeostradaRegistrar:
    """
    Registrar plugin adapter for the Neostrada API.

    Holds the access token (through its client) and the registration
    period. Nothing else survives between calls: reference data is
    fetched fresh by each operation that needs it, and contact handles
    resolved during a call are handed back on the result.
    """

    # Nameserver updates are not wired to the registrar yet.
    SUPPORTS_NAMESERVER_UPDATE = False

    AVAILABLE_CODE = 210
    CANCELLED_STATUS = "cancelled"
    ORDER_YEARS = 1
    DEFAULT_PERIOD = 1

    def __init__(
        self,
        config: RegistrarConfig,
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            config: Registrar credentials and endpoint
            logger: Optional audit logger
            transport: Optional httpx transport passed to the client

        Raises:
            ConfigurationError: If the configuration is unusable
        """
        self.username = config.username
        self.period = self.DEFAULT_PERIOD
        self._handle_key = config.handle_key
        self._logger = logger
        self._client = NeostradaClient(config, logger=logger, transport=transport)

    def __enter__(self) -> "NeostradaRegistrar":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    @property
    def handle_key(self) -> str:
        """Key under which the host caches handles issued by this registrar."""
        return self._handle_key

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    def check_domain(self, domain: str) -> OperationResult:
        """
        Check whether a domain is available for registration.

        The value is True only when the registrar answers with code 210.
        Transport failures and other codes both yield False; the outcome
        tells them apart but no error is recorded.
        """
        result = OperationResult(value=False, outcome=Outcome.FAILED)
        try:
            code = self._client.check_availability(normalize_domain(domain))
        except RegistrarError as e:
            self._log_exception("check_domain", e)
            return result

        result.value = code == self.AVAILABLE_CODE
        result.outcome = Outcome.SUCCESS
        return result

    def register_domain(self, domain: str, whois: Optional[WhoisData]) -> OperationResult:
        """Register a domain for the owner contact in `whois`."""
        return self._order_domain(domain, whois, auth_code=None)

    def transfer_domain(
        self,
        domain: str,
        whois: Optional[WhoisData],
        auth_code: str = "",
    ) -> OperationResult:
        """Transfer a domain in, using the given authorization code."""
        return self._order_domain(domain, whois, auth_code=auth_code)

    def _order_domain(
        self,
        domain: str,
        whois: Optional[WhoisData],
        auth_code: Optional[str],
    ) -> OperationResult:
        result = OperationResult(value=False, outcome=Outcome.FAILED)
        ordered = False

        owner_handle = self._get_handle(whois, ContactRole.OWNER, result)
        if owner_handle:
            ordered = self._place_order(domain, owner_handle, result, auth_code)
        else:
            self._error(result, f"No owner contact given for domain {domain}")

        if ordered:
            result.value = True
            result.outcome = Outcome.SUCCESS
            self.period = self.DEFAULT_PERIOD
            self._log_info(
                "Domain ordered",
                {"domain": domain, "transfer": auth_code is not None},
            )
        elif auth_code is None:
            self._error(result, f"The domain {domain} could not be registered")
        else:
            self._error(result, f"The domain {domain} could not be transferred")

        return result

    def _place_order(
        self,
        domain: str,
        holder_id: str,
        result: OperationResult,
        auth_code: Optional[str] = None,
    ) -> bool:
        """
        Submit an order for a domain.

        An unknown extension fails the order without an error of its own;
        the caller reports the failed registration or transfer.
        """
        try:
            split = split_domain(domain)
        except ValidationError as e:
            self._error(result, e.message)
            return False

        try:
            extension = find_extension(self._client.get_extensions(), split.suffix)
        except RegistrarError as e:
            self._log_exception("get_extensions", e)
            extension = None

        if extension is None:
            return False

        fields = {
            "domain": split.label,
            "extension_id": extension.extension_id,
            "holder_id": holder_id,
            "year": self.ORDER_YEARS,
        }
        if auth_code:
            fields["authcode"] = auth_code

        try:
            self._client.place_order(fields)
        except RegistrarError as e:
            self._log_exception("place_order", e)
            return False
        return True

    def delete_domain(self, domain: str) -> OperationResult:
        """
        Cancel a domain.

        Succeeds only when the registrar reports the cancelled status.
        Failures are silent: the value is False and no error is recorded.
        """
        result = OperationResult(value=False, outcome=Outcome.FAILED)
        try:
            record = self._client.delete_domain(normalize_domain(domain))
        except RegistrarError as e:
            self._log_exception("delete_domain", e)
            return result

        if record.get("status") == self.CANCELLED_STATUS:
            result.value = True
            result.outcome = Outcome.SUCCESS
        return result

    def get_domain_information(self, domain: str) -> OperationResult:
        """
        Fetch status details of a single domain.

        The registrar API offers no per-domain detail call; always fails
        with Outcome.UNSUPPORTED and makes no request.
        """
        return self._unsupported("Fetching domain information is not supported")

    def get_domain_list(self) -> OperationResult:
        """
        List the account's domains managed through this integration.

        External domains are left out. An empty listing counts as a
        failure, like a failed fetch; the outcome (EMPTY or FETCH_FAILED)
        keeps the two apart.
        """
        result = OperationResult(value=False, outcome=Outcome.FAILED)
        try:
            listings = self._client.get_domain_listings()
        except RegistrarError as e:
            self._log_exception("get_domain_list", e)
            self._error(result, "Could not retrieve domains", Outcome.FETCH_FAILED)
            return result

        summaries = [
            DomainSummary(
                domain=listing.name,
                expiration_date=format_api_date(listing.paid_until),
                registration_date=format_api_date(listing.start_date),
            )
            for listing in listings
            if not listing.is_external
        ]

        if not summaries:
            self._error(result, "Could not retrieve domains", Outcome.EMPTY)
            return result

        result.value = summaries
        result.outcome = Outcome.SUCCESS
        return result

    def lock_domain(self, domain: str, lock: bool = True) -> OperationResult:
        """Registrar lock toggling; not offered by the API."""
        return self._unsupported("Locking and unlocking domains is not supported")

    def set_domain_auto_renew(self, domain: str, autorenew: bool = True) -> OperationResult:
        """Auto renew toggling; not offered by the API."""
        return self._unsupported("Changing the auto renew status is not supported")

    def get_token(self, domain: str) -> OperationResult:
        """Transfer (EPP) code retrieval; not offered by the API."""
        return self._unsupported("Fetching the transfer token is not supported")

    def update_domain_whois(self, domain: str, whois: WhoisData) -> OperationResult:
        """
        Replace the holders of a domain in place.

        Not offered by the API; hosts change holder data through
        update_contact on the holder handle instead.
        """
        return self._unsupported("Updating domain holders directly is not supported")

    def get_domain_whois(self, domain: str) -> OperationResult:
        """Holder handles per domain; not offered by the API."""
        return self._unsupported("Fetching domain handles from the registrar is not supported")

    def get_sync_data(self, domains: Iterable[str]) -> OperationResult:
        """
        Report expiration dates for the requested domains.

        The value maps every requested domain to exactly one SyncEntry.
        Domains missing from the registrar's (non-external) list are
        reported as not found.
        """
        pending = set(domains)
        entries: dict[str, SyncEntry] = {}
        result = OperationResult(value=entries, outcome=Outcome.SUCCESS)

        try:
            records = self._client.get_domain_sync_records()
        except RegistrarError as e:
            self._log_exception("get_sync_data", e)
            self._warning(result, "Could not retrieve domains")
            result.outcome = Outcome.FETCH_FAILED
            records = []

        for record in records:
            if record.is_external or record.name not in pending:
                continue

            if not record.paid_until:
                entries[record.name] = SyncEntry(
                    status=SyncStatus.ERROR,
                    error_message="Domain not invoiced yet",
                )
            else:
                expiration_date = format_api_date(record.paid_until)
                if expiration_date:
                    entries[record.name] = SyncEntry(
                        status=SyncStatus.SUCCESS,
                        expiration_date=expiration_date,
                    )
                else:
                    entries[record.name] = SyncEntry(
                        status=SyncStatus.ERROR,
                        error_message="Invalid expiration date",
                    )

            pending.discard(record.name)

        for name in pending:
            entries[name] = SyncEntry(
                status=SyncStatus.ERROR,
                error_message="Domain not found",
            )

        return result

    def update_nameservers(self, domain: str, nameservers: Optional[list[str]] = None) -> OperationResult:
        """
        Placeholder for nameserver updates.

        Always reports success without calling the registrar. The
        NOT_IMPLEMENTED outcome and the warning make the stub visible;
        check SUPPORTS_NAMESERVER_UPDATE before relying on it.
        """
        result = OperationResult(value=True, outcome=Outcome.NOT_IMPLEMENTED)
        self._warning(
            result,
            f"Nameserver update is not implemented; nameservers of {domain} were not changed",
        )
        return result

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def create_contact(self, whois: WhoisData, role: ContactRole = ContactRole.OWNER) -> OperationResult:
        """Create a holder from the contact of the given role; value is the new handle."""
        result = OperationResult(value=False, outcome=Outcome.FAILED)
        contact = whois.contact_for(role)

        country = self._resolve_country(contact, result)
        if country is None:
            return result

        fields = self._holder_fields(contact, country, include_company=bool(contact.company_name))
        fields["is_module"] = 1

        try:
            handle = self._client.add_holder(fields)
        except RegistrarError as e:
            self._log_exception("create_contact", e)
            handle = None

        if not handle:
            self._error(result, "Could not create contact")
            return result

        result.value = handle
        result.outcome = Outcome.SUCCESS
        self._log_info("Contact created", {"handle": handle, "role": role.value})
        return result

    def update_contact(
        self,
        handle: str,
        whois: WhoisData,
        role: ContactRole = ContactRole.OWNER,
    ) -> OperationResult:
        """Overwrite the holder behind `handle` with the contact of the given role."""
        result = OperationResult(value=False, outcome=Outcome.FAILED)
        contact = whois.contact_for(role)

        country = self._resolve_country(contact, result)
        if country is None:
            return result

        fields = self._holder_fields(contact, country, include_company=True)

        try:
            self._client.edit_holder(handle, fields)
        except RegistrarError as e:
            self._log_exception("update_contact", e)
            self._error(result, "Could not update contact")
            return result

        result.value = True
        result.outcome = Outcome.SUCCESS
        return result

    def get_contact(self, handle: Union[str, int]) -> OperationResult:
        """
        Fetch the contact behind a handle.

        When the holder cannot be found the value is a Contact with all
        fields unset; the outcome says whether it was missing (NOT_FOUND)
        or the lists could not be fetched (FETCH_FAILED).
        """
        result = OperationResult(value=Contact(), outcome=Outcome.FAILED)
        try:
            holders = self._client.get_holders()
            countries = self._client.get_countries()
        except RegistrarError as e:
            self._log_exception("get_contact", e)
            self._error(result, "Contact could not be retrieved", Outcome.FETCH_FAILED)
            return result

        for holder in holders:
            if holder.holder_id != str(handle):
                continue
            country = find_country_by_id(countries, holder.country_id)
            if country is None:
                continue
            contact = holder.to_contact(country.code)
            contact.registrar_handles[self._handle_key] = holder.holder_id
            result.value = contact
            result.outcome = Outcome.SUCCESS
            return result

        self._error(result, "Contact could not be retrieved", Outcome.NOT_FOUND)
        return result

    def get_contact_handle(
        self,
        whois: WhoisData,
        role: ContactRole = ContactRole.OWNER,
    ) -> OperationResult:
        """Find an existing holder by the role's e-mail address; value is the handle or 0."""
        result = OperationResult(value=NO_HANDLE, outcome=Outcome.NOT_FOUND)
        email = whois.contact_for(role).email_address
        if not email:
            return result

        listing = self.get_contact_list(email=email)
        result.warnings.extend(listing.warnings)
        if listing.outcome == Outcome.FETCH_FAILED:
            result.outcome = Outcome.FETCH_FAILED
        elif listing.value:
            result.value = listing.value[0].handle
            result.outcome = Outcome.SUCCESS
        return result

    def get_contact_list(
        self,
        email: Optional[str] = None,
        surname: Optional[str] = None,
    ) -> OperationResult:
        """
        List holders mapped to host contact fields.

        With an e-mail filter at most one entry is returned (the first
        match). Holders whose country does not resolve are dropped.
        """
        result = OperationResult(value=[], outcome=Outcome.EMPTY)
        try:
            holders = self._client.get_holders()
            countries = self._client.get_countries()
        except RegistrarError as e:
            self._log_exception("get_contact_list", e)
            self._warning(result, "Could not retrieve contacts")
            result.outcome = Outcome.FETCH_FAILED
            return result

        entries: list[ContactListEntry] = []
        for holder in holders:
            if email and holder.email != email:
                continue
            if surname and holder.lastname != surname:
                continue
            country = find_country_by_id(countries, holder.country_id)
            if country is None:
                continue
            entries.append(ContactListEntry(
                handle=holder.holder_id,
                contact=holder.to_contact(country.code),
            ))
            if email:
                break

        result.value = entries
        if entries:
            result.outcome = Outcome.SUCCESS
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_handle(
        self,
        whois: Optional[WhoisData],
        role: ContactRole,
        result: OperationResult,
    ) -> Optional[str]:
        """
        Resolve a holder handle for a role.

        Order: handle cached by the host, existing holder with the same
        e-mail address, newly created holder. Resolved and created handles
        are recorded on `result.handles` for the host to store.
        """
        if whois is None:
            return None
        contact = whois.contact_for(role)

        cached = contact.registrar_handles.get(self._handle_key)
        if cached:
            return str(cached)

        if not contact.email_address:
            return None

        found = self.get_contact_handle(whois, role)
        result.warnings.extend(found.warnings)
        handle = found.value

        if not handle:
            created = self.create_contact(whois, role)
            result.errors.extend(created.errors)
            handle = created.value

        if not handle:
            return None

        result.handles[role] = handle
        return handle

    def _resolve_country(self, contact: Contact, result: OperationResult) -> Optional[Country]:
        """
        Look up the registrar country for a contact's ISO code.

        Args:
            contact: Contact whose `country` is resolved
            result: Receives the error if no country matches

        Returns:
            The first matching Country, or None if the code is unknown or
            the country list could not be fetched
        """
        try:
            countries = self._client.get_countries()
        except RegistrarError as e:
            self._log_exception("get_countries", e)
            countries = []

        country = find_country_by_code(countries, contact.country)
        if country is None:
            self._error(result, f"Country {contact.country} could not be resolved")
        return country

    @staticmethod
    def _holder_fields(contact: Contact, country: Country, include_company: bool) -> dict:
        """
        Build the holder form fields from a host contact.

        Args:
            contact: Host contact
            country: Resolved registrar country
            include_company: Send `company` even when it is empty

        Returns:
            Form fields for holders/add or holders/edit
        """
        fields = {
            "firstname": contact.initials or "",
            "lastname": contact.surname or "",
            "phone_number": contact.phone_number or "",
            "street": contact.address or "",
            "zipcode": contact.zip_code or "",
            "city": contact.city or "",
            "country_id": country.country_id,
            "email": contact.email_address or "",
        }
        if include_company:
            fields["company"] = contact.company_name or ""
        return fields

    def _unsupported(self, message: str) -> OperationResult:
        """Return a failed UNSUPPORTED result carrying `message` as its only error."""
        result = OperationResult(value=False, outcome=Outcome.UNSUPPORTED)
        self._error(result, message)
        return result

    def _error(
        self,
        result: OperationResult,
        message: str,
        outcome: Optional[Outcome] = None,
    ) -> None:
        """
        Record an error on the result and in the audit log.

        Args:
            result: Result of the current operation
            message: Error message for the host
            outcome: Optional outcome to tag the result with
        """
        result.errors.append(message)
        if outcome is not None:
            result.outcome = outcome
        if self._logger:
            self._logger.log(LogLevel.ERROR, COMPONENT, message)

    def _warning(self, result: OperationResult, message: str) -> None:
        """Record a warning on the result and in the audit log."""
        result.warnings.append(message)
        if self._logger:
            self._logger.log(LogLevel.WARN, COMPONENT, message)

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, COMPONENT, message, data)

    def _log_exception(self, operation: str, error: RegistrarError) -> None:
        """Write a caught client error to the audit log; the result is left alone."""
        if self._logger:
            self._logger.log_error(
                COMPONENT,
                f"{operation} failed",
                error=error,
            )
