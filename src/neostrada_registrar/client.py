"""
HTTP client for the Neostrada REST API.

This module wraps the registrar endpoints the adapter consumes. Every
request carries the access token, as a query parameter for GET/DELETE and
as a form field for POST/PATCH. Every JSON body wraps its payload in a
`results` member.

Failures are raised as NetworkError (transport errors, non-200 statuses)
or ProtocolError (unexpected body shape); the adapter converts them into
operation results.
"""

from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote, urlparse

import httpx

from .audit_logger import AuditLogger
from .config import RegistrarConfig
from .enums import ClientErrorCode, ConfigErrorCode, LogLevel
from .exceptions import ConfigurationError, NetworkError, ProtocolError
from .models import Country, DomainListing, DomainSyncRecord, Extension, Holder


T = TypeVar("T")

COMPONENT = "client"


class NeostradaClient:
    """
    Synchronous client for the registrar REST API.

    One instance holds one httpx.Client bound to the configured base URL.
    Use it as a context manager or call close() when done.
    """

    TOKEN_PARAM = "token"

    def __init__(
        self,
        config: RegistrarConfig,
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Registrar credentials and endpoint
            logger: Optional audit logger for request logging
            transport: Optional httpx transport (used by tests to fake the API)

        Raises:
            ConfigurationError: If the token is missing or the endpoint is not HTTPS
        """
        if not config.access_token:
            raise ConfigurationError(
                code=ConfigErrorCode.MISSING_TOKEN.value,
                message="No access token configured",
            )
        self._validate_endpoint_url(config.base_url)

        self._token = config.access_token
        self._logger = logger
        self._client = httpx.Client(
            base_url=config.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(config.timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "NeostradaClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @staticmethod
    def _validate_endpoint_url(endpoint: str) -> None:
        parsed = urlparse(endpoint)
        if parsed.scheme.lower() != "https":
            raise ConfigurationError(
                code=ConfigErrorCode.INSECURE_ENDPOINT.value,
                message=f"Registrar endpoint must use HTTPS: {endpoint}",
                details={"endpoint": endpoint, "scheme": parsed.scheme},
            )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        data: Optional[dict] = None,
    ) -> httpx.Response:
        """
        Send one request and require HTTP 200.

        Raises:
            NetworkError: On transport failure or any status other than 200
        """
        params = None
        if method in ("GET", "DELETE"):
            params = {self.TOKEN_PARAM: self._token}
        else:
            data = dict(data or {})
            data[self.TOKEN_PARAM] = self._token

        if self._logger:
            self._logger.log(LogLevel.DEBUG, COMPONENT, f"{method} {path}", {"form": data or {}})

        try:
            response = self._client.request(method, path, params=params, data=data)
        except httpx.TimeoutException as e:
            self._log_failure(method, path, e)
            raise NetworkError(
                code=ClientErrorCode.TIMEOUT.value,
                message=f"Request to {path} timed out",
                details={"method": method, "path": path},
            )
        except httpx.HTTPError as e:
            self._log_failure(method, path, e)
            raise NetworkError(
                code=ClientErrorCode.NETWORK_ERROR.value,
                message=f"Request to {path} failed: {e}",
                details={"method": method, "path": path},
            )

        if response.status_code != 200:
            self._log_failure(method, path, None, response.status_code)
            raise NetworkError(
                code=ClientErrorCode.HTTP_STATUS.value,
                message=f"Unexpected HTTP status {response.status_code} from {path}",
                details={"method": method, "path": path, "status_code": response.status_code},
            )

        return response

    def _log_failure(
        self,
        method: str,
        path: str,
        error: Optional[Exception],
        status_code: Optional[int] = None,
    ) -> None:
        if self._logger:
            self._logger.log_error(
                COMPONENT,
                f"{method} {path} failed",
                error=error,
                request_url=path,
                response_status_code=status_code,
            )

    def _results(self, response: httpx.Response, path: str) -> Any:
        """
        Extract the `results` member of a JSON body.

        Raises:
            ProtocolError: If the body is not JSON or has no `results`
        """
        try:
            body = response.json()
        except ValueError as e:
            raise ProtocolError(
                code=ClientErrorCode.PARSE_ERROR.value,
                message=f"Response from {path} is not valid JSON: {e}",
            )
        if not isinstance(body, dict) or "results" not in body:
            raise ProtocolError(
                code=ClientErrorCode.PARSE_ERROR.value,
                message=f"Response from {path} has no results",
                details={"body": body},
            )
        return body["results"]

    def _parse_list(
        self,
        results: Any,
        factory: Callable[[dict], T],
        path: str,
    ) -> list[T]:
        if not isinstance(results, list):
            raise ProtocolError(
                code=ClientErrorCode.PARSE_ERROR.value,
                message=f"Response from {path} is not a list",
            )
        try:
            return [factory(item) for item in results]
        except (KeyError, TypeError, AttributeError) as e:
            raise ProtocolError(
                code=ClientErrorCode.PARSE_ERROR.value,
                message=f"Malformed record in response from {path}: {e}",
            )

    def _get_record(self, results: Any, path: str) -> dict:
        if not isinstance(results, dict):
            raise ProtocolError(
                code=ClientErrorCode.PARSE_ERROR.value,
                message=f"Response from {path} is not an object",
            )
        return results

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def check_availability(self, domain: str) -> Optional[int]:
        """Return the registrar's availability code for a domain."""
        path = "whois"
        response = self._request("POST", path, data={"domain": domain})
        code = self._get_record(self._results(response, path), path).get("code")
        try:
            return int(code)
        except (TypeError, ValueError):
            return None

    def get_domain_listings(self) -> list[DomainListing]:
        """Return the account's domains in the listing schema."""
        path = "domains"
        response = self._request("GET", path)
        return self._parse_list(self._results(response, path), DomainListing.from_api, path)

    def get_domain_sync_records(self) -> list[DomainSyncRecord]:
        """Return the account's domains in the synchronization schema."""
        path = "domains"
        response = self._request("GET", path)
        return self._parse_list(self._results(response, path), DomainSyncRecord.from_api, path)

    def delete_domain(self, domain: str) -> dict:
        """Cancel a domain and return the registrar's response record."""
        path = f"domain/delete/{quote(domain, safe='')}"
        response = self._request("DELETE", path)
        return self._get_record(self._results(response, path), path)

    def get_holders(self) -> list[Holder]:
        path = "holders"
        response = self._request("GET", path)
        return self._parse_list(self._results(response, path), Holder.from_api, path)

    def add_holder(self, fields: dict) -> Optional[str]:
        """Create a holder and return the registrar-issued handle."""
        path = "holders/add"
        response = self._request("POST", path, data=fields)
        holder_id = self._get_record(self._results(response, path), path).get("holder_id")
        return str(holder_id) if holder_id else None

    def edit_holder(self, handle: str, fields: dict) -> None:
        path = f"holders/edit/{quote(str(handle), safe='')}"
        self._request("PATCH", path, data=fields)

    def get_countries(self) -> list[Country]:
        path = "countries"
        response = self._request("GET", path)
        return self._parse_list(self._results(response, path), Country.from_api, path)

    def get_extensions(self) -> list[Extension]:
        path = "extensions"
        response = self._request("GET", path)
        return self._parse_list(self._results(response, path), Extension.from_api, path)

    def place_order(self, fields: dict) -> None:
        """Submit an order; success is solely HTTP 200."""
        self._request("POST", "orders/add", data=fields)
