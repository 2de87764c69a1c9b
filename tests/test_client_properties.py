"""
Tests for the registrar HTTP client.

Covers token placement, status and body validation, and the failure
types the adapter relies on.
"""

from io import StringIO

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from neostrada_registrar.audit_logger import AuditLogger
from neostrada_registrar.client import NeostradaClient
from neostrada_registrar.config import RegistrarConfig
from neostrada_registrar.enums import ClientErrorCode, ConfigErrorCode, LogLevel
from neostrada_registrar.exceptions import ConfigurationError, NetworkError, ProtocolError

from registrar_fakes import TOKEN, FakeNeostrada


def make_client(handler, logger=None) -> NeostradaClient:
    config = RegistrarConfig(access_token=TOKEN, base_url="https://api.test.invalid/api")
    return NeostradaClient(config, logger=logger, transport=httpx.MockTransport(handler))


class TestClientConfiguration:
    """The client refuses unusable configurations."""

    def test_missing_token_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            NeostradaClient(RegistrarConfig(access_token=""))
        assert excinfo.value.code == ConfigErrorCode.MISSING_TOKEN.value

    def test_plain_http_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            NeostradaClient(RegistrarConfig(access_token=TOKEN, base_url="http://api.test.invalid"))
        assert excinfo.value.code == ConfigErrorCode.INSECURE_ENDPOINT.value


class TestTokenPlacement:
    """The token travels as query parameter on reads and form field on writes."""

    def test_get_uses_query_parameter(self) -> None:
        fake = FakeNeostrada()
        with make_client(fake.handler) as client:
            client.get_countries()

        assert fake.requests[0].token == TOKEN
        assert fake.requests[0].form == {}

    def test_post_uses_form_field(self) -> None:
        fake = FakeNeostrada()
        with make_client(fake.handler) as client:
            client.place_order({"domain": "example", "extension_id": "10"})

        assert fake.requests[0].token == TOKEN
        assert fake.orders == [{"domain": "example", "extension_id": "10"}]


class TestFailureMapping:
    """
    Property: any status other than 200 raises NetworkError.
    """

    @given(status=st.integers(min_value=201, max_value=599))
    @settings(max_examples=50)
    def test_non_200_raises_network_error(self, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"results": []})

        with make_client(handler) as client:
            with pytest.raises(NetworkError) as excinfo:
                client.get_holders()

        assert excinfo.value.code == ClientErrorCode.HTTP_STATUS.value
        assert excinfo.value.details["status_code"] == status
        assert excinfo.value.status_code == status
        assert excinfo.value.retryable == (status == 429 or status >= 500)
        assert excinfo.value.to_dict()["retryable"] == excinfo.value.retryable

    def test_timeout_raises_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with make_client(handler) as client:
            with pytest.raises(NetworkError) as excinfo:
                client.get_extensions()

        assert excinfo.value.code == ClientErrorCode.TIMEOUT.value
        assert excinfo.value.retryable
        assert excinfo.value.status_code is None

    def test_invalid_json_raises_protocol_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>maintenance</html>")

        with make_client(handler) as client:
            with pytest.raises(ProtocolError) as excinfo:
                client.get_domain_listings()

        assert not excinfo.value.retryable

    def test_missing_results_raises_protocol_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": []})

        with make_client(handler) as client:
            with pytest.raises(ProtocolError):
                client.get_countries()

    def test_malformed_record_raises_protocol_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"results": [{"code": "NL"}]})

        with make_client(handler) as client:
            with pytest.raises(ProtocolError):
                client.get_countries()

    def test_non_numeric_availability_code(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"results": {"code": "n/a"}})

        with make_client(handler) as client:
            assert client.check_availability("example.nl") is None


class TestRequestLogging:
    """Requests are logged without leaking the token."""

    def test_token_masked_in_request_log(self) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream, min_level=LogLevel.DEBUG)
        fake = FakeNeostrada()

        with make_client(fake.handler, logger=logger) as client:
            client.check_availability("example.nl")

        assert TOKEN not in stream.getvalue()
        entry = logger.entries[0]
        assert entry.message == "POST whois"
        assert entry.data["form"]["token"] == AuditLogger.MASK_VALUE
        assert entry.data["form"]["domain"] == "example.nl"

    def test_failures_logged_with_status(self) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="text", output_stream=stream)
        fake = FakeNeostrada()
        fake.status_overrides["holders"] = 502

        with make_client(fake.handler, logger=logger) as client:
            with pytest.raises(NetworkError):
                client.get_holders()

        errors = [e for e in logger.entries if e.level == LogLevel.ERROR]
        assert errors[0].data["response_status_code"] == 502
        assert errors[0].data["request_url"] == "holders"
