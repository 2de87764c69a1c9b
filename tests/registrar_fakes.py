"""
In-memory stand-in for the Neostrada REST API.

FakeNeostrada serves the endpoints the adapter uses through an
httpx.MockTransport, so tests exercise the real client and adapter code
without network access.
"""

import json
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs

import httpx

from neostrada_registrar.config import RegistrarConfig
from neostrada_registrar.models import Contact, WhoisData
from neostrada_registrar.registrar import NeostradaRegistrar


TOKEN = "test-token-1234"
API_PREFIX = "/api/"

DEFAULT_COUNTRIES = [
    {"country_id": 1, "code": "NL"},
    {"country_id": 2, "code": "BE"},
    {"country_id": 3, "code": "DE"},
]

DEFAULT_EXTENSIONS = [
    {"extension_id": 10, "extension": "nl"},
    {"extension_id": 11, "extension": "com"},
    {"extension_id": 12, "extension": "co.uk"},
]


@dataclass
class RecordedRequest:
    """A request seen by the fake, with token and form fields decoded."""

    method: str
    path: str
    token: Optional[str]
    form: dict = field(default_factory=dict)


class FakeNeostrada:
    """Fake registrar API with configurable data and failures."""

    def __init__(self) -> None:
        self.domains: list[dict] = []
        self.holders: list[dict] = []
        self.countries: list[dict] = [dict(c) for c in DEFAULT_COUNTRIES]
        self.extensions: list[dict] = [dict(e) for e in DEFAULT_EXTENSIONS]
        self.availability: dict[str, int] = {}
        self.delete_status = "cancelled"
        self.orders: list[dict] = []
        self.requests: list[RecordedRequest] = []
        # path -> HTTP status to answer with instead of the normal response
        self.status_overrides: dict[str, int] = {}
        # paths that raise a transport error
        self.broken_paths: set[str] = set()
        self._next_holder_id = 1000

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def registrar(self) -> NeostradaRegistrar:
        config = RegistrarConfig(access_token=TOKEN, base_url="https://api.test.invalid/api")
        return NeostradaRegistrar(config, transport=self.transport)

    def add_holder(self, **fields) -> str:
        holder_id = str(self._next_holder_id)
        self._next_holder_id += 1
        self.holders.append({"holder_id": holder_id, **fields})
        return holder_id

    def paths_requested(self, method: Optional[str] = None) -> list[str]:
        return [r.path for r in self.requests if method is None or r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]

        form = {}
        token = request.url.params.get("token")
        if request.method in ("POST", "PATCH"):
            parsed = parse_qs(request.content.decode("utf-8"), keep_blank_values=True)
            form = {key: values[0] for key, values in parsed.items()}
            token = form.pop("token", None)

        self.requests.append(RecordedRequest(request.method, path, token, form))

        if path in self.broken_paths:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.status_overrides:
            return httpx.Response(self.status_overrides[path], json={"results": []})
        if token != TOKEN:
            return httpx.Response(401, json={"error": "unauthorized"})

        return self._route(request.method, path, form)

    def _route(self, method: str, path: str, form: dict) -> httpx.Response:
        if method == "POST" and path == "whois":
            code = self.availability.get(form.get("domain"), 211)
            return self._ok({"code": code})

        if method == "GET" and path == "domains":
            return self._ok(self.domains)

        if method == "DELETE" and path.startswith("domain/delete/"):
            return self._ok({"status": self.delete_status})

        if method == "GET" and path == "holders":
            return self._ok(self.holders)

        if method == "POST" and path == "holders/add":
            fields = {k: v for k, v in form.items() if k != "is_module"}
            holder_id = self.add_holder(**fields)
            return self._ok({"holder_id": holder_id})

        if method == "PATCH" and path.startswith("holders/edit/"):
            handle = path.rsplit("/", 1)[-1]
            for holder in self.holders:
                if str(holder["holder_id"]) == handle:
                    holder.update(form)
                    return self._ok({"holder_id": handle})
            return httpx.Response(404, json={"error": "holder not found"})

        if method == "GET" and path == "countries":
            return self._ok(self.countries)

        if method == "GET" and path == "extensions":
            return self._ok(self.extensions)

        if method == "POST" and path == "orders/add":
            self.orders.append(form)
            return self._ok({"order_id": len(self.orders)})

        return httpx.Response(404, content=json.dumps({"error": "no route"}))

    @staticmethod
    def _ok(results) -> httpx.Response:
        return httpx.Response(200, json={"results": results})


def make_contact(
    email: str = "jan@example.nl",
    country: str = "NL",
    company: Optional[str] = "Voorbeeld BV",
    handles: Optional[dict] = None,
) -> Contact:
    return Contact(
        company_name=company,
        initials="Jan",
        surname="Jansen",
        address="Dorpsstraat 1",
        zip_code="1234 AB",
        city="Amsterdam",
        country=country,
        phone_number="+31.201234567",
        email_address=email,
        registrar_handles=dict(handles or {}),
    )


def make_whois(owner: Optional[Contact] = None) -> WhoisData:
    return WhoisData(owner=owner if owner is not None else make_contact())
