"""
REST Client Unit Tests
"""

import asyncio
import json
from typing import List, NoReturn, get_type_hints

import pytest
import requests
from pydantic import BaseModel

from rest_routes.client import RequestAuditEntry, RestClient, RequestsTransport
from rest_routes.config import ClientConfig
from rest_routes.exceptions import (
    DecodeFailure,
    HTTPStatusFailure,
    MalformedURL,
    RestErrorCategory,
    RouteError,
    TransportErrorCode,
    TransportFailure,
)
from rest_routes.models import Failure, RestRequest, Success
from rest_routes.routes import Route, RouteMap

from conftest import BASE_URL, FakeTransport, json_response, make_response


JSON_HEADERS = {"Content-Type": "application/json"}


class Pokemon(BaseModel):
    id: int
    name: str


class NewPokemon(BaseModel):
    name: str


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def client(transport: FakeTransport) -> RestClient:
    return RestClient(BASE_URL, JSON_HEADERS, transport=transport)


class TestGet:
    """Tests for GET dispatch and response classification"""

    def test_json_success(self, client: RestClient, transport: FakeTransport):
        """Should return the parsed JSON body and the raw response"""
        payload = {"id": 25, "name": "pikachu", "types": [{"type": {"name": "electric"}}]}
        transport.handler = lambda sent: json_response(payload)

        result = run(client.get("/pokemon/:name", params={"name": "pikachu"}))

        assert isinstance(result, Success)
        assert result.status == "success"
        assert result.ok is True
        assert result.data == payload
        assert result.response.status_code == 200

        sent = transport.calls[0]
        assert sent.method == "GET"
        assert sent.url == f"{BASE_URL}/pokemon/pikachu"
        assert sent.headers == JSON_HEADERS
        assert sent.body is None

    def test_text_success(self, client: RestClient, transport: FakeTransport):
        """Should return plain text for non-JSON content types"""
        transport.handler = lambda sent: make_response(200, "pong", "text/plain")

        result = run(client.get("/ping"))

        assert isinstance(result, Success)
        assert result.data == "pong"

    def test_missing_content_type_is_text(self, client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: make_response(200, '{"id": 1}')

        result = run(client.get("/ping"))

        assert result.data == '{"id": 1}'

    def test_query_is_applied(self, client: RestClient, transport: FakeTransport):
        run(client.get("/pokemon", query={"limit": "5", "offset": "0"}))
        assert transport.calls[0].url == f"{BASE_URL}/pokemon?limit=5&offset=0"

    def test_request_object(self, client: RestClient, transport: FakeTransport):
        """Should accept a RestRequest and layer keyword values over it"""
        request = RestRequest(params={"name": "mew"}, query={"lang": "en"})

        run(client.get("/pokemon/[name]", request, query={"lang": "fr"}))

        assert transport.calls[0].url == f"{BASE_URL}/pokemon/mew?lang=fr"

    def test_never_sends_body(self, client: RestClient, transport: FakeTransport):
        run(client.get("/pokemon", RestRequest(body={"ignored": True})))
        assert transport.calls[0].body is None

    def test_not_found(self, client: RestClient, transport: FakeTransport):
        """Should return Failure carrying the 404 response"""
        transport.handler = lambda sent: make_response(404, "Not Found", "text/plain")

        result = run(client.get("/pokemon/:name", params={"name": "nobody"}))

        assert isinstance(result, Failure)
        assert result.status == "error"
        assert result.ok is False
        assert result.response is not None
        assert result.response.status_code == 404
        assert isinstance(result.error, HTTPStatusFailure)
        assert str(result.error) == "Not Found"
        assert result.error.status_code == 404
        assert result.error.is_category(RestErrorCategory.HTTP)

    def test_redirect_status_is_failure(self, client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: make_response(304)

        result = run(client.get("/pokemon"))

        assert isinstance(result, Failure)
        assert result.response.status_code == 304

    def test_empty_reason_uses_status(self, client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: make_response(599, reason="")

        result = run(client.get("/pokemon"))

        assert str(result.error) == "HTTP 599"

    def test_dns_failure(self, client: RestClient, transport: FakeTransport):
        """Should return Failure without a response when no response arrives"""
        cause = requests.exceptions.ConnectionError(
            "Failed to resolve 'api.example.test'"
        )
        transport.handler = lambda sent: cause

        result = run(client.get("/pokemon"))

        assert isinstance(result, Failure)
        assert result.response is None
        assert isinstance(result.error, TransportFailure)
        assert result.error.transport_code == TransportErrorCode.DNS_LOOKUP_FAILED
        assert result.error.cause is cause

    def test_timeout(self, client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: requests.exceptions.ReadTimeout("slow")

        result = run(client.get("/pokemon"))

        assert result.response is None
        assert result.error.transport_code == TransportErrorCode.TIMEOUT

    def test_unexpected_transport_exception(
        self, client: RestClient, transport: FakeTransport
    ):
        transport.handler = lambda sent: RuntimeError("boom")

        result = run(client.get("/pokemon"))

        assert isinstance(result.error, TransportFailure)
        assert result.error.transport_code == TransportErrorCode.UNKNOWN
        assert isinstance(result.error.cause, RuntimeError)

    def test_malformed_base_url(self, transport: FakeTransport):
        """Should report MalformedURL without calling the transport"""
        client = RestClient("api.example.test", transport=transport)

        result = run(client.get("/pokemon"))

        assert isinstance(result, Failure)
        assert isinstance(result.error, MalformedURL)
        assert result.response is None
        assert transport.calls == []

    def test_invalid_json_body(self, client: RestClient, transport: FakeTransport):
        """Should return DecodeFailure with the response attached"""
        transport.handler = lambda sent: make_response(200, "{not json", "application/json")

        result = run(client.get("/pokemon"))

        assert isinstance(result, Failure)
        assert isinstance(result.error, DecodeFailure)
        assert not isinstance(result.error, TransportFailure)
        assert isinstance(result.error.cause, ValueError)
        assert result.response is not None
        assert result.response.status_code == 200

    def test_unwrap(self, client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: json_response({"id": 1})
        assert run(client.get("/pokemon")).unwrap() == {"id": 1}

        transport.handler = lambda sent: make_response(500)
        with pytest.raises(HTTPStatusFailure):
            run(client.get("/pokemon")).unwrap()

    def test_failure_unwrap_never_returns(self):
        assert get_type_hints(Failure.unwrap)["return"] is NoReturn


class TestBodyEncoding:
    """Tests for request body encoding"""

    @pytest.mark.parametrize(
        "verb, method",
        [("post", "POST"), ("patch", "PATCH"), ("put", "PUT"), ("delete", "DELETE")],
    )
    def test_json_body(self, client: RestClient, transport: FakeTransport, verb, method):
        """Should send the JSON serialization of the body"""
        body = {"name": "eevee", "level": 5, "moves": ["tackle"]}

        run(getattr(client, verb)("/pokemon/:name", params={"name": "eevee"}, body=body))

        sent = transport.calls[0]
        assert sent.method == method
        assert sent.url == f"{BASE_URL}/pokemon/eevee"
        assert sent.body == json.dumps(body)

    def test_non_json_body_passes_through(
        self, client: RestClient, transport: FakeTransport
    ):
        """Should pass the body through unmodified for non-JSON content types"""
        body = "name=eevee&level=5"

        run(client.post(
            "/pokemon",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=body,
        ))

        assert transport.calls[0].body is body

    def test_binary_body_passes_through(self, transport: FakeTransport):
        client = RestClient(BASE_URL, {"Content-Type": "application/octet-stream"},
                            transport=transport)
        body = b"\x89PNG\r\n"

        run(client.put("/sprites/:id", params={"id": "25"}, body=body))

        assert transport.calls[0].body == body

    def test_content_type_name_case(self, transport: FakeTransport):
        """Should detect JSON regardless of header name case"""
        client = RestClient(BASE_URL, {"content-type": "Application/JSON"},
                            transport=transport)

        run(client.post("/pokemon", body={"name": "eevee"}))

        assert transport.calls[0].body == '{"name": "eevee"}'

    def test_model_body(self, client: RestClient, transport: FakeTransport):
        run(client.post("/pokemon", body=NewPokemon(name="eevee")))
        assert json.loads(transport.calls[0].body) == {"name": "eevee"}

    def test_no_body(self, client: RestClient, transport: FakeTransport):
        run(client.delete("/pokemon/:name", params={"name": "eevee"}))
        assert transport.calls[0].body is None

    def test_unserializable_body(self, client: RestClient, transport: FakeTransport):
        result = run(client.post("/pokemon", body={"when": object()}))

        assert isinstance(result, Failure)
        assert isinstance(result.error, TransportFailure)
        assert result.response is None
        assert transport.calls == []


class TestHeaders:
    """Tests for header handling"""

    def test_per_call_override(self, client: RestClient, transport: FakeTransport):
        run(client.get("/pokemon", headers={"Content-Type": "text/plain", "X-Trace": "1"}))

        assert transport.calls[0].headers == {"Content-Type": "text/plain", "X-Trace": "1"}
        assert client.default_headers == JSON_HEADERS

    def test_default_headers_copy(self, client: RestClient):
        headers = client.default_headers
        headers["X-Injected"] = "1"
        assert "X-Injected" not in client.default_headers

    def test_constructor_copies_headers(self, transport: FakeTransport):
        defaults = {"Accept": "application/json"}
        client = RestClient(BASE_URL, defaults, transport=transport)
        defaults["Accept"] = "text/html"

        run(client.get("/pokemon"))

        assert transport.calls[0].headers == {"Accept": "application/json"}

    def test_concurrent_calls_are_isolated(self, client: RestClient):
        """Should never leak per-call headers between concurrent calls"""

        async def handler(sent):
            await asyncio.sleep(0)
            return json_response({"trace": sent.headers.get("X-Trace")})

        client._transport = FakeTransport(handler)

        async def issue_all():
            return await asyncio.gather(*[
                client.get("/pokemon", headers={"X-Trace": str(i)}) for i in range(10)
            ])

        results = run(issue_all())

        assert [r.data["trace"] for r in results] == [str(i) for i in range(10)]
        assert client.default_headers == JSON_HEADERS


class TestRouteMapIntegration:
    """Tests for clients configured with a RouteMap"""

    @pytest.fixture
    def routes(self) -> RouteMap:
        routes = RouteMap()
        routes.get("/pokemon/:name", response=Pokemon)
        routes.get("/pokemon", response=List[Pokemon], query=["limit"])
        routes.post("/pokemon", body=NewPokemon, response=Pokemon)
        routes.post("/v1/items:batchGet")
        return routes

    @pytest.fixture
    def typed_client(self, routes: RouteMap, transport: FakeTransport) -> RestClient:
        return RestClient(BASE_URL, JSON_HEADERS, routes=routes, transport=transport)

    def test_typed_payload(self, typed_client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: json_response({"id": 25, "name": "pikachu"})

        result = run(typed_client.get("/pokemon/:name", params={"name": "pikachu"}))

        assert isinstance(result, Success)
        assert result.data == Pokemon(id=25, name="pikachu")

    def test_typed_list(self, typed_client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: json_response([{"id": 1, "name": "bulbasaur"}])

        result = run(typed_client.get("/pokemon", query={"limit": "1"}))

        assert result.data == [Pokemon(id=1, name="bulbasaur")]

    def test_missing_param(self, typed_client: RestClient, transport: FakeTransport):
        """Should fail before sending when a path parameter is missing"""
        result = run(typed_client.get("/pokemon/:name"))

        assert isinstance(result, Failure)
        assert isinstance(result.error, RouteError)
        assert result.response is None
        assert transport.calls == []

    def test_unregistered_route(self, typed_client: RestClient, transport: FakeTransport):
        result = run(typed_client.put("/pokemon", body={}))

        assert isinstance(result.error, RouteError)
        assert transport.calls == []

    def test_invalid_body(self, typed_client: RestClient, transport: FakeTransport):
        result = run(typed_client.post("/pokemon", body={"level": 3}))

        assert isinstance(result.error, RouteError)
        assert result.error.field == "body"

    def test_payload_mismatch(self, typed_client: RestClient, transport: FakeTransport):
        """Should report DecodeFailure with the response when the shape is wrong"""
        transport.handler = lambda sent: json_response({"name": "missingno"})

        result = run(typed_client.get("/pokemon/:name", params={"name": "missingno"}))

        assert isinstance(result.error, DecodeFailure)
        assert result.response is not None

    def test_valid_post(self, typed_client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: json_response({"id": 1000, "name": "eevee"}, 201)

        result = run(typed_client.post("/pokemon", body={"name": "eevee"}))

        assert result.data == Pokemon(id=1000, name="eevee")
        assert result.response.status_code == 201

    def test_custom_method_path(self, typed_client: RestClient, transport: FakeTransport):
        """Should keep a literal colon inside a path segment"""
        transport.handler = lambda sent: json_response({"items": []})

        result = run(typed_client.post("/v1/items:batchGet", body={"ids": [1]}))

        assert isinstance(result, Success)
        assert transport.calls[0].url == f"{BASE_URL}/v1/items:batchGet"

    def test_unexpected_decode_error(
        self, typed_client: RestClient, transport: FakeTransport, monkeypatch
    ):
        """Should turn any error raised while decoding into DecodeFailure"""
        def explode(self, payload, status_code=None):
            raise RuntimeError("decoder crashed")

        monkeypatch.setattr(Route, "decode", explode)
        transport.handler = lambda sent: json_response({"id": 25, "name": "pikachu"})

        result = run(typed_client.get("/pokemon/:name", params={"name": "pikachu"}))

        assert isinstance(result, Failure)
        assert isinstance(result.error, DecodeFailure)
        assert isinstance(result.error.cause, RuntimeError)
        assert result.response is not None
        assert result.response.status_code == 200


class TestAuditLog:
    """Tests for audit logging"""

    def test_entry_is_redacted(self, transport: FakeTransport):
        client = RestClient(
            BASE_URL,
            {"Content-Type": "application/json", "Authorization": "Bearer secret"},
            transport=transport,
        )
        entries: List[RequestAuditEntry] = []
        client.set_audit_log_callback(entries.append)

        run(client.post("/login", body={"user": "ash", "password": "pikachu"}))

        entry = entries[0]
        assert entry.method == "POST"
        assert entry.url == f"{BASE_URL}/login"
        assert entry.headers["Authorization"] == "[REDACTED]"
        assert entry.body == {"user": "ash", "password": "[REDACTED]"}
        assert entry.status_code == 200
        assert entry.success is True
        assert entry.error is None

    def test_failure_entry(self, client: RestClient, transport: FakeTransport):
        transport.handler = lambda sent: make_response(404)
        entries: List[RequestAuditEntry] = []
        client.set_audit_log_callback(entries.append)

        run(client.get("/pokemon"))

        assert entries[0].success is False
        assert entries[0].status_code == 404
        assert "HTTP 404" in entries[0].error

    def test_failing_callback(self, client: RestClient):
        def callback(entry):
            raise RuntimeError("audit sink down")

        client.set_audit_log_callback(callback)

        assert isinstance(run(client.get("/pokemon")), Success)

    def test_disabled(self, transport: FakeTransport):
        client = RestClient(BASE_URL, transport=transport, enable_audit_log=False)
        entries: List[RequestAuditEntry] = []
        client.set_audit_log_callback(entries.append)

        run(client.get("/pokemon"))

        assert entries == []


class TestClientLifecycle:
    """Tests for construction and cleanup"""

    def test_from_config(self, transport: FakeTransport):
        config = ClientConfig(
            base_url="https://pokeapi.co/api/v2",
            default_headers={"Accept": "application/json"},
            enable_audit_log=False,
        )

        client = RestClient.from_config(config, transport=transport)
        run(client.get("/pokemon"))

        assert client.base_url == "https://pokeapi.co/api/v2"
        assert transport.calls[0].url == "https://pokeapi.co/api/v2/pokemon"
        assert transport.calls[0].headers == {"Accept": "application/json"}

    def test_default_transport(self):
        client = RestClient(BASE_URL)
        assert isinstance(client._transport, RequestsTransport)
        client.close()

    def test_async_context_closes_owned_transport(self, monkeypatch):
        closed = []
        monkeypatch.setattr(RequestsTransport, "close", lambda self: closed.append(self))

        async def use():
            async with RestClient(BASE_URL) as client:
                return client

        client = run(use())

        assert closed == [client._transport]

    def test_does_not_close_injected_transport(self, monkeypatch):
        closed = []
        monkeypatch.setattr(RequestsTransport, "close", lambda self: closed.append(self))

        RestClient(BASE_URL, transport=RequestsTransport()).close()

        assert closed == []
