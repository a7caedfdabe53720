"""
UrlscanClient Tests
-------------------
Request construction, the swallow-and-log failure path and the two
synchronous precondition errors.
"""

import httpx
import pytest

from adapters import urlscan_client as client_module
from adapters.urlscan_client import ApiResult, UrlscanClient
from core.domain.models import SearchOptions
from core.errors import ConfigurationError, ValidationError

from conftest import API_KEY


@pytest.fixture
def client(transport):
    http = httpx.AsyncClient(transport=httpx.MockTransport(transport.handler))
    return UrlscanClient(API_KEY, http_client=http)


class TestConstruction:

    @pytest.mark.parametrize("api_key", ["", None])
    def test_rejects_missing_key(self, api_key):
        with pytest.raises(ConfigurationError, match=r"^API key is required\.$"):
            UrlscanClient(api_key)

    def test_accepts_any_non_empty_key(self):
        client = UrlscanClient("k")

        assert client.api_key == "k"
        assert client.base_url == "https://urlscan.io/api/v1/"

    def test_construction_does_no_io(self, monkeypatch):
        def _boom(*args, **kwargs):
            raise AssertionError("client built at construction time")

        monkeypatch.setattr(client_module, "build_async_client", _boom)
        UrlscanClient(API_KEY)


class TestSubmitScan:

    @pytest.mark.asyncio
    async def test_posts_to_scan_endpoint(self, client, transport):
        transport.payload = {"success": True}

        result = await client.submit_scan("https://example.com")

        assert result == {"success": True}
        request = transport.last
        assert request.method == "POST"
        assert str(request.url) == "https://urlscan.io/api/v1/scan"
        assert request.headers["API-Key"] == API_KEY
        assert request.headers["Content-Type"] == "application/json"
        assert transport.last_json() == {"url": "https://example.com"}

    @pytest.mark.asyncio
    async def test_merges_options_and_drops_none(self, client, transport):
        transport.payload = {"uuid": "abc"}

        await client.submit_scan(
            "https://example.com",
            {
                "visibility": "unlisted",
                "tags": ["phishing", "demo"],
                "customagent": None,
                "overrideSafety": "true",
                "country": "de",
            },
        )

        assert transport.last_json() == {
            "url": "https://example.com",
            "visibility": "unlisted",
            "tags": ["phishing", "demo"],
            "overrideSafety": "true",
            "country": "de",
        }

    @pytest.mark.asyncio
    async def test_http_error_is_logged_not_raised(self, client, transport, capsys):
        transport.status_code = 500

        result = await client.submit_scan("https://example.com")

        assert result is None
        assert capsys.readouterr().err.strip() == "Error: HTTP error! status: 500"

    @pytest.mark.asyncio
    async def test_options_are_sent_without_local_validation(self, client, transport, capsys):
        transport.payload = {"uuid": "abc"}

        result = await client.submit_scan(
            "https://example.com",
            {"visibility": "secret", "country": "usa"},
        )

        assert result == {"uuid": "abc"}
        assert transport.last_json() == {
            "url": "https://example.com",
            "visibility": "secret",
            "country": "usa",
        }
        assert capsys.readouterr().err == ""

    @pytest.mark.asyncio
    async def test_rejected_option_is_a_single_error_line(self, client, transport, capsys):
        transport.status_code = 400

        result = await client.submit_scan("https://example.com", {"country": "usa"})

        assert result is None
        assert len(transport.requests) == 1
        assert capsys.readouterr().err.splitlines() == ["Error: HTTP error! status: 400"]

    @pytest.mark.asyncio
    async def test_unserializable_option_is_logged(self, client, transport, capsys):
        result = await client.submit_scan("https://example.com", {"tags": object()})

        assert result is None
        assert transport.requests == []
        err = capsys.readouterr().err.splitlines()
        assert len(err) == 1
        assert err[0].startswith("Error: ")

    @pytest.mark.asyncio
    async def test_network_error_is_logged(self, client, transport, capsys):
        transport.error = httpx.ConnectError("connection refused")

        result = await client.submit_scan("https://example.com")

        assert result is None
        assert capsys.readouterr().err.strip() == "Error: connection refused"

    @pytest.mark.asyncio
    async def test_malformed_json_is_logged(self, client, transport, capsys):
        transport.content = b"<html>not json</html>"

        result = await client.submit_scan("https://example.com")

        assert result is None
        assert capsys.readouterr().err.startswith("Error: ")


class TestFetchScanResult:

    @pytest.mark.asyncio
    async def test_gets_result_by_id(self, client, transport):
        transport.payload = {"data": "result"}

        result = await client.fetch_scan_result("scan-id")

        assert result == {"data": "result"}
        request = transport.last
        assert request.method == "GET"
        assert str(request.url) == "https://urlscan.io/api/v1/result/scan-id"
        assert request.headers["API-Key"] == API_KEY

    @pytest.mark.asyncio
    async def test_not_found_is_logged(self, client, transport, capsys):
        transport.status_code = 404

        result = await client.fetch_scan_result("scan-id")

        assert result is None
        assert capsys.readouterr().err.strip() == "Error: HTTP error! status: 404"

    @pytest.mark.asyncio
    async def test_invalid_url_is_logged_not_raised(self, client, transport, capsys):
        result = await client.fetch_scan_result("abc\x00def")

        assert result is None
        assert transport.requests == []
        assert capsys.readouterr().err.startswith("Error: Invalid non-printable")


class TestSearch:

    @pytest.mark.asyncio
    async def test_empty_term_raises_before_any_request(self, client, transport):
        with pytest.raises(ValidationError, match=r"^Search term is required\.$"):
            await client.search("")

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_builds_query_string(self, client, transport):
        transport.payload = {"results": []}

        result = await client.search("example")

        assert result == {"results": []}
        request = transport.last
        assert request.method == "GET"
        assert str(request.url).startswith("https://urlscan.io/api/v1/search?q=example")
        assert request.headers["API-Key"] == API_KEY

    @pytest.mark.asyncio
    async def test_appends_defined_options_in_order(self, client, transport):
        transport.payload = {"results": []}

        await client.search("domain:urlscan.io", {"size": 10, "search_after": None, "extra": "x"})

        params = list(transport.last.url.params.multi_items())
        assert params == [("q", "domain:urlscan.io"), ("size", "10"), ("extra", "x")]

    @pytest.mark.asyncio
    async def test_accepts_search_options_model(self, client, transport):
        transport.payload = {"results": []}

        await client.search("example", SearchOptions(size=5, search_after="123,abc"))

        params = list(transport.last.url.params.multi_items())
        assert params == [("q", "example"), ("size", "5"), ("search_after", "123,abc")]

    @pytest.mark.asyncio
    async def test_forbidden_is_logged(self, client, transport, capsys):
        transport.status_code = 403

        result = await client.search("example")

        assert result is None
        assert capsys.readouterr().err.strip() == "Error: HTTP error! status: 403"


class TestTransportLifecycle:

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, transport):
        http = httpx.AsyncClient(transport=httpx.MockTransport(transport.handler))
        transport.payload = {"ok": 1}

        async with UrlscanClient(API_KEY, http_client=http) as client:
            await client.fetch_scan_result("a")

        assert not http.is_closed
        await http.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_reused_then_closed(self, monkeypatch, transport, mock_http_factory):
        created = []

        def _factory(*args, **kwargs):
            http = mock_http_factory()
            created.append(http)
            return http

        monkeypatch.setattr(client_module, "build_async_client", _factory)
        transport.payload = {"ok": 1}

        async with UrlscanClient(API_KEY) as client:
            await client.fetch_scan_result("a")
            await client.fetch_scan_result("b")

        assert len(created) == 1
        assert created[0].is_closed
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_ephemeral_client_per_call(self, monkeypatch, transport, mock_http_factory):
        created = []

        def _factory(*args, **kwargs):
            http = mock_http_factory()
            created.append(http)
            return http

        monkeypatch.setattr(client_module, "build_async_client", _factory)
        transport.payload = {"ok": 1}
        client = UrlscanClient(API_KEY)

        await client.fetch_scan_result("a")
        await client.search("b")

        assert len(created) == 2
        assert all(http.is_closed for http in created)


class TestErrorHandler:

    def test_uses_exception_message(self, capsys):
        client = UrlscanClient(API_KEY)

        result = client._fail(RuntimeError("boom"))

        assert result == ApiResult(error="boom")
        assert not result.ok
        assert capsys.readouterr().err.strip() == "Error: boom"

    def test_falls_back_to_raw_value(self, capsys):
        client = UrlscanClient(API_KEY)

        client._fail("plain string")

        assert capsys.readouterr().err.strip() == "Error: plain string"

    def test_empty_message_uses_repr(self, capsys):
        client = UrlscanClient(API_KEY)

        client._fail(httpx.ReadTimeout(""))

        assert capsys.readouterr().err.strip() == "Error: ReadTimeout('')"
