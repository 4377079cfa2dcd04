"""
Tests for the Opsgenie HTTP client.

Tests cover:
- Request construction (URL encoding, auth header, query serialization)
- Body handling for read and mutating calls
- Error mapping for HTTP failures and network failures
"""

import httpx
import pytest

from opsgenie_mcp.opsgenie import OpsgenieAPIError, OpsgenieClient
from opsgenie_mcp.opsgenie.client import alert_path, build_query


class TestBuildQuery:
    """Test query parameter serialization."""

    def test_drops_none_values(self):
        assert build_query({"query": "status:open", "sort": None}) == {"query": "status:open"}

    def test_joins_lists_with_commas(self):
        assert build_query({"tags": ["db", "prod"]}) == {"tags": "db,prod"}

    def test_lowercases_booleans(self):
        assert build_query({"flag": True, "other": False}) == {"flag": "true", "other": "false"}

    def test_stringifies_numbers(self):
        assert build_query({"limit": 20, "offset": 0}) == {"limit": "20", "offset": "0"}

    def test_empty(self):
        assert build_query(None) == {}


class TestAlertPath:
    """Test alert-scoped path construction."""

    def test_plain_identifier(self):
        assert alert_path("abc", "notes") == "/v2/alerts/abc/notes"

    def test_identifier_is_fully_encoded(self):
        assert alert_path("db down/eu", "close") == "/v2/alerts/db%20down%2Feu/close"

    def test_without_action(self):
        assert alert_path("abc") == "/v2/alerts/abc"


class TestRequests:
    """Test the requests the client sends."""

    @pytest.mark.asyncio
    async def test_sends_genie_key_header(self, fake_opsgenie):
        fake_opsgenie.respond("GET", "/v2/alerts", json_body={"data": []})
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        await client.list_alerts("secret-key")

        request = fake_opsgenie.last_request
        assert request.headers["Authorization"] == "GenieKey secret-key"
        assert request.url.host == "api.opsgenie.com"

    @pytest.mark.asyncio
    async def test_list_alerts_query_and_no_body(self, fake_opsgenie):
        fake_opsgenie.respond("GET", "/v2/alerts", json_body={"data": []})
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        await client.list_alerts("k", {"query": "status:open", "limit": 10, "sort": None})

        request = fake_opsgenie.last_request
        assert request.method == "GET"
        assert request.url.params["query"] == "status:open"
        assert request.url.params["limit"] == "10"
        assert "sort" not in request.url.params
        assert request.content == b""

    @pytest.mark.asyncio
    async def test_identifier_encoded_and_type_sent_as_query(self, fake_opsgenie, accepted_body):
        fake_opsgenie.respond("POST", "/v2/alerts/db down/eu/acknowledge", 202, accepted_body)
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        await client.acknowledge_alert("k", "db down/eu", {"user": "ops"}, identifier_type="name")

        request = fake_opsgenie.last_request
        assert request.url.raw_path.startswith(b"/v2/alerts/db%20down%2Feu/acknowledge")
        assert request.url.params["identifierType"] == "name"
        assert fake_opsgenie.last_json() == {"user": "ops"}

    @pytest.mark.asyncio
    async def test_mutating_body_drops_none(self, fake_opsgenie, accepted_body):
        fake_opsgenie.respond("POST", "/v2/alerts", 202, accepted_body)
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        result = await client.create_alert("k", {"message": "Disk full", "alias": None, "tags": ["db"]})

        assert fake_opsgenie.last_json() == {"message": "Disk full", "tags": ["db"]}
        assert result["requestId"] == "req-123"

    @pytest.mark.asyncio
    async def test_empty_payload_sends_no_body(self, fake_opsgenie, accepted_body):
        fake_opsgenie.respond("POST", "/v2/alerts/abc/close", 202, accepted_body)
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        await client.close_alert("k", "abc", {"user": None, "note": None})

        assert fake_opsgenie.last_request.content == b""

    @pytest.mark.asyncio
    async def test_list_notes_merges_paging_and_identifier_type(self, fake_opsgenie):
        fake_opsgenie.respond("GET", "/v2/alerts/abc/notes", json_body={"data": []})
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        await client.list_alert_notes("k", "abc", {"limit": 5, "direction": "next"})

        params = fake_opsgenie.last_request.url.params
        assert params["limit"] == "5"
        assert params["direction"] == "next"
        assert params["identifierType"] == "id"

    @pytest.mark.asyncio
    async def test_custom_base_url(self, fake_opsgenie):
        fake_opsgenie.respond("GET", "/v2/alerts/abc/logs", json_body={"data": []})
        client = OpsgenieClient(base_url="https://api.eu.opsgenie.com/", transport=fake_opsgenie.transport)

        await client.list_alert_logs("k", "abc")

        assert fake_opsgenie.last_request.url.host == "api.eu.opsgenie.com"

    @pytest.mark.asyncio
    async def test_empty_success_body_returns_empty_dict(self, fake_opsgenie):
        fake_opsgenie.respond("POST", "/v2/alerts/abc/details", 202)
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        result = await client.add_details_to_alert("k", "abc", {"details": {"region": "eu"}})

        assert result == {}
        assert fake_opsgenie.last_json() == {"details": {"region": "eu"}}


class TestErrors:
    """Test error mapping."""

    @pytest.mark.asyncio
    async def test_json_error_message(self, fake_opsgenie):
        fake_opsgenie.respond("POST", "/v2/alerts/abc/notes", 422, {"message": "Note is required"})
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        with pytest.raises(OpsgenieAPIError) as exc_info:
            await client.add_note_to_alert("k", "abc", {"note": ""})

        assert exc_info.value.status == 422
        assert exc_info.value.message == "Note is required"
        assert exc_info.value.response == {"message": "Note is required"}

    @pytest.mark.asyncio
    async def test_non_json_error_falls_back_to_status(self, fake_opsgenie):
        fake_opsgenie.respond("GET", "/v2/alerts", 500, text="<html>oops</html>")
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        with pytest.raises(OpsgenieAPIError) as exc_info:
            await client.list_alerts("k")

        assert exc_info.value.status == 500
        assert exc_info.value.message == "HTTP error! status: 500"

    @pytest.mark.asyncio
    async def test_json_error_without_message_falls_back(self, fake_opsgenie):
        fake_opsgenie.respond("GET", "/v2/alerts", 403, {"took": 0.0})
        client = OpsgenieClient(transport=fake_opsgenie.transport)

        with pytest.raises(OpsgenieAPIError) as exc_info:
            await client.list_alerts("k")

        assert exc_info.value.message == "HTTP error! status: 403"

    @pytest.mark.asyncio
    async def test_network_error_has_status_zero(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = OpsgenieClient(transport=httpx.MockTransport(refuse))

        with pytest.raises(OpsgenieAPIError) as exc_info:
            await client.list_alerts("k")

        assert exc_info.value.status == 0
        assert exc_info.value.message == "Network error: connection refused"
