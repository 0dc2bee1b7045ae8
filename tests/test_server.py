"""Tests for the GreenhouseMCPServer JSON-RPC behaviour and tool routing."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from mcp.types import LATEST_PROTOCOL_VERSION

from greenhouse_mcp.client import ApiResponse
from greenhouse_mcp.exceptions import ApiError
from greenhouse_mcp.pagination import Cursored, Filtered
from greenhouse_mcp.server import GreenhouseMCPServer, JSONRPCError
from greenhouse_mcp.tools import PAGINATION_NOTE

from conftest import BASE_URL, make_response


def build_server() -> tuple[GreenhouseMCPServer, MagicMock]:
    client = MagicMock()
    client.fetch_page.return_value = ApiResponse(data=[{"id": 1}], next_cursor="next-1")
    client.get.return_value = ApiResponse(data={"id": 5})
    client.post.return_value = ApiResponse(data={})
    return GreenhouseMCPServer(client), client


def call_tool(server: GreenhouseMCPServer, name: str, arguments: dict, request_id: int = 1) -> dict:
    return server.handle_json_rpc(
        {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        }
    )


def result_payload(response: dict) -> dict:
    return json.loads(response["result"]["content"][0]["text"])


def test_initialize_response_contains_capabilities() -> None:
    server, _ = build_server()
    response = server.handle_json_rpc({"jsonrpc": "2.0", "id": 1, "method": "initialize"})
    assert response["result"]["protocolVersion"] == LATEST_PROTOCOL_VERSION
    assert response["result"]["serverInfo"]["name"] == "greenhouse-harvest"
    assert "tools" in response["result"]["capabilities"]


def test_notification_produces_no_response() -> None:
    server, _ = build_server()
    assert server.handle_json_rpc({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


def test_request_without_id_is_rejected() -> None:
    server, _ = build_server()
    with pytest.raises(JSONRPCError) as excinfo:
        server.handle_json_rpc({"jsonrpc": "2.0", "method": "tools/list"})
    assert excinfo.value.code == -32600


def test_list_tools_exposes_all_tools() -> None:
    server, _ = build_server()
    response = server.handle_json_rpc({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
    tools = {tool["name"]: tool for tool in response["result"]["tools"]}

    assert len(tools) == 24
    assert {"list_applications", "get_job", "reject_application", "list_rejection_reasons"} <= set(tools)
    schema = tools["list_jobs"]["inputSchema"]
    assert {"per_page", "cursor", "created_at", "updated_at", "status"} <= set(schema["properties"])
    assert tools["get_candidate"]["inputSchema"]["required"] == ["id"]


def test_legacy_method_names_still_work() -> None:
    server, _ = build_server()
    response = server.handle_json_rpc({"jsonrpc": "2.0", "id": 3, "method": "list_tools"})
    assert len(response["result"]["tools"]) == 24


def test_list_tool_routes_filters_and_formats_cursor() -> None:
    server, client = build_server()

    response = call_tool(server, "list_jobs", {"status": "open", "per_page": 10, "unknown": "x"})

    path, request = client.fetch_page.call_args.args
    assert path == "/jobs"
    assert isinstance(request, Filtered)
    assert request.params["status"] == "open"
    assert request.params["per_page"] == 10
    assert "unknown" not in request.params
    assert result_payload(response) == {
        "data": [{"id": 1}],
        "next_cursor": "next-1",
        "_pagination_note": PAGINATION_NOTE,
    }


def test_list_tool_with_cursor_uses_cursor_request() -> None:
    server, client = build_server()
    client.fetch_page.return_value = ApiResponse(data=[])

    response = call_tool(server, "list_candidates", {"cursor": "abc"})

    assert client.fetch_page.call_args.args == ("/candidates", Cursored("abc"))
    assert result_payload(response) == {"data": []}


def test_cursor_with_filters_is_a_tool_error() -> None:
    server, client = build_server()

    response = call_tool(server, "list_candidates", {"cursor": "abc", "email": "a@b.c"})

    assert response["result"]["isError"] is True
    assert "cursor must be the only query parameter" in response["result"]["content"][0]["text"]
    client.fetch_page.assert_not_called()


def test_get_tool_builds_resource_path() -> None:
    server, client = build_server()

    response = call_tool(server, "get_application", {"id": 42})

    client.get.assert_called_once_with("/applications/42")
    assert result_payload(response) == {"data": {"id": 5}}


def test_get_tool_requires_id() -> None:
    server, client = build_server()

    response = call_tool(server, "get_job", {})

    assert response["result"]["isError"] is True
    assert "'id' is required" in response["result"]["content"][0]["text"]
    client.get.assert_not_called()


@pytest.mark.parametrize("value", [5.7, "5.7", True, "abc"])
def test_get_tool_rejects_non_integer_id(value) -> None:
    server, client = build_server()

    response = call_tool(server, "get_job", {"id": value})

    assert response["result"]["isError"] is True
    assert "'id' must be an integer" in response["result"]["content"][0]["text"]
    client.get.assert_not_called()


def test_get_tool_accepts_integral_float_id() -> None:
    server, client = build_server()

    call_tool(server, "get_job", {"id": 5.0})

    client.get.assert_called_once_with("/jobs/5")


def test_reject_application_posts_body() -> None:
    server, client = build_server()

    call_tool(
        server,
        "reject_application",
        {
            "id": 7,
            "rejection_reason_id": 3,
            "notes": "Position filled",
            "rejection_email": {"email_template_id": 11, "send_email_at": None},
        },
    )

    client.post.assert_called_once_with(
        "/applications/7/reject",
        {
            "rejection_reason_id": 3,
            "notes": "Position filled",
            "rejection_email": {"email_template_id": 11},
        },
    )


def test_api_error_is_reported_as_tool_error() -> None:
    server, client = build_server()
    client.get.side_effect = ApiError(404, "Not Found", "not found", f"{BASE_URL}/jobs/1")

    response = call_tool(server, "get_job", {"id": 1})

    assert response["result"]["isError"] is True
    text = response["result"]["content"][0]["text"]
    assert "404" in text and "not found" in text


def test_unknown_tool_returns_invalid_params() -> None:
    server, _ = build_server()
    response = call_tool(server, "does_not_exist", {})
    assert response["error"]["code"] == -32602


def test_unknown_method_returns_error() -> None:
    server, _ = build_server()
    response = server.handle_json_rpc({"jsonrpc": "2.0", "id": 7, "method": "unknown"})
    assert response["error"]["code"] == -32601


def test_unconfigured_server_reports_configuration_error() -> None:
    server = GreenhouseMCPServer()
    response = call_tool(server, "list_jobs", {})
    assert response["result"]["isError"] is True
    assert "GREENHOUSE_CLIENT_ID" in response["result"]["content"][0]["text"]


def test_end_to_end_with_real_client(client, session) -> None:
    server = GreenhouseMCPServer(client)
    session.queue(
        make_response(200, [{"id": 1}], headers={"Link": f'<{BASE_URL}/jobs?cursor=p2>; rel="next"'}),
        make_response(200, [{"id": 2}]),
    )

    first = result_payload(call_tool(server, "list_jobs", {"status": "open", "confidential": False}))
    second = result_payload(call_tool(server, "list_jobs", {"cursor": first["next_cursor"]}, request_id=2))

    assert first["next_cursor"] == "p2"
    assert second == {"data": [{"id": 2}]}
    assert session.calls[0].url == f"{BASE_URL}/jobs?status=open&confidential=false"
    assert session.calls[1].url == f"{BASE_URL}/jobs?cursor=p2"


def test_list_filter_values_reach_the_url_comma_joined(client, session) -> None:
    server = GreenhouseMCPServer(client)
    session.queue(make_response(200, []))

    call_tool(server, "list_jobs", {"ids": [4, 5]})

    assert session.calls[0].url == f"{BASE_URL}/jobs?ids=4%2C5"


def test_object_filter_value_is_a_tool_error(client, session) -> None:
    server = GreenhouseMCPServer(client)

    response = call_tool(server, "list_jobs", {"ids": {"id": 4}})

    assert response["result"]["isError"] is True
    assert "unsupported query parameter value" in response["result"]["content"][0]["text"]
    assert session.calls == []
