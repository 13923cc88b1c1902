# backend/tests/test_notion_service.py

import pytest

from app.notion.client import (
    NotionAPIError,
    NotionAuthError,
    NotionClient,
    NotionClientError,
)
from app.notion.config import NotionConfig
from app.notion.schemas import QueryErrorKind, QueryRequest
from app.notion.service import NotionQueryService, parse_filter_json
from fakes import FakeNotionClient


@pytest.mark.parametrize(
    "database_id, api_key",
    [("", "secret"), ("db", ""), ("", ""), ("  ", "secret")],
)
def test_missing_credentials_skips_network(database_id, api_key):
    client = FakeNotionClient()
    service = NotionQueryService(client=client)

    result = service.execute_query(
        QueryRequest(database_id=database_id, api_key=api_key)
    )

    assert result.ok is False
    assert result.kind == QueryErrorKind.MISSING_CREDENTIALS
    assert result.error == "Database ID and API Key are required."
    assert client.calls == []


@pytest.mark.parametrize("filter_json", ["{", "not json", "{'a': 1}", "[1, 2]", "42"])
def test_invalid_filter_json_skips_network(filter_json):
    client = FakeNotionClient()
    service = NotionQueryService(client=client)

    result = service.execute_query(
        QueryRequest(database_id="db", api_key="secret", filter_json=filter_json)
    )

    assert result.ok is False
    assert result.kind == QueryErrorKind.INVALID_FILTER_JSON
    assert result.error == "Invalid JSON in query parameters."
    assert client.calls == []


@pytest.mark.parametrize("filter_json", [None, "", "   ", "{}"])
def test_empty_filter_sends_empty_body(filter_json):
    client = FakeNotionClient()
    service = NotionQueryService(client=client)

    result = service.execute_query(
        QueryRequest(database_id="db", api_key="secret", filter_json=filter_json)
    )

    assert result.ok is True
    assert client.calls == [{"database_id": "db", "api_key": "secret", "body": {}}]


def test_filter_forwarded_verbatim():
    client = FakeNotionClient()
    service = NotionQueryService(client=client)
    filter_json = '{"filter": {"property": "Status", "select": {"equals": "Done"}}}'

    service.execute_query(
        QueryRequest(database_id="db", api_key="secret", filter_json=filter_json)
    )

    assert client.calls[0]["body"] == {
        "filter": {"property": "Status", "select": {"equals": "Done"}}
    }


def test_success_returns_payload_unchanged():
    payload = {"object": "list", "results": [], "has_more": True, "next_cursor": "abc"}
    service = NotionQueryService(client=FakeNotionClient(data=payload))

    result = service.execute_query(QueryRequest(database_id="db", api_key="secret"))

    assert result.ok is True
    assert result.data == payload
    assert result.fetched_at.tzinfo is not None


def test_upstream_404_becomes_failure():
    error = NotionAPIError(404, {"message": "Not found"}, "Not found")
    client = FakeNotionClient(error=error)
    service = NotionQueryService(client=client)

    result = service.execute_query(QueryRequest(database_id="db", api_key="secret"))

    assert result.ok is False
    assert result.kind == QueryErrorKind.UPSTREAM_ERROR
    assert result.error == "Not found"
    assert result.status_code == 404
    assert result.details == {"message": "Not found", "status": 404}
    assert len(client.calls) == 1


def test_upstream_auth_error_is_upstream_failure():
    error = NotionAuthError(401, {"body": ""}, "API Error: 401")
    service = NotionQueryService(client=FakeNotionClient(error=error))

    result = service.execute_query(QueryRequest(database_id="db", api_key="bad"))

    assert result.kind == QueryErrorKind.UPSTREAM_ERROR
    assert result.status_code == 401
    assert result.details["status"] == 401


def test_transport_error_becomes_failure():
    client = FakeNotionClient(error=NotionClientError("connection refused"))
    service = NotionQueryService(client=client)

    result = service.execute_query(QueryRequest(database_id="db", api_key="secret"))

    assert result.ok is False
    assert result.kind == QueryErrorKind.TRANSPORT_ERROR
    assert result.error == "Network or server error: connection refused"
    assert result.status_code is None
    assert len(client.calls) == 1


def test_parse_filter_json():
    assert parse_filter_json(None) == (True, {})
    assert parse_filter_json(" ") == (True, {})
    assert parse_filter_json('{"page_size": 5}') == (True, {"page_size": 5})
    assert parse_filter_json("[]") == (False, {})
    assert parse_filter_json("{oops") == (False, {})


@pytest.mark.parametrize(
    "database_id, api_key",
    [("db", "secret_“token”"), ("db", "sécret")],
)
def test_unsendable_token_becomes_transport_failure(database_id, api_key):
    service = NotionQueryService(client=NotionClient())

    result = service.execute_query(
        QueryRequest(database_id=database_id, api_key=api_key)
    )

    assert result.ok is False
    assert result.kind == QueryErrorKind.TRANSPORT_ERROR
    assert result.error.startswith("Network or server error: ")


def test_invalid_upstream_url_becomes_transport_failure():
    client = NotionClient(NotionConfig(api_base_url="http://notion.test/v1\x00"))
    service = NotionQueryService(client=client)

    result = service.execute_query(QueryRequest(database_id="db", api_key="secret"))

    assert result.ok is False
    assert result.kind == QueryErrorKind.TRANSPORT_ERROR
