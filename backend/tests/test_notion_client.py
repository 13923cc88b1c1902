# backend/tests/test_notion_client.py

import json

import httpx
import pytest

from app.notion.client import (
    NotionAPIError,
    NotionAuthError,
    NotionClient,
    NotionClientError,
)
from app.notion.config import NotionConfig


def _json_response(status_code: int, data) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(data).encode("utf-8"),
    )


def test_query_database_success(monkeypatch):
    client = NotionClient()
    captured = {}

    fake_response_data = {
        "object": "list",
        "results": [{"id": "page-1", "properties": {}}],
        "has_more": True,
        "next_cursor": "cursor-2",
    }

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return _json_response(200, fake_response_data)

    monkeypatch.setattr(httpx, "post", fake_post)

    data = client.query_database("db-123", "secret_abc", {})

    # レスポンスはページ送りせずそのまま返る
    assert data == fake_response_data
    assert captured["url"] == "https://api.notion.com/v1/databases/db-123/query"
    assert captured["json"] == {}
    assert captured["headers"]["Authorization"] == "Bearer secret_abc"
    assert captured["headers"]["Notion-Version"] == "2022-06-28"
    assert captured["headers"]["Cache-Control"] == "no-store"


def test_query_database_uses_config(monkeypatch):
    config = NotionConfig(
        api_base_url="http://notion.test/v1",
        api_version="2025-01-01",
        timeout_seconds=3.0,
    )
    client = NotionClient(config)
    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return _json_response(200, {"results": []})

    monkeypatch.setattr(httpx, "post", fake_post)

    client.query_database("db", "key", {"page_size": 10})

    assert captured["url"] == "http://notion.test/v1/databases/db/query"
    assert captured["headers"]["Notion-Version"] == "2025-01-01"
    assert captured["timeout"] == 3.0
    assert captured["json"] == {"page_size": 10}


def test_query_database_404_carries_status_and_payload(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        return _json_response(404, {"object": "error", "status": 404, "message": "Not found"})

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionAPIError) as exc_info:
        client.query_database("db", "key", {})

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Not found"
    assert exc_info.value.payload["object"] == "error"


def test_query_database_401(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        return httpx.Response(status_code=401, content=b"")

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionAuthError) as exc_info:
        client.query_database("db", "key", {})

    # ボディが JSON でない場合は汎用メッセージになる
    assert exc_info.value.message == "API Error: 401"
    assert exc_info.value.payload == {"body": ""}


def test_query_database_network_error(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionClientError) as exc_info:
        client.query_database("db", "key", {})

    assert not isinstance(exc_info.value, NotionAPIError)
    assert "connection refused" in str(exc_info.value)


def test_query_database_invalid_json_body(monkeypatch):
    client = NotionClient()

    def fake_post(*args, **kwargs):
        return httpx.Response(status_code=200, content=b"<html>oops</html>")

    monkeypatch.setattr(httpx, "post", fake_post)

    with pytest.raises(NotionClientError):
        client.query_database("db", "key", {})


def test_query_database_encodes_database_id_in_path(monkeypatch):
    client = NotionClient()
    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        return _json_response(200, {"results": []})

    monkeypatch.setattr(httpx, "post", fake_post)

    client.query_database("abc?x=#frag", "key", {})

    # ? や # はクエリ・フラグメントにならず、パスの一部として送られる
    assert captured["url"] == "https://api.notion.com/v1/databases/abc%3Fx%3D%23frag/query"
    request = httpx.Request("POST", captured["url"])
    assert request.url.path == "/v1/databases/abc?x=#frag/query"
    assert request.url.query == b""


def test_query_database_non_ascii_token():
    client = NotionClient()

    # ヘッダーに載せられないトークンは送信前に失敗する（ネットワークには出ない）
    with pytest.raises(NotionClientError) as exc_info:
        client.query_database("db", "secret_“token”", {})

    assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)


def test_query_database_invalid_url():
    config = NotionConfig(api_base_url="http://notion.test/v1\x00")
    client = NotionClient(config)

    with pytest.raises(NotionClientError) as exc_info:
        client.query_database("db", "key", {})

    assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)
