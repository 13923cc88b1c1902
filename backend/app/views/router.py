# backend/app/views/router.py
"""
ブラウザ向けの HTML 画面。

- /                         : query フォーム（入力チェックとリンク生成）
- /table-view/ndb/{id}      : テーブル表示
- /view/ndb/{id}            : 生 JSON 表示
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.notion.dependencies import get_query_request, get_query_service
from app.notion.router import NO_STORE_HEADERS, result_to_body
from app.notion.schemas import QueryFailure, QueryRequest
from app.notion.service import NotionQueryService, parse_filter_json

from .table import build_table, format_fetched_at

router = APIRouter(tags=["views"])

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

FILTER_PLACEHOLDER = '{ "filter": { "property": "Status", "select": { "equals": "Done" } } }'


def pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def describe_failure(result: QueryFailure) -> str:
    """
    フォーム画面向けに、エラーメッセージと Notion の詳細を 1 行にまとめる。
    """
    message = result.error
    details = result.details
    if isinstance(details, dict) and details.get("message"):
        message += f": {details['message']}"
        if details.get("code"):
            message += f" (Code: {details['code']})"
    elif isinstance(details, str) and details:
        message += f": {details}"
    elif details:
        message += f": {json.dumps(details, ensure_ascii=False)}"
    return message


def build_view_links(
    base_url: str,
    database_id: str,
    api_key: str,
    filter_json: Optional[str],
) -> Dict[str, str]:
    """
    テーブル表示・JSON 表示へのリンクを組み立てる。

    filter は空でない正しい JSON の場合のみ付与する。
    """
    params = {"api_key": api_key}
    valid, _ = parse_filter_json(filter_json)
    if valid and filter_json and filter_json.strip():
        params["filter"] = filter_json

    query = urlencode(params, quote_via=quote)
    encoded_id = quote(database_id, safe="")
    base = base_url.rstrip("/")
    return {
        "table_view": f"{base}/table-view/ndb/{encoded_id}?{query}",
        "json_view": f"{base}/view/ndb/{encoded_id}?{query}",
    }


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def query_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "form": {"database_id": "", "api_key": "", "filter_json": ""},
            "placeholder": FILTER_PLACEHOLDER,
        },
        headers=NO_STORE_HEADERS,
    )


@router.post("/", response_class=HTMLResponse, include_in_schema=False)
def validate_query_form(
    request: Request,
    database_id: str = Form(""),
    api_key: str = Form(""),
    filter_json: str = Form(""),
    service: NotionQueryService = Depends(get_query_service),
) -> HTMLResponse:
    """
    入力値で実際に query を 1 回実行し、成功すれば閲覧用リンクを表示する。
    """
    result = service.execute_query(
        QueryRequest(database_id=database_id, api_key=api_key, filter_json=filter_json)
    )

    context: Dict[str, Any] = {
        "form": {
            "database_id": database_id,
            "api_key": api_key,
            "filter_json": filter_json,
        },
        "placeholder": FILTER_PLACEHOLDER,
    }
    if result.ok:
        context["links"] = build_view_links(
            str(request.base_url), database_id.strip(), api_key.strip(), filter_json
        )
    else:
        context["error_message"] = describe_failure(result)

    return templates.TemplateResponse(
        request, "index.html", context, headers=NO_STORE_HEADERS
    )


@router.get("/table-view/ndb/{database_id}", response_class=HTMLResponse)
def table_view(
    request: Request,
    query: QueryRequest = Depends(get_query_request),
    service: NotionQueryService = Depends(get_query_service),
) -> HTMLResponse:
    result = service.execute_query(query)

    context: Dict[str, Any] = {
        "database_id": query.database_id,
        "filter_json": query.filter_json,
        "fetched_at": format_fetched_at(result.fetched_at),
        "result": result,
    }
    if result.ok:
        context["table"] = build_table(result.data)
    else:
        context["details_json"] = (
            pretty_json(result.details) if result.details is not None else None
        )

    return templates.TemplateResponse(
        request, "table_view.html", context, headers=NO_STORE_HEADERS
    )


@router.get("/view/ndb/{database_id}", response_class=HTMLResponse)
def raw_view(
    request: Request,
    query: QueryRequest = Depends(get_query_request),
    service: NotionQueryService = Depends(get_query_service),
) -> HTMLResponse:
    result = service.execute_query(query)

    context: Dict[str, Any] = {"database_id": query.database_id, "result": result}
    if result.ok:
        context["page_title"] = f"Notion DB: {query.database_id}"
        context["payload_json"] = pretty_json(result_to_body(result))
    else:
        context["page_title"] = f"Error Querying: {query.database_id}"
        context["details_json"] = (
            pretty_json(result.details) if result.details is not None else None
        )

    return templates.TemplateResponse(
        request, "raw_view.html", context, headers=NO_STORE_HEADERS
    )
