# backend/app/notion/router.py

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.notion.dependencies import get_query_request, get_query_service
from app.notion.schemas import (
    QueryErrorKind,
    QueryFailure,
    QueryRequest,
    QueryResult,
)
from app.notion.service import NotionQueryService

router = APIRouter(prefix="/api", tags=["notion"])

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


def failure_status_code(result: QueryFailure) -> int:
    """
    失敗結果から HTTP ステータスを決める。

    - Notion API のステータスが分かればそれをそのまま返す
    - 入力不備（資格情報なし・フィルタ JSON 不正）は 400
    - それ以外（通信エラーなど）は 500
    """
    if result.status_code is not None:
        return result.status_code
    if result.kind in (
        QueryErrorKind.INVALID_FILTER_JSON,
        QueryErrorKind.MISSING_CREDENTIALS,
    ):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def result_to_body(result: QueryResult) -> Dict[str, Any]:
    """QueryResult をパススルー API のレスポンスボディに変換する。"""
    fetched_at = result.fetched_at.isoformat()
    if result.ok:
        return {**result.data, "fetched_at": fetched_at}
    return {
        "error": result.error,
        "kind": result.kind.value,
        "details": result.details,
        "fetched_at": fetched_at,
    }


@router.get(
    "/notion_database/{database_id}",
    summary="Notion データベースを query",
    description=(
        "api_key と filter（任意・JSON）を受け取り、Notion の databases/{id}/query を "
        "1 回だけ実行して結果をそのまま返す。"
    ),
)
def query_notion_database(
    request: QueryRequest = Depends(get_query_request),
    service: NotionQueryService = Depends(get_query_service),
) -> JSONResponse:
    result = service.execute_query(request)

    status_code = status.HTTP_200_OK if result.ok else failure_status_code(result)
    return JSONResponse(
        content=result_to_body(result),
        status_code=status_code,
        headers=NO_STORE_HEADERS,
    )
