# backend/app/notion/service.py

"""
NotionClient と画面・API 層をつなぐリレー（サービス層）。

- 入力チェック（資格情報・フィルタ JSON）
- Notion API への 1 回だけの query
- 例外を QueryFailure に正規化する
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .client import NotionAPIError, NotionClient, NotionClientError
from .schemas import (
    QueryErrorKind,
    QueryFailure,
    QueryRequest,
    QueryResult,
    QuerySuccess,
)

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS_MESSAGE = "Database ID and API Key are required."
INVALID_FILTER_MESSAGE = "Invalid JSON in query parameters."


def parse_filter_json(raw: Optional[str]) -> Tuple[bool, Dict[str, Any]]:
    """
    フィルタ文字列を query ボディに変換する。

    空文字・None は {} として扱う。
    JSON として壊れている場合、またはオブジェクト以外の場合は (False, {}) を返す。
    """
    if raw is None or raw.strip() == "":
        return True, {}

    try:
        parsed = json.loads(raw)
    except ValueError:
        return False, {}

    if not isinstance(parsed, dict):
        return False, {}

    return True, parsed


class NotionQueryService:
    """
    QueryRequest を受け取り、QueryResult を返すサービスクラス。

    - コンストラクタで NotionClient を注入可能（テストではフェイクを渡す）
    - 例外はすべてここで捕捉し、呼び出し元には QueryFailure として返す
    """

    def __init__(self, client: Optional[NotionClient] = None) -> None:
        self.client = client or NotionClient()

    def execute_query(self, request: QueryRequest) -> QueryResult:
        # 成功・失敗どちらの結果にも同じ時刻を使う
        fetched_at = datetime.now(timezone.utc)

        database_id = request.database_id.strip()
        api_key = request.api_key.strip()

        if not database_id or not api_key:
            return QueryFailure(
                kind=QueryErrorKind.MISSING_CREDENTIALS,
                error=MISSING_CREDENTIALS_MESSAGE,
                fetched_at=fetched_at,
            )

        valid, body = parse_filter_json(request.filter_json)
        if not valid:
            return QueryFailure(
                kind=QueryErrorKind.INVALID_FILTER_JSON,
                error=INVALID_FILTER_MESSAGE,
                fetched_at=fetched_at,
            )

        logger.info("Querying Notion database. database_id=%s", database_id)

        try:
            data = self.client.query_database(database_id, api_key, body)
        except NotionAPIError as exc:
            logger.warning(
                "Notion API returned an error. database_id=%s status=%s",
                database_id,
                exc.status_code,
            )
            return QueryFailure(
                kind=QueryErrorKind.UPSTREAM_ERROR,
                error=exc.message,
                status_code=exc.status_code,
                details=_with_status(exc.payload, exc.status_code),
                fetched_at=fetched_at,
            )
        except NotionClientError as exc:
            logger.warning(
                "Notion API request failed. database_id=%s error=%s",
                database_id,
                exc,
            )
            return QueryFailure(
                kind=QueryErrorKind.TRANSPORT_ERROR,
                error=f"Network or server error: {exc}",
                fetched_at=fetched_at,
            )

        return QuerySuccess(data=data, fetched_at=fetched_at)


def _with_status(payload: Any, status_code: int) -> Dict[str, Any]:
    """
    details に必ず status が含まれるようにする（元の payload は変更しない）。
    """
    details = dict(payload) if isinstance(payload, dict) else {"body": payload}
    details.setdefault("status", status_code)
    return details
