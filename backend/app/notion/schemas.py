# backend/app/notion/schemas.py

"""
Notion データベース query の入力・結果を表現するスキーマ定義。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field


class QueryErrorKind(str, Enum):
    """
    query 失敗時の分類。

    - MISSING_CREDENTIALS: データベース ID または API キーが空
    - INVALID_FILTER_JSON: フィルタ文字列が JSON オブジェクトとして解釈できない
    - UPSTREAM_ERROR: Notion API が 2xx 以外を返した
    - TRANSPORT_ERROR: 通信エラー、またはレスポンスが解釈できない
    """

    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_FILTER_JSON = "invalid_filter_json"
    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_ERROR = "transport_error"


class QueryRequest(BaseModel):
    """
    ユーザーから受け取った query パラメータ。

    値の妥当性チェックはリレー側で行い、失敗は QueryFailure として返す。
    """

    database_id: str = Field("", description="Notion データベース ID")
    api_key: str = Field("", description="Notion インテグレーショントークン")
    filter_json: Optional[str] = Field(
        None,
        description="任意の query ボディ（JSON 文字列）。空なら {} を送る。",
    )


class QuerySuccess(BaseModel):
    """Notion API 呼び出し成功時の結果。"""

    ok: Literal[True] = True
    data: Dict[str, Any] = Field(..., description="Notion API のレスポンスそのもの")
    fetched_at: datetime


class QueryFailure(BaseModel):
    """Notion API 呼び出し失敗時の結果。"""

    ok: Literal[False] = False
    kind: QueryErrorKind
    error: str
    status_code: Optional[int] = Field(
        None, description="Notion API が返した HTTP ステータス（分かる場合のみ）"
    )
    details: Optional[Any] = None
    fetched_at: datetime


QueryResult = Union[QuerySuccess, QueryFailure]
