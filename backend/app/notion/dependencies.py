# backend/app/notion/dependencies.py

"""
ルーター共通の依存関係。

- テスト時に FastAPI dependency_overrides で差し替え可能にする
- API トークンのクエリパラメータ名は api_key に統一し、sak は非推奨の別名として扱う
"""

import logging
from typing import Optional

from fastapi import Depends, Query

from .client import NotionClient
from .config import NotionConfig, get_notion_config
from .schemas import QueryRequest
from .service import NotionQueryService

logger = logging.getLogger(__name__)


def get_config() -> NotionConfig:
    return get_notion_config()


def get_query_service(config: NotionConfig = Depends(get_config)) -> NotionQueryService:
    # NotionClient は状態を持たないため、リクエストごとに生成して問題ない
    return NotionQueryService(client=NotionClient(config))


def resolve_api_key(
    api_key: Optional[str] = Query(
        None,
        description="Notion インテグレーショントークン",
    ),
    sak: Optional[str] = Query(
        None,
        deprecated=True,
        description="api_key の旧名。NOTION_ALLOW_LEGACY_TOKEN_PARAM=false で無効化される。",
    ),
    config: NotionConfig = Depends(get_config),
) -> str:
    """
    リクエストから API トークンを取り出す。両方指定された場合は api_key を優先。
    """
    if api_key and api_key.strip():
        return api_key

    if sak and config.allow_legacy_token_param:
        logger.warning(
            "Deprecated query parameter 'sak' used; switch to 'api_key'."
        )
        return sak

    return ""


def get_query_request(
    database_id: str,
    api_key: str = Depends(resolve_api_key),
    filter_json: Optional[str] = Query(
        None,
        alias="filter",
        description="URL エンコードされた query ボディ（JSON）",
    ),
) -> QueryRequest:
    return QueryRequest(
        database_id=database_id,
        api_key=api_key,
        filter_json=filter_json,
    )
