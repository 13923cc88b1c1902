# backend/app/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。

API トークンとデータベース ID はリクエストごとにユーザーから受け取るため、
ここではサーバー側で固定する値だけを扱う。
"""

from dataclasses import dataclass
from functools import lru_cache

from app.utils.config import get_env, get_env_bool, get_env_float

DEFAULT_API_BASE_URL = "https://api.notion.com/v1"
DEFAULT_API_VERSION = "2022-06-28"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    api_base_url: str = DEFAULT_API_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    allow_legacy_token_param: bool = True


@lru_cache()
def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    任意:
      - NOTION_API_BASE_URL             (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION              (デフォルト: 2022-06-28)
      - NOTION_TIMEOUT_SECONDS          (デフォルト: 30)
      - NOTION_ALLOW_LEGACY_TOKEN_PARAM (デフォルト: true)
    """
    api_base_url = get_env(
        "NOTION_API_BASE_URL",
        default=DEFAULT_API_BASE_URL,
        required=False,
    )
    api_version = get_env(
        "NOTION_API_VERSION",
        default=DEFAULT_API_VERSION,
        required=False,
    )

    return NotionConfig(
        api_base_url=api_base_url.rstrip("/"),
        api_version=api_version,
        timeout_seconds=get_env_float(
            "NOTION_TIMEOUT_SECONDS", default=DEFAULT_TIMEOUT_SECONDS
        ),
        allow_legacy_token_param=get_env_bool(
            "NOTION_ALLOW_LEGACY_TOKEN_PARAM", default=True
        ),
    )
