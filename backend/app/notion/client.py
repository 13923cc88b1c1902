# backend/app/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .config import NotionConfig, get_notion_config


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外（通信エラーなど）。"""


class NotionAPIError(NotionClientError):
    """Notion API が 2xx 以外を返した場合のエラー。"""

    def __init__(self, status_code: int, payload: Any, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
        self.message = message


class NotionAuthError(NotionAPIError):
    """認証・権限関連のエラー（401 / 403）。"""


class NotionClient:
    """
    Notion API の薄いラッパークライアント。

    - API トークンは呼び出しごとに受け取る（サーバー側には保持しない）
    - データベースの query を 1 回だけ実行する（リトライ・ページ送りはしない）
    """

    def __init__(self, config: Optional[NotionConfig] = None) -> None:
        self.config = config or get_notion_config()

    def _build_headers(self, api_key: str) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
            "Cache-Control": "no-store",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。

        例外には Notion が返したステータスとボディ（JSON でなければテキスト）を載せる。
        """
        if response.is_success:
            return

        try:
            payload: Any = response.json()
        except ValueError:
            payload = {"body": response.text}

        message = None
        if isinstance(payload, dict):
            message = payload.get("message")
        if not isinstance(message, str) or not message:
            message = f"API Error: {response.status_code}"

        error_cls = (
            NotionAuthError if response.status_code in (401, 403) else NotionAPIError
        )
        raise error_cls(response.status_code, payload, message)

    def query_database(
        self,
        database_id: str,
        api_key: str,
        body: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        databases/{database_id}/query を実行し、レスポンス JSON をそのまま返す。

        has_more / next_cursor は追跡せず、そのまま呼び出し元に渡す。
        """
        # ID に含まれる ? や # でリクエスト先が変わらないようにパスとしてエンコードする
        url = f"{self.config.api_base_url}/databases/{quote(database_id, safe='')}/query"

        try:
            response = httpx.post(
                url,
                headers=self._build_headers(api_key),
                json=body,
                timeout=self.config.timeout_seconds,
            )
        except (httpx.RequestError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            # 非 ASCII のトークン（ヘッダーにエンコードできない）や不正な URL もここに含める
            raise NotionClientError(str(exc) or exc.__class__.__name__) from exc

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise NotionClientError(
                "Unexpected Notion API response format: body is not valid JSON."
            ) from exc

        if not isinstance(data, dict):
            raise NotionClientError(
                "Unexpected Notion API response format: body is not an object."
            )

        return data
