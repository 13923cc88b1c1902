# backend/app/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- /api/notion_database/{database_id} パススルーエンドポイントを公開する
- /table-view/ndb/{database_id}, /view/ndb/{database_id} の HTML 画面を公開する
- / の query フォームを公開する
"""

from fastapi import FastAPI

from app.notion.router import router as notion_router
from app.views.router import router as views_router


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - Notion パススルー API (/api/notion_database/{database_id})
    - HTML 画面 (/, /table-view/ndb/..., /view/ndb/...)
    - ヘルスチェックエンドポイント (/health)
    """
    app = FastAPI(title="Notion Query Viewer")

    # ルーター登録
    app.include_router(notion_router)
    app.include_router(views_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
