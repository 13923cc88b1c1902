# backend/app/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- ユーザー指定のデータベース ID / トークン / フィルタで Notion API を query する
- 失敗を QueryFailure に正規化する
- プロパティ値を表示用 HTML に変換する
"""
