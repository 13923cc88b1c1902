# backend/app/views/__init__.py

"""
ブラウザ向け画面（フォーム・テーブル表示・生 JSON 表示）。
"""
