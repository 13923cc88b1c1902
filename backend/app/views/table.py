# backend/app/views/table.py

"""
query 結果（Notion のページ配列）をテーブル表示用の構造に変換する。
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from markupsafe import Markup

from app.notion.properties import render_property


@dataclass
class TableRow:
    id: str
    cells: List[Markup] = field(default_factory=list)


@dataclass
class TableView:
    """テーブル表示用のデータ。columns は全行のプロパティ名の和集合（初出順）。"""

    columns: List[str] = field(default_factory=list)
    rows: List[TableRow] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def _page_properties(page: Any) -> Dict[str, Any]:
    if not isinstance(page, dict):
        return {}
    properties = page.get("properties")
    return properties if isinstance(properties, dict) else {}


def collect_columns(pages: List[Any]) -> List[str]:
    """全ページのプロパティ名を初出順で重複なく集める。"""
    columns: List[str] = []
    seen = set()
    for page in pages:
        for key in _page_properties(page):
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return columns


def build_table(payload: Dict[str, Any]) -> TableView:
    """
    Notion の query レスポンスから TableView を作る。

    results が無い・配列でない場合は空のテーブルを返す。
    ある行に存在しない列は空セルになる。
    """
    pages = payload.get("results")
    if not isinstance(pages, list) or not pages:
        return TableView()

    columns = collect_columns(pages)
    rows: List[TableRow] = []
    for index, page in enumerate(pages):
        properties = _page_properties(page)
        page_id = page.get("id") if isinstance(page, dict) else None
        rows.append(
            TableRow(
                id=str(page_id or index),
                cells=[render_property(properties.get(column), column) for column in columns],
            )
        )

    return TableView(columns=columns, rows=rows)


def format_fetched_at(value: datetime) -> str:
    """取得時刻を UTC で 'Jan 05, 2025, 03:04:05 PM UTC' の形式にする。"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%b %d, %Y, %I:%M:%S %p") + " UTC"
