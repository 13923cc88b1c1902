# backend/app/notion/properties.py

"""
Notion ページのプロパティ値を表示用 HTML に変換するレンダラー。

- type 判別子ごとに 1 つの描画ルールを持つ
- 未対応 type・壊れた payload は "Unsupported: {type}" として描画し、例外は投げない
- 出力は markupsafe.Markup（テンプレート側で再エスケープされない）
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional

from markupsafe import Markup, escape

logger = logging.getLogger(__name__)

CHECKBOX_YES = "✔️ Yes"
CHECKBOX_NO = "❌ No"

DEFAULT_COLOR_HEX = "#E3E2E0"

# Notion の色名 → 近似 hex（status バッジ用）
NOTION_COLORS: Dict[str, str] = {
    "default": DEFAULT_COLOR_HEX,
    "gray": "#9B9A97",
    "brown": "#64473A",
    "orange": "#D9730D",
    "yellow": "#DFAB01",
    "green": "#0F7B6C",
    "blue": "#0B6E99",
    "purple": "#6940A5",
    "pink": "#AD1A72",
    "red": "#D44C47",
    "gray_background": "#F1F1EF",
    "brown_background": "#F3EEEE",
    "orange_background": "#FAEBDD",
    "yellow_background": "#FBF3DB",
    "green_background": "#EDF3F3",
    "blue_background": "#E7F0F4",
    "purple_background": "#F0F0F7",
    "pink_background": "#F8E7F3",
    "red_background": "#FAECEC",
}

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

PropertyRenderer = Callable[[Dict[str, Any]], Markup]


def notion_color_to_hex(color_name: Optional[str]) -> str:
    """Notion の色名を hex に変換する。未知の色はデフォルト色。"""
    if not isinstance(color_name, str):
        return DEFAULT_COLOR_HEX
    return NOTION_COLORS.get(color_name, DEFAULT_COLOR_HEX)


def text_color_for_background(hex_color: Optional[str]) -> str:
    """
    背景色に対して読みやすい文字色（黒 or 白）を返す。

    輝度 (0.299R + 0.587G + 0.114B) / 255 が 0.5 を超えれば黒、それ以外は白。
    hex として解釈できない入力は黒を返す。
    """
    if not isinstance(hex_color, str):
        return "#000000"

    match = _HEX_RE.match(hex_color.strip())
    if match is None:
        return "#000000"

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)

    r = int(digits[0:2], 16)
    g = int(digits[2:4], 16)
    b = int(digits[4:6], 16)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "#000000" if luminance > 0.5 else "#FFFFFF"


def _parse_iso(value: str) -> Optional[datetime]:
    try:
        # Python 3.10 の fromisoformat は末尾 Z を解釈できない
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: Any) -> str:
    """ISO 形式の日付文字列を YYYY-MM-DD に整形する。解釈できなければそのまま返す。"""
    if not isinstance(value, str) or not value:
        return ""
    parsed = _parse_iso(value)
    if parsed is None:
        return value
    return parsed.strftime("%Y-%m-%d")


def format_datetime(value: Any) -> str:
    """ISO 形式の日時文字列を UTC の YYYY-MM-DD HH:MM:SS UTC に整形する。"""
    if not isinstance(value, str) or not value:
        return ""
    parsed = _parse_iso(value)
    if parsed is None:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_date_range(value: Any) -> str:
    """date オブジェクト（start / end）を表示用文字列にする。"""
    if not isinstance(value, dict) or not value.get("start"):
        return ""
    text = format_date(value["start"])
    if value.get("end"):
        text += f" – {format_date(value['end'])}"
    return text


def format_number(value: Any) -> str:
    """数値を 3 桁区切り・小数 3 桁までで整形する。"""
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, int) or float(value).is_integer():
        return f"{int(value):,}"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text


def _badge(text: Any, variant: str = "outline", style: Optional[str] = None) -> Markup:
    if style:
        return Markup('<span class="badge badge-{}" style="{}">{}</span>').format(
            variant, style, text
        )
    return Markup('<span class="badge badge-{}">{}</span>').format(variant, text)


def _link(href: str, text: Optional[str] = None) -> Markup:
    return Markup(
        '<a href="{}" target="_blank" rel="noopener noreferrer">{}</a>'
    ).format(href, text or href)


def _join(parts: Iterable[Markup]) -> Markup:
    return Markup("").join(parts)


def _unsupported(prop_type: Any) -> Markup:
    return Markup('<span class="unsupported">Unsupported: {}</span>').format(
        prop_type if prop_type else "unknown"
    )


def _render_title(prop: Dict[str, Any]) -> Markup:
    segments = prop.get("title") or []
    if not segments:
        return Markup("")
    return escape(segments[0].get("plain_text") or "")


def _render_rich_text(prop: Dict[str, Any]) -> Markup:
    segments = prop.get("rich_text") or []
    return escape("".join(seg.get("plain_text") or "" for seg in segments))


def _render_number(prop: Dict[str, Any]) -> Markup:
    return escape(format_number(prop.get("number")))


def _render_select(prop: Dict[str, Any]) -> Markup:
    option = prop.get("select")
    if not option:
        return Markup("")
    return _badge(option.get("name", ""))


def _render_multi_select(prop: Dict[str, Any]) -> Markup:
    options = prop.get("multi_select") or []
    return _join(_badge(option.get("name", "")) for option in options)


def _render_status(prop: Dict[str, Any]) -> Markup:
    status = prop.get("status")
    if not status:
        return Markup("")
    background = notion_color_to_hex(status.get("color"))
    style = f"background-color: {background}; color: {text_color_for_background(background)}"
    return _badge(status.get("name", ""), variant="status", style=style)


def _render_date(prop: Dict[str, Any]) -> Markup:
    return escape(format_date_range(prop.get("date")))


def _render_checkbox(prop: Dict[str, Any]) -> Markup:
    return escape(CHECKBOX_YES if prop.get("checkbox") else CHECKBOX_NO)


def _render_url(prop: Dict[str, Any]) -> Markup:
    url = prop.get("url")
    return _link(url) if url else Markup("")


def _render_email(prop: Dict[str, Any]) -> Markup:
    email = prop.get("email")
    if not email:
        return Markup("")
    return Markup('<a href="mailto:{}">{}</a>').format(email, email)


def _render_phone_number(prop: Dict[str, Any]) -> Markup:
    phone = prop.get("phone_number")
    if not phone:
        return Markup("")
    return Markup('<a href="tel:{}">{}</a>').format(phone, phone)


def _render_files(prop: Dict[str, Any]) -> Markup:
    files = prop.get("files") or []
    if not files:
        return escape("No files")

    lines = []
    for file_obj in files:
        external_url = (file_obj.get("external") or {}).get("url")
        if file_obj.get("type") == "external" and external_url:
            content = _link(external_url, file_obj.get("name") or external_url)
        else:
            content = escape(file_obj.get("name") or "File")
        lines.append(Markup("<div>{}</div>").format(content))
    return _join(lines)


def _render_timestamp(key: str) -> PropertyRenderer:
    def render(prop: Dict[str, Any]) -> Markup:
        return escape(format_datetime(prop.get(key)))

    return render


def _render_user(key: str) -> PropertyRenderer:
    def render(prop: Dict[str, Any]) -> Markup:
        user = prop.get(key) or {}
        return escape(user.get("name") or user.get("id") or "")

    return render


def _render_relation(prop: Dict[str, Any]) -> Markup:
    relations = prop.get("relation") or []
    if relations:
        return _badge(f"{len(relations)} relation(s)", variant="secondary")
    return escape("No relations")


def _render_nested_value(value_type: str, value: Any) -> Markup:
    """rollup / formula の中身（type ごとの値）を描画する。"""
    if value_type == "date":
        return escape(format_date_range(value))
    if value_type == "number":
        return escape(format_number(value))
    if value_type == "boolean":
        return escape(CHECKBOX_YES if value else CHECKBOX_NO)
    return escape(str(value))


def _render_rollup(prop: Dict[str, Any]) -> Markup:
    rollup = prop.get("rollup")
    if not rollup:
        return Markup("")

    rollup_type = rollup.get("type")
    value = rollup.get(rollup_type)
    if value is None:
        return escape(f"Rollup ({rollup_type})")

    if rollup_type == "array" and isinstance(value, list):
        return _join(
            Markup("<div>{}</div>").format(render_property(item)) for item in value
        )
    return _render_nested_value(rollup_type, value)


def _render_formula(prop: Dict[str, Any]) -> Markup:
    formula = prop.get("formula")
    if not formula:
        return Markup("")

    formula_type = formula.get("type")
    value = formula.get(formula_type)
    if value is None:
        return escape(f"Formula ({formula_type})")
    return _render_nested_value(formula_type, value)


def _render_people(prop: Dict[str, Any]) -> Markup:
    people = prop.get("people") or []
    return _join(
        _badge(person.get("name") or person.get("id", ""), variant="secondary")
        for person in people
    )


def _render_unique_id(prop: Dict[str, Any]) -> Markup:
    unique_id = prop.get("unique_id") or {}
    number = unique_id.get("number")
    if number is None:
        return Markup("")
    prefix = unique_id.get("prefix")
    return escape(f"{prefix}-{number}" if prefix else str(number))


_RENDERERS: Dict[str, PropertyRenderer] = {
    "title": _render_title,
    "rich_text": _render_rich_text,
    "number": _render_number,
    "select": _render_select,
    "multi_select": _render_multi_select,
    "status": _render_status,
    "date": _render_date,
    "checkbox": _render_checkbox,
    "url": _render_url,
    "email": _render_email,
    "phone_number": _render_phone_number,
    "files": _render_files,
    "created_time": _render_timestamp("created_time"),
    "last_edited_time": _render_timestamp("last_edited_time"),
    "created_by": _render_user("created_by"),
    "last_edited_by": _render_user("last_edited_by"),
    "relation": _render_relation,
    "rollup": _render_rollup,
    "formula": _render_formula,
    "people": _render_people,
    "unique_id": _render_unique_id,
}


def render_property(prop: Any, name: Optional[str] = None) -> Markup:
    """
    Notion のプロパティ値 1 つを表示用 Markup に変換する。

    :param prop: Notion API のプロパティオブジェクト（None なら空文字）
    :param name: プロパティ名（ログ出力用）
    """
    if prop is None:
        return Markup("")
    if not isinstance(prop, dict):
        return _unsupported(type(prop).__name__)

    prop_type = prop.get("type")
    renderer = _RENDERERS.get(prop_type) if isinstance(prop_type, str) else None

    if renderer is None:
        raw = prop.get(prop_type) if isinstance(prop_type, str) else None
        if isinstance(raw, (str, int, float, bool)):
            return escape(str(raw))
        return _unsupported(prop_type)

    try:
        return renderer(prop)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.warning(
            "Malformed Notion property payload. name=%s type=%s error=%s",
            name,
            prop_type,
            exc,
        )
        return _unsupported(prop_type)
