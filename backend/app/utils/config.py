# backend/app/utils/config.py

"""
環境変数読み取り用のユーティリティ。
Notion 設定以外（サーバー全般の設定など）でも共通利用できる想定。
"""

import os
from typing import Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class EnvVarMissingError(RuntimeError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> str:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    value = os.getenv(name)

    if value is None or value == "":
        if required:
            raise EnvVarMissingError(name)
        return default

    return value


def get_env_float(name: str, default: float) -> float:
    """
    数値の環境変数を取得する。

    - 未設定 or パース不能の場合は default を返す。
    """
    raw = get_env(name, default=None, required=False)
    if raw is None:
        return default

    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def get_env_bool(name: str, default: bool) -> bool:
    """
    真偽値の環境変数を取得する。

    true/false, 1/0, yes/no, on/off を大文字小文字を問わず解釈する。
    それ以外の値は default 扱い。
    """
    raw = get_env(name, default=None, required=False)
    if raw is None:
        return default

    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default
