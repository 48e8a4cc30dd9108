"""構造化パースとテキストフォールバックのユーティリティ"""

from __future__ import annotations

import json
from typing import Any

import yaml

from .exceptions import ValidationError

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class StringTimestampLoader(yaml.SafeLoader):
    """日付・日時らしいスカラーを文字列のまま残す SafeLoader。"""


StringTimestampLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_yaml(text: str) -> Any:
    """JSON に変換できる値だけを返すように YAML を読み込む。"""
    return yaml.load(text, Loader=StringTimestampLoader)


def _reject_constant(name: str) -> Any:
    # NaN / Infinity は JSON として不正
    raise ValueError(f"invalid JSON constant {name}")


def parse_value(text: str) -> Any:
    """JSON としてパースし、失敗した場合は文字列のまま返す。

    "42" -> 42, "true" -> True, '{"a": 1}' -> dict, "hello" -> "hello", "NaN" -> "NaN"
    フォールバック経路では例外を送出しない。
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return text


def _variant_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_variants(text: str) -> list[str]:
    """バリアント指定をリストに変換する。

    YAML/JSON の配列として解釈できればその要素を使い、
    できなければカンマ区切りとして各要素の前後空白を除去する。
    """
    try:
        parsed = load_yaml(text)
    except yaml.YAMLError:
        parsed = None
    if isinstance(parsed, list):
        return [_variant_text(v) for v in parsed]
    return [part.strip() for part in text.split(",")]


def parse_bool(field_name: str, text: str) -> bool:
    """真偽値文字列を厳密にパースする。"""
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError(f"invalid {field_name} value '{text}', must be true or false")


def parse_structured(field_name: str, text: str) -> Any:
    """YAML/JSON として厳密にパースする。失敗時は ValidationError。"""
    try:
        return load_yaml(text)
    except yaml.YAMLError as e:
        raise ValidationError(f"failed to parse {field_name}: {e}", cause=e) from e
