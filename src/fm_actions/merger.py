"""フラグ設定の部分更新ペイロードを組み立てる"""

from __future__ import annotations

import json
from typing import Any

import structlog
import yaml

from .exceptions import ValidationError
from .parsing import load_yaml, parse_bool, parse_structured, parse_value

logger = structlog.get_logger(__name__)

CONFIGURATION_FIELDS = (
    "enabled",
    "defaultValue",
    "conditions",
    "variantsEnabled",
    "stickinessProperty",
)


def load_document(document: str | None) -> dict[str, Any]:
    """YAML のフラグ設定ドキュメントを辞書として読み込む。"""
    if not document:
        return {}
    try:
        data = load_yaml(document)
    except yaml.YAMLError as e:
        raise ValidationError(f"failed to parse config YAML: {e}", cause=e) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("config YAML must be a mapping of configuration fields")
    unknown = sorted(str(k) for k in data if k not in CONFIGURATION_FIELDS)
    if unknown:
        # 未知のキーもそのまま送信する
        logger.warning("unknown configuration fields", fields=unknown)
    return data


def merge_configuration(
    document: str | None = None,
    *,
    enabled: str | None = None,
    default_value: str | None = None,
    conditions: str | None = None,
    variants_enabled: str | None = None,
    stickiness_property: str | None = None,
) -> dict[str, Any]:
    """ドキュメントと個別指定をマージして更新ペイロードを返す。

    document: YAML 形式の設定（オプション）
    その他の引数: 個別指定。指定された場合はドキュメントの同名キーを置き換える。

    マージ結果が空の場合は ValidationError を送出する。
    """
    changes = load_document(document)

    if enabled:
        changes["enabled"] = parse_bool("enabled", enabled)
    if default_value:
        changes["defaultValue"] = parse_value(default_value)
    if conditions:
        changes["conditions"] = parse_structured("conditions", conditions)
    if variants_enabled:
        changes["variantsEnabled"] = parse_bool("variants-enabled", variants_enabled)
    if stickiness_property:
        changes["stickinessProperty"] = stickiness_property

    if not changes:
        raise ValidationError("no configuration changes specified")
    try:
        json.dumps(changes, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"configuration is not valid JSON: {e}", cause=e) from e
    return changes
