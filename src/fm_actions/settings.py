"""CLI 設定の読み込み

設定は次の順で重ね合わせる（後勝ち）。
1. YAML 設定ファイル（--settings、なければ ~/.fm-actions.yaml）
2. 環境変数とコマンドラインオプション
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import FmActionsError, FmActionsErrorCodes
from .models import DEFAULT_API_URL, ClientConfig

DEFAULT_CONFIG_NAME = ".fm-actions.yaml"


class Settings(BaseModel):
    """CLI 全体の設定。"""

    api_url: str = DEFAULT_API_URL
    token: str = ""
    org_id: str = ""
    application_name: str = ""
    use_org_as_app: bool = False
    verbose: bool = False
    log_level: str = "WARNING"
    log_format: Literal["json", "text"] = "text"
    timeout_seconds: float = 30.0

    def client_config(self) -> ClientConfig:
        return ClientConfig(
            token=self.token,
            org_id=self.org_id,
            base_url=self.api_url or DEFAULT_API_URL,
            use_org_as_app=self.use_org_as_app,
            timeout_seconds=self.timeout_seconds,
        )


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。キーのハイフンはアンダースコアに正規化する。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FmActionsError(
            code=FmActionsErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise FmActionsError(
            code=FmActionsErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise FmActionsError(
            code=FmActionsErrorCodes.PARSE_YAML,
            message=f"Config file must contain a mapping: {path}",
        )
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def default_config_path() -> Path:
    return Path.home() / DEFAULT_CONFIG_NAME


def load_settings(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """設定ファイルとオーバーライドから Settings を返す。

    config_path: 明示的な設定ファイルパス。指定時はファイルが存在しなければエラー。
    overrides: 環境変数・オプション由来の値。None の値は無視する。
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        data = _read_yaml(config_path)
    else:
        default_path = default_config_path()
        if default_path.exists():
            data = _read_yaml(default_path)

    explicit = {k: v for k, v in (overrides or {}).items() if v is not None}
    data = {**data, **explicit}
    try:
        return Settings.model_validate(data)
    except PydanticValidationError as e:
        raise FmActionsError(
            code=FmActionsErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
