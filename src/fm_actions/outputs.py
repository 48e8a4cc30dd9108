"""CLOUDBEES_OUTPUTS ディレクトリへの出力書き込み"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console

OUTPUTS_ENV = "CLOUDBEES_OUTPUTS"

logger = structlog.get_logger(__name__)


def to_json(value: Any) -> str:
    """出力用のコンパクトな JSON 文字列に変換する。"""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class OutputWriter:
    """名前付き出力値をキーごとのファイルに書き込む。

    ディレクトリが未設定の場合は警告とともにコンソールへ表示するだけ。
    """

    def __init__(self, directory: Path | None, console: Console | None = None) -> None:
        self._directory = directory
        self._console = console or Console()
        self._values: dict[str, str] = {}

    @classmethod
    def from_env(cls, console: Console | None = None) -> OutputWriter:
        directory = os.environ.get(OUTPUTS_ENV, "")
        return cls(Path(directory) if directory else None, console)

    @property
    def values(self) -> dict[str, str]:
        """書き込んだ出力値のコピー。"""
        return dict(self._values)

    def write(self, name: str, value: str) -> None:
        self._values[name] = value
        if self._directory is None:
            self._console.print(
                f"Warning: {OUTPUTS_ENV} environment variable not set, "
                f"skipping output {name}={value}",
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
            return
        path = self._directory / name
        try:
            path.write_text(value, encoding="utf-8")
            path.chmod(0o640)
        except OSError as e:
            # 出力の書き込み失敗ではコマンド全体を失敗させない
            logger.warning("failed to write output", name=name, path=str(path), error=str(e))
