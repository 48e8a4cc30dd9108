"""CLI 用の structlog 設定

コマンド結果は標準出力に出すため、ログはすべて標準エラー出力に書き込む。
"""

from __future__ import annotations

import logging
import sys

import structlog

LOGGER_NAME = "fm_actions"


def _renderers(format: str) -> list[structlog.types.Processor]:
    if format == "json":
        return [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    # CI ログにエスケープシーケンスを残さない
    return [structlog.dev.ConsoleRenderer(colors=False)]


def new_logger(level: str = "WARNING", format: str = "text") -> structlog.stdlib.BoundLogger:
    """structlog を設定し、fm_actions ロガーを返す。

    呼び出しごとに stdlib のハンドラーを置き換えるため、何度呼んでもよい。

    Args:
        level: ログレベル名。未知の値は WARNING として扱う
        format: "json" または "text"
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    structlog.configure(
        processors=shared + _renderers(format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.stdlib.get_logger(LOGGER_NAME)
