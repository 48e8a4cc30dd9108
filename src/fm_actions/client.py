"""FeatureManagementClient 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .models import (
    Application,
    CreateFlagRequest,
    Environment,
    Flag,
    FlagConfigurationDetail,
)


class FeatureManagementClient(ABC):
    """Feature Management API クライアント抽象基底クラス。"""

    @abstractmethod
    def list_environments(self) -> list[Environment]:
        """組織の環境一覧を取得する。"""
        ...

    @abstractmethod
    def list_applications(self) -> list[Application]:
        """組織のアプリケーション一覧を取得する。"""
        ...

    @abstractmethod
    def get_flag_by_name(self, application_id: str, flag_name: str) -> Flag:
        """フラグを名前で取得する。"""
        ...

    @abstractmethod
    def list_flags(self, application_id: str) -> list[Flag]:
        """アプリケーションのフラグ一覧を取得する。"""
        ...

    @abstractmethod
    def create_flag(self, application_id: str, request: CreateFlagRequest) -> Flag:
        """フラグを作成する。"""
        ...

    @abstractmethod
    def delete_flag(self, application_id: str, flag_id: str) -> None:
        """フラグを削除する。"""
        ...

    @abstractmethod
    def get_flag_configuration(
        self, application_id: str, flag_id: str, environment_id: str
    ) -> FlagConfigurationDetail:
        """環境ごとのフラグ設定を取得する。"""
        ...

    @abstractmethod
    def set_flag_configuration(
        self,
        application_id: str,
        flag_id: str,
        environment_id: str,
        changes: dict[str, Any],
    ) -> None:
        """指定フィールドのみを含むフラグ設定を送信する。

        API は PUT を部分更新として扱うため、changes に含まれないフィールドは
        サーバー側で変更されない。
        """
        ...
