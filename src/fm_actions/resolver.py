"""名前から API 内部 ID への解決"""

from __future__ import annotations

import structlog

from .client import FeatureManagementClient
from .exceptions import ApiError, EntityNotFoundError
from .models import Application, Environment, Flag

logger = structlog.get_logger(__name__)


class EntityResolver:
    """アプリケーション・フラグ・環境を名前で解決する。

    解決結果はキャッシュしない。呼び出しごとに API へ問い合わせる。
    """

    def __init__(self, client: FeatureManagementClient) -> None:
        self._client = client

    def resolve_application(self, name: str) -> Application:
        """アプリケーション一覧を走査し、名前が完全一致する最初の要素を返す。

        同名のアプリケーションが複数ある場合は API の返却順で先頭のものが選ばれる。
        """
        for application in self._client.list_applications():
            if application.name == name:
                logger.debug("resolved application", name=name, id=application.id)
                return application
        raise EntityNotFoundError("application", name)

    def resolve_flag(self, application_id: str, name: str) -> Flag:
        """by-name API でフラグを取得する。404 は未検出として扱う。"""
        try:
            flag = self._client.get_flag_by_name(application_id, name)
        except ApiError as e:
            if e.status_code == 404:
                raise EntityNotFoundError("flag", name, detail=e.message, cause=e) from e
            raise
        logger.debug("resolved flag", name=name, id=flag.id)
        return flag

    def resolve_environment(self, name: str) -> Environment:
        """環境一覧を走査し、名前が完全一致する環境を返す。"""
        for environment in self._client.list_environments():
            if environment.name == name:
                logger.debug("resolved environment", name=name, id=environment.id)
                return environment
        raise EntityNotFoundError("environment", name)
