"""Feature Management HTTP REST クライアント実装"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from .client import FeatureManagementClient
from .exceptions import (
    ApiError,
    FmActionsError,
    FmActionsErrorCodes,
    ValidationError,
)
from .models import (
    Application,
    ClientConfig,
    CreateFlagRequest,
    Environment,
    Flag,
    FlagConfiguration,
    FlagConfigurationDetail,
)

logger = structlog.get_logger(__name__)


class HttpFeatureManagementClient(FeatureManagementClient):
    """httpx を使った Feature Management HTTP REST クライアント。"""

    def __init__(self, config: ClientConfig) -> None:
        if not config.token:
            raise ValidationError("token is required")
        if not config.org_id:
            raise ValidationError("organization ID is required")
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._headers: dict[str, str] = {
            "Authorization": f"Bearer {config.token}",
            "Content-Type": "application/json",
        }

    @property
    def use_org_as_app(self) -> bool:
        return self._config.use_org_as_app

    def _make_sync_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._config.timeout_seconds,
        )

    def _app_id(self, application_id: str) -> str:
        # レガシー API では組織 ID をアプリケーション ID として使う
        if self._config.use_org_as_app:
            return self._config.org_id
        return application_id

    def _handle_error(self, resp: httpx.Response) -> None:
        if not resp.is_success:
            raise ApiError(resp.status_code, resp.text)

    def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """リクエストを送信し、デコード済みのレスポンスボディを返す。"""
        logger.debug("api request", method=method, path=path)
        if body is not None:
            logger.debug("api request body", body=body)
        try:
            with self._make_sync_client() as client:
                resp = client.request(method, path, json=body, params=params)
            logger.debug("api response", method=method, path=path, status=resp.status_code)
            self._handle_error(resp)
            if not resp.content:
                return {}
            data: dict[str, Any] = resp.json()
            return data
        except FmActionsError:
            raise
        except Exception as e:
            raise FmActionsError(
                code=FmActionsErrorCodes.TRANSPORT_ERROR,
                message=f"{method} {path} failed: {e}",
                cause=e,
            ) from e

    def list_environments(self) -> list[Environment]:
        data = self._request("GET", f"/v2/organizations/{self._config.org_id}/environments")
        return [Environment.from_dict(e) for e in data.get("environments") or []]

    def list_applications(self) -> list[Application]:
        data = self._request(
            "GET",
            f"/v1/organizations/{self._config.org_id}/services",
            params={"typeFilter": "APPLICATION_FILTER"},
        )
        return [Application.from_dict(a) for a in data.get("service") or []]

    def get_flag_by_name(self, application_id: str, flag_name: str) -> Flag:
        app_id = self._app_id(application_id)
        data = self._request(
            "GET", f"/v2/applications/{app_id}/flags/by-name/{quote(flag_name, safe='')}"
        )
        return Flag.from_dict(data.get("flag") or {})

    def list_flags(self, application_id: str) -> list[Flag]:
        app_id = self._app_id(application_id)
        data = self._request("GET", f"/v2/applications/{app_id}/flags")
        return [Flag.from_dict(f) for f in data.get("flags") or []]

    def create_flag(self, application_id: str, request: CreateFlagRequest) -> Flag:
        app_id = self._app_id(application_id)
        data = self._request("POST", f"/v2/applications/{app_id}/flags", body=request.to_dict())
        return Flag.from_dict(data.get("flag") or {})

    def delete_flag(self, application_id: str, flag_id: str) -> None:
        app_id = self._app_id(application_id)
        self._request("DELETE", f"/v2/applications/{app_id}/flags/{flag_id}")

    def _configuration_path(self, application_id: str, flag_id: str, environment_id: str) -> str:
        app_id = self._app_id(application_id)
        return f"/v2/applications/{app_id}/flags/{flag_id}/configuration/environments/{environment_id}"

    def get_flag_configuration(
        self, application_id: str, flag_id: str, environment_id: str
    ) -> FlagConfigurationDetail:
        data = self._request(
            "GET", self._configuration_path(application_id, flag_id, environment_id)
        )
        return FlagConfigurationDetail(
            flag_id=flag_id,
            configuration=FlagConfiguration.from_dict(data.get("configuration") or {}),
        )

    def set_flag_configuration(
        self,
        application_id: str,
        flag_id: str,
        environment_id: str,
        changes: dict[str, Any],
    ) -> None:
        self._request(
            "PUT",
            self._configuration_path(application_id, flag_id, environment_id),
            body=changes,
        )
