"""InMemoryFeatureManagementClient 実装"""

from __future__ import annotations

import uuid
from typing import Any

from .client import FeatureManagementClient
from .exceptions import ApiError
from .models import (
    Application,
    CreateFlagRequest,
    Environment,
    Flag,
    FlagConfiguration,
    FlagConfigurationDetail,
)

MUTATING_OPERATIONS = frozenset({"create_flag", "delete_flag", "set_flag_configuration"})


class InMemoryFeatureManagementClient(FeatureManagementClient):
    """テスト用インメモリ Feature Management クライアント。

    すべての呼び出しを calls に記録する。
    """

    def __init__(self) -> None:
        self._applications: list[Application] = []
        self._environments: list[Environment] = []
        self._flags: dict[str, list[Flag]] = {}
        self._configurations: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def mutations(self) -> list[tuple[str, tuple[Any, ...]]]:
        """変更系の呼び出しのみを返す。"""
        return [c for c in self.calls if c[0] in MUTATING_OPERATIONS]

    def add_application(self, application: Application) -> None:
        self._applications.append(application)

    def add_environment(self, environment: Environment) -> None:
        self._environments.append(environment)

    def add_flag(self, application_id: str, flag: Flag) -> None:
        self._flags.setdefault(application_id, []).append(flag)

    def set_configuration(
        self,
        application_id: str,
        flag_id: str,
        environment_id: str,
        configuration: FlagConfiguration,
    ) -> None:
        """テスト用に設定を直接登録する。"""
        key = (application_id, flag_id, environment_id)
        self._configurations[key] = configuration.to_dict()

    def configuration(
        self, application_id: str, flag_id: str, environment_id: str
    ) -> dict[str, Any]:
        return dict(self._configurations.get((application_id, flag_id, environment_id), {}))

    def _find_flag(self, application_id: str, predicate: Any) -> Flag | None:
        for flag in self._flags.get(application_id, []):
            if predicate(flag):
                return flag
        return None

    def list_environments(self) -> list[Environment]:
        self.calls.append(("list_environments", ()))
        return list(self._environments)

    def list_applications(self) -> list[Application]:
        self.calls.append(("list_applications", ()))
        return list(self._applications)

    def get_flag_by_name(self, application_id: str, flag_name: str) -> Flag:
        self.calls.append(("get_flag_by_name", (application_id, flag_name)))
        flag = self._find_flag(application_id, lambda f: f.name == flag_name)
        if flag is None:
            raise ApiError(404, '{"message":"flag not found"}')
        return flag

    def list_flags(self, application_id: str) -> list[Flag]:
        self.calls.append(("list_flags", (application_id,)))
        return list(self._flags.get(application_id, []))

    def create_flag(self, application_id: str, request: CreateFlagRequest) -> Flag:
        self.calls.append(("create_flag", (application_id, request)))
        if self._find_flag(application_id, lambda f: f.name == request.name) is not None:
            raise ApiError(409, '{"message":"flag already exists"}')
        flag = Flag(
            id=str(uuid.uuid4()),
            name=request.name,
            flag_type=request.flag_type,
            variants=list(request.variants),
            description=request.description,
            is_permanent=request.is_permanent,
        )
        self.add_flag(application_id, flag)
        return flag

    def delete_flag(self, application_id: str, flag_id: str) -> None:
        self.calls.append(("delete_flag", (application_id, flag_id)))
        flag = self._find_flag(application_id, lambda f: f.id == flag_id)
        if flag is None:
            raise ApiError(404, '{"message":"flag not found"}')
        enabled_somewhere = any(
            key[0] == application_id and key[1] == flag_id and config.get("enabled")
            for key, config in self._configurations.items()
        )
        if enabled_somewhere:
            raise ApiError(400, '{"message":"flag is enabled in at least one environment"}')
        self._flags[application_id].remove(flag)

    def get_flag_configuration(
        self, application_id: str, flag_id: str, environment_id: str
    ) -> FlagConfigurationDetail:
        self.calls.append(("get_flag_configuration", (application_id, flag_id, environment_id)))
        data = self._configurations.get((application_id, flag_id, environment_id), {})
        return FlagConfigurationDetail(
            flag_id=flag_id,
            configuration=FlagConfiguration.from_dict(data),
        )

    def set_flag_configuration(
        self,
        application_id: str,
        flag_id: str,
        environment_id: str,
        changes: dict[str, Any],
    ) -> None:
        self.calls.append(
            ("set_flag_configuration", (application_id, flag_id, environment_id, dict(changes)))
        )
        key = (application_id, flag_id, environment_id)
        current = self._configurations.setdefault(key, FlagConfiguration().to_dict())
        current.update(changes)
