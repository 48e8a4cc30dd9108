"""Feature Management API データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

DEFAULT_API_URL = "https://api.cloudbees.io"


class FlagType(StrEnum):
    """フラグタイプ。"""

    BOOLEAN = "Boolean"
    STRING = "String"
    NUMBER = "Number"

    @classmethod
    def default_variants(cls, flag_type: str) -> list[str]:
        """タイプに応じたデフォルトバリアントを返す。未知のタイプは Boolean 扱い。"""
        defaults = {
            "string": ["option1", "option2"],
            "number": ["0", "1"],
        }
        return list(defaults.get(flag_type.lower(), ["true", "false"]))


@dataclass
class Environment:
    """環境。"""

    id: str
    name: str
    resource_id: str = ""
    is_disabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Environment:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            resource_id=data.get("resourceId", ""),
            is_disabled=data.get("isDisabled", False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "resourceId": self.resource_id,
            "isDisabled": self.is_disabled,
        }


@dataclass
class Application:
    """アプリケーション。"""

    id: str
    name: str
    description: str = ""
    endpoint_id: str = ""
    repository_url: str = ""
    default_branch: str = ""
    organization_id: str = ""
    service_type: str = ""
    linked_component_ids: list[str] = field(default_factory=list)
    linked_environment_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Application:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            endpoint_id=data.get("endpointId", ""),
            repository_url=data.get("repositoryUrl", ""),
            default_branch=data.get("defaultBranch", ""),
            organization_id=data.get("organizationId", ""),
            service_type=data.get("serviceType", ""),
            linked_component_ids=list(data.get("linkedComponentIds") or []),
            linked_environment_ids=list(data.get("linkedEnvironmentIds") or []),
        )


@dataclass
class Flag:
    """フィーチャーフラグ。"""

    id: str
    name: str
    flag_type: str = FlagType.BOOLEAN.value
    variants: list[str] = field(default_factory=list)
    description: str = ""
    is_permanent: bool = False
    resource_id: str = ""
    casc_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Flag:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            flag_type=data.get("flagType", ""),
            variants=[str(v) for v in data.get("variants") or []],
            description=data.get("description", ""),
            is_permanent=data.get("isPermanent", False),
            resource_id=data.get("resourceId", ""),
            casc_url=data.get("cascUrl", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "flagType": self.flag_type,
            "variants": list(self.variants),
            "description": self.description,
            "isPermanent": self.is_permanent,
            "resourceId": self.resource_id,
            "cascUrl": self.casc_url,
        }


@dataclass
class CreateFlagRequest:
    """フラグ作成リクエスト。"""

    name: str
    flag_type: str
    variants: list[str] = field(default_factory=list)
    description: str = ""
    is_permanent: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "flagType": self.flag_type,
            "variants": list(self.variants),
            "description": self.description,
            "isPermanent": self.is_permanent,
        }


@dataclass
class FlagConfiguration:
    """環境ごとのフラグ設定。"""

    enabled: bool = False
    default_value: Any = None
    conditions: Any = None
    variants_enabled: bool = False
    stickiness_property: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FlagConfiguration:
        return cls(
            enabled=data.get("enabled", False),
            default_value=data.get("defaultValue"),
            conditions=data.get("conditions"),
            variants_enabled=data.get("variantsEnabled", False),
            stickiness_property=data.get("stickinessProperty") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "enabled": self.enabled,
            "defaultValue": self.default_value,
            "conditions": self.conditions,
            "variantsEnabled": self.variants_enabled,
        }
        if self.stickiness_property:
            result["stickinessProperty"] = self.stickiness_property
        return result


@dataclass
class FlagConfigurationDetail:
    """フラグ情報付きのフラグ設定。"""

    flag_id: str
    configuration: FlagConfiguration
    flag_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "flagId": self.flag_id,
            "flagName": self.flag_name,
            "configuration": self.configuration.to_dict(),
        }


@dataclass
class ClientConfig:
    """Feature Management API クライアント設定。"""

    token: str
    org_id: str
    base_url: str = DEFAULT_API_URL
    use_org_as_app: bool = False
    timeout_seconds: float = 30.0
