"""コマンドハンドラー

各ハンドラーは入力検証 → 名前解決 → 読み取り/変更 → 出力書き込みの順に処理する。
入力検証はネットワーク呼び出しより前に行う。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import structlog
from rich.console import Console

from .client import FeatureManagementClient
from .exceptions import ValidationError
from .merger import merge_configuration
from .models import (
    CreateFlagRequest,
    Environment,
    Flag,
    FlagConfigurationDetail,
    FlagType,
)
from .outputs import OutputWriter, to_json
from .parsing import parse_variants
from .resolver import EntityResolver

logger = structlog.get_logger(__name__)


@dataclass
class CommandContext:
    """コマンド実行コンテキスト。"""

    client: FeatureManagementClient
    outputs: OutputWriter
    console: Console = field(default_factory=Console)
    application_name: str = ""
    verbose: bool = False

    @property
    def resolver(self) -> EntityResolver:
        return EntityResolver(self.client)

    def echo(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)


def _require(value: str | None, option: str) -> str:
    if not value:
        raise ValidationError(f"{option} is required")
    return value


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def list_environments(ctx: CommandContext) -> list[Environment]:
    """組織の環境一覧を出力する。"""
    environments = ctx.client.list_environments()

    if not environments:
        ctx.echo("No environments found")
        ctx.outputs.write("environment-count", "0")
        ctx.outputs.write("environments", "[]")
        return environments

    ctx.outputs.write("environment-count", str(len(environments)))
    ctx.outputs.write("environments", to_json([e.to_dict() for e in environments]))

    if ctx.verbose:
        ctx.echo(f"Found {len(environments)} environments:")
        for env in environments:
            status = "disabled" if env.is_disabled else "active"
            ctx.echo(f"- {env.name} (ID: {env.id}, Status: {status})")
    return environments


def list_flags(ctx: CommandContext) -> list[Flag]:
    """アプリケーションのフラグ一覧を出力する。"""
    application_name = _require(ctx.application_name, "application-name")

    application = ctx.resolver.resolve_application(application_name)
    flags = ctx.client.list_flags(application.id)

    if not flags:
        ctx.echo("No flags found")
        ctx.outputs.write("flag-count", "0")
        ctx.outputs.write("flags", "[]")
        return flags

    ctx.outputs.write("flag-count", str(len(flags)))
    ctx.outputs.write("flags", to_json([f.to_dict() for f in flags]))

    if ctx.verbose:
        ctx.echo(f"Found {len(flags)} flags:")
        for flag in flags:
            permanent = "permanent" if flag.is_permanent else "temporary"
            ctx.echo(f"- {flag.name} (ID: {flag.id}, Type: {flag.flag_type}, {permanent})")
            if flag.description:
                ctx.echo(f"  Description: {flag.description}")
    return flags


def create_flag(
    ctx: CommandContext,
    flag_name: str,
    flag_type: str = FlagType.BOOLEAN.value,
    description: str = "",
    variants: str | None = None,
    is_permanent: bool = False,
    dry_run: bool = False,
) -> Flag | None:
    """フラグを作成する。dry_run の場合は作成内容を表示して None を返す。"""
    _require(flag_name, "flag-name")
    _require(flag_type, "flag-type")
    application_name = _require(ctx.application_name, "application-name")

    if variants:
        variant_list = parse_variants(variants)
    else:
        variant_list = FlagType.default_variants(flag_type)

    application = ctx.resolver.resolve_application(application_name)
    request = CreateFlagRequest(
        name=flag_name,
        flag_type=flag_type,
        variants=variant_list,
        description=description,
        is_permanent=is_permanent,
    )

    if dry_run:
        ctx.echo(f"DRY RUN: Would create flag '{flag_name}' in application '{application.name}'")
        ctx.echo(f"Type: {flag_type}")
        ctx.echo(f"Description: {description}")
        ctx.echo(f"Variants: {', '.join(variant_list)}")
        ctx.echo(f"Permanent: {_bool_text(is_permanent)}")
        return None

    flag = ctx.client.create_flag(application.id, request)
    logger.info("flag created", flag_id=flag.id, flag_name=flag.name)

    ctx.outputs.write("flag-id", flag.id)
    ctx.outputs.write("flag-name", flag.name)
    ctx.outputs.write("flag-type", flag.flag_type)
    ctx.outputs.write("flag", to_json(flag.to_dict()))
    ctx.outputs.write("success", "true")

    if ctx.verbose:
        ctx.echo(f"Successfully created flag: {flag.name} (ID: {flag.id})")
        ctx.echo(f"Type: {flag.flag_type}")
        if flag.description:
            ctx.echo(f"Description: {flag.description}")
        ctx.echo(f"Variants: {', '.join(flag.variants)}")
        ctx.echo(f"Permanent: {_bool_text(flag.is_permanent)}")
    return flag


def get_flag_config(
    ctx: CommandContext,
    flag_name: str,
    environment_name: str,
) -> FlagConfigurationDetail:
    """環境ごとのフラグ設定を出力する。"""
    _require(flag_name, "flag-name")
    _require(environment_name, "environment-name")
    application_name = _require(ctx.application_name, "application-name")

    resolver = ctx.resolver
    application = resolver.resolve_application(application_name)
    flag = resolver.resolve_flag(application.id, flag_name)
    environment = resolver.resolve_environment(environment_name)

    detail = ctx.client.get_flag_configuration(application.id, flag.id, environment.id)
    detail.flag_name = flag.name
    config = detail.configuration

    ctx.outputs.write("flag-config", to_json(detail.to_dict()))
    ctx.outputs.write("flag-id", flag.id)
    ctx.outputs.write("environment-id", environment.id)
    ctx.outputs.write("enabled", _bool_text(config.enabled))
    ctx.outputs.write("default-value", to_json(config.default_value))

    if ctx.verbose:
        ctx.echo(f"Flag: {flag.name} (ID: {flag.id})")
        ctx.echo(f"Environment: {environment.name} (ID: {environment.id})")
        ctx.echo(f"Enabled: {_bool_text(config.enabled)}")
        if config.default_value is not None:
            ctx.echo(f"Default Value: {to_json(config.default_value)}")
        ctx.echo(f"Variants Enabled: {_bool_text(config.variants_enabled)}")
        if config.stickiness_property:
            ctx.echo(f"Stickiness Property: {config.stickiness_property}")
    return detail


def set_flag_config(
    ctx: CommandContext,
    flag_name: str,
    environment_name: str,
    document: str | None = None,
    enabled: str | None = None,
    default_value: str | None = None,
    conditions: str | None = None,
    variants_enabled: str | None = None,
    stickiness_property: str | None = None,
    dry_run: bool = False,
) -> dict[str, Any]:
    """指定フィールドのみでフラグ設定を部分更新し、送信した変更内容を返す。"""
    _require(flag_name, "flag-name")
    _require(environment_name, "environment-name")
    application_name = _require(ctx.application_name, "application-name")

    changes = merge_configuration(
        document,
        enabled=enabled,
        default_value=default_value,
        conditions=conditions,
        variants_enabled=variants_enabled,
        stickiness_property=stickiness_property,
    )

    resolver = ctx.resolver
    application = resolver.resolve_application(application_name)
    flag = resolver.resolve_flag(application.id, flag_name)
    environment = resolver.resolve_environment(environment_name)

    if dry_run:
        ctx.echo(f"DRY RUN: Would update flag '{flag.name}' in environment '{environment.name}'")
        ctx.echo(f"Configuration changes:\n{json.dumps(changes, indent=2, ensure_ascii=False)}")
        return changes

    ctx.client.set_flag_configuration(application.id, flag.id, environment.id, changes)
    logger.info(
        "flag configuration updated",
        flag_id=flag.id,
        environment_id=environment.id,
        fields=sorted(changes),
    )

    ctx.outputs.write("flag-id", flag.id)
    ctx.outputs.write("flag-name", flag.name)
    ctx.outputs.write("application-id", application.id)
    ctx.outputs.write("application-name", application.name)
    ctx.outputs.write("environment-id", environment.id)
    ctx.outputs.write("environment-name", environment.name)
    ctx.outputs.write("configuration", to_json(changes))
    if isinstance(changes.get("enabled"), bool):
        ctx.outputs.write("enabled", _bool_text(changes["enabled"]))
    ctx.outputs.write("success", "true")

    if ctx.verbose:
        ctx.echo(f"Successfully updated flag: {flag.name} (ID: {flag.id})")
        ctx.echo(f"Environment: {environment.name} (ID: {environment.id})")
        ctx.echo("Applied changes:")
        for key, value in changes.items():
            ctx.echo(f"  {key}: {to_json(value)}")
    return changes


def delete_flag(
    ctx: CommandContext,
    flag_name: str,
    confirm: bool = False,
    dry_run: bool = False,
) -> bool:
    """フラグを削除する。confirm も dry_run も指定されていなければ何もせずエラー。"""
    _require(flag_name, "flag-name")
    if not confirm and not dry_run:
        raise ValidationError(
            "this action will permanently delete the flag. "
            "Use --confirm to proceed or --dry-run to preview"
        )
    application_name = _require(ctx.application_name, "application-name")

    resolver = ctx.resolver
    application = resolver.resolve_application(application_name)
    flag = resolver.resolve_flag(application.id, flag_name)

    if dry_run:
        ctx.echo(f"DRY RUN: Would delete flag '{flag.name}' (ID: {flag.id})")
        ctx.echo(f"Type: {flag.flag_type}")
        if flag.description:
            ctx.echo(f"Description: {flag.description}")
        ctx.echo(f"Permanent: {_bool_text(flag.is_permanent)}")
        return False

    ctx.client.delete_flag(application.id, flag.id)
    logger.info("flag deleted", flag_id=flag.id, flag_name=flag.name)

    ctx.outputs.write("flag-id", flag.id)
    ctx.outputs.write("flag-name", flag.name)
    ctx.outputs.write("deleted", "true")
    ctx.outputs.write("success", "true")

    if ctx.verbose:
        ctx.echo(f"Successfully deleted flag: {flag.name} (ID: {flag.id})")
    else:
        ctx.echo(f"Flag '{flag.name}' deleted successfully")
    return True
