"""コマンドハンドラーのユニットテスト（インメモリクライアント）"""

import json
from pathlib import Path

import pytest
from fm_actions import commands
from fm_actions.commands import CommandContext
from fm_actions.exceptions import ApiError, EntityNotFoundError, ValidationError
from fm_actions.memory import InMemoryFeatureManagementClient
from fm_actions.outputs import OutputWriter
from rich.console import Console

from conftest import APP_ID


def read_output(outputs_dir: Path, name: str) -> str:
    return (outputs_dir / name).read_text(encoding="utf-8")


def call_names(client: InMemoryFeatureManagementClient) -> list[str]:
    return [c[0] for c in client.calls]


# --- list-environments ---


def test_list_environments_writes_outputs(ctx: CommandContext, outputs_dir: Path) -> None:
    """環境一覧と件数が出力されること。"""
    environments = commands.list_environments(ctx)
    assert len(environments) == 2
    assert read_output(outputs_dir, "environment-count") == "2"
    data = json.loads(read_output(outputs_dir, "environments"))
    assert data[0] == {
        "id": "env-1",
        "name": "production",
        "resourceId": "",
        "isDisabled": False,
    }


def test_list_environments_does_not_need_application(ctx: CommandContext) -> None:
    """アプリケーション名なしでも実行できること。"""
    ctx.application_name = ""
    commands.list_environments(ctx)
    assert call_names(ctx.client) == ["list_environments"]  # type: ignore[arg-type]


def test_list_environments_empty(outputs_dir: Path) -> None:
    console = Console(record=True, width=200)
    ctx = CommandContext(
        client=InMemoryFeatureManagementClient(),
        outputs=OutputWriter(outputs_dir, console),
        console=console,
    )
    assert commands.list_environments(ctx) == []
    assert read_output(outputs_dir, "environment-count") == "0"
    assert read_output(outputs_dir, "environments") == "[]"
    assert "No environments found" in console.export_text()


def test_list_environments_verbose(ctx: CommandContext) -> None:
    ctx.verbose = True
    commands.list_environments(ctx)
    text = ctx.console.export_text()
    assert "- production (ID: env-1, Status: active)" in text
    assert "- staging (ID: env-2, Status: disabled)" in text


# --- list-flags ---


def test_list_flags(ctx: CommandContext, outputs_dir: Path) -> None:
    """アプリケーションを解決してからフラグ一覧を取得すること。"""
    flags = commands.list_flags(ctx)
    assert [f.name for f in flags] == ["new-checkout"]
    assert call_names(ctx.client) == ["list_applications", "list_flags"]  # type: ignore[arg-type]
    assert read_output(outputs_dir, "flag-count") == "1"
    assert json.loads(read_output(outputs_dir, "flags"))[0]["id"] == "flag-1"


def test_list_flags_requires_application(ctx: CommandContext) -> None:
    """アプリケーション名未指定はネットワーク呼び出し前にエラーになること。"""
    ctx.application_name = ""
    with pytest.raises(ValidationError, match="application-name is required"):
        commands.list_flags(ctx)
    assert ctx.client.calls == []  # type: ignore[attr-defined]


def test_list_flags_empty(ctx: CommandContext, outputs_dir: Path) -> None:
    ctx.application_name = "mobile"
    assert commands.list_flags(ctx) == []
    assert read_output(outputs_dir, "flag-count") == "0"
    assert read_output(outputs_dir, "flags") == "[]"
    assert "No flags found" in ctx.console.export_text()


def test_list_flags_unknown_application_stops_chain(ctx: CommandContext) -> None:
    """アプリケーションが見つからない場合は後続の呼び出しを行わないこと。"""
    ctx.application_name = "nope"
    with pytest.raises(EntityNotFoundError, match="application 'nope' not found"):
        commands.list_flags(ctx)
    assert call_names(ctx.client) == ["list_applications"]  # type: ignore[arg-type]


# --- create-flag ---


@pytest.mark.parametrize(
    ("flag_type", "expected"),
    [
        ("Boolean", ["true", "false"]),
        ("String", ["option1", "option2"]),
        ("Number", ["0", "1"]),
        ("number", ["0", "1"]),
        ("Json", ["true", "false"]),
    ],
)
def test_create_flag_default_variants(
    ctx: CommandContext, flag_type: str, expected: list[str]
) -> None:
    """バリアント未指定時はタイプに応じたデフォルトが使われること。"""
    flag = commands.create_flag(ctx, flag_name="promo", flag_type=flag_type)
    assert flag is not None
    assert flag.variants == expected


def test_create_flag_with_variants(ctx: CommandContext, outputs_dir: Path) -> None:
    flag = commands.create_flag(
        ctx,
        flag_name="banner",
        flag_type="String",
        description="Banner colour",
        variants="blue, green , red",
        is_permanent=True,
    )
    assert flag is not None
    assert flag.variants == ["blue", "green", "red"]
    assert read_output(outputs_dir, "flag-id") == flag.id
    assert read_output(outputs_dir, "flag-name") == "banner"
    assert read_output(outputs_dir, "flag-type") == "String"
    assert read_output(outputs_dir, "success") == "true"
    created = json.loads(read_output(outputs_dir, "flag"))
    assert created["isPermanent"] is True
    assert created["description"] == "Banner colour"


def test_create_flag_requires_name(ctx: CommandContext) -> None:
    with pytest.raises(ValidationError, match="flag-name is required"):
        commands.create_flag(ctx, flag_name="")
    assert ctx.client.calls == []  # type: ignore[attr-defined]


def test_create_flag_dry_run_issues_no_write(ctx: CommandContext, outputs_dir: Path) -> None:
    """dry-run では解決のみ行い、作成呼び出しを行わないこと。"""
    result = commands.create_flag(ctx, flag_name="promo", flag_type="Number", dry_run=True)
    assert result is None
    assert ctx.client.mutations == []  # type: ignore[attr-defined]
    assert call_names(ctx.client) == ["list_applications"]  # type: ignore[arg-type]
    assert list(outputs_dir.iterdir()) == []
    text = ctx.console.export_text()
    assert "DRY RUN: Would create flag 'promo'" in text
    assert "Variants: 0, 1" in text


def test_create_flag_dry_run_still_resolves(ctx: CommandContext) -> None:
    """dry-run でも未解決の名前はエラーになること。"""
    ctx.application_name = "nope"
    with pytest.raises(EntityNotFoundError):
        commands.create_flag(ctx, flag_name="promo", dry_run=True)


def test_create_flag_api_error_propagates(ctx: CommandContext) -> None:
    """API エラーはステータスとボディを保持したまま伝播すること。"""
    with pytest.raises(ApiError) as exc_info:
        commands.create_flag(ctx, flag_name="new-checkout")
    assert exc_info.value.status_code == 409
    assert "already exists" in exc_info.value.body


# --- get-flag-config ---


def test_get_flag_config(ctx: CommandContext, outputs_dir: Path) -> None:
    """アプリケーション → フラグ → 環境の順に解決して設定を取得すること。"""
    detail = commands.get_flag_config(ctx, flag_name="new-checkout", environment_name="production")
    assert detail.configuration.stickiness_property == "userId"
    assert call_names(ctx.client) == [  # type: ignore[arg-type]
        "list_applications",
        "get_flag_by_name",
        "list_environments",
        "get_flag_configuration",
    ]
    assert read_output(outputs_dir, "flag-id") == "flag-1"
    assert read_output(outputs_dir, "environment-id") == "env-1"
    assert read_output(outputs_dir, "enabled") == "false"
    assert read_output(outputs_dir, "default-value") == "false"
    flag_config = json.loads(read_output(outputs_dir, "flag-config"))
    assert flag_config["flagId"] == "flag-1"
    assert flag_config["flagName"] == "new-checkout"
    assert flag_config["configuration"]["stickinessProperty"] == "userId"


def test_get_flag_config_null_default(ctx: CommandContext, outputs_dir: Path) -> None:
    """既定値がない場合は null が出力されること。"""
    commands.get_flag_config(ctx, flag_name="new-checkout", environment_name="staging")
    assert read_output(outputs_dir, "default-value") == "null"


def test_get_flag_config_unknown_flag_stops_chain(ctx: CommandContext) -> None:
    with pytest.raises(EntityNotFoundError, match="flag 'ghost' not found"):
        commands.get_flag_config(ctx, flag_name="ghost", environment_name="production")
    assert call_names(ctx.client) == ["list_applications", "get_flag_by_name"]  # type: ignore[arg-type]


def test_get_flag_config_unknown_environment_stops_chain(ctx: CommandContext) -> None:
    with pytest.raises(EntityNotFoundError, match="environment 'qa' not found"):
        commands.get_flag_config(ctx, flag_name="new-checkout", environment_name="qa")
    assert "get_flag_configuration" not in call_names(ctx.client)  # type: ignore[arg-type]


def test_get_flag_config_requires_environment(ctx: CommandContext) -> None:
    with pytest.raises(ValidationError, match="environment-name is required"):
        commands.get_flag_config(ctx, flag_name="new-checkout", environment_name="")
    assert ctx.client.calls == []  # type: ignore[attr-defined]


# --- set-flag-config ---


def test_set_flag_config(ctx: CommandContext, outputs_dir: Path) -> None:
    """個別指定がドキュメントより優先され、その内容が送信されること。"""
    client: InMemoryFeatureManagementClient = ctx.client  # type: ignore[assignment]
    changes = commands.set_flag_config(
        ctx,
        flag_name="new-checkout",
        environment_name="production",
        document="enabled: true\ndefaultValue: x\n",
        enabled="false",
    )
    assert changes == {"enabled": False, "defaultValue": "x"}
    assert client.mutations == [
        ("set_flag_configuration", (APP_ID, "flag-1", "env-1", {"enabled": False, "defaultValue": "x"}))
    ]
    stored = client.configuration(APP_ID, "flag-1", "env-1")
    assert stored["defaultValue"] == "x"
    assert stored["stickinessProperty"] == "userId"
    assert read_output(outputs_dir, "application-id") == APP_ID
    assert read_output(outputs_dir, "application-name") == "web"
    assert read_output(outputs_dir, "environment-name") == "production"
    assert read_output(outputs_dir, "enabled") == "false"
    assert read_output(outputs_dir, "success") == "true"
    assert json.loads(read_output(outputs_dir, "configuration")) == changes


def test_set_flag_config_without_enabled_skips_enabled_output(
    ctx: CommandContext, outputs_dir: Path
) -> None:
    commands.set_flag_config(
        ctx, flag_name="new-checkout", environment_name="production", default_value="42"
    )
    assert not (outputs_dir / "enabled").exists()
    assert json.loads(read_output(outputs_dir, "configuration")) == {"defaultValue": 42}


def test_get_then_empty_set_makes_no_call(ctx: CommandContext) -> None:
    """設定取得直後に空の変更で設定すると、通信なしで検証エラーになること。"""
    client: InMemoryFeatureManagementClient = ctx.client  # type: ignore[assignment]
    commands.get_flag_config(ctx, flag_name="new-checkout", environment_name="production")
    calls_before = len(client.calls)
    with pytest.raises(ValidationError, match="no configuration changes specified"):
        commands.set_flag_config(ctx, flag_name="new-checkout", environment_name="production")
    assert len(client.calls) == calls_before
    assert client.mutations == []


def test_set_flag_config_dry_run_issues_no_write(ctx: CommandContext, outputs_dir: Path) -> None:
    client: InMemoryFeatureManagementClient = ctx.client  # type: ignore[assignment]
    changes = commands.set_flag_config(
        ctx,
        flag_name="new-checkout",
        environment_name="production",
        enabled="true",
        dry_run=True,
    )
    assert changes == {"enabled": True}
    assert client.mutations == []
    assert "get_flag_by_name" in call_names(client)
    assert list(outputs_dir.iterdir()) == []
    text = ctx.console.export_text()
    assert "DRY RUN: Would update flag 'new-checkout' in environment 'production'" in text
    assert '"enabled": true' in text


def test_set_flag_config_dry_run_date_value(ctx: CommandContext) -> None:
    """日付らしい既定値でも dry-run が変更内容を表示できること。"""
    changes = commands.set_flag_config(
        ctx,
        flag_name="new-checkout",
        environment_name="production",
        document="defaultValue: 2024-01-01\n",
        dry_run=True,
    )
    assert changes == {"defaultValue": "2024-01-01"}
    assert '"defaultValue": "2024-01-01"' in ctx.console.export_text()


def test_set_flag_config_date_value_is_sent_as_text(
    ctx: CommandContext, outputs_dir: Path
) -> None:
    client: InMemoryFeatureManagementClient = ctx.client  # type: ignore[assignment]
    commands.set_flag_config(
        ctx,
        flag_name="new-checkout",
        environment_name="production",
        document="defaultValue: 2024-01-01\n",
    )
    assert client.configuration(APP_ID, "flag-1", "env-1")["defaultValue"] == "2024-01-01"
    assert read_output(outputs_dir, "configuration") == '{"defaultValue":"2024-01-01"}'


def test_set_flag_config_invalid_enabled(ctx: CommandContext) -> None:
    with pytest.raises(ValidationError, match="invalid enabled value"):
        commands.set_flag_config(
            ctx, flag_name="new-checkout", environment_name="production", enabled="on"
        )
    assert ctx.client.calls == []  # type: ignore[attr-defined]


# --- delete-flag ---


def test_delete_flag_requires_confirmation(ctx: CommandContext) -> None:
    """--confirm も --dry-run もない場合は一切通信しないこと。"""
    with pytest.raises(ValidationError, match="--confirm"):
        commands.delete_flag(ctx, flag_name="new-checkout")
    assert ctx.client.calls == []  # type: ignore[attr-defined]


def test_delete_flag_dry_run_issues_no_write(ctx: CommandContext, outputs_dir: Path) -> None:
    client: InMemoryFeatureManagementClient = ctx.client  # type: ignore[assignment]
    assert commands.delete_flag(ctx, flag_name="new-checkout", dry_run=True) is False
    assert client.mutations == []
    assert call_names(client) == ["list_applications", "get_flag_by_name"]
    assert list(outputs_dir.iterdir()) == []
    assert "DRY RUN: Would delete flag 'new-checkout' (ID: flag-1)" in ctx.console.export_text()


def test_delete_flag(ctx: CommandContext, outputs_dir: Path) -> None:
    client: InMemoryFeatureManagementClient = ctx.client  # type: ignore[assignment]
    assert commands.delete_flag(ctx, flag_name="new-checkout", confirm=True) is True
    assert client.mutations == [("delete_flag", (APP_ID, "flag-1"))]
    assert read_output(outputs_dir, "deleted") == "true"
    assert read_output(outputs_dir, "success") == "true"
    assert client.list_flags(APP_ID) == []
    assert "Flag 'new-checkout' deleted successfully" in ctx.console.export_text()


def test_delete_enabled_flag_surfaces_server_error(ctx: CommandContext) -> None:
    """有効な環境があるフラグの削除はサーバー側のエラーがそのまま伝わること。"""
    commands.set_flag_config(
        ctx, flag_name="new-checkout", environment_name="production", enabled="true"
    )
    with pytest.raises(ApiError) as exc_info:
        commands.delete_flag(ctx, flag_name="new-checkout", confirm=True)
    assert exc_info.value.status_code == 400
