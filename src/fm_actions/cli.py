"""fm-actions CLI エントリポイント"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console

from . import commands
from .commands import CommandContext
from .exceptions import FmActionsError
from .http_client import HttpFeatureManagementClient
from .logger import new_logger
from .outputs import OutputWriter
from .settings import load_settings

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="fm-actions",
    help="CloudBees Feature Management actions: list environments, manage flags "
    "and read or write per-environment flag configuration.",
    add_completion=False,
    no_args_is_help=True,
)


@dataclass
class CliState:
    """グローバルオプションの保持。"""

    settings_path: Optional[Path] = None
    overrides: dict[str, Any] = field(default_factory=dict)


@app.callback()
def main_callback(
    ctx: typer.Context,
    token: Optional[str] = typer.Option(
        None, "--token", envvar="CLOUDBEES_TOKEN", help="CloudBees Platform API token (required)."
    ),
    org_id: Optional[str] = typer.Option(
        None, "--org-id", envvar="CLOUDBEES_ORG_ID", help="Organization ID (required)."
    ),
    application_name: Optional[str] = typer.Option(
        None, "--application-name", envvar="CLOUDBEES_APPLICATION_NAME", help="Application name."
    ),
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        envvar="CLOUDBEES_API_URL",
        help="CloudBees Platform API URL [default: https://api.cloudbees.io].",
    ),
    use_org_as_app: bool = typer.Option(
        False,
        "--use-org-as-app",
        help="Use organization ID as application ID for flags API (legacy mode).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output."),
    settings: Optional[Path] = typer.Option(
        None, "--settings", help="YAML settings file [default: ~/.fm-actions.yaml]."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level."),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="Log format (text or json)."),
) -> None:
    """CloudBees Feature Management Actions CLI."""
    overrides: dict[str, Any] = {
        "token": token,
        "org_id": org_id,
        "application_name": application_name,
        "api_url": api_url,
        "log_level": log_level,
        "log_format": log_format,
    }
    # 未指定のフラグで設定ファイルの値を上書きしない
    if use_org_as_app:
        overrides["use_org_as_app"] = True
    if verbose:
        overrides["verbose"] = True
    ctx.obj = CliState(settings_path=settings, overrides=overrides)


def _run(ctx: typer.Context, handler: Callable[..., Any], **kwargs: Any) -> None:
    state: CliState = ctx.obj
    console = Console()
    err_console = Console(stderr=True)
    try:
        settings = load_settings(state.settings_path, state.overrides)
        level = settings.log_level
        if settings.verbose and state.overrides.get("log_level") is None:
            level = "DEBUG"
        new_logger(level=level, format=settings.log_format)

        client = HttpFeatureManagementClient(settings.client_config())
        command_ctx = CommandContext(
            client=client,
            outputs=OutputWriter.from_env(console),
            console=console,
            application_name=settings.application_name,
            verbose=settings.verbose,
        )
        handler(command_ctx, **kwargs)
    except FmActionsError as e:
        logger.debug("command failed", command=ctx.info_name, code=e.code)
        err_console.print(f"Error: {e}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(1) from e


@app.command("list-environments")
def list_environments(ctx: typer.Context) -> None:
    """List all environments in the organization."""
    _run(ctx, commands.list_environments)


@app.command("list-flags")
def list_flags(ctx: typer.Context) -> None:
    """List all feature flags of the application."""
    _run(ctx, commands.list_flags)


@app.command("create-flag")
def create_flag(
    ctx: typer.Context,
    flag_name: str = typer.Option("", "--flag-name", "-f", help="Name of the flag to create (required)."),
    flag_type: str = typer.Option(
        "Boolean", "--flag-type", "-t", help="Type of the flag (Boolean, String, Number)."
    ),
    description: str = typer.Option("", "--description", "-d", help="Description of the flag."),
    variants: Optional[str] = typer.Option(
        None,
        "--variants",
        help="Variants as YAML array or comma-separated list (defaults based on type).",
    ),
    is_permanent: bool = typer.Option(False, "--is-permanent", help="Whether the flag is permanent."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate flag details without creating."),
) -> None:
    """Create a new feature flag."""
    _run(
        ctx,
        commands.create_flag,
        flag_name=flag_name,
        flag_type=flag_type,
        description=description,
        variants=variants,
        is_permanent=is_permanent,
        dry_run=dry_run,
    )


@app.command("get-flag-config")
def get_flag_config(
    ctx: typer.Context,
    flag_name: str = typer.Option("", "--flag-name", "-f", help="Flag name (required)."),
    environment_name: str = typer.Option(
        "", "--environment-name", "-e", help="Environment name (required)."
    ),
) -> None:
    """Get the feature flag configuration in an environment."""
    _run(ctx, commands.get_flag_config, flag_name=flag_name, environment_name=environment_name)


@app.command("set-flag-config")
def set_flag_config(
    ctx: typer.Context,
    flag_name: str = typer.Option("", "--flag-name", "-f", help="Flag name (required)."),
    environment_name: str = typer.Option(
        "", "--environment-name", "-e", help="Environment name (required)."
    ),
    enabled: Optional[str] = typer.Option(None, "--enabled", help="Enable/disable the flag (true/false)."),
    default_value: Optional[str] = typer.Option(
        None, "--default-value", help="Default value for the flag (JSON or string)."
    ),
    conditions: Optional[str] = typer.Option(
        None, "--conditions", help="Targeting conditions as JSON or YAML."
    ),
    variants_enabled: Optional[str] = typer.Option(
        None, "--variants-enabled", help="Enable/disable variants (true/false)."
    ),
    stickiness_property: Optional[str] = typer.Option(
        None, "--stickiness-property", help="Stickiness property for consistent evaluation."
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "--config-yaml", help="Configuration fields as a YAML document."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Validate configuration without applying changes."
    ),
) -> None:
    """Set the feature flag configuration in an environment.

    Only the specified fields are sent; individual options win over --config.
    """
    _run(
        ctx,
        commands.set_flag_config,
        flag_name=flag_name,
        environment_name=environment_name,
        document=config,
        enabled=enabled,
        default_value=default_value,
        conditions=conditions,
        variants_enabled=variants_enabled,
        stickiness_property=stickiness_property,
        dry_run=dry_run,
    )


@app.command("delete-flag")
def delete_flag(
    ctx: typer.Context,
    flag_name: str = typer.Option("", "--flag-name", "-f", help="Name of the flag to delete (required)."),
    confirm: bool = typer.Option(
        False, "--confirm", help="Confirm the deletion (required unless using --dry-run)."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview the deletion without deleting."),
) -> None:
    """Delete a feature flag. This action cannot be undone."""
    _run(ctx, commands.delete_flag, flag_name=flag_name, confirm=confirm, dry_run=dry_run)


def main() -> None:
    # .env が無い場合は何もしない
    load_dotenv()
    app()
