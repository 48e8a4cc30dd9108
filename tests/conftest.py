"""共有フィクスチャ"""

from pathlib import Path

import pytest
from fm_actions.commands import CommandContext
from fm_actions.memory import InMemoryFeatureManagementClient
from fm_actions.models import (
    Application,
    Environment,
    Flag,
    FlagConfiguration,
)
from fm_actions.outputs import OutputWriter
from rich.console import Console

APP_ID = "app-1"


@pytest.fixture
def client() -> InMemoryFeatureManagementClient:
    """アプリケーション・環境・フラグを登録済みのインメモリクライアント。"""
    c = InMemoryFeatureManagementClient()
    c.add_application(Application(id=APP_ID, name="web"))
    c.add_application(Application(id="app-2", name="mobile"))
    c.add_environment(Environment(id="env-1", name="production"))
    c.add_environment(Environment(id="env-2", name="staging", is_disabled=True))
    c.add_flag(
        APP_ID,
        Flag(id="flag-1", name="new-checkout", flag_type="Boolean", variants=["true", "false"]),
    )
    c.set_configuration(
        APP_ID,
        "flag-1",
        "env-1",
        FlagConfiguration(enabled=False, default_value=False, stickiness_property="userId"),
    )
    return c


@pytest.fixture
def outputs_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "outputs"
    directory.mkdir()
    return directory


@pytest.fixture
def ctx(client: InMemoryFeatureManagementClient, outputs_dir: Path) -> CommandContext:
    console = Console(record=True, width=200)
    return CommandContext(
        client=client,
        outputs=OutputWriter(outputs_dir, console),
        console=console,
        application_name="web",
    )
