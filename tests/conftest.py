"""Shared test fixtures for prompt-shell tests.

Provides:
- Policy sources with configurable allow/block entries
- A scripted executor that records commands instead of spawning processes
- Invocation contexts wired to both
"""

from pathlib import Path

import pytest

from prompt_shell.config import ShellSettings
from prompt_shell.prompts import CommandContext, SessionAllowlist

from helpers import ScriptedExecutor, StaticPolicy


@pytest.fixture
def policy() -> StaticPolicy:
    """Policy with no entries."""
    return StaticPolicy()


@pytest.fixture
def executor() -> ScriptedExecutor:
    return ScriptedExecutor()


@pytest.fixture
def context(policy: StaticPolicy, tmp_path: Path) -> CommandContext:
    """Context with an empty session allowlist (default-deny evaluation)."""
    return CommandContext(
        args="default args",
        working_dir=tmp_path,
        policy=policy,
        session_allowlist=SessionAllowlist(),
    )


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "shell.yaml"
    path.write_text(
        "allowed_tools:\n"
        "  - ShellTool(ls)\n"
        "blocked_tools:\n"
        "  - run_shell_command(rm)\n"
        "log_level: debug\n"
    )
    return path


@pytest.fixture
def shell_settings() -> ShellSettings:
    return ShellSettings(allowed_tools=["ShellTool(ls)"], blocked_tools=[])
