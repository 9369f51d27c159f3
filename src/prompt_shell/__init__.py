"""Prompt Shell - command templates with embedded shell commands.

Resolves user-defined command templates for agent CLIs:

- ``{{args}}`` placeholders filled with the invocation's arguments
- ``!{command}`` spans replaced with the output of running ``command``
- Layered allow/block policy with a per-session allowlist
- Cross-platform shell invocation, escaping and cancellation

Usage:
    from prompt_shell import CommandContext, ShellProcessor, ShellSettings

    processor = ShellProcessor("status")
    context = CommandContext(args="--short", policy=ShellSettings())
    prompt = await processor.process("Status: !{git status {{args}}}", context)
"""

from prompt_shell.config import ShellSettings
from prompt_shell.logging import configure_logging, get_logger
from prompt_shell.prompts import (
    CommandContext,
    ConfigurationMissingError,
    ConfirmationRequiredError,
    HardDenialError,
    PromptProcessingError,
    SessionAllowlist,
    ShellExecutionError,
    ShellInjectionParseError,
    ShellPermissionError,
    ShellProcessor,
)

__version__ = "0.1.0"

__all__ = [
    "ShellSettings",
    "configure_logging",
    "get_logger",
    "CommandContext",
    "SessionAllowlist",
    "ShellProcessor",
    "PromptProcessingError",
    "ShellInjectionParseError",
    "ConfigurationMissingError",
    "ShellPermissionError",
    "ConfirmationRequiredError",
    "HardDenialError",
    "ShellExecutionError",
]
