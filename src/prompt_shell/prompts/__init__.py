"""Command template processing."""

from prompt_shell.prompts.context import CommandContext, SessionAllowlist
from prompt_shell.prompts.errors import (
    ConfigurationMissingError,
    ConfirmationRequiredError,
    HardDenialError,
    PromptProcessingError,
    ShellExecutionError,
    ShellInjectionParseError,
    ShellPermissionError,
)
from prompt_shell.prompts.shell_processor import ShellProcessor, extract_injections

__all__ = [
    "CommandContext",
    "SessionAllowlist",
    "ShellProcessor",
    "extract_injections",
    "PromptProcessingError",
    "ShellInjectionParseError",
    "ConfigurationMissingError",
    "ShellPermissionError",
    "ConfirmationRequiredError",
    "HardDenialError",
    "ShellExecutionError",
]
