"""Errors raised while resolving a command template.

Every error here is fatal for the ``process`` call that raised it; nothing
in the template has executed unless noted otherwise. Only
ConfirmationRequiredError is recoverable: obtain consent, add the commands
to the session allowlist and process the template again.
"""


class PromptProcessingError(Exception):
    """Base class for template processing failures."""


class ShellInjectionParseError(PromptProcessingError):
    """A ``!{`` span is never closed."""

    def __init__(self, message: str, offset: int):
        super().__init__(message)
        self.offset = offset


class ConfigurationMissingError(PromptProcessingError):
    """No policy source is available to check commands against."""


class ShellPermissionError(PromptProcessingError):
    """One or more commands may not run.

    Attributes:
        commands: Resolved command text of every disallowed command.
        is_hard_denial: True when no confirmation can allow the commands.
    """

    is_hard_denial = False

    def __init__(self, message: str, commands: list[str]):
        super().__init__(message)
        self.commands = list(commands)


class ConfirmationRequiredError(ShellPermissionError):
    """Commands are not allow-listed and need user confirmation."""

    def __init__(self, commands_to_confirm: list[str]):
        super().__init__(
            "User confirmation required to execute shell commands.",
            commands_to_confirm,
        )

    @property
    def commands_to_confirm(self) -> list[str]:
        return self.commands


class HardDenialError(ShellPermissionError):
    """A command is blocked by configuration or uses an unsafe construct."""

    is_hard_denial = True

    def __init__(self, command: str, reason: str | None):
        super().__init__(
            f'Blocked command: "{command}". Reason: {reason or "blocked by policy"}',
            [command],
        )
        self.command = command
        self.reason = reason


class ShellExecutionError(PromptProcessingError):
    """A command could not be started.

    Output of commands that already ran in the same template is discarded.
    """
