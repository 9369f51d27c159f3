"""Settings for prompt shell processing.

ShellSettings is the policy source consumed by the template processor:
it exposes the allowed and blocked tool entries that the permission
evaluator parses into a CommandPolicySnapshot.

Settings Loading Priority (highest to lowest):
    1. Constructor arguments
    2. Environment variables (PROMPT_SHELL_* prefix, lists as JSON)
    3. YAML file (when loaded via ShellSettings.from_yaml)
    4. Default values
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from prompt_shell.logging import Loggers

logger = Loggers.config()


class ShellSettings(BaseSettings):
    """Policy and logging settings.

    Attributes:
        allowed_tools: Allow entries, e.g. ``"ShellTool"`` or ``"ShellTool(git status)"``.
        blocked_tools: Block entries in the same format; always win over allow entries.
        log_level: Minimum log level for structured logging.
        log_format: ``"console"`` for development, ``"json"`` for aggregation.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROMPT_SHELL_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    allowed_tools: list[str] = Field(
        default_factory=list,
        description="Tool entries allowed without confirmation",
    )
    blocked_tools: list[str] = Field(
        default_factory=list,
        description="Tool entries that can never run",
    )
    log_level: str = Field(default="warning", description="Logging level")
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log output format",
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShellSettings":
        """Create settings from a dictionary.

        Args:
            data: Settings dictionary.

        Returns:
            ShellSettings instance.
        """
        return cls(**{k: v for k, v in data.items() if k in cls.model_fields})

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ShellSettings":
        """Load settings from a YAML file.

        Args:
            path: Path to YAML settings file.

        Returns:
            ShellSettings instance (defaults if the file does not exist).
        """
        path = Path(path)
        if not path.exists():
            logger.debug("settings_file_missing", path=str(path))
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        logger.debug("settings_file_loaded", path=str(path))
        return cls.from_dict(data)

    def get_allowed_tools(self) -> list[str]:
        """Allow entries for the policy snapshot."""
        return list(self.allowed_tools)

    def get_blocked_tools(self) -> list[str]:
        """Block entries for the policy snapshot."""
        return list(self.blocked_tools)
