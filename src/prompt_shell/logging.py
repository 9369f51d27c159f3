"""Structured logging for template processing.

Events are emitted through structlog. While a template is being resolved,
every event carries the name of the command it belongs to (see
``command_logging_context``). Command text is shortened before rendering;
command output is never logged.
"""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from prompt_shell.config import ShellSettings

# Longest command text kept in a log event
MAX_LOGGED_COMMAND_LENGTH = 200

_LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
    "critical": 50,
}


def _shorten(command: str) -> str:
    if len(command) <= MAX_LOGGED_COMMAND_LENGTH:
        return command
    return command[:MAX_LOGGED_COMMAND_LENGTH] + f"... ({len(command)} chars)"


def shorten_commands(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Truncate ``command`` and ``commands`` fields.

    Resolved commands embed the invocation's arguments, which can be
    arbitrarily long.
    """
    if isinstance(event_dict.get("command"), str):
        event_dict["command"] = _shorten(event_dict["command"])
    if isinstance(event_dict.get("commands"), list):
        event_dict["commands"] = [_shorten(str(c)) for c in event_dict["commands"]]
    return event_dict


def configure_logging(settings: "ShellSettings | None" = None) -> None:
    """Configure structlog from settings.

    Args:
        settings: Shell settings. If None, warnings and above go to the
            console renderer.
    """
    log_level = _LEVELS["warning"]
    log_format = "console"

    if settings is not None:
        log_level = _LEVELS.get(settings.log_level.lower(), _LEVELS["info"])
        log_format = settings.log_format

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        shorten_commands,
    ]

    if log_format == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name) if name else structlog.get_logger()


@contextmanager
def command_logging_context(command_name: str) -> Iterator[None]:
    """Tag every event logged inside the block with ``command_name``.

    Values bound by the caller are restored on exit, so nested template
    resolutions and concurrent tasks keep their own command name.

    Example:
        with command_logging_context("review"):
            logger.info("shell_injections_found")  # includes command_name
    """
    with structlog.contextvars.bound_contextvars(command_name=command_name):
        yield


class Loggers:
    """Pre-configured logger instances for prompt shell components."""

    @staticmethod
    def shell() -> structlog.stdlib.BoundLogger:
        """Logger for permission checks and process execution."""
        return get_logger("prompt_shell.shell")

    @staticmethod
    def prompts() -> structlog.stdlib.BoundLogger:
        """Logger for template processing."""
        return get_logger("prompt_shell.prompts")

    @staticmethod
    def config() -> structlog.stdlib.BoundLogger:
        """Logger for configuration."""
        return get_logger("prompt_shell.config")
