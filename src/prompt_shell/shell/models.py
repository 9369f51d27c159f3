"""Data models for shell command permissions and execution.

Provides dataclasses for permission verdicts, injection spans, shell
invocation settings and process results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ShellFlavor(Enum):
    """Command-line discipline of the host shell."""

    POSIX = "posix"  # bash -c
    CMD = "cmd"  # cmd.exe /d /s /c


@dataclass(frozen=True)
class ShellInvocationConfig:
    """How to hand a command string to the host shell."""

    executable: str
    args_prefix: tuple[str, ...]
    flavor: ShellFlavor = ShellFlavor.POSIX

    @property
    def is_windows(self) -> bool:
        return self.flavor is ShellFlavor.CMD


@dataclass(frozen=True)
class PermissionVerdict:
    """Aggregate permission decision for one command string.

    Attributes:
        all_allowed: Every chain segment may run.
        disallowed_commands: Failing segments, in order, without duplicates.
        block_reason: Cause of the first failure.
        is_hard_denial: A failure came from the blocklist or an unsafe construct,
            so no confirmation can override it.
    """

    all_allowed: bool
    disallowed_commands: tuple[str, ...] = ()
    block_reason: str | None = None
    is_hard_denial: bool = False


@dataclass(frozen=True)
class InjectionSpan:
    """A ``!{...}`` region of a template.

    ``start`` is the offset of ``!`` and ``end`` is one past the closing brace.
    """

    command: str  # Trimmed content between the delimiters
    start: int
    end: int


@dataclass
class ExecutionResult:
    """Outcome of running one command through the shell.

    Attributes:
        output: Combined stdout and stderr, in arrival order.
        exit_code: Exit status, None when killed by a signal or never started.
        signal: Name of the terminating signal, e.g. ``"SIGTERM"``.
        error: Spawn or I/O error, if any.
        aborted: Cancellation was requested while the command was in flight.
        pid: Process id, None if the process never started.
    """

    output: str = ""
    exit_code: int | None = None
    signal: str | None = None
    error: BaseException | None = None
    aborted: bool = False
    pid: int | None = None
