"""Invocation context for command templates."""

import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from prompt_shell.shell.execution import CancellationToken, OutputCallback
from prompt_shell.shell.policy import PolicySource


class SessionAllowlist:
    """Exact commands the user approved for the current session.

    Shared by concurrent template resolutions: reads see a snapshot and
    writes only add. Never persisted.
    """

    def __init__(self, commands: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._commands: set[str] = set(commands)

    def add(self, command: str) -> None:
        with self._lock:
            self._commands.add(command)

    def update(self, commands: Iterable[str]) -> None:
        with self._lock:
            self._commands.update(commands)

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._commands)

    def __contains__(self, command: object) -> bool:
        with self._lock:
            return command in self._commands

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)

    def __repr__(self) -> str:
        return f"SessionAllowlist({sorted(self.snapshot())!r})"


@dataclass
class CommandContext:
    """Everything a template resolution needs from its caller.

    Attributes:
        args: Trailing argument string of the invocation.
        working_dir: Directory commands run in.
        policy: Source of allow and block entries; None means not loaded.
        session_allowlist: Commands approved this session. None selects
            default-allow evaluation.
        on_output: Receives output chunks of running commands.
        cancellation: Aborts the currently running command.
    """

    args: str = ""
    working_dir: Path = field(default_factory=Path.cwd)
    policy: PolicySource | None = None
    session_allowlist: SessionAllowlist | None = field(default_factory=SessionAllowlist)
    on_output: OutputCallback | None = None
    cancellation: CancellationToken | None = None
