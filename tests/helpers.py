"""Test doubles shared across prompt-shell tests."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from prompt_shell.shell import (
    ExecutionResult,
    ShellExecutionHandle,
    ShellFlavor,
    ShellInvocationConfig,
)

POSIX_SHELL = ShellInvocationConfig("bash", ("-c",), ShellFlavor.POSIX)
WINDOWS_SHELL = ShellInvocationConfig("cmd.exe", ("/d", "/s", "/c"), ShellFlavor.CMD)


@dataclass
class StaticPolicy:
    """Policy source returning fixed entries."""

    allowed: list[str] = field(default_factory=list)
    blocked: list[str] = field(default_factory=list)

    def get_allowed_tools(self) -> list[str]:
        return self.allowed

    def get_blocked_tools(self) -> list[str]:
        return self.blocked


class ScriptedExecutor:
    """Executor double that returns queued results in call order.

    When the queue runs dry every further command succeeds with
    ``default_output``.
    """

    def __init__(self, shell: ShellInvocationConfig = POSIX_SHELL):
        self.shell = shell
        self.calls: list[tuple[str, Path]] = []
        self.results: list[ExecutionResult] = []
        self.default_output = "default shell output"

    def queue(self, *results: ExecutionResult) -> None:
        self.results.extend(results)

    async def execute(self, command, cwd, on_output=None, cancellation=None):
        self.calls.append((command, cwd))
        if self.results:
            result = self.results.pop(0)
        else:
            result = ExecutionResult(output=self.default_output, exit_code=0)
        if on_output is not None and result.output:
            on_output(result.output)
        future = asyncio.get_running_loop().create_future()
        future.set_result(result)
        return ShellExecutionHandle(pid=4242, result=future)

    @property
    def commands(self) -> list[str]:
        return [command for command, _ in self.calls]
