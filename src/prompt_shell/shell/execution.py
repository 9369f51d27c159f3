"""Process execution through the host shell.

Runs one command per call via the resolved shell invocation, streams
combined stdout/stderr to a callback while accumulating it, and honors a
cancellation token by terminating the child and its process group.

Spawn failures never raise here: they are reported in the ExecutionResult
so the caller can decide whether they are fatal.
"""

import asyncio
import codecs
import os
import signal
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from prompt_shell.logging import Loggers
from prompt_shell.shell.config import default_shell_configuration
from prompt_shell.shell.models import ExecutionResult, ShellInvocationConfig

logger = Loggers.shell()

OutputCallback = Callable[[str], None]

_READ_CHUNK_SIZE = 4096
# Seconds between SIGTERM and SIGKILL when tearing down a process group
_KILL_GRACE_SECONDS = 0.2


class ShellAbortedError(Exception):
    """Cancellation was requested before the command could start."""


class CancellationToken:
    """Cooperative cancellation shared between a caller and running commands.

    Example:
        token = CancellationToken()
        handle = await service.execute("sleep 60", cwd, print, token)
        token.cancel()
        result = await handle.result  # result.aborted is True
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()


@dataclass
class ShellExecutionHandle:
    """A started command.

    Attributes:
        pid: Child process id, None if the process never started.
        result: Awaitable resolving to the ExecutionResult.
    """

    pid: int | None
    result: Awaitable[ExecutionResult]


def _completed(result: ExecutionResult) -> "asyncio.Future[ExecutionResult]":
    future = asyncio.get_running_loop().create_future()
    future.set_result(result)
    return future


def _signal_name(returncode: int) -> str:
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return str(-returncode)


class ShellExecutionService:
    """Spawns commands through the host shell.

    Each call owns exactly one child process; it is released when the
    result resolves, whether the command finished, failed or was aborted.
    """

    def __init__(self, shell: ShellInvocationConfig | None = None):
        """Initialize the service.

        Args:
            shell: Shell invocation to use (defaults to the host shell).
        """
        self.shell = shell or default_shell_configuration()

    async def execute(
        self,
        command: str,
        cwd: Path | str,
        on_output: OutputCallback | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ShellExecutionHandle:
        """Start a command.

        Args:
            command: Command text handed verbatim to the shell.
            cwd: Working directory for the child.
            on_output: Called with each decoded output chunk as it arrives.
            cancellation: Token that aborts the command when cancelled.

        Returns:
            ShellExecutionHandle whose ``result`` resolves once the process exits.
        """
        if cancellation is not None and cancellation.is_cancelled:
            logger.info("shell_command_aborted_before_start", command=command)
            return ShellExecutionHandle(
                pid=None,
                result=_completed(
                    ExecutionResult(error=ShellAbortedError("Aborted"), aborted=True)
                ),
            )

        try:
            process = await asyncio.create_subprocess_exec(
                self.shell.executable,
                *self.shell.args_prefix,
                command,
                cwd=str(cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                # Own process group so the whole tree can be signalled
                start_new_session=not self.shell.is_windows,
            )
        except OSError as e:
            aborted = cancellation is not None and cancellation.is_cancelled
            if not aborted:
                logger.error("shell_command_spawn_failed", command=command, error=str(e))
            return ShellExecutionHandle(
                pid=None,
                result=_completed(ExecutionResult(error=e, aborted=aborted)),
            )

        logger.debug("shell_command_started", command=command, pid=process.pid)
        task = asyncio.ensure_future(self._collect(process, on_output, cancellation))
        return ShellExecutionHandle(pid=process.pid, result=task)

    async def _collect(
        self,
        process: asyncio.subprocess.Process,
        on_output: OutputCallback | None,
        cancellation: CancellationToken | None,
    ) -> ExecutionResult:
        """Stream output until EOF or cancellation, then reap the process."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        chunks: list[str] = []
        aborted = False
        error: BaseException | None = None

        def emit(text: str) -> None:
            if text:
                chunks.append(text)
                if on_output is not None:
                    on_output(text)

        abort_waiter = (
            asyncio.ensure_future(cancellation.wait()) if cancellation is not None else None
        )
        read: asyncio.Future[bytes] | None = None

        try:
            while True:
                read = asyncio.ensure_future(process.stdout.read(_READ_CHUNK_SIZE))
                waiters = {read} if abort_waiter is None else {read, abort_waiter}
                done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

                if read not in done:
                    read.cancel()
                    aborted = True
                    await self._terminate(process)
                    break

                data = read.result()
                if not data:
                    break
                emit(decoder.decode(data))

            emit(decoder.decode(b"", final=True))
            await process.wait()
        except OSError as e:
            error = e
            aborted = cancellation is not None and cancellation.is_cancelled
            if process.returncode is None:
                await self._terminate(process)
        except asyncio.CancelledError:
            # The awaiting task was cancelled; the child must not outlive it
            if process.returncode is None:
                logger.info("shell_command_cancelled", pid=process.pid)
                await asyncio.shield(self._terminate(process))
            raise
        finally:
            if read is not None and not read.done():
                read.cancel()
            if abort_waiter is not None:
                abort_waiter.cancel()

        returncode = process.returncode
        exit_code: int | None = returncode
        signal_name: str | None = None
        if returncode is not None and returncode < 0:
            exit_code = None
            signal_name = _signal_name(returncode)

        if aborted:
            logger.info("shell_command_aborted", pid=process.pid)
        else:
            logger.debug(
                "shell_command_finished",
                pid=process.pid,
                exit_code=exit_code,
                signal=signal_name,
            )

        return ExecutionResult(
            output="".join(chunks),
            exit_code=exit_code,
            signal=signal_name,
            error=error,
            aborted=aborted,
            pid=process.pid,
        )

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Terminate the child and everything it started, then reap it."""
        if process.returncode is not None:
            return

        if self.shell.is_windows:
            killer = await asyncio.create_subprocess_exec(
                "taskkill", "/pid", str(process.pid), "/f", "/t",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await killer.wait()
            await process.wait()
            return

        try:
            os.killpg(process.pid, signal.SIGTERM)
        except ProcessLookupError:
            pass

        try:
            await asyncio.wait_for(process.wait(), timeout=_KILL_GRACE_SECONDS)
        except asyncio.TimeoutError:
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            await process.wait()
