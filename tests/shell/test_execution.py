"""Tests for process execution through the host shell.

Only harmless commands (echo, printf, sleep, exit) are executed.
"""

import asyncio
import os
import sys
from pathlib import Path

import pytest

from prompt_shell.shell import (
    CancellationToken,
    ShellAbortedError,
    ShellExecutionService,
)

from helpers import POSIX_SHELL

pytestmark = pytest.mark.skipif(sys.platform.startswith("win"), reason="requires bash")


@pytest.fixture
def service() -> ShellExecutionService:
    return ShellExecutionService(POSIX_SHELL)


class TestShellExecutionService:
    """Tests for spawning, streaming and reaping commands."""

    @pytest.mark.asyncio
    async def test_runs_command_in_working_directory(self, service, tmp_path: Path):
        handle = await service.execute("pwd", tmp_path)
        result = await handle.result

        assert handle.pid is not None
        assert result.pid == handle.pid
        assert result.exit_code == 0
        assert result.output.strip() == str(tmp_path.resolve())
        assert result.error is None
        assert not result.aborted

    @pytest.mark.asyncio
    async def test_streams_and_accumulates_combined_output(self, service, tmp_path: Path):
        chunks: list[str] = []
        handle = await service.execute("echo out; echo err 1>&2", tmp_path, chunks.append)
        result = await handle.result

        assert "out" in result.output
        assert "err" in result.output
        assert "".join(chunks) == result.output

    @pytest.mark.asyncio
    async def test_non_zero_exit_code(self, service, tmp_path: Path):
        result = await (await service.execute("printf partial; exit 3", tmp_path)).result

        assert result.exit_code == 3
        assert result.output == "partial"
        assert result.signal is None

    @pytest.mark.asyncio
    async def test_signal_termination(self, service, tmp_path: Path):
        result = await (await service.execute("kill -TERM $$", tmp_path)).result

        assert result.exit_code is None
        assert result.signal == "SIGTERM"

    @pytest.mark.asyncio
    async def test_multibyte_output_is_decoded(self, service, tmp_path: Path):
        result = await (await service.execute("printf 'h\\303\\251llo'", tmp_path)).result

        assert result.output == "héllo"

    @pytest.mark.asyncio
    async def test_spawn_failure_is_reported_not_raised(self, service, tmp_path: Path):
        handle = await service.execute("echo hi", tmp_path / "missing")
        result = await handle.result

        assert handle.pid is None
        assert isinstance(result.error, OSError)
        assert not result.aborted

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, service, tmp_path: Path):
        token = CancellationToken()
        token.cancel()

        handle = await service.execute("echo never", tmp_path, cancellation=token)
        result = await handle.result

        assert handle.pid is None
        assert result.aborted
        assert isinstance(result.error, ShellAbortedError)

    @pytest.mark.asyncio
    async def test_cancel_terminates_running_command(self, service, tmp_path: Path):
        token = CancellationToken()
        chunks: list[str] = []

        handle = await service.execute(
            "echo started; sleep 30; echo finished", tmp_path, chunks.append, token
        )
        while not chunks:
            await asyncio.sleep(0.01)
        token.cancel()
        result = await asyncio.wait_for(handle.result, timeout=5)

        assert result.aborted
        assert "started" in result.output
        assert "finished" not in result.output
        assert result.exit_code is None
        assert result.signal is not None

    @pytest.mark.asyncio
    async def test_cancelling_awaiting_task_reaps_process_group(self, service, tmp_path: Path):
        handle = await service.execute("sleep 30", tmp_path)
        waiter = asyncio.ensure_future(handle.result)
        await asyncio.sleep(0.1)

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        with pytest.raises(ProcessLookupError):
            os.killpg(handle.pid, 0)

    @pytest.mark.asyncio
    async def test_wait_for_timeout_reaps_process_group(self, service, tmp_path: Path):
        handle = await service.execute("sleep 30", tmp_path)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(handle.result, timeout=0.2)

        with pytest.raises(ProcessLookupError):
            os.killpg(handle.pid, 0)
