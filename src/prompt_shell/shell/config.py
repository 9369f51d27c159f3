"""Host shell invocation settings.

Derives the executable and argument prefix used to hand a command string
to the host shell:
- POSIX-like platforms: ``bash -c <command>``
- Windows: ``%ComSpec% /d /s /c <command>`` (``cmd.exe`` when unset)
"""

import os
import sys
from collections.abc import Mapping
from functools import lru_cache

from prompt_shell.shell.models import ShellFlavor, ShellInvocationConfig

# Honored on Windows only
SHELL_OVERRIDE_ENV = "ComSpec"

POSIX_SHELL = "bash"
POSIX_ARGS_PREFIX = ("-c",)
WINDOWS_SHELL = "cmd.exe"
WINDOWS_ARGS_PREFIX = ("/d", "/s", "/c")


def is_windows_platform(platform: str | None = None) -> bool:
    """Check whether a ``sys.platform`` style name is Windows-like."""
    platform = sys.platform if platform is None else platform
    return platform.startswith("win")


def get_shell_configuration(
    platform: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ShellInvocationConfig:
    """Resolve the shell invocation for a platform.

    The override variable only changes the executable; the argument prefix
    always follows cmd.exe conventions on Windows.

    Args:
        platform: ``sys.platform`` style name (defaults to the running platform).
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        ShellInvocationConfig for the platform. Never fails.
    """
    if is_windows_platform(platform):
        environ = os.environ if environ is None else environ
        return ShellInvocationConfig(
            executable=environ.get(SHELL_OVERRIDE_ENV) or WINDOWS_SHELL,
            args_prefix=WINDOWS_ARGS_PREFIX,
            flavor=ShellFlavor.CMD,
        )

    return ShellInvocationConfig(
        executable=POSIX_SHELL,
        args_prefix=POSIX_ARGS_PREFIX,
        flavor=ShellFlavor.POSIX,
    )


@lru_cache(maxsize=1)
def default_shell_configuration() -> ShellInvocationConfig:
    """Shell invocation for the running process, resolved once."""
    return get_shell_configuration()
