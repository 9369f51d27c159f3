"""Argument escaping for splicing user input into command lines."""

import shlex

from prompt_shell.shell.config import default_shell_configuration
from prompt_shell.shell.models import ShellInvocationConfig


def escape_shell_arg(arg: str, shell: ShellInvocationConfig | None = None) -> str:
    """Escape a raw string so it reaches the command as a single argument.

    POSIX shells get ``shlex.quote`` output, which the shell reads back as
    exactly the original text. cmd.exe gets the value wrapped in double
    quotes with embedded double quotes doubled. That is weaker: cmd.exe
    still expands ``%VAR%`` inside quotes.

    Args:
        arg: Raw argument text.
        shell: Shell the command will run under (defaults to the host shell).

    Returns:
        Escaped text, or ``""`` for empty input.
    """
    if not arg:
        return ""

    shell = shell or default_shell_configuration()
    if shell.is_windows:
        return '"' + arg.replace('"', '""') + '"'

    return shlex.quote(arg)
