"""Command chain splitting and root extraction.

Not a shell grammar: only enough scanning to find top-level chain
operators (``;``, ``|``, ``&``, ``&&``, ``||`` and newlines) outside quotes,
the program each segment invokes, and command substitution constructs.
"""

import re

# e.g. `bash -c "ls -l"`, `cmd.exe /c dir`
SHELL_WRAPPER_PATTERN = re.compile(
    r"^\s*(?:sh|bash|zsh|cmd\.exe)\s+(?:/c|-c)\s+", re.IGNORECASE
)
FIRST_TOKEN_PATTERN = re.compile(r"""^"([^"]+)"|^'([^']+)'|^\S+""")
WHITESPACE_RUN = re.compile(r"\s+")

# A newline ends a command just like ";"
CHAIN_OPERATORS = (";", "|", "&", "\n")


def normalize_command(command: str) -> str:
    """Trim and collapse whitespace runs to single spaces."""
    return WHITESPACE_RUN.sub(" ", command.strip())


def split_commands(command: str) -> list[str]:
    """Split a command line into its top-level chain segments.

    Operators inside single or double quotes do not split. A backslash keeps
    the following character literal, and both are kept in the segment text.

    Args:
        command: Command line to split.

    Returns:
        Non-empty, trimmed segment texts in order.
    """
    segments: list[str] = []
    current: list[str] = []
    in_single = False
    in_double = False
    i = 0

    while i < len(command):
        char = command[i]

        if char == "\\" and not in_single and i + 1 < len(command):
            current.append(command[i : i + 2])
            i += 2
            continue

        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        elif char == "&" and _is_redirection_ampersand(command, i):
            pass
        elif not in_single and not in_double and char in CHAIN_OPERATORS:
            segments.append("".join(current).strip())
            current = []
            # && and || are one operator
            if char in "&|" and command[i + 1 : i + 2] == char:
                i += 1
            i += 1
            continue

        current.append(char)
        i += 1

    segments.append("".join(current).strip())
    return [segment for segment in segments if segment]


def _is_redirection_ampersand(command: str, index: int) -> bool:
    """``&`` belonging to ``2>&1``, ``<&3`` or ``&>file`` rather than a chain."""
    previous = command[index - 1 : index] if index > 0 else ""
    following = command[index + 1 : index + 2]
    return previous in ("<", ">") or following == ">"


def get_command_root(command: str) -> str | None:
    """Get the program name a single segment invokes.

    The first token is taken (a quoted first token is unwrapped) and any
    directory prefix is stripped.

    Examples:
        >>> get_command_root("/usr/local/bin/node script.js")
        'node'
    """
    trimmed = command.strip()
    if not trimmed:
        return None

    match = FIRST_TOKEN_PATTERN.match(trimmed)
    if not match:
        return None

    token = match.group(1) or match.group(2) or match.group(0)
    root = re.split(r"[\\/]", token)[-1]
    return root or None


def get_command_roots(command: str) -> list[str]:
    """Get the root program of every chain segment, in order.

    Examples:
        >>> get_command_roots("a;b|c&&d||e&f")
        ['a', 'b', 'c', 'd', 'e', 'f']
        >>> get_command_roots("")
        []
    """
    if not command:
        return []
    roots = (get_command_root(segment) for segment in split_commands(command))
    return [root for root in roots if root]


def strip_shell_wrapper(command: str) -> str:
    """Remove a leading ``sh/bash/zsh -c`` or ``cmd.exe /c`` wrapper.

    Quotes around the wrapped command are removed too.
    """
    match = SHELL_WRAPPER_PATTERN.match(command)
    if not match:
        return command.strip()

    inner = command[match.end() :].strip()
    if len(inner) >= 2 and inner[0] == inner[-1] and inner[0] in ("'", '"'):
        inner = inner[1:-1]
    return inner


def detect_command_substitution(command: str) -> bool:
    """Check for ``$(...)``, backticks, ``<(...)`` or ``>(...)``.

    Single-quoted text is literal to the shell and is ignored. Process
    substitution is only recognized outside any quotes.
    """
    in_single = False
    in_double = False
    i = 0

    while i < len(command):
        char = command[i]
        next_char = command[i + 1 : i + 2]

        if char == "\\" and not in_single:
            i += 2
            continue

        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        elif not in_single:
            if char == "$" and next_char == "(":
                return True
            if char == "`":
                return True
            if char in "<>" and next_char == "(" and not in_double:
                return True

        i += 1

    return False
