"""Permission evaluation for shell commands.

Decides, per chain segment, whether a command may run under the
configured allow and block entries and an optional session allowlist.

Evaluation order:
1. Command substitution anywhere outside single quotes is a hard denial.
2. A bare block entry for the shell tool disables every command.
3. Block entries are matched per segment and always beat allow entries.
4. Remaining segments are checked against the allowlists:
   - no session allowlist: default-allow, unless specific allow entries
     are configured, in which case a segment must match one of them;
   - with a session allowlist: default-deny, a segment must match an allow
     entry or appear verbatim in the session allowlist.
"""

import json
from collections.abc import Collection, Iterable

from prompt_shell.logging import Loggers
from prompt_shell.shell.models import PermissionVerdict
from prompt_shell.shell.policy import (
    CommandPolicySnapshot,
    PolicyEntry,
    RootMatch,
    Wildcard,
)
from prompt_shell.shell.tokenizer import (
    detect_command_substitution,
    get_command_root,
    normalize_command,
    split_commands,
    strip_shell_wrapper,
)

logger = Loggers.shell()

COMMAND_SUBSTITUTION_REASON = (
    "Command substitution using $(), ``, <() or >() is not allowed for security reasons"
)
GLOBALLY_DISABLED_REASON = "Shell tool is globally disabled in configuration"
NOT_IN_ALLOWLIST_REASON = "Command(s) not in the allowed commands list."


def _matches(entry: PolicyEntry, segment: str, root: str | None) -> bool:
    if isinstance(entry, Wildcard):
        return True
    if isinstance(entry, RootMatch):
        return root is not None and entry.root == root
    return entry.command == segment


def _segment_forms(segment: str) -> list[tuple[str, str | None]]:
    """The segment itself plus, for ``bash -c '...'`` wrappers, the wrapped segments."""
    forms = [(segment, get_command_root(segment))]
    unwrapped = strip_shell_wrapper(segment)
    if unwrapped != segment:
        for inner in split_commands(unwrapped):
            inner = normalize_command(inner)
            forms.append((inner, get_command_root(inner)))
    return forms


def _is_blocked(segment: str, policy: CommandPolicySnapshot) -> bool:
    return any(
        _matches(entry, text, root)
        for text, root in _segment_forms(segment)
        for entry in policy.blocked
        if not isinstance(entry, Wildcard)
    )


def _is_globally_allowed(segment: str, policy: CommandPolicySnapshot) -> bool:
    root = get_command_root(segment)
    return any(_matches(entry, segment, root) for entry in policy.allowed)


def _dedupe(commands: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(commands))


def check_command_permissions(
    command: str,
    policy: CommandPolicySnapshot,
    session_allowlist: Collection[str] | None = None,
) -> PermissionVerdict:
    """Evaluate every chain segment of a command.

    Args:
        command: Fully resolved command text.
        policy: Parsed allow and block entries.
        session_allowlist: Exact commands approved in this session. Passing
            one (even empty) switches evaluation to default-deny.

    Returns:
        PermissionVerdict naming every failing segment in order.
    """
    if detect_command_substitution(command):
        logger.debug("command_substitution_detected", command=command)
        return PermissionVerdict(
            all_allowed=False,
            disallowed_commands=(normalize_command(command),),
            block_reason=COMMAND_SUBSTITUTION_REASON,
            is_hard_denial=True,
        )

    segments = [normalize_command(segment) for segment in split_commands(command)]

    if policy.wildcard_blocked:
        return PermissionVerdict(
            all_allowed=False,
            disallowed_commands=_dedupe(segments),
            block_reason=GLOBALLY_DISABLED_REASON,
            is_hard_denial=True,
        )

    session = None
    if session_allowlist is not None:
        session = {normalize_command(allowed) for allowed in session_allowlist}

    disallowed: list[str] = []
    not_allowlisted: list[str] = []
    first_reason: str | None = None
    first_is_soft = False
    is_hard_denial = False

    for segment in segments:
        if _is_blocked(segment, policy):
            if not disallowed:
                first_reason = f"Command '{segment}' is blocked by configuration"
            disallowed.append(segment)
            is_hard_denial = True
            continue

        if session is None:
            permitted = (
                policy.wildcard_allowed
                or not policy.has_specific_allows
                or _is_globally_allowed(segment, policy)
            )
        else:
            permitted = segment in session or _is_globally_allowed(segment, policy)

        if not permitted:
            first_is_soft = first_is_soft or not disallowed
            disallowed.append(segment)
            not_allowlisted.append(segment)

    if not disallowed:
        return PermissionVerdict(all_allowed=True)

    if first_is_soft:
        if session is None:
            first_reason = NOT_IN_ALLOWLIST_REASON
        else:
            listed = ", ".join(json.dumps(cmd) for cmd in _dedupe(not_allowlisted))
            first_reason = (
                "Command(s) not on the global or session allowlist. "
                f"Disallowed commands: {listed}"
            )

    verdict = PermissionVerdict(
        all_allowed=False,
        disallowed_commands=_dedupe(disallowed),
        block_reason=first_reason,
        is_hard_denial=is_hard_denial,
    )
    logger.debug(
        "command_permission_denied",
        command=command,
        disallowed=list(verdict.disallowed_commands),
        hard=verdict.is_hard_denial,
    )
    return verdict


def is_command_allowed(
    command: str,
    policy: CommandPolicySnapshot,
) -> tuple[bool, str | None]:
    """Default-allow check of a command.

    Returns:
        Tuple of (allowed, reason) where reason explains a denial.
    """
    verdict = check_command_permissions(command, policy)
    return verdict.all_allowed, verdict.block_reason
