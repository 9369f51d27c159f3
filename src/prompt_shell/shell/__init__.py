"""Shell command permissions and execution.

Provides the building blocks used by the template processor:
- Invocation: which shell runs a command string (bash -c / cmd.exe /d /s /c)
- Escaping: splicing raw arguments into a command line
- Tokenizing: chain segments and the program each one invokes
- Permissions: allow/block policy evaluation with a session allowlist
- Execution: streaming, cancellable process execution

Usage:
    from prompt_shell.shell import CommandPolicySnapshot, check_command_permissions

    policy = CommandPolicySnapshot.from_entries(
        allowed=["ShellTool(git status)"],
        blocked=["ShellTool(rm)"],
    )
    verdict = check_command_permissions("git status && rm -rf /", policy)
    # verdict.all_allowed is False, verdict.is_hard_denial is True
"""

from prompt_shell.shell.config import (
    default_shell_configuration,
    get_shell_configuration,
)
from prompt_shell.shell.escaping import escape_shell_arg
from prompt_shell.shell.execution import (
    CancellationToken,
    ShellAbortedError,
    ShellExecutionHandle,
    ShellExecutionService,
)
from prompt_shell.shell.models import (
    ExecutionResult,
    InjectionSpan,
    PermissionVerdict,
    ShellFlavor,
    ShellInvocationConfig,
)
from prompt_shell.shell.permissions import check_command_permissions, is_command_allowed
from prompt_shell.shell.policy import (
    SHELL_TOOL_NAMES,
    CommandPolicySnapshot,
    ExactMatch,
    PolicyEntry,
    PolicySource,
    RootMatch,
    Wildcard,
    parse_policy_entries,
    parse_policy_entry,
)
from prompt_shell.shell.tokenizer import (
    detect_command_substitution,
    get_command_root,
    get_command_roots,
    normalize_command,
    split_commands,
    strip_shell_wrapper,
)

__all__ = [
    # Invocation and escaping
    "get_shell_configuration",
    "default_shell_configuration",
    "escape_shell_arg",
    # Tokenizing
    "split_commands",
    "get_command_root",
    "get_command_roots",
    "normalize_command",
    "strip_shell_wrapper",
    "detect_command_substitution",
    # Permissions
    "SHELL_TOOL_NAMES",
    "check_command_permissions",
    "is_command_allowed",
    "parse_policy_entry",
    "parse_policy_entries",
    # Execution
    "CancellationToken",
    "ShellAbortedError",
    "ShellExecutionHandle",
    "ShellExecutionService",
    # Data models
    "CommandPolicySnapshot",
    "ExactMatch",
    "ExecutionResult",
    "InjectionSpan",
    "PermissionVerdict",
    "PolicyEntry",
    "PolicySource",
    "RootMatch",
    "ShellFlavor",
    "ShellInvocationConfig",
    "Wildcard",
]
