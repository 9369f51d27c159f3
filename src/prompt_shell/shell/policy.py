"""Allow and block policy entries.

Raw entries come from a policy source as strings in the ``Tool`` or
``Tool(command)`` format and are parsed once per snapshot:

- ``ShellTool``: Wildcard, the whole shell tool
- ``ShellTool(rm)``: RootMatch, any command invoking ``rm``
- ``ShellTool(git status)``: ExactMatch, that exact command line
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, Union

from prompt_shell.shell.tokenizer import get_command_root, normalize_command

# Names under which the shell tool appears in policy entries
SHELL_TOOL_NAMES = ("run_shell_command", "ShellTool")


@dataclass(frozen=True)
class Wildcard:
    """Bare tool entry: the whole shell tool is enabled or disabled."""

    tool: str


@dataclass(frozen=True)
class RootMatch:
    """Entry naming a single program, e.g. ``ShellTool(rm)``."""

    tool: str
    root: str


@dataclass(frozen=True)
class ExactMatch:
    """Entry naming a full command line, e.g. ``ShellTool(git status)``."""

    tool: str
    command: str


PolicyEntry = Union[Wildcard, RootMatch, ExactMatch]


class PolicySource(Protocol):
    """Collaborator that supplies the raw allow and block entries."""

    def get_allowed_tools(self) -> list[str]: ...

    def get_blocked_tools(self) -> list[str]: ...


def parse_policy_entry(entry: str) -> PolicyEntry | None:
    """Parse one ``Tool`` or ``Tool(command)`` entry.

    A single-word target becomes a RootMatch on that program; a longer
    target becomes an ExactMatch on the normalized command line.

    Returns:
        The parsed entry, or None for entries that do not address the shell tool.
    """
    entry = entry.strip()
    for tool in SHELL_TOOL_NAMES:
        if entry == tool:
            return Wildcard(tool)
        if entry.startswith(f"{tool}(") and entry.endswith(")"):
            target = normalize_command(entry[len(tool) + 1 : -1])
            if not target:
                return None
            if " " in target:
                return ExactMatch(tool, target)
            root = get_command_root(target)
            return RootMatch(tool, root) if root else None
    return None


def parse_policy_entries(entries: Iterable[str]) -> list[PolicyEntry]:
    """Parse raw entries, dropping those for other tools."""
    parsed = (parse_policy_entry(entry) for entry in entries)
    return [entry for entry in parsed if entry is not None]


@dataclass(frozen=True)
class CommandPolicySnapshot:
    """Parsed allow and block entries, immutable for one evaluation."""

    allowed: frozenset[PolicyEntry] = frozenset()
    blocked: frozenset[PolicyEntry] = frozenset()

    @property
    def wildcard_allowed(self) -> bool:
        return any(isinstance(entry, Wildcard) for entry in self.allowed)

    @property
    def wildcard_blocked(self) -> bool:
        return any(isinstance(entry, Wildcard) for entry in self.blocked)

    @property
    def has_specific_allows(self) -> bool:
        """True when a non-wildcard allowlist is configured."""
        return any(not isinstance(entry, Wildcard) for entry in self.allowed)

    @classmethod
    def from_entries(
        cls,
        allowed: Iterable[str] | None = None,
        blocked: Iterable[str] | None = None,
    ) -> CommandPolicySnapshot:
        """Parse raw entries such as ``"ShellTool(ls)"`` into a snapshot."""
        return cls(
            allowed=frozenset(parse_policy_entries(allowed or [])),
            blocked=frozenset(parse_policy_entries(blocked or [])),
        )

    @classmethod
    def from_source(cls, source: PolicySource) -> CommandPolicySnapshot:
        """Take a snapshot of a policy source."""
        return cls.from_entries(source.get_allowed_tools(), source.get_blocked_tools())
