"""Command template resolution with embedded shell commands.

Templates may contain two kinds of placeholders:
- ``{{args}}``: replaced with the invocation's argument string, verbatim
  in visible text and shell-escaped inside ``!{...}`` spans.
- ``!{command}``: replaced with the output of running ``command``.

Resolution happens in two passes. Every span is parsed and every resolved
command is checked before the first command runs, so a template either
runs all of its commands or none of them.
"""

from enum import Enum

from prompt_shell.logging import Loggers, command_logging_context
from prompt_shell.prompts.context import CommandContext
from prompt_shell.prompts.errors import (
    ConfigurationMissingError,
    ConfirmationRequiredError,
    HardDenialError,
    ShellExecutionError,
    ShellInjectionParseError,
)
from prompt_shell.shell.config import default_shell_configuration
from prompt_shell.shell.escaping import escape_shell_arg
from prompt_shell.shell.execution import ShellExecutionService
from prompt_shell.shell.models import (
    ExecutionResult,
    InjectionSpan,
    ShellInvocationConfig,
)
from prompt_shell.shell.permissions import check_command_permissions
from prompt_shell.shell.policy import CommandPolicySnapshot

logger = Loggers.prompts()

SHORTHAND_ARGS_PLACEHOLDER = "{{args}}"
SHELL_INJECTION_TRIGGER = "!{"


class _ScanState(Enum):
    NORMAL = "normal"
    IN_SINGLE_QUOTE = "single"
    IN_DOUBLE_QUOTE = "double"


def _find_closing_brace(text: str, start: int) -> int | None:
    """Index of the brace closing a span whose content begins at ``start``.

    Braces inside single or double quotes do not count. Backslashes are
    ordinary characters, so Windows paths such as ``C:\\`` are kept as is.
    """
    depth = 1
    state = _ScanState.NORMAL

    for i in range(start, len(text)):
        char = text[i]

        if state is _ScanState.NORMAL:
            if char == "'":
                state = _ScanState.IN_SINGLE_QUOTE
            elif char == '"':
                state = _ScanState.IN_DOUBLE_QUOTE
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return i
        elif state is _ScanState.IN_SINGLE_QUOTE:
            if char == "'":
                state = _ScanState.NORMAL
        elif char == '"':
            state = _ScanState.NORMAL

    return None


def extract_injections(prompt: str, command_name: str = "") -> list[InjectionSpan]:
    """Find every ``!{...}`` span in a template.

    Args:
        prompt: Template text.
        command_name: Command the template belongs to, for error messages.

    Returns:
        Spans in template order with whitespace-trimmed content.

    Raises:
        ShellInjectionParseError: A span is never closed.
    """
    spans: list[InjectionSpan] = []
    index = 0

    while True:
        start = prompt.find(SHELL_INJECTION_TRIGGER, index)
        if start == -1:
            return spans

        content_start = start + len(SHELL_INJECTION_TRIGGER)
        end = _find_closing_brace(prompt, content_start)
        if end is None:
            raise ShellInjectionParseError(
                f"Invalid syntax in command '{command_name}': "
                f"Unclosed shell injection starting at index {start} ('!{{'). "
                "Ensure braces are balanced.",
                offset=start,
            )

        spans.append(
            InjectionSpan(
                command=prompt[content_start:end].strip(),
                start=start,
                end=end + 1,
            )
        )
        index = end + 1


class ShellProcessor:
    """Resolves ``{{args}}`` and ``!{...}`` placeholders in a command template.

    Example:
        processor = ShellProcessor("review")
        context = CommandContext(args="src/", policy=settings)
        try:
            prompt = await processor.process("Diff: !{git diff {{args}}}", context)
        except ConfirmationRequiredError as e:
            # ask the user, then:
            context.session_allowlist.update(e.commands_to_confirm)
    """

    def __init__(
        self,
        command_name: str,
        executor: ShellExecutionService | None = None,
        shell: ShellInvocationConfig | None = None,
    ):
        """Initialize the processor.

        Args:
            command_name: Name of the command whose template is processed.
            executor: Runs approved commands (defaults to a ShellExecutionService).
            shell: Shell used for escaping and execution (defaults to the host shell).
        """
        self.command_name = command_name
        self.shell = shell or default_shell_configuration()
        self.executor = executor or ShellExecutionService(self.shell)

    async def process(self, prompt: str, context: CommandContext) -> str:
        """Resolve a template.

        Args:
            prompt: Template text.
            context: Invocation arguments, policy and session state.

        Returns:
            The template with placeholders replaced.

        Raises:
            ShellInjectionParseError: A ``!{`` span is unclosed.
            ConfigurationMissingError: The context carries no policy source.
            HardDenialError: A command is blocked; nothing ran.
            ConfirmationRequiredError: Commands need approval; nothing ran.
            ShellExecutionError: A command failed to start.
        """
        if SHELL_INJECTION_TRIGGER not in prompt:
            return prompt.replace(SHORTHAND_ARGS_PLACEHOLDER, context.args)

        with command_logging_context(self.command_name):
            return await self._resolve(prompt, context)

    async def _resolve(self, prompt: str, context: CommandContext) -> str:
        if context.policy is None:
            raise ConfigurationMissingError(
                "Security configuration not loaded. Cannot verify shell command "
                f"permissions for '{self.command_name}'. Aborting."
            )

        policy = CommandPolicySnapshot.from_source(context.policy)
        escaped_args = escape_shell_arg(context.args, self.shell)

        spans = extract_injections(prompt, self.command_name)
        commands = [
            span.command.replace(SHORTHAND_ARGS_PLACEHOLDER, escaped_args) for span in spans
        ]
        logger.debug("shell_injections_found", count=len(spans))

        self._check_permissions(commands, policy, context)

        outputs: list[str] = []
        for command in commands:
            outputs.append(await self._run(command, context) if command else "")

        return self._assemble(prompt, spans, outputs, context.args)

    def _check_permissions(
        self,
        commands: list[str],
        policy: CommandPolicySnapshot,
        context: CommandContext,
    ) -> None:
        """Check every command, raising before anything runs."""
        to_confirm: list[str] = []

        for command in commands:
            if not command:
                continue

            verdict = check_command_permissions(command, policy, context.session_allowlist)
            if verdict.all_allowed:
                continue

            if verdict.is_hard_denial:
                logger.warning(
                    "shell_command_blocked",
                    command=command,
                    reason=verdict.block_reason,
                )
                raise HardDenialError(command, verdict.block_reason)

            to_confirm.extend(verdict.disallowed_commands)

        if to_confirm:
            to_confirm = list(dict.fromkeys(to_confirm))
            logger.warning("shell_confirmation_required", commands=to_confirm)
            raise ConfirmationRequiredError(to_confirm)

    async def _run(self, command: str, context: CommandContext) -> str:
        handle = await self.executor.execute(
            command,
            context.working_dir,
            context.on_output,
            context.cancellation,
        )
        result = await handle.result
        return self._format_result(command, result)

    def _format_result(self, command: str, result: ExecutionResult) -> str:
        """Command output plus a note on how the command ended."""
        text = result.output

        if result.exit_code is not None and result.exit_code != 0:
            return f"{text}\n[Shell command exited with code {result.exit_code}]"
        if result.signal:
            return f"{text}\n[Shell command terminated by signal {result.signal}]"
        if result.error is not None:
            # Spawn error raced by cancellation
            if result.aborted:
                return f"{text}\n[Shell command aborted]"
            logger.error("shell_command_start_failed", command=command, error=str(result.error))
            raise ShellExecutionError(
                f"Failed to start shell command in '{self.command_name}': {result.error}"
            ) from result.error

        return text

    @staticmethod
    def _assemble(
        prompt: str,
        spans: list[InjectionSpan],
        outputs: list[str],
        raw_args: str,
    ) -> str:
        parts: list[str] = []
        last = 0
        for span, output in zip(spans, outputs):
            parts.append(prompt[last : span.start].replace(SHORTHAND_ARGS_PLACEHOLDER, raw_args))
            parts.append(output)
            last = span.end
        parts.append(prompt[last:].replace(SHORTHAND_ARGS_PLACEHOLDER, raw_args))
        return "".join(parts)
