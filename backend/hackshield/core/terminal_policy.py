"""Terminal Policy — input filter for the in-IDE terminal.

Invariants:
    - Only whitelisted base commands are accepted
    - Shell metacharacters are rejected except for echo and git, whose arguments
      are routinely quoted text (commit messages, strings)
    - Rejection returns a human-readable reason; never raises

Design Decisions:
    - This is a filter, not a sandbox: the runner additionally avoids a shell
      (argv exec) so metacharacters allowed for echo/git are never interpreted
"""

from dataclasses import dataclass

ALLOWED_COMMANDS = frozenset({
    "ls", "dir", "pwd", "cd", "mkdir", "echo", "cat", "clear",
    "node", "python", "npm", "git", "java", "javac", "g++", "gcc",
})

DANGEROUS_PATTERNS = (";", "&&", "||", "|", ">", "<", "`", "$", "(", ")")

_METACHAR_EXEMPT = frozenset({"echo", "git"})


@dataclass(frozen=True)
class CommandCheck:
    allowed: bool
    base_command: str
    reason: str | None = None


def check_command(command: str) -> CommandCheck:
    command = command.strip()
    if not command:
        return CommandCheck(False, "", "No command provided")
    base = command.split()[0]
    if base not in ALLOWED_COMMANDS:
        return CommandCheck(
            False, base,
            f"Command '{base}' is not allowed for security reasons.",
        )
    if base not in _METACHAR_EXEMPT and any(p in command for p in DANGEROUS_PATTERNS):
        return CommandCheck(
            False, base, "Command contains potentially dangerous characters and cannot be executed.",
        )
    return CommandCheck(True, base)
