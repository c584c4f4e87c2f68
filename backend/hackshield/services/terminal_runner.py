"""Terminal Runner — executes whitelisted commands for the in-IDE terminal.

Invariants:
    - Every command passes core.terminal_policy.check_command first
    - Commands run via argv exec (shlex split) in <workspace_root>/<access_id>
    - Output is capped at terminal_max_output_bytes; runtime at terminal_timeout_seconds
    - Never raises for command failures: the terminal always gets text back

Design Decisions:
    - `clear` and `cd` are answered in-process: each request is a fresh process,
      so a working-directory change could not persist anyway
"""

import logging
import shlex
from pathlib import Path

from hackshield.config import get_settings
from hackshield.core.terminal_policy import check_command
from hackshield.core.workspace_files import sanitize_file_name
from hackshield.services.code_runner import ProcessTimeout, run_process

logger = logging.getLogger(__name__)


class TerminalRunner:
    def __init__(
        self, workspace_root: str, timeout: float, max_output_bytes: int,
        python_command: str = "python3",
    ):
        self.workspace_root = Path(workspace_root)
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self.python_command = python_command

    def workdir(self, access_id: str) -> Path:
        path = self.workspace_root / sanitize_file_name(access_id) / "terminal"
        path.mkdir(parents=True, exist_ok=True)
        return path

    async def execute(self, access_id: str, command: str) -> str:
        check = check_command(command)
        if not check.allowed:
            logger.info(
                f"Blocked terminal command '{check.base_command}'",
                extra={"access_id": access_id},
            )
            return check.reason or "Command not allowed"

        try:
            argv = shlex.split(command)
        except ValueError as e:
            return f"Could not parse command: {e}"

        if check.base_command == "clear":
            return ""
        cwd = self.workdir(access_id)
        if check.base_command == "cd":
            return self._change_directory(cwd, argv[1:])
        if check.base_command == "python":
            argv[0] = self.python_command

        try:
            returncode, stdout, stderr = await run_process(
                argv, cwd, self.timeout, self.max_output_bytes,
            )
        except ProcessTimeout:
            return f"Command timed out after {self.timeout:g} seconds"
        except FileNotFoundError:
            return f"Command '{check.base_command}' is not available on this server"
        except OSError as e:
            return f"Command failed: {e}"
        if stdout or stderr:
            return stdout or stderr
        if returncode != 0:
            return f"Command failed with exit code {returncode}"
        return "Command executed successfully"

    @staticmethod
    def _change_directory(cwd: Path, args: list[str]) -> str:
        if not args:
            return "Command executed successfully"
        target = (cwd / args[0]).resolve()
        if not target.is_relative_to(cwd.resolve()) or not target.is_dir():
            return f"cd: {args[0]}: No such directory"
        return "Command executed successfully"


def get_terminal_runner() -> TerminalRunner:
    """FastAPI dependency built from settings."""
    settings = get_settings()
    return TerminalRunner(
        workspace_root=settings.workspace_root,
        timeout=settings.terminal_timeout_seconds,
        max_output_bytes=settings.terminal_max_output_bytes,
        python_command=settings.python_command,
    )
