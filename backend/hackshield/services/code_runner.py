"""Code Runner — compiles and runs one source file per request in a scratch directory.

Invariants:
    - One subprocess per step (compile, run), each bounded by its own timeout
    - A timed-out process is killed before the response is built
    - The scratch directory is removed after every run, success or failure
    - argv exec only: code and file names never pass through a shell
    - A compile step fails only on a non-zero exit; warnings on stderr do not stop the run

Design Decisions:
    - Not a sandbox: no resource limits beyond wall-clock timeouts. Hackathon
      code runs with the server's privileges, same as the in-IDE terminal
    - Per-run subdirectory under <workspace_root>/<access_id>: concurrent runs
      from the same team cannot clobber each other's files
"""

import asyncio
import logging
import re
import secrets
import shutil
from dataclasses import dataclass
from pathlib import Path

from hackshield.config import get_settings
from hackshield.core.workspace_files import LANGUAGE_EXTENSIONS, sanitize_file_name

logger = logging.getLogger(__name__)

EXECUTABLE_LANGUAGES = ("javascript", "typescript", "python", "java", "cpp")
_JAVA_CLASS = re.compile(r"[^A-Za-z0-9_]")


class ProcessTimeout(Exception):
    def __init__(self, timeout: float, stage: str = "Execution"):
        super().__init__(f"{stage} timed out after {timeout:g} seconds")
        self.timeout = timeout
        self.stage = stage


@dataclass
class ExecutionResult:
    output: str = ""
    error: str = ""

    @property
    def success(self) -> bool:
        return not self.error

    def to_dict(self) -> dict:
        return {
            "output": self.output or "No output",
            "error": self.error or None,
            "success": self.success,
        }


async def run_process(
    argv: list[str], cwd: Path, timeout: float, max_output_bytes: int | None = None,
    stage: str = "Execution",
) -> tuple[int, str, str]:
    """Run argv in cwd; returns (returncode, stdout, stderr). Raises ProcessTimeout."""
    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise ProcessTimeout(timeout, stage)
    if max_output_bytes is not None:
        stdout = stdout[:max_output_bytes]
        stderr = stderr[:max_output_bytes]
    return (
        proc.returncode,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )


class CodeRunner:
    def __init__(
        self,
        workspace_root: str,
        python_command: str,
        node_command: str,
        execution_timeout: float,
        compile_timeout: float,
    ):
        self.workspace_root = Path(workspace_root)
        self.python_command = python_command
        self.node_command = node_command
        self.execution_timeout = execution_timeout
        self.compile_timeout = compile_timeout

    async def run(
        self, access_id: str, language: str, code: str, file_name: str | None = None,
    ) -> ExecutionResult:
        if language == "html":
            return ExecutionResult(output="HTML files cannot be executed. Use Preview instead.")
        if language not in EXECUTABLE_LANGUAGES:
            return ExecutionResult(error=f"Language {language} is not supported for execution")

        run_dir = (
            self.workspace_root / sanitize_file_name(access_id) / f"run-{secrets.token_hex(4)}"
        )
        run_dir.mkdir(parents=True, exist_ok=True)
        try:
            return await self._run_in(run_dir, language, code, file_name)
        except ProcessTimeout as e:
            logger.warning(
                f"{e.stage} timed out after {e.timeout:g}s",
                extra={"access_id": access_id, "language": language},
            )
            return ExecutionResult(error=str(e))
        except FileNotFoundError as e:
            logger.error(f"Runtime missing for {language}: {e}")
            return ExecutionResult(error=f"Runtime for {language} is not available on this server")
        finally:
            shutil.rmtree(run_dir, ignore_errors=True)

    async def _run_in(
        self, run_dir: Path, language: str, code: str, file_name: str | None,
    ) -> ExecutionResult:
        if language == "java":
            return await self._run_java(run_dir, code, file_name)
        if language == "cpp":
            return await self._run_cpp(run_dir, code, file_name)

        source = run_dir / self._source_name(language, file_name)
        source.write_text(code, encoding="utf-8")
        interpreter = self.python_command if language == "python" else self.node_command
        return await self._execute([interpreter, source.name], run_dir)

    async def _run_java(self, run_dir: Path, code: str, file_name: str | None) -> ExecutionResult:
        class_name = _JAVA_CLASS.sub("", (file_name or "Main").removesuffix(".java")) or "Main"
        source = run_dir / f"{class_name}.java"
        source.write_text(code, encoding="utf-8")
        failed = await self._compile(["javac", source.name], run_dir)
        if failed is not None:
            return failed
        return await self._execute(["java", "-cp", ".", class_name], run_dir)

    async def _run_cpp(self, run_dir: Path, code: str, file_name: str | None) -> ExecutionResult:
        source = run_dir / self._source_name("cpp", file_name)
        source.write_text(code, encoding="utf-8")
        failed = await self._compile(["g++", source.name, "-o", "program"], run_dir)
        if failed is not None:
            return failed
        return await self._execute([str(run_dir / "program")], run_dir)

    async def _compile(self, argv: list[str], run_dir: Path) -> ExecutionResult | None:
        """Returns the failed result, or None when the compiler exited 0 (warnings allowed)."""
        returncode, _, stderr = await run_process(
            argv, run_dir, self.compile_timeout, stage="Compilation",
        )
        if returncode == 0:
            return None
        return ExecutionResult(error=stderr.strip() or f"Compilation failed with exit code {returncode}")

    async def _execute(self, argv: list[str], run_dir: Path) -> ExecutionResult:
        returncode, stdout, stderr = await run_process(argv, run_dir, self.execution_timeout)
        error = stderr
        if returncode != 0 and not error.strip():
            error = f"Process exited with code {returncode}"
        return ExecutionResult(output=stdout, error=error)

    @staticmethod
    def _source_name(language: str, file_name: str | None) -> str:
        if file_name:
            return sanitize_file_name(file_name)
        return f"code.{LANGUAGE_EXTENSIONS[language]}"


def get_code_runner() -> CodeRunner:
    """FastAPI dependency built from settings."""
    settings = get_settings()
    return CodeRunner(
        workspace_root=settings.workspace_root,
        python_command=settings.python_command,
        node_command=settings.node_command,
        execution_timeout=settings.execution_timeout_seconds,
        compile_timeout=settings.compile_timeout_seconds,
    )
