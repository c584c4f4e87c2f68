"""Code runner — verifies compile outcomes, both timeouts and scratch-directory cleanup.

Tests:
    - Compiler warnings on stderr do not stop the run; a non-zero exit does
    - Compile and execution timeouts report their stage
    - Every run removes its scratch directory
"""

import sys

import hackshield.services.code_runner as code_runner
from hackshield.services.code_runner import CodeRunner, ProcessTimeout

ACCESS_ID = "AB12CD34"


def _runner(tmp_path, **overrides):
    options = {
        "workspace_root": str(tmp_path),
        "python_command": sys.executable,
        "node_command": "node",
        "execution_timeout": 0.5,
        "compile_timeout": 0.5,
    }
    options.update(overrides)
    return CodeRunner(**options)


def _scripted_compiler(monkeypatch, compile_result=None, compile_timeout=False):
    """Replace process execution: the compile step returns `compile_result`,
    the run step prints "ran"."""
    calls = []

    async def fake_run_process(argv, cwd, timeout, max_output_bytes=None, stage="Execution"):
        calls.append((stage, argv[0]))
        if stage == "Compilation":
            if compile_timeout:
                raise ProcessTimeout(timeout, stage)
            return compile_result
        return 0, "ran\n", ""

    monkeypatch.setattr(code_runner, "run_process", fake_run_process)
    return calls


def _leftover_runs(tmp_path):
    return list((tmp_path / ACCESS_ID).iterdir())


async def test_python_runs_and_cleans_up(tmp_path):
    result = await _runner(tmp_path).run(ACCESS_ID, "python", "print('hi')")
    assert result.to_dict() == {"output": "hi\n", "error": None, "success": True}
    assert _leftover_runs(tmp_path) == []


async def test_execution_timeout_kills_runaway_code(tmp_path):
    result = await _runner(tmp_path).run(ACCESS_ID, "python", "while True:\n    pass\n")
    assert result.success is False
    assert result.error == "Execution timed out after 0.5 seconds"
    assert _leftover_runs(tmp_path) == []


async def test_compiler_warning_does_not_fail_the_run(tmp_path, monkeypatch):
    calls = _scripted_compiler(monkeypatch, compile_result=(0, "", "warning: unused variable 'x'"))
    result = await _runner(tmp_path).run(ACCESS_ID, "cpp", "int main() { int x; }")
    assert result.to_dict() == {"output": "ran\n", "error": None, "success": True}
    assert [stage for stage, _ in calls] == ["Compilation", "Execution"]


async def test_failed_compile_stops_before_running(tmp_path, monkeypatch):
    calls = _scripted_compiler(monkeypatch, compile_result=(1, "", "Main.java:1: error: ';' expected\n"))
    result = await _runner(tmp_path).run(ACCESS_ID, "java", "class Main {")
    assert result.error == "Main.java:1: error: ';' expected"
    assert [stage for stage, _ in calls] == ["Compilation"]


async def test_silent_compile_failure_reports_exit_code(tmp_path, monkeypatch):
    calls = _scripted_compiler(monkeypatch, compile_result=(1, "", ""))
    result = await _runner(tmp_path).run(ACCESS_ID, "cpp", "int main(")
    assert result.error == "Compilation failed with exit code 1"
    assert [stage for stage, _ in calls] == ["Compilation"]


async def test_compile_timeout_reports_compilation_stage(tmp_path, monkeypatch):
    _scripted_compiler(monkeypatch, compile_timeout=True)
    result = await _runner(tmp_path).run(ACCESS_ID, "java", "class Main {}")
    assert result.error == "Compilation timed out after 0.5 seconds"
    assert _leftover_runs(tmp_path) == []
