"""Terminal runner — verifies the timeout and output cap on whitelisted commands."""

import sys

from hackshield.services.terminal_runner import TerminalRunner

ACCESS_ID = "AB12CD34"


def _runner(tmp_path, timeout=0.5, max_output_bytes=64):
    return TerminalRunner(
        workspace_root=str(tmp_path), timeout=timeout, max_output_bytes=max_output_bytes,
        python_command=sys.executable,
    )


async def test_output_is_capped(tmp_path):
    runner = _runner(tmp_path)
    (runner.workdir(ACCESS_ID) / "big.txt").write_text("x" * 5000)
    output = await runner.execute(ACCESS_ID, "cat big.txt")
    assert output == "x" * 64


async def test_long_running_command_times_out(tmp_path):
    runner = _runner(tmp_path)
    (runner.workdir(ACCESS_ID) / "spin.py").write_text("while True:\n    pass\n")
    output = await runner.execute(ACCESS_ID, "python spin.py")
    assert output == "Command timed out after 0.5 seconds"


async def test_silent_failure_reports_exit_code(tmp_path):
    runner = _runner(tmp_path)
    (runner.workdir(ACCESS_ID) / "fail.py").write_text("import sys\nsys.exit(3)\n")
    output = await runner.execute(ACCESS_ID, "python fail.py")
    assert output == "Command failed with exit code 3"
