"""Terminal Policy — verifies the command whitelist and metacharacter filter."""

import pytest

from hackshield.core.terminal_policy import check_command


@pytest.mark.parametrize("command", ["ls -la", "python main.py", "npm install", "pwd", "  cat a.txt  "])
def test_whitelisted_commands_pass(command):
    assert check_command(command).allowed


def test_empty_command_rejected():
    check = check_command("   ")
    assert not check.allowed
    assert check.reason == "No command provided"


def test_unknown_command_rejected_with_name():
    check = check_command("rm -rf /")
    assert not check.allowed
    assert check.base_command == "rm"
    assert "'rm' is not allowed" in check.reason


@pytest.mark.parametrize("command", ["ls; rm x", "cat a && cat b", "ls | cat", "cat $(id)", "python `x`"])
def test_metacharacters_rejected(command):
    check = check_command(command)
    assert not check.allowed
    assert "dangerous characters" in check.reason


def test_echo_and_git_may_quote_text():
    assert check_command('echo "a > b"').allowed
    assert check_command('git commit -m "fix (again)"').allowed
