import sys

import pytest

from nhpkit.cmd import CommandError, run


def test_output_has_newlines_removed():
    output, _ = run(sys.executable, "", "-c", "print('a'); print('b')")
    assert output == "ab"


def test_stdin_is_passed_to_command():
    output, _ = run(
        sys.executable, "hello", "-c", "import sys; sys.stdout.write(sys.stdin.read())"
    )
    assert output == "hello"


def test_empty_stdin_reads_nothing():
    output, _ = run(
        sys.executable, "", "-c", "import sys; sys.stdout.write(repr(sys.stdin.read()))"
    )
    assert output == "''"


def test_command_line_lists_arguments():
    _, command_line = run(sys.executable, "", "-c", "pass")
    assert command_line.split()[-2:] == ["-c", "pass"]


def test_stderr_output_raises():
    with pytest.raises(CommandError) as excinfo:
        run(sys.executable, "", "-c", "import sys; sys.stderr.write('oops')")
    assert excinfo.value.stderr == "oops"
    assert str(excinfo.value) == "oops"


def test_nonzero_exit_raises():
    with pytest.raises(CommandError) as excinfo:
        run(sys.executable, "", "-c", "import sys; sys.exit(3)")
    assert "3" in str(excinfo.value)
    assert "-c" in excinfo.value.command_line


def test_missing_command_raises():
    with pytest.raises(CommandError):
        run("definitely-not-a-real-command-nhpkit", "")