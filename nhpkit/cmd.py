"""Running external commands with a time limit."""

from __future__ import annotations

import shutil
import subprocess
from typing import Optional

from . import logger as log

COMMAND_TIMEOUT = 10.0


class CommandError(Exception):
    """An external command failed, timed out or wrote to standard error."""

    def __init__(self, message: str, command_line: str, stderr: str = "") -> None:
        super().__init__(message)
        self.command_line = command_line
        self.stderr = stderr


def _command_line(command: str, args: tuple[str, ...]) -> tuple[list[str], str]:
    argv = [shutil.which(command) or command, *args]
    return argv, " ".join(argv)


def run(command: str, stdin: Optional[str], *args: str) -> tuple[str, str]:
    """Run ``command`` with ``args``, feeding ``stdin`` if it is not empty.

    Returns the standard output with newlines removed and the command line.
    Raises :class:`CommandError` on failure, on timeout, or when the
    command writes anything to standard error.
    """
    argv, command_line = _command_line(command, args)
    io_options: dict = (
        {"input": stdin.encode("utf-8")} if stdin else {"stdin": subprocess.DEVNULL}
    )
    try:
        completed = subprocess.run(
            argv, capture_output=True, timeout=COMMAND_TIMEOUT, **io_options
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandError(
            f"command timed out after {COMMAND_TIMEOUT:g}s", command_line
        ) from exc
    except OSError as exc:
        raise CommandError(str(exc), command_line) from exc

    stderr = completed.stderr.decode("utf-8", errors="replace")
    if completed.returncode != 0:
        raise CommandError(
            f"exit status {completed.returncode}", command_line, stderr
        )
    if stderr:
        log.error("%s", stderr)
        raise CommandError(stderr, command_line, stderr)

    output = completed.stdout.decode("utf-8", errors="replace").replace("\n", "")
    return output, command_line