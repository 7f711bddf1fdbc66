"""Shell and git utilities.

Provides simple wrappers around subprocess calls for the external tools the
release pipeline delegates to (git, gh, turbo), plus output formatting
helpers shared by both commands.
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Sequence


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "tag", "--points-at", "HEAD").
        check: If True (default), raise on non-zero exit.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def capture(cmd: Sequence[str]) -> str:
    """Run a command with all output captured and return its stdout.

    Nothing is streamed to the terminal. A non-zero exit raises
    CalledProcessError carrying the captured stderr, and a missing
    executable raises FileNotFoundError.
    """
    result = subprocess.run(list(cmd), capture_output=True, text=True, check=True)
    return result.stdout


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    print(f"ℹ️  {msg}")


def warn(msg: str) -> None:
    print(f"⚠️  {msg}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the command.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
