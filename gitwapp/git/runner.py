"""Git command runner with timeout handling."""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

# Applied to every invocation. Messages must stay in English for failure
# classification, prompts must never block, and file arguments are paths.
BASE_ENV = {
    "LC_ALL": "C",
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_LITERAL_PATHSPECS": "1",
}


@dataclass
class GitResult:
    """Result of a git command."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """stdout and stderr combined, for message matching."""
        return f"{self.stdout}\n{self.stderr}"


def _build_env(env: dict[str, str] | None) -> dict[str, str]:
    merged = dict(os.environ)
    merged.update(BASE_ENV)
    if env:
        merged.update(env)
    return merged


def _build_cmd(args: list[str], cwd: Path, options: list[str] | None) -> list[str]:
    return ["git", "-C", str(cwd)] + (options or []) + args


def run_git(
    args: list[str],
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT,
    env: dict[str, str] | None = None,
    input: str | None = None,
    options: list[str] | None = None,
) -> GitResult:
    """
    Run a git command with timeout handling.

    Args:
        args: Git command arguments (e.g., ["status", "--porcelain"])
        cwd: Working directory for the command
        timeout: Timeout in seconds
        env: Extra environment variables layered over the process environment
        input: Text fed to the command's stdin
        options: Global git options placed before the subcommand (e.g., ["-c", "k=v"])

    Returns:
        GitResult with returncode, stdout, stderr, and timed_out flag
    """
    cmd = _build_cmd(args, cwd, options)
    logger.debug("Running: git %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            env=_build_env(env),
            input=input,
        )
        return GitResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    except subprocess.TimeoutExpired:
        logger.warning("git %s timed out after %ss in %s", args[0], timeout, cwd)
        return GitResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except FileNotFoundError:
        return GitResult(
            returncode=127,
            stdout="",
            stderr="git executable not found",
        )


def iter_git_lines(args: list[str], cwd: Path) -> Iterator[str]:
    """
    Stream stdout lines of a git command.

    The child process is terminated as soon as the caller stops iterating,
    so a consumer that breaks early never pays for the rest of the output.
    Output from a failed command is simply whatever was printed before exit.
    """
    cmd = _build_cmd(args, cwd, None)
    logger.debug("Streaming: git %s (cwd=%s)", " ".join(args), cwd)
    proc = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
        encoding="utf-8",
        errors="replace",
        env=_build_env(None),
    )
    try:
        for line in proc.stdout:
            yield line.rstrip("\n")
    finally:
        if proc.poll() is None:
            proc.terminate()
        proc.stdout.close()
        proc.wait()
