"""
Safe KEY=value parser for gitwapp.env.

Values are taken literally and never handed to a shell, so anything that
would mean something to one (substitution, chaining, pipes) is refused
outright instead of being silently kept.
"""

import re
from pathlib import Path

# Backticks, $( and ${ substitution, ; && || | chaining
FORBIDDEN_VALUE = re.compile(r"`|\$\(|\$\{|;|&&|\|")

KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")

QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def _parse_line(line: str, lineno: int) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()

    key, sep, value = line.partition("=")
    if not sep:
        raise ValueError(f"Line {lineno}: Invalid syntax (no '=')")

    key = key.strip()
    if not KEY_PATTERN.match(key):
        raise ValueError(f"Line {lineno}: Invalid key '{key}'")

    value = _unquote(value.strip())
    if FORBIDDEN_VALUE.search(value):
        raise ValueError(f"Line {lineno}: Forbidden pattern in value for {key}")
    return key, value


def parse_env(text: str) -> dict[str, str]:
    """
    Parse env file content. Later assignments override earlier ones.

    Raises:
        ValueError: if syntax invalid or forbidden pattern found
    """
    values = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        parsed = _parse_line(line, lineno)
        if parsed:
            key, value = parsed
            values[key] = value
    return values


def load_env(filepath: Path | str) -> dict[str, str]:
    """
    Read and parse an env file.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    return parse_env(Path(filepath).read_text())
