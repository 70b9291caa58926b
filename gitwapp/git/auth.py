"""
Credential resolution for push and pull.

The credential source is chosen from the remote URL's scheme and resolved
again on every call, so an agent started or a key added between two pushes
is picked up without restarting anything.

SSH remotes: a running ssh-agent, else the first conventional key file.
HTTPS remotes: whatever git's credential helpers return for the URL.
Anything else (a local path, file://) needs no credentials.
"""

import logging
import os
import re
import shlex
import stat
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

from gitwapp.git.errors import AuthenticationUnavailableError
from gitwapp.git.runner import run_git

logger = logging.getLogger(__name__)

SSH_KEY_NAMES = ("id_ed25519", "id_rsa", "id_ecdsa")

# user@host:path, the scp-like form git accepts for SSH
SCP_LIKE_PATTERN = re.compile(r"^(?:[^@/\s]+@)?[^@/:\s]{2,}:(?!//)")

USERNAME_ENV = "GITWAPP_CREDENTIAL_USERNAME"
PASSWORD_ENV = "GITWAPP_CREDENTIAL_PASSWORD"

# Inline credential helper: git runs it through the shell and reads
# username/password from the environment, so secrets never reach argv.
INLINE_HELPER = (
    f'!f() {{ test "$1" = get || exit 0; '
    f'echo "username=${{{USERNAME_ENV}}}"; echo "password=${{{PASSWORD_ENV}}}"; }}; f'
)

SSH_COMMAND_BASE = "ssh -o BatchMode=yes"


@dataclass
class AuthMethod:
    """How a network git command should authenticate."""
    kind: str  # "none", "ssh-agent", "ssh-key", "https-credential"
    env: dict[str, str] = field(default_factory=dict)
    options: list[str] = field(default_factory=list)  # Global git options
    description: str = ""

    def __repr__(self) -> str:
        # Never leak credentials through logs or tracebacks
        return f"AuthMethod(kind={self.kind!r}, description={self.description!r})"


def url_scheme(url: str) -> str:
    """Classify a remote URL as "ssh", "https" or "local"."""
    lowered = url.lower()
    if lowered.startswith(("ssh://", "git+ssh://", "ssh+git://")) or url.startswith("git@"):
        return "ssh"
    if lowered.startswith(("https://", "http://")):
        return "https"
    if "://" not in url and SCP_LIKE_PATTERN.match(url):
        return "ssh"
    return "local"


def _agent_available(environ: dict[str, str]) -> bool:
    sock = environ.get("SSH_AUTH_SOCK")
    if not sock:
        return False
    try:
        return stat.S_ISSOCK(os.stat(sock).st_mode)
    except OSError:
        return False


def resolve_ssh_auth(home: Path, environ: dict[str, str]) -> AuthMethod:
    """ssh-agent first, then conventional key files under ~/.ssh."""
    if _agent_available(environ):
        return AuthMethod(
            kind="ssh-agent",
            env={"GIT_SSH_COMMAND": SSH_COMMAND_BASE},
            description=f"ssh-agent at {environ['SSH_AUTH_SOCK']}",
        )

    for name in SSH_KEY_NAMES:
        key_path = home / ".ssh" / name
        if key_path.is_file() and os.access(key_path, os.R_OK):
            command = f"{SSH_COMMAND_BASE} -o IdentitiesOnly=yes -i {shlex.quote(str(key_path))}"
            return AuthMethod(
                kind="ssh-key",
                env={"GIT_SSH_COMMAND": command},
                description=f"key file {key_path}",
            )

    raise AuthenticationUnavailableError(
        "No SSH authentication available: ssh-agent is not running and no key found in "
        f"{home / '.ssh'} ({', '.join(SSH_KEY_NAMES)})"
    )


def _parse_credential_output(output: str) -> dict[str, str]:
    values = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            values[key.strip()] = value
    return values


def resolve_https_auth(url: str, cwd: Path) -> AuthMethod:
    """Ask git's credential helpers for the URL's username and password."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"

    if parts.username and parts.password:
        # Credentials embedded in the URL; git uses them as-is.
        return AuthMethod(kind="https-credential", description=f"URL credentials for {host}")

    request = [f"protocol={parts.scheme}", f"host={host}"]
    if parts.path.strip("/"):
        request.append(f"path={parts.path.lstrip('/')}")
    if parts.username:
        request.append(f"username={parts.username}")

    result = run_git(["credential", "fill"], cwd, input="\n".join(request) + "\n\n")
    values = _parse_credential_output(result.stdout) if result.success else {}
    username = values.get("username", "")
    password = values.get("password", "")
    if not username or not password:
        raise AuthenticationUnavailableError(f"No credentials found for {parts.scheme}://{host}")

    return AuthMethod(
        kind="https-credential",
        env={USERNAME_ENV: username, PASSWORD_ENV: password},
        # The empty helper clears any configured helpers so only ours answers.
        options=["-c", "credential.helper=", "-c", f"credential.helper={INLINE_HELPER}"],
        description=f"credential helper for {host} (user {username})",
    )


def resolve_auth(
    url: str,
    cwd: Path,
    home: Path | None = None,
    environ: dict[str, str] | None = None,
) -> AuthMethod:
    """
    Pick the authentication method for a remote URL.

    Args:
        url: Remote URL as configured in the repository
        cwd: Repository the credential lookup runs in (repository config applies)
        home: Home directory holding .ssh (defaults to the current user's)
        environ: Environment to inspect for SSH_AUTH_SOCK (defaults to os.environ)

    Raises:
        AuthenticationUnavailableError: no credential source is usable
    """
    scheme = url_scheme(url)
    if scheme == "ssh":
        auth = resolve_ssh_auth(home or Path.home(), os.environ if environ is None else environ)
    elif scheme == "https":
        auth = resolve_https_auth(url, cwd)
    else:
        auth = AuthMethod(kind="none", description="local transport")

    logger.debug("Resolved %s auth: %s", scheme, auth.description)
    return auth
