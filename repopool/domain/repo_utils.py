import hashlib
import platform
import re
from pathlib import Path
from typing import Optional

NOARCH = "noarch"

_REMOTE_SCHEMES = ("http://", "https://", "ftp://")


def get_machine_arch() -> str:
    """Machine type of the running platform, e.g. 'x86_64'."""
    return platform.machine()


def check_repo_arch(uri: str, machine: Optional[str] = None) -> bool:
    """
    True if the last path component of the URI is 'noarch' or the machine type.

    A URI without any '/' or ending in '/' never matches.
    """
    if machine is None:
        machine = get_machine_arch()
    slash = uri.rfind("/")
    if slash == -1:
        return False
    last = uri[slash + 1:]
    if not last:
        return False
    return last == NOARCH or last == machine


def is_remote_uri(uri: str) -> bool:
    return uri.startswith(_REMOTE_SCHEMES)


def remote_repo_dirname(uri: str) -> str:
    """
    Directory name used to cache a remote repository index locally.

    A readable form of the URI followed by a digest of the full URI, so that
    URIs which only differ in '/', ':' or '_' never share a directory:
    'http://repo.example.org/current/x86_64' -> 'repo.example.org_current_x86_64_<12 hex>'
    """
    stripped = re.sub(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", "", uri)
    readable = stripped.replace("/", "_").replace(":", "_")
    digest = hashlib.sha256(uri.encode("utf-8")).hexdigest()[:12]
    return f"{readable}_{digest}"


def pkg_index_path(uri: str, cache_dir: Path, index_filename: str) -> Path:
    """
    Deterministic local path of the index file for a repository URI.

    Remote repositories live under the cache directory; local repositories
    keep their index inside the repository directory itself.
    """
    if is_remote_uri(uri):
        return Path(cache_dir) / remote_repo_dirname(uri) / index_filename
    if uri.startswith("file://"):
        uri = uri[len("file://"):]
    return Path(uri).expanduser() / index_filename
