"""
Filesystem location helpers.

Resolves the user's documents directory and prepares directories under it.
"""

import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Mapping, Optional, Union

PathLike = Union[str, Path]


def resolve_documents_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the platform documents directory.

    Windows and macOS use ~/Documents. On Linux and other POSIX systems the
    XDG_DOCUMENTS_DIR variable wins, then `xdg-user-dir DOCUMENTS`, then
    ~/Documents.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Absolute path of the documents directory (it may not exist yet)

    Raises:
        RuntimeError: If the home directory cannot be determined
    """
    environ = os.environ if environ is None else environ
    home = Path.home()

    if sys.platform in ("win32", "darwin"):
        return home / "Documents"

    xdg_documents = environ.get("XDG_DOCUMENTS_DIR")
    if xdg_documents:
        return Path(os.path.expandvars(xdg_documents.replace("$HOME", str(home)))).expanduser()

    from_tool = _query_xdg_user_dir()
    if from_tool is not None:
        return from_tool

    return home / "Documents"


def _query_xdg_user_dir() -> Optional[Path]:
    """Ask xdg-user-dir for the documents directory, if the tool is installed."""
    executable = shutil.which("xdg-user-dir")
    if executable is None:
        return None
    try:
        result = subprocess.run(
            [executable, "DOCUMENTS"],
            capture_output=True,
            text=True,
            timeout=5,
            check=True
        )
    except (OSError, subprocess.SubprocessError):
        return None

    output = result.stdout.strip()
    # xdg-user-dir echoes $HOME when DOCUMENTS is not configured
    if not output or Path(output) == Path.home():
        return None
    return Path(output)


def path_exists(path: PathLike) -> bool:
    """Check whether a path exists. Never raises."""
    try:
        return Path(path).exists()
    except OSError:
        return False


def create_directory_recursive(path: PathLike) -> None:
    """Create a directory and any missing parents. Existing directories are fine."""
    Path(path).mkdir(parents=True, exist_ok=True)
