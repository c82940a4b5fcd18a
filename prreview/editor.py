import os
import shlex
import shutil
import subprocess
from pathlib import Path

from loguru import logger

from .errors import ExternalEditorUnavailableError

DEFAULT_EDITOR = "code"


def editor_command(editor: str | None = None) -> list[str]:
    """Resolve the editor command line from the argument or the environment."""
    value = (
        editor
        or os.environ.get("PR_REVIEW_EDITOR")
        or os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
        or DEFAULT_EDITOR
    )
    try:
        return shlex.split(value)
    except ValueError as e:
        raise ExternalEditorUnavailableError(value, f"could not be parsed: {e}") from e


def open_in_editor(paths: list[Path], editor: str | None = None) -> None:
    """Hand the generated files to an external editor without waiting for it."""
    cmd = editor_command(editor)
    if not cmd or shutil.which(cmd[0]) is None:
        raise ExternalEditorUnavailableError(cmd[0] if cmd else "")
    logger.debug("Opening {} with {}", [str(p) for p in paths], cmd[0])
    subprocess.Popen([*cmd, *[str(p) for p in paths]])


def editor_hook(editor: str | None = None):
    def hook(paths: list[Path]) -> None:
        open_in_editor(paths, editor)
    return hook
