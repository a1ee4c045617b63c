"""Editor round trip for listing buffers.

Writes the current listing to a temporary file, runs ``$EDITOR`` on it, and
reconciles whatever the user saved. Returns an error message string instead
of raising for UI-friendly handling.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from .engine import DiredEngine
from .reconcile import RenameResult


def launch_editor(target: Path) -> str | None:
    editor_env = os.environ.get("EDITOR", "").strip()
    if not editor_env:
        return "Cannot edit: $EDITOR is not set."
    cmd = shlex.split(editor_env)
    if not cmd:
        return "Cannot edit: $EDITOR is empty."

    try:
        subprocess.run([*cmd, str(target)], check=False)
    except OSError as exc:
        return f"Failed to launch editor: {exc}"
    return None


def edit_listing(engine: DiredEngine, directory: Path) -> tuple[list[RenameResult], str | None]:
    """Let the user edit ``directory``'s listing and apply the renames.

    Returns ``(results, error)``. ``error`` is set when the editor could not
    run or the buffer could not be read back; nothing is renamed then.
    """
    old_text = engine.render(directory)
    with tempfile.TemporaryDirectory(prefix="lazydired-") as tmp:
        buffer_path = Path(tmp) / "listing.dired"
        buffer_path.write_text(old_text + "\n", encoding="utf-8")

        error = launch_editor(buffer_path)
        if error is not None:
            return [], error

        try:
            new_text = buffer_path.read_text(encoding="utf-8")
        except OSError as exc:
            return [], f"Cannot read edited listing: {exc}"

    if new_text.endswith("\n"):
        new_text = new_text[:-1]
    return engine.reconcile(directory, old_text, new_text), None


__all__ = ["launch_editor", "edit_listing"]
