from pathlib import Path

import pytest

from prreview import editor
from prreview.errors import ExternalEditorUnavailableError


def test_editor_command_precedence(monkeypatch):
    monkeypatch.delenv("PR_REVIEW_EDITOR", raising=False)
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.setenv("EDITOR", "vim -p")
    assert editor.editor_command() == ["vim", "-p"]
    monkeypatch.setenv("PR_REVIEW_EDITOR", "subl")
    assert editor.editor_command() == ["subl"]
    assert editor.editor_command("nano") == ["nano"]


def test_missing_editor_raises(monkeypatch):
    monkeypatch.setattr(editor.shutil, "which", lambda name: None)
    with pytest.raises(ExternalEditorUnavailableError):
        editor.open_in_editor([Path("report.md")], "no-such-editor")


def test_editor_launched_with_paths(monkeypatch):
    launched = []
    monkeypatch.setattr(editor.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(editor.subprocess, "Popen", lambda cmd: launched.append(cmd))
    editor.editor_hook("code --reuse-window")([Path("a.md"), Path("b.txt")])
    assert launched == [["code", "--reuse-window", "a.md", "b.txt"]]


def test_unparsable_editor_value_raises(monkeypatch):
    monkeypatch.delenv("PR_REVIEW_EDITOR", raising=False)
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.setenv("EDITOR", "code '")
    with pytest.raises(ExternalEditorUnavailableError, match="could not be parsed"):
        editor.editor_command()
