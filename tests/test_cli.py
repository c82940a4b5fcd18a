import json

import pytest
from click.testing import CliRunner

import main
import prreview.service as service
from conftest import FakeQuery
from prreview.models import FileChange


@pytest.fixture
def fake_git(monkeypatch):
    holder = {}

    def factory(context):
        holder["context"] = context
        return holder["query"]

    monkeypatch.setattr(service, "GitQuery", factory)
    monkeypatch.setattr(main, "configure_logging", lambda level: None)
    for var in ("PR_REVIEW_TARGET", "PR_REVIEW_OUTPUT", "PR_REVIEW_REMOTE", "PR_REVIEW_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return holder


def test_cli_writes_report(tmp_path, fake_git):
    fake_git["query"] = FakeQuery(local={"main"}, changes=[FileChange(status="A", path="foo.txt")], patch="+x")
    out = tmp_path / "out"
    result = CliRunner().invoke(main.cli, [str(tmp_path), "-t", "main", "-o", str(out), "--no-prompt"])

    assert result.exit_code == 0, result.output
    assert "Files changed: 1" in result.output
    assert "Report: " in result.output
    assert len(list(out.glob("code-review_*.md"))) == 1
    assert not list(out.glob("review-prompt-template_*.txt"))
    assert fake_git["context"].remote == "origin"


def test_cli_no_changes_exits_cleanly(tmp_path, fake_git):
    fake_git["query"] = FakeQuery(local={"main"})
    result = CliRunner().invoke(main.cli, [str(tmp_path), "--uncommitted", "-t", "main", "-o", str(tmp_path / "o")])
    assert result.exit_code == 0
    assert "No changes found" in result.output
    assert not (tmp_path / "o").exists()


def test_cli_missing_target_fails(tmp_path, fake_git):
    fake_git["query"] = FakeQuery(local={"main"})
    result = CliRunner().invoke(main.cli, [str(tmp_path), "-t", "doesnotexist"])
    assert result.exit_code == 1
    assert "Target branch 'doesnotexist' not found" in result.output


def test_cli_json_and_env_remote(tmp_path, fake_git, monkeypatch):
    monkeypatch.setenv("PR_REVIEW_REMOTE", "upstream")
    fake_git["query"] = FakeQuery(
        remote_refs={"upstream/main"}, remote="upstream",
        changes=[FileChange(status="M", path="a.py")],
    )
    result = CliRunner().invoke(main.cli, [str(tmp_path), "-o", str(tmp_path / "o"), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["status"] == "Success"
    assert payload["target_branch"] == "upstream/main"
    assert payload["review_type"] == "BranchComparison"
    assert fake_git["context"].remote == "upstream"
