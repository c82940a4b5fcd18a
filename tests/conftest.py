"""
Pytest fixtures shared by the review tests.
"""

from datetime import datetime

import pytest

from prreview.errors import GitCommandError
from prreview.models import DiffQuerySpec, FileChange

FIXED_TIME = datetime(2024, 5, 17, 14, 30, 5)


class FakeQuery:
    """In-memory VersionControlQuery."""

    def __init__(
        self,
        local=(),
        remote_refs=(),
        remote_head=None,
        remote_listing=None,
        repository=True,
        current="feature/login",
        subject="Add login form",
        changes=(),
        stat="",
        patch="",
        subjects=(),
        untracked=(),
        remote="origin",
        listing_fails=False,
    ):
        self.remote = remote
        self.local = set(local)
        self.remote_refs = set(remote_refs)
        self.remote_head = remote_head
        self.remote_listing = list(remote_listing) if remote_listing is not None else sorted(self.remote_refs)
        self.repository = repository
        self.current = current
        self.subject = subject
        self.changes = list(changes)
        self.stat = stat
        self.patch = patch
        self.subjects = list(subjects)
        self.untracked = list(untracked)
        self.specs: list[DiffQuerySpec] = []
        self.untracked_calls = 0
        self.listing_fails = listing_fails

    def is_repository(self):
        return self.repository

    def ref_exists(self, name, remote=False):
        return name in (self.remote_refs if remote else self.local)

    def resolve_remote_default_ref(self):
        return self.remote_head

    def list_remote_branches(self):
        if self.listing_fails:
            raise GitCommandError(["git", "branch"], "no remotes")
        return list(self.remote_listing)

    def list_local_branches(self):
        return sorted(self.local)

    def diff_name_status(self, spec):
        self.specs.append(spec)
        return list(self.changes)

    def diff_stat(self, spec):
        return self.stat

    def diff_patch(self, spec):
        return self.patch

    def list_untracked_files(self):
        self.untracked_calls += 1
        return list(self.untracked)

    def current_branch_name(self):
        return self.current

    def latest_commit_subject(self):
        return self.subject

    def commit_subjects_between(self, base, tip):
        return list(self.subjects)


@pytest.fixture
def clock():
    return lambda: FIXED_TIME


@pytest.fixture
def added_foo():
    return FakeQuery(
        local={"main", "feature/login"},
        changes=[FileChange(status="A", path="foo.txt")],
        stat=" foo.txt | 1 +\n 1 file changed, 1 insertion(+)",
        patch=(
            "diff --git a/foo.txt b/foo.txt\n"
            "new file mode 100644\n"
            "--- /dev/null\n"
            "+++ b/foo.txt\n"
            "@@ -0,0 +1 @@\n"
            "+hello foo"
        ),
        subjects=["Add login form"],
    )
