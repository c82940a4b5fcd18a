import subprocess
from typing import Protocol

from loguru import logger

from .errors import GitCommandError
from .models import DiffQuerySpec, FileChange, RepositoryContext


class VersionControlQuery(Protocol):
    """Read-only view of a repository used by the review pipeline."""

    remote: str

    def is_repository(self) -> bool: ...

    def ref_exists(self, name: str, remote: bool = False) -> bool: ...

    def resolve_remote_default_ref(self) -> str | None: ...

    def list_remote_branches(self) -> list[str]: ...

    def list_local_branches(self) -> list[str]: ...

    def diff_name_status(self, spec: DiffQuerySpec) -> list[FileChange]: ...

    def diff_stat(self, spec: DiffQuerySpec) -> str: ...

    def diff_patch(self, spec: DiffQuerySpec) -> str: ...

    def list_untracked_files(self) -> list[str]: ...

    def current_branch_name(self) -> str: ...

    def latest_commit_subject(self) -> str: ...

    def commit_subjects_between(self, base: str, tip: str) -> list[str]: ...


def parse_name_status(text: str) -> list[FileChange]:
    """Parse ``git diff --name-status`` output into FileChange records.

    Lines look like ``M\\tpath`` or, for renames and copies,
    ``R087\\told\\tnew``. The similarity score is dropped; an unknown status
    letter is kept as-is.
    """
    changes = []
    for line in text.splitlines():
        if not line.strip():
            continue
        fields = line.split("\t")
        if len(fields) < 2:
            continue
        code = fields[0].strip()
        status = code[:1]
        if len(fields) >= 3:
            changes.append(FileChange(status=status, path=fields[2], old_path=fields[1]))
        else:
            changes.append(FileChange(status=status, path=fields[1]))
    return changes


class GitQuery:
    """VersionControlQuery backed by the ``git`` executable."""

    def __init__(self, context: RepositoryContext):
        self.context = context
        self.remote = context.remote

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.context.git, "-c", "core.quotepath=off", *args]
        logger.debug("Running {}", " ".join(cmd))
        return subprocess.run(
            cmd,
            cwd=self.context.path,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    def _output(self, *args: str) -> str:
        result = self._run(*args)
        if result.returncode != 0:
            raise GitCommandError([self.context.git, *args], result.stderr)
        return result.stdout

    def is_repository(self) -> bool:
        try:
            result = self._run("rev-parse", "--is-inside-work-tree")
        except OSError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def ref_exists(self, name: str, remote: bool = False) -> bool:
        namespace = "refs/remotes" if remote else "refs/heads"
        result = self._run("show-ref", "--verify", "--quiet", f"{namespace}/{name}")
        return result.returncode == 0

    def resolve_remote_default_ref(self) -> str | None:
        result = self._run("symbolic-ref", "--quiet", f"refs/remotes/{self.remote}/HEAD")
        if result.returncode != 0:
            return None
        ref = result.stdout.strip()
        prefix = f"refs/remotes/{self.remote}/"
        if ref.startswith(prefix):
            ref = ref[len(prefix):]
        return ref or None

    def list_remote_branches(self) -> list[str]:
        out = self._output("branch", "-r", "--format=%(refname:short)")
        branches = []
        for line in out.splitlines():
            name = line.strip()
            # origin/HEAD shows up as "origin" or "origin/HEAD" depending on git version
            if not name or "->" in name or name.endswith("/HEAD") or "/" not in name:
                continue
            branches.append(name)
        return branches

    def list_local_branches(self) -> list[str]:
        out = self._output("branch", "--format=%(refname:short)")
        return [line.strip() for line in out.splitlines() if line.strip()]

    def diff_name_status(self, spec: DiffQuerySpec) -> list[FileChange]:
        return parse_name_status(self._output("diff", "--name-status", *spec.revision_args()))

    def diff_stat(self, spec: DiffQuerySpec) -> str:
        return self._output("diff", "--stat", *spec.revision_args()).rstrip("\n")

    def diff_patch(self, spec: DiffQuerySpec) -> str:
        return self._output("diff", *spec.revision_args()).rstrip("\n")

    def list_untracked_files(self) -> list[str]:
        out = self._output("ls-files", "--others", "--exclude-standard")
        return [f for f in out.splitlines() if f]

    def current_branch_name(self) -> str:
        result = self._run("symbolic-ref", "--quiet", "--short", "HEAD")
        if result.returncode != 0:
            return "HEAD"  # detached
        return result.stdout.strip()

    def latest_commit_subject(self) -> str:
        result = self._run("log", "-1", "--pretty=format:%s")
        # empty repositories have no HEAD commit yet
        if result.returncode != 0:
            return ""
        return result.stdout.strip()

    def commit_subjects_between(self, base: str, tip: str) -> list[str]:
        out = self._output("log", f"{base}..{tip}", "--pretty=format:%s")
        return [s for s in out.splitlines() if s.strip()]
