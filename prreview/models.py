from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

STATUS_LABELS: dict[str, str] = {
    "A": "Added",
    "M": "Modified",
    "D": "Deleted",
    "R": "Renamed",
    "C": "Copied",
    "T": "Type Changed",
}


class ReviewType(str, Enum):
    BRANCH = "BranchComparison"
    UNCOMMITTED = "UncommittedAll"
    STAGED = "UncommittedStagedOnly"

    @property
    def label(self) -> str:
        return {
            ReviewType.BRANCH: "Branch Comparison",
            ReviewType.UNCOMMITTED: "Uncommitted Changes (staged + unstaged)",
            ReviewType.STAGED: "Staged Changes Only",
        }[self]

    @property
    def is_uncommitted(self) -> bool:
        return self is not ReviewType.BRANCH


class BranchSource(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    REMOTE_HEAD = "remote_head"
    REMOTE_LISTING = "remote_listing"
    FALLBACK = "fallback"


class RepositoryContext(BaseModel):
    """Where git commands run. Replaces the process working directory."""

    model_config = ConfigDict(frozen=True)

    path: Path
    remote: str = "origin"
    git: str = "git"


class ComparisonRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_branch: str | None = None
    mode: ReviewType = ReviewType.BRANCH
    include_new_files: bool = True           # uncommitted modes only
    output_directory: Path = Path(".")
    include_prompt_template: bool = True

    @classmethod
    def from_options(
        cls,
        target_branch: str | None = None,
        output_path: str | Path = ".",
        include_prompt: bool = True,
        compare_uncommitted: bool = False,
        staged_only: bool = False,
        include_new_files: bool = True,
    ) -> "ComparisonRequest":
        """Map invocation flags onto a mode. ``staged_only`` implies uncommitted."""
        if staged_only:
            mode = ReviewType.STAGED
        elif compare_uncommitted:
            mode = ReviewType.UNCOMMITTED
        else:
            mode = ReviewType.BRANCH
        return cls(
            target_branch=target_branch or None,
            mode=mode,
            include_new_files=include_new_files,
            output_directory=Path(output_path),
            include_prompt_template=include_prompt,
        )

    @property
    def includes_untracked(self) -> bool:
        return self.mode.is_uncommitted and self.include_new_files


class BranchResolutionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    source: BranchSource


class FileChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str                    # git status letter, similarity score stripped
    path: str
    old_path: str | None = None    # renames and copies

    @property
    def label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status)


class DiffQuerySpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: str
    tip: str | None = None
    staged_only: bool = False
    three_dot: bool = False

    def revision_args(self) -> list[str]:
        if self.three_dot:
            return [f"{self.base}...{self.tip or 'HEAD'}"]
        if self.staged_only:
            return ["--cached", self.base]
        return [self.base]


class DiffSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    changes: list[FileChange] = Field(default_factory=list)
    stat: str = ""
    commit_subjects: list[str] = Field(default_factory=list)
    diff: str = ""
    untracked_files: list[str] = Field(default_factory=list)

    @property
    def files_changed(self) -> int:
        return len(self.changes)

    @property
    def is_empty(self) -> bool:
        return not self.changes and not self.untracked_files


class ReportMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_branch: str
    target_branch: str
    timestamp: datetime
    latest_subject: str = ""


class ReviewReport(BaseModel):
    """Rendered header and diff. New file sections are read from ``root`` when written."""

    model_config = ConfigDict(frozen=True)

    header: str
    diff_section: str
    root: Path = Path(".")
    new_files: list[str] = Field(default_factory=list)


class ReviewResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    report_path: Path | None = None
    prompt_path: Path | None = None
    current_branch: str | None = None
    target_branch: str | None = None
    files_changed: int = 0
    untracked_count: int = 0
    untracked_files: list[str] = Field(default_factory=list)
    review_type: ReviewType
    status: str

    @property
    def succeeded(self) -> bool:
        return self.status == "Success"
