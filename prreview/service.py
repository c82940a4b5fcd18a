import subprocess
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from loguru import logger

from .branches import qualify_target, resolve_default_branch
from .comparison import collect_summary, derive_diff_parameters
from .errors import ExternalEditorUnavailableError, NotARepositoryError, TargetBranchNotFoundError
from .git import GitQuery, VersionControlQuery
from .models import ComparisonRequest, RepositoryContext, ReportMeta, ReviewResult
from .prompt import build_prompt_template
from .report import assemble_report, report_filename, write_report

SUCCESS = "Success"
NO_CHANGES = "No changes found"

Clock = Callable[[], datetime]
GeneratedHook = Callable[[list[Path]], None]


class ReviewStage(str, Enum):
    VALIDATING_REPOSITORY = "ValidatingRepository"
    VALIDATING_TARGET = "ValidatingTarget"
    RESOLVING_DEFAULTS = "ResolvingDefaults"
    QUERYING_DIFF = "QueryingDiff"
    CHECKING_FOR_CHANGES = "CheckingForChanges"
    ASSEMBLING_REPORT = "AssemblingReport"
    WRITING_FILES = "WritingFiles"
    OPENING_EDITOR = "OpeningEditor"
    DONE = "Done"


def _enter(stage: ReviewStage) -> None:
    logger.debug("Stage: {}", stage.value)


def _validate_repository(query: VersionControlQuery, root: Path) -> None:
    if not query.is_repository():
        raise NotARepositoryError(root)


def _run_hook(hook: GeneratedHook, paths: list[Path]) -> None:
    try:
        hook(paths)
    except (ExternalEditorUnavailableError, OSError, subprocess.SubprocessError) as e:
        logger.warning("Could not open generated files: {}", e)


def generate_review(
    request: ComparisonRequest,
    query: VersionControlQuery,
    root: Path,
    clock: Clock | None = None,
    on_generated: GeneratedHook | None = None,
) -> ReviewResult:
    """Generate a review report for the repository behind ``query``.

    Validation failures (not a repository, unknown target) and an empty diff
    return a result with a descriptive status and no files written. Git
    failures after validation propagate as GitCommandError. The
    ``on_generated`` hook runs only after a successful write and never
    changes the result.
    """
    _enter(ReviewStage.VALIDATING_REPOSITORY)
    try:
        _validate_repository(query, root)
    except NotARepositoryError as e:
        logger.debug(str(e))
        return ReviewResult(review_type=request.mode, status=str(e))

    current_branch = query.current_branch_name()

    try:
        if request.target_branch:
            _enter(ReviewStage.VALIDATING_TARGET)
            target = qualify_target(query, request.target_branch)
        else:
            _enter(ReviewStage.RESOLVING_DEFAULTS)
            resolved = resolve_default_branch(query)
            _enter(ReviewStage.VALIDATING_TARGET)
            target = qualify_target(query, resolved.name)
    except TargetBranchNotFoundError as e:
        logger.debug(str(e))
        return ReviewResult(
            current_branch=current_branch,
            target_branch=e.branch,
            review_type=request.mode,
            status=str(e),
        )

    _enter(ReviewStage.QUERYING_DIFF)
    spec = derive_diff_parameters(request, target)
    summary = collect_summary(query, spec, request)

    _enter(ReviewStage.CHECKING_FOR_CHANGES)
    if summary.is_empty:
        return ReviewResult(
            current_branch=current_branch,
            target_branch=target,
            review_type=request.mode,
            status=NO_CHANGES,
        )

    _enter(ReviewStage.ASSEMBLING_REPORT)
    timestamp = (clock or datetime.now)()
    meta = ReportMeta(
        current_branch=current_branch,
        target_branch=target,
        timestamp=timestamp,
        latest_subject=query.latest_commit_subject() if spec.three_dot else "",
    )
    report = assemble_report(summary, request, meta, root)

    _enter(ReviewStage.WRITING_FILES)
    output_dir = Path(request.output_directory)
    output_dir.mkdir(parents=True, exist_ok=True)
    report_path = write_report(report, output_dir / report_filename(request.mode, current_branch, timestamp))
    prompt_path = None
    if request.include_prompt_template:
        prompt_path = build_prompt_template(output_dir, timestamp)

    if on_generated is not None:
        _enter(ReviewStage.OPENING_EDITOR)
        _run_hook(on_generated, [p for p in (report_path, prompt_path) if p is not None])

    _enter(ReviewStage.DONE)
    return ReviewResult(
        report_path=report_path,
        prompt_path=prompt_path,
        current_branch=current_branch,
        target_branch=target,
        files_changed=summary.files_changed,
        untracked_count=len(summary.untracked_files),
        untracked_files=summary.untracked_files,
        review_type=request.mode,
        status=SUCCESS,
    )


def get_pr_review(
    target_branch: str | None = None,
    output_path: str | Path = ".",
    include_prompt: bool = True,
    compare_uncommitted: bool = False,
    staged_only: bool = False,
    include_new_files: bool = True,
    repository: str | Path = ".",
    remote: str = "origin",
    on_generated: GeneratedHook | None = None,
    clock: Clock | None = None,
) -> ReviewResult:
    root = Path(repository).resolve()
    context = RepositoryContext(path=root, remote=remote)
    request = ComparisonRequest.from_options(
        target_branch=target_branch,
        output_path=output_path,
        include_prompt=include_prompt,
        compare_uncommitted=compare_uncommitted,
        staged_only=staged_only,
        include_new_files=include_new_files,
    )
    return generate_review(request, GitQuery(context), root, clock=clock, on_generated=on_generated)
