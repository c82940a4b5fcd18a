from loguru import logger

from .git import VersionControlQuery
from .models import ComparisonRequest, DiffQuerySpec, DiffSummary, ReviewType


def derive_diff_parameters(request: ComparisonRequest, target: str) -> DiffQuerySpec:
    """Map a request onto the git revisions to diff.

    Branch mode diffs from the merge-base (``target...HEAD``) while the
    uncommitted modes diff the index or working tree straight against
    ``target``.
    """
    if request.mode is ReviewType.BRANCH:
        return DiffQuerySpec(base=target, tip="HEAD", three_dot=True)
    if request.mode is ReviewType.STAGED:
        return DiffQuerySpec(base=target, staged_only=True)
    return DiffQuerySpec(base=target)


def collect_summary(
    query: VersionControlQuery,
    spec: DiffQuerySpec,
    request: ComparisonRequest,
) -> DiffSummary:
    changes = query.diff_name_status(spec)
    untracked = query.list_untracked_files() if request.includes_untracked else []
    logger.debug("{} tracked change(s), {} untracked file(s)", len(changes), len(untracked))

    if not changes and not untracked:
        return DiffSummary()

    subjects: list[str] = []
    if spec.three_dot:
        subjects = query.commit_subjects_between(spec.base, spec.tip or "HEAD")

    stat = query.diff_stat(spec) if changes else ""
    diff = query.diff_patch(spec) if changes else ""

    return DiffSummary(
        changes=changes,
        stat=stat,
        commit_subjects=subjects,
        diff=diff,
        untracked_files=untracked,
    )
