from typing import Callable

from loguru import logger

from .errors import GitCommandError, TargetBranchNotFoundError
from .git import VersionControlQuery
from .models import BranchResolutionResult, BranchSource

DEFAULT_BRANCH = "develop"
CANDIDATE_BRANCHES = ("develop", "main", "master")
MAX_HINT_BRANCHES = 5

Probe = Callable[[VersionControlQuery], str | None]


def _local(name: str) -> Probe:
    def probe(query: VersionControlQuery) -> str | None:
        return name if query.ref_exists(name) else None
    return probe


def _remote(name: str) -> Probe:
    def probe(query: VersionControlQuery) -> str | None:
        qualified = f"{query.remote}/{name}"
        return qualified if query.ref_exists(qualified, remote=True) else None
    return probe


def _remote_head(query: VersionControlQuery) -> str | None:
    return query.resolve_remote_default_ref()


def _first_remote_branch(query: VersionControlQuery) -> str | None:
    prefix = f"{query.remote}/"
    for branch in query.list_remote_branches():
        # other remotes are not candidates
        if branch.startswith(prefix) and branch[len(prefix):]:
            return branch[len(prefix):]
    return None


def default_branch_probes() -> list[tuple[Probe, BranchSource]]:
    probes: list[tuple[Probe, BranchSource]] = []
    for name in CANDIDATE_BRANCHES:
        probes.append((_local(name), BranchSource.LOCAL))
        probes.append((_remote(name), BranchSource.REMOTE))
    probes.append((_remote_head, BranchSource.REMOTE_HEAD))
    probes.append((_first_remote_branch, BranchSource.REMOTE_LISTING))
    return probes


def resolve_default_branch(
    query: VersionControlQuery,
    probes: list[tuple[Probe, BranchSource]] | None = None,
) -> BranchResolutionResult:
    """Pick the branch to compare against when none was given.

    Probes run in order and the first hit wins. A probe whose git call fails
    counts as a miss. With no hit at all the result is ``develop``.
    """
    for probe, source in probes if probes is not None else default_branch_probes():
        try:
            name = probe(query)
        except GitCommandError as e:
            logger.debug("Branch probe ({}) failed: {}", source.value, e)
            continue
        if name:
            logger.debug("Resolved default branch {} via {}", name, source.value)
            return BranchResolutionResult(name=name, source=source)

    logger.debug("No default branch detected, falling back to {}", DEFAULT_BRANCH)
    return BranchResolutionResult(name=DEFAULT_BRANCH, source=BranchSource.FALLBACK)


def available_branches(query: VersionControlQuery) -> list[str]:
    names: list[str] = []
    try:
        names.extend(query.list_local_branches()[:MAX_HINT_BRANCHES])
        names.extend(query.list_remote_branches()[:MAX_HINT_BRANCHES])
    except GitCommandError as e:
        logger.debug("Could not list branches for hint: {}", e)
    return names


def qualify_target(query: VersionControlQuery, name: str) -> str:
    """Return the ref to diff against for ``name``.

    Local branches win over remote-tracking ones. ``name`` may already be
    remote-qualified, e.g. ``origin/main``.
    """
    if query.ref_exists(name):
        return name
    qualified = f"{query.remote}/{name}"
    if query.ref_exists(qualified, remote=True):
        return qualified
    if query.ref_exists(name, remote=True):
        return name
    raise TargetBranchNotFoundError(name, available_branches(query))
