"""Markdown rendering and writing of review reports."""

import codecs
import re
from datetime import datetime
from pathlib import Path
from typing import Iterator

from loguru import logger

from .models import ComparisonRequest, DiffSummary, ReportMeta, ReviewReport, ReviewType

MAX_FILE_CHARS = 10_000
READ_CHUNK_BYTES = 65536
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"

UNREADABLE_PLACEHOLDER = "[Unable to read file content - file may be binary]"
EMPTY_PLACEHOLDER = "[Empty file]"
TRUNCATION_MARKER = "... (truncated)"
NO_CHANGES_TEXT = "No tracked file changes."

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_BACKTICK_RUN = re.compile(r"`{3,}")


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime(TIMESTAMP_FORMAT)


def report_discriminator(mode: ReviewType, current_branch: str) -> str:
    if mode is ReviewType.UNCOMMITTED:
        return "uncommitted"
    if mode is ReviewType.STAGED:
        return "staged"
    return _UNSAFE_CHARS.sub("-", current_branch).strip("-") or "HEAD"


def report_filename(mode: ReviewType, current_branch: str, timestamp: datetime) -> str:
    return f"code-review_{report_discriminator(mode, current_branch)}_{format_timestamp(timestamp)}.md"


def _fence(text: str, lang: str = "") -> str:
    """Wrap text in a code fence longer than any backtick run inside it."""
    longest = max((len(m.group(0)) for m in _BACKTICK_RUN.finditer(text)), default=2)
    ticks = "`" * max(3, longest + 1)
    return f"{ticks}{lang}\n{text}\n{ticks}\n"


def report_title(mode: ReviewType, meta: ReportMeta) -> str:
    if mode is ReviewType.UNCOMMITTED:
        return "Uncommitted Changes Review"
    if mode is ReviewType.STAGED:
        return "Staged Changes Review"
    return f"Code Review: {meta.latest_subject or meta.current_branch}"


def read_head(path: Path, limit: int = MAX_FILE_CHARS) -> tuple[str, int] | None:
    """Read at most ``limit`` + 1 characters of a UTF-8 working-tree file.

    The file is streamed in chunks so only the head is kept in memory.
    Returns ``(head, total_characters)``, or None if the file is binary
    or unreadable.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    head = ""
    total = 0
    try:
        with open(path, "rb") as f:
            while chunk := f.read(READ_CHUNK_BYTES):
                if b"\x00" in chunk:
                    return None
                text = decoder.decode(chunk)
                total += len(text)
                if len(head) <= limit:
                    head += text[: limit + 1 - len(head)]
            text = decoder.decode(b"", final=True)
    except (OSError, UnicodeDecodeError):
        return None
    total += len(text)
    if len(head) <= limit:
        head += text[: limit + 1 - len(head)]
    return head, total


def render_new_file(root: Path, rel_path: str) -> str:
    read = read_head(root / rel_path)
    lines = [f"### {rel_path}", ""]
    if read is None:
        logger.warning("Could not read untracked file {}", rel_path)
        lines.append(UNREADABLE_PLACEHOLDER)
    elif not read[1]:
        lines.append(EMPTY_PLACEHOLDER)
    elif read[1] > MAX_FILE_CHARS:
        head, total = read
        lines.append(_fence(f"{head[:MAX_FILE_CHARS]}\n{TRUNCATION_MARKER}").rstrip("\n"))
        lines.append("")
        lines.append(f"[File truncated: showing first {MAX_FILE_CHARS} of {total} characters]")
    else:
        lines.append(_fence(read[0]).rstrip("\n"))
    return "\n".join(lines) + "\n\n"


def _render_header(summary: DiffSummary, request: ComparisonRequest, meta: ReportMeta) -> str:
    mode = request.mode
    lines = [
        f"# {report_title(mode, meta)}",
        "",
        f"**Branch:** {meta.current_branch}",
        f"**Target:** {meta.target_branch}",
        f"**Review Type:** {mode.label}",
        f"**Generated:** {meta.timestamp.strftime(DISPLAY_FORMAT)}",
        f"**Files Changed:** {summary.files_changed}",
    ]
    if request.includes_untracked:
        lines.append(f"**New Files:** {len(summary.untracked_files)}")

    lines += ["", "## Summary Statistics", "", _fence(summary.stat or NO_CHANGES_TEXT).rstrip("\n"), ""]

    if mode is ReviewType.BRANCH:
        lines += ["## Commit Messages", ""]
        lines += [f"- {subject}" for subject in summary.commit_subjects] or ["- (no commits)"]
        lines.append("")

    lines += ["## Changed Files", ""]
    for change in summary.changes:
        path = f"{change.old_path} -> {change.path}" if change.old_path else change.path
        lines.append(f"### {change.label} : {path}")
    for rel_path in summary.untracked_files:
        lines.append(f"### New (Untracked) : {rel_path}")
    return "\n".join(lines) + "\n\n"


def _render_diff(summary: DiffSummary) -> str:
    return "## Full Diff\n\n" + _fence(summary.diff or NO_CHANGES_TEXT, "diff") + "\n"


def assemble_report(
    summary: DiffSummary,
    request: ComparisonRequest,
    meta: ReportMeta,
    root: Path,
) -> ReviewReport:
    """Compose the header and diff. Untracked file contents are read from ``root`` later."""
    return ReviewReport(
        header=_render_header(summary, request, meta),
        diff_section=_render_diff(summary),
        root=root,
        new_files=summary.untracked_files,
    )


def report_parts(report: ReviewReport) -> Iterator[str]:
    """Yield the header, the diff, then one section per new file, rendered on demand."""
    yield report.header
    yield report.diff_section
    for index, rel_path in enumerate(report.new_files):
        section = render_new_file(report.root, rel_path)
        yield ("## New Files Content\n\n" + section) if index == 0 else section


def render_report(report: ReviewReport) -> str:
    return "".join(report_parts(report))


def write_report(report: ReviewReport, path: Path) -> Path:
    """Write the report part by part, flushing after each.

    Parts already written stay on disk if rendering or writing a later
    part fails.
    """
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        for part in report_parts(report):
            f.write(part)
            f.flush()
    logger.info("Wrote review report to {}", path)
    return path
