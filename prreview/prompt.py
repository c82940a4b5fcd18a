from datetime import datetime
from pathlib import Path

from loguru import logger

from .report import format_timestamp

PROMPT_TEMPLATE = """\
You are a senior software engineer performing a code review. The attached \
report contains the branch metadata, change statistics, commit messages, the \
full diff and the contents of any new files. Review it and report findings \
under the sections below. Reference files and line numbers from the diff \
wherever possible, and say "No issues" for a section that has nothing to report.

## 1. Code Quality & Readability
- Is the code clear, consistently named and easy to follow?
- Is there duplicated logic that should be extracted?

## 2. Potential Bugs & Edge Cases
- Off-by-one errors, null or empty inputs, unhandled branches.
- Behaviour changes that callers may not expect.

## 3. Security
- Injection, unsafe deserialization, secrets in code, missing authorization checks.

## 4. Performance
- Unnecessary work in loops, N+1 queries, unbounded memory or I/O.

## 5. Error Handling
- Are failures surfaced with useful messages or silently swallowed?
- Are resources released on every path?

## 6. Testing
- Are the changes covered by tests? Which cases are missing?

## 7. Architecture & Design
- Does the change fit the existing structure and boundaries?
- Are new dependencies or abstractions justified?

## 8. Documentation
- Are public interfaces, configuration and behaviour changes documented?

Finish with a short overall summary and a recommendation: approve, approve \
with minor changes, or request changes.
"""


def prompt_filename(timestamp: datetime) -> str:
    return f"review-prompt-template_{format_timestamp(timestamp)}.txt"


def build_prompt_template(output_directory: Path, timestamp: datetime) -> Path:
    path = Path(output_directory) / prompt_filename(timestamp)
    path.write_text(PROMPT_TEMPLATE, encoding="utf-8", newline="\n")
    logger.info("Wrote prompt template to {}", path)
    return path
