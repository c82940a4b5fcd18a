import os

import click
from dotenv import load_dotenv

from prreview.editor import editor_hook
from prreview.errors import GitCommandError
from prreview.log import configure_logging
from prreview.service import NO_CHANGES, get_pr_review


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option("--target", "-t", default=None, help="Branch to compare against (default: auto-detected).")
@click.option("--output", "-o", default=None, type=click.Path(file_okay=False),
              help="Directory for the generated files (default: current directory).")
@click.option("--prompt/--no-prompt", default=True, help="Also write the review prompt template.")
@click.option("--uncommitted", is_flag=True, default=False,
              help="Review uncommitted changes (staged + unstaged) instead of branch commits.")
@click.option("--staged-only", is_flag=True, default=False, help="Review staged changes only.")
@click.option("--new-files/--no-new-files", default=True,
              help="Include untracked files when reviewing uncommitted changes.")
@click.option("--remote", default=None, help="Remote used for remote-tracking branches (default: origin).")
@click.option("--open", "open_editor", is_flag=True, default=False, help="Open the generated files in an editor.")
@click.option("--editor", default=None, help="Editor command used with --open.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.option("--log-level", default=None, help="Log level (default: INFO).")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Shorthand for --log-level DEBUG.")
def cli(
    path: str,
    target: str | None,
    output: str | None,
    prompt: bool,
    uncommitted: bool,
    staged_only: bool,
    new_files: bool,
    remote: str | None,
    open_editor: bool,
    editor: str | None,
    as_json: bool,
    log_level: str | None,
    verbose: bool,
) -> None:
    """Generate a Markdown code-review report for a git working tree."""
    load_dotenv()

    log_level = "DEBUG" if verbose else (log_level or os.environ.get("PR_REVIEW_LOG_LEVEL", "INFO"))
    configure_logging(log_level)

    target = target or os.environ.get("PR_REVIEW_TARGET") or None
    output = output or os.environ.get("PR_REVIEW_OUTPUT", ".")
    remote = remote or os.environ.get("PR_REVIEW_REMOTE", "origin")

    try:
        result = get_pr_review(
            target_branch=target,
            output_path=output,
            include_prompt=prompt,
            compare_uncommitted=uncommitted,
            staged_only=staged_only,
            include_new_files=new_files,
            repository=path,
            remote=remote,
            on_generated=editor_hook(editor) if open_editor else None,
        )
    except GitCommandError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(result.model_dump_json(indent=2))
    if result.status == NO_CHANGES:
        if not as_json:
            click.echo(f"No changes found between {result.current_branch} and {result.target_branch}.")
        return
    if not result.succeeded:
        raise click.ClickException(result.status)
    if as_json:
        return

    click.echo(f"Review type: {result.review_type.label}")
    click.echo(f"Comparing {result.current_branch} against {result.target_branch}")
    click.echo(f"Files changed: {result.files_changed}")
    if result.untracked_count:
        click.echo(f"New (untracked) files: {result.untracked_count}")
    click.echo(f"Report: {result.report_path}")
    if result.prompt_path:
        click.echo(f"Prompt template: {result.prompt_path}")


if __name__ == "__main__":
    cli()
