class ReviewError(Exception):
    """Base class for review generation failures."""


class NotARepositoryError(ReviewError):
    def __init__(self, path):
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class TargetBranchNotFoundError(ReviewError):
    def __init__(self, branch: str, available: list[str] | None = None):
        self.branch = branch
        self.available = available or []
        message = f"Target branch '{branch}' not found."
        if self.available:
            message += f" Available branches: {', '.join(self.available)}"
        super().__init__(message)


class GitCommandError(ReviewError, RuntimeError):
    def __init__(self, args: list[str], stderr: str):
        self.command = args
        self.stderr = stderr
        super().__init__(f"{' '.join(args[:2])} failed: {stderr.strip()}")


class ExternalEditorUnavailableError(ReviewError):
    def __init__(self, editor: str, reason: str = "not found on PATH"):
        super().__init__(f"Editor '{editor}' {reason}")
        self.editor = editor
