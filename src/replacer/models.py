"""Pydantic models for run reports"""

from pydantic import BaseModel, Field

from replacer.errors import ReplacerError


class ErrorRecord(BaseModel):
    """One error collected during a run

    Attributes:
        kind: 'walk', 'rewrite' or 'cancelled'
        path: File or directory the error relates to (None for run-wide errors)
        message: Human-readable error message
    """

    kind: str = Field(..., example="rewrite", description="Error category")
    path: str | None = Field(None, example="/srv/data/notes.txt", description="Affected path")
    message: str = Field(..., example="Permission denied", description="Error message")

    @classmethod
    def from_error(cls, error: ReplacerError) -> 'ErrorRecord':
        return cls(kind=error.kind, path=error.path, message=Exception.__str__(error))

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class RunReport(BaseModel):
    """Summary of a replace run

    Attributes:
        root: Directory that was walked
        search: Literal text that was searched for
        replace: Replacement text
        time: Run duration in seconds
        workers: Workers per pool
        threshold_bytes: Size above which files were streamed
        small_files: Number of files handled in memory
        large_files: Number of files streamed
        changed_files: Files whose contents were rewritten
        replacements: Total number of replaced occurrences
        errors: All errors collected during the run
        cancelled: Whether the run was cut short by timeout or interrupt
    """

    root: str = Field(..., example="/srv/data")
    search: str = Field(..., example="world")
    replace: str = Field(..., example="gopher")
    time: float = Field(..., example=0.123)
    workers: int = Field(..., example=8, description="Workers per pool")
    threshold_bytes: int = Field(..., example=2147483648, description="Large file threshold in bytes")
    small_files: int = Field(default=0, example=120, description="Files rewritten in memory")
    large_files: int = Field(default=0, example=2, description="Files rewritten by streaming")
    changed_files: list[str] = Field(default=[], example=["/srv/data/a.txt"])
    replacements: int = Field(default=0, example=42)
    errors: list[ErrorRecord] = Field(default=[])
    cancelled: bool = Field(default=False)

    def to_cli(self, colorize: bool = False) -> str:
        """Format report for CLI output"""
        GREY = '\033[90m'
        BOLD_CYAN = '\033[1;36m'
        GREEN = '\033[32m'
        YELLOW = '\033[33m'
        RED = '\033[31m'
        RESET = '\033[0m'

        def paint(color: str, text: str) -> str:
            return f"{color}{text}{RESET}" if colorize else text

        lines = []
        lines.append(f"{paint(GREY, 'Path:')} {paint(BOLD_CYAN, self.root)}")
        lines.append(f"{paint(GREY, 'Replace:')} {self.search!r} -> {self.replace!r}")
        lines.append(
            f"Files processed: {self.small_files + self.large_files} "
            f"({self.small_files} small, {self.large_files} large) in {self.time:.3f}s"
        )

        changed = f"Files changed: {len(self.changed_files)} ({self.replacements} replacements)"
        lines.append(paint(GREEN, changed) if self.changed_files else changed)
        for path in self.changed_files:
            lines.append(f"  {path}")

        if self.cancelled:
            lines.append(paint(YELLOW, "Run cancelled before completion"))

        if self.errors:
            lines.append(paint(RED, f"Errors: {len(self.errors)}"))
            for error in self.errors:
                lines.append(str(error))

        return "\n".join(lines)
