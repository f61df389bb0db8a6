"""Shared dataclasses for edit block operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


@dataclass(frozen=True)
class FileTarget:
    """Edit block target naming a file."""

    path: str


@dataclass(frozen=True)
class ShellCommandTarget:
    """Edit block target for a shell command block (no file)."""


EditTarget = FileTarget | ShellCommandTarget


@dataclass
class EditBlock:
    """A single SEARCH/REPLACE block (or shell command block) parsed from text."""

    target: EditTarget
    original: str | None  # None for shell command blocks, possibly empty for file blocks
    updated: str  # Replacement text, or the command body for shell command blocks

    @classmethod
    def for_file(cls, path: str, original: str, updated: str) -> "EditBlock":
        """Create a file edit block."""
        return cls(FileTarget(path), original, updated)

    @classmethod
    def for_shell_command(cls, command: str) -> "EditBlock":
        """Create a shell command block."""
        return cls(ShellCommandTarget(), None, command)

    def is_shell_command(self) -> bool:
        """Check if this block is a shell command rather than a file edit."""
        return isinstance(self.target, ShellCommandTarget)

    @property
    def path(self) -> str:
        """
        Get the target path of a file edit.

        Raises:
            TypeError: If this block is a shell command block
        """
        if not isinstance(self.target, FileTarget):
            raise TypeError("Shell command blocks have no target path")

        return self.target.path


@dataclass
class MatchResult:
    """Result of attempting to replace an original chunk in file content."""

    success: bool
    content: str | None = None  # New whole content when successful
    strategy: str | None = None  # Name of the strategy that matched


@dataclass
class SimilaritySuggestion:
    """The region of a file most similar to an edit's original text."""

    lines: List[str]
    start_line: int  # 1-indexed
    end_line: int  # 1-indexed, inclusive
    score: float  # 0.0 to 1.0
    exact_bounds: bool  # True if first and last lines match the original exactly

    @property
    def text(self) -> str:
        """Get the suggested lines as a single string."""
        return '\n'.join(self.lines)


class EditStatus(Enum):
    """Outcome status of a single edit."""

    APPLIED = "applied"
    FAILED = "failed"


class EditFailureKind(Enum):
    """Reason category for a failed edit."""

    NO_MATCH = "no_match"
    MISSING_FILE = "missing_file"
    SKIPPED = "skipped"


@dataclass
class EditOutcome:
    """Outcome of applying one file edit."""

    edit: EditBlock
    status: EditStatus
    failure: EditFailureKind | None = None
    reason: str | None = None
    strategy: str | None = None
    suggestion: SimilaritySuggestion | None = None
    updated_already_present: bool = False
    report: str | None = None  # Failure report section, for failed edits

    @property
    def success(self) -> bool:
        """Check if the edit was applied."""
        return self.status == EditStatus.APPLIED


@dataclass
class EditApplicationResult:
    """Result of applying every edit block found in a piece of text."""

    dry_run: bool = False
    edits: List[EditBlock] = field(default_factory=list)
    outcomes: List[EditOutcome] = field(default_factory=list)
    shell_commands: List[str] = field(default_factory=list)
    previews: Dict[str, str] = field(default_factory=dict)

    @property
    def applied(self) -> List[EditBlock]:
        """Get the edits that were applied (or staged, for dry runs)."""
        return [outcome.edit for outcome in self.outcomes if outcome.success]

    @property
    def failed(self) -> List[EditBlock]:
        """Get the edits that failed."""
        return [outcome.edit for outcome in self.outcomes if not outcome.success]

    @property
    def failed_outcomes(self) -> List[EditOutcome]:
        """Get the outcomes of the edits that failed."""
        return [outcome for outcome in self.outcomes if not outcome.success]
