"""Failure reports for edit blocks that could not be applied."""

from typing import List

from editblock.editblock_lines import split_lines
from editblock.editblock_parser import DIVIDER_MARKER, HEAD_MARKER, TAIL_MARKER
from editblock.editblock_filename_resolver import FENCE
from editblock.editblock_similarity import SimilarityScorer
from editblock.editblock_types import EditFailureKind, EditOutcome, SimilaritySuggestion


# Minimum similarity for a region of the file to be suggested
SIMILARITY_THRESHOLD = 0.6

# Lines of context shown around a suggestion whose ends don't match exactly
CONTEXT_MARGIN = 5


class EditBlockDiagnostics:
    """
    Builds the reports shown (to a person or back to the model) when edits fail.

    The goal is to give enough context to retry: the exact block that failed
    and, where one exists, the part of the file that it most likely meant.
    """

    def __init__(self, threshold: float = SIMILARITY_THRESHOLD, margin: int = CONTEXT_MARGIN):
        """
        Initialize the diagnostics generator.

        Args:
            threshold: Minimum similarity (0.0-1.0) for a suggestion to be made
            margin: Lines of context to add either side of an inexact suggestion
        """
        self._threshold = threshold
        self._margin = margin
        self._scorer = SimilarityScorer()

    def find_similar_lines(self, original: str, content: str) -> SimilaritySuggestion | None:
        """
        Find the region of the content most similar to an edit's original text.

        Every window of the content with the same number of lines as the
        original is scored, and the best one kept.

        Args:
            original: Original text of the failed edit
            content: Current file content

        Returns:
            The best region, or None if nothing is similar enough
        """
        search_lines = self._lines(original)
        content_lines = self._lines(content)
        num_search_lines = len(search_lines)

        if not search_lines or len(content_lines) < num_search_lines:
            return None

        best_ratio = 0.0
        best_index = -1
        for i in range(len(content_lines) - num_search_lines + 1):
            ratio = self._scorer.ratio(search_lines, content_lines[i:i + num_search_lines])
            if ratio > best_ratio:
                best_ratio = ratio
                best_index = i

        if best_index < 0 or best_ratio < self._threshold:
            return None

        best = content_lines[best_index:best_index + num_search_lines]
        if best[0] == search_lines[0] and best[-1] == search_lines[-1]:
            return SimilaritySuggestion(
                lines=best,
                start_line=best_index + 1,
                end_line=best_index + num_search_lines,
                score=best_ratio,
                exact_bounds=True
            )

        start = max(0, best_index - self._margin)
        end = min(len(content_lines), best_index + num_search_lines + self._margin)
        return SimilaritySuggestion(
            lines=content_lines[start:end],
            start_line=start + 1,
            end_line=end,
            score=best_ratio,
            exact_bounds=False
        )

    def is_already_applied(self, updated: str, content: str) -> bool:
        """Check if an edit's updated text is already present in the content."""
        return bool(updated.strip()) and updated in content

    def format_failure(self, outcome: EditOutcome) -> str:
        """
        Format the report section for one failed edit.

        Args:
            outcome: Outcome of the failed edit

        Returns:
            Report text
        """
        edit = outcome.edit
        path = edit.path

        if outcome.failure == EditFailureKind.MISSING_FILE:
            heading = f"## SearchReplaceMissingFile: {path} does not exist, so this SEARCH block cannot match"

        elif outcome.failure == EditFailureKind.SKIPPED:
            heading = f"## SearchReplaceSkipped: {path} does not exist and looks like a comment rather than a filename"

        else:
            heading = f"## SearchReplaceNoExactMatch: This SEARCH block failed to exactly match lines in {path}"

        report = (
            f"{heading}\n"
            f"{HEAD_MARKER}\n"
            f"{self._terminated(edit.original or '')}"
            f"{DIVIDER_MARKER}\n"
            f"{self._terminated(edit.updated)}"
            f"{TAIL_MARKER}\n\n"
        )

        if outcome.suggestion is not None:
            report += (
                f"Did you mean to match some of these actual lines from {path}?\n\n"
                f"{FENCE}\n"
                f"{outcome.suggestion.text}\n"
                f"{FENCE}\n\n"
            )

        if outcome.updated_already_present:
            report += (
                "Are you sure you need this SEARCH/REPLACE block?\n"
                f"The REPLACE lines are already in {path}!\n\n"
            )

        return report

    def format_failures(self, failed: List[EditOutcome], applied_count: int = 0) -> str:
        """
        Format the aggregated report for every failed edit in a batch.

        Args:
            failed: Outcomes of the failed edits, in input order
            applied_count: Number of edits in the batch that were applied

        Returns:
            Report text
        """
        report = f"# {len(failed)} SEARCH/REPLACE {self._blocks(len(failed))} failed to match!\n\n"

        for outcome in failed:
            report += self.format_failure(outcome)

        report += (
            "The SEARCH section must exactly match an existing block of lines including all white space, "
            "comments, indentation, docstrings, etc\n"
        )

        if applied_count:
            report += (
                f"\n# The other {applied_count} SEARCH/REPLACE {self._blocks(applied_count)} "
                "were applied successfully.\n"
                "Don't re-send them.\n"
                f"Just reply with fixed versions of the {self._blocks(len(failed))} above that failed to match.\n"
            )

        return report

    def _lines(self, text: str) -> List[str]:
        return [line.rstrip('\r\n') for line in split_lines(text)]

    def _terminated(self, text: str) -> str:
        if text and not text.endswith('\n'):
            return text + '\n'

        return text

    def _blocks(self, count: int) -> str:
        return "block" if count == 1 else "blocks"
