"""Abstract edit block applier."""

import difflib
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Tuple, cast

from editblock.editblock_diagnostics import EditBlockDiagnostics
from editblock.editblock_exceptions import EditBlockApplicationError, EditBlockMatchError
from editblock.editblock_lines import split_lines
from editblock.editblock_parser import EditBlockParser
from editblock.editblock_replacer import ChunkReplacer
from editblock.editblock_settings import EditBlockSettings
from editblock.editblock_types import (
    EditApplicationResult,
    EditBlock,
    EditFailureKind,
    EditOutcome,
    EditStatus,
)


# Path used by the example edits in the edit format prompt
SAMPLE_PROMPT_PATH = 'mathweb/flask'


class EditBlockApplier(ABC):
    """
    Abstract base class for applying SEARCH/REPLACE edit blocks.

    Subclasses supply file access; this class parses the text, applies each
    edit in order and reports the ones that fail. Edits are applied one at a
    time, and each is written before the next one is read, so later blocks see
    the changes made by earlier blocks to the same file.
    """

    def __init__(self, settings: EditBlockSettings | None = None):
        """
        Initialize the edit block applier.

        Args:
            settings: Settings to apply edits with (defaults if not given)
        """
        self._settings = settings if settings is not None else EditBlockSettings.create_default()
        self._parser = EditBlockParser()
        self._replacer = ChunkReplacer()
        self._diagnostics = EditBlockDiagnostics()
        self._logger = logging.getLogger("EditBlockApplier")

    @abstractmethod
    def _file_exists(self, path: str) -> bool:
        """
        Check whether a file exists.

        Args:
            path: Path of the file, as written in the edit block
        """

    @abstractmethod
    def _read_file(self, path: str) -> str:
        """
        Read the current text of a file. Only called for files that exist.

        Args:
            path: Path of the file, as written in the edit block

        Returns:
            File content
        """

    @abstractmethod
    def _write_file(self, path: str, content: str) -> None:
        """
        Write new text to a file, creating it if needed.

        Args:
            path: Path of the file, as written in the edit block
            content: New file content
        """

    def get_edits(
        self,
        text: str,
        valid_filenames: Iterable[str] | None = None
    ) -> Tuple[List[EditBlock], List[str]]:
        """
        Parse the edit blocks in some text without applying them.

        Args:
            text: Text containing SEARCH/REPLACE blocks
            valid_filenames: Filenames to prefer when resolving block targets

        Returns:
            Tuple of (file edit blocks, shell command bodies)

        Raises:
            EditBlockParseError: If the text holds a malformed block
        """
        blocks = self._parser.parse(text, valid_filenames)
        edits = [block for block in blocks if not block.is_shell_command()]
        shell_commands = [block.updated for block in blocks if block.is_shell_command()]
        return edits, shell_commands

    def apply_edits(
        self,
        text: str,
        valid_filenames: Iterable[str] | None = None,
        dry_run: bool = False
    ) -> EditApplicationResult:
        """
        Parse and apply every edit block in some text.

        Args:
            text: Text containing SEARCH/REPLACE blocks (typically an LLM response)
            valid_filenames: Filenames to prefer when resolving block targets
            dry_run: If True, work out the results but don't write anything

        Returns:
            EditApplicationResult describing every edit

        Raises:
            EditBlockParseError: If the text holds a malformed block
            EditBlockMatchError: If any edit failed (never raised for dry runs)
            EditBlockApplicationError: If the edits cannot be applied at all
        """
        edits, shell_commands = self.get_edits(text, valid_filenames)
        result = self.apply_edit_blocks(edits, dry_run)
        result.shell_commands = shell_commands
        return result

    def apply_edit_blocks(self, edits: List[EditBlock], dry_run: bool = False) -> EditApplicationResult:
        """
        Apply already parsed file edit blocks, in order.

        Edits that fail don't stop the rest from being applied.

        Args:
            edits: File edit blocks to apply
            dry_run: If True, work out the results but don't write anything

        Returns:
            EditApplicationResult describing every edit

        Raises:
            EditBlockMatchError: If any edit failed (never raised for dry runs)
            EditBlockApplicationError: If the edits cannot be applied at all
        """
        edits = [edit for edit in edits if not edit.is_shell_command()]

        if self._settings.reject_sample_prompt_edits:
            self._check_for_sample_edits(edits)

        result = EditApplicationResult(dry_run=dry_run, edits=list(edits))

        # Dry runs keep new content here so later edits to the same file still see earlier ones
        staged: Dict[str, str] = {}
        initial: Dict[str, str | None] = {}

        for edit in edits:
            outcome = self._apply_edit(edit, staged, initial, dry_run)
            if not outcome.success:
                outcome.report = self._diagnostics.format_failure(outcome)

            result.outcomes.append(outcome)

        if dry_run:
            result.previews = self._build_previews(staged, initial)
            return result

        failed = result.failed_outcomes
        if not failed:
            return result

        applied = result.applied
        error_details = {
            'phase': 'matching',
            'failed_count': len(failed),
            'applied_count': len(applied),
            'failed': [outcome.edit.path for outcome in failed],
            'applied': [edit.path for edit in applied],
            'result': result
        }

        raise EditBlockMatchError(self._diagnostics.format_failures(failed, len(applied)), error_details)

    def _apply_edit(
        self,
        edit: EditBlock,
        staged: Dict[str, str],
        initial: Dict[str, str | None],
        dry_run: bool
    ) -> EditOutcome:
        """
        Apply a single edit.

        Args:
            edit: Edit to apply
            staged: Content staged by earlier edits during a dry run
            initial: Content of each file before the first edit to it
            dry_run: If True, stage the new content instead of writing it

        Returns:
            Outcome of the edit
        """
        path = edit.path
        content = self._current_content(path, staged)
        initial.setdefault(path, content)

        if content is None and self._settings.skip_comment_like_paths and ' ' in path:
            self._logger.warning("skipping nonexistent file that looks more like a comment: %s", path)
            return EditOutcome(
                edit=edit,
                status=EditStatus.FAILED,
                failure=EditFailureKind.SKIPPED,
                reason=f"Target does not exist and looks like a comment, not a filename: {path}"
            )

        match = self._replacer.replace(path, content, edit.original or '', edit.updated)

        if not match.success:
            if content is None:
                self._logger.warning("cannot match SEARCH block against missing file: %s", path)
                return EditOutcome(
                    edit=edit,
                    status=EditStatus.FAILED,
                    failure=EditFailureKind.MISSING_FILE,
                    reason=f"File does not exist: {path}"
                )

            original = self._replacer.strip_quoted_wrapping(edit.original or '', path)
            updated = self._replacer.strip_quoted_wrapping(edit.updated, path)

            self._logger.warning("SEARCH block failed to match lines in %s", path)
            return EditOutcome(
                edit=edit,
                status=EditStatus.FAILED,
                failure=EditFailureKind.NO_MATCH,
                reason=f"SEARCH block failed to exactly match lines in {path}",
                suggestion=self._diagnostics.find_similar_lines(original, content),
                updated_already_present=self._diagnostics.is_already_applied(updated, content)
            )

        new_content = cast(str, match.content)
        if dry_run:
            staged[path] = new_content
            self._logger.info("would apply edit to %s (%s)", path, match.strategy)

        else:
            self._write_file(path, new_content)
            self._logger.info("applied edit to %s (%s)", path, match.strategy)

        return EditOutcome(edit=edit, status=EditStatus.APPLIED, strategy=match.strategy)

    def _current_content(self, path: str, staged: Dict[str, str]) -> str | None:
        if path in staged:
            return staged[path]

        if not self._file_exists(path):
            return None

        return self._read_file(path)

    def _check_for_sample_edits(self, edits: List[EditBlock]) -> None:
        """
        Refuse to apply edits copied from the edit format prompt's examples.

        Raises:
            EditBlockApplicationError: If any edit targets the sample path
        """
        for edit in edits:
            if SAMPLE_PROMPT_PATH in edit.path:
                error_details = {
                    'phase': 'validation',
                    'reason': 'Edit targets the example path used in the prompt',
                    'path': edit.path
                }
                raise EditBlockApplicationError(
                    'Found edits from the sample prompt. Perhaps you forgot to copy the results?',
                    error_details
                )

    def _build_previews(self, staged: Dict[str, str], initial: Dict[str, str | None]) -> Dict[str, str]:
        """
        Build unified diffs of the content staged during a dry run.

        Args:
            staged: New content for each file
            initial: Content of each file before the run (None if it did not exist)

        Returns:
            Dictionary mapping paths to unified diffs
        """
        previews: Dict[str, str] = {}
        for path, new_content in staged.items():
            old_content = initial.get(path)
            diff = difflib.unified_diff(
                split_lines(old_content or ''),
                split_lines(new_content),
                fromfile='/dev/null' if old_content is None else f'a/{path}',
                tofile=f'b/{path}'
            )
            previews[path] = ''.join(diff)

        return previews
