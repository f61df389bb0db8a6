"""SEARCH/REPLACE edit block parsing."""

import re
from typing import Iterable, List, NoReturn, Tuple

from editblock.editblock_exceptions import EditBlockParseError
from editblock.editblock_filename_resolver import FENCE, FILENAME_LOOKBACK, FilenameResolver
from editblock.editblock_lines import split_lines
from editblock.editblock_types import EditBlock


HEAD_MARKER = '<<<<<<< SEARCH'
DIVIDER_MARKER = '======='
TAIL_MARKER = '>>>>>>> REPLACE'


class EditBlockParser:
    """
    Parser for SEARCH/REPLACE edit blocks embedded in free text.

    A block looks like this, with the filename on one of the three lines
    before the head marker:

        path/to/file.py
        ```python
        <<<<<<< SEARCH
        original lines
        =======
        updated lines
        >>>>>>> REPLACE
        ```

    Fenced shell code (```bash and friends) that is not itself wrapping an
    edit block is returned as a shell command block.
    """

    HEAD_PATTERN = re.compile(r'^<{5,9} SEARCH\s*$')
    DIVIDER_PATTERN = re.compile(r'^={5,9}\s*$')
    TAIL_PATTERN = re.compile(r'^>{5,9} REPLACE\s*$')

    SHELL_FENCE_OPENERS = tuple(
        FENCE + language for language in (
            'bash', 'sh', 'shell', 'cmd', 'batch', 'powershell',
            'ps1', 'zsh', 'fish', 'ksh', 'csh', 'tcsh'
        )
    )

    def parse(self, text: str, valid_filenames: Iterable[str] | None = None) -> List[EditBlock]:
        """
        Parse text into an ordered list of edit blocks.

        Args:
            text: Text containing zero or more SEARCH/REPLACE blocks
            valid_filenames: Filenames to prefer when resolving block targets

        Returns:
            File edit blocks and shell command blocks, in the order they appear

        Raises:
            EditBlockParseError: If a block is malformed or has no filename
        """
        lines = split_lines(text)
        resolver = FilenameResolver(valid_filenames)
        new_file_resolver = FilenameResolver()

        blocks: List[EditBlock] = []
        current_filename: str | None = None

        i = 0
        while i < len(lines):
            stripped = lines[i].strip()

            if stripped.startswith(self.SHELL_FENCE_OPENERS) and not self._is_head(lines, i + 1):
                block, i = self._parse_shell_block(lines, i)
                blocks.append(block)
                continue

            if self.HEAD_PATTERN.match(stripped):
                # A divider straight after the head means an empty original, i.e. a new file.
                # Those never consult the valid filenames, which would fuzzy-match unrelated files.
                is_new_file = self._is_divider(lines, i + 1)
                block_resolver = new_file_resolver if is_new_file else resolver
                filename = block_resolver.resolve(lines[max(0, i - FILENAME_LOOKBACK):i])

                if filename is None:
                    if current_filename is None:
                        self._raise_parse_error(
                            lines,
                            i,
                            "Bad/missing filename. The filename must be alone on the line before "
                            f"the opening fence {FENCE}"
                        )

                    filename = current_filename

                current_filename = filename
                block, i = self._parse_edit_block(lines, i, filename)
                blocks.append(block)
                continue

            i += 1

        return blocks

    def _parse_shell_block(self, lines: List[str], start_idx: int) -> Tuple[EditBlock, int]:
        """
        Parse a fenced shell block.

        Args:
            lines: All lines of the text
            start_idx: Index of the opening fence line

        Returns:
            Tuple of (shell command block, index of the first line after the block)
        """
        command_lines: List[str] = []
        i = start_idx + 1

        while i < len(lines) and not lines[i].strip().startswith(FENCE):
            command_lines.append(lines[i])
            i += 1

        # Skip the closing fence
        if i < len(lines):
            i += 1

        return EditBlock.for_shell_command(''.join(command_lines)), i

    def _parse_edit_block(self, lines: List[str], head_idx: int, filename: str) -> Tuple[EditBlock, int]:
        """
        Parse the original and updated sections of a block.

        Args:
            lines: All lines of the text
            head_idx: Index of the head marker line
            filename: Resolved target filename

        Returns:
            Tuple of (file edit block, index of the first line after the terminator)

        Raises:
            EditBlockParseError: If the divider or terminator is missing
        """
        original_lines: List[str] = []
        i = head_idx + 1

        while i < len(lines) and not self.DIVIDER_PATTERN.match(lines[i].strip()):
            original_lines.append(lines[i])
            i += 1

        if i >= len(lines):
            self._raise_parse_error(lines, i, f"Expected `{DIVIDER_MARKER}`")

        updated_lines: List[str] = []
        i += 1

        # A second divider is accepted in place of the tail marker
        while i < len(lines) and not self._is_terminator(lines[i]):
            updated_lines.append(lines[i])
            i += 1

        if i >= len(lines):
            self._raise_parse_error(lines, i, f"Expected `{TAIL_MARKER}` or `{DIVIDER_MARKER}`")

        block = EditBlock.for_file(filename, ''.join(original_lines), ''.join(updated_lines))
        return block, i + 1

    def _is_terminator(self, line: str) -> bool:
        stripped = line.strip()
        return bool(self.TAIL_PATTERN.match(stripped) or self.DIVIDER_PATTERN.match(stripped))

    def _is_head(self, lines: List[str], idx: int) -> bool:
        return idx < len(lines) and bool(self.HEAD_PATTERN.match(lines[idx].strip()))

    def _is_divider(self, lines: List[str], idx: int) -> bool:
        return idx < len(lines) and bool(self.DIVIDER_PATTERN.match(lines[idx].strip()))

    def _raise_parse_error(self, lines: List[str], idx: int, reason: str) -> NoReturn:
        """
        Raise a parse error showing everything consumed up to the failure.

        Args:
            lines: All lines of the text
            idx: Index of the line being examined when parsing failed
            reason: What was expected

        Raises:
            EditBlockParseError: Always
        """
        processed = ''.join(lines[:idx + 1])
        error_details = {
            'phase': 'parsing',
            'reason': reason,
            'line_number': min(idx, len(lines) - 1) + 1,
            'processed_text': processed
        }

        raise EditBlockParseError(f"{processed}\n^^^ {reason}", error_details)
