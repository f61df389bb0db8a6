"""Replacement of an original chunk of text with an updated one, tolerating LLM transcription drift."""

import logging
import posixpath
import re
from typing import Callable, List, Set, Tuple

from editblock.editblock_filename_resolver import FENCE
from editblock.editblock_lines import is_blank, prepare, split_lines
from editblock.editblock_types import MatchResult


# Signature of a replacement strategy: (whole, part, replace) -> new whole content, or None
ReplaceStrategy = Callable[[str, str, str], str | None]


class ChunkReplacer:
    """
    Finds an edit's original text in file content and splices in the updated text.

    Exact matching is tried first. When that fails, a fixed sequence of
    increasingly forgiving strategies is tried, each one aimed at a mistake
    LLMs commonly make when quoting code back:

    1. exact: the original lines appear verbatim
    2. leading_blank_line: a spurious blank line was added before the original
    3. leading_whitespace: the original was uniformly re-indented or outdented
    4. trailing_blank_lines: spurious blank lines were added at the end
    5. ellipsis: unchanged middle sections were elided with `...` lines
    """

    ELLIPSIS_PATTERN = re.compile(r'^[ \t]*\.\.\.[ \t]*\r?\n', re.MULTILINE)

    def __init__(self) -> None:
        """Initialize the replacer."""
        self._logger = logging.getLogger("ChunkReplacer")
        self._strategies: List[Tuple[str, ReplaceStrategy]] = [
            ('exact', self.replace_exact),
            ('leading_blank_line', self.replace_skipping_leading_blank_line),
            ('leading_whitespace', self.replace_with_leading_whitespace_offset),
            ('trailing_blank_lines', self.replace_ignoring_trailing_blank_lines),
            ('ellipsis', self.replace_ellipsis_segments),
        ]

    def strategy_names(self) -> List[str]:
        """Get the names of the matching strategies, in the order they are tried."""
        return [name for name, _ in self._strategies]

    def replace(
        self,
        path: str,
        content: str | None,
        original: str,
        updated: str
    ) -> MatchResult:
        """
        Apply one edit to file content.

        Args:
            path: Path of the file being edited (used to strip quoted filenames)
            content: Current file content, or None if the file does not exist
            original: Text the edit expects to find
            updated: Text to put in its place

        Returns:
            MatchResult holding the new whole content when successful
        """
        original = self.strip_quoted_wrapping(original, path)
        updated = self.strip_quoted_wrapping(updated, path)

        if content is None:
            if original.strip():
                return MatchResult(success=False)

            content = ''

        # An empty original appends (or creates the file)
        if not original.strip():
            if content and not content.endswith('\n'):
                content += '\n'

            return MatchResult(success=True, content=content + updated, strategy='append')

        return self.replace_most_similar_chunk(content, original, updated)

    def replace_most_similar_chunk(self, whole: str, part: str, replace: str) -> MatchResult:
        """
        Try each strategy in turn until one succeeds.

        Args:
            whole: Current file content
            part: Original text to find (not blank)
            replace: Updated text

        Returns:
            MatchResult from the first successful strategy, or a failed result
        """
        for name, strategy in self._strategies:
            new_content = strategy(whole, part, replace)
            if new_content is not None:
                self._logger.debug("matched using '%s' strategy", name)
                return MatchResult(success=True, content=new_content, strategy=name)

        return MatchResult(success=False)

    def strip_quoted_wrapping(self, text: str, path: str | None = None) -> str:
        """
        Remove the filename line and code fences an LLM may have put inside a block.

        Args:
            text: Original or updated text from an edit block
            path: Path of the target file

        Returns:
            Unwrapped text, terminated by a newline unless empty
        """
        if not text:
            return text

        lines = split_lines(text)

        if path and lines and lines[0].strip() == posixpath.basename(path.replace('\\', '/')):
            lines = lines[1:]

        if len(lines) >= 2 and lines[0].startswith(FENCE) and lines[-1].startswith(FENCE):
            lines = lines[1:-1]

        # Lines keep their terminators, including those of trailing blank lines
        result = ''.join(lines)
        if result and not result.endswith('\n'):
            result += '\n'

        return result

    def replace_exact(self, whole: str, part: str, replace: str) -> str | None:
        """Replace a verbatim, line-aligned occurrence of part."""
        _, whole_lines = prepare(whole)
        _, part_lines = prepare(part)
        _, replace_lines = prepare(replace)
        return self._perfect_replace(whole_lines, part_lines, replace_lines)

    def replace_skipping_leading_blank_line(self, whole: str, part: str, replace: str) -> str | None:
        """Retry an exact replacement without a spurious leading blank line in part."""
        _, part_lines = prepare(part)
        if len(part_lines) <= 2 or not is_blank(part_lines[0]):
            return None

        _, whole_lines = prepare(whole)
        _, replace_lines = prepare(replace)
        return self._perfect_replace(whole_lines, part_lines[1:], replace_lines)

    def replace_with_leading_whitespace_offset(self, whole: str, part: str, replace: str) -> str | None:
        """
        Replace part when it matches except for a uniform leading whitespace offset.

        Both part and replace are first outdented by the indentation they share,
        then part is compared to each window of whole ignoring leading whitespace.
        The whitespace the window adds to part must be the same on every
        non-blank line, and it is added to every non-blank line of replace.
        """
        _, whole_lines = prepare(whole)
        _, part_lines = prepare(part)
        _, replace_lines = prepare(replace)

        leading = [self._indent(line) for line in part_lines + replace_lines if not is_blank(line)]
        if leading and min(leading) > 0:
            outdent = min(leading)
            part_lines = [line if is_blank(line) else line[outdent:] for line in part_lines]
            replace_lines = [line if is_blank(line) else line[outdent:] for line in replace_lines]

        num_part_lines = len(part_lines)
        for i in range(len(whole_lines) - num_part_lines + 1):
            prefix = self._match_but_for_leading_whitespace(whole_lines[i:i + num_part_lines], part_lines)
            if prefix is None:
                continue

            adjusted = [line if is_blank(line) else prefix + line for line in replace_lines]
            return ''.join(whole_lines[:i] + adjusted + whole_lines[i + num_part_lines:])

        return None

    def replace_ignoring_trailing_blank_lines(self, whole: str, part: str, replace: str) -> str | None:
        """Retry an exact replacement with trailing blank lines trimmed from every input."""
        _, whole_lines = prepare(whole)
        _, part_lines = prepare(part)
        _, replace_lines = prepare(replace)

        trimmed_whole = self._trim_trailing_blank_lines(whole_lines)
        trimmed_part = self._trim_trailing_blank_lines(part_lines)
        if not trimmed_whole or not trimmed_part:
            return None

        trimmed_replace = self._trim_trailing_blank_lines(replace_lines)
        result = self._perfect_replace(trimmed_whole, trimmed_part, trimmed_replace)
        if result is None:
            return None

        # Keep the file's own trailing blank lines
        return result + ''.join(whole_lines[len(trimmed_whole):])

    def replace_ellipsis_segments(self, whole: str, part: str, replace: str) -> str | None:
        """
        Replace segment by segment when part and replace elide sections with `...` lines.

        Each segment of part must occur exactly once in the content. Any
        ambiguous or missing segment fails the whole edit, leaving no partial
        replacement behind.
        """
        whole, _ = prepare(whole)
        part, _ = prepare(part)
        replace, _ = prepare(replace)

        part_segments = self.ELLIPSIS_PATTERN.split(part)
        replace_segments = self.ELLIPSIS_PATTERN.split(replace)

        if len(part_segments) < 2 or len(part_segments) != len(replace_segments):
            return None

        result = whole
        for part_segment, replace_segment in zip(part_segments, replace_segments):
            if not part_segment and not replace_segment:
                continue

            if not part_segment:
                if not result.endswith('\n'):
                    result += '\n'

                result += replace_segment
                continue

            if result.count(part_segment) != 1:
                return None

            result = result.replace(part_segment, replace_segment, 1)

        return result

    def _perfect_replace(
        self,
        whole_lines: List[str],
        part_lines: List[str],
        replace_lines: List[str]
    ) -> str | None:
        num_part_lines = len(part_lines)
        if num_part_lines == 0:
            return None

        for i in range(len(whole_lines) - num_part_lines + 1):
            if whole_lines[i:i + num_part_lines] == part_lines:
                return ''.join(whole_lines[:i] + replace_lines + whole_lines[i + num_part_lines:])

        return None

    def _match_but_for_leading_whitespace(self, whole_lines: List[str], part_lines: List[str]) -> str | None:
        """
        Check if lines match apart from a uniform leading whitespace offset.

        Args:
            whole_lines: Window of file lines
            part_lines: Outdented original lines, same length as the window

        Returns:
            The whitespace the window adds to each non-blank line, or None if there is no uniform offset
        """
        if any(w.lstrip() != p.lstrip() for w, p in zip(whole_lines, part_lines)):
            return None

        prefixes: Set[str] = set()
        for whole_line, part_line in zip(whole_lines, part_lines):
            if is_blank(whole_line):
                continue

            delta = self._indent(whole_line) - self._indent(part_line)
            if delta < 0:
                return None

            prefixes.add(whole_line[:delta])

        if len(prefixes) != 1:
            return None

        return prefixes.pop()

    def _trim_trailing_blank_lines(self, lines: List[str]) -> List[str]:
        end = len(lines)
        while end > 0 and is_blank(lines[end - 1]):
            end -= 1

        return lines[:end]

    def _indent(self, line: str) -> int:
        return len(line) - len(line.lstrip())
