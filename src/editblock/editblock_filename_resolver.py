"""Resolution of the target filename for a SEARCH/REPLACE block."""

import posixpath
import re
from typing import Iterable, List

from editblock.editblock_similarity import SimilarityScorer


FENCE = '```'

# Similarity a valid filename must reach to be accepted as a fuzzy match
FUZZY_FILENAME_CUTOFF = 0.8

# Number of lines before a head marker that may hold the filename
FILENAME_LOOKBACK = 3


class FilenameResolver:
    """
    Picks the filename an edit block applies to from the lines preceding it.

    LLMs write the filename in many ways: bare, inside backticks, in bold, as a
    markdown heading, followed by a colon, or just the base name of a path that
    is open in the session. Candidates are checked against the set of valid
    filenames first, and only fall back to guesses when nothing matches.
    """

    def __init__(
        self,
        valid_filenames: Iterable[str] | None = None,
        fuzzy_cutoff: float = FUZZY_FILENAME_CUTOFF
    ):
        """
        Initialize the resolver.

        Args:
            valid_filenames: Filenames considered valid targets; empty means no constraint
            fuzzy_cutoff: Minimum similarity (0.0-1.0) for a fuzzy filename match
        """
        self._valid_filenames: List[str] = list(valid_filenames or [])
        self._fuzzy_cutoff = fuzzy_cutoff
        self._scorer = SimilarityScorer()

    def resolve(self, preceding_lines: List[str]) -> str | None:
        """
        Resolve a filename from the lines immediately preceding a head marker.

        Args:
            preceding_lines: Lines before the head marker, in document order

        Returns:
            The resolved filename, or None if no candidate was found
        """
        candidates = self.candidates(preceding_lines)
        if not candidates:
            return None

        for candidate in candidates:
            if candidate in self._valid_filenames:
                return candidate

        for candidate in candidates:
            for valid in self._valid_filenames:
                if candidate == posixpath.basename(valid.replace('\\', '/')):
                    return valid

        for candidate in candidates:
            matches = self._scorer.close_matches(candidate, self._valid_filenames, self._fuzzy_cutoff)
            if len(matches) == 1:
                return matches[0]

        for candidate in candidates:
            if '.' in candidate:
                return candidate

        return candidates[0]

    def candidates(self, preceding_lines: List[str]) -> List[str]:
        """
        Extract filename candidates, closest to the head marker first.

        Args:
            preceding_lines: Lines before the head marker, in document order

        Returns:
            List of cleaned up filename candidates
        """
        candidates: List[str] = []

        # Walk back over fences only; the first other line ends the walk
        for line in list(reversed(preceding_lines))[:FILENAME_LOOKBACK]:
            if line.strip().startswith(FENCE):
                continue

            name = self.strip_filename(line)
            if name:
                candidates.append(name)

            break

        return candidates

    @staticmethod
    def strip_filename(line: str) -> str | None:
        """
        Strip the decoration LLMs put around filenames.

        Args:
            line: A single line of text

        Returns:
            The bare filename, or None if the line cannot be a filename
        """
        name = line.strip()

        if name == '...':
            return None

        if name.startswith(FENCE):
            return None

        name = re.sub(r':$', '', name)
        name = re.sub(r'^#', '', name)
        name = name.strip()
        name = name.strip('`*')

        return name or None
