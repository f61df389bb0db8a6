"""Text similarity scoring for fuzzy filename resolution and match diagnostics."""

import difflib
from typing import Iterable, List, Sequence


class SimilarityScorer:
    """
    Computes a normalized similarity ratio between two pieces of text.

    Line sequences are joined with newlines before scoring so a window of file
    lines and a block of edit text compare the same way regardless of how they
    were split.
    """

    def ratio(self, a: str | Sequence[str], b: str | Sequence[str]) -> float:
        """
        Calculate the similarity ratio between two texts.

        The score is symmetric: inputs are put into a canonical order before
        being handed to SequenceMatcher, whose longest-match search otherwise
        depends on argument order.

        Args:
            a: First text, or a sequence of lines
            b: Second text, or a sequence of lines

        Returns:
            Similarity from 0.0 (nothing shared) to 1.0 (identical)
        """
        text_a = self._join(a)
        text_b = self._join(b)

        if text_a == text_b:
            return 1.0

        if text_b < text_a:
            text_a, text_b = text_b, text_a

        return difflib.SequenceMatcher(None, text_a, text_b, autojunk=False).ratio()

    def close_matches(self, word: str, candidates: Iterable[str], cutoff: float) -> List[str]:
        """
        Find all candidates at least `cutoff` similar to `word`.

        Args:
            word: Text to compare against
            candidates: Possible matches
            cutoff: Minimum similarity (0.0-1.0) for a candidate to be returned

        Returns:
            Matching candidates, most similar first
        """
        scored = []
        for candidate in candidates:
            score = self.ratio(word, candidate)
            if score >= cutoff:
                scored.append((score, candidate))

        # sorted() is stable, so equally scored candidates keep their order
        scored = sorted(scored, key=lambda item: item[0], reverse=True)
        return [candidate for _, candidate in scored]

    def _join(self, text: str | Sequence[str]) -> str:
        if isinstance(text, str):
            return text

        return '\n'.join(line.rstrip('\r\n') for line in text)
