"""Line splitting helpers shared by the parser, replacer and diagnostics."""

from typing import List, Tuple


def split_lines(text: str) -> List[str]:
    """
    Split text into lines, keeping each line's terminator.

    Only '\\n' ends a line (a preceding '\\r' stays part of the line), so CRLF
    content round-trips unchanged. The final line has no terminator if the
    text does not end with one.

    Args:
        text: Text to split

    Returns:
        List of lines; joining them gives back the original text
    """
    parts = text.split('\n')
    lines = [part + '\n' for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])

    return lines


def prepare(text: str) -> Tuple[str, List[str]]:
    """
    Normalize text so that every line, including the last, is terminated.

    Args:
        text: Text to prepare

    Returns:
        Tuple of (terminated text, its lines)
    """
    if text and not text.endswith('\n'):
        text += '\n'

    return text, split_lines(text)


def is_blank(line: str) -> bool:
    """Check if a line holds nothing but whitespace."""
    return not line.strip()
