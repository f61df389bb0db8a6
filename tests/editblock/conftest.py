"""Shared fixtures and utilities for edit block tests."""

from typing import Dict, List

import pytest

from editblock.editblock_applier import EditBlockApplier
from editblock.editblock_settings import EditBlockSettings


class InMemoryEditBlockApplier(EditBlockApplier):
    """Dictionary-backed edit block applier for testing."""

    def __init__(self, files: Dict[str, str] | None = None, settings: EditBlockSettings | None = None):
        super().__init__(settings)
        self.files: Dict[str, str] = dict(files or {})
        self.writes: List[str] = []

    def _file_exists(self, path: str) -> bool:
        return path in self.files

    def _read_file(self, path: str) -> str:
        return self.files[path]

    def _write_file(self, path: str, content: str) -> None:
        self.files[path] = content
        self.writes.append(path)


@pytest.fixture
def memory_applier():
    """Factory for in-memory appliers holding the given files."""
    def _create_applier(files: Dict[str, str] | None = None, settings: EditBlockSettings | None = None):
        return InMemoryEditBlockApplier(files, settings)
    return _create_applier


class EditBlockTestHelpers:
    """Helper utilities for edit block testing."""

    @staticmethod
    def block(filename: str, original: str, updated: str, fence: str = "```python") -> str:
        """Build the text of a fenced SEARCH/REPLACE block."""
        return (
            f"{filename}\n"
            f"{fence}\n"
            "<<<<<<< SEARCH\n"
            f"{original}"
            "=======\n"
            f"{updated}"
            ">>>>>>> REPLACE\n"
            "```\n"
        )


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return EditBlockTestHelpers
