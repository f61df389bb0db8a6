"""
SEARCH/REPLACE edit block parsing, matching, and application.

This package applies the SEARCH/REPLACE edit blocks found in LLM responses
to files, tolerating the small transcription mistakes models make, and
explains precisely which edits failed and why.
"""

from editblock.editblock_applier import EditBlockApplier
from editblock.editblock_diagnostics import EditBlockDiagnostics
from editblock.editblock_exceptions import (
    EditBlockApplicationError,
    EditBlockError,
    EditBlockMatchError,
    EditBlockParseError,
)
from editblock.editblock_filename_resolver import FilenameResolver
from editblock.editblock_parser import EditBlockParser
from editblock.editblock_replacer import ChunkReplacer
from editblock.editblock_settings import EditBlockSettings
from editblock.editblock_similarity import SimilarityScorer
from editblock.editblock_types import (
    EditApplicationResult,
    EditBlock,
    EditFailureKind,
    EditOutcome,
    EditStatus,
    FileTarget,
    MatchResult,
    ShellCommandTarget,
    SimilaritySuggestion,
)
from editblock.filesystem_editblock_applier import FilesystemEditBlockApplier

__all__ = [
    # Exceptions
    'EditBlockError',
    'EditBlockParseError',
    'EditBlockMatchError',
    'EditBlockApplicationError',
    # Types
    'FileTarget',
    'ShellCommandTarget',
    'EditBlock',
    'MatchResult',
    'SimilaritySuggestion',
    'EditStatus',
    'EditFailureKind',
    'EditOutcome',
    'EditApplicationResult',
    # Core classes
    'SimilarityScorer',
    'EditBlockParser',
    'FilenameResolver',
    'ChunkReplacer',
    'EditBlockDiagnostics',
    'EditBlockSettings',
    'EditBlockApplier',
    'FilesystemEditBlockApplier',
]
