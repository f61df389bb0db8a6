"""Filesystem-specific edit block application."""

import logging
import os
import tempfile
from pathlib import Path

from editblock.editblock_applier import EditBlockApplier
from editblock.editblock_exceptions import EditBlockApplicationError
from editblock.editblock_settings import EditBlockSettings


class FilesystemEditBlockApplier(EditBlockApplier):
    """Edit block applier for files under a root directory."""

    def __init__(self, root: str | Path, settings: EditBlockSettings | None = None):
        """
        Initialize the edit block applier.

        Args:
            root: Directory edit block paths are relative to; edits may not escape it
            settings: Settings to apply edits with (defaults if not given)
        """
        super().__init__(settings)
        self._root = Path(root).resolve()
        self._logger = logging.getLogger("FilesystemEditBlockApplier")

    def root(self) -> Path:
        """Get the root directory."""
        return self._root

    def resolve_path(self, path: str) -> Path:
        """
        Resolve an edit block path to an absolute path inside the root.

        Args:
            path: Path as written in the edit block

        Returns:
            Absolute, resolved path

        Raises:
            EditBlockApplicationError: If the path is empty or resolves outside the root
        """
        path = path.strip()
        if not path:
            raise EditBlockApplicationError("Edit path must not be empty")

        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self._root / candidate

        resolved = candidate.resolve()

        try:
            resolved.relative_to(self._root)

        except ValueError as e:
            error_details = {
                'phase': 'path_resolution',
                'reason': 'Path resolves outside the root directory',
                'path': path,
                'root': str(self._root)
            }
            raise EditBlockApplicationError(
                f"Edit path '{path}' resolves outside the root directory", error_details
            ) from e

        return resolved

    def _file_exists(self, path: str) -> bool:
        return self.resolve_path(path).is_file()

    def _read_file(self, path: str) -> str:
        """
        Read a file's text, preserving its line endings.

        Raises:
            EditBlockApplicationError: If the file is too large or cannot be read
        """
        file_path = self.resolve_path(path)
        encoding = self._settings.encoding

        try:
            size = file_path.stat().st_size
            if size > self._settings.max_file_size_bytes:
                size_mb = size / (1024 * 1024)
                raise EditBlockApplicationError(
                    f"File too large: {path} ({size_mb:.1f}MB, max: {self._settings.max_file_size_mb}MB)"
                )

            with open(file_path, 'r', encoding=encoding, newline='') as f:
                return f.read()

        except UnicodeDecodeError as e:
            raise EditBlockApplicationError(f"File is not valid {encoding} text: {path}") from e

        except PermissionError as e:
            raise EditBlockApplicationError(f"Permission denied reading file: {str(e)}") from e

        except OSError as e:
            raise EditBlockApplicationError(f"Failed to read file: {str(e)}") from e

    def _write_file(self, path: str, content: str) -> None:
        """
        Write a file atomically (temporary file, then rename).

        Raises:
            EditBlockApplicationError: If the content is too large or the file cannot be written
        """
        file_path = self.resolve_path(path)
        encoding = self._settings.encoding

        content_size = len(content.encode(encoding))
        if content_size > self._settings.max_file_size_bytes:
            size_mb = content_size / (1024 * 1024)
            raise EditBlockApplicationError(
                f"Content too large for {path}: {size_mb:.1f}MB (max: {self._settings.max_file_size_mb}MB)"
            )

        try:
            if self._settings.create_parents:
                file_path.parent.mkdir(parents=True, exist_ok=True)

            if file_path.exists():
                desired_mode = file_path.stat().st_mode & 0o777

            else:
                umask = os.umask(0)
                os.umask(umask)
                desired_mode = 0o666 & ~umask

            with tempfile.NamedTemporaryFile(
                mode='w',
                encoding=encoding,
                newline='',
                dir=file_path.parent,
                delete=False,
                suffix='.tmp'
            ) as tmp_file:
                tmp_file.write(content)
                tmp_path = Path(tmp_file.name)

            # Atomic rename
            tmp_path.replace(file_path)
            file_path.chmod(desired_mode)

        except PermissionError as e:
            raise EditBlockApplicationError(f"Permission denied writing file: {str(e)}") from e

        except OSError as e:
            raise EditBlockApplicationError(f"Failed to write file: {str(e)}") from e

        self._logger.debug("wrote %d bytes to %s", content_size, file_path)
