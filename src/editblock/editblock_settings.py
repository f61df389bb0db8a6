"""Settings for applying edit blocks to files."""

import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

import yaml


@dataclass
class EditBlockSettings:
    """
    Settings controlling how edit blocks are applied.

    Attributes:
        encoding: Text encoding used to read and write files
        max_file_size_mb: Files (and new content) larger than this are rejected
        create_parents: Create missing parent directories when creating files
        skip_comment_like_paths: Skip nonexistent targets whose name contains a space
        reject_sample_prompt_edits: Refuse edits aimed at the example paths used in prompts
    """
    encoding: str = "utf-8"
    max_file_size_mb: int = 10
    create_parents: bool = True
    skip_comment_like_paths: bool = True
    reject_sample_prompt_edits: bool = True

    @classmethod
    def create_default(cls) -> "EditBlockSettings":
        """Create settings with default values."""
        return cls()

    @classmethod
    def load_from_file(cls, config_path: str) -> "EditBlockSettings":
        """
        Load settings from a YAML file.

        Keys that are absent keep their default values.

        Args:
            config_path: Path to the YAML file

        Returns:
            Loaded settings

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file holds unknown keys or values of the wrong type
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            return cls()

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditBlockSettings":
        """
        Create settings from a dictionary, validating keys and value types.

        Args:
            data: Setting names mapped to values

        Returns:
            Settings object

        Raises:
            ValueError: If there are unknown keys or values of the wrong type
        """
        defaults = cls()
        known = {f.name for f in fields(cls)}

        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")

        for key, value in data.items():
            expected = type(getattr(defaults, key))

            # bool is a subclass of int, so check it explicitly
            if isinstance(value, bool) != (expected is bool) or not isinstance(value, expected):
                raise ValueError(f"Setting '{key}' must be of type {expected.__name__}, got {type(value).__name__}")

        settings = cls(**data)
        if settings.max_file_size_mb <= 0:
            raise ValueError(f"Setting 'max_file_size_mb' must be positive, got {settings.max_file_size_mb}")

        return settings

    def save_to_file(self, config_path: str) -> None:
        """Save settings to a YAML file."""
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=True)

    @property
    def max_file_size_bytes(self) -> int:
        """Get the maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024
