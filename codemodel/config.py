"""
Configuration for code model extraction.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS = [
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    ".venv",
    "venv",
    "node_modules",
    "target",
    "build",
    "dist",
    "vendor",
]


class ExtractionConfig(BaseModel):
    """
    Settings for one indexing run.

    Builtin exclusion tables are per language and only partly objective, so
    both directions are configurable: ``extra_builtins`` adds names to a
    language's table and ``removed_builtins`` takes names out of it.
    """

    max_workers: int = 4
    languages: Optional[List[str]] = None
    exclude_dirs: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    extra_builtins: Dict[str, List[str]] = Field(default_factory=dict)
    removed_builtins: Dict[str, List[str]] = Field(default_factory=dict)
    base_path: Optional[str] = None

    @field_validator("max_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_workers must be at least 1")
        return value

    def language_enabled(self, language: str) -> bool:
        return self.languages is None or language in self.languages

    def builtin_overrides(self, language: str):
        """Return (extra, removed) builtin names for a language."""
        return (
            frozenset(self.extra_builtins.get(language, ())),
            frozenset(self.removed_builtins.get(language, ())),
        )

    @classmethod
    def from_file(cls, path: str, **overrides: Any) -> "ExtractionConfig":
        """
        Load a configuration from a JSON file.

        Args:
            path: JSON file with any subset of the config keys
            **overrides: Values that take precedence over the file (None values
                are ignored)

        Returns:
            The loaded configuration
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        data.update({k: v for k, v in overrides.items() if v is not None})
        config = cls.model_validate(data)
        logger.info(f"Loaded configuration from {path}")
        return config
