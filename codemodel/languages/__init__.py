"""
Language adapters and the registry that maps languages to them.
"""
import os
from typing import Dict, Optional, Type

from codemodel.core.errors import UnsupportedLanguageError
from .base import BaseList, LanguageAdapter
from .go import GoAdapter
from .java import JavaAdapter
from .python import PythonAdapter
from .rust import RustAdapter

ADAPTERS: Dict[str, Type[LanguageAdapter]] = {
    "java": JavaAdapter,
    "python": PythonAdapter,
    "rust": RustAdapter,
    "go": GoAdapter,
}

EXTENSIONS: Dict[str, str] = {
    ".java": "java",
    ".py": "python",
    ".rs": "rust",
    ".go": "go",
}

SUPPORTED_LANGUAGES = tuple(ADAPTERS)


def get_adapter(language: str, config=None) -> LanguageAdapter:
    """
    Create the adapter for a language.

    Args:
        language: Language name (java, python, rust, go)
        config: Optional ExtractionConfig carrying builtin overrides

    Returns:
        A configured LanguageAdapter
    """
    adapter_class = ADAPTERS.get(language.lower())
    if adapter_class is None:
        raise UnsupportedLanguageError(language)

    if config is None:
        return adapter_class()
    extra, removed = config.builtin_overrides(language.lower())
    return adapter_class(extra_builtins=extra, removed_builtins=removed)


def language_for_path(file_path: str) -> Optional[str]:
    """Language of a file judged by its extension, or None."""
    _, ext = os.path.splitext(file_path)
    return EXTENSIONS.get(ext.lower())


__all__ = [
    "BaseList",
    "LanguageAdapter",
    "JavaAdapter",
    "PythonAdapter",
    "RustAdapter",
    "GoAdapter",
    "ADAPTERS",
    "EXTENSIONS",
    "SUPPORTED_LANGUAGES",
    "get_adapter",
    "language_for_path",
]
