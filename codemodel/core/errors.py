"""
Exceptions raised by the code model extraction pipeline.
"""
from typing import Optional


class CodeModelError(Exception):
    """Base class for all codemodel errors."""


class UnsupportedLanguageError(CodeModelError, ValueError):
    """Raised when no parser or adapter exists for a language."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported language: {language}")


class FileReadError(CodeModelError):
    """Raised when a source file cannot be read."""

    def __init__(self, path: str, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        message = f"Failed to read file {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ParseError(CodeModelError):
    """Raised when tree-sitter cannot produce a tree for a compilation unit."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        self.file_path = file_path
        if file_path:
            message = f"{file_path}: {message}"
        super().__init__(message)


class InvalidTreeError(CodeModelError):
    """
    Raised when the tree handle handed to an extractor is unusable.

    This aborts extraction for a single compilation unit only.
    """
