"""
Parsers for different programming languages.
"""
from typing import Dict, Type

from codemodel.core.errors import UnsupportedLanguageError
from .base_parser import BaseParser, ParseResult, ParsedEntity
from .go_parser import GoParser
from .java_parser import JavaParser
from .python_parser import PythonParser
from .rust_parser import RustParser

PARSERS: Dict[str, Type[BaseParser]] = {
    "java": JavaParser,
    "python": PythonParser,
    "rust": RustParser,
    "go": GoParser,
}


def get_parser(language: str, adapter=None) -> BaseParser:
    """
    Create a parser for a language.

    Args:
        language: Language name
        adapter: Optional preconfigured LanguageAdapter

    Returns:
        A parser instance
    """
    parser_class = PARSERS.get(language.lower())
    if parser_class is None:
        raise UnsupportedLanguageError(language)
    return parser_class(adapter)


__all__ = [
    "BaseParser",
    "ParseResult",
    "ParsedEntity",
    "JavaParser",
    "PythonParser",
    "RustParser",
    "GoParser",
    "PARSERS",
    "get_parser",
]
