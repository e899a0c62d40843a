"""
Core module for codemodel entities and dependencies.
"""

from .code_model import CodeModel
from .entities import (
    Entity,
    EntityKind,
    TypeKind,
    Param,
    Field,
    EnumValue,
    generate_entity_id
)
from .relationships import (
    Dependency,
    DependencyKind,
    CallGraphEntity
)
from .errors import (
    CodeModelError,
    UnsupportedLanguageError,
    FileReadError,
    ParseError,
    InvalidTreeError
)

__all__ = [
    "CodeModel",
    "Entity",
    "EntityKind",
    "TypeKind",
    "Param",
    "Field",
    "EnumValue",
    "generate_entity_id",
    "Dependency",
    "DependencyKind",
    "CallGraphEntity",
    "CodeModelError",
    "UnsupportedLanguageError",
    "FileReadError",
    "ParseError",
    "InvalidTreeError"
]
