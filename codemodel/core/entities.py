"""
Core entities for the code model.
"""
import hashlib
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field as PydanticField, model_validator


class EntityKind(str, Enum):
    """Kind of an extracted declaration."""

    FUNCTION = "function"
    METHOD = "method"
    TYPE = "type"
    ENUM = "enum"
    CONSTANT = "constant"
    VARIABLE = "variable"
    IMPORT = "import"


class TypeKind(str, Enum):
    """Specific shape of a type declaration."""

    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"
    RECORD = "record"
    TRAIT = "trait"
    ALIAS = "alias"
    UNION = "union"


_ID_TYPE_CODES = {
    EntityKind.FUNCTION: "fn",
    EntityKind.METHOD: "fn",
    EntityKind.TYPE: "type",
    EntityKind.ENUM: "enum",
    EntityKind.CONSTANT: "const",
    EntityKind.VARIABLE: "var",
    EntityKind.IMPORT: "imp",
}

MAX_ID_NAME_LENGTH = 32


class Param(BaseModel):
    """A parameter of a function or method."""

    name: str = ""
    type: str = ""


class Field(BaseModel):
    """A field of a struct, class or interface."""

    name: str
    type: str = ""


class EnumValue(BaseModel):
    """A member of an enumeration."""

    name: str
    value: str = ""


def sanitize_name(name: str) -> str:
    """Truncate a symbol name and replace characters unsafe for ids."""
    name = name[:MAX_ID_NAME_LENGTH]
    return "".join(ch if (ch.isascii() and ch.isalnum()) or ch == "_" else "_" for ch in name)


def path_hash(file_path: str) -> str:
    """First six hex characters of the SHA-256 of a file path."""
    return hashlib.sha256(file_path.encode("utf-8")).hexdigest()[:6]


def generate_entity_id(kind: EntityKind, file_path: str, start_line: int, name: str) -> str:
    """
    Generate the location-anchored identifier of an entity.

    Format: ``sa-<type code>-<path hash>-<start line>-<name>``.

    Args:
        kind: Entity kind
        file_path: Path of the file declaring the entity
        start_line: 1-indexed start line
        name: Symbol name

    Returns:
        The entity id
    """
    type_code = _ID_TYPE_CODES.get(EntityKind(kind), "unk")
    return f"sa-{type_code}-{path_hash(file_path)}-{start_line}-{sanitize_name(name)}"


class Entity(BaseModel):
    """
    A declaration extracted from one parse of a file.

    Entities are replaced wholesale when their file is re-parsed. Only the
    hash fields are written after construction.
    """

    kind: EntityKind
    name: str
    qualified_name: Optional[str] = None
    file_path: str
    start_line: int
    end_line: int
    language: Optional[str] = None
    id: str = ""

    # Functions and methods
    params: List[Param] = PydanticField(default_factory=list)
    returns: List[str] = PydanticField(default_factory=list)
    receiver: Optional[str] = None

    # Types
    type_kind: Optional[TypeKind] = None
    fields: List[Field] = PydanticField(default_factory=list)

    # Enums
    enum_values: List[EnumValue] = PydanticField(default_factory=list)

    # Constants and variables (also the base type of enums)
    value_type: Optional[str] = None
    value: Optional[str] = None

    # Imports
    import_path: Optional[str] = None
    import_alias: Optional[str] = None

    visibility: Optional[str] = None
    sig_hash: str = ""
    body_hash: str = ""

    @model_validator(mode="after")
    def _assign_id(self) -> "Entity":
        if not self.id:
            self.id = generate_entity_id(self.kind, self.file_path, self.start_line, self.name)
        return self

    @property
    def is_callable(self) -> bool:
        return self.kind in (EntityKind.FUNCTION, EntityKind.METHOD)

    @property
    def hash_pair(self) -> str:
        """Signature and body hash joined in their storage format."""
        from codemodel.analysis.hashing import format_hash_pair

        return format_hash_pair(self.sig_hash, self.body_hash)

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.start_line}"

    def call_graph_kind(self) -> str:
        """Kind string used by the call-graph extractor."""
        if self.kind == EntityKind.TYPE:
            return self.type_kind.value if self.type_kind else "type"
        return self.kind.value

    def to_call_graph_entity(self, node: Any = None):
        """
        Narrow this entity to the view the call-graph extractor consumes.

        Args:
            node: The tree-sitter node the entity was extracted from

        Returns:
            A CallGraphEntity
        """
        from .relationships import CallGraphEntity

        return CallGraphEntity(
            id=self.id,
            name=self.name,
            qualified_name=self.qualified_name or self.name,
            kind=self.call_graph_kind(),
            location=self.location,
            node=node,
        )

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value}, name={self.name}, id={self.id})"
