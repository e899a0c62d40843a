"""
Dependency edges between code entities.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class DependencyKind(str, Enum):
    """Kind of a directed dependency edge."""

    CALLS = "calls"
    USES_TYPE = "uses_type"
    IMPLEMENTS = "implements"
    EXTENDS = "extends"
    METHOD_OF = "method_of"


class Dependency(BaseModel):
    """
    A directed edge from an entity to a target name.

    The target always carries a readable name. ``to_id`` stays empty when the
    name could not be resolved inside the batch, which is a valid final state.
    """

    from_id: str
    to_name: str
    to_qualified: Optional[str] = None
    to_id: Optional[str] = None
    kind: DependencyKind
    location: str = ""
    optional: bool = False

    @property
    def is_resolved(self) -> bool:
        return bool(self.to_id)

    @property
    def target(self) -> str:
        return self.to_qualified or self.to_name

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.from_id} -{self.kind.value}-> {self.target})"


class CallGraphEntity(BaseModel):
    """
    The narrowed view of an entity used during one extraction pass.

    ``node`` is a borrowed tree-sitter node; it is never serialized.
    """

    id: str
    name: str
    qualified_name: str = ""
    kind: str
    location: str = ""
    node: Optional[Any] = Field(default=None, exclude=True, repr=False)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, kind={self.kind})"
