"""
Batch-wide symbol table used for best-effort edge resolution.
"""
import logging
import re
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from codemodel.core.relationships import CallGraphEntity

# Scope separators of the supported languages, longest first
_SEPARATORS = re.compile(r"::|->|\.|\\")


def split_segments(name: str) -> List[str]:
    """Split a scoped name on every supported separator."""
    return _SEPARATORS.split(name)


def last_segment(name: str) -> str:
    """Return the final segment of a scoped name."""
    parts = split_segments(name)
    return parts[-1] if parts else name


def has_separator(name: str) -> bool:
    return bool(_SEPARATORS.search(name))


class SymbolResolver:
    """
    Read-only index of a batch of entities by simple and qualified name.

    The index is built once from every compilation unit of the batch before any
    extraction runs, then only read; concurrent lookups need no locking.
    Names that collide keep the first entity registered.
    """

    def __init__(self, entities: Iterable[CallGraphEntity]):
        by_name: Dict[str, CallGraphEntity] = {}
        by_qualified: Dict[str, CallGraphEntity] = {}
        by_id: Dict[str, CallGraphEntity] = {}

        for entity in entities:
            if entity.name:
                by_name.setdefault(entity.name, entity)
            if entity.qualified_name:
                by_qualified.setdefault(entity.qualified_name, entity)
            if entity.id:
                by_id.setdefault(entity.id, entity)

        self.by_name: Mapping[str, CallGraphEntity] = MappingProxyType(by_name)
        self.by_qualified: Mapping[str, CallGraphEntity] = MappingProxyType(by_qualified)
        self.by_id: Mapping[str, CallGraphEntity] = MappingProxyType(by_id)

        logging.getLogger(__name__).debug(
            f"Symbol table built: {len(by_name)} names, {len(by_qualified)} qualified names"
        )

    @classmethod
    def from_entities(cls, entities: Iterable) -> "SymbolResolver":
        """Build a resolver from full Entity records (no AST node needed)."""
        return cls(e.to_call_graph_entity() for e in entities)

    def _lookup(self, name: str) -> Optional[CallGraphEntity]:
        found = self.by_qualified.get(name)
        if found is None:
            found = self.by_name.get(name)
        return found

    def resolve(self, target: str) -> Optional[CallGraphEntity]:
        """
        Resolve a target name.

        1. Exact match against qualified and simple names.
        2. If the target is scoped (``a.b``, ``a::b``), retry with the last
           segment.

        Args:
            target: Name as written at the reference site

        Returns:
            The matched entity, or None when the name stays unresolved
        """
        if not target:
            return None

        found = self._lookup(target)
        if found is not None:
            return found

        if has_separator(target):
            return self._lookup(last_segment(target))
        return None

    def resolve_id(self, target: str) -> Optional[str]:
        found = self.resolve(target)
        return found.id if found is not None else None

    def get(self, entity_id: str) -> Optional[CallGraphEntity]:
        return self.by_id.get(entity_id)

    def __contains__(self, name: str) -> bool:
        return self._lookup(name) is not None

    def __len__(self) -> int:
        return len(self.by_id)
