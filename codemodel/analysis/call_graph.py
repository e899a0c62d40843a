"""
Call-graph and dependency extraction over one parsed compilation unit.
"""
import logging
from typing import Dict, Iterable, List, Optional

from tree_sitter import Node

from codemodel.core.errors import InvalidTreeError
from codemodel.core.relationships import CallGraphEntity, Dependency, DependencyKind
from codemodel.core.walker import node_location, walk
from codemodel.languages.base import LanguageAdapter
from .symbol_resolver import SymbolResolver, last_segment, split_segments

CALLABLE_KINDS = frozenset({"function", "method", "constructor"})
TYPE_LIKE_KINDS = frozenset({
    "type", "class", "interface", "struct", "record", "enum", "trait", "alias", "union",
})


class _Site:
    """First occurrence of a call target and whether every occurrence is conditional."""

    __slots__ = ("node", "conditional")

    def __init__(self, node: Node, conditional: bool):
        self.node = node
        self.conditional = conditional


class CallGraphExtractor:
    """
    Extracts Calls, UsesType, Extends, Implements and MethodOf edges.

    All grammar knowledge comes from the adapter; the resolver is the shared,
    read-only symbol table of the batch.

    Args:
        result: Parsed unit (anything with ``root``, ``source`` and ``file_path``)
        adapter: Adapter for the unit's language
        resolver: Symbol table of the whole batch
    """

    def __init__(self, result, adapter: LanguageAdapter, resolver: SymbolResolver):
        self.result = result
        self.adapter = adapter
        self.resolver = resolver
        self.source: Optional[bytes] = getattr(result, "source", None)
        self.file_path: str = getattr(result, "file_path", "") or ""
        self.logger = logging.getLogger(__name__)

    def extract(self, entities: Iterable[CallGraphEntity]) -> List[Dependency]:
        """
        Extract the dependencies of every entity of the unit.

        Args:
            entities: Entities of this unit, each carrying its node

        Returns:
            Dependencies in entity order
        """
        if self.result is None or getattr(self.result, "root", None) is None:
            raise InvalidTreeError(f"No syntax tree for {self.file_path or 'unit'}")
        if self.source is None:
            raise InvalidTreeError(f"No source for {self.file_path or 'unit'}")

        deps: List[Dependency] = []
        for entity in entities:
            if entity.node is None:
                continue
            if entity.kind in CALLABLE_KINDS:
                deps.extend(self.extract_callable(entity))
            elif entity.kind in TYPE_LIKE_KINDS:
                deps.extend(self.extract_type_like(entity))

        self.logger.debug(f"{self.file_path}: {len(deps)} dependencies")
        return deps

    def extract_callable(self, entity: CallGraphEntity) -> List[Dependency]:
        deps: List[Dependency] = []
        body = self.adapter.body_of(entity.node)
        if body is not None:
            deps.extend(self.extract_calls(entity, body))
            deps.extend(self.extract_constructions(entity, body))
        deps.extend(self.extract_decorators(entity, deps))
        deps.extend(self.extract_type_references(entity))

        owner = self.extract_owner(entity)
        if owner is not None:
            deps.append(owner)
        return deps

    def extract_type_like(self, entity: CallGraphEntity) -> List[Dependency]:
        deps = self.extract_bases(entity)
        deps.extend(self.extract_type_references(entity, prune=True))
        deps.extend(self.extract_decorators(entity, []))
        return deps

    # Edge construction

    def _dependency(self, entity: CallGraphEntity, target: str, node: Optional[Node],
                    kind: DependencyKind, optional: bool = False) -> Dependency:
        to_name = last_segment(target)
        return Dependency(
            from_id=entity.id,
            to_name=to_name,
            to_qualified=target if to_name != target else None,
            to_id=self.resolver.resolve_id(target),
            kind=kind,
            location=node_location(node, self.file_path) if node is not None else entity.location,
            optional=optional,
        )

    def _is_builtin_type_name(self, name: str) -> bool:
        return self.adapter.is_builtin_type(name) or self.adapter.is_builtin_type(last_segment(name))

    def _skip_call(self, name: str, qualifier: Optional[str]) -> bool:
        if not qualifier:
            return self.adapter.is_builtin(name)
        # Static helpers of builtin types: String.valueOf, Vec::new, System.out.println
        segments = split_segments(qualifier)
        return self.adapter.is_builtin_type(segments[-1]) or self.adapter.is_builtin_type(segments[0])

    @staticmethod
    def _record(sites: Dict[str, _Site], key: str, node: Node, conditional: bool) -> None:
        site = sites.get(key)
        if site is None:
            sites[key] = _Site(node, conditional)
        elif not conditional:
            site.conditional = False

    # Callables

    def extract_calls(self, entity: CallGraphEntity, body: Node) -> List[Dependency]:
        """
        One Calls edge per distinct call target in ``body``.

        The edge is located at the first occurrence and is optional only if
        every occurrence sits under a branch.
        """
        sites: Dict[str, _Site] = {}

        def visit(node: Node) -> bool:
            if self.adapter.is_call(node):
                callee = self.adapter.callee_of(node, self.source)
                if callee is not None and callee[0]:
                    name, qualifier = callee
                    if not self._skip_call(name, qualifier):
                        key = self.adapter.join_qualified(qualifier, name)
                        self._record(sites, key, node, self.adapter.is_conditional(node))
            return True

        walk(body, visit)
        return [
            self._dependency(entity, key, site.node, DependencyKind.CALLS, site.conditional)
            for key, site in sites.items()
        ]

    def extract_constructions(self, entity: CallGraphEntity, body: Node) -> List[Dependency]:
        """Calls edges to the constructors of instantiated non-builtin types."""
        sites: Dict[str, _Site] = {}

        def visit(node: Node) -> bool:
            if self.adapter.is_construction(node):
                type_name = self.adapter.type_of_construction(node, self.source)
                if type_name and not self._is_builtin_type_name(type_name):
                    self._record(sites, type_name, node, self.adapter.is_conditional(node))
            return True

        walk(body, visit)
        return [
            self._dependency(entity, type_name, site.node, DependencyKind.CALLS, site.conditional)
            for type_name, site in sites.items()
        ]

    def extract_decorators(self, entity: CallGraphEntity, existing: List[Dependency]) -> List[Dependency]:
        """Decorators are unconditional calls made at definition time."""
        seen = {dep.target for dep in existing if dep.kind == DependencyKind.CALLS}
        deps = []
        for name, node in self.adapter.decorators_of(entity.node, self.source):
            qualifier, last = self.adapter.split_qualified(name)
            if name in seen or self._skip_call(last, qualifier):
                continue
            seen.add(name)
            deps.append(self._dependency(entity, name, node, DependencyKind.CALLS))
        return deps

    def extract_type_references(self, entity: CallGraphEntity, prune: bool = False) -> List[Dependency]:
        """
        UsesType edges for every non-builtin type named in the entity.

        Args:
            entity: Entity whose whole node is scanned
            prune: Skip nested declarations and base clauses (type-like
                entities only)
        """
        root = entity.node
        # Type variables are never recorded
        seen = set(self.adapter.type_parameters_in_scope(root, self.source))
        deps: List[Dependency] = []

        def visit(node: Node) -> bool:
            if prune and node != root and self.adapter.skip_in_type_scan(node):
                return False
            if not self.adapter.is_type_position(node):
                return True

            name = self.adapter.type_name_of(node, self.source)
            if name and name not in seen and not self._is_builtin_type_name(name):
                seen.add(name)
                deps.append(self._dependency(entity, name, node, DependencyKind.USES_TYPE))
            return self.adapter.descends_into(node)

        walk(root, visit)
        return deps

    def extract_owner(self, entity: CallGraphEntity) -> Optional[Dependency]:
        """MethodOf edge to the declaring type; None for free functions."""
        owner = self.adapter.owner_of(entity.node, self.source)
        if not owner:
            return None
        return self._dependency(entity, owner, None, DependencyKind.METHOD_OF)

    # Types

    def extract_bases(self, entity: CallGraphEntity) -> List[Dependency]:
        """
        Extends/Implements edges from the declared supertypes.

        Interface-like kinds extend every entry. Other kinds extend their
        superclasses (the single Java superclass, every Python base, every Go
        embedded type) and implement their interfaces.
        """
        bases = self.adapter.base_list_of(entity.node, self.source)
        interface_like = self.adapter.is_interface_like(entity.kind)

        deps = []
        for entries, kind in ((bases.superclasses, DependencyKind.EXTENDS),
                              (bases.interfaces, DependencyKind.IMPLEMENTS)):
            if interface_like:
                kind = DependencyKind.EXTENDS
            for name, node in entries:
                if not name or self._is_builtin_type_name(name):
                    continue
                deps.append(self._dependency(entity, name, node, kind))
        return deps
