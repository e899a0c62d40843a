"""
Base class for per-language syntax adapters.
"""
import logging
from abc import ABC, abstractmethod
from typing import FrozenSet, Iterable, List, NamedTuple, Optional, Tuple

from tree_sitter import Node

from codemodel.core.walker import ancestors, child_of_type, node_text

# (name, qualifier) of a call site; qualifier is None for bare calls
Callee = Tuple[str, Optional[str]]

# (name as written, node it was read from)
NamedRef = Tuple[str, Node]


class BaseList(NamedTuple):
    """Supertypes of a type declaration, in declaration order."""

    superclasses: List[NamedRef]
    interfaces: List[NamedRef]

    @classmethod
    def empty(cls) -> "BaseList":
        return cls([], [])


class LanguageAdapter(ABC):
    """
    Answers the syntactic questions the shared extraction algorithms ask.

    Subclasses mostly fill in the node-kind tables below; methods are only
    overridden where a grammar needs more than a kind lookup.

    Args:
        extra_builtins: Names added to both builtin tables
        removed_builtins: Names taken out of both builtin tables
    """

    name: str = ""
    scope_separator: str = "."

    call_kinds: FrozenSet[str] = frozenset()
    construction_kinds: FrozenSet[str] = frozenset()
    branch_kinds: FrozenSet[str] = frozenset()
    boundary_kinds: FrozenSet[str] = frozenset()
    generic_type_kinds: FrozenSet[str] = frozenset()
    qualified_type_kinds: FrozenSet[str] = frozenset()
    type_scan_prune_kinds: FrozenSet[str] = frozenset()
    type_parameter_kinds: FrozenSet[str] = frozenset()
    interface_like_kinds: FrozenSet[str] = frozenset({"interface", "trait"})

    BUILTIN_TYPES: FrozenSet[str] = frozenset()
    BUILTIN_FUNCTIONS: FrozenSet[str] = frozenset()

    def __init__(self, extra_builtins: Iterable[str] = (), removed_builtins: Iterable[str] = ()):
        extra = frozenset(extra_builtins)
        removed = frozenset(removed_builtins)
        self.builtin_types = (self.BUILTIN_TYPES | extra) - removed
        self.builtin_functions = (self.BUILTIN_FUNCTIONS | extra) - removed
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    # Calls and constructions

    def is_call(self, node: Node) -> bool:
        return node.type in self.call_kinds

    @abstractmethod
    def callee_of(self, node: Node, source: bytes) -> Optional[Callee]:
        """
        Extract the (name, qualifier) of a call node.

        Args:
            node: A node for which :meth:`is_call` is true
            source: Source bytes of the tree

        Returns:
            The callee, or None when the target is not a plain name
            (e.g. ``funcs[0]()``)
        """

    def is_construction(self, node: Node) -> bool:
        return node.type in self.construction_kinds

    def type_of_construction(self, node: Node, source: bytes) -> Optional[str]:
        """Name of the type instantiated by a construction node."""
        return None

    # Type references

    @abstractmethod
    def is_type_position(self, node: Node) -> bool:
        """True if ``node`` names a type in a syntactic type context."""

    def type_name_of(self, node: Node, source: bytes) -> str:
        """
        Name contributed by a type-position node.

        Generic instantiations contribute only their outer name; qualified
        names are returned whole.
        """
        if node.type in self.generic_type_kinds:
            outer = node.child_by_field_name("type")
            if outer is None and node.named_children:
                outer = node.named_children[0]
            return node_text(outer, source)
        return node_text(node, source)

    def type_parameters_in_scope(self, node: Optional[Node], source: bytes) -> FrozenSet[str]:
        """
        Type variables declared on ``node`` or an enclosing declaration.

        Uses of these names are not references to declared types.

        Args:
            node: Entity node whose scope is inspected
            source: Source of the unit

        Returns:
            Declared type variable names; empty for adapters without
            ``type_parameter_kinds``
        """
        if node is None or not self.type_parameter_kinds:
            return frozenset()

        names = set()
        for scope in [node, *ancestors(node)]:
            params = scope.child_by_field_name("type_parameters")
            if params is None:
                params = child_of_type(scope, "type_parameters")
            if params is None:
                continue
            for param in params.named_children:
                if param.type not in self.type_parameter_kinds:
                    continue
                name_node = param.child_by_field_name("name")
                if name_node is None:
                    name_node = child_of_type(param, "type_identifier", "identifier")
                name = node_text(name_node, source)
                if name:
                    names.add(name)
        return frozenset(names)

    def is_qualified_type(self, node: Node) -> bool:
        return node.type in self.qualified_type_kinds

    def descends_into(self, node: Node) -> bool:
        """After a type hit, only generic instantiations are searched further."""
        return node.type in self.generic_type_kinds

    def skip_in_type_scan(self, node: Node) -> bool:
        """True for nested declarations and base clauses inside a type body."""
        return node.type in self.type_scan_prune_kinds

    # Builtins

    def is_builtin(self, name: str) -> bool:
        return name in self.builtin_functions or name in self.builtin_types

    def is_builtin_type(self, name: str) -> bool:
        return name in self.builtin_types

    # Declarations

    def base_list_of(self, node: Node, source: bytes) -> BaseList:
        """Supertypes of a type declaration; empty when it declares none."""
        return BaseList.empty()

    def decorators_of(self, node: Node, source: bytes) -> List[NamedRef]:
        """Names invoked as decorators/annotations on a declaration."""
        return []

    def body_of(self, node: Optional[Node]) -> Optional[Node]:
        """Executable body of a callable, or None when it has none."""
        if node is None:
            return None
        return node.child_by_field_name("body")

    @abstractmethod
    def owner_of(self, node: Node, source: bytes) -> Optional[str]:
        """Name of the type a callable is declared on, or None for free functions."""

    # Control flow

    def is_branch(self, node: Node) -> bool:
        return node.type in self.branch_kinds

    def is_callable_boundary(self, node: Node) -> bool:
        return node.type in self.boundary_kinds

    def is_conditional(self, node: Node) -> bool:
        """
        True if a branching construct encloses ``node`` inside its callable.

        Walks strictly upward; reaching a callable boundary first means the
        node runs unconditionally.
        """
        for parent in ancestors(node):
            if self.is_branch(parent):
                return True
            if self.is_callable_boundary(parent):
                return False
        return False

    # Names

    def split_qualified(self, name: str) -> Tuple[Optional[str], str]:
        """Split ``a<sep>b<sep>c`` into (``a<sep>b``, ``c``)."""
        qualifier, sep, last = name.rpartition(self.scope_separator)
        if not sep:
            return None, name
        return qualifier or None, last

    def join_qualified(self, qualifier: Optional[str], name: str) -> str:
        if not qualifier:
            return name
        return f"{qualifier}{self.scope_separator}{name}"

    def is_interface_like(self, kind: str) -> bool:
        return kind in self.interface_like_kinds

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
