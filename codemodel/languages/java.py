"""
Java syntax adapter.
"""
from typing import Optional

from tree_sitter import Node

from codemodel.core.walker import ancestors, child_of_type, node_text
from .base import BaseList, Callee, LanguageAdapter

TYPE_DECLARATIONS = frozenset({
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
})

# Parents under which a bare type_identifier names a type
TYPE_CONTEXTS = frozenset({
    "formal_parameter",
    "spread_parameter",
    "local_variable_declaration",
    "field_declaration",
    "method_declaration",
    "constructor_declaration",
    "cast_expression",
    "instanceof_expression",
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
    "superclass",
    "super_interfaces",
    "extends_interfaces",
    "type_arguments",
    "array_type",
    "throws",
    "annotation",
    "generic_type",
})

_RECEIVER_KINDS = frozenset({"identifier", "field_access", "super"})


class JavaAdapter(LanguageAdapter):
    """Adapter for the tree-sitter-java grammar."""

    name = "java"
    scope_separator = "."

    call_kinds = frozenset({"method_invocation"})
    construction_kinds = frozenset({"object_creation_expression"})
    branch_kinds = frozenset({
        "if_statement",
        "switch_expression",
        "switch_block",
        "switch_block_statement_group",
        "switch_rule",
        "ternary_expression",
    })
    boundary_kinds = frozenset({
        "method_declaration",
        "constructor_declaration",
        "compact_constructor_declaration",
        "lambda_expression",
    })
    generic_type_kinds = frozenset({"generic_type"})
    qualified_type_kinds = frozenset({"scoped_type_identifier"})
    type_parameter_kinds = frozenset({"type_parameter"})
    type_scan_prune_kinds = TYPE_DECLARATIONS | {
        "annotation_type_declaration",
        "method_declaration",
        "constructor_declaration",
        "compact_constructor_declaration",
        "superclass",
        "super_interfaces",
        "extends_interfaces",
    }

    BUILTIN_TYPES = frozenset({
        # Primitives
        "int", "long", "double", "float", "boolean", "byte", "short", "char", "void",
        # Wrappers
        "Integer", "Long", "Double", "Float", "Boolean", "Byte", "Short", "Character",
        "Void", "Number",
        # java.lang
        "String", "Object", "Class", "Exception", "RuntimeException", "Throwable", "Error",
        "IllegalArgumentException", "IllegalStateException", "NullPointerException",
        "IndexOutOfBoundsException", "UnsupportedOperationException",
        # Collections
        "List", "Map", "Set", "Collection", "Iterator", "Iterable", "ArrayList", "HashMap",
        "HashSet", "LinkedList", "TreeMap", "TreeSet", "Queue", "Deque", "LinkedHashMap",
        "LinkedHashSet", "Vector", "Stack", "Properties", "Hashtable", "Collections", "Arrays",
        # Misc
        "System", "Math", "StringBuilder", "StringBuffer", "Optional", "Stream", "Comparable",
        "Comparator", "Runnable", "Callable", "Future", "Thread", "Enum", "Annotation",
        "Objects", "Override", "Deprecated", "SuppressWarnings", "FunctionalInterface",
    })

    def callee_of(self, node: Node, source: bytes) -> Optional[Callee]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        name = node_text(name_node, source)
        if not name:
            return None

        receiver = node.child_by_field_name("object")
        if receiver is None or receiver.type not in _RECEIVER_KINDS:
            return name, None
        return name, node_text(receiver, source)

    def type_of_construction(self, node: Node, source: bytes) -> Optional[str]:
        type_node = node.child_by_field_name("type")
        if type_node is None:
            return None
        return self.type_name_of(type_node, source) or None

    def is_type_position(self, node: Node) -> bool:
        if node.type in self.generic_type_kinds or node.type in self.qualified_type_kinds:
            return True
        if node.type != "type_identifier":
            return False
        parent = node.parent
        return parent is not None and parent.type in TYPE_CONTEXTS

    def base_list_of(self, node: Node, source: bytes) -> BaseList:
        bases = BaseList.empty()

        superclass = node.child_by_field_name("superclass")
        if superclass is None:
            superclass = child_of_type(node, "superclass")
        if superclass is not None and superclass.named_children:
            type_node = superclass.named_children[0]
            bases.superclasses.append((self.type_name_of(type_node, source), type_node))

        clause = node.child_by_field_name("interfaces")
        if clause is None:
            clause = child_of_type(node, "super_interfaces", "extends_interfaces")
        type_list = child_of_type(clause, "type_list")
        if type_list is not None:
            for type_node in type_list.named_children:
                bases.interfaces.append((self.type_name_of(type_node, source), type_node))

        return bases

    def owner_of(self, node: Node, source: bytes) -> Optional[str]:
        for parent in ancestors(node):
            if parent.type in TYPE_DECLARATIONS:
                return node_text(parent.child_by_field_name("name"), source) or None
            # Methods of anonymous classes have no named owner
            if parent.type == "object_creation_expression" or self.is_callable_boundary(parent):
                return None
        return None
