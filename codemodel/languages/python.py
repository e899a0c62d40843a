"""
Python syntax adapter.
"""
from typing import List, Optional

from tree_sitter import Node

from codemodel.core.walker import ancestors, node_text
from .base import BaseList, Callee, LanguageAdapter, NamedRef

TYPE_NAME_KINDS = frozenset({"identifier", "attribute", "generic_type", "subscript"})

# Nodes that may sit between a name and its enclosing ``type`` annotation
_ANNOTATION_PASSTHROUGH = frozenset({
    "subscript",
    "generic_type",
    "type_parameter",
    "attribute",
    "binary_operator",
    "list",
    "tuple",
    "parenthesized_expression",
})


class PythonAdapter(LanguageAdapter):
    """Adapter for the tree-sitter-python grammar."""

    name = "python"
    scope_separator = "."

    call_kinds = frozenset({"call"})
    branch_kinds = frozenset({
        "if_statement",
        "elif_clause",
        "match_statement",
        "case_clause",
        "conditional_expression",
        "try_statement",
        "except_clause",
    })
    boundary_kinds = frozenset({"function_definition", "lambda", "class_definition"})
    generic_type_kinds = frozenset({"generic_type", "subscript"})
    qualified_type_kinds = frozenset({"attribute"})
    type_scan_prune_kinds = frozenset({
        "function_definition",
        "class_definition",
        "decorated_definition",
        "argument_list",
    })

    BUILTIN_TYPES = frozenset({
        "str", "int", "float", "bool", "list", "dict", "set", "frozenset", "tuple",
        "bytes", "bytearray", "complex", "None", "type", "object",
        # typing
        "List", "Dict", "Set", "FrozenSet", "Tuple", "Optional", "Union", "Any", "Callable",
        "Iterable", "Iterator", "Generator", "Sequence", "Mapping", "MutableMapping",
        "Type", "Generic", "TypeVar", "Protocol", "Final", "Literal", "ClassVar", "Annotated",
        # Exceptions
        "Exception", "BaseException", "ValueError", "TypeError", "KeyError", "IndexError",
        "AttributeError", "RuntimeError", "StopIteration", "AssertionError", "ImportError",
        "OSError", "IOError", "FileNotFoundError", "NotImplementedError",
        "True", "False",
    })

    BUILTIN_FUNCTIONS = frozenset({
        "print", "len", "range", "enumerate", "zip", "map", "filter", "open", "input",
        "sorted", "reversed", "abs", "max", "min", "sum", "all", "any", "isinstance",
        "issubclass", "hasattr", "getattr", "setattr", "delattr", "callable", "repr",
        "id", "hash", "iter", "next", "super", "property", "classmethod", "staticmethod",
        "round", "divmod", "pow", "chr", "ord", "format", "vars", "dir",
    })

    def callee_of(self, node: Node, source: bytes) -> Optional[Callee]:
        function = node.child_by_field_name("function")
        if function is None:
            return None

        if function.type == "identifier":
            return node_text(function, source), None

        if function.type == "attribute":
            name = node_text(function.child_by_field_name("attribute"), source)
            if not name:
                return None
            receiver = function.child_by_field_name("object")
            if receiver is not None and receiver.type in ("identifier", "attribute"):
                return name, node_text(receiver, source)
            return name, None

        # Subscripted or chained calls have no static name
        return None

    def is_type_position(self, node: Node) -> bool:
        if node.type not in TYPE_NAME_KINDS:
            return False
        for parent in ancestors(node):
            if parent.type == "type":
                return True
            if parent.type not in _ANNOTATION_PASSTHROUGH:
                return False
        return False

    def type_name_of(self, node: Node, source: bytes) -> str:
        if node.type == "subscript":
            return node_text(node.child_by_field_name("value"), source)
        return super().type_name_of(node, source)

    def _reference_name(self, node: Node, source: bytes) -> str:
        if node.type in ("identifier", "attribute"):
            return node_text(node, source)
        if node.type == "subscript":
            return node_text(node.child_by_field_name("value"), source)
        if node.type == "call":
            return node_text(node.child_by_field_name("function"), source)
        return ""

    def base_list_of(self, node: Node, source: bytes) -> BaseList:
        bases = BaseList.empty()
        arguments = node.child_by_field_name("superclasses")
        if arguments is None:
            return bases

        for child in arguments.named_children:
            # keyword_argument entries (metaclass=...) are not bases
            name = self._reference_name(child, source)
            if name:
                bases.superclasses.append((name, child))
        return bases

    def decorators_of(self, node: Node, source: bytes) -> List[NamedRef]:
        parent = node.parent
        if parent is None or parent.type != "decorated_definition":
            return []

        found = []
        for child in parent.children:
            if child.type != "decorator" or not child.named_children:
                continue
            name = self._reference_name(child.named_children[0], source)
            if name:
                found.append((name, child))
        return found

    def owner_of(self, node: Node, source: bytes) -> Optional[str]:
        for parent in ancestors(node):
            if parent.type == "class_definition":
                return node_text(parent.child_by_field_name("name"), source) or None
            if parent.type in ("function_definition", "lambda"):
                return None
        return None
