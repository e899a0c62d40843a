"""
Go syntax adapter.
"""
from typing import Optional

from tree_sitter import Node

from codemodel.core.walker import node_text
from .base import BaseList, Callee, LanguageAdapter

NAMED_TYPE_KINDS = frozenset({"type_identifier", "qualified_type", "generic_type"})

_RECEIVER_KINDS = frozenset({"identifier", "selector_expression"})


class GoAdapter(LanguageAdapter):
    """Adapter for the tree-sitter-go grammar."""

    name = "go"
    scope_separator = "."

    call_kinds = frozenset({"call_expression"})
    construction_kinds = frozenset({"composite_literal"})
    branch_kinds = frozenset({
        "if_statement",
        "expression_switch_statement",
        "type_switch_statement",
        "select_statement",
        "expression_case",
        "type_case",
        "communication_case",
        "default_case",
    })
    boundary_kinds = frozenset({"function_declaration", "method_declaration", "func_literal"})
    generic_type_kinds = frozenset({"generic_type"})
    qualified_type_kinds = frozenset({"qualified_type"})
    type_scan_prune_kinds = frozenset({"type_elem", "constraint_elem", "func_literal"})

    BUILTIN_TYPES = frozenset({
        "string", "int", "int8", "int16", "int32", "int64",
        "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
        "float32", "float64", "complex64", "complex128",
        "bool", "byte", "rune", "error", "any", "interface{}", "comparable",
    })

    BUILTIN_FUNCTIONS = frozenset({
        "append", "cap", "clear", "close", "complex", "copy", "delete", "imag", "len",
        "make", "max", "min", "new", "panic", "print", "println", "real", "recover",
    })

    def callee_of(self, node: Node, source: bytes) -> Optional[Callee]:
        function = node.child_by_field_name("function")
        if function is None:
            return None

        if function.type == "identifier":
            return node_text(function, source), None

        if function.type == "selector_expression":
            name = node_text(function.child_by_field_name("field"), source)
            if not name:
                return None
            operand = function.child_by_field_name("operand")
            if operand is None or operand.type not in _RECEIVER_KINDS:
                return name, None
            return name, node_text(operand, source)

        # (fn)(), funcs[i]() and the like
        return None

    def _named_type(self, node: Optional[Node], source: bytes) -> str:
        """Name of a type node with pointers and parentheses removed."""
        while node is not None and node.type in ("pointer_type", "parenthesized_type"):
            node = node.named_children[0] if node.named_children else None
        if node is None or node.type not in NAMED_TYPE_KINDS:
            return ""
        return self.type_name_of(node, source)

    def type_of_construction(self, node: Node, source: bytes) -> Optional[str]:
        return self._named_type(node.child_by_field_name("type"), source) or None

    def is_type_position(self, node: Node) -> bool:
        if node.type in self.generic_type_kinds or node.type in self.qualified_type_kinds:
            return True
        if node.type != "type_identifier":
            return False
        parent = node.parent
        return parent is not None and parent.child_by_field_name("name") != node

    def skip_in_type_scan(self, node: Node) -> bool:
        # Embedded fields are base entries, not member annotations
        if node.type == "field_declaration":
            return node.child_by_field_name("name") is None
        return super().skip_in_type_scan(node)

    def base_list_of(self, node: Node, source: bytes) -> BaseList:
        bases = BaseList.empty()
        type_node = node.child_by_field_name("type")
        if type_node is None:
            return bases

        if type_node.type == "struct_type":
            for field_list in type_node.named_children:
                if field_list.type != "field_declaration_list":
                    continue
                for field in field_list.named_children:
                    if field.type != "field_declaration" or field.child_by_field_name("name") is not None:
                        continue
                    embedded = field.child_by_field_name("type")
                    name = self._named_type(embedded, source)
                    if name:
                        bases.superclasses.append((name, embedded))

        elif type_node.type == "interface_type":
            for child in type_node.named_children:
                elements = child.named_children if child.type in ("type_elem", "constraint_elem") else [child]
                for element in elements:
                    if element.type in NAMED_TYPE_KINDS:
                        bases.interfaces.append((self.type_name_of(element, source), element))

        return bases

    def owner_of(self, node: Node, source: bytes) -> Optional[str]:
        receiver = node.child_by_field_name("receiver")
        if receiver is None:
            return None
        for param in receiver.named_children:
            if param.type == "parameter_declaration":
                return self._named_type(param.child_by_field_name("type"), source) or None
        return None
