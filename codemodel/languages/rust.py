"""
Rust syntax adapter.
"""
from typing import Optional

from tree_sitter import Node

from codemodel.core.walker import ancestors, find_nodes, node_text
from .base import BaseList, Callee, LanguageAdapter

# Associated functions treated as constructing their path type
CONSTRUCTOR_NAMES = frozenset({"new", "from", "default", "with_capacity"})

_SELF_NAMES = frozenset({"self", "Self"})

_RECEIVER_KINDS = frozenset({"identifier", "self", "field_expression", "scoped_identifier"})

_BOUND_KINDS = frozenset({"type_identifier", "scoped_type_identifier", "generic_type"})


def _strip_generics(name: str) -> str:
    return name.split("<", 1)[0].rstrip(":")


class RustAdapter(LanguageAdapter):
    """Adapter for the tree-sitter-rust grammar."""

    name = "rust"
    scope_separator = "::"

    call_kinds = frozenset({"call_expression", "macro_invocation"})
    construction_kinds = frozenset({"struct_expression", "call_expression"})
    branch_kinds = frozenset({
        "if_expression",
        "if_let_expression",
        "match_expression",
        "match_arm",
    })
    boundary_kinds = frozenset({"function_item", "closure_expression"})
    generic_type_kinds = frozenset({"generic_type"})
    qualified_type_kinds = frozenset({"scoped_type_identifier"})
    type_scan_prune_kinds = frozenset({
        "function_item",
        "function_signature_item",
        "impl_item",
        "trait_item",
        "struct_item",
        "enum_item",
        "mod_item",
    })

    BUILTIN_TYPES = frozenset({
        "String", "str",
        "i8", "i16", "i32", "i64", "i128", "isize",
        "u8", "u16", "u32", "u64", "u128", "usize",
        "f32", "f64", "bool", "char",
        "Vec", "HashMap", "HashSet", "BTreeMap", "BTreeSet", "VecDeque",
        "Option", "Result", "Box", "Rc", "Arc", "RefCell", "Cell", "Mutex", "RwLock",
        "Self",
        # Standard traits
        "Sized", "Copy", "Clone", "Debug", "Display", "Default", "Eq", "PartialEq", "Ord",
        "PartialOrd", "Hash", "Send", "Sync", "Unpin", "Drop", "Fn", "FnMut", "FnOnce",
        "Iterator", "IntoIterator", "FromIterator", "From", "Into", "TryFrom", "TryInto",
        "AsRef", "AsMut", "Borrow", "BorrowMut", "ToOwned", "ToString", "Deref", "DerefMut",
        "Read", "Write", "Seek", "BufRead", "Future", "Stream", "Error",
    })

    BUILTIN_FUNCTIONS = frozenset({
        # Macros
        "println", "eprintln", "print", "eprint", "format", "panic", "assert", "assert_eq",
        "assert_ne", "dbg", "todo", "unimplemented", "unreachable", "vec", "cfg", "env",
        "include", "include_str", "include_bytes", "concat", "stringify", "file", "line",
        "column", "module_path", "write", "writeln", "format_args", "matches",
        "debug_assert", "debug_assert_eq", "debug_assert_ne",
        # Prelude
        "Some", "Ok", "Err", "drop",
    })

    def _callee_from(self, target: Optional[Node], source: bytes) -> Optional[Callee]:
        if target is None:
            return None

        if target.type == "identifier":
            return node_text(target, source), None

        if target.type == "scoped_identifier":
            name = node_text(target.child_by_field_name("name"), source)
            if not name:
                return None
            qualifier = node_text(target.child_by_field_name("path"), source)
            if not qualifier or qualifier in _SELF_NAMES:
                return name, None
            return name, qualifier

        if target.type == "field_expression":
            name = node_text(target.child_by_field_name("field"), source)
            if not name:
                return None
            receiver = target.child_by_field_name("value")
            if receiver is None or receiver.type not in _RECEIVER_KINDS:
                return name, None
            qualifier = node_text(receiver, source)
            return name, (None if qualifier in _SELF_NAMES else qualifier)

        if target.type == "generic_function":
            return self._callee_from(target.child_by_field_name("function"), source)

        return None

    def callee_of(self, node: Node, source: bytes) -> Optional[Callee]:
        if node.type == "macro_invocation":
            return self._callee_from(node.child_by_field_name("macro"), source)
        return self._callee_from(node.child_by_field_name("function"), source)

    def type_of_construction(self, node: Node, source: bytes) -> Optional[str]:
        if node.type == "struct_expression":
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return None
            if name_node.type == "generic_type_with_turbofish":
                name_node = name_node.child_by_field_name("type")
            return _strip_generics(node_text(name_node, source)) or None

        # Type::new(..) and friends
        function = node.child_by_field_name("function")
        if function is None or function.type != "scoped_identifier":
            return None
        if node_text(function.child_by_field_name("name"), source) not in CONSTRUCTOR_NAMES:
            return None
        path = _strip_generics(node_text(function.child_by_field_name("path"), source))
        _, last = self.split_qualified(path)
        if not last or not last[0].isupper() or last in _SELF_NAMES:
            return None
        return path

    def is_type_position(self, node: Node) -> bool:
        if node.type in self.generic_type_kinds or node.type in self.qualified_type_kinds:
            return True
        if node.type != "type_identifier":
            return False

        parent = node.parent
        if parent is None or parent.type == "type_parameters":
            return False
        # Declared names and bounded type parameters are not references
        for field in ("name", "left"):
            if parent.child_by_field_name(field) == node:
                return False
        return True

    def skip_in_type_scan(self, node: Node) -> bool:
        if node.type == "trait_bounds":
            parent = node.parent
            return parent is not None and parent.type == "trait_item"
        return super().skip_in_type_scan(node)

    def base_list_of(self, node: Node, source: bytes) -> BaseList:
        bases = BaseList.empty()

        if node.type == "trait_item":
            bounds = node.child_by_field_name("bounds")
            if bounds is not None:
                for child in bounds.named_children:
                    if child.type in _BOUND_KINDS:
                        bases.interfaces.append((self.type_name_of(child, source), child))
            return bases

        name = node_text(node.child_by_field_name("name"), source)
        if not name:
            return bases

        # Trait impls live outside the type; search the rest of the file
        root = node
        while root.parent is not None:
            root = root.parent
        for impl in find_nodes(root, {"impl_item"}, prune={"function_item"}):
            trait = impl.child_by_field_name("trait")
            implemented = impl.child_by_field_name("type")
            if trait is None or implemented is None:
                continue
            _, implemented_name = self.split_qualified(_strip_generics(self.type_name_of(implemented, source)))
            if implemented_name == name:
                bases.interfaces.append((self.type_name_of(trait, source), trait))
        return bases

    def owner_of(self, node: Node, source: bytes) -> Optional[str]:
        for parent in ancestors(node):
            if parent.type == "impl_item":
                implemented = parent.child_by_field_name("type")
                if implemented is None:
                    return None
                return _strip_generics(self.type_name_of(implemented, source)) or None
            if parent.type == "trait_item":
                return node_text(parent.child_by_field_name("name"), source) or None
            if self.is_callable_boundary(parent):
                return None
        return None
