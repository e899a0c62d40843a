"""
Rust-specific parser for extracting code information.
"""
from typing import List, Optional, Tuple

import tree_sitter_rust
from tree_sitter import Node

from codemodel.core import EntityKind, EnumValue, Field, Param, TypeKind
from codemodel.core.walker import child_of_type
from codemodel.languages import RustAdapter
from .base_parser import BaseParser, ParsedEntity, ParseResult

TYPE_ITEMS = {
    "struct_item": TypeKind.STRUCT,
    "union_item": TypeKind.UNION,
    "trait_item": TypeKind.TRAIT,
    "type_item": TypeKind.ALIAS,
}

_PATH_KINDS = ("identifier", "scoped_identifier", "crate", "self", "super", "metavariable")


def _join_path(prefix: str, path: str) -> str:
    if not prefix:
        return path
    if not path:
        return prefix
    return f"{prefix}::{path}"


class RustParser(BaseParser):
    """
    Parser for Rust source code.
    """

    grammar_module = tree_sitter_rust
    adapter_class = RustAdapter
    file_extensions = [".rs"]

    def __init__(self, adapter: RustAdapter = None):
        """Initialize the Rust parser."""
        super().__init__("rust", "2021", adapter)

    def extract_entities(self, result: ParseResult) -> List[ParsedEntity]:
        entities: List[ParsedEntity] = []
        self._process_items(result.root, result, None, entities)
        self.logger.debug(f"Extracted {len(entities)} entities from {result.file_path}")
        return self.unique_ids(entities)

    def _visibility(self, node: Node, source: bytes) -> str:
        modifier = child_of_type(node, "visibility_modifier")
        return self._get_node_text(modifier, source) or "private"

    def _process_items(self, container: Optional[Node], result: ParseResult, owner: Optional[str],
                       entities: List[ParsedEntity]) -> None:
        """Extract the items declared directly in ``container``."""
        if container is None:
            return
        source = result.source

        for node in container.named_children:
            if node.type in ("function_item", "function_signature_item"):
                parsed = self._process_function(node, result, owner)
                if parsed is not None:
                    entities.append(parsed)

            elif node.type == "impl_item":
                implemented = node.child_by_field_name("type")
                impl_owner = None
                if implemented is not None:
                    impl_owner = self.adapter.type_name_of(implemented, source).split("<", 1)[0]
                self._process_items(node.child_by_field_name("body"), result, impl_owner, entities)

            elif node.type in TYPE_ITEMS or node.type == "enum_item":
                parsed = self._process_type(node, result)
                if parsed is None:
                    continue
                entities.append(parsed)
                if node.type == "trait_item":
                    self._process_items(node.child_by_field_name("body"), result, parsed.entity.name, entities)

            elif node.type in ("const_item", "static_item"):
                parsed = self._process_constant(node, result, owner)
                if parsed is not None:
                    entities.append(parsed)

            elif node.type == "use_declaration":
                entities.extend(self._process_use(node, result))

            elif node.type == "mod_item":
                self._process_items(node.child_by_field_name("body"), result, None, entities)

    def _parameters(self, params_node: Optional[Node], source: bytes) -> List[Param]:
        params = []
        if params_node is None:
            return params
        for param in params_node.named_children:
            if param.type == "self_parameter":
                # &self vs &mut self is part of the contract
                params.append(Param(name="self", type=self._get_node_text(param, source)))
            elif param.type == "parameter":
                params.append(Param(
                    name=self._field_text(param, "pattern", source),
                    type=self._field_text(param, "type", source),
                ))
        return params

    def _process_function(self, node: Node, result: ParseResult, owner: Optional[str]) -> Optional[ParsedEntity]:
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return None

        return_type = self._field_text(node, "return_type", source)
        payload = dict(
            params=self._parameters(node.child_by_field_name("parameters"), source),
            returns=[return_type] if return_type else [],
            visibility=self._visibility(node, source),
        )
        if owner:
            entity = self.make_entity(EntityKind.METHOD, name, node, result,
                                      qualified_name=f"{owner}::{name}", receiver=owner, **payload)
        else:
            entity = self.make_entity(EntityKind.FUNCTION, name, node, result, qualified_name=name, **payload)
        return ParsedEntity(entity, node, self.adapter.body_of(node))

    def _struct_fields(self, body: Optional[Node], source: bytes) -> List[Field]:
        fields = []
        if body is None:
            return fields
        if body.type == "field_declaration_list":
            for field in body.named_children:
                if field.type == "field_declaration":
                    fields.append(Field(
                        name=self._field_text(field, "name", source),
                        type=self._field_text(field, "type", source),
                    ))
        elif body.type == "ordered_field_declaration_list":
            # Tuple structs: fields are named by position
            for index, type_node in enumerate(body.children_by_field_name("type")):
                fields.append(Field(name=str(index), type=self._get_node_text(type_node, source)))
        return fields

    def _process_type(self, node: Node, result: ParseResult) -> Optional[ParsedEntity]:
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return None

        body = node.child_by_field_name("body")
        payload = dict(qualified_name=name, visibility=self._visibility(node, source))

        if node.type == "enum_item":
            values = []
            for variant in (body.named_children if body is not None else []):
                if variant.type == "enum_variant":
                    value = variant.child_by_field_name("value")
                    if value is None:
                        value = variant.child_by_field_name("body")
                    values.append(EnumValue(
                        name=self._field_text(variant, "name", source),
                        value=self._get_node_text(value, source),
                    ))
            entity = self.make_entity(EntityKind.ENUM, name, node, result, enum_values=values, **payload)
            return ParsedEntity(entity, node, body)

        value_type = None
        if node.type == "type_item":
            value_type = self._field_text(node, "type", source) or None
        entity = self.make_entity(
            EntityKind.TYPE, name, node, result,
            type_kind=TYPE_ITEMS[node.type],
            fields=self._struct_fields(body, source) if node.type in ("struct_item", "union_item") else [],
            value_type=value_type,
            **payload,
        )
        return ParsedEntity(entity, node, None)

    def _process_constant(self, node: Node, result: ParseResult, owner: Optional[str]) -> Optional[ParsedEntity]:
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return None

        value = node.child_by_field_name("value")
        kind = EntityKind.CONSTANT if node.type == "const_item" else EntityKind.VARIABLE
        entity = self.make_entity(
            kind, name, node, result,
            qualified_name=f"{owner}::{name}" if owner else name,
            value_type=self._field_text(node, "type", source) or None,
            value=self._get_node_text(value, source) or None,
            visibility=self._visibility(node, source),
        )
        return ParsedEntity(entity, node, value)

    def _use_paths(self, node: Optional[Node], prefix: str, source: bytes) -> List[Tuple[str, Optional[str]]]:
        """Flatten a use tree into (path, alias) pairs."""
        if node is None:
            return []

        if node.type in _PATH_KINDS or node.type == "use_wildcard":
            return [(_join_path(prefix, self._get_node_text(node, source)), None)]

        if node.type == "use_as_clause":
            path = _join_path(prefix, self._field_text(node, "path", source))
            return [(path, self._field_text(node, "alias", source) or None)]

        if node.type == "scoped_use_list":
            prefix = _join_path(prefix, self._field_text(node, "path", source))
            return self._use_paths(node.child_by_field_name("list"), prefix, source)

        if node.type == "use_list":
            paths = []
            for child in node.named_children:
                paths.extend(self._use_paths(child, prefix, source))
            return paths

        return []

    def _process_use(self, node: Node, result: ParseResult) -> List[ParsedEntity]:
        imports = []
        for path, alias in self._use_paths(node.child_by_field_name("argument"), "", result.source):
            name = alias or path.split("::")[-1]
            entity = self.make_entity(
                EntityKind.IMPORT, name, node, result,
                qualified_name=path,
                import_path=path,
                import_alias=alias,
                visibility=self._visibility(node, result.source),
            )
            imports.append(ParsedEntity(entity, node, None))
        return imports
