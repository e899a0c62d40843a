"""
Java-specific parser for extracting code information.
"""
from typing import List, Optional

import tree_sitter_java
from tree_sitter import Node

from codemodel.core import EntityKind, EnumValue, Field, Param, TypeKind
from codemodel.core.walker import child_of_type
from codemodel.languages import JavaAdapter
from .base_parser import BaseParser, ParsedEntity, ParseResult

TYPE_KINDS = {
    "class_declaration": TypeKind.CLASS,
    "interface_declaration": TypeKind.INTERFACE,
    "record_declaration": TypeKind.RECORD,
}

CALLABLE_DECLARATIONS = ("method_declaration", "constructor_declaration", "compact_constructor_declaration")


class JavaParser(BaseParser):
    """
    Parser for Java source code.
    """

    grammar_module = tree_sitter_java
    adapter_class = JavaAdapter
    file_extensions = [".java"]

    def __init__(self, adapter: JavaAdapter = None):
        """Initialize the Java parser."""
        super().__init__("java", "1.8+", adapter)

    def extract_entities(self, result: ParseResult) -> List[ParsedEntity]:
        """
        Extract imports, types, methods and constants from a Java file.

        Args:
            result: Parsed Java unit

        Returns:
            Extracted entities in source order
        """
        root = result.root
        source = result.source
        entities: List[ParsedEntity] = []

        package = self._extract_package(root, source)
        entities.extend(self._extract_imports(root, result))

        for decl in self._find_nodes(root, ("class_declaration", "interface_declaration",
                                            "enum_declaration", "record_declaration")):
            entities.extend(self._process_type_declaration(decl, package, result))

        entities.sort(key=lambda parsed: (parsed.entity.start_line, parsed.node.start_byte))
        self.logger.debug(f"Extracted {len(entities)} entities from {result.file_path}")
        return self.unique_ids(entities)

    def _extract_package(self, root: Node, source: bytes) -> str:
        """Extract package declaration from file."""
        package_declaration = child_of_type(root, "package_declaration")
        name_node = child_of_type(package_declaration, "scoped_identifier", "identifier")
        return self._get_node_text(name_node, source)

    def _extract_imports(self, root: Node, result: ParseResult) -> List[ParsedEntity]:
        """Extract import statements from file."""
        imports = []
        for import_decl in self._find_nodes(root, "import_declaration", prune=("class_body",)):
            name_node = child_of_type(import_decl, "scoped_identifier", "identifier")
            if name_node is None:
                continue

            path = self._get_node_text(name_node, result.source)
            name = path.split(".")[-1]
            if child_of_type(import_decl, "asterisk") is not None:
                path = f"{path}.*"
                name = "*"

            entity = self.make_entity(EntityKind.IMPORT, name, import_decl, result,
                                      qualified_name=path, import_path=path)
            imports.append(ParsedEntity(entity, import_decl, None))
        return imports

    def _visibility(self, node: Node, source: bytes) -> str:
        """Access modifier of a declaration ("package" when none is written)."""
        modifiers = child_of_type(node, "modifiers")
        words = self._get_node_text(modifiers, source).split()
        for access in ("public", "protected", "private"):
            if access in words:
                return access
        return "package"

    def _modifiers(self, node: Node, source: bytes) -> List[str]:
        return self._get_node_text(child_of_type(node, "modifiers"), source).split()

    def _enclosing_type_names(self, node: Node, source: bytes) -> List[str]:
        names = []
        parent = node.parent
        while parent is not None:
            if parent.type in TYPE_KINDS or parent.type == "enum_declaration":
                names.append(self._field_text(parent, "name", source))
            parent = parent.parent
        return list(reversed(names))

    def _process_type_declaration(self, node: Node, package: str, result: ParseResult) -> List[ParsedEntity]:
        """Process a class, interface, record or enum declaration and its members."""
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return []

        scope = [package] if package else []
        qualified_name = ".".join(scope + self._enclosing_type_names(node, source) + [name])
        body = node.child_by_field_name("body")

        payload = dict(
            qualified_name=qualified_name,
            visibility=self._visibility(node, source),
            fields=self._extract_fields(node, body, source),
        )

        parsed: List[ParsedEntity] = []
        if node.type == "enum_declaration":
            payload["enum_values"] = self._extract_enum_constants(body, source)
            entity = self.make_entity(EntityKind.ENUM, name, node, result, **payload)
            parsed.append(ParsedEntity(entity, node, body))
        else:
            entity = self.make_entity(EntityKind.TYPE, name, node, result,
                                      type_kind=TYPE_KINDS[node.type], **payload)
            parsed.append(ParsedEntity(entity, node, None))

        member_parent = body
        if node.type == "enum_declaration":
            member_parent = child_of_type(body, "enum_body_declarations")
        if member_parent is None:
            return parsed

        for member in member_parent.named_children:
            if member.type in CALLABLE_DECLARATIONS:
                method = self._process_method(member, name, result)
                if method is not None:
                    parsed.append(method)
            elif member.type in ("field_declaration", "constant_declaration"):
                parsed.extend(self._process_constant(member, name, result))
        return parsed

    def _extract_fields(self, node: Node, body: Optional[Node], source: bytes) -> List[Field]:
        fields = []
        # Record components are declared in the header
        if node.type == "record_declaration":
            for param in self._parameters(node.child_by_field_name("parameters"), source):
                fields.append(Field(name=param.name, type=param.type))

        members = body
        if node.type == "enum_declaration":
            members = child_of_type(body, "enum_body_declarations")
        if members is None:
            return fields

        for member in members.named_children:
            if member.type != "field_declaration":
                continue
            field_type = self._field_text(member, "type", source)
            for declarator in member.children_by_field_name("declarator"):
                fields.append(Field(name=self._field_text(declarator, "name", source), type=field_type))
        return fields

    def _extract_enum_constants(self, body: Optional[Node], source: bytes) -> List[EnumValue]:
        values = []
        if body is None:
            return values
        for constant in body.named_children:
            if constant.type == "enum_constant":
                values.append(EnumValue(
                    name=self._field_text(constant, "name", source),
                    value=self._field_text(constant, "arguments", source),
                ))
        return values

    def _parameters(self, params_node: Optional[Node], source: bytes) -> List[Param]:
        params = []
        if params_node is None:
            return params
        for param in params_node.named_children:
            if param.type == "formal_parameter":
                params.append(Param(
                    name=self._field_text(param, "name", source),
                    type=self._field_text(param, "type", source),
                ))
            elif param.type == "spread_parameter":
                # Type ... name
                type_node = next((c for c in param.named_children
                                  if c.type not in ("modifiers", "variable_declarator")), None)
                declarator = child_of_type(param, "variable_declarator")
                params.append(Param(
                    name=self._field_text(declarator, "name", source) if declarator is not None else "",
                    type=f"{self._get_node_text(type_node, source)}...",
                ))
        return params

    def _process_method(self, node: Node, owner: str, result: ParseResult) -> Optional[ParsedEntity]:
        """Process a method or constructor declaration."""
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return None

        return_type = self._field_text(node, "type", source)
        entity = self.make_entity(
            EntityKind.METHOD, name, node, result,
            qualified_name=f"{owner}.{name}",
            params=self._parameters(node.child_by_field_name("parameters"), source),
            returns=[return_type] if return_type and return_type != "void" else [],
            receiver=owner,
            visibility=self._visibility(node, source),
        )
        return ParsedEntity(entity, node, self.adapter.body_of(node))

    def _process_constant(self, node: Node, owner: str, result: ParseResult) -> List[ParsedEntity]:
        """Static final fields and interface constants become constants."""
        source = result.source
        modifiers = self._modifiers(node, source)
        if node.type == "field_declaration" and not ("static" in modifiers and "final" in modifiers):
            return []

        constants = []
        value_type = self._field_text(node, "type", source)
        for declarator in node.children_by_field_name("declarator"):
            name = self._field_text(declarator, "name", source)
            if not name:
                continue
            value = declarator.child_by_field_name("value")
            entity = self.make_entity(
                EntityKind.CONSTANT, name, declarator, result,
                qualified_name=f"{owner}.{name}",
                value_type=value_type,
                value=self._get_node_text(value, source) or None,
                visibility=self._visibility(node, source),
            )
            constants.append(ParsedEntity(entity, declarator, value))
        return constants
