"""
Go-specific parser for extracting code information.
"""
from typing import List, Optional

import tree_sitter_go
from tree_sitter import Node

from codemodel.core import EntityKind, Field, Param, TypeKind
from codemodel.core.walker import child_of_type
from codemodel.languages import GoAdapter
from .base_parser import BaseParser, ParsedEntity, ParseResult


class GoParser(BaseParser):
    """
    Parser for Go source code.
    """

    grammar_module = tree_sitter_go
    adapter_class = GoAdapter
    file_extensions = [".go"]

    def __init__(self, adapter: GoAdapter = None):
        """Initialize the Go parser."""
        super().__init__("go", "1.18+", adapter)

    def extract_entities(self, result: ParseResult) -> List[ParsedEntity]:
        """
        Extract imports, functions, methods, types and package-level
        constants and variables from a Go file.

        Args:
            result: Parsed Go unit

        Returns:
            Extracted entities in source order
        """
        entities: List[ParsedEntity] = []
        for node in result.root.named_children:
            if node.type == "import_declaration":
                entities.extend(self._process_imports(node, result))
            elif node.type in ("function_declaration", "method_declaration"):
                parsed = self._process_function(node, result)
                if parsed is not None:
                    entities.append(parsed)
            elif node.type == "type_declaration":
                for spec in node.named_children:
                    if spec.type in ("type_spec", "type_alias"):
                        parsed = self._process_type(spec, result)
                        if parsed is not None:
                            entities.append(parsed)
            elif node.type in ("const_declaration", "var_declaration"):
                entities.extend(self._process_values(node, result))

        self.logger.debug(f"Extracted {len(entities)} entities from {result.file_path}")
        return self.unique_ids(entities)

    def _visibility(self, name: str) -> str:
        return "public" if name[:1].isupper() else "private"

    def _process_imports(self, node: Node, result: ParseResult) -> List[ParsedEntity]:
        source = result.source
        specs = [child for child in node.named_children if child.type == "import_spec"]
        for spec_list in node.named_children:
            if spec_list.type == "import_spec_list":
                specs.extend(child for child in spec_list.named_children if child.type == "import_spec")

        imports = []
        for spec in specs:
            path = self._field_text(spec, "path", source).strip('"`')
            if not path:
                continue
            alias = self._field_text(spec, "name", source) or None
            entity = self.make_entity(
                EntityKind.IMPORT, alias or path.split("/")[-1], spec, result,
                qualified_name=path,
                import_path=path,
                import_alias=alias,
            )
            imports.append(ParsedEntity(entity, spec, None))
        return imports

    def _parameters(self, params_node: Optional[Node], source: bytes) -> List[Param]:
        params = []
        if params_node is None:
            return params
        for decl in params_node.named_children:
            if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            param_type = self._field_text(decl, "type", source)
            if decl.type == "variadic_parameter_declaration":
                param_type = f"...{param_type}"
            names = decl.children_by_field_name("name")
            if not names:
                params.append(Param(type=param_type))
            for name_node in names:
                params.append(Param(name=self._get_node_text(name_node, source), type=param_type))
        return params

    def _results(self, result_node: Optional[Node], source: bytes) -> List[str]:
        if result_node is None:
            return []
        if result_node.type != "parameter_list":
            return [self._get_node_text(result_node, source)]
        return [param.type for param in self._parameters(result_node, source)]

    def _process_function(self, node: Node, result: ParseResult) -> Optional[ParsedEntity]:
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return None

        payload = dict(
            params=self._parameters(node.child_by_field_name("parameters"), source),
            returns=self._results(node.child_by_field_name("result"), source),
            visibility=self._visibility(name),
        )

        if node.type == "method_declaration":
            receiver = node.child_by_field_name("receiver")
            receiver_decl = child_of_type(receiver, "parameter_declaration")
            owner = self.adapter.owner_of(node, source)
            entity = self.make_entity(
                EntityKind.METHOD, name, node, result,
                qualified_name=f"{owner}.{name}" if owner else name,
                # Keeps *T distinct from T
                receiver=self._field_text(receiver_decl, "type", source) if receiver_decl is not None else None,
                **payload,
            )
        else:
            entity = self.make_entity(EntityKind.FUNCTION, name, node, result, qualified_name=name, **payload)
        return ParsedEntity(entity, node, self.adapter.body_of(node))

    def _struct_fields(self, struct: Node, source: bytes) -> List[Field]:
        fields = []
        field_list = child_of_type(struct, "field_declaration_list")
        if field_list is None:
            return fields
        for decl in field_list.named_children:
            if decl.type != "field_declaration":
                continue
            type_text = self._field_text(decl, "type", source)
            names = decl.children_by_field_name("name")
            if not names:
                # Embedded field: named after its type
                fields.append(Field(name=type_text.lstrip("*").split(".")[-1], type=type_text))
            for name_node in names:
                fields.append(Field(name=self._get_node_text(name_node, source), type=type_text))
        return fields

    def _interface_methods(self, interface: Node, source: bytes) -> List[Field]:
        methods = []
        for elem in interface.named_children:
            if elem.type in ("method_elem", "method_spec"):
                signature = self._field_text(elem, "parameters", source)
                result_text = self._field_text(elem, "result", source)
                methods.append(Field(
                    name=self._field_text(elem, "name", source),
                    type=f"{signature} {result_text}".strip(),
                ))
        return methods

    def _process_type(self, spec: Node, result: ParseResult) -> Optional[ParsedEntity]:
        source = result.source
        name = self._field_text(spec, "name", source)
        type_node = spec.child_by_field_name("type")
        if not name or type_node is None:
            return None

        if type_node.type == "struct_type":
            type_kind, fields, value_type = TypeKind.STRUCT, self._struct_fields(type_node, source), None
        elif type_node.type == "interface_type":
            type_kind, fields, value_type = TypeKind.INTERFACE, self._interface_methods(type_node, source), None
        else:
            # Aliases and defined types such as "type Celsius float64"
            type_kind, fields, value_type = TypeKind.ALIAS, [], self._get_node_text(type_node, source)

        entity = self.make_entity(
            EntityKind.TYPE, name, spec, result,
            qualified_name=name,
            type_kind=type_kind,
            fields=fields,
            value_type=value_type,
            visibility=self._visibility(name),
        )
        return ParsedEntity(entity, spec, None)

    def _process_values(self, node: Node, result: ParseResult) -> List[ParsedEntity]:
        """Extract const and var specs, one entity per declared name."""
        source = result.source
        kind = EntityKind.CONSTANT if node.type == "const_declaration" else EntityKind.VARIABLE

        specs = []
        for child in node.named_children:
            if child.type in ("const_spec", "var_spec"):
                specs.append(child)
            elif child.type == "var_spec_list":
                specs.extend(c for c in child.named_children if c.type == "var_spec")

        parsed = []
        for spec in specs:
            value_list = spec.child_by_field_name("value")
            values = value_list.named_children if value_list is not None else []
            value_type = self._field_text(spec, "type", source) or None
            for index, name_node in enumerate(spec.children_by_field_name("name")):
                name = self._get_node_text(name_node, source)
                if not name or name == "_":
                    continue
                value = values[index] if index < len(values) else None
                entity = self.make_entity(
                    kind, name, name_node, result,
                    qualified_name=name,
                    value_type=value_type,
                    value=self._get_node_text(value, source) or None,
                    visibility=self._visibility(name),
                )
                parsed.append(ParsedEntity(entity, spec, value))
        return parsed
