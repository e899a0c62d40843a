"""
Python-specific parser for extracting code information.
"""
from typing import List, Optional

import tree_sitter_python
from tree_sitter import Node

from codemodel.core import EntityKind, EnumValue, Field, Param, TypeKind
from codemodel.languages import PythonAdapter
from .base_parser import BaseParser, ParsedEntity, ParseResult

ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}


class PythonParser(BaseParser):
    """
    Parser for Python source code.
    """

    grammar_module = tree_sitter_python
    adapter_class = PythonAdapter
    file_extensions = [".py"]

    def __init__(self, adapter: PythonAdapter = None):
        """Initialize the Python parser."""
        super().__init__("python", "3.x", adapter)

    def extract_entities(self, result: ParseResult) -> List[ParsedEntity]:
        """
        Extract imports, classes, functions and module-level assignments.

        Functions nested inside other functions are not extracted; their calls
        belong to the enclosing function.

        Args:
            result: Parsed Python unit

        Returns:
            Extracted entities in source order
        """
        entities: List[ParsedEntity] = []
        self._process_block(result.root, result, [], entities)
        self.logger.debug(f"Extracted {len(entities)} entities from {result.file_path}")
        return self.unique_ids(entities)

    def _process_block(self, block: Node, result: ParseResult, class_stack: List[str],
                       entities: List[ParsedEntity]) -> None:
        at_module_level = not class_stack
        for child in block.named_children:
            node = child
            if node.type == "decorated_definition":
                node = node.child_by_field_name("definition")
                if node is None:
                    continue

            if node.type == "class_definition":
                parsed = self._process_class(node, result, class_stack)
                if parsed is None:
                    continue
                entities.append(parsed)
                body = node.child_by_field_name("body")
                if body is not None:
                    self._process_block(body, result, class_stack + [parsed.entity.name], entities)

            elif node.type == "function_definition":
                parsed = self._process_function(node, result, class_stack)
                if parsed is not None:
                    entities.append(parsed)

            elif at_module_level and node.type in ("import_statement", "import_from_statement"):
                entities.extend(self._process_import(node, result))

            elif at_module_level and node.type == "expression_statement":
                parsed = self._process_assignment(node, result)
                if parsed is not None:
                    entities.append(parsed)

    def _visibility(self, name: str) -> str:
        if name.startswith("_") and not (name.startswith("__") and name.endswith("__")):
            return "private"
        return "public"

    def _assignment_of(self, statement: Node) -> Optional[Node]:
        """The single ``name = value`` / ``name: T = value`` in a statement."""
        if statement.type != "expression_statement" or not statement.named_children:
            return None
        assignment = statement.named_children[0]
        if assignment.type != "assignment":
            return None
        left = assignment.child_by_field_name("left")
        if left is None or left.type != "identifier":
            return None
        return assignment

    def _process_class(self, node: Node, result: ParseResult, class_stack: List[str]) -> Optional[ParsedEntity]:
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return None

        bases = [base for base, _ in self.adapter.base_list_of(node, source).superclasses]
        body = node.child_by_field_name("body")
        is_enum = any(base.split(".")[-1] in ENUM_BASES for base in bases)

        fields: List[Field] = []
        enum_values: List[EnumValue] = []
        for statement in (body.named_children if body is not None else []):
            assignment = self._assignment_of(statement)
            if assignment is None:
                continue
            field_name = self._field_text(assignment, "left", source)
            if is_enum:
                enum_values.append(EnumValue(name=field_name, value=self._field_text(assignment, "right", source)))
            else:
                fields.append(Field(name=field_name, type=self._field_text(assignment, "type", source)))

        payload = dict(
            qualified_name=".".join(class_stack + [name]),
            visibility=self._visibility(name),
        )
        if is_enum:
            entity = self.make_entity(EntityKind.ENUM, name, node, result, enum_values=enum_values, **payload)
            return ParsedEntity(entity, node, body)

        entity = self.make_entity(EntityKind.TYPE, name, node, result,
                                  type_kind=TypeKind.CLASS, fields=fields, **payload)
        return ParsedEntity(entity, node, None)

    def _parameters(self, params_node: Optional[Node], source: bytes) -> List[Param]:
        params = []
        if params_node is None:
            return params

        for param in params_node.named_children:
            if param.type == "identifier":
                params.append(Param(name=self._get_node_text(param, source)))
            elif param.type == "typed_parameter":
                name_node = param.named_children[0] if param.named_children else None
                params.append(Param(
                    name=self._get_node_text(name_node, source),
                    type=self._field_text(param, "type", source),
                ))
            elif param.type in ("default_parameter", "typed_default_parameter"):
                params.append(Param(
                    name=self._field_text(param, "name", source),
                    type=self._field_text(param, "type", source),
                ))
            elif param.type in ("list_splat_pattern", "dictionary_splat_pattern"):
                params.append(Param(name=self._get_node_text(param, source)))
        return params

    def _process_function(self, node: Node, result: ParseResult, class_stack: List[str]) -> Optional[ParsedEntity]:
        source = result.source
        name = self._field_text(node, "name", source)
        if not name:
            return None

        params = self._parameters(node.child_by_field_name("parameters"), source)
        return_type = self._field_text(node, "return_type", source)

        if class_stack:
            owner = class_stack[-1]
            # The implicit receiver is not part of the contract
            if params and params[0].name in ("self", "cls") and not params[0].type:
                params = params[1:]
            entity = self.make_entity(
                EntityKind.METHOD, name, node, result,
                qualified_name=f"{owner}.{name}",
                params=params,
                returns=[return_type] if return_type else [],
                receiver=owner,
                visibility=self._visibility(name),
            )
        else:
            entity = self.make_entity(
                EntityKind.FUNCTION, name, node, result,
                qualified_name=name,
                params=params,
                returns=[return_type] if return_type else [],
                visibility=self._visibility(name),
            )
        return ParsedEntity(entity, node, self.adapter.body_of(node))

    def _process_import(self, node: Node, result: ParseResult) -> List[ParsedEntity]:
        source = result.source
        module = ""
        if node.type == "import_from_statement":
            module = self._field_text(node, "module_name", source)

        imports = []
        names = node.children_by_field_name("name")
        if not names and any(child.type == "wildcard_import" for child in node.children):
            entity = self.make_entity(EntityKind.IMPORT, "*", node, result,
                                      qualified_name=f"{module}.*", import_path=f"{module}.*")
            return [ParsedEntity(entity, node, None)]

        for name_node in names:
            alias = None
            if name_node.type == "aliased_import":
                alias = self._field_text(name_node, "alias", source) or None
                name_node = name_node.child_by_field_name("name")

            dotted = self._get_node_text(name_node, source)
            if not dotted:
                continue
            # Bare relative modules ("from . import x") already end with a dot
            if not module or module.endswith("."):
                path = f"{module}{dotted}"
            else:
                path = f"{module}.{dotted}"
            entity = self.make_entity(
                EntityKind.IMPORT, alias or dotted.split(".")[-1], node, result,
                qualified_name=path,
                import_path=path,
                import_alias=alias,
            )
            imports.append(ParsedEntity(entity, node, None))
        return imports

    def _process_assignment(self, node: Node, result: ParseResult) -> Optional[ParsedEntity]:
        assignment = self._assignment_of(node)
        if assignment is None:
            return None

        source = result.source
        name = self._field_text(assignment, "left", source)
        value = assignment.child_by_field_name("right")
        kind = EntityKind.CONSTANT if name.isupper() else EntityKind.VARIABLE

        entity = self.make_entity(
            kind, name, assignment, result,
            qualified_name=name,
            value_type=self._field_text(assignment, "type", source) or None,
            value=self._get_node_text(value, source) or None,
            visibility=self._visibility(name),
        )
        return ParsedEntity(entity, assignment, value)
