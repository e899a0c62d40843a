"""
Base parser class for code model extraction.
"""
import os
import logging
from abc import ABC, abstractmethod
from typing import Iterator, List, NamedTuple, Optional

from tree_sitter import Language, Node, Parser, Tree

from codemodel.core import Entity, EntityKind, CodeModelError, FileReadError, ParseError
from codemodel.core.walker import find_first, find_nodes, node_end_line, node_line, node_text
from codemodel.languages import LanguageAdapter


class ParseResult(NamedTuple):
    """One parsed compilation unit."""

    tree: Optional[Tree]
    source: Optional[bytes]
    file_path: str
    language: str

    @property
    def root(self) -> Optional[Node]:
        return self.tree.root_node if self.tree is not None else None


class ParsedEntity(NamedTuple):
    """An extracted entity together with the nodes it was read from."""

    entity: Entity
    node: Node
    body: Optional[Node]


class BaseParser(ABC):
    """
    Base parser class for extracting entities from one language.
    Each language-specific parser will inherit from this class.

    Subclasses set ``grammar_module`` (a tree-sitter grammar package exposing
    ``language()``) and ``adapter_class``.
    """

    grammar_module = None
    adapter_class = None
    file_extensions: List[str] = []

    def __init__(self, language_name: str, language_version: str = None, adapter: LanguageAdapter = None):
        """
        Initialize the parser.

        Args:
            language_name: Name of the programming language
            language_version: Optional version of the language
            adapter: Adapter to use; defaults to a fresh ``adapter_class()``
        """
        self.language_name = language_name
        self.language_version = language_version
        self.logger = logging.getLogger(f"{__name__}.{language_name}")
        self.adapter = adapter if adapter is not None else self.adapter_class()

        # Tree-sitter parser is created lazily
        self.parser = None
        self.language = None

    def initialize_parser(self) -> None:
        """Initialize the tree-sitter parser with the appropriate language."""
        try:
            self.language = Language(self.grammar_module.language())
            self.parser = Parser(self.language)
        except Exception as e:
            self.logger.error(f"Failed to initialize {self.language_name} parser: {e}")
            raise ParseError(f"grammar for {self.language_name} could not be loaded: {e}") from e
        self.logger.debug(f"{self.language_name} parser initialized")

    def parse_source(self, source, file_path: str = "<memory>") -> ParseResult:
        """
        Parse in-memory source.

        Args:
            source: Source code as bytes or str
            file_path: Path recorded on the entities

        Returns:
            The ParseResult
        """
        if isinstance(source, str):
            source = source.encode("utf-8")

        if self.parser is None:
            self.initialize_parser()

        tree = self.parser.parse(source)
        if tree is None or tree.root_node is None:
            raise ParseError("tree-sitter returned no tree", file_path)

        if tree.root_node.has_error:
            self.logger.debug(f"Syntax errors in {file_path}; extracting from the recovered tree")

        return ParseResult(tree=tree, source=source, file_path=file_path, language=self.language_name)

    def parse_file(self, file_path: str, record_as: Optional[str] = None) -> ParseResult:
        """
        Read and parse a single file.

        Args:
            file_path: Path to the file to parse
            record_as: Path stored on the result instead of ``file_path``

        Returns:
            The ParseResult
        """
        try:
            with open(file_path, "rb") as f:
                source_code = f.read()
        except OSError as e:
            raise FileReadError(file_path, e) from e

        return self.parse_source(source_code, record_as or file_path)

    def parse_directory(self, directory_path: str,
                        file_extensions: Optional[List[str]] = None) -> Iterator[ParseResult]:
        """
        Parse all files in a directory.

        Files that cannot be read or parsed are logged and skipped.

        Args:
            directory_path: Path to the directory to parse
            file_extensions: Optional list of file extensions to include (e.g., ['.java'])

        Yields:
            A ParseResult per parsed file
        """
        if not os.path.isdir(directory_path):
            self.logger.error(f"Directory not found: {directory_path}")
            return

        extensions = file_extensions or self.file_extensions
        for root, _, files in os.walk(directory_path):
            for file in sorted(files):
                file_path = os.path.join(root, file)

                # Skip files with extensions not in the list
                if extensions and os.path.splitext(file_path)[1].lower() not in extensions:
                    continue

                try:
                    yield self.parse_file(file_path)
                except CodeModelError as e:
                    self.logger.error(f"Error parsing {file_path}: {e}")

    @abstractmethod
    def extract_entities(self, result: ParseResult) -> List[ParsedEntity]:
        """
        Extract the declarations of a parsed unit.

        Args:
            result: Parsed unit

        Returns:
            Entities in source order, with their declaration and body nodes
        """
        pass

    def process_file(self, file_path: str) -> List[ParsedEntity]:
        """Parse a file and extract its entities."""
        return self.extract_entities(self.parse_file(file_path))

    def make_entity(self, kind: EntityKind, name: str, node: Node, result: ParseResult, **payload) -> Entity:
        """
        Create an entity located at ``node``.

        Args:
            kind: Entity kind
            name: Symbol name
            node: Declaration node
            result: Unit the node belongs to
            **payload: Kind-specific Entity fields

        Returns:
            The new Entity (id assigned, hashes empty)
        """
        return Entity(
            kind=kind,
            name=name,
            file_path=result.file_path,
            start_line=node_line(node),
            end_line=node_end_line(node),
            language=self.language_name,
            **payload,
        )

    def unique_ids(self, entities: List[ParsedEntity]) -> List[ParsedEntity]:
        """
        Make entity ids unique within one unit.

        Ids are anchored on line and name, so two declarations with one name on
        one line (``import a.x, b.x``) collide. Later ones get a ``-2``, ``-3``
        suffix in source order, which keeps ids stable across re-parses.

        Args:
            entities: Entities of one unit in source order

        Returns:
            The same entities
        """
        seen = {}
        for parsed in entities:
            entity = parsed.entity
            count = seen.get(entity.id, 0) + 1
            seen[entity.id] = count
            if count > 1:
                entity.id = f"{entity.id}-{count}"
        return entities

    def _find_nodes(self, node: Node, kinds, prune=()) -> List[Node]:
        return find_nodes(node, kinds if not isinstance(kinds, str) else (kinds,), prune)

    def _find_first_node(self, node: Node, kinds) -> Optional[Node]:
        return find_first(node, kinds if not isinstance(kinds, str) else (kinds,))

    def _get_node_text(self, node: Optional[Node], source_code: bytes) -> str:
        return node_text(node, source_code)

    def _field_text(self, node: Node, field: str, source_code: bytes) -> str:
        """Text of a named field of ``node``, or empty when the field is absent."""
        return node_text(node.child_by_field_name(field), source_code)
