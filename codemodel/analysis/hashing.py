"""
Signature and body fingerprints used for change classification.

Hash pair format: ``"<sig_hash>:<body_hash>"`` with both halves truncated
SHA-256 hex digests of HASH_LENGTH characters.

- The signature hash covers the externally visible contract: kind, name,
  parameter types, return types, receiver, and the field list of types.
- The body hash covers the executable body AST with comments and
  formatting removed.
"""
import hashlib
import logging
import re
from typing import NamedTuple, Optional, Tuple

from tree_sitter import Node

from codemodel.core.entities import Entity, EntityKind

logger = logging.getLogger(__name__)

HASH_LENGTH = 8
EMPTY_HASH = "0" * HASH_LENGTH
HASH_DELIMITER = ":"

_WHITESPACE = re.compile(r"\s+")


class HashPair(NamedTuple):
    """A parsed hash pair."""

    signature: str
    body: str
    well_formed: bool


def hash_bytes(data: bytes) -> str:
    """Truncated SHA-256 hex digest."""
    return hashlib.sha256(data).hexdigest()[:HASH_LENGTH]


def hash_text(text: str) -> str:
    return hash_bytes(text.encode("utf-8"))


def file_hash(content: bytes) -> str:
    """Hash of a whole file, used to skip unchanged files."""
    return hash_bytes(content)


def is_empty_hash(value: str) -> bool:
    """True for the sentinel stored when an entity has no body."""
    return value == EMPTY_HASH


def format_hash_pair(sig_hash: str, body_hash: str) -> str:
    return f"{sig_hash}{HASH_DELIMITER}{body_hash}"


def parse_hash_pair(value: Optional[str]) -> HashPair:
    """
    Split a stored hash pair.

    A missing delimiter yields the whole string as the signature half and an
    empty body half; such a pair is not well formed. Either half may be empty,
    but a pair with both halves empty is not well formed.

    Args:
        value: Stored hash pair

    Returns:
        The parsed HashPair
    """
    if not value:
        return HashPair("", "", False)

    sig, sep, body = value.partition(HASH_DELIMITER)
    if not sep:
        return HashPair(value, "", False)
    return HashPair(sig, body, bool(sig or body))


def compare_hashes(old: Optional[str], new: Optional[str]) -> Tuple[bool, bool]:
    """
    Classify the change between two hash pairs.

    Malformed input on either side reports both halves as changed, so that
    ambiguity always forces recomputation.

    Args:
        old: Previous hash pair
        new: Current hash pair

    Returns:
        (signature_changed, body_changed)
    """
    old_pair = parse_hash_pair(old)
    new_pair = parse_hash_pair(new)

    if not old_pair.well_formed or not new_pair.well_formed:
        return True, True

    return old_pair.signature != new_pair.signature, old_pair.body != new_pair.body


def normalize_type(type_text: Optional[str]) -> str:
    """Remove all whitespace from a type string."""
    if not type_text:
        return ""
    return _WHITESPACE.sub("", type_text)


def serialize_signature(entity: Entity) -> str:
    """
    Canonical serialization of an entity's externally visible contract.

    Parameter names are deliberately absent: renaming a parameter keeps the
    signature hash.
    """
    parts = [entity.kind.value, entity.name]

    if entity.kind in (EntityKind.FUNCTION, EntityKind.METHOD):
        params = ",".join(normalize_type(p.type) for p in entity.params)
        returns = ",".join(normalize_type(r) for r in entity.returns)
        parts.append(f"({params})->({returns})")
        if entity.receiver:
            parts.append(normalize_type(entity.receiver))

    elif entity.kind == EntityKind.TYPE:
        parts.append(entity.type_kind.value if entity.type_kind else "")
        fields = ",".join(f"{f.name}:{normalize_type(f.type)}" for f in entity.fields)
        parts.append(f"{{{fields}}}")
        # Aliases and defined types carry their underlying type
        if entity.value_type:
            parts.append(normalize_type(entity.value_type))

    elif entity.kind == EntityKind.ENUM:
        parts.append(normalize_type(entity.value_type))

    elif entity.kind in (EntityKind.CONSTANT, EntityKind.VARIABLE):
        parts.append(normalize_type(entity.value_type))

    elif entity.kind == EntityKind.IMPORT:
        parts.append(entity.import_path or "")
        parts.append(entity.import_alias or "")

    return "|".join(parts)


def _is_comment(node: Node) -> bool:
    return node.type.endswith("comment")


def serialize_body(body: Node, source: bytes) -> str:
    """
    Serialize a body subtree as nested ``kind(...)`` groups.

    Leaf tokens contribute their text; comments are skipped entirely and
    whitespace never appears because it is not part of the tree.
    """
    out = []
    # Explicit stack of (node, closing) entries; closing entries emit ")"
    stack = [(body, False)]
    while stack:
        node, closing = stack.pop()
        if closing:
            out.append(")")
            continue
        if _is_comment(node):
            continue

        out.append(node.type)
        out.append("(")
        if node.child_count == 0:
            out.append(source[node.start_byte:node.end_byte].decode("utf-8", errors="replace"))

        stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))
    return "".join(out)


class HashEngine:
    """Computes and applies the signature/body fingerprint of entities."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def signature_hash(self, entity: Entity) -> str:
        return hash_text(serialize_signature(entity))

    def body_hash(self, body: Optional[Node], source: Optional[bytes]) -> str:
        """
        Hash a body subtree.

        Args:
            body: Executable body node, or None when the entity has no body
            source: Source bytes of the tree

        Returns:
            The body hash, or EMPTY_HASH when there is no body
        """
        if body is None or source is None:
            return EMPTY_HASH
        if body.end_byte > len(source):
            self.logger.debug(f"Body node {body.type} lies outside its source; treating as empty")
            return EMPTY_HASH
        return hash_text(serialize_body(body, source))

    def apply(self, entity: Entity, body: Optional[Node], source: Optional[bytes]) -> Entity:
        """Populate ``sig_hash`` and ``body_hash`` on an entity in place."""
        entity.sig_hash = self.signature_hash(entity)
        entity.body_hash = self.body_hash(body, source)
        return entity

    def compare(self, old: str, new: str) -> Tuple[bool, bool]:
        return compare_hashes(old, new)
