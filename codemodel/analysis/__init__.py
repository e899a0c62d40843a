"""
Analysis tools for the code model: resolution, call graphs, hashing and change detection.
"""

from .call_graph import CallGraphExtractor
from .change_detector import ChangeDetector, ChangeSet, ChangeType, EntityChange
from .hashing import (
    EMPTY_HASH,
    HASH_LENGTH,
    HashEngine,
    HashPair,
    compare_hashes,
    file_hash,
    format_hash_pair,
    is_empty_hash,
    parse_hash_pair,
)
from .symbol_resolver import SymbolResolver

__all__ = [
    "CallGraphExtractor",
    "ChangeDetector",
    "ChangeSet",
    "ChangeType",
    "EntityChange",
    "EMPTY_HASH",
    "HASH_LENGTH",
    "HashEngine",
    "HashPair",
    "compare_hashes",
    "file_hash",
    "format_hash_pair",
    "is_empty_hash",
    "parse_hash_pair",
    "SymbolResolver",
]
