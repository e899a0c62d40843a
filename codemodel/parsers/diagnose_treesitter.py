#!/usr/bin/env python
"""
Diagnostic checks for the tree-sitter grammars used by the parsers.
"""

import sys
import importlib
import logging
from typing import List, NamedTuple, Optional

logger = logging.getLogger(__name__)

# Grammar package and a snippet every grammar must parse without errors
GRAMMARS = {
    "java": ("tree_sitter_java", b"public class Test { void run() { go(); } }"),
    "python": ("tree_sitter_python", b"def run():\n    go()\n"),
    "rust": ("tree_sitter_rust", b"fn run() { go(); }"),
    "go": ("tree_sitter_go", b"package main\nfunc run() { goAhead() }\n"),
}


class GrammarCheck(NamedTuple):
    """Outcome of checking one grammar."""

    language: str
    module: str
    ok: bool
    detail: str
    location: Optional[str] = None


def tree_sitter_version() -> Optional[str]:
    """Installed version of the tree-sitter bindings, or None if missing."""
    from importlib.metadata import PackageNotFoundError, version
    try:
        return version("tree-sitter")
    except PackageNotFoundError:
        return None


def check_grammar(language: str) -> GrammarCheck:
    """
    Load a grammar, build a parser and parse a sample.

    Args:
        language: Key of GRAMMARS

    Returns:
        The GrammarCheck
    """
    module_name, sample = GRAMMARS[language]
    try:
        from tree_sitter import Language, Parser
        module = importlib.import_module(module_name)
    except ImportError as e:
        logger.error(f"✗ {module_name} not importable: {e}")
        return GrammarCheck(language, module_name, False, f"not installed ({e})")

    try:
        parser = Parser(Language(module.language()))
        tree = parser.parse(sample)
    except Exception as e:
        logger.error(f"✗ {module_name} failed to parse the sample: {e}")
        return GrammarCheck(language, module_name, False, f"parser error: {e}", module.__file__)

    if tree.root_node.has_error:
        logger.warning(f"✗ {module_name} parsed the sample with errors")
        return GrammarCheck(language, module_name, False, "sample parsed with errors", module.__file__)

    logger.info(f"✓ {module_name} ok (root node type: {tree.root_node.type})")
    return GrammarCheck(language, module_name, True, f"root node: {tree.root_node.type}", module.__file__)


def check_tree_sitter() -> List[GrammarCheck]:
    """Check every supported grammar."""
    logger.info("=== Tree-Sitter Diagnostic Report ===")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"tree-sitter version: {tree_sitter_version() or 'not installed'}")
    return [check_grammar(language) for language in GRAMMARS]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')
    results = check_tree_sitter()
    if all(result.ok for result in results):
        logger.info("All checks passed! tree-sitter is correctly configured.")
        sys.exit(0)
    else:
        logger.error("Some checks failed. See log above for details.")
        sys.exit(1)
