"""
codemodel - language-agnostic code model extraction from tree-sitter parse trees.
"""

__version__ = "0.1.0"
