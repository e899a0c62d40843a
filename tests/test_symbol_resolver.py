"""
Tests for the batch symbol table.
"""
import unittest

from codemodel.analysis.symbol_resolver import SymbolResolver, has_separator, last_segment, split_segments
from codemodel.core import Entity, EntityKind, TypeKind
from codemodel.core.relationships import CallGraphEntity


def _entity(entity_id, name, qualified=None, kind="struct"):
    return CallGraphEntity(id=entity_id, name=name, qualified_name=qualified or name, kind=kind)


class TestSymbolResolver(unittest.TestCase):
    """Exact lookup and last-segment fallback."""

    def setUp(self):
        self.resolver = SymbolResolver([
            _entity("id-hashmap", "HashMap"),
            _entity("id-save", "save", "UserRepository.save", kind="method"),
            _entity("id-new", "new", "User::new", kind="method"),
            _entity("id-new-2", "new", "Order::new", kind="method"),
        ])

    def test_fallback_to_last_segment(self):
        self.assertEqual(self.resolver.resolve_id("std::collections::HashMap"), "id-hashmap")

    def test_exact_matches(self):
        self.assertEqual(self.resolver.resolve_id("HashMap"), "id-hashmap")
        self.assertEqual(self.resolver.resolve_id("UserRepository.save"), "id-save")
        self.assertEqual(self.resolver.resolve_id("Order::new"), "id-new-2")

    def test_first_registration_wins(self):
        self.assertEqual(self.resolver.resolve_id("new"), "id-new")

    def test_receiver_qualified_call(self):
        self.assertEqual(self.resolver.resolve_id("repository.save"), "id-save")
        self.assertEqual(self.resolver.resolve_id(r"App\Models\HashMap"), "id-hashmap")

    def test_unresolved(self):
        self.assertIsNone(self.resolver.resolve("Missing"))
        self.assertIsNone(self.resolver.resolve_id("pkg.Missing"))
        self.assertIsNone(self.resolver.resolve(""))

    def test_read_only(self):
        with self.assertRaises(TypeError):
            self.resolver.by_name["Other"] = _entity("x", "Other")
        self.assertIn("HashMap", self.resolver)
        self.assertEqual(len(self.resolver), 4)
        self.assertEqual(self.resolver.get("id-save").name, "save")

    def test_from_entities(self):
        user = Entity(kind=EntityKind.TYPE, name="User", qualified_name="com.example.User",
                      file_path="User.java", start_line=3, end_line=9, type_kind=TypeKind.CLASS)
        resolver = SymbolResolver.from_entities([user])
        self.assertEqual(resolver.resolve_id("com.example.User"), user.id)
        self.assertEqual(resolver.resolve_id("other.pkg.User"), user.id)

    def test_segments(self):
        self.assertEqual(split_segments("a::b.c->d"), ["a", "b", "c", "d"])
        self.assertEqual(last_segment("std::fmt::Display"), "Display")
        self.assertEqual(last_segment("plain"), "plain")
        self.assertTrue(has_separator("a.b"))
        self.assertFalse(has_separator("ab"))


if __name__ == "__main__":
    unittest.main()
