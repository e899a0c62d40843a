"""
Tests for signature/body hashing and hash pair comparison.
"""
import unittest

from codemodel.analysis.hashing import (
    EMPTY_HASH,
    HASH_LENGTH,
    HashEngine,
    compare_hashes,
    file_hash,
    format_hash_pair,
    is_empty_hash,
    normalize_type,
    parse_hash_pair,
)
from codemodel.core import Entity, EntityKind, Field, Param, TypeKind
from codemodel.parsers import GoParser, JavaParser, PythonParser


def _hash_python(source):
    """Hash every entity of a Python snippet; returns {name: entity}."""
    parser = PythonParser()
    engine = HashEngine()
    result = parser.parse_source(source, "mod.py")
    hashed = {}
    for parsed in parser.extract_entities(result):
        engine.apply(parsed.entity, parsed.body, result.source)
        hashed[parsed.entity.name] = parsed.entity
    return hashed


class TestHashPairs(unittest.TestCase):
    """Pair encoding and comparison."""

    def test_compare(self):
        self.assertEqual(compare_hashes("abcd1234:efgh5678", "abcd1234:efgh5678"), (False, False))
        self.assertEqual(compare_hashes("abcd1234:efgh5678", "xxxx9999:efgh5678"), (True, False))
        self.assertEqual(compare_hashes("abcd1234:efgh5678", "abcd1234:00000000"), (False, True))
        self.assertEqual(compare_hashes("abcd1234:efgh5678", "invalidhash"), (True, True))
        self.assertEqual(compare_hashes(None, "abcd1234:efgh5678"), (True, True))

    def test_parse(self):
        pair = parse_hash_pair("abcd1234:efgh5678")
        self.assertEqual((pair.signature, pair.body, pair.well_formed), ("abcd1234", "efgh5678", True))

        missing = parse_hash_pair("invalidhash")
        self.assertEqual((missing.signature, missing.body), ("invalidhash", ""))
        self.assertFalse(missing.well_formed)

        # One empty half is allowed; both empty is not
        self.assertTrue(parse_hash_pair("abcd1234:").well_formed)
        self.assertFalse(parse_hash_pair(":").well_formed)
        self.assertFalse(parse_hash_pair("").well_formed)

    def test_format(self):
        self.assertEqual(format_hash_pair("a", "b"), "a:b")
        self.assertEqual(len(EMPTY_HASH), HASH_LENGTH)
        self.assertTrue(is_empty_hash(EMPTY_HASH))
        self.assertEqual(len(file_hash(b"content")), HASH_LENGTH)
        self.assertNotEqual(file_hash(b"a"), file_hash(b"b"))


class TestSignatureHash(unittest.TestCase):
    """Signature fingerprints cover the visible contract only."""

    def setUp(self):
        self.engine = HashEngine()

    def _function(self, params, returns=("int",)):
        return Entity(kind=EntityKind.FUNCTION, name="add", file_path="m.py", start_line=1, end_line=2,
                      params=[Param(name=n, type=t) for n, t in params], returns=list(returns))

    def test_deterministic(self):
        entity = self._function([("a", "int")])
        self.assertEqual(self.engine.signature_hash(entity), self.engine.signature_hash(entity))
        self.assertEqual(len(self.engine.signature_hash(entity)), HASH_LENGTH)

    def test_parameter_name_ignored_type_counted(self):
        base = self.engine.signature_hash(self._function([("a", "int")]))
        self.assertEqual(base, self.engine.signature_hash(self._function([("renamed", "int")])))
        self.assertNotEqual(base, self.engine.signature_hash(self._function([("a", "str")])))
        self.assertNotEqual(base, self.engine.signature_hash(self._function([("a", "int")], returns=["str"])))

    def test_type_whitespace_normalized(self):
        self.assertEqual(normalize_type("Map< String ,  Integer >"), "Map<String,Integer>")
        spaced = self._function([("m", "Map<String, Integer>")])
        packed = self._function([("m", "Map<String,Integer>")])
        self.assertEqual(self.engine.signature_hash(spaced), self.engine.signature_hash(packed))

    def test_type_fields_counted(self):
        def struct(fields):
            return Entity(kind=EntityKind.TYPE, name="User", file_path="u.go", start_line=1, end_line=3,
                          type_kind=TypeKind.STRUCT, fields=[Field(name=n, type=t) for n, t in fields])

        base = self.engine.signature_hash(struct([("Name", "string")]))
        self.assertNotEqual(base, self.engine.signature_hash(struct([("Name", "int")])))
        self.assertNotEqual(base, self.engine.signature_hash(struct([("Title", "string")])))


class TestBodyHash(unittest.TestCase):
    """Body fingerprints are structural and formatting insensitive."""

    def test_formatting_and_comments_ignored(self):
        compact = _hash_python("def add(a, b):\n    return a+b\n")["add"]
        spaced = _hash_python("def add(a, b):\n    # add them\n    return a + b  # sum\n")["add"]
        self.assertEqual(compact.body_hash, spaced.body_hash)
        self.assertEqual(compact.sig_hash, spaced.sig_hash)

    def test_operator_change_detected(self):
        plus = _hash_python("def add(a, b):\n    return a + b\n")["add"]
        minus = _hash_python("def add(a, b):\n    return a - b\n")["add"]
        self.assertNotEqual(plus.body_hash, minus.body_hash)
        self.assertEqual(plus.sig_hash, minus.sig_hash)

    def test_parameter_type_change_is_signature_change(self):
        old = _hash_python("def add(a: int, b: int):\n    return a + b\n")["add"]
        renamed = _hash_python("def add(x: int, y: int):\n    return a + b\n")["add"]
        retyped = _hash_python("def add(a: str, b: int):\n    return a + b\n")["add"]
        self.assertEqual(old.sig_hash, renamed.sig_hash)
        self.assertEqual(compare_hashes(old.hash_pair, retyped.hash_pair), (True, False))

    def test_java_comment_insensitive(self):
        parser = JavaParser()
        engine = HashEngine()

        def method_hash(source):
            result = parser.parse_source(source, "A.java")
            method = [p for p in parser.extract_entities(result) if p.entity.name == "sum"][0]
            return engine.apply(method.entity, method.body, result.source).body_hash

        first = method_hash("class A { int sum(int a, int b) { return a+b; } }")
        second = method_hash("class A {\n  int sum(int a, int b) {\n    /* add */\n    return a + b; // done\n  }\n}")
        self.assertEqual(first, second)

    def test_go_pointer_receiver_is_part_of_signature(self):
        parser = GoParser()
        engine = HashEngine()

        def total(source):
            result = parser.parse_source(source, "order.go")
            method = [p for p in parser.extract_entities(result) if p.entity.name == "Total"][0]
            return engine.apply(method.entity, method.body, result.source)

        body = " { return len(o.Items) }\n"
        pointer = total("package shop\nfunc (o *Order) Total() int" + body)
        value = total("package shop\nfunc (o Order) Total() int" + body)

        self.assertEqual(pointer.receiver, "*Order")
        self.assertEqual(value.receiver, "Order")
        self.assertNotEqual(pointer.sig_hash, value.sig_hash)
        self.assertEqual(pointer.body_hash, value.body_hash)
        self.assertEqual(compare_hashes(value.hash_pair, pointer.hash_pair), (True, False))

    def test_missing_body_is_sentinel(self):
        engine = HashEngine()
        self.assertEqual(engine.body_hash(None, b"x"), EMPTY_HASH)
        imports = _hash_python("import os\n")
        self.assertEqual(imports["os"].body_hash, EMPTY_HASH)

    def test_repeated_hashing_is_stable(self):
        source = "def run(x):\n    if x:\n        go(x)\n"
        self.assertEqual(_hash_python(source)["run"].hash_pair, _hash_python(source)["run"].hash_pair)


if __name__ == "__main__":
    unittest.main()
