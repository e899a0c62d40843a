"""
Tests for change classification between snapshots.
"""
import unittest

from codemodel.analysis import ChangeDetector, ChangeType
from codemodel.core import Dependency, DependencyKind, Entity, EntityKind
from codemodel.indexer import Indexer


def _function(name, line, sig="aaaa1111", body="bbbb2222", path="svc.py"):
    return Entity(kind=EntityKind.FUNCTION, name=name, file_path=path, start_line=line,
                  end_line=line + 1, sig_hash=sig, body_hash=body)


class TestChangeDetector(unittest.TestCase):
    """Classification of matched and unmatched entities."""

    def setUp(self):
        self.detector = ChangeDetector()

    def _single(self, old, new):
        changes = self.detector.diff(old, new)
        self.assertEqual(len(changes), 1)
        return changes.changes[0]

    def test_unchanged(self):
        change = self._single([_function("run", 1)], [_function("run", 1)])
        self.assertEqual(change.change, ChangeType.UNCHANGED)

    def test_body_and_signature_changes(self):
        body = self._single([_function("run", 1)], [_function("run", 1, body="cccc3333")])
        self.assertEqual(body.change, ChangeType.BODY_CHANGED)

        sig = self._single([_function("run", 1)], [_function("run", 1, sig="dddd4444", body="cccc3333")])
        self.assertEqual(sig.change, ChangeType.SIGNATURE_CHANGED)

    def test_moved_entity(self):
        change = self._single([_function("run", 1)], [_function("run", 7)])
        self.assertEqual(change.change, ChangeType.MOVED)
        self.assertNotEqual(change.old_id, change.new_id)

    def test_moved_and_edited(self):
        change = self._single([_function("run", 1)], [_function("run", 7, body="eeee5555")])
        self.assertEqual(change.change, ChangeType.BODY_CHANGED)

    def test_added_and_removed(self):
        changes = self.detector.diff([_function("old", 1)], [_function("new", 1)])
        self.assertEqual([c.change for c in changes.changes], [ChangeType.ADDED, ChangeType.REMOVED])
        self.assertEqual(changes.summary()["added"], 1)
        self.assertEqual(changes.summary()["removed"], 1)

    def test_malformed_hash_forces_signature_change(self):
        change = self._single([_function("run", 1, sig="", body="")], [_function("run", 1)])
        self.assertEqual(change.change, ChangeType.SIGNATURE_CHANGED)

    def test_needs_reanalysis(self):
        old = [_function("same", 1), _function("edited", 5), _function("gone", 9)]
        new = [_function("same", 1), _function("edited", 5, body="ffff6666"), _function("fresh", 12)]
        changes = self.detector.diff(old, new)
        self.assertEqual(sorted(changes.needs_reanalysis), sorted([new[1].id, new[2].id]))
        self.assertEqual(changes.of_type(ChangeType.REMOVED)[0].name, "gone")

    def test_affected_callers(self):
        callee_old = _function("callee", 1)
        callee_new = _function("callee", 1, sig="9999aaaa")
        caller = _function("caller", 5)
        bystander = _function("bystander", 9)

        changes = self.detector.diff([callee_old, caller, bystander], [callee_new, caller, bystander])
        dependencies = [
            Dependency(from_id=caller.id, to_name="callee", to_id=callee_new.id, kind=DependencyKind.CALLS),
            Dependency(from_id=caller.id, to_name="callee", kind=DependencyKind.CALLS),
            Dependency(from_id=bystander.id, to_name="other", kind=DependencyKind.CALLS),
        ]
        self.assertEqual(self.detector.affected_callers(changes, dependencies), [caller.id])


class TestChangeDetectorOnSource(unittest.TestCase):
    """End to end: formatting edits are not changes, code edits are."""

    OLD = "def add(a, b):\n    return a + b\n\n\ndef scale(x):\n    return add(x, x)\n"
    NEW = "\n\ndef add(a, b):\n    # reformatted\n    return a+b\n\n\ndef scale(x: int):\n    return add(x, x)\n"

    def test_reformat_is_move_and_retype_is_signature_change(self):
        indexer = Indexer()
        old = indexer.index_source(self.OLD, "calc.py", "python")
        new = indexer.index_source(self.NEW, "calc.py", "python")

        changes = ChangeDetector().diff(old.entities.values(), new.entities.values())
        by_name = {c.name: c.change for c in changes.changes}
        self.assertEqual(by_name["add"], ChangeType.MOVED)
        self.assertEqual(by_name["scale"], ChangeType.SIGNATURE_CHANGED)


if __name__ == "__main__":
    unittest.main()
