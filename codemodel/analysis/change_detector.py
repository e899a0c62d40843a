"""
Change classification between two snapshots of the same code base.
"""
import logging
from collections import defaultdict
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from codemodel.core.entities import Entity
from codemodel.core.relationships import Dependency
from .hashing import compare_hashes


class ChangeType(str, Enum):
    """How one entity differs between two snapshots."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    MOVED = "moved"
    BODY_CHANGED = "body_changed"
    SIGNATURE_CHANGED = "signature_changed"


class EntityChange(BaseModel):
    """The classified change of a single entity."""

    change: ChangeType
    name: str
    kind: str
    file_path: str
    old_id: Optional[str] = None
    new_id: Optional[str] = None
    old_hash: Optional[str] = None
    new_hash: Optional[str] = None

    @property
    def entity_id(self) -> str:
        """Id in the newest snapshot the entity appears in."""
        return self.new_id or self.old_id or ""


class ChangeSet(BaseModel):
    """All entity changes between two snapshots, in classification order."""

    changes: List[EntityChange] = Field(default_factory=list)

    def of_type(self, change: ChangeType) -> List[EntityChange]:
        return [c for c in self.changes if c.change == change]

    @property
    def needs_reanalysis(self) -> List[str]:
        """New-side ids whose call graph has to be recomputed."""
        recompute = (ChangeType.ADDED, ChangeType.BODY_CHANGED, ChangeType.SIGNATURE_CHANGED)
        return [c.new_id for c in self.changes if c.change in recompute and c.new_id]

    def summary(self) -> Dict[str, int]:
        counts = {change.value: 0 for change in ChangeType}
        for c in self.changes:
            counts[c.change.value] += 1
        return counts

    def __len__(self) -> int:
        return len(self.changes)


def _match_key(entity: Entity) -> Tuple[str, str, str]:
    return entity.file_path, entity.kind.value, entity.qualified_name or entity.name


class ChangeDetector:
    """
    Classifies entity changes between an old and a new snapshot.

    Ids embed the start line, so an entity that only moved within its file
    gets a new id. Unmatched ids are therefore paired a second time by file,
    kind and name before being reported as added or removed.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def classify(self, old: Entity, new: Entity) -> ChangeType:
        sig_changed, body_changed = compare_hashes(old.hash_pair, new.hash_pair)
        if sig_changed:
            return ChangeType.SIGNATURE_CHANGED
        if body_changed:
            return ChangeType.BODY_CHANGED
        if old.id != new.id:
            return ChangeType.MOVED
        return ChangeType.UNCHANGED

    def _change(self, change: ChangeType, old: Optional[Entity], new: Optional[Entity]) -> EntityChange:
        entity = new if new is not None else old
        return EntityChange(
            change=change,
            name=entity.qualified_name or entity.name,
            kind=entity.kind.value,
            file_path=entity.file_path,
            old_id=old.id if old is not None else None,
            new_id=new.id if new is not None else None,
            old_hash=old.hash_pair if old is not None else None,
            new_hash=new.hash_pair if new is not None else None,
        )

    def diff(self, old_entities: Iterable[Entity], new_entities: Iterable[Entity]) -> ChangeSet:
        """
        Compare two snapshots.

        Args:
            old_entities: Entities of the previous run
            new_entities: Entities of the current run

        Returns:
            The ChangeSet
        """
        old_by_id = {e.id: e for e in old_entities}
        new_by_id = {e.id: e for e in new_entities}
        changes = ChangeSet()

        for entity_id, new in new_by_id.items():
            old = old_by_id.get(entity_id)
            if old is not None:
                changes.changes.append(self._change(self.classify(old, new), old, new))

        # Second pass pairs entities whose id changed with the line they start on
        unmatched_old: Dict[Tuple[str, str, str], List[Entity]] = defaultdict(list)
        for entity_id, old in old_by_id.items():
            if entity_id not in new_by_id:
                unmatched_old[_match_key(old)].append(old)

        for entity_id, new in new_by_id.items():
            if entity_id in old_by_id:
                continue
            candidates = unmatched_old.get(_match_key(new))
            if candidates:
                old = candidates.pop(0)
                changes.changes.append(self._change(self.classify(old, new), old, new))
            else:
                changes.changes.append(self._change(ChangeType.ADDED, None, new))

        for remaining in unmatched_old.values():
            for old in remaining:
                changes.changes.append(self._change(ChangeType.REMOVED, old, None))

        self.logger.info(f"Classified {len(changes)} entities: {changes.summary()}")
        return changes

    def affected_callers(self, changes: ChangeSet, dependencies: Iterable[Dependency]) -> List[str]:
        """
        Ids of entities that depend on a removed or signature-changed entity.

        Args:
            changes: Output of :meth:`diff`
            dependencies: Edges of the snapshot the callers belong to

        Returns:
            Caller ids in edge order, without duplicates
        """
        broken: Set[str] = set()
        broken_names: Set[str] = set()
        for c in changes.changes:
            if c.change in (ChangeType.REMOVED, ChangeType.SIGNATURE_CHANGED):
                broken.update(i for i in (c.old_id, c.new_id) if i)
                broken_names.add(c.name)

        callers: List[str] = []
        seen: Set[str] = set()
        for dep in dependencies:
            hit = dep.to_id in broken if dep.to_id else dep.target in broken_names
            if hit and dep.from_id not in seen and dep.from_id not in broken:
                seen.add(dep.from_id)
                callers.append(dep.from_id)
        return callers
