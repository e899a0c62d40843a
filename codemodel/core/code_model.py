"""
Main CodeModel class holding the entities and dependencies of one batch.
"""
import json
import logging
import os
from collections import defaultdict
from typing import Any, Dict, List, Optional

from .entities import Entity
from .relationships import Dependency, DependencyKind


class CodeModel:
    """
    The result of indexing one batch of compilation units.

    Entities are keyed by their stable id; dependencies keep extraction order.
    """

    def __init__(self):
        self.entities: Dict[str, Entity] = {}
        self.dependencies: List[Dependency] = []
        self.errors: Dict[str, str] = {}

        self.logger = logging.getLogger(__name__)

    def add_entity(self, entity: Entity) -> str:
        """
        Add an entity to the model.

        Args:
            entity: The entity to add

        Returns:
            The ID of the added entity
        """
        if entity.id in self.entities:
            self.logger.warning(f"Entity with ID {entity.id} already exists. Updating.")

        self.entities[entity.id] = entity
        return entity.id

    def add_dependency(self, dependency: Dependency) -> None:
        """
        Add a dependency edge.

        Unlike entities, the target of an edge does not have to exist in the
        model: unresolved edges are kept by name.

        Args:
            dependency: The edge to add
        """
        if dependency.from_id not in self.entities:
            raise ValueError(f"Source entity {dependency.from_id} not found")

        self.dependencies.append(dependency)

    def record_error(self, file_path: str, error: Exception) -> None:
        self.errors[file_path] = str(error)

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        return self.entities.get(entity_id)

    def find_entities(self, name: str) -> List[Entity]:
        """Return every entity whose simple or qualified name equals ``name``."""
        return [e for e in self.entities.values() if name in (e.name, e.qualified_name)]

    def get_dependencies(self, from_id: Optional[str] = None,
                         to_name: Optional[str] = None,
                         kind: Optional[DependencyKind] = None) -> List[Dependency]:
        """
        Get dependencies matching the given criteria.

        Args:
            from_id: Filter by source entity ID
            to_name: Filter by target name (simple or qualified)
            kind: Filter by dependency kind

        Returns:
            List of matching dependencies
        """
        result = []
        for dep in self.dependencies:
            if from_id and dep.from_id != from_id:
                continue
            if to_name and to_name not in (dep.to_name, dep.to_qualified):
                continue
            if kind and dep.kind != kind:
                continue
            result.append(dep)
        return result

    def get_statistics(self) -> Dict[str, Any]:
        """Get statistics about the model."""
        entity_counts = defaultdict(int)
        for entity in self.entities.values():
            entity_counts[entity.kind.value] += 1

        dependency_counts = defaultdict(int)
        resolved = 0
        for dep in self.dependencies:
            dependency_counts[dep.kind.value] += 1
            if dep.is_resolved:
                resolved += 1

        return {
            "total_entities": len(self.entities),
            "total_dependencies": len(self.dependencies),
            "resolved_dependencies": resolved,
            "unresolved_dependencies": len(self.dependencies) - resolved,
            "entity_counts": dict(entity_counts),
            "dependency_counts": dict(dependency_counts),
            "failed_files": len(self.errors),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entities": [entity.model_dump(mode="json") for entity in self.entities.values()],
            "dependencies": [dep.model_dump(mode="json") for dep in self.dependencies],
            "errors": dict(self.errors),
        }

    def export_to_json(self, export_path: str) -> None:
        """
        Export the model to a JSON snapshot.

        Args:
            export_path: File to write
        """
        directory = os.path.dirname(os.path.abspath(export_path))
        os.makedirs(directory, exist_ok=True)

        with open(export_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

        self.logger.info(f"Exported {len(self.entities)} entities to {export_path}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeModel":
        model = cls()
        for raw in data.get("entities", []):
            model.add_entity(Entity.model_validate(raw))
        for raw in data.get("dependencies", []):
            dep = Dependency.model_validate(raw)
            if dep.from_id in model.entities:
                model.dependencies.append(dep)
        model.errors.update(data.get("errors", {}))
        return model

    @classmethod
    def load_from_json(cls, import_path: str) -> "CodeModel":
        """
        Load a model previously written by :meth:`export_to_json`.

        Args:
            import_path: Snapshot file

        Returns:
            The loaded model
        """
        with open(import_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)
