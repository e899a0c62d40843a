#!/usr/bin/env python3
"""
Example script: extract the call graph of a project and show its hot spots.
"""
import sys
import logging
from collections import Counter
from pathlib import Path
from rich.console import Console
from rich.table import Table

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from codemodel.config import ExtractionConfig
from codemodel.core import CodeModelError, DependencyKind
from codemodel.indexer import Indexer


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
console = Console()


def main():
    """Main function for the example."""
    if len(sys.argv) < 2:
        console.print("[red]Error: Please provide a path to a project to analyze.[/red]")
        console.print("Usage: python analyze_call_graph.py <path_to_project> [language ...]")
        return 1

    project_path = sys.argv[1]
    config = ExtractionConfig(languages=sys.argv[2:] or None)

    console.print(f"[bold cyan]Extracting code model from {project_path}...[/bold cyan]")
    try:
        model = Indexer(config).index_paths([project_path])
    except CodeModelError as e:
        console.print(f"[red]Error extracting code model: {e}[/red]")
        return 1

    stats = model.get_statistics()
    console.print(f"[cyan]Entities:[/cyan] {stats['total_entities']}")
    console.print(f"[cyan]Dependencies:[/cyan] {stats['total_dependencies']} "
                  f"({stats['resolved_dependencies']} resolved)")

    calls = model.get_dependencies(kind=DependencyKind.CALLS)

    # Most called entities inside the project
    callee_counts = Counter(dep.to_id for dep in calls if dep.is_resolved)
    hot_table = Table(title="Most Called Entities")
    hot_table.add_column("Entity", style="cyan")
    hot_table.add_column("Callers", style="green")
    for entity_id, count in callee_counts.most_common(10):
        entity = model.get_entity(entity_id)
        hot_table.add_row(entity.qualified_name or entity.name, str(count))
    console.print(hot_table)

    # Names called but declared outside the project
    external = Counter(dep.target for dep in calls if not dep.is_resolved)
    ext_table = Table(title="Unresolved Call Targets")
    ext_table.add_column("Target", style="yellow")
    ext_table.add_column("Call Sites", style="green")
    for target, count in external.most_common(10):
        ext_table.add_row(target, str(count))
    console.print(ext_table)

    optional = sum(1 for dep in calls if dep.optional)
    console.print(f"[cyan]Conditional calls:[/cyan] {optional} of {len(calls)}")

    for path, error in model.errors.items():
        console.print(f"[yellow]Skipped {path}: {error}[/yellow]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
