#!/usr/bin/env python3
"""
Example script: classify the changes between two checkouts of a project.
"""
import sys
import logging
from pathlib import Path
from rich.console import Console

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from codemodel.analysis import ChangeDetector, ChangeType
from codemodel.config import ExtractionConfig
from codemodel.core import CodeModelError
from codemodel.indexer import Indexer


logging.basicConfig(level=logging.WARNING)
console = Console()


def main():
    """Main function for the example."""
    if len(sys.argv) < 3:
        console.print("Usage: python detect_changes.py <old_checkout> <new_checkout>")
        return 1

    old_root, new_root = sys.argv[1], sys.argv[2]

    # Entity ids include the file path, so record paths relative to each checkout
    try:
        old = Indexer(ExtractionConfig(base_path=old_root)).index_paths([old_root])
        new = Indexer(ExtractionConfig(base_path=new_root)).index_paths([new_root])
    except CodeModelError as e:
        console.print(f"[red]Error extracting code model: {e}[/red]")
        return 1

    detector = ChangeDetector()
    changes = detector.diff(old.entities.values(), new.entities.values())

    for change_type in (ChangeType.SIGNATURE_CHANGED, ChangeType.BODY_CHANGED,
                        ChangeType.ADDED, ChangeType.REMOVED, ChangeType.MOVED):
        entries = changes.of_type(change_type)
        if not entries:
            continue
        console.print(f"[bold cyan]{change_type.value}[/bold cyan] ({len(entries)})")
        for change in entries:
            console.print(f"  {change.file_path}: {change.name}")

    console.print(f"[cyan]Entities needing re-analysis:[/cyan] {len(changes.needs_reanalysis)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
