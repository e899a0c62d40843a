"""
Command-line interface for codemodel.
"""
import os
import sys
import logging

import click
from rich.console import Console
from rich.table import Table
from rich.logging import RichHandler

from codemodel.analysis import ChangeDetector, ChangeType, compare_hashes, parse_hash_pair
from codemodel.config import ExtractionConfig
from codemodel.core import CodeModel, CodeModelError, DependencyKind
from codemodel.indexer import Indexer
from codemodel.languages import SUPPORTED_LANGUAGES

logger = logging.getLogger("codemodel")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=Console(stderr=True))],
        force=True,
    )


def _load_config(config_path, workers, languages, base_path=None) -> ExtractionConfig:
    overrides = {
        "max_workers": workers,
        "languages": list(languages) if languages else None,
        "base_path": base_path,
    }
    if config_path:
        return ExtractionConfig.from_file(config_path, **overrides)
    return ExtractionConfig(**{k: v for k, v in overrides.items() if v is not None})


def _index(source_path, config_path, workers, languages, base_path=None) -> CodeModel:
    config = _load_config(config_path, workers, languages, base_path)
    # Snapshots of a directory record paths relative to it
    if config.base_path is None and os.path.isdir(source_path):
        config.base_path = os.path.abspath(source_path)
    indexer = Indexer(config)
    with console.status(f"Extracting code model from {source_path}...", spinner="dots"):
        return indexer.index_paths([os.path.abspath(source_path)])


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


_config_options = [
    click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
                 help='JSON extraction config'),
    click.option('--workers', '-w', type=int, default=None, help='Concurrent units (default: 4)'),
    click.option('--language', '-l', 'languages', multiple=True, type=click.Choice(SUPPORTED_LANGUAGES),
                 help='Restrict to a language (repeatable)'),
]


def config_options(func):
    for option in reversed(_config_options):
        func = option(func)
    return func


@click.group()
@click.version_option("0.1.0")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """codemodel - call graphs and change fingerprints from tree-sitter parse trees."""
    _setup_logging(verbose)


@cli.command()
@click.argument('source_path', type=click.Path(exists=True))
@click.option('--output', '-o', type=click.Path(), help='Write the model snapshot to a JSON file')
@click.option('--base-path', type=click.Path(file_okay=False), help='Record file paths relative to this directory')
@config_options
def extract(source_path, output, base_path, config_path, workers, languages):
    """Extract entities and dependencies and show statistics."""
    try:
        model = _index(source_path, config_path, workers, languages, base_path)
    except (CodeModelError, ValueError, OSError) as e:
        _fail(f"extraction failed: {e}")

    stats = model.get_statistics()

    entity_table = Table(title="Entity Statistics")
    entity_table.add_column("Entity Kind", style="cyan")
    entity_table.add_column("Count", style="green")
    for kind, count in sorted(stats["entity_counts"].items()):
        entity_table.add_row(kind, str(count))

    dep_table = Table(title="Dependency Statistics")
    dep_table.add_column("Dependency Kind", style="cyan")
    dep_table.add_column("Count", style="green")
    for kind, count in sorted(stats["dependency_counts"].items()):
        dep_table.add_row(kind, str(count))

    console.print(entity_table)
    console.print(dep_table)

    for path, error in model.errors.items():
        console.print(f"[yellow]Skipped {path}: {error}[/yellow]")

    if output:
        model.export_to_json(output)
        console.print(f"[green]Snapshot written to {output}[/green]")

    console.print(
        f"[green]Extraction complete. {stats['total_entities']} entities and "
        f"{stats['total_dependencies']} dependencies "
        f"({stats['resolved_dependencies']} resolved).[/green]"
    )


@cli.command()
@click.argument('source_path', type=click.Path(exists=True))
@click.option('--kind', '-k', type=click.Choice([k.value for k in DependencyKind]), help='Only this dependency kind')
@click.option('--unresolved', is_flag=True, help='Only dependencies without a target in the batch')
@config_options
def deps(source_path, kind, unresolved, config_path, workers, languages):
    """List the dependencies extracted from a path."""
    try:
        model = _index(source_path, config_path, workers, languages)
    except (CodeModelError, ValueError, OSError) as e:
        _fail(f"extraction failed: {e}")

    dependencies = model.get_dependencies(kind=DependencyKind(kind) if kind else None)
    if unresolved:
        dependencies = [d for d in dependencies if not d.is_resolved]

    if not dependencies:
        console.print("[yellow]No dependencies found.[/yellow]")
        return

    table = Table(title=f"Dependencies ({len(dependencies)})")
    table.add_column("From", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Target", style="green")
    table.add_column("Resolved")
    table.add_column("Optional")
    table.add_column("Location")

    for dep in dependencies:
        source = model.get_entity(dep.from_id)
        table.add_row(
            source.qualified_name or source.name if source else dep.from_id,
            dep.kind.value,
            dep.target,
            dep.to_id or "-",
            "yes" if dep.optional else "",
            dep.location,
        )
    console.print(table)


_CHANGE_STYLES = {
    ChangeType.ADDED: "green",
    ChangeType.REMOVED: "red",
    ChangeType.SIGNATURE_CHANGED: "bold red",
    ChangeType.BODY_CHANGED: "yellow",
    ChangeType.MOVED: "cyan",
    ChangeType.UNCHANGED: "dim",
}


@cli.command()
@click.argument('old_snapshot', type=click.Path(exists=True, dir_okay=False))
@click.argument('new_snapshot', type=click.Path(exists=True, dir_okay=False))
@click.option('--all', 'show_all', is_flag=True, help='Also list unchanged entities')
def diff(old_snapshot, new_snapshot, show_all):
    """Classify entity changes between two snapshots written by 'extract -o'."""
    try:
        old_model = CodeModel.load_from_json(old_snapshot)
        new_model = CodeModel.load_from_json(new_snapshot)
    except (OSError, ValueError) as e:
        _fail(f"could not load snapshot: {e}")

    detector = ChangeDetector()
    changes = detector.diff(old_model.entities.values(), new_model.entities.values())

    table = Table(title="Entity Changes")
    table.add_column("Change")
    table.add_column("Kind", style="cyan")
    table.add_column("Entity")
    table.add_column("File")
    for change in changes.changes:
        if change.change == ChangeType.UNCHANGED and not show_all:
            continue
        style = _CHANGE_STYLES[change.change]
        table.add_row(f"[{style}]{change.change.value}[/{style}]", change.kind, change.name, change.file_path)
    console.print(table)

    summary = changes.summary()
    console.print(", ".join(f"{name}: {count}" for name, count in summary.items()))

    callers = detector.affected_callers(changes, new_model.dependencies)
    console.print(f"[bold]Needs re-analysis:[/bold] {len(changes.needs_reanalysis)} entities")
    if callers:
        console.print(f"[bold]Callers of broken signatures:[/bold] {len(callers)}")
        for caller_id in callers:
            caller = new_model.get_entity(caller_id)
            console.print(f"  {caller.qualified_name or caller.name if caller else caller_id}")


@cli.command(name="hash")
@click.argument('old_pair')
@click.argument('new_pair')
def hash_cmd(old_pair, new_pair):
    """Compare two stored hash pairs ("sig:body")."""
    for label, value in (("old", old_pair), ("new", new_pair)):
        if not parse_hash_pair(value).well_formed:
            console.print(f"[yellow]{label} hash pair '{value}' is malformed[/yellow]")

    sig_changed, body_changed = compare_hashes(old_pair, new_pair)
    console.print(f"signature changed: {'yes' if sig_changed else 'no'}")
    console.print(f"body changed: {'yes' if body_changed else 'no'}")


@cli.command()
def doctor():
    """Check that tree-sitter and every grammar load and parse."""
    from codemodel.parsers.diagnose_treesitter import check_tree_sitter, tree_sitter_version

    console.print(f"tree-sitter: {tree_sitter_version() or '[red]not installed[/red]'}")
    results = check_tree_sitter()

    table = Table(title="Grammars")
    table.add_column("Language", style="cyan")
    table.add_column("Module")
    table.add_column("Status")
    table.add_column("Detail")
    for result in results:
        status = "[green]ok[/green]" if result.ok else "[red]failed[/red]"
        table.add_row(result.language, result.module, status, result.detail)
    console.print(table)

    if not all(result.ok for result in results):
        _fail("some grammars are not usable")


if __name__ == "__main__":
    cli()
