"""
Batch pipeline: parse, hash and extract the call graph of many compilation units.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from codemodel.analysis.call_graph import CallGraphExtractor
from codemodel.analysis.hashing import HashEngine
from codemodel.analysis.symbol_resolver import SymbolResolver
from codemodel.config import ExtractionConfig
from codemodel.core import CodeModel, CodeModelError, Dependency, EntityKind
from codemodel.languages import LanguageAdapter, get_adapter, language_for_path
from codemodel.parsers import ParsedEntity, ParseResult, get_parser


class Unit(NamedTuple):
    """A parsed, hashed compilation unit waiting for call-graph extraction."""

    result: ParseResult
    entities: List[ParsedEntity]


class Indexer:
    """
    Runs the three extraction phases over a batch of files.

    1. Parse, extract and hash every unit, concurrently.
    2. Build one symbol table from every unit's entities.
    3. Extract dependencies per unit, concurrently, against that table.

    A unit that fails is logged, recorded in ``CodeModel.errors`` and skipped.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
        self.hash_engine = HashEngine()
        self.logger = logging.getLogger(__name__)
        # Adapters are read-only after construction and shared across threads
        self._adapters: Dict[str, LanguageAdapter] = {}

    def display_path(self, file_path: str) -> str:
        """Path recorded on entities: relative to ``base_path`` when one is set."""
        if not self.config.base_path:
            return file_path
        return os.path.relpath(file_path, self.config.base_path)

    def adapter_for(self, language: str) -> LanguageAdapter:
        if language not in self._adapters:
            self._adapters[language] = get_adapter(language, self.config)
        return self._adapters[language]

    def collect_files(self, paths: Union[str, Iterable[str]]) -> List[Tuple[str, str]]:
        """
        Find the source files to index.

        Args:
            paths: Files or directories

        Returns:
            Sorted (file path, language) pairs
        """
        if isinstance(paths, str):
            paths = [paths]

        found = set()
        for path in paths:
            if os.path.isfile(path):
                language = language_for_path(path)
                if language and self.config.language_enabled(language):
                    found.add((path, language))
                continue

            if not os.path.isdir(path):
                self.logger.warning(f"Path not found: {path}")
                continue

            for root, dirs, files in os.walk(path):
                dirs[:] = [d for d in dirs if d not in self.config.exclude_dirs]
                for file in files:
                    language = language_for_path(file)
                    if language and self.config.language_enabled(language):
                        found.add((os.path.join(root, file), language))

        self.logger.info(f"Found {len(found)} source files")
        return sorted(found)

    def index_paths(self, paths: Union[str, Iterable[str]]) -> CodeModel:
        """Index every supported file under ``paths``."""
        files = self.collect_files(paths)
        jobs = [(file_path, language, self._file_job(file_path, language)) for file_path, language in files]
        return self._run(jobs)

    def index_directory(self, directory_path: str) -> CodeModel:
        return self.index_paths([directory_path])

    def index_source(self, source: Union[str, bytes], file_path: str, language: str) -> CodeModel:
        """
        Index a single in-memory unit.

        Args:
            source: Source code
            file_path: Path recorded on the entities
            language: Language of the source

        Returns:
            The CodeModel of this unit alone
        """
        job = self._source_job(source, file_path, language)
        return self._run([(file_path, language, job)])

    def index_sources(self, sources: Iterable[Tuple[Union[str, bytes], str, str]]) -> CodeModel:
        """Index several in-memory units, given as (source, file_path, language)."""
        jobs = [(path, language, self._source_job(source, path, language))
                for source, path, language in sources]
        return self._run(jobs)

    # Phases

    def _file_job(self, file_path: str, language: str) -> Callable[[], Unit]:
        def job() -> Unit:
            parser = get_parser(language, self.adapter_for(language))
            return self._extract_unit(parser, parser.parse_file(file_path, self.display_path(file_path)))
        return job

    def _source_job(self, source, file_path: str, language: str) -> Callable[[], Unit]:
        def job() -> Unit:
            parser = get_parser(language, self.adapter_for(language))
            return self._extract_unit(parser, parser.parse_source(source, file_path))
        return job

    def _extract_unit(self, parser, result: ParseResult) -> Unit:
        entities = parser.extract_entities(result)
        for parsed in entities:
            self.hash_engine.apply(parsed.entity, parsed.body, result.source)
        return Unit(result, entities)

    def _dependencies(self, unit: Unit, resolver: SymbolResolver) -> List[Dependency]:
        extractor = CallGraphExtractor(unit.result, self.adapter_for(unit.result.language), resolver)
        return extractor.extract(p.entity.to_call_graph_entity(p.node) for p in unit.entities)

    def _run(self, jobs: List[Tuple[str, str, Callable[[], Unit]]]) -> CodeModel:
        model = CodeModel()
        # Adapters are created up front so worker threads only read the cache
        for _, language, _ in jobs:
            self.adapter_for(language)

        units: List[Unit] = []
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [(path, executor.submit(job)) for path, _, job in jobs]
            for path, future in futures:
                try:
                    units.append(future.result())
                except CodeModelError as e:
                    self.logger.error(f"Skipping {path}: {e}")
                    model.record_error(path, e)
                except Exception as e:
                    self.logger.exception(f"Unexpected error in {path}, skipping it")
                    model.record_error(path, e)

        for unit in units:
            for parsed in unit.entities:
                model.add_entity(parsed.entity)

        # Imports name other symbols rather than declaring them
        resolver = SymbolResolver.from_entities(
            e for e in model.entities.values() if e.kind != EntityKind.IMPORT
        )

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [(unit.result.file_path, executor.submit(self._dependencies, unit, resolver))
                       for unit in units]
            for path, future in futures:
                try:
                    for dep in future.result():
                        model.add_dependency(dep)
                except CodeModelError as e:
                    self.logger.error(f"Skipping dependencies of {path}: {e}")
                    model.record_error(path, e)
                except Exception as e:
                    self.logger.exception(f"Unexpected error extracting dependencies of {path}")
                    model.record_error(path, e)

        stats = model.get_statistics()
        self.logger.info(
            f"Indexed {len(units)} units: {stats['total_entities']} entities, "
            f"{stats['total_dependencies']} dependencies ({stats['resolved_dependencies']} resolved)"
        )
        return model
