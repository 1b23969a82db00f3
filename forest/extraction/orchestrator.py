"""Extraction orchestrator: per-file backend selection and run-wide merging.

For each file the orchestrator tries backends in priority order. The
tree-sitter backend refuses files it cannot parse cleanly by raising
``ParseError``; the line scanner then takes over. Falling back is silent
apart from a debug log entry and the file's ``used_fallback`` flag.

``analyse_project`` runs that per file over a whole directory. Files may be
extracted on a worker pool, but results are always merged on the calling
thread in discovery order, so the run-wide collections have a single
writer and the output is identical for any worker count.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from forest.config import ForestConfig
from forest.extraction.cache import ParseCache
from forest.extraction.types import AnalysisResults, FileError, FileExtraction
from forest.types.errors import ErrorCode, ParseError, ResourceError
from forest.utils.files import discover_rust_files, read_source
from forest.utils.logger import logger

if TYPE_CHECKING:
    from forest.extraction.protocols import ExtractionBackend


class ExtractionOrchestrator:
    """Routes each file through backends in priority order.

    Usage:
        orchestrator = ExtractionOrchestrator()
        results = orchestrator.analyse_project("path/to/crate")
    """

    def __init__(
        self,
        backends: list[ExtractionBackend] | None = None,
        config: ForestConfig | None = None,
        parse_cache: ParseCache | None = None,
    ) -> None:
        self._config = config or ForestConfig()
        if backends is not None:
            self._backends = sorted(backends, key=lambda b: b.priority, reverse=True)
        else:
            # Default: tree-sitter + line scanner
            from forest.extraction.backends import LineScannerBackend, TreeSitterBackend

            if parse_cache is None:
                # A run parses each file once; keep only the trees in flight
                parse_cache = ParseCache(max_entries=self._config.workers)
            self._backends = [
                TreeSitterBackend(
                    parse_cache=parse_cache,
                    line_resolution=self._config.line_resolution,
                ),  # priority=50
                LineScannerBackend(),  # priority=10
            ]

    @property
    def config(self) -> ForestConfig:
        return self._config

    @property
    def backends(self) -> list[ExtractionBackend]:
        """Registered backends sorted by priority (highest first)."""
        return list(self._backends)

    def register_backend(self, backend: ExtractionBackend) -> None:
        """Register a new backend and re-sort by priority."""
        self._backends.append(backend)
        self._backends.sort(key=lambda b: b.priority, reverse=True)

    # ================================================================
    # Single file
    # ================================================================

    def extract(self, content: str, file_path: str) -> FileExtraction:
        """Extract records from one file's content.

        Never raises for malformed source. A backend that fails on a file is
        skipped in favour of the next one; a file that no backend handles
        yields an empty extraction flagged ``used_fallback``.
        """
        if not content.strip():
            return FileExtraction(file_path=file_path, backend_used="none")

        skipped = 0
        for backend in self._backends:
            if not backend.supports(content):
                skipped += 1
                continue
            try:
                extraction = backend.extract(content, file_path)
            except ParseError as e:
                logger.debug(f"{backend.name} declined {file_path}: {e}; trying next backend")
                skipped += 1
                continue
            except Exception:
                logger.opt(exception=True).debug(
                    f"{backend.name} failed on {file_path}; trying next backend"
                )
                skipped += 1
                continue
            if skipped:
                logger.debug(f"{file_path}: using fallback backend {backend.name}")
            return replace(extraction, used_fallback=skipped > 0)

        logger.warning(f"No backend could extract {file_path}")
        return FileExtraction(file_path=file_path, backend_used="none", used_fallback=True)

    def extract_file(self, path: str | Path) -> FileExtraction:
        """Read and extract one file.

        Raises:
            ResourceError: If the file cannot be read.
        """
        content = read_source(path)
        return self.extract(content, str(path))

    # ================================================================
    # Whole project
    # ================================================================

    def _extract_path(self, path: Path) -> FileExtraction | FileError:
        try:
            size = path.stat().st_size
        except OSError as e:
            error = ResourceError.from_os_error(e, str(path), "stat")
            logger.warning(error.get_formatted_message())
            return FileError(str(path), str(error), error.code)
        if size > self._config.max_file_size:
            logger.warning(
                f"Skipping {path}: {size} bytes exceeds limit of {self._config.max_file_size}"
            )
            return FileError(str(path), f"file too large ({size} bytes)", ErrorCode.FILE_READ_FAILED)

        try:
            return self.extract_file(path)
        except ResourceError as e:
            logger.warning(f"Skipping unreadable file {path}: {e}")
            return FileError(str(path), str(e), e.code)

    def analyse_project(self, root: str | Path) -> AnalysisResults:
        """Analyse every Rust file under ``root``.

        Raises:
            ResourceError: If ``root`` is not a directory.
        """
        files = discover_rust_files(root, self._config)
        results = AnalysisResults()

        if self._config.workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(
                max_workers=self._config.workers, thread_name_prefix="forest"
            ) as pool:
                outcomes = list(pool.map(self._extract_path, files))
        else:
            outcomes = [self._extract_path(path) for path in files]

        # Single writer: merge in discovery order on this thread
        for outcome in outcomes:
            if isinstance(outcome, FileError):
                results.add_error(outcome)
            else:
                results.add(outcome)

        logger.info(
            f"Analysed {results.files_analyzed} files under {root}: "
            f"{len(results.mutable_bindings)} mutable, "
            f"{len(results.immutable_bindings)} immutable, "
            f"{len(results.declarations)} declarations "
            f"({len(results.fallback_files)} via fallback, {len(results.errors)} skipped)"
        )
        return results


def analyse_project(root: str | Path, config: ForestConfig | None = None) -> AnalysisResults:
    """Convenience wrapper around ``ExtractionOrchestrator.analyse_project``."""
    return ExtractionOrchestrator(config=config).analyse_project(root)
