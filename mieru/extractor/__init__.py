"""Source fact extraction: one FactRecord per file, never raising."""

from __future__ import annotations

import logging
import time
from typing import Callable

from mieru.extractor.treesitter_extractor import TreeSitterExtractor, is_component_tag
from mieru.extractor.vue_extractor import VueSfcExtractor, scan_template_usages, split_sfc
from mieru.models import BatchExtraction, FactRecord, Language, SourceFile
from mieru.scanner.language_map import detect_language, grammar_for

logger = logging.getLogger(__name__)

_script_extractor = TreeSitterExtractor()
_vue_extractor = VueSfcExtractor(_script_extractor)


def extract_content(
    content: str,
    file_path: str,
    relative_path: str | None = None,
    language: Language | None = None,
) -> FactRecord:
    """Extract facts from in-memory source text.

    ``language`` is a hint; when omitted it is taken from the file extension.
    """
    language = language or detect_language(file_path)
    if language == Language.VUE:
        return _vue_extractor.extract(content, file_path, relative_path)
    grammar = grammar_for(file_path)
    if grammar is None:
        grammar = "typescript" if language == Language.TYPESCRIPT else "javascript"
    return _script_extractor.extract(
        content, file_path, relative_path, grammar=grammar, language=language,
    )


def extract_file(file: SourceFile) -> FactRecord:
    """Read and extract one scanned file."""
    start = time.perf_counter()
    try:
        content = file.path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        record = FactRecord(
            file_path=file.key,
            relative_path=file.relative_path,
            language=detect_language(file.path),
            errors=[f"Cannot read file: {e}"],
        )
        record.parse_time = (time.perf_counter() - start) * 1000
        return record
    record = extract_content(content, file.key, file.relative_path)
    logger.debug("extracted %s in %.1fms", file.relative_path, record.parse_time)
    return record


def extract_files(
    files: list[SourceFile],
    progress: Callable[[int, int], None] | None = None,
) -> BatchExtraction:
    """Extract every file; failures are counted, never dropped."""
    start = time.perf_counter()
    results: list[FactRecord] = []
    for i, f in enumerate(files):
        if progress:
            progress(i, len(files))
        results.append(extract_file(f))
    if progress:
        progress(len(files), len(files))
    error_count = sum(1 for r in results if r.errors)
    batch = BatchExtraction(
        results=results,
        total_files=len(files),
        success_count=len(results) - error_count,
        error_count=error_count,
        total_time=(time.perf_counter() - start) * 1000,
    )
    if error_count:
        logger.info("parsed %d of %d files (%d with errors)",
                    batch.success_count, batch.total_files, error_count)
    return batch


__all__ = [
    "TreeSitterExtractor",
    "VueSfcExtractor",
    "extract_content",
    "extract_file",
    "extract_files",
    "is_component_tag",
    "scan_template_usages",
    "split_sfc",
]
