"""Analysis pipeline orchestrator: scan -> extract -> graph -> pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from mieru.analysis import DependencyGraphBuilder
from mieru.extractor import extract_files
from mieru.models import (
    AnalyzerConfig,
    BatchExtraction,
    DependencyGraph,
    PageStructure,
    ScanResult,
)
from mieru.pages import PageAnalyzer
from mieru.scanner import scan_project

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class AnalysisResult:
    """Everything one pipeline run produced."""
    scan: ScanResult
    extraction: BatchExtraction
    graph: DependencyGraph
    pages: PageStructure | None = None


def run_scan(config: AnalyzerConfig, progress: ProgressCallback | None = None) -> ScanResult:
    """Stage 1: Scan the project directory."""
    if progress:
        progress("Scanning", 0, 1)
    scan = scan_project(
        config.project_dir,
        skip_dirs=config.skip_dirs,
        extensions=config.extensions,
        include_hidden=config.include_hidden,
        max_depth=config.max_scan_depth,
    )
    if progress:
        progress("Scanning", 1, 1)
    logger.info("Scanned %d files in %s", scan.total_files, scan.project_path)
    return scan


def run_graph(
    config: AnalyzerConfig,
    progress: ProgressCallback | None = None,
) -> AnalysisResult:
    """Stages 1-3: scan, extract facts and build the dependency graph."""
    scan = run_scan(config, progress)

    # Stage 2: Extract
    extraction = extract_files(
        scan.files,
        progress=(lambda done, total: progress("Extracting", done, total)) if progress else None,
    )

    # Stage 3: Graph
    if progress:
        progress("Building graph", 0, 1)
    graph = DependencyGraphBuilder(detect_circular=config.detect_circular).build(
        scan.files, extraction.results,
    )
    if progress:
        progress("Building graph", 1, 1)
    logger.info(
        "Graph: %d nodes, %d edges, %d cycles",
        graph.stats.total_nodes, graph.stats.total_edges, graph.stats.circular_count,
    )
    return AnalysisResult(scan=scan, extraction=extraction, graph=graph)


def run_analysis(
    config: AnalyzerConfig,
    progress: ProgressCallback | None = None,
) -> AnalysisResult:
    """Run the full pipeline including page resolution.

    EntryPointNotFoundError from the page stage propagates to the caller.
    """
    result = run_graph(config, progress)

    # Stage 4: Pages
    if progress:
        progress("Resolving pages", 0, 1)
    result.pages = PageAnalyzer(config).analyze(
        result.scan.project_path, result.scan.files, result.extraction.results,
    )
    if progress:
        progress("Resolving pages", 1, 1)
    logger.info("Resolved %d pages", result.pages.stats.total_pages)
    return result
