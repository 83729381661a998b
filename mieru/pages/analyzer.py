"""Page & route resolution: which files are pages, their routes and component trees."""

from __future__ import annotations

import fnmatch
import logging
import time
from pathlib import Path

from mieru.models import (
    AnalyzerConfig,
    FactRecord,
    PageKind,
    PageNode,
    PageStats,
    PageStructure,
    ProjectFlavor,
    SourceFile,
)
from mieru.pages.classification import is_page_file, page_kind
from mieru.pages.components import ComponentIndex
from mieru.pages.expansion import expand_components
from mieru.pages.flavor import HINT_MIN_CONFIDENCE, detect_flavor
from mieru.pages.links import build_connections, extract_links
from mieru.pages.react_router import ReactRouterAnalyzer
from mieru.pages.routes import page_name, route_from_path

logger = logging.getLogger(__name__)


class PageAnalyzer:
    """Builds a PageStructure for one project.

    React-like projects resolve pages through their routing table (or
    file-system routes); Vue-like and unknown projects match page files by
    path convention and also collect navigation links between pages.
    """

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()

    def analyze(
        self,
        project_dir: Path,
        files: list[SourceFile],
        facts: list[FactRecord],
    ) -> PageStructure:
        start = time.perf_counter()
        project_dir = Path(project_dir).absolute()
        index = ComponentIndex(
            project_dir,
            files,
            {r.file_path: r for r in facts},
            component_patterns=self._hint_patterns("component_patterns"),
        )
        flavor = detect_flavor(files, self.config.framework_hint)
        logger.info("Detected %s project flavor", flavor.value)

        if flavor == ProjectFlavor.REACT:
            structure = self._analyze_react(project_dir, index)
        else:
            structure = self._analyze_by_convention(index)
        structure.flavor = flavor

        self._expand(structure, index)
        structure.connections = build_connections(structure.pages)
        structure.stats = self._stats(structure, (time.perf_counter() - start) * 1000)
        return structure

    def _analyze_react(self, project_dir: Path, index: ComponentIndex) -> PageStructure:
        routing = ReactRouterAnalyzer(project_dir, index.files, index.facts).analyze()
        structure = PageStructure(entry_point=routing.entry_point, notes=list(routing.notes))
        first_route = {}
        for route in routing.routes:
            if route.component_file is not None:
                first_route.setdefault(route.component_file, route)
        for relative_path in routing.page_files:
            file = index.file_by_relative(relative_path)
            if file is None:
                logger.warning("Routed page file not scanned: %s", relative_path)
                continue
            route = first_route[relative_path]
            structure.pages[file.key] = PageNode(
                file_path=file.key,
                relative_path=file.relative_path,
                name=route.component,
                route=route.path,
                kind=PageKind.PAGE,
                components=index.direct_components(file),
                size=file.size,
                last_modified=file.last_modified,
            )
        return structure

    def _analyze_by_convention(self, index: ComponentIndex) -> PageStructure:
        structure = PageStructure()
        extra_patterns = self._hint_patterns("page_patterns")
        for file in index.files:
            if not (is_page_file(file.relative_path)
                    or any(fnmatch.fnmatch(file.relative_path, p) for p in extra_patterns)):
                continue
            structure.pages[file.key] = PageNode(
                file_path=file.key,
                relative_path=file.relative_path,
                name=page_name(file.relative_path),
                route=route_from_path(file.relative_path),
                kind=page_kind(file.relative_path),
                components=index.direct_components(file),
                links=extract_links(_read(file.path)),
                size=file.size,
                last_modified=file.last_modified,
            )
        return structure

    def _hint_patterns(self, attr: str) -> list[str]:
        hint = self.config.framework_hint
        if hint is None or hint.confidence < HINT_MIN_CONFIDENCE:
            return []
        return list(getattr(hint, attr))

    def _expand(self, structure: PageStructure, index: ComponentIndex) -> None:
        shared: set[str] = set()
        for page in structure.pages.values():
            processed = shared if self.config.shared_tracking else set()
            processed.add(page.file_path)
            page.components = expand_components(
                page.components,
                index,
                processed,
                max_depth=self.config.max_expansion_depth,
                max_repeats=self.config.max_repeats,
            )

    @staticmethod
    def _stats(structure: PageStructure, elapsed: float) -> PageStats:
        connected: set[str] = set()
        for conn in structure.connections:
            connected.add(conn.source)
            connected.add(conn.target)
        return PageStats(
            total_pages=len(structure.pages),
            total_components=sum(len(p.components) for p in structure.pages.values()),
            total_links=sum(c.weight for c in structure.connections),
            isolated_pages=len(structure.pages) - len(connected),
            analysis_time=elapsed,
        )


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read page %s: %s", path, e)
        return ""
