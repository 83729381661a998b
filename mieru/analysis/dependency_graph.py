"""Dependency graph builder: file graph from fact records, cycle detection, depth."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Iterator

from mieru.analysis.resolver import pascal_case_name, resolve_import_path
from mieru.models import (
    CircularDependency,
    DependencyGraph,
    EdgeKind,
    ExportKind,
    ExportShape,
    FactRecord,
    GraphEdge,
    GraphNode,
    GraphStats,
    ImportKind,
    ImportRecord,
    SourceFile,
)
from mieru.scanner.language_map import node_type_for

logger = logging.getLogger(__name__)


class DependencyGraphBuilder:
    """Build a dependency graph from per-file fact records."""

    def __init__(self, detect_circular: bool = True):
        self.detect_circular = detect_circular

    def build(self, files: list[SourceFile], facts: list[FactRecord]) -> DependencyGraph:
        start = time.perf_counter()
        graph = DependencyGraph()
        file_index = {f.key: f for f in files}
        resolved: dict[tuple[str, str], str | None] = {}

        # Step 1: one node per fact record whose file is still on disk
        for record in facts:
            file = file_index.get(record.file_path)
            if file is None:
                continue
            node = self._create_node(record, file)
            if node is not None:
                graph.nodes[node.file_path] = node
                graph.forward[node.file_path] = []
                graph.reverse[node.file_path] = []

        # Step 2: import edges, then component-usage edges, per file
        for record in facts:
            if record.file_path in graph.nodes:
                self._build_file_edges(graph, record, resolved)

        # Step 3: cycles and stats
        if self.detect_circular:
            graph.circular_dependencies = self.detect_cycles(graph)

        graph.stats = self._calculate_stats(graph, (time.perf_counter() - start) * 1000)
        return graph

    def _create_node(self, record: FactRecord, file: SourceFile) -> GraphNode | None:
        try:
            stat = file.path.stat()
            content = file.path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Skipping %s: file vanished before graph build (%s)", file.relative_path, e)
            return None

        has_default = any(e.kind == ExportKind.DEFAULT for e in record.exports)
        has_named = any(e.kind == ExportKind.NAMED for e in record.exports)
        if has_default and has_named:
            shape = ExportShape.BOTH
        elif has_default:
            shape = ExportShape.DEFAULT
        elif has_named:
            shape = ExportShape.NAMED
        else:
            shape = ExportShape.NONE

        return GraphNode(
            file_path=record.file_path,
            relative_path=record.relative_path,
            name=component_name(record),
            node_type=node_type_for(record.file_path),
            size=stat.st_size,
            last_modified=stat.st_mtime,
            export_shape=shape,
            definition_count=len(record.definitions),
            line_count=content.count("\n") + 1,
        )

    def _build_file_edges(
        self,
        graph: DependencyGraph,
        record: FactRecord,
        resolved: dict[tuple[str, str], str | None],
    ) -> None:
        source = record.file_path

        def resolve(specifier: str) -> str | None:
            key = (source, specifier)
            if key not in resolved:
                resolved[key] = resolve_import_path(source, specifier)
            return resolved[key]

        for imp in record.imports:
            target = resolve(imp.source)
            if target and target in graph.nodes:
                self._add_edge(graph, GraphEdge(
                    source=source,
                    target=target,
                    kind=EdgeKind.IMPORT,
                    import_name=imp.name,
                    line=imp.line,
                ))

        usage_edges: dict[str, GraphEdge] = {}
        for usage in record.component_usages:
            related = find_usage_import(record.imports, usage.name)
            if related is None:
                continue
            target = resolve(related.source)
            if not target or target not in graph.nodes:
                continue
            existing = usage_edges.get(target)
            if existing is not None:
                existing.weight += 1
                existing.props = list(dict.fromkeys(existing.props + usage.props))
            else:
                edge = GraphEdge(
                    source=source,
                    target=target,
                    kind=EdgeKind.COMPONENT_USAGE,
                    import_name=usage.name,
                    line=usage.line,
                    props=list(dict.fromkeys(usage.props)),
                )
                usage_edges[target] = edge
                self._add_edge(graph, edge)

    def detect_cycles(self, graph: DependencyGraph) -> list[CircularDependency]:
        """Detect cycles with DFS, restarting from every unvisited node.

        The walk keeps an explicit stack of (node, neighbor iterator) so long
        import chains do not hit the interpreter's recursion limit.
        """
        found: list[CircularDependency] = []
        visited: set[str] = set()
        rec_stack: set[str] = set()
        path: list[str] = []

        def enter(node_id: str) -> tuple[str, Iterator[str]]:
            visited.add(node_id)
            rec_stack.add(node_id)
            path.append(node_id)
            return node_id, iter(graph.forward.get(node_id, []))

        for root in graph.nodes:
            if root in visited:
                continue
            stack = [enter(root)]
            while stack:
                node_id, neighbors = stack[-1]
                for neighbor in neighbors:
                    if neighbor not in visited:
                        stack.append(enter(neighbor))
                        break
                    if neighbor in rec_stack:
                        cycle = path[path.index(neighbor):] + [neighbor]
                        found.append(CircularDependency(
                            cycle=cycle,
                            depth=len(cycle) - 1,
                            edges=_cycle_edges(cycle, graph.edges),
                        ))
                else:
                    stack.pop()
                    path.pop()
                    rec_stack.discard(node_id)

        return _dedupe_cycles(found)

    def calculate_max_depth(self, graph: DependencyGraph) -> int:
        """Longest dependency chain via Kahn's algorithm.

        Nodes on a cycle never reach in-degree 0 and are left out.
        """
        in_degree = {node_id: 0 for node_id in graph.nodes}
        for targets in graph.forward.values():
            for target in targets:
                in_degree[target] = in_degree.get(target, 0) + 1

        queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
        distance = {node_id: 0 for node_id in queue}
        max_depth = 0

        while queue:
            current = queue.popleft()
            current_distance = distance.get(current, 0)
            for neighbor in graph.forward.get(current, []):
                new_distance = current_distance + 1
                if new_distance > distance.get(neighbor, 0):
                    distance[neighbor] = new_distance
                    max_depth = max(max_depth, new_distance)
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        return max_depth

    def _calculate_stats(self, graph: DependencyGraph, elapsed: float) -> GraphStats:
        connected: set[str] = set()
        for edge in graph.edges:
            connected.add(edge.source)
            connected.add(edge.target)
        return GraphStats(
            total_nodes=len(graph.nodes),
            total_edges=len(graph.edges),
            circular_count=len(graph.circular_dependencies),
            isolated_nodes=len(graph.nodes) - len(connected),
            max_depth=self.calculate_max_depth(graph),
            analysis_time=elapsed,
        )

    @staticmethod
    def _add_edge(graph: DependencyGraph, edge: GraphEdge) -> None:
        graph.edges.append(edge)
        targets = graph.forward.setdefault(edge.source, [])
        if edge.target not in targets:
            targets.append(edge.target)
        sources = graph.reverse.setdefault(edge.target, [])
        if edge.source not in sources:
            sources.append(edge.source)


def component_name(record: FactRecord) -> str:
    """Prefer the default-exported definition's name, else the file name."""
    for definition in record.definitions:
        if definition.exported and definition.export_kind == ExportKind.DEFAULT:
            return definition.name
    return pascal_case_name(record.file_path)


def find_usage_import(imports: list[ImportRecord], usage_name: str) -> ImportRecord | None:
    """The import a component usage refers to: same bound name, or a default
    import whose module file name PascalCases to the usage name."""
    for imp in imports:
        if imp.name == usage_name:
            return imp
        if imp.kind == ImportKind.DEFAULT and pascal_case_name(imp.source) == usage_name:
            return imp
    return None


def _cycle_edges(cycle: list[str], edges: list[GraphEdge]) -> list[GraphEdge]:
    result: list[GraphEdge] = []
    for source, target in zip(cycle, cycle[1:]):
        edge = next((e for e in edges if e.source == source and e.target == target), None)
        if edge is not None:
            result.append(edge)
    return result


def _dedupe_cycles(cycles: list[CircularDependency]) -> list[CircularDependency]:
    """Collapse rotations of the same cycle (A→B→A == B→A→B).

    Keyed by the rotation that starts at the smallest path, so two different
    cycles over the same node set stay distinct.
    """
    unique: list[CircularDependency] = []
    seen: set[tuple[str, ...]] = set()
    for circular in cycles:
        key = cycle_key(circular.cycle)
        if key not in seen:
            seen.add(key)
            unique.append(circular)
    return unique


def cycle_key(cycle: list[str]) -> tuple[str, ...]:
    ring = cycle[:-1] if len(cycle) > 1 and cycle[0] == cycle[-1] else list(cycle)
    if not ring:
        return ()
    pivot = ring.index(min(ring))
    return tuple(ring[pivot:] + ring[:pivot])
