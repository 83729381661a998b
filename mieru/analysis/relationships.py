"""Graph analysis over a built DependencyGraph: relationships, ranking, clusters."""

from __future__ import annotations

from collections import deque

from mieru.models import (
    ComponentRelation,
    DependencyGraph,
    RankedNode,
    RelationKind,
    RelationshipStats,
)


class RelationshipAnalyzer:
    """Classifies how two files relate through the dependency graph.

    Stateless: every method takes the graph it works on.
    """

    def analyze_relationship(self, graph: DependencyGraph, source: str, target: str) -> ComponentRelation:
        if target in graph.forward.get(source, []):
            return ComponentRelation(source, target, RelationKind.PARENT_CHILD, 0, [source, target])

        path = self.find_path(graph, source, target)
        if path:
            # Direct edges were handled above, so any forward path is indirect.
            return ComponentRelation(source, target, RelationKind.ANCESTOR, len(path) - 1, path)

        reverse_path = self.find_path(graph, target, source)
        if reverse_path:
            return ComponentRelation(
                source, target, RelationKind.DESCENDANT,
                len(reverse_path) - 1, list(reversed(reverse_path)),
            )

        if self.are_siblings(graph, source, target):
            return ComponentRelation(source, target, RelationKind.SIBLING, 0)

        return ComponentRelation(source, target, RelationKind.INDEPENDENT, 0)

    def analyze_relationships(self, graph: DependencyGraph) -> list[ComponentRelation]:
        """Classify every unordered node pair.

        A→B is kept unless independent; B→A is kept as well when it is not
        independent and differs in kind from A→B.
        """
        relations: list[ComponentRelation] = []
        keys = list(graph.nodes)
        for i, a in enumerate(keys):
            for b in keys[i + 1:]:
                ab = self.analyze_relationship(graph, a, b)
                if ab.relation != RelationKind.INDEPENDENT:
                    relations.append(ab)
                ba = self.analyze_relationship(graph, b, a)
                if ba.relation != RelationKind.INDEPENDENT and ba.relation != ab.relation:
                    relations.append(ba)
        return relations

    def find_path(self, graph: DependencyGraph, start: str, end: str) -> list[str]:
        """BFS shortest path; ties go to the first path discovered."""
        if start == end:
            return [start]

        queue: deque[tuple[str, list[str]]] = deque([(start, [start])])
        visited = {start}
        while queue:
            node, path = queue.popleft()
            for neighbor in graph.forward.get(node, []):
                if neighbor == end:
                    return path + [neighbor]
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append((neighbor, path + [neighbor]))
        return []

    def are_siblings(self, graph: DependencyGraph, a: str, b: str) -> bool:
        parents_b = set(self.get_parents(graph, b))
        return any(parent in parents_b for parent in self.get_parents(graph, a))

    def get_parents(self, graph: DependencyGraph, node: str) -> list[str]:
        return list(graph.reverse.get(node, []))

    def get_children(self, graph: DependencyGraph, node: str) -> list[str]:
        return list(graph.forward.get(node, []))

    def relationship_stats(self, relations: list[ComponentRelation]) -> RelationshipStats:
        stats = RelationshipStats(total_relations=len(relations))
        counters = {
            RelationKind.PARENT_CHILD: "parent_child",
            RelationKind.SIBLING: "sibling",
            RelationKind.ANCESTOR: "ancestor",
            RelationKind.DESCENDANT: "descendant",
            RelationKind.INDEPENDENT: "independent",
        }
        total_depth = 0
        for relation in relations:
            attr = counters[relation.relation]
            setattr(stats, attr, getattr(stats, attr) + 1)
            total_depth += relation.depth
            stats.max_depth = max(stats.max_depth, relation.depth)
        stats.avg_depth = total_depth / len(relations) if relations else 0.0
        return stats

    # ── Ranking ────────────────────────────────────────────────

    def most_depended(self, graph: DependencyGraph, limit: int = 10) -> list[RankedNode]:
        """Nodes ranked by incoming edge count."""
        counts = dict.fromkeys(graph.nodes, 0)
        for edge in graph.edges:
            counts[edge.target] = counts.get(edge.target, 0) + 1
        return self._rank(graph, counts, limit)

    def most_depending(self, graph: DependencyGraph, limit: int = 10) -> list[RankedNode]:
        """Nodes ranked by outgoing edge count."""
        counts = dict.fromkeys(graph.nodes, 0)
        for edge in graph.edges:
            counts[edge.source] = counts.get(edge.source, 0) + 1
        return self._rank(graph, counts, limit)

    @staticmethod
    def _rank(graph: DependencyGraph, counts: dict[str, int], limit: int) -> list[RankedNode]:
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [
            RankedNode(node=graph.nodes[key], count=count)
            for key, count in ranked[:limit]
            if key in graph.nodes
        ]

    # ── Clusters ───────────────────────────────────────────────

    def detect_clusters(self, graph: DependencyGraph, min_cluster_size: int = 3) -> list[list[str]]:
        """Connected components of the undirected view, in node discovery order."""
        undirected: dict[str, list[str]] = {key: [] for key in graph.nodes}
        for edge in graph.edges:
            undirected.setdefault(edge.source, []).append(edge.target)
            undirected.setdefault(edge.target, []).append(edge.source)

        visited: set[str] = set()
        clusters: list[list[str]] = []
        for start in graph.nodes:
            if start in visited:
                continue
            component: list[str] = []
            queue = deque([start])
            visited.add(start)
            while queue:
                current = queue.popleft()
                component.append(current)
                for neighbor in undirected.get(current, []):
                    if neighbor not in visited:
                        visited.add(neighbor)
                        queue.append(neighbor)
            if len(component) >= min_cluster_size:
                clusters.append(component)
        return clusters
