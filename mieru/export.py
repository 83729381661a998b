"""JSON-ready conversion of analysis results for report and diagram renderers."""

from __future__ import annotations

import enum
from dataclasses import asdict, is_dataclass
from pathlib import PurePath
from typing import Any

from mieru.models import (
    BatchExtraction,
    ComponentRelation,
    DependencyGraph,
    PageStructure,
    RankedNode,
    RelationshipStats,
    ScanResult,
)


def to_plain(value: Any) -> Any:
    """Recursively turn dataclasses, enums and paths into JSON-safe values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_plain(v) for k, v in asdict(value).items()}
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_plain(v) for v in value]
    return value


def scan_to_dict(scan: ScanResult) -> dict[str, Any]:
    return {
        "project_path": str(scan.project_path),
        "total_files": scan.total_files,
        "scan_duration": scan.scan_duration,
        "scanned_at": scan.scanned_at,
        "errors": list(scan.errors),
        "files": [
            {
                "name": f.name,
                "relative_path": f.relative_path,
                "extension": f.extension,
                "size": f.size,
                "last_modified": f.last_modified,
            }
            for f in scan.files
        ],
    }


def extraction_summary(extraction: BatchExtraction) -> dict[str, Any]:
    return {
        "total_files": extraction.total_files,
        "success_count": extraction.success_count,
        "error_count": extraction.error_count,
        "total_time": extraction.total_time,
        "errors": {
            r.relative_path: list(r.errors) for r in extraction.results if r.errors
        },
    }


def graph_to_dict(graph: DependencyGraph) -> dict[str, Any]:
    return {
        "nodes": [to_plain(node) for node in graph.nodes.values()],
        "edges": [to_plain(edge) for edge in graph.edges],
        "circular_dependencies": [
            {"cycle": list(c.cycle), "depth": c.depth} for c in graph.circular_dependencies
        ],
        "stats": to_plain(graph.stats),
    }


def relationships_to_dict(
    relations: list[ComponentRelation],
    stats: RelationshipStats,
    most_depended: list[RankedNode],
    most_depending: list[RankedNode],
    clusters: list[list[str]],
) -> dict[str, Any]:
    def ranked(items: list[RankedNode]) -> list[dict[str, Any]]:
        return [
            {"file_path": r.node.file_path, "name": r.node.name, "count": r.count}
            for r in items
        ]

    return {
        "relations": [to_plain(r) for r in relations],
        "stats": to_plain(stats),
        "most_depended": ranked(most_depended),
        "most_depending": ranked(most_depending),
        "clusters": [list(c) for c in clusters],
    }


def pages_to_dict(structure: PageStructure) -> dict[str, Any]:
    return {
        "flavor": structure.flavor.value,
        "entry_point": structure.entry_point,
        "pages": [to_plain(page) for page in structure.pages.values()],
        "connections": [to_plain(c) for c in structure.connections],
        "stats": to_plain(structure.stats),
        "notes": list(structure.notes),
    }
