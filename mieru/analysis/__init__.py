"""Dependency graph construction and graph analysis."""

from __future__ import annotations

from mieru.analysis.dependency_graph import DependencyGraphBuilder, cycle_key
from mieru.analysis.relationships import RelationshipAnalyzer
from mieru.analysis.resolver import pascal_case_name, resolve_import_path

__all__ = [
    "DependencyGraphBuilder",
    "RelationshipAnalyzer",
    "cycle_key",
    "pascal_case_name",
    "resolve_import_path",
]
