"""Bounded recursive expansion of a page's component tree.

Expansion state is passed in explicitly: ``processed`` holds the file paths
already expanded. Give each page a fresh set for independent trees, or share
one set across pages to expand every component file only once per run.
"""

from __future__ import annotations

import logging

from mieru.models import PageComponent
from mieru.pages.components import ComponentIndex, merge_duplicates

logger = logging.getLogger(__name__)


def expand_components(
    components: list[PageComponent],
    index: ComponentIndex,
    processed: set[str],
    max_depth: int = 3,
    max_repeats: int = 3,
) -> list[PageComponent]:
    """Expand direct components (depth 0) into a flat, deduplicated tree.

    Each level is expanded before the next, so a component file is expanded
    at its shallowest occurrence and every child sits exactly one level below
    the parent it names.
    """
    for comp in components:
        comp.depth = 0
        comp.parent = None
    level = [(comp, ()) for comp in components]
    expanded = _expand_level(level, index, processed, 0, max_depth, max_repeats)
    return merge_duplicates(list(components) + expanded)


def _expand_level(
    level: list[tuple[PageComponent, tuple[str, ...]]],
    index: ComponentIndex,
    processed: set[str],
    depth: int,
    max_depth: int,
    max_repeats: int,
) -> list[PageComponent]:
    if depth >= max_depth or not level:
        return []

    next_level: list[tuple[PageComponent, tuple[str, ...]]] = []
    for component, ancestors in level:
        if ancestors.count(component.name) >= max_repeats:
            logger.debug("Truncating recursive component %s at depth %d", component.name, depth)
            continue

        file = index.find_component_file(component)
        if file is None or file.key in processed:
            continue
        processed.add(file.key)

        lineage = ancestors + (component.name,)
        for child in index.direct_components(file):
            child.depth = depth + 1
            child.parent = component.name
            next_level.append((child, lineage))

    children = [child for child, _ in next_level]
    return children + _expand_level(next_level, index, processed, depth + 1, max_depth, max_repeats)
