"""Navigation links found in page source, and page-to-page connections."""

from __future__ import annotations

import re

from mieru.models import PageConnection, PageLink, PageNode
from mieru.pages.classification import EXTERNAL_PREFIXES, LINK_PATTERNS, connection_kind
from mieru.pages.routes import find_page_by_route

_LINK_TEXT_RE = re.compile(r">([^<]+)<")


def extract_links(content: str) -> list[PageLink]:
    """Regex scan for router calls, link components and anchors.

    A target position matched by several patterns (router.push inside
    this.$router.push, say) is recorded once, by the first pattern.
    """
    seen: set[int] = set()
    links: list[tuple[int, PageLink]] = []
    for pattern, kind in LINK_PATTERNS:
        for m in pattern.finditer(content):
            target = m.group(1)
            if not target or target.startswith(EXTERNAL_PREFIXES) or m.start(1) in seen:
                continue
            seen.add(m.start(1))
            links.append((m.start(), PageLink(
                target=target,
                kind=kind,
                text=_link_text(content, m.start()),
                line=content.count("\n", 0, m.start()) + 1,
            )))
    links.sort(key=lambda item: item[0])
    return [link for _, link in links]


def _link_text(content: str, index: int) -> str:
    snippet = content[max(0, index - 50):index + 100]
    m = _LINK_TEXT_RE.search(snippet)
    return m.group(1).strip() if m else ""


def build_connections(pages: dict[str, PageNode]) -> list[PageConnection]:
    """Resolve links to known pages; repeated (from, to) pairs add weight."""
    connections: dict[tuple[str, str], PageConnection] = {}
    for page in pages.values():
        for link in page.links:
            target = find_page_by_route(pages.values(), link.target)
            if target is None:
                continue
            key = (page.file_path, target.file_path)
            existing = connections.get(key)
            if existing is not None:
                existing.weight += 1
            else:
                connections[key] = PageConnection(
                    source=page.file_path,
                    target=target.file_path,
                    kind=connection_kind(link.kind),
                )
    return list(connections.values())
