"""Page & route resolution."""

from __future__ import annotations

from mieru.pages.analyzer import PageAnalyzer
from mieru.pages.expansion import expand_components
from mieru.pages.flavor import detect_flavor
from mieru.pages.links import build_connections, extract_links
from mieru.pages.react_router import ReactRouterAnalyzer
from mieru.pages.routes import find_page_by_route, page_name, route_from_path

__all__ = [
    "PageAnalyzer",
    "ReactRouterAnalyzer",
    "build_connections",
    "detect_flavor",
    "expand_components",
    "extract_links",
    "find_page_by_route",
    "page_name",
    "route_from_path",
]
