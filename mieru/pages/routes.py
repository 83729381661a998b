"""Route inference from file-system conventions and link-target matching."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Iterable

from mieru.models import PageNode

ROUTE_ROOTS = ("pages", "app", "views", "routes", "screens")

_CATCH_ALL_RE = re.compile(r"^\[\[?\.\.\.([^\]]+)\]?\]$")
_DYNAMIC_RE = re.compile(r"\[([^\]]+)\]")
_GROUP_RE = re.compile(r"^\(.+\)$")
_NUXT_PARAM_RE = re.compile(r"^_(\w+)$")


def route_from_path(relative_path: str) -> str:
    """Derive a URL route from a project-relative file path.

    pages/index.tsx -> /
    pages/blog/[slug].tsx -> /blog/:slug
    app/(shop)/cart/page.tsx -> /cart
    pages/docs/[...path].tsx -> /docs/:path*
    pages/users/_id.vue -> /users/:id
    """
    path = PurePosixPath(relative_path)
    parts = list(path.parts)
    root = None
    for i, part in enumerate(parts[:-1]):
        if part in ROUTE_ROOTS:
            root = part
            parts = parts[i + 1:]
            break

    if not parts:
        return "/"
    parts[-1] = PurePosixPath(parts[-1]).stem
    is_vue = path.suffix == ".vue"

    if root == "app" and parts[-1] == "page":
        parts.pop()
    if parts and parts[-1] == "index":
        parts.pop()

    segments: list[str] = []
    for part in parts:
        if _GROUP_RE.match(part):
            continue
        catch_all = _CATCH_ALL_RE.match(part)
        if catch_all:
            segments.append(f":{catch_all.group(1)}*")
            continue
        nuxt_param = _NUXT_PARAM_RE.match(part) if is_vue else None
        if nuxt_param:
            segments.append(f":{nuxt_param.group(1)}")
            continue
        segments.append(_DYNAMIC_RE.sub(r":\1", part))

    return "/" + "/".join(segments)


def page_name(relative_path: str) -> str:
    """File stem, or the parent directory for index/page files ("Home" at the root)."""
    path = PurePosixPath(relative_path)
    if path.stem in ("index", "page"):
        parent = path.parent.name
        return parent if parent and parent not in ROUTE_ROOTS else "Home"
    return path.stem


def join_route(parent: str, child: str) -> str:
    """Join a nested route path onto its parent, the way nested <Route>s resolve."""
    if child.startswith("/"):
        return child
    base = parent.rstrip("/")
    return f"{base}/{child}" if child else (base or "/")


def route_pattern(route: str) -> re.Pattern:
    escaped = re.escape(route)
    escaped = re.sub(r":\w+\\\*", lambda _m: ".+", escaped)
    escaped = re.sub(r":\w+", lambda _m: "[^/]+", escaped)
    return re.compile(f"^{escaped}/?$")


def find_page_by_route(pages: Iterable[PageNode], target: str) -> PageNode | None:
    """Resolve a link target to a known page.

    Strategies, first success wins: exact route, trailing-slash variant,
    dynamic-segment pattern, then a loose match of any path segment against
    a page name.
    """
    candidates = list(pages)
    clean = target[1:] if target.startswith("#") else target
    clean = clean.rstrip("/") or "/"

    for page in candidates:
        if page.route == clean:
            return page

    for page in candidates:
        if page.route == f"{clean}/" or f"{page.route}/" == clean:
            return page

    for page in candidates:
        if route_pattern(page.route).match(clean):
            return page

    segments = [s for s in clean.split("/") if s]
    for page in candidates:
        if page.name.lower() in segments:
            return page
    return None
