"""React-like routing resolution: entry point, <Route> tables, file-system routes."""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath

from mieru.errors import EntryPointNotFoundError
from mieru.models import FactRecord, RouteInfo, RouterAnalysis, SourceFile
from mieru.pages.components import resolve_specifier
from mieru.pages.routes import join_route, page_name, route_from_path
from mieru.scanner.language_map import grammar_for

try:
    from tree_sitter_language_pack import get_parser
except ImportError as _err:
    raise ImportError(
        "tree-sitter-language-pack is required. Install with: "
        "pip install tree-sitter-language-pack"
    ) from _err

logger = logging.getLogger(__name__)

ENTRY_CANDIDATES = (
    "src/App.tsx", "src/App.jsx", "src/App.js", "src/App.ts",
    "App.tsx", "App.jsx", "App.js", "App.ts",
    "src/index.tsx", "src/index.jsx", "src/index.js",
    "src/main.tsx", "src/main.jsx", "src/main.js",
)

_ENTRY_NAME_RE = re.compile(r"^(?:App|index|main)\.(?:tsx?|jsx?)$")

ROUTING_SIGNATURES: list[re.Pattern] = [re.compile(p) for p in (
    r"from\s+['\"`]react-router(?:-dom)?['\"`]",
    r"from\s+['\"`]@reach/router['\"`]",
    r"from\s+['\"`]next/(?:router|navigation)['\"`]",
    r"<(?:BrowserRouter|HashRouter|MemoryRouter|Router)\b",
    r"<(?:Routes|Route|Switch)\b",
    r"\bcreate(?:Browser|Hash|Memory)Router\(",
    r"\buseRouter\(",
    r"\bgetServerSideProps\b",
    r"\bgetStaticProps\b",
)]

COMPONENT_DIRS = ("src/pages", "src/components", "src/views", "pages", "components", "views", "src")
COMPONENT_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")

_FS_ROUTE_EXTENSIONS = {".tsx", ".ts", ".jsx", ".js"}
_NEXT_SPECIAL_FILES = {"_app", "_document", "_error", "_middleware"}


def contains_routing(content: str) -> bool:
    return any(pattern.search(content) for pattern in ROUTING_SIGNATURES)


class ReactRouterAnalyzer:
    """Resolves routes for React-like projects.

    Order: an entry point with <Route> elements, then Next.js file-system
    routing. Raises EntryPointNotFoundError when neither yields anything.
    """

    def __init__(self, project_dir: Path, files: list[SourceFile], facts: dict[str, FactRecord]):
        self.project_dir = Path(project_dir)
        self.files = files
        self.facts = facts
        self._relative = {f.relative_path: f for f in files}
        self._by_key = {f.key: f for f in files}
        self._parsers: dict[str, object] = {}

    def analyze(self) -> RouterAnalysis:
        notes: list[str] = []
        entry = self.find_entry_point()
        routes: list[RouteInfo] = []

        if entry is not None:
            notes.append(f"Entry point: {entry}")
            routes = self.extract_routes(entry)
            notes.append(f"Found {len(routes)} <Route> elements in {entry}")
        else:
            logger.warning("No routing entry point found; trying file-system routes")
            notes.append("No routing entry point found")

        if not routes:
            routes = self.filesystem_routes()
            if routes:
                notes.append(f"Using {len(routes)} file-system routes")

        if entry is None and not routes:
            raise EntryPointNotFoundError(
                "No application entry point and no file-system routes found",
                details={"project_dir": str(self.project_dir)},
            )

        page_files: list[str] = []
        for route in routes:
            if route.component_file is None:
                route.component_file = self.find_component_file(route.component, entry)
            if route.component_file is None:
                notes.append(f"Unresolved route component: {route.component} ({route.path})")
            elif route.component_file not in page_files:
                page_files.append(route.component_file)

        return RouterAnalysis(entry_point=entry, routes=routes, page_files=page_files, notes=notes)

    # ── Entry point ────────────────────────────────────────────

    def find_entry_point(self) -> str | None:
        for candidate in ENTRY_CANDIDATES:
            path = self.project_dir / candidate
            if path.is_file() and contains_routing(self._read(path)):
                return candidate

        for f in self.files:
            if _ENTRY_NAME_RE.match(f.name) and contains_routing(self._read(f.path)):
                return f.relative_path
        return None

    # ── <Route> extraction ─────────────────────────────────────

    def extract_routes(self, entry: str) -> list[RouteInfo]:
        grammar = grammar_for(entry) or "javascript"
        if grammar == "typescript":
            # plain .ts entries may still hold JSX
            grammar = "tsx"
        source = self._read(self.project_dir / entry).encode("utf-8")
        tree = self._parser(grammar).parse(source)
        routes: list[RouteInfo] = []
        self._collect_routes(tree.root_node, "", routes)
        return routes

    def _collect_routes(self, node, prefix: str, routes: list[RouteInfo]) -> None:
        if node.type in ("jsx_element", "jsx_self_closing_element") and _tag_name(node) == "Route":
            attrs = _route_attributes(node)
            path = attrs.get("path")
            if attrs.get("index"):
                route_path = prefix or "/"
            elif path is not None:
                route_path = join_route(prefix or "/", path)
            else:
                route_path = None

            component = attrs.get("component") or attrs.get("element")
            if route_path is not None and component:
                routes.append(RouteInfo(
                    path=route_path,
                    component=component,
                    exact=bool(attrs.get("exact")),
                ))
            child_prefix = route_path if route_path is not None and not attrs.get("index") else prefix
            for child in node.children:
                if child.type in ("jsx_element", "jsx_self_closing_element", "jsx_expression"):
                    self._collect_routes(child, child_prefix, routes)
            return

        for child in node.children:
            self._collect_routes(child, prefix, routes)

    # ── File-system routing ────────────────────────────────────

    def filesystem_routes(self) -> list[RouteInfo]:
        """Next.js conventions: pages/ files, and page.* files under app/."""
        routes: list[RouteInfo] = []
        for f in self.files:
            path = PurePosixPath(f.relative_path)
            if path.suffix not in _FS_ROUTE_EXTENSIONS or path.stem in _NEXT_SPECIAL_FILES:
                continue
            dirs = path.parts[:-1]
            if "pages" in dirs:
                after = dirs[dirs.index("pages") + 1:]
                if after[:1] == ("api",):
                    continue
            elif "app" in dirs:
                if path.stem != "page":
                    continue
            else:
                continue
            routes.append(RouteInfo(
                path=route_from_path(f.relative_path),
                component=page_name(f.relative_path),
                component_file=f.relative_path,
            ))
        return routes

    # ── Component lookup ───────────────────────────────────────

    def find_component_file(self, component: str, entry: str | None) -> str | None:
        """Entry imports first, then conventional dirs, then a name search."""
        if entry is not None:
            entry_key = str(self.project_dir / entry)
            record = self.facts.get(entry_key)
            if record is not None:
                for imp in record.imports:
                    if imp.name != component:
                        continue
                    resolved = resolve_specifier(self.project_dir, entry_key, imp.source)
                    found = self._by_key.get(resolved) if resolved else None
                    if found is not None:
                        return found.relative_path

        for directory in COMPONENT_DIRS:
            for ext in COMPONENT_EXTENSIONS:
                candidate = f"{directory}/{component}{ext}"
                if candidate in self._relative:
                    return candidate

        for f in self.files:
            if PurePosixPath(f.relative_path).stem == component:
                return f.relative_path
        return None

    def _parser(self, grammar: str):
        if grammar not in self._parsers:
            self._parsers[grammar] = get_parser(grammar)
        return self._parsers[grammar]

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return ""


# ── JSX helpers ───────────────────────────────────────────────

def _opening_tag(node):
    if node.type == "jsx_element":
        return next((c for c in node.children if c.type == "jsx_opening_element"), None)
    return node


def _tag_name(node) -> str | None:
    tag = _opening_tag(node)
    if tag is None:
        return None
    name = tag.child_by_field_name("name")
    if name is None:
        return None
    if name.type == "member_expression":
        prop = name.child_by_field_name("property")
        return prop.text.decode("utf-8") if prop is not None else None
    if name.type in ("identifier", "nested_identifier"):
        return name.text.decode("utf-8").rsplit(".", 1)[-1]
    return None


def _route_attributes(node) -> dict[str, object]:
    """path, component, element, exact and index from a <Route> opening tag."""
    attrs: dict[str, object] = {}
    tag = _opening_tag(node)
    if tag is None:
        return attrs
    for attr in tag.named_children:
        if attr.type != "jsx_attribute" or not attr.named_children:
            continue
        name = attr.named_children[0].text.decode("utf-8")
        value = attr.named_children[1] if len(attr.named_children) > 1 else None
        if value is None:
            if name in ("exact", "index"):
                attrs[name] = True
            continue
        if name == "path" and value.type == "string":
            attrs["path"] = value.text.decode("utf-8")[1:-1]
        elif name == "path" and value.type == "jsx_expression":
            inner = value.named_children[0] if value.named_children else None
            if inner is not None and inner.type in ("string", "template_string"):
                attrs["path"] = inner.text.decode("utf-8")[1:-1]
        elif name in ("component", "element") and value.type == "jsx_expression":
            inner = value.named_children[0] if value.named_children else None
            component = _component_from_expression(inner)
            if component:
                attrs[name] = component
        elif name in ("exact", "index") and value.type == "jsx_expression":
            inner = value.named_children[0] if value.named_children else None
            attrs[name] = inner is not None and inner.type == "true"
    return attrs


def _component_from_expression(node) -> str | None:
    if node is None:
        return None
    if node.type == "identifier":
        return node.text.decode("utf-8")
    if node.type in ("jsx_element", "jsx_self_closing_element"):
        return _tag_name(node)
    return None
