"""Data models for the mieru analysis pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class Language(enum.Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    VUE = "vue"
    UNKNOWN = "unknown"


class ImportKind(enum.Enum):
    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"
    SIDE_EFFECT = "side-effect"


class ExportKind(enum.Enum):
    DEFAULT = "default"
    NAMED = "named"


class DefinitionKind(enum.Enum):
    FUNCTION = "function"
    VARIABLE = "variable"
    CLASS = "class"


class NodeType(enum.Enum):
    VUE = "vue"
    REACT = "react"
    JS = "js"
    TS = "ts"


class ExportShape(enum.Enum):
    DEFAULT = "default"
    NAMED = "named"
    BOTH = "both"
    NONE = "none"


class EdgeKind(enum.Enum):
    IMPORT = "import"
    COMPONENT_USAGE = "component-usage"
    DYNAMIC_IMPORT = "dynamic-import"
    REQUIRE = "require"


class RelationKind(enum.Enum):
    PARENT_CHILD = "parent-child"
    SIBLING = "sibling"
    ANCESTOR = "ancestor"
    DESCENDANT = "descendant"
    INDEPENDENT = "independent"


class ProjectFlavor(enum.Enum):
    REACT = "react"
    VUE = "vue"
    UNKNOWN = "unknown"


class PageKind(enum.Enum):
    PAGE = "page"
    LAYOUT = "layout"
    COMPONENT = "component"


class ComponentKind(enum.Enum):
    VUE = "vue"
    REACT = "react"
    LAYOUT = "layout"
    COMPONENT = "component"


class LinkKind(enum.Enum):
    ROUTER_LINK = "router-link"
    HREF = "href"
    NAVIGATION = "navigation"
    DYNAMIC = "dynamic"


class ConnectionKind(enum.Enum):
    NAVIGATION = "navigation"
    ROUTE = "route"
    LINK = "link"


# ── Scanner ───────────────────────────────────────────────────

@dataclass(frozen=True)
class SourceFile:
    """One file found by the scanner. Immutable once created."""
    name: str
    path: Path
    relative_path: str
    extension: str
    size: int
    last_modified: float

    @property
    def key(self) -> str:
        return str(self.path)


@dataclass
class ScanResult:
    files: list[SourceFile] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_files: int = 0
    scan_duration: float = 0.0
    project_path: Path = field(default_factory=lambda: Path("."))
    scanned_at: str = ""


# ── Fact records ──────────────────────────────────────────────

@dataclass
class ImportRecord:
    kind: ImportKind
    name: str
    source: str
    line: int
    original: str | None = None  # exported name when renamed: import { a as b }


@dataclass
class ExportRecord:
    kind: ExportKind
    name: str
    line: int


@dataclass
class DefinitionRecord:
    kind: DefinitionKind
    name: str
    line: int
    exported: bool = False
    export_kind: ExportKind | None = None


@dataclass
class ComponentUsage:
    name: str
    props: list[str] = field(default_factory=list)
    line: int = 0


@dataclass
class SfcBlock:
    """A top-level block of a Vue single-file component."""
    tag: str  # "script" | "template" | "style"
    content: str
    start_line: int
    end_line: int
    content_line: int = 0  # line on which content begins
    lang: str | None = None
    setup: bool = False
    scoped: bool = False
    attrs: dict[str, str | None] = field(default_factory=dict)


@dataclass
class FactRecord:
    """Normalized per-file extraction output."""
    file_path: str
    relative_path: str
    language: Language
    imports: list[ImportRecord] = field(default_factory=list)
    exports: list[ExportRecord] = field(default_factory=list)
    definitions: list[DefinitionRecord] = field(default_factory=list)
    component_usages: list[ComponentUsage] = field(default_factory=list)
    blocks: list[SfcBlock] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    parse_time: float = 0.0  # milliseconds

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class BatchExtraction:
    results: list[FactRecord] = field(default_factory=list)
    total_files: int = 0
    success_count: int = 0
    error_count: int = 0
    total_time: float = 0.0


# ── Dependency graph ──────────────────────────────────────────

@dataclass
class GraphNode:
    file_path: str
    relative_path: str
    name: str
    node_type: NodeType
    size: int
    last_modified: float
    export_shape: ExportShape
    definition_count: int
    line_count: int


@dataclass
class GraphEdge:
    source: str
    target: str
    kind: EdgeKind
    import_name: str = ""
    line: int = 0
    weight: int = 1
    props: list[str] = field(default_factory=list)


@dataclass
class CircularDependency:
    cycle: list[str]
    depth: int
    edges: list[GraphEdge] = field(default_factory=list)


@dataclass
class GraphStats:
    total_nodes: int = 0
    total_edges: int = 0
    circular_count: int = 0
    isolated_nodes: int = 0
    max_depth: int = 0
    analysis_time: float = 0.0


@dataclass
class DependencyGraph:
    nodes: dict[str, GraphNode] = field(default_factory=dict)
    edges: list[GraphEdge] = field(default_factory=list)
    circular_dependencies: list[CircularDependency] = field(default_factory=list)
    stats: GraphStats = field(default_factory=GraphStats)
    forward: dict[str, list[str]] = field(default_factory=dict)  # source -> [targets]
    reverse: dict[str, list[str]] = field(default_factory=dict)  # target -> [sources]


@dataclass
class ComponentRelation:
    source: str
    target: str
    relation: RelationKind
    depth: int = 0
    path: list[str] = field(default_factory=list)


@dataclass
class RelationshipStats:
    parent_child: int = 0
    sibling: int = 0
    ancestor: int = 0
    descendant: int = 0
    independent: int = 0
    total_relations: int = 0
    avg_depth: float = 0.0
    max_depth: int = 0


@dataclass
class RankedNode:
    node: GraphNode
    count: int


# ── Pages ─────────────────────────────────────────────────────

@dataclass
class FrameworkHint:
    """Framework guess handed in from outside the core. Treated as a hint only."""
    name: str
    version: str | None = None
    confidence: int = 0  # 0-100
    page_patterns: list[str] = field(default_factory=list)
    component_patterns: list[str] = field(default_factory=list)


@dataclass
class RouteInfo:
    path: str
    component: str
    component_file: str | None = None  # relative to the project root
    exact: bool = False


@dataclass
class RouterAnalysis:
    entry_point: str | None
    routes: list[RouteInfo] = field(default_factory=list)
    page_files: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


@dataclass
class PageComponent:
    name: str
    import_path: str = ""  # resolved absolute path, "" when unresolved
    usage_lines: list[int] = field(default_factory=list)
    kind: ComponentKind = ComponentKind.COMPONENT
    props: list[str] = field(default_factory=list)
    specifier: str = ""  # module specifier as written
    depth: int | None = None
    parent: str | None = None


@dataclass
class PageLink:
    target: str
    kind: LinkKind
    text: str = ""
    line: int = 0


@dataclass
class PageNode:
    file_path: str
    relative_path: str
    name: str
    route: str
    kind: PageKind = PageKind.PAGE
    components: list[PageComponent] = field(default_factory=list)
    links: list[PageLink] = field(default_factory=list)
    size: int = 0
    last_modified: float = 0.0


@dataclass
class PageConnection:
    source: str
    target: str
    kind: ConnectionKind
    weight: int = 1


@dataclass
class PageStats:
    total_pages: int = 0
    total_components: int = 0
    total_links: int = 0
    isolated_pages: int = 0
    analysis_time: float = 0.0


@dataclass
class PageStructure:
    pages: dict[str, PageNode] = field(default_factory=dict)
    connections: list[PageConnection] = field(default_factory=list)
    stats: PageStats = field(default_factory=PageStats)
    flavor: ProjectFlavor = ProjectFlavor.UNKNOWN
    entry_point: str | None = None
    notes: list[str] = field(default_factory=list)


# ── Configuration ─────────────────────────────────────────────

DEFAULT_SKIP_DIRS = [
    "node_modules", ".git", "dist", "build", ".nuxt", ".next",
    "coverage", ".nyc_output", ".cache",
]

DEFAULT_EXTENSIONS = [".vue", ".jsx", ".tsx", ".js", ".ts"]


@dataclass
class AnalyzerConfig:
    """Configuration for the analysis pipeline."""
    project_dir: Path = field(default_factory=lambda: Path("."))
    skip_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    include_hidden: bool = False
    max_scan_depth: int | None = None
    max_expansion_depth: int = 3
    max_repeats: int = 3
    shared_tracking: bool = False
    detect_circular: bool = True
    min_cluster_size: int = 3
    top_n: int = 10
    framework_hint: FrameworkHint | None = None
