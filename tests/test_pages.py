"""Tests for page resolution, routing tables and component-tree expansion."""

import pytest

from mieru.errors import EntryPointNotFoundError
from mieru.models import (
    AnalyzerConfig,
    ComponentKind,
    ConnectionKind,
    FrameworkHint,
    PageKind,
    ProjectFlavor,
)
from conftest import NESTED_PAGE_PROJECT, REACT_ROUTER_PROJECT, VUE_PROJECT

# Only run if tree-sitter is installed
try:
    from mieru.extractor import extract_files
    from mieru.pages import ReactRouterAnalyzer, detect_flavor
    from mieru.pipeline import run_analysis
    from mieru.scanner import scan_project
    HAS_TREESITTER = True
except ImportError:
    HAS_TREESITTER = False

pytestmark = pytest.mark.skipif(not HAS_TREESITTER, reason="tree-sitter not installed")


def analyze(root, **options):
    return run_analysis(AnalyzerConfig(project_dir=root, **options)).pages


def by_name(components):
    return {c.name: c for c in components}


def router_for(root):
    scan = scan_project(root)
    facts = {r.file_path: r for r in extract_files(scan.files).results}
    return ReactRouterAnalyzer(root, scan.files, facts)


# ── Component-tree expansion ──────────────────────────────────

class TestExpansion:
    def test_nested_components(self, make_project):
        root = make_project(NESTED_PAGE_PROJECT)
        pages = analyze(root)
        home = pages.pages[str(root / "pages/Home.tsx")]
        comps = by_name(home.components)
        assert comps["Header"].depth == 0
        assert comps["Header"].parent is None
        assert comps["Header"].import_path == str(root / "components/Header.tsx")
        assert comps["Logo"].depth == 1
        assert comps["Logo"].parent == "Header"

    def test_usage_merged_into_import(self, make_project):
        root = make_project(NESTED_PAGE_PROJECT)
        home = analyze(root).pages[str(root / "pages/Home.tsx")]
        header = by_name(home.components)["Header"]
        assert header.usage_lines == [1, 3]
        assert header.kind == ComponentKind.REACT
        assert len([c for c in home.components if c.name == "Header"]) == 1

    def test_depth_limit(self, make_project):
        files = {
            "pages/Home.tsx": """
                import C1 from '../components/C1';
                export default function Home() { return <C1 />; }
            """,
        }
        for i in range(1, 6):
            files[f"components/C{i}.tsx"] = f"""
                import C{i + 1} from './C{i + 1}';
                export default function C{i}() {{ return <C{i + 1} />; }}
            """
        root = make_project(files)
        home = analyze(root).pages[str(root / "pages/Home.tsx")]
        depths = {c.name: c.depth for c in home.components}
        assert depths == {"C1": 0, "C2": 1, "C3": 2, "C4": 3}

        shallow = analyze(root, max_expansion_depth=1).pages[str(root / "pages/Home.tsx")]
        assert {c.name: c.depth for c in shallow.components} == {"C1": 0, "C2": 1}

    def test_every_child_sits_below_its_parent(self, make_project):
        root = make_project(NESTED_PAGE_PROJECT)
        for page in analyze(root).pages.values():
            depths = {c.name: c.depth for c in page.components}
            for comp in page.components:
                if comp.parent is not None:
                    assert comp.depth == depths[comp.parent] + 1

    def test_per_page_and_shared_tracking(self, make_project):
        files = dict(NESTED_PAGE_PROJECT)
        files["pages/About.tsx"] = """
            import Header from '../components/Header';
            export default function About() { return <Header />; }
        """
        root = make_project(files)
        about, home = str(root / "pages/About.tsx"), str(root / "pages/Home.tsx")

        per_page = analyze(root).pages
        assert set(by_name(per_page[about].components)) == {"Header", "Logo"}
        assert set(by_name(per_page[home].components)) == {"Header", "Logo"}

        shared = analyze(root, shared_tracking=True).pages
        assert set(by_name(shared[about].components)) == {"Header", "Logo"}
        assert set(by_name(shared[home].components)) == {"Header"}

    def test_self_recursive_component_terminates(self, make_project):
        root = make_project({
            "pages/Tree.tsx": """
                import Node from '../components/Node';
                export default function Tree() { return <Node />; }
            """,
            "components/Node.tsx": """
                import Node from './Node';
                export default function Node() { return <Node />; }
            """,
        })
        tree = analyze(root).pages[str(root / "pages/Tree.tsx")]
        assert [(c.name, c.depth) for c in tree.components] == [("Node", 0)]


# ── React routing ─────────────────────────────────────────────

class TestReactRouting:
    def test_routes_from_entry(self, make_project):
        root = make_project(REACT_ROUTER_PROJECT)
        pages = analyze(root)
        assert pages.flavor == ProjectFlavor.REACT
        assert pages.entry_point == "src/App.tsx"
        routes = {p.name: p.route for p in pages.pages.values()}
        assert routes == {"Layout": "/", "Home": "/", "Users": "/users", "UserDetail": "/users/:id"}
        home = pages.pages[str(root / "src/pages/Home.tsx")]
        assert home.kind == PageKind.PAGE
        assert [c.name for c in home.components] == ["Hero"]
        assert by_name(home.components)["Hero"].props == ["title"]
        assert pages.connections == []
        assert pages.stats.isolated_pages == 4

    def test_router_v5_switch(self, make_project):
        root = make_project({
            "src/App.jsx": """
                import { BrowserRouter, Switch, Route } from 'react-router-dom';
                import Dashboard from './Dashboard';

                export default function App() {
                  return (
                    <BrowserRouter>
                      <Switch>
                        <Route exact path="/" component={Dashboard} />
                        <Route path="/settings" component={Settings} />
                      </Switch>
                    </BrowserRouter>
                  );
                }
            """,
            "src/Dashboard.jsx": "export default function Dashboard() { return <div />; }\n",
            "src/pages/Settings.jsx": "export default function Settings() { return <form />; }\n",
        })
        routing = router_for(root).analyze()
        assert routing.entry_point == "src/App.jsx"
        assert [(r.path, r.component, r.exact, r.component_file) for r in routing.routes] == [
            ("/", "Dashboard", True, "src/Dashboard.jsx"),
            ("/settings", "Settings", False, "src/pages/Settings.jsx"),
        ]
        assert routing.page_files == ["src/Dashboard.jsx", "src/pages/Settings.jsx"]

    def test_unresolved_route_component_noted(self, make_project):
        root = make_project({
            "src/App.tsx": """
                import { Routes, Route } from 'react-router-dom';
                export default function App() {
                  return <Routes><Route path="/ghost" element={<Ghost />} /></Routes>;
                }
            """,
        })
        routing = router_for(root).analyze()
        assert routing.routes[0].component_file is None
        assert any("Ghost" in note for note in routing.notes)

    def test_one_page_per_routed_file(self, make_project):
        root = make_project({
            "src/App.tsx": """
                import { Routes, Route } from 'react-router-dom';
                import Home from './Home';

                export default function App() {
                  return (
                    <Routes>
                      <Route path="/" element={<Home />} />
                      <Route path="/start" element={<Home />} />
                      <Route path="/ghost" element={<Ghost />} />
                    </Routes>
                  );
                }
            """,
            "src/Home.tsx": "export default function Home() { return <main />; }\n",
        })
        pages = analyze(root)
        assert [(p.relative_path, p.name, p.route) for p in pages.pages.values()] == [
            ("src/Home.tsx", "Home", "/"),
        ]
        assert any("Ghost" in note for note in pages.notes)

    def test_next_filesystem_routes(self, make_project):
        root = make_project({
            "next.config.js": "module.exports = {};\n",
            "pages/index.tsx": "export default function Index() { return <main />; }\n",
            "pages/blog/[slug].tsx": "export default function Post() { return <article />; }\n",
            "pages/_app.tsx": "export default function MyApp() { return null; }\n",
            "pages/api/hello.ts": "export default function handler() {}\n",
            "app/dashboard/page.tsx": "export default function Page() { return <div />; }\n",
            "app/dashboard/layout.tsx": "export default function Layout() { return <div />; }\n",
        })
        pages = analyze(root)
        assert pages.entry_point is None
        routes = sorted(p.route for p in pages.pages.values())
        assert routes == ["/", "/blog/:slug", "/dashboard"]

    def test_no_entry_and_no_routes_raises(self, make_project):
        root = make_project({"src/widget.tsx": "export const W = () => <div />;\n"})
        with pytest.raises(EntryPointNotFoundError):
            analyze(root)


# ── Convention-based (Vue) resolution ─────────────────────────

class TestVuePages:
    def test_pages_and_routes(self, make_project):
        root = make_project(VUE_PROJECT)
        pages = analyze(root)
        assert pages.flavor == ProjectFlavor.VUE
        assert {p.relative_path: p.route for p in pages.pages.values()} == {
            "src/views/about.vue": "/about",
            "src/views/index.vue": "/",
        }
        index = pages.pages[str(root / "src/views/index.vue")]
        assert index.name == "Home"
        assert index.kind == PageKind.PAGE

    def test_component_tree_with_aliases_and_kebab_tags(self, make_project):
        root = make_project(VUE_PROJECT)
        index = analyze(root).pages[str(root / "src/views/index.vue")]
        comps = by_name(index.components)
        assert set(comps) == {"NavBar", "UserCard", "AppLogo"}
        assert comps["NavBar"].import_path == str(root / "src/components/NavBar.vue")
        assert comps["NavBar"].kind == ComponentKind.VUE
        assert (comps["NavBar"].depth, comps["UserCard"].depth) == (0, 0)
        assert comps["AppLogo"].depth == 1
        assert comps["AppLogo"].parent == "NavBar"
        # <user-card /> on template line 5 merged into the imported UserCard
        assert 5 in comps["UserCard"].usage_lines

    def test_connections(self, make_project):
        root = make_project(VUE_PROJECT)
        pages = analyze(root)
        index, about = str(root / "src/views/index.vue"), str(root / "src/views/about.vue")
        by_pair = {(c.source, c.target): c for c in pages.connections}
        assert by_pair[(index, about)].kind == ConnectionKind.ROUTE
        assert by_pair[(index, about)].weight == 1
        assert by_pair[(about, index)].kind == ConnectionKind.LINK
        assert by_pair[(about, index)].weight == 2
        assert pages.stats.total_links == 3
        assert pages.stats.total_pages == 2
        assert pages.stats.isolated_pages == 0
        assert pages.stats.total_components == 3

    def test_framework_hint_page_patterns(self, make_project):
        root = make_project({
            "lib/dashboard.js": "export const render = () => null;\n",
            "lib/helpers.js": "export const noop = () => {};\n",
        })
        hint = FrameworkHint(name="svelte", confidence=80, page_patterns=["lib/dash*.js"])
        pages = analyze(root, framework_hint=hint)
        assert pages.flavor == ProjectFlavor.UNKNOWN
        assert [p.relative_path for p in pages.pages.values()] == ["lib/dashboard.js"]

        weak = FrameworkHint(name="svelte", confidence=10, page_patterns=["lib/dash*.js"])
        assert analyze(root, framework_hint=weak).pages == {}

    def test_framework_hint_component_patterns(self, make_project):
        root = make_project({
            "src/views/index.vue": "<template>\n  <div><fancy-button /></div>\n</template>\n",
            "lib/ui/fancy_button.vue": (
                "<template><icon-glyph /></template>\n"
                "<script>\n"
                "import IconGlyph from './IconGlyph.vue';\n"
                "export default { components: { IconGlyph } };\n"
                "</script>\n"
            ),
            "lib/ui/IconGlyph.vue": "<template><i /></template>\n",
        })
        page_key = str(root / "src/views/index.vue")

        plain = by_name(analyze(root).pages[page_key].components)
        assert set(plain) == {"fancy-button"}

        hint = FrameworkHint(name="vue", confidence=80, component_patterns=["lib/ui/*.vue"])
        comps = by_name(analyze(root, framework_hint=hint).pages[page_key].components)
        assert set(comps) == {"fancy-button", "IconGlyph"}
        assert comps["IconGlyph"].depth == 1
        assert comps["IconGlyph"].parent == "fancy-button"


# ── Flavor detection ──────────────────────────────────────────

class TestFlavor:
    def _files(self, make_project, files):
        return scan_project(make_project(files)).files

    def test_config_files_win(self, make_project):
        files = self._files(make_project, {"nuxt.config.ts": "", "pages/index.tsx": ""})
        assert detect_flavor(files) == ProjectFlavor.VUE

    def test_extensions(self, make_project):
        assert detect_flavor(self._files(make_project, {"a.vue": "", "b.tsx": ""})) == ProjectFlavor.VUE

    def test_hint_only_breaks_ties(self, make_project):
        files = self._files(make_project, {"src/main.js": ""})
        assert detect_flavor(files) == ProjectFlavor.UNKNOWN
        assert detect_flavor(files, FrameworkHint(name="Nuxt", confidence=90)) == ProjectFlavor.VUE
        assert detect_flavor(files, FrameworkHint(name="Next.js", confidence=40)) == ProjectFlavor.UNKNOWN
