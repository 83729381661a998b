"""Shared fixtures: throwaway frontend projects and hand-built graphs."""

import textwrap
from pathlib import Path

import pytest

from mieru.analysis import DependencyGraphBuilder
from mieru.models import DependencyGraph, EdgeKind, ExportShape, GraphEdge, GraphNode, NodeType


def write_project(root: Path, files: dict[str, str]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path):
    """Return a factory: make_project({"src/App.tsx": "..."}) -> project root."""
    def _make(files: dict[str, str], name: str = "project") -> Path:
        return write_project(tmp_path / name, files)
    return _make


# ── Sample projects ───────────────────────────────────────────

CYCLE_PROJECT = {
    "A.tsx": """
        import B from './B';
        export default function A() { return null; }
    """,
    "B.tsx": """
        import A from './A';
        export default function B() { return null; }
    """,
}

NESTED_PAGE_PROJECT = {
    "pages/Home.tsx": """
        import Header from '../components/Header';
        export default function Home() {
          return <Header />;
        }
    """,
    "components/Header.tsx": """
        import Logo from './Logo';
        export default function Header() {
          return <header><Logo /></header>;
        }
    """,
    "components/Logo.tsx": """
        export default function Logo() {
          return <img />;
        }
    """,
}

REACT_ROUTER_PROJECT = {
    "src/App.tsx": """
        import { BrowserRouter, Routes, Route } from 'react-router-dom';
        import Home from './pages/Home';
        import Users from './pages/Users';
        import UserDetail from './pages/UserDetail';
        import Layout from './components/Layout';

        export default function App() {
          return (
            <BrowserRouter>
              <Routes>
                <Route path="/" element={<Layout />}>
                  <Route index element={<Home />} />
                  <Route path="users" element={<Users />} />
                  <Route path="users/:id" element={<UserDetail />} />
                </Route>
              </Routes>
            </BrowserRouter>
          );
        }
    """,
    "src/pages/Home.tsx": """
        import Hero from '../components/Hero';
        export default function Home() { return <Hero title="hi" />; }
    """,
    "src/pages/Users.tsx": """
        export default function Users() { return <ul />; }
    """,
    "src/pages/UserDetail.tsx": """
        export default function UserDetail() { return <div />; }
    """,
    "src/components/Layout.tsx": """
        export default function Layout() { return <main />; }
    """,
    "src/components/Hero.tsx": """
        export default function Hero() { return <section />; }
    """,
}

VUE_PROJECT = {
    "src/views/index.vue": """
        <template>
          <div>
            <NavBar />
            <router-link to="/about">About us</router-link>
            <user-card />
          </div>
        </template>

        <script>
        import NavBar from '@/components/NavBar.vue'
        import UserCard from '@/components/UserCard.vue'
        export default { name: 'HomePage' }
        </script>
    """,
    "src/views/about.vue": """
        <template>
          <div>
            <a href="/">Home</a>
            <button @click="$router.push('/')">Back</button>
          </div>
        </template>
    """,
    "src/components/NavBar.vue": """
        <template>
          <nav><AppLogo /></nav>
        </template>

        <script setup>
        import AppLogo from './AppLogo.vue'
        </script>
    """,
    "src/components/AppLogo.vue": """
        <template>
          <img src="logo.png" />
        </template>
    """,
    "src/components/UserCard.vue": """
        <template>
          <div>card</div>
        </template>
    """,
}


# ── Hand-built graphs ─────────────────────────────────────────

def make_graph(edges: list[tuple[str, str]], extra_nodes: tuple[str, ...] = ()) -> DependencyGraph:
    """Import graph keyed by short names, for graph algorithms without a project."""
    graph = DependencyGraph()
    names = list(dict.fromkeys([n for edge in edges for n in edge] + list(extra_nodes)))
    for name in names:
        graph.nodes[name] = GraphNode(
            file_path=name, relative_path=name, name=name, node_type=NodeType.TS,
            size=0, last_modified=0.0, export_shape=ExportShape.NONE,
            definition_count=0, line_count=1,
        )
        graph.forward[name] = []
        graph.reverse[name] = []
    for source, target in edges:
        DependencyGraphBuilder._add_edge(graph, GraphEdge(source, target, EdgeKind.IMPORT))
    return graph
