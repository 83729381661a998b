"""Tests for the dependency graph builder."""

import sys

import pytest

from mieru.analysis import DependencyGraphBuilder, cycle_key
from mieru.models import AnalyzerConfig, EdgeKind, ExportShape, NodeType
from conftest import CYCLE_PROJECT, make_graph

# Only run if tree-sitter is installed
try:
    from mieru.pipeline import run_graph
    HAS_TREESITTER = True
except ImportError:
    HAS_TREESITTER = False

needs_treesitter = pytest.mark.skipif(not HAS_TREESITTER, reason="tree-sitter not installed")


def build(make_project, files):
    root = make_project(files)
    return root, run_graph(AnalyzerConfig(project_dir=root)).graph


# ── Building from a project ───────────────────────────────────

@needs_treesitter
class TestBuild:
    def test_mutual_imports_form_one_cycle(self, make_project):
        root, graph = build(make_project, CYCLE_PROJECT)
        a, b = str(root / "A.tsx"), str(root / "B.tsx")
        assert set(graph.nodes) == {a, b}
        assert {(e.source, e.target) for e in graph.edges} == {(a, b), (b, a)}
        assert len(graph.circular_dependencies) == 1
        cycle = graph.circular_dependencies[0]
        assert cycle.cycle in ([a, b, a], [b, a, b])
        assert cycle.depth == 2
        assert len(cycle.edges) == 2
        assert graph.stats.circular_count == 1

    def test_cycle_detection_can_be_disabled(self, make_project):
        root = make_project(CYCLE_PROJECT)
        graph = run_graph(AnalyzerConfig(project_dir=root, detect_circular=False)).graph
        assert graph.circular_dependencies == []
        assert graph.stats.total_edges == 2

    def test_bare_specifier_makes_no_edge(self, make_project):
        root, graph = build(make_project, {
            "src/util.ts": "import _ from 'lodash';\nexport const x = _.identity(1);\n",
        })
        assert len(graph.nodes) == 1
        assert graph.edges == []
        assert graph.stats.isolated_nodes == 1

    def test_repeated_usage_is_one_weighted_edge(self, make_project):
        root, graph = build(make_project, {
            "Page.tsx": """
                import Foo from './Foo';
                export default function Page() {
                  return <div><Foo a="1" /><Foo b="2" /><Foo a="3" /></div>;
                }
            """,
            "Foo.tsx": "export default function Foo() { return null; }\n",
        })
        page, foo = str(root / "Page.tsx"), str(root / "Foo.tsx")
        usage = [e for e in graph.edges if e.kind == EdgeKind.COMPONENT_USAGE]
        assert len(usage) == 1
        assert usage[0].weight == 3
        assert usage[0].props == ["a", "b"]
        imports = [e for e in graph.edges if e.kind == EdgeKind.IMPORT]
        assert len(imports) == 1
        assert graph.forward[page] == [foo]
        assert graph.reverse[foo] == [page]

    def test_node_naming_and_export_shape(self, make_project):
        root, graph = build(make_project, {
            "src/user-card.ts": "export const size = 1;\n",
            "src/Panel.tsx": "export default function MainPanel() { return null; }\nexport const x = 1;\n",
            "src/empty.js": "const a = 1;\n",
        })
        card = graph.nodes[str(root / "src/user-card.ts")]
        assert card.name == "UserCard"
        assert card.export_shape == ExportShape.NAMED
        assert card.node_type == NodeType.TS
        panel = graph.nodes[str(root / "src/Panel.tsx")]
        assert panel.name == "MainPanel"
        assert panel.export_shape == ExportShape.BOTH
        assert panel.node_type == NodeType.REACT
        assert panel.definition_count == 2
        empty = graph.nodes[str(root / "src/empty.js")]
        assert empty.export_shape == ExportShape.NONE
        assert empty.line_count == 2

    def test_edges_never_dangle(self, make_project):
        root, graph = build(make_project, {
            "src/main.ts": "import App from './App';\nimport Missing from './Missing';\n",
            "src/App.vue": "<template><div /></template>\n",
        })
        assert len(graph.edges) == 1
        for edge in graph.edges:
            assert edge.source in graph.nodes
            assert edge.target in graph.nodes

    def test_vanished_file_is_skipped(self, make_project):
        from mieru.extractor import extract_files
        from mieru.scanner import scan_project

        root = make_project({"a.ts": "export const a = 1;\n", "b.ts": "import { a } from './a';\n"})
        scan = scan_project(root)
        facts = extract_files(scan.files).results
        (root / "a.ts").unlink()

        graph = DependencyGraphBuilder().build(scan.files, facts)
        assert list(graph.nodes) == [str(root / "b.ts")]
        assert graph.edges == []


# ── Cycles and depth on hand-built graphs ─────────────────────

class TestCycles:
    def test_rotations_share_a_key(self):
        assert cycle_key(["b", "c", "a", "b"]) == cycle_key(["a", "b", "c", "a"]) == ("a", "b", "c")

    def test_distinct_cycles_over_same_nodes(self):
        assert cycle_key(["a", "b", "c", "a"]) != cycle_key(["a", "c", "b", "a"])

    def test_every_reported_cycle_is_closed_path(self):
        graph = make_graph([("a", "b"), ("b", "c"), ("c", "a"), ("c", "d"), ("d", "c")])
        cycles = DependencyGraphBuilder().detect_cycles(graph)
        assert len(cycles) == 2
        for circular in cycles:
            assert circular.cycle[0] == circular.cycle[-1]
            assert circular.depth == len(circular.cycle) - 1
            for source, target in zip(circular.cycle, circular.cycle[1:]):
                assert target in graph.forward[source]

    def test_acyclic_graph_has_no_cycles(self):
        graph = make_graph([("a", "b"), ("a", "c"), ("b", "c")])
        assert DependencyGraphBuilder().detect_cycles(graph) == []

    def test_long_chain_beyond_recursion_limit(self):
        names = [f"n{i:04d}" for i in range(sys.getrecursionlimit() + 500)]
        edges = list(zip(names, names[1:])) + [(names[-1], names[0])]
        cycles = DependencyGraphBuilder().detect_cycles(make_graph(edges))
        assert len(cycles) == 1
        assert cycles[0].cycle == names + [names[0]]
        assert cycles[0].depth == len(names)
        assert len(cycles[0].edges) == len(names)


class TestMaxDepth:
    def test_longest_chain(self):
        graph = make_graph([("a", "b"), ("b", "c"), ("a", "c")])
        assert DependencyGraphBuilder().calculate_max_depth(graph) == 2

    def test_isolated_nodes_are_depth_zero(self):
        graph = make_graph([], extra_nodes=("a", "b"))
        assert DependencyGraphBuilder().calculate_max_depth(graph) == 0

    def test_cycle_members_are_left_out(self):
        graph = make_graph([("x", "y"), ("y", "x"), ("z", "x")])
        assert DependencyGraphBuilder().calculate_max_depth(graph) == 1
