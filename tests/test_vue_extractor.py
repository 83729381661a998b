"""Tests for Vue single-file-component extraction."""

import pytest
from pathlib import Path

from mieru.models import ImportKind, Language

FIXTURES = Path(__file__).parent / "fixtures"

# Only run if tree-sitter is installed
try:
    from mieru.extractor import extract_content, scan_template_usages, split_sfc
    HAS_TREESITTER = True
except ImportError:
    HAS_TREESITTER = False

pytestmark = pytest.mark.skipif(not HAS_TREESITTER, reason="tree-sitter not installed")


def _sample():
    path = FIXTURES / "sample.vue"
    return extract_content(path.read_text(), str(path), "sample.vue")


def test_blocks_and_attributes():
    blocks = split_sfc((FIXTURES / "sample.vue").read_text())
    assert [b.tag for b in blocks] == ["template", "script", "style"]
    template, script, style = blocks
    assert (template.start_line, template.end_line) == (1, 6)
    assert script.setup
    assert script.lang == "ts"
    assert script.start_line == 8
    assert style.scoped
    assert not script.scoped


def test_nested_template_tags_stay_in_one_block():
    source = "<template>\n  <template v-if=\"x\"><A /></template>\n</template>\n"
    blocks = split_sfc(source)
    assert len(blocks) == 1
    assert "<A />" in blocks[0].content


def test_script_lines_map_to_file_lines():
    record = _sample()
    assert record.language == Language.VUE
    by_name = {i.name: i for i in record.imports}
    assert by_name["UserCard"].kind == ImportKind.DEFAULT
    assert by_name["UserCard"].line == 9
    assert by_name["ref"].line == 10
    assert [(d.name, d.line) for d in record.definitions] == [("user", 11)]


def test_template_usages():
    record = _sample()
    usages = record.component_usages
    assert [u.name for u in usages] == ["UserCard"]
    assert usages[0].line == 3
    assert usages[0].props == ["user", "title"]


def test_kebab_case_tags_are_not_usages():
    usages = scan_template_usages("<div>\n<base-button />\n<router-link to=\"/\" />\n</div>")
    assert usages == []


def test_every_occurrence_recorded():
    usages = scan_template_usages("<Item /><Item />\n<Item />", line_offset=4)
    assert [u.line for u in usages] == [5, 5, 6]


def test_script_error_clears_facts():
    source = (
        "<template>\n  <Card />\n</template>\n"
        "<script>\nimport Card from './Card.vue'\nconst = ;\n</script>\n"
    )
    record = extract_content(source, "/p/Broken.vue")
    assert not record.ok
    assert record.imports == []
    assert record.component_usages == []
    assert "line 6" in record.errors[0]


def test_template_only_component():
    record = extract_content("<template>\n  <Foo a=\"1\" />\n</template>\n", "/p/T.vue")
    assert record.ok
    assert record.imports == []
    assert [(u.name, u.line, u.props) for u in record.component_usages] == [("Foo", 2, ["a"])]
