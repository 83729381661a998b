"""Vue single-file-component extractor.

The script block goes through the tree-sitter extractor; template usages come
from a line-indexed regex pass over the raw template text. The template pass
is approximate: it is not a template-language parser.
"""

from __future__ import annotations

import bisect
import re
import time
from html.parser import HTMLParser

from mieru.extractor.treesitter_extractor import TreeSitterExtractor
from mieru.models import ComponentUsage, FactRecord, Language, SfcBlock
from mieru.scanner.language_map import SCRIPT_LANG_TO_GRAMMAR

_BLOCK_TAGS = ("template", "script", "style")

_TEMPLATE_COMPONENT_RE = re.compile(r"<([A-Z][a-zA-Z0-9-]*)")
_OPEN_TAG_RE = re.compile(r"<[^>]*>?")
_PROP_RE = re.compile(r"(\w+)=")


class _SfcBlockFinder(HTMLParser):
    """Locates the top-level <template>, <script> and <style> blocks of an SFC."""

    def __init__(self, source: str):
        super().__init__(convert_charrefs=False)
        self._source = source
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]
        self.blocks: list[SfcBlock] = []
        self._open_tag: str | None = None
        self._open_attrs: dict[str, str | None] = {}
        self._open_line = 0
        self._content_start = 0
        self._content_line = 0
        self._template_depth = 0

    def _offset(self) -> int:
        line, col = self.getpos()
        return self._line_starts[line - 1] + col

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]):
        if self._open_tag is None:
            if tag in _BLOCK_TAGS:
                self._open_tag = tag
                self._open_attrs = dict(attrs)
                self._open_line = self.getpos()[0]
                self._content_start = self._offset() + len(self.get_starttag_text() or "")
                self._content_line = bisect.bisect_right(self._line_starts, self._content_start)
                self._template_depth = 1 if tag == "template" else 0
        elif self._open_tag == "template" and tag == "template":
            self._template_depth += 1

    def handle_endtag(self, tag: str):
        if self._open_tag is None or tag != self._open_tag:
            return
        if tag == "template":
            self._template_depth -= 1
            if self._template_depth > 0:
                return

        end_offset = self._offset()
        attrs = self._open_attrs
        self.blocks.append(SfcBlock(
            tag=tag,
            content=self._source[self._content_start:end_offset],
            start_line=self._open_line,
            end_line=self.getpos()[0],
            content_line=self._content_line,
            lang=attrs.get("lang"),
            setup="setup" in attrs,
            scoped="scoped" in attrs,
            attrs=attrs,
        ))
        self._open_tag = None
        self._open_attrs = {}


def split_sfc(source: str) -> list[SfcBlock]:
    """Split an SFC into its top-level blocks, in source order."""
    finder = _SfcBlockFinder(source)
    finder.feed(source)
    finder.close()
    return finder.blocks


def scan_template_usages(template: str, line_offset: int = 0) -> list[ComponentUsage]:
    """Regex scan for <CapitalizedTag occurrences, one record per occurrence."""
    usages: list[ComponentUsage] = []
    for index, line in enumerate(template.split("\n")):
        for m in _TEMPLATE_COMPONENT_RE.finditer(line):
            open_tag = _OPEN_TAG_RE.match(line, m.start())
            props = _PROP_RE.findall(open_tag.group(0)) if open_tag else []
            usages.append(ComponentUsage(
                name=m.group(1),
                props=props,
                line=index + 1 + line_offset,
            ))
    return usages


class VueSfcExtractor:
    """Builds a FactRecord for a .vue file."""

    def __init__(self, script_extractor: TreeSitterExtractor | None = None):
        self._script_extractor = script_extractor or TreeSitterExtractor()

    def extract(self, source: str, file_path: str, relative_path: str | None = None) -> FactRecord:
        start = time.perf_counter()
        record = FactRecord(
            file_path=file_path,
            relative_path=relative_path if relative_path is not None else file_path,
            language=Language.VUE,
        )
        try:
            blocks = split_sfc(source)
        except Exception as e:  # HTMLParser can raise on badly broken markup
            record.errors.append(f"Vue SFC parse error: {e}")
            record.parse_time = (time.perf_counter() - start) * 1000
            return record

        record.blocks = blocks
        template_usages: list[ComponentUsage] = []

        for block in blocks:
            content_line = block.content_line
            if block.tag == "script":
                grammar = SCRIPT_LANG_TO_GRAMMAR.get((block.lang or "js").lower(), "javascript")
                script = self._script_extractor.extract(
                    block.content,
                    file_path,
                    record.relative_path,
                    grammar=grammar,
                    language=Language.VUE,
                    line_offset=content_line - 1,
                )
                if script.errors:
                    record.errors.extend(script.errors)
                    continue
                record.imports.extend(script.imports)
                record.exports.extend(script.exports)
                record.definitions.extend(script.definitions)
                record.component_usages.extend(script.component_usages)
            elif block.tag == "template":
                template_usages.extend(scan_template_usages(block.content, content_line - 1))

        if record.errors:
            record.imports.clear()
            record.exports.clear()
            record.definitions.clear()
            record.component_usages.clear()
        else:
            record.component_usages.extend(template_usages)

        record.parse_time = (time.perf_counter() - start) * 1000
        return record

