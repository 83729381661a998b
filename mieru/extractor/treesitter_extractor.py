"""Tree-sitter fact extractor for JavaScript, TypeScript, JSX and TSX sources."""

from __future__ import annotations

import time

from mieru.models import (
    ComponentUsage,
    DefinitionKind,
    DefinitionRecord,
    ExportKind,
    ExportRecord,
    FactRecord,
    ImportKind,
    ImportRecord,
    Language,
)

try:
    from tree_sitter_language_pack import get_parser
except ImportError as _err:
    raise ImportError(
        "tree-sitter-language-pack is required. Install with: "
        "pip install tree-sitter-language-pack"
    ) from _err

_FUNCTION_TYPES = {"function_declaration", "generator_function_declaration"}
_CLASS_TYPES = {"class_declaration", "abstract_class_declaration"}
_VARIABLE_TYPES = {"lexical_declaration", "variable_declaration"}
_JSX_TYPES = {"jsx_element", "jsx_self_closing_element"}
_LOOP_HEADERS = {"for_statement", "for_in_statement"}


def is_component_tag(name: str) -> bool:
    """Capitalized tags are components; lowercase and hyphenated ones are HTML."""
    return bool(name) and "A" <= name[0] <= "Z" and "-" not in name


class TreeSitterExtractor:
    """Parses one source text into a FactRecord.

    Every node is visited once, top-down. Six rules fire by node shape
    (import, export, function, variable statement, class, JSX element);
    matching a rule never stops the descent into children.
    """

    def __init__(self):
        self._parser_cache: dict[str, object] = {}

    def extract(
        self,
        source: str,
        file_path: str,
        relative_path: str | None = None,
        grammar: str = "tsx",
        language: Language = Language.TYPESCRIPT,
        line_offset: int = 0,
    ) -> FactRecord:
        start = time.perf_counter()
        record = FactRecord(
            file_path=file_path,
            relative_path=relative_path if relative_path is not None else file_path,
            language=language,
        )
        try:
            source_bytes = source.encode("utf-8")
            tree = self._get_parser(grammar).parse(source_bytes)
            root = tree.root_node
            if root.has_error:
                line = _first_error_line(root) + line_offset
                record.errors.append(f"Syntax error at line {line}")
            else:
                self._visit(root, record, line_offset)
        except Exception as e:  # parser failures must not escape a batch
            _clear_facts(record)
            record.errors.append(f"{type(e).__name__}: {e}")
        record.parse_time = (time.perf_counter() - start) * 1000
        return record

    # ── Traversal ──────────────────────────────────────────────

    def _visit(self, root, record: FactRecord, line_offset: int) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            node_type = node.type

            if node_type == "import_statement":
                self._extract_import(node, record, line_offset)
            elif node_type == "export_statement":
                self._extract_export(node, record, line_offset)
            elif node_type in _FUNCTION_TYPES:
                self._extract_named_definition(node, DefinitionKind.FUNCTION, record, line_offset)
            elif node_type in _VARIABLE_TYPES:
                self._extract_variables(node, record, line_offset)
            elif node_type in _CLASS_TYPES:
                self._extract_named_definition(node, DefinitionKind.CLASS, record, line_offset)
            elif node_type in _JSX_TYPES:
                self._extract_jsx_usage(node, record, line_offset)

            stack.extend(reversed(node.children))

    # ── Rules ──────────────────────────────────────────────────

    def _extract_import(self, node, record: FactRecord, line_offset: int) -> None:
        source_node = node.child_by_field_name("source")
        if source_node is None or source_node.type != "string":
            return
        source = _string_value(source_node)
        line = _line(node, line_offset)

        clause = next((c for c in node.children if c.type == "import_clause"), None)
        if clause is None:
            record.imports.append(ImportRecord(ImportKind.SIDE_EFFECT, "", source, line))
            return

        for child in clause.named_children:
            if child.type == "identifier":
                record.imports.append(ImportRecord(ImportKind.DEFAULT, _text(child), source, line))
            elif child.type == "namespace_import":
                ident = next((c for c in child.named_children if c.type == "identifier"), None)
                if ident is not None:
                    record.imports.append(
                        ImportRecord(ImportKind.NAMESPACE, _text(ident), source, line)
                    )
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name_node = spec.child_by_field_name("name")
                    alias_node = spec.child_by_field_name("alias")
                    if name_node is None:
                        continue
                    imported = _name_value(name_node)
                    if alias_node is not None:
                        record.imports.append(ImportRecord(
                            ImportKind.NAMED, _text(alias_node), source, line, original=imported,
                        ))
                    else:
                        record.imports.append(ImportRecord(ImportKind.NAMED, imported, source, line))

    def _extract_export(self, node, record: FactRecord, line_offset: int) -> None:
        # Exported declarations are recorded by the definition rules.
        if node.child_by_field_name("declaration") is not None:
            return
        line = _line(node, line_offset)
        child_types = {c.type for c in node.children}

        if "default" in child_types or "=" in child_types:
            record.exports.append(ExportRecord(ExportKind.DEFAULT, "default", line))
            return

        clause = next((c for c in node.children if c.type == "export_clause"), None)
        if clause is None:
            return
        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            alias_node = spec.child_by_field_name("alias")
            name_node = alias_node or spec.child_by_field_name("name")
            if name_node is not None:
                record.exports.append(ExportRecord(ExportKind.NAMED, _name_value(name_node), line))

    def _extract_named_definition(
        self, node, kind: DefinitionKind, record: FactRecord, line_offset: int,
    ) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = _text(name_node)
        line = _line(node, line_offset)
        export_kind = _export_kind(node)
        record.definitions.append(DefinitionRecord(
            kind=kind,
            name=name,
            line=line,
            exported=export_kind is not None,
            export_kind=export_kind,
        ))
        if export_kind is not None:
            record.exports.append(ExportRecord(export_kind, name, line))

    def _extract_variables(self, node, record: FactRecord, line_offset: int) -> None:
        parent = node.parent
        if parent is not None and parent.type in _LOOP_HEADERS:
            return
        line = _line(node, line_offset)
        exported = parent is not None and parent.type == "export_statement"
        for decl in node.named_children:
            if decl.type != "variable_declarator":
                continue
            name_node = decl.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = _text(name_node)
            record.definitions.append(DefinitionRecord(
                kind=DefinitionKind.VARIABLE,
                name=name,
                line=line,
                exported=exported,
                export_kind=ExportKind.NAMED if exported else None,
            ))
            if exported:
                record.exports.append(ExportRecord(ExportKind.NAMED, name, line))

    def _extract_jsx_usage(self, node, record: FactRecord, line_offset: int) -> None:
        if node.type == "jsx_element":
            tag = node.child_by_field_name("open_tag")
            if tag is None:
                tag = next((c for c in node.children if c.type == "jsx_opening_element"), None)
        else:
            tag = node
        if tag is None:
            return
        name_node = tag.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            return
        name = _text(name_node)
        if not is_component_tag(name):
            return

        props: list[str] = []
        for attr in tag.named_children:
            if attr.type != "jsx_attribute" or not attr.named_children:
                continue
            prop_node = attr.named_children[0]
            if prop_node.type == "property_identifier":
                props.append(_text(prop_node))

        record.component_usages.append(ComponentUsage(
            name=name, props=props, line=_line(node, line_offset),
        ))

    def _get_parser(self, grammar: str):
        if grammar not in self._parser_cache:
            self._parser_cache[grammar] = get_parser(grammar)
        return self._parser_cache[grammar]


# ── Node helpers ──────────────────────────────────────────────

def _text(node) -> str:
    return node.text.decode("utf-8") if node.text else ""


def _string_value(node) -> str:
    text = _text(node)
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _name_value(node) -> str:
    return _string_value(node) if node.type == "string" else _text(node)


def _line(node, line_offset: int) -> int:
    return node.start_point[0] + 1 + line_offset


def _export_kind(node) -> ExportKind | None:
    parent = node.parent
    if parent is None or parent.type != "export_statement":
        return None
    if any(c.type == "default" for c in parent.children):
        return ExportKind.DEFAULT
    return ExportKind.NAMED


def _first_error_line(root) -> int:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return root.start_point[0] + 1


def _clear_facts(record: FactRecord) -> None:
    record.imports.clear()
    record.exports.clear()
    record.definitions.clear()
    record.component_usages.clear()
