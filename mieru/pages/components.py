"""Per-file component discovery and component-file lookup for page trees."""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from mieru.analysis.dependency_graph import find_usage_import
from mieru.analysis.resolver import pascal_case_name, resolve_file, resolve_import_path
from mieru.models import FactRecord, PageComponent, SourceFile
from mieru.pages.classification import component_kind, is_component_import, is_template_component

logger = logging.getLogger(__name__)

_KEBAB_TAG_RE = re.compile(r"<([a-z]+-[a-z-]+)\b")

# Specifier alias -> directories (relative to the project root) tried in order.
ALIAS_ROOTS: dict[str, tuple[str, ...]] = {
    "@/": ("src", ""),
    "~/": ("", "src"),
    "@@/": ("",),
    "~~/": ("",),
}

_NAME_VARIANT_SUFFIXES = (
    ".vue", ".jsx", ".tsx", ".js", ".ts",
    "/index.vue", "/index.jsx", "/index.tsx", "/index.js", "/index.ts",
)


def resolve_specifier(project_dir: Path, from_path: str, specifier: str) -> str | None:
    """Relative specifiers resolve like imports; known aliases resolve from the project root."""
    resolved = resolve_import_path(from_path, specifier)
    if resolved is not None:
        return resolved
    for alias, roots in ALIAS_ROOTS.items():
        if specifier.startswith(alias):
            rest = specifier[len(alias):]
            for root in roots:
                base = Path(os.path.normpath(project_dir / root / rest))
                found = resolve_file(base)
                if found is not None:
                    return found
    return None


def merge_duplicates(components: list[PageComponent]) -> list[PageComponent]:
    """Deduplicate by (name, import_path); the first entry wins and collects usage lines."""
    merged: dict[tuple[str, str], PageComponent] = {}
    for comp in components:
        key = (comp.name, comp.import_path)
        existing = merged.get(key)
        if existing is None:
            merged[key] = comp
        else:
            existing.usage_lines.extend(comp.usage_lines)
            existing.props = list(dict.fromkeys(existing.props + comp.props))
    return list(merged.values())


@dataclass
class ComponentIndex:
    """Lookup tables over one analysis run's files and fact records."""

    project_dir: Path
    files: list[SourceFile]
    facts: dict[str, FactRecord]
    component_patterns: list[str] = field(default_factory=list)
    _by_key: dict[str, SourceFile] = field(init=False, repr=False)

    def __post_init__(self):
        self._by_key = {f.key: f for f in self.files}

    def file_by_relative(self, relative_path: str) -> SourceFile | None:
        return next((f for f in self.files if f.relative_path == relative_path), None)

    def direct_components(self, file: SourceFile) -> list[PageComponent]:
        """Components a file uses directly: component-like imports, JSX/template
        usages joined to their imports, and kebab-case template tags."""
        record = self.facts.get(file.key)
        if record is None:
            return []

        components: list[PageComponent] = []
        by_name: dict[str, PageComponent] = {}

        def add(comp: PageComponent) -> None:
            components.append(comp)
            by_name.setdefault(comp.name, comp)

        for imp in record.imports:
            if not imp.name or not is_component_import(imp.source):
                continue
            resolved = resolve_specifier(self.project_dir, file.key, imp.source) or ""
            add(PageComponent(
                name=imp.name,
                import_path=resolved,
                usage_lines=[imp.line],
                kind=component_kind(resolved or imp.source),
                specifier=imp.source,
            ))

        for usage in record.component_usages:
            existing = by_name.get(usage.name)
            if existing is not None:
                existing.usage_lines.append(usage.line)
                existing.props = list(dict.fromkeys(existing.props + usage.props))
                continue
            related = find_usage_import(record.imports, usage.name)
            resolved = ""
            if related is not None:
                resolved = resolve_specifier(self.project_dir, file.key, related.source) or ""
            add(PageComponent(
                name=usage.name,
                import_path=resolved,
                usage_lines=[usage.line],
                kind=component_kind(resolved),
                props=list(dict.fromkeys(usage.props)),
                specifier=related.source if related is not None else "",
            ))

        for block in record.blocks:
            if block.tag != "template":
                continue
            for index, line in enumerate(block.content.split("\n")):
                for m in _KEBAB_TAG_RE.finditer(line):
                    tag = m.group(1)
                    if not is_template_component(tag):
                        continue
                    line_no = block.content_line + index
                    existing = by_name.get(pascal_case_name(tag)) or by_name.get(tag)
                    if existing is not None:
                        existing.usage_lines.append(line_no)
                    else:
                        add(PageComponent(name=tag, usage_lines=[line_no]))

        return merge_duplicates(components)

    def find_component_file(self, component: PageComponent) -> SourceFile | None:
        """Exact resolved path, then file-name variations, then a components/ guess,
        then files matching the framework hint's component globs."""
        if component.import_path:
            exact = self._by_key.get(component.import_path)
            if exact is not None:
                return exact

        names = [component.name]
        if "-" in component.name:
            names.append(pascal_case_name(component.name))
        variations = [name + suffix for name in names for suffix in _NAME_VARIANT_SUFFIXES]

        for variation in variations:
            for f in self.files:
                if f.relative_path == variation or f.relative_path.endswith("/" + variation):
                    return f

        for variation in variations:
            guess = "components/" + variation.lower()
            for f in self.files:
                if f.relative_path.lower().endswith(guess):
                    return f
        return self._match_component_patterns(names)

    def _match_component_patterns(self, names: list[str]) -> SourceFile | None:
        if not self.component_patterns:
            return None
        wanted = {_stem_key(name) for name in names}
        for f in self.files:
            if _stem_key(Path(f.relative_path).stem) not in wanted:
                continue
            if any(fnmatch.fnmatch(f.relative_path, p) for p in self.component_patterns):
                return f
        return None


def _stem_key(name: str) -> str:
    return name.lower().replace("-", "").replace("_", "")

