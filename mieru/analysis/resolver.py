"""Node-style relative import resolution and file-name derived component names."""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePath

from mieru.scanner.language_map import KNOWN_EXTENSIONS, RESOLVE_EXTENSIONS

_NAME_SPLIT_RE = re.compile(r"[-_]")


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(".")


def resolve_import_path(from_path: str | Path, specifier: str) -> str | None:
    """Resolve a relative module specifier to an absolute file path.

    Bare and absolute specifiers are treated as packages and never resolved.
    No node_modules lookup is attempted.
    """
    if not is_relative_specifier(specifier):
        return None

    return resolve_file(Path(os.path.normpath(Path(from_path).parent / specifier)))


def resolve_file(base: Path) -> str | None:
    """Resolve an extensionless or exact module path the way Node does."""
    if base.suffix.lower() in KNOWN_EXTENSIONS:
        return str(base) if base.is_file() else None

    for ext in RESOLVE_EXTENSIONS:
        candidate = base.with_name(base.name + ext)
        if candidate.is_file():
            return str(candidate)

    if base.is_dir():
        for ext in RESOLVE_EXTENSIONS:
            index_file = base / f"index{ext}"
            if index_file.is_file():
                return str(index_file)

    return None


def pascal_case_name(path: str | PurePath) -> str:
    """user-card.vue -> UserCard, nav_bar -> NavBar, UserCard.tsx -> UserCard."""
    stem = PurePath(path).name
    suffix = PurePath(stem).suffix
    if suffix.lower() in KNOWN_EXTENSIONS:
        stem = stem[: -len(suffix)]
    return "".join(part[:1].upper() + part[1:] for part in _NAME_SPLIT_RE.split(stem))
