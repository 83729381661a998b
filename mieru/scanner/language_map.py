"""Shared extension-to-language mapping for scanner, extractor and resolver."""

from __future__ import annotations

from pathlib import PurePath

from mieru.models import Language, NodeType

# Maps file extension -> (Language enum, tree-sitter grammar name)
EXT_TO_LANGUAGE: dict[str, tuple[Language, str | None]] = {
    ".ts": (Language.TYPESCRIPT, "typescript"),
    ".tsx": (Language.TYPESCRIPT, "tsx"),
    ".mts": (Language.TYPESCRIPT, "typescript"),
    ".js": (Language.JAVASCRIPT, "javascript"),
    ".jsx": (Language.JAVASCRIPT, "javascript"),
    ".mjs": (Language.JAVASCRIPT, "javascript"),
    ".cjs": (Language.JAVASCRIPT, "javascript"),
    ".vue": (Language.VUE, None),
}

# <script lang="..."> -> tree-sitter grammar
SCRIPT_LANG_TO_GRAMMAR: dict[str, str] = {
    "ts": "typescript",
    "typescript": "typescript",
    "tsx": "tsx",
    "js": "javascript",
    "javascript": "javascript",
    "jsx": "javascript",
}

# Order matters: Node-style resolution tries these in sequence.
RESOLVE_EXTENSIONS: tuple[str, ...] = (".vue", ".ts", ".tsx", ".js", ".jsx")

# Extensions that count as "already has an extension" for resolution.
KNOWN_EXTENSIONS: frozenset[str] = frozenset(EXT_TO_LANGUAGE) | {
    ".json", ".css", ".scss", ".sass", ".less", ".styl",
    ".svg", ".png", ".jpg", ".jpeg", ".gif", ".webp", ".ico",
    ".html", ".md", ".mdx", ".svelte",
}

_NODE_TYPES: dict[str, NodeType] = {
    ".vue": NodeType.VUE,
    ".jsx": NodeType.REACT,
    ".tsx": NodeType.REACT,
    ".ts": NodeType.TS,
    ".mts": NodeType.TS,
    ".js": NodeType.JS,
}


def detect_language(path: str | PurePath) -> Language:
    ext = PurePath(path).suffix.lower()
    entry = EXT_TO_LANGUAGE.get(ext)
    return entry[0] if entry else Language.UNKNOWN


def grammar_for(path: str | PurePath) -> str | None:
    entry = EXT_TO_LANGUAGE.get(PurePath(path).suffix.lower())
    return entry[1] if entry else None


def node_type_for(path: str | PurePath) -> NodeType:
    return _NODE_TYPES.get(PurePath(path).suffix.lower(), NodeType.JS)
