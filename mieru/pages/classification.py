"""Heuristic classification tables for pages, components and links.

Each heuristic is a table of (predicate, classification) rows evaluated in
order; the first matching row wins. Adding a rule means adding a row.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Callable

from mieru.models import ComponentKind, ConnectionKind, LinkKind, PageKind

_SCRIPT_EXT = r"\.(?:vue|jsx?|tsx?)$"

# ── Page files ────────────────────────────────────────────────

# Matched against "/" + the project-relative path.
PAGE_PATTERNS: list[re.Pattern] = [re.compile(p) for p in (
    # directory conventions
    r"/pages/",
    r"/views/",
    r"/routes/",
    r"/screens/",
    r"/app/",
    r"/layouts/",
    r"/containers/",
    r"/templates/",
    # framework file conventions
    r"(?:^|/)page" + _SCRIPT_EXT,
    r"(?:^|/)layout" + _SCRIPT_EXT,
    r"(?:^|/)loading" + _SCRIPT_EXT,
    r"(?:^|/)error" + _SCRIPT_EXT,
    r"(?:^|/)not-found" + _SCRIPT_EXT,
    r"(?:^|/)index" + _SCRIPT_EXT,
    r"(?:^|/)main" + _SCRIPT_EXT,
    r"(?:^|/)App" + _SCRIPT_EXT,
    # well-known page names
    r"(?:^|/)(?:Home|Product|Cart|Login|Register|Profile|Dashboard|Settings"
    r"|Checkout|Search|About|Contact|Admin|Landing|Welcome|NotFound|Error"
    r"|Loading)" + _SCRIPT_EXT,
    # suffix conventions
    r"[A-Z][a-z]+(?:Page|View|Screen|Container)" + _SCRIPT_EXT,
)]

_PAGE_KIND_RULES: list[tuple[Callable[[str], bool], PageKind]] = [
    (lambda p: "layout" in p.lower(), PageKind.LAYOUT),
    (lambda p: "page" in p or "view" in p, PageKind.PAGE),
]


def is_page_file(relative_path: str) -> bool:
    rooted = "/" + relative_path
    return any(pattern.search(rooted) for pattern in PAGE_PATTERNS)


def page_kind(relative_path: str) -> PageKind:
    for predicate, kind in _PAGE_KIND_RULES:
        if predicate(relative_path):
            return kind
    return PageKind.COMPONENT


# ── Component imports ─────────────────────────────────────────

# Project-local specifier prefixes; bare package imports are never components.
LOCAL_PREFIXES = ("./", "../", "@/", "~/", "@@/", "~~/", "/")

COMPONENT_DIRS = frozenset({
    "components", "comp", "ui", "shared", "common", "widgets", "elements",
    "parts", "modules", "features", "containers", "templates", "layouts",
    "forms", "modals", "dialogs", "pages", "views",
})

NON_COMPONENT_HINTS = (
    "util", "helper", "service", "api", "store", "reducer", "action",
    "mutation", "middleware", "plugin", "mixin", "directive", "constant",
    "config", "types", "schema", "hooks/", "composables/",
)

_ASSET_RE = re.compile(r"\.(?:css|scss|sass|less|styl|json|svg|png|jpe?g|gif|webp|ico)$", re.I)


def _basename(specifier: str) -> str:
    name = PurePosixPath(specifier).name
    return name.rsplit(".", 1)[0] if "." in name else name


_COMPONENT_IMPORT_RULES: list[tuple[Callable[[str], bool], bool]] = [
    (lambda s: not s.startswith(LOCAL_PREFIXES), False),
    (lambda s: bool(_ASSET_RE.search(s)), False),
    (lambda s: bool(re.search(r"\.(?:vue|jsx|tsx)$", s)), True),
    (lambda s: "component" in s.lower(), True),
    (lambda s: _basename(s)[:1].isupper(), True),
    (lambda s: any(hint in s.lower() for hint in NON_COMPONENT_HINTS), False),
    (lambda s: any(part in COMPONENT_DIRS for part in PurePosixPath(s).parts), True),
]


def is_component_import(specifier: str) -> bool:
    for predicate, verdict in _COMPONENT_IMPORT_RULES:
        if predicate(specifier):
            return verdict
    return False


_COMPONENT_KIND_RULES: list[tuple[Callable[[str], bool], ComponentKind]] = [
    (lambda p: p.endswith(".vue"), ComponentKind.VUE),
    (lambda p: p.endswith((".jsx", ".tsx")), ComponentKind.REACT),
    (lambda p: "layout" in p.lower() or "template" in p.lower(), ComponentKind.LAYOUT),
]


def component_kind(path: str) -> ComponentKind:
    for predicate, kind in _COMPONENT_KIND_RULES:
        if predicate(path):
            return kind
    return ComponentKind.COMPONENT


# ── Template elements ─────────────────────────────────────────

HTML_ELEMENTS = frozenset({
    "div", "span", "p", "a", "img", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "table", "tr", "td", "th", "thead", "tbody",
    "section", "article", "header", "footer", "nav", "main", "aside",
    "button", "input", "form", "label", "select", "option", "textarea",
})

VUE_BUILTIN_ELEMENTS = frozenset({
    "template", "slot", "transition", "transition-group", "keep-alive",
    "component", "teleport", "suspense", "router-view", "router-link",
    "nuxt-link", "nuxt-page", "nuxt-layout", "client-only",
})


def is_template_component(name: str) -> bool:
    lower = name.lower()
    if lower in HTML_ELEMENTS or lower in VUE_BUILTIN_ELEMENTS or lower.startswith("v-"):
        return False
    return name[:1].isupper() or "-" in name


# ── Links ─────────────────────────────────────────────────────

_Q = "['\"`]"
_TARGET = "([^'\"`]+)"

# Plain (unbound) attribute only; `:to=` and `v-bind:to=` are handled below.
_TO_ATTR = r"\b[^>]*?(?<![:\w-])to=[\"']([^\"']+)[\"']"

LINK_PATTERNS: list[tuple[re.Pattern, LinkKind]] = [
    (re.compile(r"<NuxtLink" + _TO_ATTR), LinkKind.ROUTER_LINK),
    (re.compile(r"<nuxt-link" + _TO_ATTR), LinkKind.ROUTER_LINK),
    (re.compile(r"<router-link" + _TO_ATTR), LinkKind.ROUTER_LINK),
    (re.compile(r"<RouterLink" + _TO_ATTR), LinkKind.ROUTER_LINK),
    (re.compile(r"<Link" + _TO_ATTR), LinkKind.NAVIGATION),
    (re.compile(r"<NavLink" + _TO_ATTR), LinkKind.NAVIGATION),
    (re.compile(r"<a\s[^>]*?(?<![:\w-])href=[\"']([^\"']+)[\"']", re.I), LinkKind.HREF),
    (re.compile(r"href=\"\$baseUrl\(" + _Q + _TARGET + _Q + r"\)\""), LinkKind.HREF),
    (re.compile(r":href=\"`([^`]*/[^`]*)`\""), LinkKind.HREF),
    (re.compile(r"router\.push\(" + _Q + _TARGET + _Q + r"\)"), LinkKind.DYNAMIC),
    (re.compile(r"useRouter\(\)\.push\(" + _Q + _TARGET + _Q + r"\)"), LinkKind.DYNAMIC),
    (re.compile(r"navigateTo\(" + _Q + _TARGET + _Q + r"\)"), LinkKind.DYNAMIC),
    (re.compile(r"\bnavigate\(" + _Q + _TARGET + _Q + r"\)"), LinkKind.DYNAMIC),
    (re.compile(r":to=\"\{[^}]*path:\s*" + _Q + _TARGET + _Q), LinkKind.NAVIGATION),
    (re.compile(r":to=\"`([^`]*/[^`]*)`\""), LinkKind.NAVIGATION),
    (re.compile(r"\bpath:\s*" + _Q + _TARGET + _Q), LinkKind.NAVIGATION),
]

EXTERNAL_PREFIXES = ("http", "mailto:", "tel:")

_CONNECTION_KINDS: dict[LinkKind, ConnectionKind] = {
    LinkKind.ROUTER_LINK: ConnectionKind.ROUTE,
    LinkKind.DYNAMIC: ConnectionKind.ROUTE,
    LinkKind.HREF: ConnectionKind.LINK,
}


def connection_kind(link_kind: LinkKind) -> ConnectionKind:
    return _CONNECTION_KINDS.get(link_kind, ConnectionKind.NAVIGATION)
