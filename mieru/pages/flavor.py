"""Project flavor detection: decides which page-resolution path runs."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from mieru.models import FrameworkHint, ProjectFlavor, SourceFile

logger = logging.getLogger(__name__)

# Hints below this confidence are ignored.
HINT_MIN_CONFIDENCE = 50

_HINT_FLAVORS: list[tuple[tuple[str, ...], ProjectFlavor]] = [
    (("nuxt", "vue"), ProjectFlavor.VUE),
    (("next", "react", "remix", "gatsby"), ProjectFlavor.REACT),
]


def _has_config(files: list[SourceFile], prefix: str) -> bool:
    return any(f.name.startswith(prefix) for f in files)


def detect_flavor(files: list[SourceFile], hint: FrameworkHint | None = None) -> ProjectFlavor:
    """Static markers first; the hint only breaks a tie when nothing is found."""
    if _has_config(files, "nuxt.config"):
        return ProjectFlavor.VUE
    if _has_config(files, "next.config"):
        return ProjectFlavor.REACT

    extensions = {f.extension.lower() for f in files}
    if ".vue" in extensions:
        return ProjectFlavor.VUE
    if extensions & {".jsx", ".tsx"}:
        return ProjectFlavor.REACT
    if any({"pages", "app"} & set(PurePosixPath(f.relative_path).parts[:-1]) for f in files):
        return ProjectFlavor.REACT

    if hint is not None and hint.confidence >= HINT_MIN_CONFIDENCE:
        name = hint.name.lower()
        for keywords, flavor in _HINT_FLAVORS:
            if any(k in name for k in keywords):
                logger.info("Using framework hint %r (confidence %d)", hint.name, hint.confidence)
                return flavor
    return ProjectFlavor.UNKNOWN
