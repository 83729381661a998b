"""Project scanning."""

from __future__ import annotations

from pathlib import Path

from mieru.models import ScanResult
from mieru.scanner.base import ProjectScanner


def scan_project(
    project_dir: Path,
    skip_dirs: list[str] | None = None,
    extensions: list[str] | None = None,
    include_hidden: bool = False,
    max_depth: int | None = None,
) -> ScanResult:
    """Scan a project directory for analyzable frontend files."""
    scanner = ProjectScanner(
        skip_dirs=skip_dirs,
        extensions=extensions,
        include_hidden=include_hidden,
        max_depth=max_depth,
    )
    return scanner.scan(project_dir)


__all__ = ["ProjectScanner", "scan_project"]
