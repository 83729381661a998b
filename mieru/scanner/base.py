"""Directory walker producing the flat file list the analyzers consume."""

from __future__ import annotations

import fnmatch
import os
import time
from datetime import datetime
from pathlib import Path

from mieru.errors import ConfigError
from mieru.models import DEFAULT_EXTENSIONS, DEFAULT_SKIP_DIRS, ScanResult, SourceFile


class ProjectScanner:
    """Recursively collects frontend source files under a project root."""

    def __init__(
        self,
        skip_dirs: list[str] | None = None,
        extensions: list[str] | None = None,
        include_hidden: bool = False,
        max_depth: int | None = None,
    ):
        self.skip_dirs = skip_dirs or list(DEFAULT_SKIP_DIRS)
        self.extensions = tuple(ext.lower() for ext in (extensions or DEFAULT_EXTENSIONS))
        self.include_hidden = include_hidden
        self.max_depth = max_depth

    def scan(self, project_dir: Path) -> ScanResult:
        start = time.perf_counter()
        root = Path(project_dir).absolute()
        if not root.exists():
            raise ConfigError(f"Project directory does not exist: {root}")
        if not root.is_dir():
            raise ConfigError(f"Project path is not a directory: {root}")

        result = ScanResult(project_path=root, scanned_at=datetime.now().isoformat())
        self._walk(root, root, result)
        result.files.sort(key=lambda f: f.relative_path)
        result.total_files = len(result.files)
        result.scan_duration = (time.perf_counter() - start) * 1000
        return result

    def _walk(self, current: Path, root: Path, result: ScanResult) -> None:
        try:
            entries = sorted(os.scandir(current), key=lambda e: e.name)
        except OSError as e:
            result.errors.append(f"Cannot read directory {current.relative_to(root)}: {e}")
            return

        for entry in entries:
            path = Path(entry.path)
            rel = path.relative_to(root).as_posix()
            if self._should_skip(entry.name, rel):
                continue
            if self.max_depth is not None and rel.count("/") >= self.max_depth:
                continue

            if entry.is_dir(follow_symlinks=False):
                self._walk(path, root, result)
            elif entry.is_file() and path.suffix.lower() in self.extensions:
                try:
                    stat = entry.stat()
                except OSError as e:
                    result.errors.append(f"Cannot stat {rel}: {e}")
                    continue
                result.files.append(SourceFile(
                    name=entry.name,
                    path=path,
                    relative_path=rel,
                    extension=path.suffix,
                    size=stat.st_size,
                    last_modified=stat.st_mtime,
                ))

    def _should_skip(self, name: str, relative_path: str) -> bool:
        if not self.include_hidden and name.startswith("."):
            return True
        for pattern in self.skip_dirs:
            if fnmatch.fnmatch(name, pattern):
                return True
        return False
