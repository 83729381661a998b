"""Exceptions raised by mieru.

Per-file problems never raise; they are recorded on the fact record. These
are reserved for failures a caller has to decide about.
"""

from __future__ import annotations


class MieruError(Exception):
    """Base class for mieru errors."""

    code = "MIERU_ERROR"

    def __init__(self, message: str, details: object | None = None):
        super().__init__(message)
        self.details = details


class ConfigError(MieruError):
    code = "CONFIG_ERROR"


class AnalysisError(MieruError):
    code = "ANALYSIS_ERROR"


class EntryPointNotFoundError(AnalysisError):
    """No application entry point and no file-system routes were found."""

    code = "ENTRY_POINT_NOT_FOUND"
