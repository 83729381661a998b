"""In-memory state for the HTTP API. No database required."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from mieru.pipeline import AnalysisResult


@dataclass
class AnalysisSession:
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    project_dir: str = ""
    result: AnalysisResult | None = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AppState:
    """Singleton in-memory state shared by all API routes."""

    def __init__(self):
        self.sessions: dict[str, AnalysisSession] = {}
        self._analyses: dict[str, dict[str, Any]] = {}

    def add_session(self, session: AnalysisSession) -> None:
        self.sessions[session.id] = session

    def get_session(self, analysis_id: str) -> AnalysisSession | None:
        return self.sessions.get(analysis_id)

    # ── Analysis cache ──────────────────────────────────────

    def store_analysis(self, analysis_id: str, name: str, data: Any) -> None:
        if analysis_id not in self._analyses:
            self._analyses[analysis_id] = {}
        self._analyses[analysis_id][name] = data

    def get_analysis(self, analysis_id: str, name: str) -> Any | None:
        return self._analyses.get(analysis_id, {}).get(name)

    def analyses_for(self, analysis_id: str) -> list[str]:
        return sorted(self._analyses.get(analysis_id, {}))

    def delete_session(self, analysis_id: str) -> bool:
        """Remove a session and its cached analyses."""
        if self.sessions.pop(analysis_id, None) is None:
            return False
        self._analyses.pop(analysis_id, None)
        return True


# Module-level singleton shared by all routers
state = AppState()
