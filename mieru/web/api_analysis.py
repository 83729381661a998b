"""Analysis API: dependency graph, relationships and pages."""

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from mieru.analysis import RelationshipAnalyzer
from mieru.errors import ConfigError, EntryPointNotFoundError, MieruError
from mieru.export import extraction_summary, graph_to_dict, pages_to_dict, relationships_to_dict
from mieru.models import AnalyzerConfig, FrameworkHint
from mieru.pages import PageAnalyzer
from mieru.pipeline import run_graph
from mieru.web.state import AnalysisSession, state

router = APIRouter(prefix="/api/analysis")
_relationships = RelationshipAnalyzer()


class FrameworkHintModel(BaseModel):
    name: str
    version: str | None = None
    confidence: int = Field(0, ge=0, le=100)
    page_patterns: list[str] = []
    component_patterns: list[str] = []


class AnalysisRequest(BaseModel):
    project_dir: str | None = None
    analysis_id: str | None = None
    detect_circular: bool = True


class RelationshipsRequest(AnalysisRequest):
    top_n: int = Field(10, ge=1, le=100)
    min_cluster_size: int = Field(3, ge=1)


class PagesRequest(AnalysisRequest):
    max_depth: int = Field(3, ge=0, le=10)
    max_repeats: int = Field(3, ge=1, le=10)
    shared_tracking: bool = False
    framework_hint: FrameworkHintModel | None = None


def _config(req: AnalysisRequest, project_dir: str) -> AnalyzerConfig:
    config = AnalyzerConfig(project_dir=Path(project_dir), detect_circular=req.detect_circular)
    if isinstance(req, RelationshipsRequest):
        config.top_n = req.top_n
        config.min_cluster_size = req.min_cluster_size
    if isinstance(req, PagesRequest):
        config.max_expansion_depth = req.max_depth
        config.max_repeats = req.max_repeats
        config.shared_tracking = req.shared_tracking
        hint = req.framework_hint
        if hint is not None:
            config.framework_hint = FrameworkHint(
                name=hint.name,
                version=hint.version,
                confidence=hint.confidence,
                page_patterns=list(hint.page_patterns),
                component_patterns=list(hint.component_patterns),
            )
    return config


def _get_or_create_session(req: AnalysisRequest) -> tuple[AnalysisSession, AnalyzerConfig]:
    """Reuse a cached analysis by id, or scan and build a graph for project_dir."""
    if req.analysis_id:
        session = state.get_session(req.analysis_id)
        if session is None:
            raise HTTPException(404, f"Analysis not found: {req.analysis_id}")
        return session, _config(req, session.project_dir)

    if not req.project_dir:
        raise HTTPException(400, "Provide project_dir or analysis_id")

    config = _config(req, req.project_dir)
    try:
        result = run_graph(config)
    except ConfigError as e:
        raise HTTPException(400, str(e))
    session = AnalysisSession(project_dir=str(result.scan.project_path), result=result)
    state.add_session(session)
    state.store_analysis(session.id, "graph", graph_to_dict(result.graph))
    return session, config


@router.post("/graph")
async def build_graph(req: AnalysisRequest):
    session, _ = await asyncio.to_thread(_get_or_create_session, req)
    return {
        "analysis_id": session.id,
        "extraction": extraction_summary(session.result.extraction),
        "graph": state.get_analysis(session.id, "graph"),
    }


@router.post("/relationships")
async def relationships(req: RelationshipsRequest):
    session, config = await asyncio.to_thread(_get_or_create_session, req)
    graph = session.result.graph

    def _compute():
        relations = _relationships.analyze_relationships(graph)
        return relationships_to_dict(
            relations,
            _relationships.relationship_stats(relations),
            _relationships.most_depended(graph, config.top_n),
            _relationships.most_depending(graph, config.top_n),
            _relationships.detect_clusters(graph, config.min_cluster_size),
        )

    data = await asyncio.to_thread(_compute)
    state.store_analysis(session.id, "relationships", data)
    return {"analysis_id": session.id, **data}


@router.post("/pages")
async def pages(req: PagesRequest):
    session, config = await asyncio.to_thread(_get_or_create_session, req)
    result = session.result

    def _compute():
        return PageAnalyzer(config).analyze(
            result.scan.project_path, result.scan.files, result.extraction.results,
        )

    try:
        structure = await asyncio.to_thread(_compute)
    except EntryPointNotFoundError as e:
        raise HTTPException(422, str(e))
    except MieruError as e:
        raise HTTPException(400, str(e))

    result.pages = structure
    data = pages_to_dict(structure)
    state.store_analysis(session.id, "pages", data)
    return {"analysis_id": session.id, **data}


@router.get("/{analysis_id}")
async def get_analysis(analysis_id: str):
    session = state.get_session(analysis_id)
    if session is None:
        raise HTTPException(404, "No cached analysis with this id")
    names = state.analyses_for(analysis_id)
    return {
        "analysis_id": analysis_id,
        "project_dir": session.project_dir,
        "timestamp": session.timestamp,
        "analyses": names,
        **{name: state.get_analysis(analysis_id, name) for name in names},
    }


@router.delete("/{analysis_id}")
async def delete_analysis(analysis_id: str):
    if not state.delete_session(analysis_id):
        raise HTTPException(404, "No cached analysis with this id")
    return {"deleted": analysis_id}
