import asyncio
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..config import settings
from ..core.controller import PagedSearchController
from ..logging_config import get_logger
from ..models.news import SearchFilters, SortBy
from ..models.state import SearchState
from ..tools.newsapi_client import NewsApiClient
from ..tools.result import Failure


logger = get_logger("api.server")

_client: NewsApiClient | None = None
# Least recently used first; capped at settings.max_sessions.
_sessions: "OrderedDict[str, PagedSearchController]" = OrderedDict()


def _get_client() -> NewsApiClient:
    """Return the shared NewsApiClient, building it on first use."""

    global _client
    if _client is None:
        _client = NewsApiClient()
    return _client


def _require_client() -> NewsApiClient:
    try:
        return _get_client()
    except RuntimeError as exc:
        logger.error("search_client_unavailable", error=str(exc))
        raise HTTPException(status_code=503, detail=str(exc))


async def _evict_idle_sessions() -> None:
    while _sessions and len(_sessions) >= settings.max_sessions:
        session_id, controller = _sessions.popitem(last=False)
        await controller.aclose()
        logger.info("session_evicted", session_id=session_id)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _client
    yield
    for controller in list(_sessions.values()):
        await controller.aclose()
    _sessions.clear()
    if _client is not None:
        await _client.aclose()
        _client = None


app = FastAPI(
    title="Round News API",
    description="Paged news search sessions for the Round News renderer",
    version="1.0.0",
    lifespan=lifespan,
)


class CreateSessionRequest(BaseModel):
    initial_query: Optional[str] = None
    page_size: Optional[int] = Field(default=None, ge=1)


class SearchRequest(BaseModel):
    query: str
    sort_by: SortBy = SortBy.PUBLISHED_AT
    page_size: Optional[int] = Field(default=None, ge=1)
    filters: Optional[SearchFilters] = None


def _dump(session_id: str, state: SearchState) -> dict:
    return {"session_id": session_id, "state": state.model_dump(mode="json", by_alias=True)}


def _get_session(session_id: str) -> PagedSearchController:
    controller = _sessions.get(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
    _sessions.move_to_end(session_id)
    return controller


async def _settle(task: Optional[asyncio.Task]) -> None:
    # A superseding request may cancel this task; that is not an error here.
    if task is not None:
        await asyncio.wait([task])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/sessions")
async def create_session(req: Optional[CreateSessionRequest] = None) -> dict:
    req = req or CreateSessionRequest()
    session_id = uuid4().hex[:12]
    client = _require_client()
    await _evict_idle_sessions()
    controller = PagedSearchController(client, page_size=req.page_size)
    _sessions[session_id] = controller

    initial_query = settings.initial_query if req.initial_query is None else req.initial_query
    logger.info("session_created", session_id=session_id, initial_query=initial_query)
    await _settle(controller.search(initial_query) if initial_query else None)
    return _dump(session_id, controller.state)


@app.get("/sessions/{session_id}")
def get_session(session_id: str) -> dict:
    return _dump(session_id, _get_session(session_id).state)


@app.post("/sessions/{session_id}/search")
async def search(session_id: str, req: SearchRequest) -> dict:
    controller = _get_session(session_id)
    logger.info(
        "search_request",
        session_id=session_id,
        query=req.query,
        sort_by=req.sort_by.value,
        filtered=req.filters is not None,
    )
    if req.filters is not None:
        task = controller.search_advanced(req.query, req.filters, req.sort_by, req.page_size)
    else:
        task = controller.search(req.query, req.sort_by, req.page_size)
    await _settle(task)
    return _dump(session_id, controller.state)


@app.post("/sessions/{session_id}/load-more")
async def load_more(session_id: str) -> dict:
    controller = _get_session(session_id)
    await _settle(controller.load_more())
    return _dump(session_id, controller.state)


@app.post("/sessions/{session_id}/clear-error")
async def clear_error(session_id: str) -> dict:
    controller = _get_session(session_id)
    controller.clear_error()
    return _dump(session_id, controller.state)


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict:
    controller = _get_session(session_id)
    del _sessions[session_id]
    await controller.aclose()
    logger.info("session_deleted", session_id=session_id)
    return {"session_id": session_id, "status": "deleted"}


@app.get("/sources")
async def list_sources(
    category: Optional[str] = None,
    language: Optional[str] = None,
    country: Optional[str] = None,
) -> dict:
    client = _require_client()
    result = await client.get_sources(category=category, language=language, country=country)
    if isinstance(result, Failure):
        logger.warning("list_sources_error", error=result.message)
        raise HTTPException(status_code=502, detail=result.message)
    return result.value.model_dump(mode="json")
