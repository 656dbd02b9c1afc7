"""Paged search state machine.

One ``PagedSearchController`` backs one renderer session. Intents must be
called from inside a running event loop: each one applies its loading
transition synchronously and then schedules a single task that awaits the
search client and reconciles the result into a new ``SearchState``.
"""

import asyncio
from typing import Callable, List, Optional

from ..config import settings
from ..logging_config import get_logger
from ..models.news import SearchError, SearchFilters, SearchResult, SearchSuccess, SortBy
from ..models.state import SearchState
from ..tools.base import SearchClient
from ..tools.errors import NewsClientError
from ..tools.result import Failure, Ok, Result


logger = get_logger("core.controller")

Listener = Callable[[SearchState], None]

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


def _error_message(result: Result[SearchResult]) -> str:
    if isinstance(result, Failure):
        return result.message
    value = result.value
    if isinstance(value, SearchError):
        return value.message or value.code or DEFAULT_ERROR_MESSAGE
    return DEFAULT_ERROR_MESSAGE


class PagedSearchController:
    """Owns loading, paging and error state for one search session.

    At most one fresh search and one load-more are in flight at a time. A
    new search cancels the previous session's work, and every fetch is
    tagged with the session id it was issued for so that a late result from
    a superseded session is dropped instead of overwriting newer state.

    Args:
        client: Anything implementing ``SearchClient``.
        page_size: Default page size for new sessions.
    """

    def __init__(self, client: SearchClient, *, page_size: int | None = None) -> None:
        self._client = client
        self._default_page_size = page_size or settings.page_size
        self._state = SearchState()
        self._listeners: List[Listener] = []

        self._session_id = 0
        self._current_query = ""
        self._current_sort_by = SortBy.PUBLISHED_AT
        self._current_filters: Optional[SearchFilters] = None
        self._current_page_size = self._default_page_size

        self._search_task: Optional[asyncio.Task] = None
        self._load_more_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def current_query(self) -> str:
        return self._current_query

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every new snapshot; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        sort_by: SortBy = SortBy.PUBLISHED_AT,
        page_size: int | None = None,
    ) -> Optional[asyncio.Task]:
        """Start a fresh search, replacing the current result set.

        Blank queries are ignored. Returns the task running the page-1
        fetch, or ``None`` when nothing was started.
        """
        return self._start_session(query, None, sort_by, page_size)

    def search_advanced(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
        sort_by: SortBy = SortBy.PUBLISHED_AT,
        page_size: int | None = None,
    ) -> Optional[asyncio.Task]:
        """Like ``search``, with filters that later ``load_more`` calls keep."""
        return self._start_session(query, filters, sort_by, page_size)

    def load_more(self) -> Optional[asyncio.Task]:
        """Fetch the next page of the active session and append it.

        Ignored while a page is already loading, while a fresh search is in
        flight, when there is no active query, or when every result has
        already been fetched.
        """
        state = self._state
        if (
            state.is_loading_more
            or state.is_loading
            or not self._current_query.strip()
            or len(state.articles) >= state.total_results
        ):
            return None

        next_page = state.current_page + 1
        session_id = self._session_id
        self._update(is_loading_more=True)
        logger.info("load_more_started", session_id=session_id, page=next_page)

        self._load_more_task = asyncio.create_task(self._run_load_more(session_id, next_page))
        return self._load_more_task

    def clear_error(self) -> None:
        self._update(error_message=None)

    async def aclose(self) -> None:
        """Cancel any in-flight fetch and wait for it to unwind."""
        pending = self._cancel_in_flight()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_session(
        self,
        query: str,
        filters: Optional[SearchFilters],
        sort_by: SortBy,
        page_size: int | None,
    ) -> Optional[asyncio.Task]:
        if not query or not query.strip():
            return None

        # Validate everything before touching the running session.
        sort_by = SortBy(sort_by)
        page_size = int(page_size) if page_size else self._default_page_size
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self._cancel_in_flight()
        self._session_id += 1
        session_id = self._session_id

        self._current_query = query.strip()
        self._current_sort_by = sort_by
        self._current_filters = filters
        self._current_page_size = page_size

        self._update(
            is_loading=True,
            is_loading_more=False,
            error_message=None,
            articles=[],
            total_results=0,
            current_page=1,
        )
        logger.info(
            "search_started",
            session_id=session_id,
            query=self._current_query,
            sort_by=self._current_sort_by.value,
            filtered=filters is not None,
        )

        self._search_task = asyncio.create_task(self._run_search(session_id))
        return self._search_task

    def _cancel_in_flight(self) -> List[asyncio.Task]:
        cancelled = []
        for task in (self._search_task, self._load_more_task):
            if task is not None and not task.done():
                task.cancel()
                cancelled.append(task)
        self._search_task = None
        self._load_more_task = None
        return cancelled

    async def _fetch(self, page: int) -> Result[SearchResult]:
        try:
            return await self._client.fetch_page(
                self._current_query,
                self._current_filters,
                self._current_sort_by,
                self._current_page_size,
                page,
            )
        except Exception as exc:
            # The loading flag must still be cleared if a client raises.
            logger.exception("search_client_raised", page=page)
            return Failure(NewsClientError(str(exc) or DEFAULT_ERROR_MESSAGE))

    def _is_stale(self, session_id: int, page: int) -> bool:
        if session_id == self._session_id:
            return False
        logger.info(
            "stale_result_discarded",
            session_id=session_id,
            active_session_id=self._session_id,
            page=page,
        )
        return True

    async def _run_search(self, session_id: int) -> None:
        result = await self._fetch(1)
        if self._is_stale(session_id, 1):
            return

        if isinstance(result, Ok) and isinstance(result.value, SearchSuccess):
            self._update(
                is_loading=False,
                articles=list(result.value.articles),
                total_results=result.value.total_results,
                current_page=1,
            )
            logger.info(
                "page_loaded",
                session_id=session_id,
                page=1,
                articles_count=len(result.value.articles),
                total_results=result.value.total_results,
            )
            return

        message = _error_message(result)
        self._update(is_loading=False, error_message=message)
        logger.warning("search_failed", session_id=session_id, error=message)

    async def _run_load_more(self, session_id: int, page: int) -> None:
        result = await self._fetch(page)
        if self._is_stale(session_id, page):
            return

        if isinstance(result, Ok) and isinstance(result.value, SearchSuccess):
            self._update(
                is_loading_more=False,
                articles=[*self._state.articles, *result.value.articles],
                current_page=page,
            )
            logger.info(
                "page_loaded",
                session_id=session_id,
                page=page,
                articles_count=len(result.value.articles),
                total_results=self._state.total_results,
            )
            return

        message = _error_message(result)
        self._update(is_loading_more=False, error_message=message)
        logger.warning("load_more_failed", session_id=session_id, page=page, error=message)

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("state_listener_failed")
