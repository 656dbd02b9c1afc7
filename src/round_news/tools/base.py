from typing import Optional, Protocol

from ..models.news import SearchFilters, SearchResult, SortBy
from .result import Result


class SearchClient(Protocol):
    """Interface for fetching one page of search results."""

    async def fetch_page(
        self,
        query: str,
        filters: Optional[SearchFilters],
        sort_by: SortBy,
        page_size: int,
        page: int,
    ) -> Result[SearchResult]:
        """Fetch a single page of results for ``query``.

        Implementations clamp ``page_size`` to ``[1, 100]`` and ``page`` to
        ``>= 1``, have no side effects beyond the remote read, and return
        failures as ``Failure`` values instead of raising.

        Returns:
            ``Ok`` wrapping either variant of the search payload, or
            ``Failure`` wrapping a transport or decode error.
        """
        ...
