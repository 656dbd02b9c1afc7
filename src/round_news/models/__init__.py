from .news import (  # noqa: F401
    Article,
    ArticleSource,
    SearchError,
    SearchFilters,
    SearchIn,
    SearchResult,
    SearchSuccess,
    SortBy,
    SourceDetails,
    SourcesResponse,
    parse_search_result,
)
from .state import SearchState  # noqa: F401
