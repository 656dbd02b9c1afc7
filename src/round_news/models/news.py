"""Wire models for the NewsAPI ``everything`` and ``sources`` endpoints.

Python attribute names are snake_case; the camelCase names used on the wire
are declared as aliases so payloads decode as-is and ``by_alias`` dumps
reproduce them.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class SortBy(str, Enum):
    RELEVANCY = "relevancy"
    POPULARITY = "popularity"
    PUBLISHED_AT = "publishedAt"


class SearchIn(str, Enum):
    TITLE = "title"
    DESCRIPTION = "description"
    CONTENT = "content"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ArticleSource(_WireModel):
    id: Optional[str] = None
    name: str


class Article(_WireModel):
    source: ArticleSource
    author: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: str
    image_url: Optional[str] = Field(default=None, alias="urlToImage")
    published_at: str = Field(alias="publishedAt")
    content: Optional[str] = None


class SearchSuccess(_WireModel):
    """``status: "ok"`` payload: one page of articles plus the overall total."""

    status: Literal["ok"] = "ok"
    total_results: int = Field(alias="totalResults")
    articles: List[Article]


class SearchError(_WireModel):
    """``status: "error"`` payload, e.g. ``{"code": "rateLimited", ...}``."""

    status: Literal["error"] = "error"
    code: Optional[str] = None
    message: Optional[str] = None


SearchResult = Annotated[Union[SearchSuccess, SearchError], Field(discriminator="status")]

_search_result_adapter: TypeAdapter[SearchResult] = TypeAdapter(SearchResult)


def parse_search_result(payload: Union[Dict[str, Any], str, bytes]) -> SearchResult:
    """Decode a search payload, choosing the variant from its ``status`` field.

    Raises ``pydantic.ValidationError`` when the payload matches neither shape.
    """

    if isinstance(payload, (str, bytes)):
        return _search_result_adapter.validate_json(payload)
    return _search_result_adapter.validate_python(payload)


class SourceDetails(_WireModel):
    id: str
    name: str
    description: str
    url: str
    category: str
    language: str
    country: str


class SourcesResponse(_WireModel):
    status: str
    sources: List[SourceDetails]


class SearchFilters(_WireModel):
    """Optional narrowing for an advanced search."""

    search_in: Optional[List[SearchIn]] = None
    sources: Optional[List[str]] = None
    domains: Optional[List[str]] = None
    exclude_domains: Optional[List[str]] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    language: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        """Convert to NewsAPI query parameters, comma-joining list filters."""
        params: Dict[str, str] = {}
        if self.search_in:
            params["searchIn"] = ",".join(item.value for item in self.search_in)
        if self.sources:
            params["sources"] = ",".join(self.sources)
        if self.domains:
            params["domains"] = ",".join(self.domains)
        if self.exclude_domains:
            params["excludeDomains"] = ",".join(self.exclude_domains)
        if self.from_date:
            params["from"] = self.from_date
        if self.to_date:
            params["to"] = self.to_date
        if self.language:
            params["language"] = self.language
        return params
