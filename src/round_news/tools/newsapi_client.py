from typing import Any, Callable, Dict, Optional, TypeVar

import httpx
from pydantic import ValidationError

from ..config import settings
from ..logging_config import get_logger
from ..models.news import (
    SearchFilters,
    SearchResult,
    SortBy,
    SourcesResponse,
    parse_search_result,
)
from .errors import ApiError, DecodeError, TransportError
from .result import Failure, Ok, Result


logger = get_logger("tools.newsapi_client")

T = TypeVar("T")

_API_KEY_HEADER = "X-Api-Key"
_MAX_PAGE_SIZE = 100


def _clamp_page_size(page_size: int) -> int:
    return max(1, min(page_size, _MAX_PAGE_SIZE))


def _describe(exc: httpx.HTTPError) -> str:
    return str(exc) or exc.__class__.__name__


class NewsApiClient:
    """Async NewsAPI client implementing ``SearchClient``.

    Every call resolves to ``Ok`` or ``Failure``; nothing raised by httpx or
    pydantic escapes. Error payloads (``status: "error"``) are decoded even
    when the server answers with a non-2xx status, since NewsAPI reports
    rate limiting and bad keys that way.

    Args:
        api_key: NewsAPI key (defaults to ``NEWS_API_KEY``).
        base_url: API root, e.g. ``https://newsapi.org/v2/``.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or settings.news_api_key
        if not self._api_key:
            raise RuntimeError("NEWS_API_KEY is not configured in the environment.")
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.news_api_base_url,
            headers={_API_KEY_HEADER: self._api_key},
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
        )

    async def fetch_page(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
        sort_by: SortBy = SortBy.PUBLISHED_AT,
        page_size: int = 20,
        page: int = 1,
    ) -> Result[SearchResult]:
        params: Dict[str, Any] = {"q": query}
        if filters is not None:
            params.update(filters.to_params())
        params["sortBy"] = SortBy(sort_by).value
        params["pageSize"] = _clamp_page_size(page_size)
        params["page"] = max(page, 1)

        return await self._get("everything", params, parse_search_result)

    async def get_sources(
        self,
        category: str | None = None,
        language: str | None = None,
        country: str | None = None,
    ) -> Result[SourcesResponse]:
        params: Dict[str, Any] = {}
        if category:
            params["category"] = category
        if language:
            params["language"] = language
        if country:
            params["country"] = country

        result = await self._get("top-headlines/sources", params, SourcesResponse.model_validate)
        if isinstance(result, Ok) and result.value.status == "error":
            return Failure(ApiError("News API returned an error status"))
        return result

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(
        self,
        path: str,
        params: Dict[str, Any],
        parse: Callable[[Any], T],
    ) -> Result[T]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("fetch_failed", path=path, error=_describe(exc))
            return Failure(TransportError(_describe(exc)))

        try:
            payload = response.json()
        except ValueError:
            payload = None

        problem = "response body is not JSON"
        if payload is not None:
            try:
                value = parse(payload)
            except ValidationError as exc:
                problem = f"{exc.error_count()} validation error(s)"
                if isinstance(payload, dict) and payload.get("status") == "error":
                    message = payload.get("message") or payload.get("code") or "News API error"
                    logger.warning("api_error", path=path, code=payload.get("code"))
                    return Failure(ApiError(str(message), code=payload.get("code")))
            else:
                logger.info("fetch_succeeded", path=path, status_code=response.status_code)
                return Ok(value)

        if response.is_error:
            logger.warning("fetch_failed", path=path, status_code=response.status_code)
            return Failure(
                TransportError(
                    f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                    status_code=response.status_code,
                )
            )

        logger.warning("decode_failed", path=path, problem=problem)
        return Failure(DecodeError(f"Unexpected response from News API: {problem}"))
