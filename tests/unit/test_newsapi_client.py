from typing import List

import httpx
import pytest

from round_news import config
from round_news.models.news import SearchError, SearchFilters, SearchIn, SearchSuccess, SortBy
from round_news.tools.errors import ApiError, DecodeError, TransportError
from round_news.tools.newsapi_client import NewsApiClient
from round_news.tools.result import Failure, Ok


BASE_URL = "https://newsapi.test/v2/"

OK_PAYLOAD = {
    "status": "ok",
    "totalResults": 1,
    "articles": [
        {
            "source": {"id": None, "name": "Example News"},
            "author": None,
            "title": "Title",
            "description": None,
            "url": "https://example.com/a",
            "urlToImage": None,
            "publishedAt": "2026-01-01T00:00:00Z",
            "content": None,
        }
    ],
}


def make_client(handler, requests: List[httpx.Request]) -> NewsApiClient:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return NewsApiClient(
        api_key="test-key",
        base_url=BASE_URL,
        transport=httpx.MockTransport(record),
    )


def test_client_requires_api_key(monkeypatch) -> None:
    monkeypatch.setattr(config.settings, "news_api_key", None)
    with pytest.raises(RuntimeError):
        NewsApiClient()


async def test_fetch_page_sends_key_header_and_params() -> None:
    requests: List[httpx.Request] = []
    client = make_client(lambda request: httpx.Response(200, json=OK_PAYLOAD), requests)

    result = await client.fetch_page("android", None, SortBy.RELEVANCY, 20, 3)
    await client.aclose()

    assert isinstance(result, Ok)
    assert isinstance(result.value, SearchSuccess)
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/v2/everything"
    assert request.headers["X-Api-Key"] == "test-key"
    assert dict(request.url.params) == {
        "q": "android",
        "sortBy": "relevancy",
        "pageSize": "20",
        "page": "3",
    }


async def test_fetch_page_clamps_page_size_and_page() -> None:
    requests: List[httpx.Request] = []
    client = make_client(lambda request: httpx.Response(200, json=OK_PAYLOAD), requests)

    await client.fetch_page("android", None, SortBy.PUBLISHED_AT, 500, 0)
    await client.fetch_page("android", None, SortBy.PUBLISHED_AT, 0, -4)
    await client.aclose()

    assert requests[0].url.params["pageSize"] == "100"
    assert requests[0].url.params["page"] == "1"
    assert requests[1].url.params["pageSize"] == "1"
    assert requests[1].url.params["page"] == "1"


async def test_fetch_page_sends_filters() -> None:
    requests: List[httpx.Request] = []
    client = make_client(lambda request: httpx.Response(200, json=OK_PAYLOAD), requests)
    filters = SearchFilters(
        search_in=[SearchIn.TITLE, SearchIn.DESCRIPTION],
        domains=["bbc.co.uk", "theverge.com"],
        from_date="2026-01-01",
        language="en",
    )

    await client.fetch_page("android", filters, SortBy.POPULARITY, 20, 1)
    await client.aclose()

    params = requests[0].url.params
    assert params["searchIn"] == "title,description"
    assert params["domains"] == "bbc.co.uk,theverge.com"
    assert params["from"] == "2026-01-01"
    assert params["language"] == "en"
    assert params["sortBy"] == "popularity"
    assert "sources" not in params
    assert "to" not in params


async def test_error_payload_on_error_status_is_a_domain_error() -> None:
    payload = {"status": "error", "code": "rateLimited", "message": "Slow down"}
    client = make_client(lambda request: httpx.Response(429, json=payload), [])

    result = await client.fetch_page("android", None, SortBy.PUBLISHED_AT, 20, 1)
    await client.aclose()

    assert isinstance(result, Ok)
    assert isinstance(result.value, SearchError)
    assert result.value.message == "Slow down"


async def test_network_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, [])

    result = await client.fetch_page("android", None, SortBy.PUBLISHED_AT, 20, 1)
    await client.aclose()

    assert isinstance(result, Failure)
    assert isinstance(result.error, TransportError)
    assert result.message == "connection refused"


async def test_non_json_error_status_is_transport_error() -> None:
    client = make_client(lambda request: httpx.Response(502, text="Bad gateway"), [])

    result = await client.fetch_page("android", None, SortBy.PUBLISHED_AT, 20, 1)
    await client.aclose()

    assert isinstance(result, Failure)
    assert isinstance(result.error, TransportError)
    assert result.error.status_code == 502


async def test_unexpected_shape_is_decode_error() -> None:
    client = make_client(lambda request: httpx.Response(200, json={"status": "ok"}), [])

    result = await client.fetch_page("android", None, SortBy.PUBLISHED_AT, 20, 1)
    await client.aclose()

    assert isinstance(result, Failure)
    assert isinstance(result.error, DecodeError)


async def test_get_sources() -> None:
    requests: List[httpx.Request] = []
    payload = {
        "status": "ok",
        "sources": [
            {
                "id": "techcrunch",
                "name": "TechCrunch",
                "description": "Tech news.",
                "url": "https://techcrunch.com",
                "category": "technology",
                "language": "en",
                "country": "us",
            }
        ],
    }
    client = make_client(lambda request: httpx.Response(200, json=payload), requests)

    result = await client.get_sources(category="technology")
    await client.aclose()

    assert isinstance(result, Ok)
    assert result.value.sources[0].name == "TechCrunch"
    assert requests[0].url.path == "/v2/top-headlines/sources"
    assert dict(requests[0].url.params) == {"category": "technology"}


async def test_get_sources_error_payload() -> None:
    payload = {"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid."}
    client = make_client(lambda request: httpx.Response(401, json=payload), [])

    result = await client.get_sources()
    await client.aclose()

    assert isinstance(result, Failure)
    assert isinstance(result.error, ApiError)
    assert result.error.code == "apiKeyInvalid"
    assert result.message == "Your API key is invalid."
