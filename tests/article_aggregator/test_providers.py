"""
Tests for the provider adapters against a mocked HTTP transport.
"""

import httpx
import pytest

from src.article_aggregator.exceptions import (
    ProviderMalformedResponseError,
    ProviderUnavailableError,
)
from src.article_aggregator.providers.guardian_provider import GuardianProvider, section_slug
from src.article_aggregator.providers.newsapi_provider import NewsApiProvider
from src.article_aggregator.providers.nyt_provider import NytProvider
from src.article_aggregator.schemas.article import ArticleSource
from src.article_aggregator.schemas.filter import ArticleFilter


def mock_client(handler):
    """AsyncClient whose requests are answered by handler and recorded"""
    requests = []

    def _handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(_handle))
    return client, requests


def json_response(payload, status_code=200):
    return lambda request: httpx.Response(status_code, json=payload)


# ============================================================================
# NEWS API
# ============================================================================

class TestNewsApiProvider:

    @pytest.mark.asyncio
    async def test_fetch_latest(self):
        client, requests = mock_client(json_response({
            "status": "ok",
            "totalResults": 2,
            "articles": [
                {"title": "One", "url": "https://a.example.com/1", "publishedAt": "2024-03-01T10:00:00Z"},
                {"title": "Two", "url": "https://a.example.com/2", "publishedAt": "2024-03-01T11:00:00Z"},
            ],
        }))
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

        items = await provider.fetch_latest()

        assert [item.url for item in items] == ["https://a.example.com/1", "https://a.example.com/2"]
        assert requests[0].url.path == "/v2/top-headlines"
        assert requests[0].url.params["country"] == "us"
        assert requests[0].headers["X-Api-Key"] == "k"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_search_sends_filter_and_keeps_context(self):
        client, requests = mock_client(json_response({
            "status": "ok",
            "articles": [{"title": "Vote", "url": "https://a.example.com/3"}],
        }))
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)
        f = ArticleFilter.from_params({"search": "election", "category": "Politics", "from": "2024-03-01"})

        items = await provider.search_by_filter(f)
        article = provider.normalize(items[0])

        params = requests[0].url.params
        assert requests[0].url.path == "/v2/everything"
        assert params["q"] == "election"
        assert params["from"] == "2024-03-01"
        assert "to" not in params
        assert article.category == "Politics"
        assert article.tags == ["election"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_error_status_payload(self):
        client, _ = mock_client(json_response({"status": "error", "code": "rateLimited", "message": "slow down"}))
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await provider.fetch_latest()

        assert exc_info.value.source == ArticleSource.NEWS_API
        assert "rateLimited" in exc_info.value.message
        await client.aclose()

    @pytest.mark.asyncio
    async def test_http_error(self):
        client, _ = mock_client(json_response({"status": "error"}, status_code=500))
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

        with pytest.raises(ProviderUnavailableError, match="HTTP 500"):
            await provider.fetch_latest()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client, _ = mock_client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

        with pytest.raises(ProviderMalformedResponseError):
            await provider.fetch_latest()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def _fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = mock_client(_fail)
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

        with pytest.raises(ProviderUnavailableError, match="ConnectError"):
            await provider.fetch_latest()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self):
        client, requests = mock_client(json_response({"status": "ok", "articles": []}))
        provider = NewsApiProvider(api_key="", base_url="https://newsapi.test/v2", client=client)

        with pytest.raises(ProviderUnavailableError, match="API key"):
            await provider.fetch_latest()
        assert requests == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_invalid_items_skipped(self):
        client, _ = mock_client(json_response({
            "status": "ok",
            "articles": [
                {"title": "Good", "url": "https://a.example.com/ok"},
                {"title": "No url"},
                {"title": "[Removed]", "url": "https://removed.com"},
                "garbage",
            ],
        }))
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

        items = await provider.fetch_latest()

        assert [item.url for item in items] == ["https://a.example.com/ok"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_articles_not_a_list(self):
        client, _ = mock_client(json_response({"status": "ok", "articles": {"oops": 1}}))
        provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

        with pytest.raises(ProviderMalformedResponseError):
            await provider.fetch_latest()
        await client.aclose()


# ============================================================================
# THE GUARDIAN
# ============================================================================

GUARDIAN_OK = {
    "response": {
        "status": "ok",
        "results": [
            {
                "webTitle": "Senate vote",
                "webUrl": "https://www.theguardian.com/us-news/1",
                "sectionName": "US news",
                "webPublicationDate": "2024-03-01T10:00:00Z",
                "fields": {"byline": "Jane Doe"},
                "tags": [],
            }
        ],
    }
}


class TestGuardianProvider:

    def test_section_slug(self):
        assert section_slug("US news") == "us-news"
        assert section_slug("Technology") == "technology"

    @pytest.mark.asyncio
    async def test_search_params(self):
        client, requests = mock_client(json_response(GUARDIAN_OK))
        provider = GuardianProvider(api_key="g", base_url="https://guardian.test", client=client)
        f = ArticleFilter.from_params({
            "search": "senate", "category": "US news", "from": "2024-03-01", "to": "2024-03-02",
        })

        items = await provider.search_by_filter(f)

        params = requests[0].url.params
        assert requests[0].url.path == "/search"
        assert params["q"] == "senate"
        assert params["section"] == "us-news"
        assert params["from-date"] == "2024-03-01"
        assert params["to-date"] == "2024-03-02"
        assert params["api-key"] == "g"
        assert params["order-by"] == "newest"
        assert provider.normalize(items[0]).author == "Jane Doe"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_search_defaults_date_window(self):
        client, requests = mock_client(json_response(GUARDIAN_OK))
        provider = GuardianProvider(api_key="g", base_url="https://guardian.test", client=client)

        await provider.search_by_filter(ArticleFilter.from_params({"search": "senate"}))

        params = requests[0].url.params
        assert "section" not in params
        assert "from-date" in params
        assert "to-date" in params
        await client.aclose()

    @pytest.mark.asyncio
    async def test_error_status(self):
        client, _ = mock_client(json_response({"response": {"status": "error", "message": "Invalid key"}}))
        provider = GuardianProvider(api_key="g", base_url="https://guardian.test", client=client)

        with pytest.raises(ProviderUnavailableError, match="Invalid key"):
            await provider.fetch_latest()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_missing_response_object(self):
        client, _ = mock_client(json_response({"message": "Unauthorized"}))
        provider = GuardianProvider(api_key="g", base_url="https://guardian.test", client=client)

        with pytest.raises(ProviderMalformedResponseError):
            await provider.fetch_latest()
        await client.aclose()


# ============================================================================
# NEW YORK TIMES
# ============================================================================

class TestNytProvider:

    @pytest.mark.asyncio
    async def test_fetch_latest_most_viewed(self):
        client, requests = mock_client(json_response({
            "status": "OK",
            "results": [{"url": "https://www.nytimes.com/a.html", "title": "Storm", "des_facet": ""}],
        }))
        provider = NytProvider(api_key="n", base_url="https://nyt.test/svc", client=client)

        items = await provider.fetch_latest()

        assert requests[0].url.path == "/svc/mostpopular/v2/viewed/7.json"
        assert requests[0].url.params["api-key"] == "n"
        assert provider.normalize(items[0]).tags == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_search_params(self):
        client, requests = mock_client(json_response({
            "status": "OK",
            "response": {"docs": [{"web_url": "https://www.nytimes.com/b.html", "headline": {"main": "Vote"}}]},
        }))
        provider = NytProvider(api_key="n", base_url="https://nyt.test/svc", client=client)
        f = ArticleFilter.from_params({
            "search": "vote", "category": "Politics", "from": "2024-03-01", "to": "2024-03-31",
        })

        items = await provider.search_by_filter(f)

        params = requests[0].url.params
        assert requests[0].url.path == "/svc/search/v2/articlesearch.json"
        assert params["begin_date"] == "20240301"
        assert params["end_date"] == "20240331"
        assert params["fq"] == 'section_name:("Politics")'
        assert params["sort"] == "newest"
        assert provider.normalize(items[0]).title == "Vote"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_fault_payload(self):
        client, _ = mock_client(json_response({"fault": {"faultstring": "Invalid ApiKey"}}))
        provider = NytProvider(api_key="n", base_url="https://nyt.test/svc", client=client)

        with pytest.raises(ProviderUnavailableError, match="Invalid ApiKey"):
            await provider.fetch_latest()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_search_without_response(self):
        client, _ = mock_client(json_response({"status": "OK"}))
        provider = NytProvider(api_key="n", base_url="https://nyt.test/svc", client=client)

        with pytest.raises(ProviderMalformedResponseError):
            await provider.search_by_filter(ArticleFilter.from_params({"search": "vote"}))
        await client.aclose()


@pytest.mark.asyncio
async def test_injected_client_not_closed_by_provider():
    client, _ = mock_client(json_response({"status": "ok", "articles": []}))
    provider = NewsApiProvider(api_key="k", base_url="https://newsapi.test/v2", client=client)

    await provider.close()

    assert not client.is_closed
    await client.aclose()
