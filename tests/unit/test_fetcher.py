"""Unit tests for llmsdocs.fetcher."""

from __future__ import annotations

import httpx
import pytest
import respx

from llmsdocs.config import FetcherSettings
from llmsdocs.errors import DocsError, ErrorCode
from llmsdocs.fetcher import DocsFetcher, build_http_client, normalise_page_path

BASE_URL = "https://docs.example.com"


class TestNormalisePagePath:
    def test_strips_single_leading_slash(self) -> None:
        assert normalise_page_path("/guides/intro") == "guides/intro"

    def test_leaves_relative_path(self) -> None:
        assert normalise_page_path("guides/intro") == "guides/intro"

    def test_strips_only_one_slash(self) -> None:
        assert normalise_page_path("//x") == "/x"


class TestBuildHttpClient:
    def test_client_configuration(self) -> None:
        client = build_http_client(FetcherSettings(timeout_seconds=5.0, user_agent="test/1"))
        assert isinstance(client, httpx.AsyncClient)
        assert client.follow_redirects is True
        assert client.timeout.read == 5.0
        assert client.headers["User-Agent"] == "test/1"

    def test_defaults_without_settings(self) -> None:
        client = build_http_client()
        assert client.timeout.read == 30.0


class TestFetch:
    async def test_successful_fetch_captures_etag(self) -> None:
        with respx.mock:
            respx.get(f"{BASE_URL}/llms.txt").mock(
                return_value=httpx.Response(200, text="# Docs", headers={"ETag": '"v1"'})
            )
            async with httpx.AsyncClient() as client:
                document = await DocsFetcher(client, BASE_URL).fetch(f"{BASE_URL}/llms.txt")
        assert document.content == "# Docs"
        assert document.etag == '"v1"'
        assert document.url == f"{BASE_URL}/llms.txt"

    async def test_404_raises_not_found(self) -> None:
        with respx.mock:
            respx.get(f"{BASE_URL}/missing").mock(return_value=httpx.Response(404))
            async with httpx.AsyncClient() as client:
                with pytest.raises(DocsError) as exc_info:
                    await DocsFetcher(client, BASE_URL).fetch(f"{BASE_URL}/missing")
        assert exc_info.value.code == ErrorCode.PAGE_NOT_FOUND
        assert exc_info.value.recoverable is False

    async def test_500_raises_fetch_failed(self) -> None:
        with respx.mock:
            respx.get(f"{BASE_URL}/error").mock(return_value=httpx.Response(500))
            async with httpx.AsyncClient() as client:
                with pytest.raises(DocsError) as exc_info:
                    await DocsFetcher(client, BASE_URL).fetch(f"{BASE_URL}/error")
        assert exc_info.value.code == ErrorCode.PAGE_FETCH_FAILED
        assert exc_info.value.recoverable is True
        assert "HTTP 500" in exc_info.value.message

    async def test_network_error_raises_fetch_failed(self) -> None:
        with respx.mock:
            respx.get(f"{BASE_URL}/timeout").mock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            async with httpx.AsyncClient() as client:
                with pytest.raises(DocsError) as exc_info:
                    await DocsFetcher(client, BASE_URL).fetch(f"{BASE_URL}/timeout")
        assert exc_info.value.code == ErrorCode.PAGE_FETCH_FAILED
        assert exc_info.value.recoverable is True


class TestManifests:
    @respx.mock
    async def test_fetch_index(self) -> None:
        respx.get(f"{BASE_URL}/llms.txt").mock(return_value=httpx.Response(200, text="index"))
        async with httpx.AsyncClient() as client:
            document = await DocsFetcher(client, f"{BASE_URL}/").fetch_index()
        assert document.content == "index"

    @respx.mock
    async def test_fetch_full(self) -> None:
        respx.get(f"{BASE_URL}/llms-full.txt").mock(return_value=httpx.Response(200, text="full"))
        async with httpx.AsyncClient() as client:
            document = await DocsFetcher(client, BASE_URL).fetch_full()
        assert document.content == "full"

    @respx.mock
    async def test_index_failure_translated(self) -> None:
        respx.get(f"{BASE_URL}/llms.txt").mock(return_value=httpx.Response(503))
        async with httpx.AsyncClient() as client:
            with pytest.raises(DocsError) as exc_info:
                await DocsFetcher(client, BASE_URL).fetch_index()
        assert exc_info.value.code == ErrorCode.INDEX_FETCH_FAILED
        assert exc_info.value.recoverable is True
        assert "HTTP 503" in exc_info.value.message

    @respx.mock
    async def test_full_404_not_recoverable(self) -> None:
        respx.get(f"{BASE_URL}/llms-full.txt").mock(return_value=httpx.Response(404))
        async with httpx.AsyncClient() as client:
            with pytest.raises(DocsError) as exc_info:
                await DocsFetcher(client, BASE_URL).fetch_full()
        assert exc_info.value.code == ErrorCode.INDEX_FETCH_FAILED
        assert exc_info.value.recoverable is False


class TestFetchPage:
    @respx.mock
    async def test_markdown_variant_preferred(self) -> None:
        md = respx.get(f"{BASE_URL}/guides/intro.md").mock(
            return_value=httpx.Response(200, text="# Intro")
        )
        bare = respx.get(f"{BASE_URL}/guides/intro").mock(
            return_value=httpx.Response(200, text="<html>")
        )
        async with httpx.AsyncClient() as client:
            document = await DocsFetcher(client, BASE_URL).fetch_page("/guides/intro")
        assert document.content == "# Intro"
        assert md.called
        assert not bare.called

    @respx.mock
    async def test_falls_back_to_bare_path(self) -> None:
        respx.get(f"{BASE_URL}/guides/intro.md").mock(return_value=httpx.Response(404))
        respx.get(f"{BASE_URL}/guides/intro").mock(return_value=httpx.Response(200, text="bare"))
        async with httpx.AsyncClient() as client:
            document = await DocsFetcher(client, BASE_URL).fetch_page("guides/intro")
        assert document.content == "bare"
        assert document.url == f"{BASE_URL}/guides/intro"

    @respx.mock
    async def test_falls_back_after_server_error(self) -> None:
        respx.get(f"{BASE_URL}/p.md").mock(return_value=httpx.Response(500))
        respx.get(f"{BASE_URL}/p").mock(return_value=httpx.Response(200, text="bare"))
        async with httpx.AsyncClient() as client:
            document = await DocsFetcher(client, BASE_URL).fetch_page("p")
        assert document.content == "bare"

    @respx.mock
    async def test_both_404_raises_not_found(self) -> None:
        respx.get(f"{BASE_URL}/nope.md").mock(return_value=httpx.Response(404))
        respx.get(f"{BASE_URL}/nope").mock(return_value=httpx.Response(404))
        async with httpx.AsyncClient() as client:
            with pytest.raises(DocsError) as exc_info:
                await DocsFetcher(client, BASE_URL).fetch_page("/nope")
        assert exc_info.value.code == ErrorCode.PAGE_NOT_FOUND
        assert exc_info.value.message == "Documentation page not found: nope"
        assert exc_info.value.recoverable is False

    @respx.mock
    async def test_transient_failure_not_reported_as_missing(self) -> None:
        respx.get(f"{BASE_URL}/p.md").mock(return_value=httpx.Response(404))
        respx.get(f"{BASE_URL}/p").mock(return_value=httpx.Response(502))
        async with httpx.AsyncClient() as client:
            with pytest.raises(DocsError) as exc_info:
                await DocsFetcher(client, BASE_URL).fetch_page("p")
        assert exc_info.value.code == ErrorCode.PAGE_FETCH_FAILED
        assert exc_info.value.recoverable is True
        assert "HTTP 502" in exc_info.value.message
