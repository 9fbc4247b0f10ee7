"""HTTP documentation fetcher.

All network I/O for fetching documentation goes through a single DocsFetcher
instance shared across tool calls. The DocsFetcher receives an
httpx.AsyncClient via constructor injection; the lifespan owns the client
lifecycle. The fetcher never touches the cache; DocumentationService writes
successful fetches through.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from llmsdocs.errors import DocsError, ErrorCode
from llmsdocs.models.docs import FetchedDocument

if TYPE_CHECKING:
    from llmsdocs.config import FetcherSettings

log = structlog.get_logger()

INDEX_FILENAME = "llms.txt"
FULL_FILENAME = "llms-full.txt"


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    timeout = settings.timeout_seconds if settings is not None else 30.0
    user_agent = settings.user_agent if settings is not None else "llmsdocs/1.0"
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": user_agent},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def normalise_page_path(path: str) -> str:
    """Strip a single leading slash: ``'/guides/intro'`` → ``'guides/intro'``."""
    return path[1:] if path.startswith("/") else path


class DocsFetcher:
    """Fetches llms.txt, llms-full.txt and individual pages from one docs site."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path}"

    async def fetch(self, url: str) -> FetchedDocument:
        """GET a URL and return its body.

        Raises DocsError on network errors and non-2xx responses: 404 maps to
        PAGE_NOT_FOUND, everything else to PAGE_FETCH_FAILED.
        """
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise DocsError(
                code=ErrorCode.PAGE_FETCH_FAILED,
                message=f"Network error fetching {url}: {exc}",
                suggestion="The documentation site may be temporarily unavailable.",
                recoverable=True,
            ) from exc

        if not response.is_success:
            log.debug("fetch_failed", url=url, status_code=response.status_code)
            if response.status_code == 404:
                raise DocsError(
                    code=ErrorCode.PAGE_NOT_FOUND,
                    message=f"HTTP 404 fetching {url}",
                    suggestion="The requested documentation page does not exist at this URL.",
                    recoverable=False,
                )
            raise DocsError(
                code=ErrorCode.PAGE_FETCH_FAILED,
                message=f"HTTP {response.status_code} fetching {url}",
                suggestion="The documentation site may be temporarily unavailable.",
                recoverable=True,
            )

        log.info(
            "fetch_complete",
            url=url,
            status_code=response.status_code,
            content_length=len(response.text),
        )
        return FetchedDocument(url=url, content=response.text, etag=response.headers.get("etag"))

    async def fetch_index(self) -> FetchedDocument:
        return await self._fetch_manifest(INDEX_FILENAME, "documentation index")

    async def fetch_full(self) -> FetchedDocument:
        return await self._fetch_manifest(FULL_FILENAME, "full documentation")

    async def fetch_page(self, path: str) -> FetchedDocument:
        """Fetch ``<path>.md``, falling back to the bare ``<path>``.

        Raises PAGE_NOT_FOUND when both variants returned 404. If either
        attempt failed for another reason the last such failure is raised,
        so transient upstream errors are not reported as missing pages.
        """
        path = normalise_page_path(path)
        failures: list[DocsError] = []

        for url in (self.url_for(f"{path}.md"), self.url_for(path)):
            try:
                return await self.fetch(url)
            except DocsError as exc:
                failures.append(exc)

        transient = [exc for exc in failures if exc.code != ErrorCode.PAGE_NOT_FOUND]
        if transient:
            raise transient[-1]
        raise DocsError(
            code=ErrorCode.PAGE_NOT_FOUND,
            message=f"Documentation page not found: {path}",
            suggestion=(
                "Check the path against the documentation index, or use "
                "search_documentation to find the right page."
            ),
            recoverable=False,
        )

    async def _fetch_manifest(self, filename: str, label: str) -> FetchedDocument:
        try:
            return await self.fetch(self.url_for(filename))
        except DocsError as exc:
            # Translate generic page-level fetch errors to an index-specific code
            raise DocsError(
                code=ErrorCode.INDEX_FETCH_FAILED,
                message=f"Failed to fetch {label}: {exc.message}",
                suggestion=(
                    "Try again later."
                    if exc.recoverable
                    else "Check that docs.base_url points at a site that publishes llms.txt."
                ),
                recoverable=exc.recoverable,
            ) from exc
