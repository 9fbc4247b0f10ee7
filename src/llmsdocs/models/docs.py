from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class FetchedDocument(BaseModel):
    """Body of a successful upstream response."""

    url: str
    content: str
    etag: str | None = None


class SearchResult(BaseModel):
    """Single ranked section returned by search_documentation."""

    title: str
    path: str  # Heuristic; may not name a fetchable page
    excerpt: str
    score: int


class DocIndexLink(BaseModel):
    title: str
    url: str
    description: str = ""


class DocIndexSection(BaseModel):
    header: str
    links: list[DocIndexLink] = []


class DocIndexStructure(BaseModel):
    """Navigable form of the llms.txt manifest."""

    title: str = ""
    summary: str = ""
    sections: list[DocIndexSection] = []


class InitResult(BaseModel):
    """Outcome of the best-effort index warm-up."""

    status: Literal["ready", "degraded"]
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ready"
