from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from llmsdocs.models.docs import SearchResult


def _non_empty(value: str, field_name: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} must not be empty")
    return value


class GetDocumentationInput(BaseModel):
    path: str = Field(max_length=1024)
    format: Literal["markdown", "structured"] = "markdown"

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = _non_empty(v, "path")
        if "://" in v:
            raise ValueError("path must be relative to the documentation site")
        return v


class GetDocumentationOutput(BaseModel):
    path: str
    content: str
    source: str
    fetched_at: datetime


class SearchDocumentationInput(BaseModel):
    query: str = Field(max_length=500)
    limit: int = Field(default=5, ge=1, le=50)

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        return _non_empty(v, "query")


class SearchDocumentationOutput(BaseModel):
    query: str
    results: list[SearchResult]


class AskDocsInput(BaseModel):
    question: str = Field(max_length=2000)
    include_context: bool = True

    @field_validator("question")
    @classmethod
    def validate_question(cls, v: str) -> str:
        return _non_empty(v, "question")


class AskDocsOutput(BaseModel):
    question: str
    answer: str
    context_used: bool
