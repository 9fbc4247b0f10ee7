"""Shared test fixtures for the llmsdocs test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from llmsdocs.cache import DocumentCache
from llmsdocs.storage import MemoryFileSystem

CACHE_DIR = Path("/cache/llmsdocs")

SAMPLE_INDEX = """\
# Enso

> Enso is an intent-based engine for DeFi routing.

Enso exposes a single API for building transactions.

## Getting started

- [Introduction](https://docs.enso.build/introduction.md): What Enso is and why it exists
- [Quickstart](https://docs.enso.build/quickstart.md)

## API Reference

- [Bundle API](https://docs.enso.build/api-reference/bundle.md): Batch multiple actions
- not a link line
- [Broken link](missing-paren
"""

SAMPLE_FULL = """\
# Introduction
Enso is an intent-based engine that routes DeFi actions across protocols.

## Authentication
Every request to the API requires an API key passed as a bearer token.
Authentication failures return HTTP 401 with an error payload.

## Bundle guide
A bundle groups several actions into one transaction. Use a bundle when you
need to swap and deposit atomically. Each bundle is simulated before it is sent.

## Short
tiny

### Routing tutorial
This tutorial walks through routing a token swap with the route endpoint.
"""


class FakeClock:
    """Controllable UTC clock for TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_fs(clock: FakeClock) -> MemoryFileSystem:
    return MemoryFileSystem(clock=clock)


@pytest.fixture()
def cache(memory_fs: MemoryFileSystem, clock: FakeClock) -> DocumentCache:
    """Two-tier cache on an in-memory filesystem driven by ``clock``."""
    return DocumentCache(memory_fs, CACHE_DIR, clock=clock)


@pytest.fixture()
def sample_index() -> str:
    return SAMPLE_INDEX


@pytest.fixture()
def sample_full() -> str:
    return SAMPLE_FULL
