"""Faction list resolution: manual override, cache, network mirrors and fallbacks."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import List, Optional, Sequence

import httpx

from ..errors import FormatError, ListLoadError, ProtocolError, TransportError
from ..store.list_store import ListStore
from .models import LoadOutcome, SourceKind

logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)


def _persist(store: ListStore, raw_list: List[str]) -> None:
    try:
        store.write_cache(raw_list)
    except OSError as e:
        logger.warning(f"Could not update cache: {e}")


class ListSource:
    """One fallible provider in the resolution chain.

    `load` returns an outcome on success, None when the source has nothing to
    offer, and raises ListLoadError when it tried and failed.
    """

    kind: SourceKind

    async def load(self, last_error: Optional[str]) -> Optional[LoadOutcome]:
        raise NotImplementedError

    def describe(self) -> str:
        return self.kind.value


class ManualOverrideSource(ListSource):
    kind = SourceKind.MANUAL

    def __init__(self, store: ListStore):
        self.store = store

    async def load(self, last_error: Optional[str]) -> Optional[LoadOutcome]:
        manual = self.store.read_manual_override()
        if not manual:
            return None
        # Refresh the cache timestamp so it sticks around
        _persist(self.store, manual)
        logger.info(f"Using manual list ({len(manual)})")
        return LoadOutcome.from_list(manual, self.kind)


class FreshCacheSource(ListSource):
    kind = SourceKind.CACHE

    def __init__(self, store: ListStore, ttl_s: float):
        self.store = store
        self.ttl_s = ttl_s

    async def load(self, last_error: Optional[str]) -> Optional[LoadOutcome]:
        record = self.store.read_cache()
        if record is None or not self.store.is_fresh(record, self.ttl_s):
            return None
        logger.info(f"Using cache ({len(record.raw_list)})")
        return LoadOutcome.from_list(record.raw_list, self.kind)


class MirrorSource(ListSource):
    kind = SourceKind.MIRROR

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient,
        store: ListStore,
        timeout_s: float,
        min_body_length: int,
    ):
        self.url = url
        self.client = client
        self.store = store
        self.timeout_s = timeout_s
        self.min_body_length = min_body_length

    def describe(self) -> str:
        return self.url

    async def _get(self) -> httpx.Response:
        try:
            return await asyncio.wait_for(
                self.client.get(
                    self.url,
                    headers={"Cache-Control": "no-store"},
                    timeout=self.timeout_s,
                ),
                timeout=self.timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise TransportError(f"Timeout ({self.timeout_s:g}s)") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

    def _parse(self, text: str) -> List[str]:
        # Some embedded web views report success but deliver no body
        if not text or len(text) < self.min_body_length:
            raise ProtocolError("Empty response body (CORS/blocked?)")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise FormatError("JSON not array")
        if not all(isinstance(item, str) for item in data):
            raise FormatError("JSON array contains non-string entries")
        return data

    async def load(self, last_error: Optional[str]) -> Optional[LoadOutcome]:
        response = await self._get()
        if not response.is_success:
            raise ProtocolError(f"HTTP {response.status_code}")
        raw_list = self._parse(response.text)

        _persist(self.store, raw_list)
        logger.info(f"Network ({len(raw_list)}) from {self.url}")
        return LoadOutcome.from_list(raw_list, self.kind, label=self.url)


class StaleCacheSource(ListSource):
    kind = SourceKind.STALE_CACHE

    def __init__(self, store: ListStore):
        self.store = store

    async def load(self, last_error: Optional[str]) -> Optional[LoadOutcome]:
        record = self.store.read_cache()
        if record is None:
            return None
        logger.warning(
            f"Network error: {last_error or 'unknown'}; "
            f"using stale cache ({len(record.raw_list)} factions, "
            f"{self.store.cache_age_s(record) / 3600:.1f}h old)"
        )
        return LoadOutcome.from_list(record.raw_list, self.kind, error=last_error)


class BuiltinListSource(ListSource):
    kind = SourceKind.BUILTIN

    def __init__(self, raw_list: Sequence[str]):
        self.raw_list = list(raw_list)

    async def load(self, last_error: Optional[str]) -> Optional[LoadOutcome]:
        if not self.raw_list:
            return None
        logger.info(f"Using built-in list ({len(self.raw_list)})")
        return LoadOutcome.from_list(self.raw_list, self.kind, error=last_error)


async def first_success(sources: Sequence[ListSource]) -> LoadOutcome:
    """Try each source in order; the first outcome wins. Never raises."""
    last_error: Optional[str] = None
    for source in sources:
        try:
            outcome = await source.load(last_error)
        except ListLoadError as e:
            last_error = str(e)
            logger.warning(f"Fetch failed {source.describe()}: {last_error}")
            continue
        except Exception as e:
            last_error = f"{type(e).__name__}: {e}"
            logger.error(f"Unexpected error in list source {source.describe()}", exc_info=True)
            continue
        if outcome is not None:
            return outcome

    outcome = LoadOutcome.empty(last_error or "fetch failed")
    logger.error(f"JSON load failed: {outcome.error}. Set a manual list to proceed offline.")
    return outcome


class ListLoader:
    """Resolves the faction list once per pipeline run."""

    def __init__(
        self,
        store: ListStore,
        min_body_length: int = 5,
        builtin_list: Optional[Sequence[str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            store: Cache and manual override storage
            min_body_length: Mirror bodies shorter than this count as ghost responses
            builtin_list: Last-resort list for deployments without a network source
            client: Shared HTTP client; a private one is created per resolve() otherwise
            transport: Transport for the private client (tests use httpx.MockTransport)
        """
        self.store = store
        self.min_body_length = min_body_length
        self.builtin_list = list(builtin_list) if builtin_list else None
        self.client = client
        self.transport = transport

    def build_sources(
        self,
        mirrors: Sequence[str],
        ttl_s: float,
        fetch_timeout_s: float,
        client: httpx.AsyncClient,
    ) -> List[ListSource]:
        sources: List[ListSource] = [
            ManualOverrideSource(self.store),
            FreshCacheSource(self.store, ttl_s),
        ]
        sources.extend(
            MirrorSource(url, client, self.store, fetch_timeout_s, self.min_body_length)
            for url in mirrors
        )
        sources.append(StaleCacheSource(self.store))
        if self.builtin_list:
            sources.append(BuiltinListSource(self.builtin_list))
        return sources

    async def resolve(
        self,
        mirrors: Sequence[str],
        ttl_s: float,
        fetch_timeout_s: float,
    ) -> LoadOutcome:
        if self.client is not None:
            return await first_success(
                self.build_sources(mirrors, ttl_s, fetch_timeout_s, self.client)
            )
        async with httpx.AsyncClient(transport=self.transport, follow_redirects=True) as client:
            return await first_success(
                self.build_sources(mirrors, ttl_s, fetch_timeout_s, client)
            )
