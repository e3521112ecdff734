"""Entry point used by the web API and the Telegram bot."""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dyor_scan.narrative.generators import Narrator
from dyor_scan.narrative.llm import AnthropicTextService, TextService
from dyor_scan.scan.aggregator import EvidenceAggregator
from dyor_scan.scan.cache import ResultCache
from dyor_scan.scan.chains import InvalidAddressError, require_chain
from dyor_scan.scan.scheduler import ScanEvent, ScanScheduler
from dyor_scan.sources.registry import Sources

logger = logging.getLogger(__name__)


class ScanFailedError(RuntimeError):
    pass


class ScanService:
    def __init__(
        self,
        aggregator: EvidenceAggregator,
        narrator: Narrator,
        cache: ResultCache | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.narrator = narrator
        self.cache = cache

    def new_scheduler(self) -> ScanScheduler:
        return ScanScheduler(self.aggregator, self.narrator, self.cache)

    def stream(self, address: str, force_refresh: bool = False) -> AsyncIterator[ScanEvent]:
        """Streaming variant: every phase as events, ending in complete or error."""
        return self.new_scheduler().run(address, force_refresh=force_refresh)

    async def scan(self, address: str, force_refresh: bool = False) -> dict:
        """Cached variant: returns the whole result dict at once.

        Any non-empty string may hit the cache; only a miss requires the
        address to classify to a supported chain.
        """
        if not isinstance(address, str) or not address.strip():
            raise InvalidAddressError("Contract address is required")
        trimmed = address.strip()

        if self.cache is not None and not force_refresh:
            try:
                cached = await self.cache.get(trimmed)
            except SQLAlchemyError as exc:
                logger.warning("Cache read failed for %s: %s", trimmed[:12], exc)
                cached = None
            if cached is not None:
                logger.info("Returning cached scan for %s", trimmed[:12])
                return {**cached, "cached": True}

        require_chain(trimmed)

        scheduler = self.new_scheduler()
        async for event in scheduler.run(trimmed, force_refresh=True):
            if event.type == "error":
                message = (event.data or {}).get("message", "Analysis failed")
                if (event.data or {}).get("kind") == "input":
                    raise InvalidAddressError(message)
                raise ScanFailedError(message)

        return {**scheduler.result.to_dict(), "cached": False}


def build_scan_service(
    client: httpx.AsyncClient,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    text_service: TextService | None = None,
) -> ScanService:
    """Wire the production collaborators once at startup."""
    sources = Sources(client)
    return ScanService(
        aggregator=EvidenceAggregator(sources),
        narrator=Narrator(text_service or AnthropicTextService()),
        cache=ResultCache(session_factory) if session_factory is not None else None,
    )
