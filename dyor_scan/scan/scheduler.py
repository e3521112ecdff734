"""Scan pipeline as an explicit ordered list of stages, streamed as events.

classify -> fetch_token_data -> fetch_social_data -> derive_sentiment_and_score
-> narrative_and_fundamentals -> summary_and_hype -> complete

Each stage emits one event per independent data item so a client can render
incrementally. The stream always ends with exactly one ``complete`` or
``error`` event.
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable

from sqlalchemy.exc import SQLAlchemyError

from dyor_scan.narrative.generators import Narrator
from dyor_scan.scan.aggregator import EvidenceAggregator
from dyor_scan.scan.cache import ResultCache
from dyor_scan.scan.chains import InvalidAddressError, require_chain
from dyor_scan.scan.evidence import EvidenceRecord, ScanResult
from dyor_scan.scan.scorer import calculate_token_score
from dyor_scan.scan.sentiment import NEUTRAL_SENTIMENT, compute_sentiment

logger = logging.getLogger(__name__)


class ScanPhase(str, enum.Enum):
    CLASSIFY = "classify"
    FETCH_TOKEN_DATA = "fetch_token_data"
    FETCH_SOCIAL_DATA = "fetch_social_data"
    DERIVE_SENTIMENT_AND_SCORE = "derive_sentiment_and_score"
    NARRATIVE_AND_FUNDAMENTALS = "narrative_and_fundamentals"
    SUMMARY_AND_HYPE = "summary_and_hype"
    COMPLETE = "complete"
    FAILED = "failed"


TERMINAL_PHASES = (ScanPhase.COMPLETE, ScanPhase.FAILED)


@dataclass
class ScanEvent:
    type: str
    data: dict | None = None

    def to_dict(self) -> dict:
        return {"type": self.type, "data": self.data}

    def to_sse(self) -> str:
        return f"data: {json.dumps(self.to_dict(), default=str)}\n\n"


@dataclass
class ScanContext:
    raw_address: str
    force_refresh: bool = False
    address: str = ""
    chain: str = ""
    cached: dict | None = None
    evidence: EvidenceRecord | None = None
    result: ScanResult | None = None
    narrative: str = ""

    @property
    def short_circuited(self) -> bool:
        return self.cached is not None


async def _labelled(label: str, awaitable: Awaitable):
    return label, await awaitable


async def _as_completed(named: dict[str, Awaitable]) -> AsyncIterator[tuple[str, object]]:
    """Yield (label, value) pairs in completion order."""
    tasks = [asyncio.ensure_future(_labelled(label, aw)) for label, aw in named.items()]
    try:
        for next_done in asyncio.as_completed(tasks):
            yield await next_done
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()


class ScanScheduler:
    """Runs one scan. Create a fresh scheduler per scan."""

    def __init__(
        self,
        aggregator: EvidenceAggregator,
        narrator: Narrator,
        cache: ResultCache | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.narrator = narrator
        self.cache = cache
        self.phase: ScanPhase | None = None
        self.history: list[ScanPhase] = []
        self.context: ScanContext | None = None

    @property
    def result(self) -> ScanResult | None:
        return self.context.result if self.context else None

    def _enter(self, phase: ScanPhase) -> None:
        if self.phase in TERMINAL_PHASES:
            raise RuntimeError(f"Scan already finished ({self.phase.value})")
        self.phase = phase
        self.history.append(phase)
        logger.debug("Scan phase -> %s", phase.value)

    async def run(self, address: str, force_refresh: bool = False) -> AsyncIterator[ScanEvent]:
        ctx = ScanContext(raw_address=address, force_refresh=force_refresh)
        self.context = ctx
        try:
            for phase, handler_name in PIPELINE_STAGES:
                self._enter(phase)
                async for event in getattr(self, handler_name)(ctx):
                    yield event
                if ctx.short_circuited:
                    break

            if ctx.short_circuited:
                self._enter(ScanPhase.COMPLETE)
                yield ScanEvent("complete", {
                    "message": "Analysis complete (cached)",
                    "token_score": ctx.cached.get("token_score"),
                    "cached": True,
                })
                return

            await self._store(ctx)
            self._enter(ScanPhase.COMPLETE)
            yield ScanEvent("complete", {
                "message": "Analysis complete",
                "token_score": ctx.result.token_score,
                "cached": False,
            })
        except InvalidAddressError as exc:
            self._enter(ScanPhase.FAILED)
            yield ScanEvent("error", {"message": str(exc), "kind": "input"})
        except Exception as exc:
            logger.exception("Scan failed for %s", str(address)[:12])
            self._enter(ScanPhase.FAILED)
            yield ScanEvent("error", {"message": str(exc) or "Analysis failed", "kind": "fatal"})

    async def _store(self, ctx: ScanContext) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.put(ctx.address, ctx.result.to_dict())
        except SQLAlchemyError as exc:
            logger.warning("Cache write failed for %s: %s", ctx.address[:12], exc)

    # -- stages --

    async def _classify(self, ctx: ScanContext) -> AsyncIterator[ScanEvent]:
        ctx.address, ctx.chain = require_chain(ctx.raw_address)
        yield ScanEvent("status", {"message": "Starting analysis...", "phase": ScanPhase.CLASSIFY.value, "chain": ctx.chain})

        if self.cache is not None and not ctx.force_refresh:
            try:
                cached = await self.cache.get(ctx.address)
            except SQLAlchemyError as exc:
                logger.warning("Cache read failed for %s: %s", ctx.address[:12], exc)
                cached = None
            if cached is not None:
                logger.info("Cache hit for %s", ctx.address[:12])
                ctx.cached = cached
                yield ScanEvent("cached", cached)

    async def _fetch_token_data(self, ctx: ScanContext) -> AsyncIterator[ScanEvent]:
        yield ScanEvent("status", {"message": "Fetching token data...", "phase": ScanPhase.FETCH_TOKEN_DATA.value})
        evidence = await self.aggregator.fetch_token_data(ctx.address, ctx.chain)
        ctx.evidence = evidence

        yield ScanEvent("token_info", {**evidence.token_info(), "token_score": None})
        yield ScanEvent("market_data", evidence.market_dict())
        yield ScanEvent("security_data", evidence.security.model_dump() if evidence.security else None)
        fundamentals = evidence.fundamentals.model_dump() if evidence.fundamentals else {}
        yield ScanEvent("fundamentals", {**fundamentals, "holder_count": evidence.holder_count})
        yield ScanEvent("socials", evidence.socials.model_dump())

    async def _fetch_social_data(self, ctx: ScanContext) -> AsyncIterator[ScanEvent]:
        yield ScanEvent("status", {"message": "Fetching social data...", "phase": ScanPhase.FETCH_SOCIAL_DATA.value})
        evidence = await self.aggregator.fetch_social_data(ctx.evidence)
        payload = evidence.to_dict()

        if evidence.profile_posts is not None and not evidence.profile_posts.is_empty:
            yield ScanEvent("profile_posts", payload["profile_posts"])
        if evidence.ticker_posts is not None:
            yield ScanEvent("ticker_posts", payload["ticker_posts"])
        if evidence.website is not None:
            yield ScanEvent("website", payload["website"])
        if evidence.telegram is not None:
            yield ScanEvent("telegram_feed", payload["telegram_feed"])

    async def _derive_sentiment_and_score(self, ctx: ScanContext) -> AsyncIterator[ScanEvent]:
        evidence = ctx.evidence
        sentiment = compute_sentiment(evidence.market, evidence.birdeye, evidence.all_posts())
        evidence.sentiment_score = NEUTRAL_SENTIMENT if sentiment is None else sentiment
        evidence.token_score = calculate_token_score(evidence)
        logger.info(
            "%s scored %d (sentiment %d)", evidence.symbol, evidence.token_score, evidence.sentiment_score
        )
        ctx.result = ScanResult(evidence=evidence)

        yield ScanEvent("sentiment_score", {"sentiment_score": evidence.sentiment_score})
        yield ScanEvent("token_score", {"token_score": evidence.token_score})

    async def _narrative_and_fundamentals(self, ctx: ScanContext) -> AsyncIterator[ScanEvent]:
        yield ScanEvent("status", {
            "message": "Extracting narrative and generating analysis...",
            "phase": ScanPhase.NARRATIVE_AND_FUNDAMENTALS.value,
        })
        evidence = ctx.evidence
        async for label, text in _as_completed({
            "narrative": self.narrator.extract_narrative(evidence),
            "fundamentals_analysis": self.narrator.generate_fundamentals(evidence),
        }):
            if label == "narrative":
                ctx.narrative = text
                ctx.result.narrative_claim = text
                yield ScanEvent("narrative", {"narrative_claim": text})
            else:
                ctx.result.fundamentals_analysis = text
                yield ScanEvent("fundamentals_analysis", {"fundamentals_analysis": text})

    async def _summary_and_hype(self, ctx: ScanContext) -> AsyncIterator[ScanEvent]:
        yield ScanEvent("status", {
            "message": "Generating AI analysis...",
            "phase": ScanPhase.SUMMARY_AND_HYPE.value,
        })
        evidence, narrative = ctx.evidence, ctx.narrative
        async for label, value in _as_completed({
            "summary": self.narrator.generate_summary(evidence, narrative),
            "hype_analysis": self.narrator.generate_hype(evidence, narrative),
            "verdict": self.narrator.classify_narrative(evidence, narrative),
        }):
            if label == "summary":
                ctx.result.summary = value
                yield ScanEvent("summary", {"summary": value})
            elif label == "hype_analysis":
                ctx.result.hype_analysis = value
                yield ScanEvent("hype_analysis", {"hype_analysis": value})
            else:
                ctx.result.verdict = value.model_dump()
                yield ScanEvent("verdict", ctx.result.verdict)


PIPELINE_STAGES: list[tuple[ScanPhase, str]] = [
    (ScanPhase.CLASSIFY, "_classify"),
    (ScanPhase.FETCH_TOKEN_DATA, "_fetch_token_data"),
    (ScanPhase.FETCH_SOCIAL_DATA, "_fetch_social_data"),
    (ScanPhase.DERIVE_SENTIMENT_AND_SCORE, "_derive_sentiment_and_score"),
    (ScanPhase.NARRATIVE_AND_FUNDAMENTALS, "_narrative_and_fundamentals"),
    (ScanPhase.SUMMARY_AND_HYPE, "_summary_and_hype"),
]
