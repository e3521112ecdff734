"""Shared fixtures: mocked source registry, evidence builders, fake text backends."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from dyor_scan.scan.cache import ResultCache
from dyor_scan.scan.evidence import EvidenceRecord
from dyor_scan.sources.models import (
    DexSnapshot,
    Fundamentals,
    MarketData,
    Post,
    PostFeed,
    SecurityReport,
    SecurityRisk,
    Socials,
)
from dyor_scan.sources.registry import Sources
from dyor_scan.storage.database import build_session_factory, init_db

SOL_MINT = "So11111111111111111111111111111111111111112"
BNB_CA = "0x" + "ab" * 20

SOURCE_METHODS = (
    "market_snapshot",
    "ticker_posts",
    "profile_posts",
    "website_content",
    "telegram_feed",
    "security_report",
    "solana_fundamentals",
    "solana_holders",
    "birdeye_overview",
    "bsc_token_info",
    "bsc_holders",
    "discover_website",
)


def make_sources(**returns) -> MagicMock:
    """A Sources stand-in whose every connector is an AsyncMock.

    Keyword arguments set return values; pass an Exception instance to make
    that connector raise.
    """
    sources = MagicMock(spec=Sources)
    sources.birdeye_enabled = returns.pop("birdeye_enabled", False)
    defaults = {"ticker_posts": PostFeed(), "profile_posts": PostFeed()}
    for name in SOURCE_METHODS:
        value = returns.get(name, defaults.get(name))
        if isinstance(value, Exception):
            setattr(sources, name, AsyncMock(side_effect=value))
        else:
            setattr(sources, name, AsyncMock(return_value=value))
    return sources


def assert_not_called(sources: MagicMock, *names: str) -> None:
    for name in names:
        getattr(sources, name).assert_not_awaited()


def dex_snapshot(
    liquidity: float | None = 2_000_000,
    volume: float | None = 1_500_000,
    price: float | None = 0.01,
    change: float | None = 5.0,
    market_cap: float | None = 20_000_000,
    socials: Socials | None = None,
    symbol: str = "GOOD",
) -> DexSnapshot:
    return DexSnapshot(
        token_name="Good Token",
        symbol=symbol,
        market=MarketData(
            price=price,
            volume_24h=volume,
            liquidity=liquidity,
            price_change_24h=change,
            dex_url="https://dexscreener.com/solana/pair",
        ),
        reported_market_cap=market_cap,
        socials=socials or Socials(),
    )


ALL_SOCIALS = Socials(
    website="https://good.example",
    x="https://x.com/goodtoken",
    telegram="https://t.me/goodtoken",
)


def make_evidence(
    chain: str = "solana",
    liquidity: float | None = 2_000_000,
    volume: float | None = 1_500_000,
    market_cap: float | None = 20_000_000,
    risks: list[SecurityRisk] | None = None,
    security: bool = True,
    mint_authority: str | None = None,
    freeze_authority: str | None = None,
    fundamentals: bool = True,
    socials: Socials | None = ALL_SOCIALS,
    sentiment: int | None = 80,
) -> EvidenceRecord:
    return EvidenceRecord(
        contract_address=SOL_MINT if chain == "solana" else BNB_CA,
        chain=chain,
        token_name="Good Token",
        symbol="GOOD",
        market=MarketData(
            price=0.01,
            liquidity=liquidity,
            volume_24h=volume,
            market_cap=market_cap,
        ),
        fundamentals=Fundamentals(
            supply="1000000000000000000",
            decimals=9,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
        ) if fundamentals else None,
        security=SecurityReport(risk_level="low", risks=risks or []) if security else None,
        socials=socials or Socials(),
        sentiment_score=sentiment,
    )


def post(text: str = "$GOOD to the moon", likes: int = 0, retweets: int = 0) -> Post:
    return Post(text=text, author="Alice", username="alice", likes=likes, retweets=retweets)


class RecordingTextService:
    """Text backend that answers every prompt and remembers what it was asked."""

    def __init__(self, verdict_json: str | None = None) -> None:
        self.prompts: list[str] = []
        self.verdict_json = verdict_json or (
            '{"verdict": "CONFIRMED", "reasoning": "Matches the website.", '
            '"confidence": "high", "red_flags": []}'
        )

    async def complete(self, prompt: str, max_tokens: int) -> str:
        self.prompts.append(prompt)
        if "Return STRICT JSON" in prompt:
            return self.verdict_json
        return f"generated ({max_tokens})"


class FailingTextService:
    async def complete(self, prompt: str, max_tokens: int) -> str:
        raise RuntimeError("backend down")


@pytest.fixture
def text_service() -> RecordingTextService:
    return RecordingTextService()


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def result_cache(session_factory) -> ResultCache:
    return ResultCache(session_factory)
