"""Per-scan evidence record and the final scan result."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from dyor_scan.sources.models import (
    BirdeyeOverview,
    Fundamentals,
    MarketData,
    Post,
    PostFeed,
    SecurityReport,
    Socials,
    TelegramFeed,
    WebsiteContent,
)

UNKNOWN_SYMBOL = "???"
UNKNOWN_NAME = "Unknown Token"


def _dump(model) -> dict | None:
    return model.model_dump() if model is not None else None


def _dump_feed(feed: PostFeed | None) -> dict | None:
    if feed is None:
        return None
    return {
        "query": feed.query,
        "post_count": feed.post_count,
        "posts": [p.model_dump() for p in feed.posts],
    }


@dataclass
class EvidenceRecord:
    contract_address: str
    chain: str
    token_name: str = UNKNOWN_NAME
    symbol: str = UNKNOWN_SYMBOL

    # Phase 1: token data (None = source absent or failed)
    market: MarketData | None = None
    fundamentals: Fundamentals | None = None
    security: SecurityReport | None = None
    birdeye: BirdeyeOverview | None = None
    socials: Socials = field(default_factory=Socials)
    holder_count: int | None = None

    # Phase 2: social data
    profile_posts: PostFeed | None = None
    ticker_posts: PostFeed | None = None
    website: WebsiteContent | None = None
    telegram: TelegramFeed | None = None

    # Derived
    sentiment_score: int | None = None
    token_score: int | None = None

    @property
    def liquidity(self) -> float | None:
        return self.market.liquidity if self.market else None

    @property
    def volume_24h(self) -> float | None:
        return self.market.volume_24h if self.market else None

    @property
    def market_cap(self) -> float | None:
        return self.market.market_cap if self.market else None

    def all_posts(self) -> list[Post]:
        posts: list[Post] = []
        for feed in (self.ticker_posts, self.profile_posts):
            if feed is not None:
                posts.extend(feed.posts)
        return posts

    def top_posts(self, limit: int = 10) -> list[Post]:
        return sorted(self.all_posts(), key=lambda p: p.engagement, reverse=True)[:limit]

    def token_info(self) -> dict:
        return {
            "contract_address": self.contract_address,
            "chain": self.chain,
            "token_name": self.token_name,
            "symbol": self.symbol,
        }

    def market_dict(self) -> dict:
        return (self.market or MarketData()).model_dump()

    def to_dict(self) -> dict:
        """Serialize for JSON API responses and the cache."""
        return {
            **self.token_info(),
            "market_data": self.market_dict(),
            "fundamentals": _dump(self.fundamentals),
            "security_data": _dump(self.security),
            "birdeye": _dump(self.birdeye),
            "socials": self.socials.model_dump(),
            "holder_count": self.holder_count,
            "profile_posts": _dump_feed(self.profile_posts),
            "ticker_posts": _dump_feed(self.ticker_posts),
            "website": _dump(self.website),
            "telegram_feed": _dump(self.telegram),
            "sentiment_score": self.sentiment_score,
            "token_score": self.token_score,
        }


@dataclass
class ScanResult:
    evidence: EvidenceRecord
    narrative_claim: str = ""
    fundamentals_analysis: str = ""
    summary: str = ""
    hype_analysis: str = ""
    verdict: dict | None = None
    generated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def token_score(self) -> int | None:
        return self.evidence.token_score

    def to_dict(self) -> dict:
        return {
            **self.evidence.to_dict(),
            "narrative_claim": self.narrative_claim,
            "fundamentals_analysis": self.fundamentals_analysis,
            "summary": self.summary,
            "hype_analysis": self.hype_analysis,
            "verdict": self.verdict,
            "generated_at": self.generated_at.isoformat(),
        }
