"""Market sentiment: price momentum, volume and X engagement blended to 0-100."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from dyor_scan.sources.models import BirdeyeOverview, MarketData, Post

NEUTRAL_SENTIMENT = 50
HIGH_ENGAGEMENT = 50

_vader = SentimentIntensityAnalyzer()


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def price_component(change_pct: float) -> float:
    if change_pct == 0:
        return 0.5
    score = _clamp((change_pct + 30) / 60)
    if change_pct > 10:
        score = min(1.0, score + 0.1)
    return score


def volume_component(volume: float) -> float:
    if volume <= 0:
        return 0.3
    return _clamp(math.log10(volume) / 7, 0.2, 1.0)


def social_component(posts: list[Post]) -> float:
    if not posts:
        return 0.0
    engagements = [p.engagement for p in posts]
    avg = sum(engagements) / len(engagements)
    high = sum(1 for e in engagements if e > HIGH_ENGAGEMENT)
    return (
        min(0.3, len(posts) * 0.03)
        + min(0.4, math.log10(avg + 1) / 3)
        + min(0.3, high * 0.06)
    )


def compute_sentiment(
    market: MarketData | None,
    birdeye: BirdeyeOverview | None,
    posts: list[Post],
) -> int | None:
    """Sentiment score in [0, 100], or None when no source produced anything.

    Birdeye figures take precedence over DexScreener's when both exist.
    Posts with real traction lift the score to fixed floors.
    """
    if birdeye is None and market is None and not posts:
        return None

    source = birdeye if birdeye is not None else market
    change = (source.price_change_24h or 0.0) if source is not None else 0.0
    volume = (source.volume_24h or 0.0) if source is not None else 0.0

    blended = (
        0.25 * price_component(change)
        + 0.25 * volume_component(volume)
        + 0.5 * social_component(posts)
    )
    score = _round_half_up(blended * 100)

    if posts:
        high = sum(1 for p in posts if p.engagement > HIGH_ENGAGEMENT)
        if high >= 3:
            score = max(score, 55)
        elif len(posts) >= 5:
            score = max(score, 40)
        else:
            score = max(score, 30)

    return max(0, min(100, score))


@dataclass
class BuzzStats:
    total_posts: int = 0
    bullish_count: int = 0
    bearish_count: int = 0
    neutral_count: int = 0
    total_engagement: int = 0
    top_posts: list[dict] = field(default_factory=list)  # {text, author, likes, retweets}


def summarize_buzz(posts: list[Post], top: int = 5) -> BuzzStats:
    """VADER polarity split over the posts; descriptive only, never scored."""
    stats = BuzzStats(total_posts=len(posts))

    for post in posts:
        compound = _vader.polarity_scores(post.text)["compound"]
        if compound >= 0.05:
            stats.bullish_count += 1
        elif compound <= -0.05:
            stats.bearish_count += 1
        else:
            stats.neutral_count += 1
        stats.total_engagement += post.likes + post.retweets + post.replies

    ranked = sorted(posts, key=lambda p: p.engagement, reverse=True)
    stats.top_posts = [
        {
            "text": p.text[:200],
            "author": p.username or p.author,
            "likes": p.likes,
            "retweets": p.retweets,
        }
        for p in ranked[:top]
    ]
    return stats
