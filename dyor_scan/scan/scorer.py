"""Token credibility score (1-100).

Fundamentals start from a conservative baseline of 30 and move with
liquidity, market cap, security posture, social presence and volume. They
are blended 60/40 with the sentiment score, then hard caps apply:

* liquidity below $50K          -> at most 60
* any security risk flag        -> at most 40
* mint or freeze authority set  -> at most 30
* fewer than 4 strong indicators -> at most 70

Pure and deterministic: the same evidence always yields the same score.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from dyor_scan.scan.aggregator import compute_market_cap
from dyor_scan.scan.chains import BNB, SOLANA
from dyor_scan.scan.evidence import EvidenceRecord

BASELINE = 30
FUNDAMENTALS_WEIGHT = 0.6
SENTIMENT_WEIGHT = 0.4

LOW_LIQUIDITY_THRESHOLD = 50_000
LOW_LIQUIDITY_CAP = 60
RISK_FLAG_CAP = 40
AUTHORITY_CAP = 30
MIN_STRONG_INDICATORS = 4
WEAK_INDICATORS_CAP = 70

# (threshold, points), checked top-down with strict ">"
LIQUIDITY_TIERS = [
    (1_000_000, 13), (500_000, 12), (100_000, 8), (50_000, 5), (10_000, 2), (5_000, 1),
]
MARKET_CAP_TIERS = [
    (10_000_000, 10), (5_000_000, 8), (1_000_000, 7), (500_000, 5), (100_000, 3), (10_000, 1),
]
VOLUME_TIERS = [
    (1_000_000, 8), (500_000, 6), (100_000, 4), (50_000, 2), (10_000, 1),
]


def _tiered(value: float | None, tiers, below: int, unknown: int) -> int:
    if not value:
        return unknown
    for threshold, points in tiers:
        if value > threshold:
            return points
    return below


def _market_cap(evidence: EvidenceRecord) -> float | None:
    if evidence.market_cap:
        return evidence.market_cap
    if evidence.market is None or evidence.fundamentals is None:
        return None
    return compute_market_cap(
        evidence.market.price,
        evidence.fundamentals.supply,
        evidence.fundamentals.decimals,
        evidence.chain,
    )


def _risk_count(evidence: EvidenceRecord) -> int:
    return len(evidence.security.risks) if evidence.security else 0


def _has_authority(evidence: EvidenceRecord) -> bool:
    if evidence.chain != SOLANA or evidence.fundamentals is None:
        return False
    return bool(evidence.fundamentals.mint_authority or evidence.fundamentals.freeze_authority)


def security_points(evidence: EvidenceRecord) -> int:
    report = evidence.security
    if report is None:
        points = -5 if evidence.chain == BNB else -10
    elif not report.risks:
        points = 10
    else:
        points = -15 * report.count("high") - 8 * report.count("medium")

    fundamentals = evidence.fundamentals
    if evidence.chain == SOLANA and fundamentals is not None:
        if not fundamentals.mint_authority and not fundamentals.freeze_authority:
            points += 3
        if fundamentals.mint_authority:
            points -= 15
        if fundamentals.freeze_authority:
            points -= 15
    return points


def socials_points(evidence: EvidenceRecord) -> int:
    return {3: 5, 2: 3, 1: 1}.get(len(evidence.socials.present()), -8)


def strong_indicators(evidence: EvidenceRecord) -> list[str]:
    """Names of the fundamentals-health conditions that currently hold."""
    liquidity = evidence.liquidity or 0
    volume = evidence.volume_24h or 0
    market_cap = _market_cap(evidence) or 0

    checks = {
        "liquidity": liquidity > 100_000,
        "no_risk_flags": _risk_count(evidence) == 0,
        "no_authority": not _has_authority(evidence),
        "social_presence": bool(evidence.socials.present()),
        "volume": volume > 100_000,
        "market_cap": market_cap > 1_000_000,
    }
    return [name for name, ok in checks.items() if ok]


@dataclass
class ScoreBreakdown:
    contributions: dict[str, int] = field(default_factory=dict)
    fundamentals: int = BASELINE
    sentiment: int = 0
    blended: int = 0
    caps: dict[str, int] = field(default_factory=dict)
    strong_indicators: list[str] = field(default_factory=list)
    final: int = 0

    def to_dict(self) -> dict:
        return {
            "contributions": self.contributions,
            "fundamentals": self.fundamentals,
            "sentiment": self.sentiment,
            "blended": self.blended,
            "caps": self.caps,
            "strong_indicators": self.strong_indicators,
            "final": self.final,
        }


def score_breakdown(evidence: EvidenceRecord) -> ScoreBreakdown:
    """Every step of the score, for inspection and tests."""
    if evidence.sentiment_score is None:
        raise ValueError("sentiment_score must be resolved before scoring")

    contributions = {
        "liquidity": _tiered(evidence.liquidity, LIQUIDITY_TIERS, below=-15, unknown=-20),
        "market_cap": _tiered(_market_cap(evidence), MARKET_CAP_TIERS, below=-5, unknown=-3),
        "security": security_points(evidence),
        "socials": socials_points(evidence),
        "volume": _tiered(evidence.volume_24h, VOLUME_TIERS, below=-5, unknown=-5),
    }
    fundamentals = BASELINE + sum(contributions.values())
    sentiment = evidence.sentiment_score
    blended = int(math.floor(
        fundamentals * FUNDAMENTALS_WEIGHT + sentiment * SENTIMENT_WEIGHT + 0.5
    ))

    caps: dict[str, int] = {}
    if (evidence.liquidity or 0) < LOW_LIQUIDITY_THRESHOLD:
        caps["low_liquidity"] = LOW_LIQUIDITY_CAP
    if _risk_count(evidence) > 0:
        caps["risk_flags"] = RISK_FLAG_CAP
    if _has_authority(evidence):
        caps["authority"] = AUTHORITY_CAP

    indicators = strong_indicators(evidence)
    if len(indicators) < MIN_STRONG_INDICATORS:
        caps["weak_indicators"] = WEAK_INDICATORS_CAP

    score = min([blended, *caps.values()])
    final = max(1, min(100, score))

    return ScoreBreakdown(
        contributions=contributions,
        fundamentals=fundamentals,
        sentiment=sentiment,
        blended=blended,
        caps=caps,
        strong_indicators=indicators,
        final=final,
    )


def calculate_token_score(evidence: EvidenceRecord) -> int:
    return score_breakdown(evidence).final
