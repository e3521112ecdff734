"""Evidence aggregation: chain-aware fan-out to the source connectors.

Phase 1 gathers token data (market, security, fundamentals, holders).
Phase 2 gathers social data (X posts, website, Telegram channel). Every
branch is settled independently; a failed source only leaves its own field
empty.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from dyor_scan.scan.chains import BNB, DEFAULT_DECIMALS, SOLANA
from dyor_scan.scan.evidence import UNKNOWN_NAME, UNKNOWN_SYMBOL, EvidenceRecord
from dyor_scan.sources.models import DexSnapshot, Fundamentals, Socials
from dyor_scan.sources.registry import Sources
from dyor_scan.utils.concurrency import settle_all

logger = logging.getLogger(__name__)


def compute_market_cap(
    price: float | None,
    supply: str | int | None,
    decimals: int | None,
    chain: str,
    reported: float | None = None,
) -> float | None:
    """price x (supply / 10**decimals), exact until the final float conversion.

    Falls back to the ``reported`` market cap when price or supply is unknown.
    """
    if not price or not supply:
        return reported
    if decimals is None:
        decimals = DEFAULT_DECIMALS.get(chain, 9)
    try:
        raw_supply = int(supply)
        cap = Decimal(raw_supply) * Decimal(str(price)) / (Decimal(10) ** decimals)
    except (ValueError, TypeError, InvalidOperation):
        return reported
    return float(cap)


async def _absent():
    return None


class EvidenceAggregator:
    def __init__(self, sources: Sources) -> None:
        self.sources = sources

    async def fetch_token_data(self, address: str, chain: str) -> EvidenceRecord:
        """Phase 1: market data on every chain, chain-specific sources on top."""
        security = None
        birdeye = None

        if chain == BNB:
            dex, fundamentals, holders = await settle_all([
                self.sources.market_snapshot(address),
                self.sources.bsc_token_info(address),
                self.sources.bsc_holders(address),
            ])
        elif chain == SOLANA:
            calls = [
                self.sources.market_snapshot(address),
                self.sources.security_report(address),
                self.sources.solana_fundamentals(address),
                self.sources.solana_holders(address),
            ]
            if self.sources.birdeye_enabled:
                calls.append(self.sources.birdeye_overview(address))
            results = await settle_all(calls)
            dex, security, fundamentals, holders = results[:4]
            if len(results) > 4:
                birdeye = results[4]
        else:
            raise ValueError(f"Unsupported chain: {chain}")

        evidence = self._assemble(address, chain, dex, fundamentals, holders)
        evidence.security = security
        evidence.birdeye = birdeye

        if chain == BNB and not evidence.socials.website:
            logger.info("No website from DexScreener for %s, checking four.meme", address[:12])
            discovered = await self.sources.discover_website(address)
            if discovered:
                evidence.socials = evidence.socials.model_copy(update={"website": discovered})

        logger.info(
            "Token data for %s (%s): %s liquidity=%s mcap=%s holders=%s",
            address[:12], chain, evidence.symbol,
            evidence.liquidity, evidence.market_cap, evidence.holder_count,
        )
        return evidence

    def _assemble(
        self,
        address: str,
        chain: str,
        dex: DexSnapshot | None,
        fundamentals: Fundamentals | None,
        holders: int | None,
    ) -> EvidenceRecord:
        holder_count = holders or (fundamentals.holder_count if fundamentals else None)
        if fundamentals is not None and holder_count is not None:
            fundamentals = fundamentals.model_copy(update={"holder_count": holder_count})

        symbol = (dex.symbol if dex else None) or (
            fundamentals.token_symbol if fundamentals else None
        ) or UNKNOWN_SYMBOL
        name = (dex.token_name if dex else None) or (
            fundamentals.token_name if fundamentals else None
        ) or UNKNOWN_NAME

        market = None
        if dex is not None:
            market_cap = compute_market_cap(
                dex.market.price,
                fundamentals.supply if fundamentals else None,
                fundamentals.decimals if fundamentals else None,
                chain,
                reported=dex.reported_market_cap,
            )
            market = dex.market.model_copy(update={"market_cap": market_cap})

        return EvidenceRecord(
            contract_address=address,
            chain=chain,
            token_name=name,
            symbol=symbol,
            market=market,
            fundamentals=fundamentals,
            socials=dex.socials if dex else Socials(),
            holder_count=holder_count,
        )

    async def fetch_social_data(self, evidence: EvidenceRecord) -> EvidenceRecord:
        """Phase 2: profile posts, ticker search, website and Telegram channel."""
        socials = evidence.socials
        profile, ticker, website, telegram = await settle_all([
            self.sources.profile_posts(socials.x) if socials.x else _absent(),
            self.sources.ticker_posts(evidence.symbol),
            self.sources.website_content(socials.website) if socials.website else _absent(),
            self.sources.telegram_feed(socials.telegram) if socials.telegram else _absent(),
        ])

        evidence.profile_posts = profile
        evidence.ticker_posts = ticker
        evidence.website = website
        evidence.telegram = telegram

        logger.info(
            "Social data for %s: profile=%d ticker=%d website=%s telegram=%s",
            evidence.symbol,
            profile.post_count if profile else 0,
            ticker.post_count if ticker else 0,
            "yes" if website else "no",
            "yes" if telegram else "no",
        )
        return evidence
