"""Birdeye token overview (Solana). Optional: only queried with an API key."""

import logging

import httpx
from pydantic import ValidationError

from dyor_scan.config import settings
from dyor_scan.sources.models import BirdeyeOverview

logger = logging.getLogger(__name__)


async def get_token_overview(
    mint: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> BirdeyeOverview | None:
    if not settings.birdeye_api_key:
        return None

    try:
        resp = await client.get(
            f"{settings.birdeye_base_url}/defi/token_overview",
            params={"address": mint},
            headers={"X-API-KEY": settings.birdeye_api_key, "accept": "application/json"},
            timeout=timeout or settings.birdeye_timeout,
        )
        resp.raise_for_status()
        data = (resp.json() or {}).get("data")
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        logger.warning("Birdeye overview failed for %s: %s", mint[:12], exc)
        return None

    if not isinstance(data, dict):
        return None

    try:
        overview = BirdeyeOverview(
            price=data.get("price"),
            price_change_24h=data.get("priceChange24hPercent", data.get("priceChange24h")),
            volume_24h=data.get("v24hUSD", data.get("volume24h")),
            liquidity=data.get("liquidity"),
            trade_count_24h=data.get("trade24h", data.get("tradeCount24h")),
            trending_rank=data.get("tokenRanking"),
        )
    except ValidationError as exc:
        logger.warning("Birdeye payload malformed for %s: %s", mint[:12], exc)
        return None

    logger.info(
        "Birdeye: price=%s volume=%s rank=%s",
        overview.price, overview.volume_24h, overview.trending_rank,
    )
    return overview
