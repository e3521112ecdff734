"""DexScreener client: market data, token identity and social links by contract address."""

import logging

import httpx

from dyor_scan.config import settings
from dyor_scan.sources.models import DexSnapshot, MarketData, Socials

logger = logging.getLogger(__name__)


def _to_float(value) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _pair_liquidity(pair: dict) -> float:
    liquidity = pair.get("liquidity")
    if not isinstance(liquidity, dict):
        return 0.0
    return _to_float(liquidity.get("usd")) or 0.0


async def get_token_by_address(
    address: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> dict | None:
    """Look up a token on DexScreener by contract address (any chain).

    Returns the best (highest liquidity) pair info, or None.
    """
    try:
        resp = await client.get(
            f"{settings.dexscreener_base_url}/tokens/{address}",
            headers={"Accept": "application/json"},
            timeout=timeout or settings.market_timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("DexScreener lookup failed for %s: %s", address[:12], exc)
        return None

    pairs = (data.get("pairs") or []) if isinstance(data, dict) else []
    pairs = [p for p in pairs if isinstance(p, dict)]
    if not pairs:
        return None

    return max(pairs, key=_pair_liquidity)


def extract_socials(pair: dict) -> Socials:
    info = pair.get("info") or {}
    websites = info.get("websites") or []
    socials = info.get("socials") or []

    def _social(kind: str) -> str | None:
        for s in socials:
            if s.get("type") == kind and s.get("url"):
                return s["url"]
        return None

    return Socials(
        website=(websites[0] or {}).get("url") if websites else None,
        x=_social("twitter"),
        telegram=_social("telegram"),
    )


def extract_snapshot(pair: dict) -> DexSnapshot:
    """Normalize a DexScreener pair into the fixed market-data shape."""
    base = pair.get("baseToken") or {}
    liquidity = pair.get("liquidity") or {}
    volume = pair.get("volume") or {}
    price_change = pair.get("priceChange") or {}

    return DexSnapshot(
        token_name=base.get("name") or None,
        symbol=base.get("symbol") or None,
        market=MarketData(
            price=_to_float(pair.get("priceUsd")),
            volume_24h=_to_float(volume.get("h24")),
            liquidity=_to_float(liquidity.get("usd")),
            price_change_24h=_to_float(price_change.get("h24")),
            dex_url=pair.get("url") or None,
        ),
        reported_market_cap=_to_float(pair.get("marketCap") or pair.get("fdv")),
        socials=extract_socials(pair),
    )


async def get_market_snapshot(
    address: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> DexSnapshot | None:
    pair = await get_token_by_address(address, client, timeout=timeout)
    if pair is None:
        return None
    try:
        return extract_snapshot(pair)
    except (AttributeError, TypeError, ValueError) as exc:
        logger.warning("DexScreener payload malformed for %s: %s", address[:12], exc)
        return None
