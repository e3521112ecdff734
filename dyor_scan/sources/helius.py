"""Helius DAS client for Solana token fundamentals (supply, decimals, authorities)."""

import logging

import httpx

from dyor_scan.config import settings
from dyor_scan.sources.models import Fundamentals

logger = logging.getLogger(__name__)


def _supply_str(value) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return str(int(value))
    except (ValueError, TypeError):
        return None


def _int_or_none(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def parse_asset(asset: dict) -> Fundamentals:
    """Normalize a ``getAsset`` result.

    Fungible tokens carry supply/authorities under ``token_info``; older
    responses put them at the top level, so both places are checked.
    """
    token_info = asset.get("token_info") or {}
    metadata = (asset.get("content") or {}).get("metadata") or {}
    ownership = asset.get("ownership") or {}

    def pick(*keys):
        for key in keys:
            if token_info.get(key) is not None:
                return token_info[key]
            if asset.get(key) is not None:
                return asset[key]
        return None

    return Fundamentals(
        supply=_supply_str(pick("supply")),
        decimals=_int_or_none(pick("decimals")),
        mint_authority=pick("mint_authority", "mintAuthority") or None,
        freeze_authority=pick("freeze_authority", "freezeAuthority") or None,
        holder_count=_int_or_none(ownership.get("ownerCount")),
        token_name=metadata.get("name") or None,
        token_symbol=metadata.get("symbol") or token_info.get("symbol") or None,
    )


async def get_fundamentals(
    mint: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> Fundamentals | None:
    if not settings.helius_api_key:
        logger.debug("HELIUS_API_KEY not set, skipping fundamentals for %s", mint[:12])
        return None

    payload = {
        "jsonrpc": "2.0",
        "id": "dyor-asset",
        "method": "getAsset",
        "params": {"id": mint},
    }
    try:
        resp = await client.post(
            settings.helius_rpc_url,
            params={"api-key": settings.helius_api_key},
            json=payload,
            timeout=timeout or settings.fundamentals_timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Helius getAsset failed for %s: %s", mint[:12], exc)
        return None

    asset = data.get("result") if isinstance(data, dict) else None
    if not isinstance(asset, dict):
        if isinstance(data, dict) and "error" in data:
            logger.debug("Helius RPC error: %s", data["error"])
        return None

    try:
        return parse_asset(asset)
    except (AttributeError, TypeError, ValueError) as exc:
        logger.warning("Helius payload malformed for %s: %s", mint[:12], exc)
        return None
