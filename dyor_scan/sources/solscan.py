import logging

import httpx

from dyor_scan.config import settings

logger = logging.getLogger(__name__)


async def get_holder_count(
    mint: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> int | None:
    """Total holder count for an SPL token from Solscan, or None."""
    try:
        resp = await client.get(
            f"{settings.solscan_base_url}/token/holders",
            params={"tokenAddress": mint, "offset": 0, "size": 1},
            timeout=timeout or settings.holders_timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Solscan holders failed for %s: %s", mint[:12], exc)
        return None

    total = data.get("total") if isinstance(data, dict) else None
    try:
        return int(total) if total else None
    except (ValueError, TypeError):
        return None
