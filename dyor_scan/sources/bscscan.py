"""BNB Smart Chain token metadata via the Etherscan V2 multichain API (chainid=56).

tokeninfo gives name/symbol/decimals/supply; tokenholdercount gives the holder
total. Both need ``BSCSCAN_API_KEY`` and both are optional on the free tier.
"""

import logging

import httpx

from dyor_scan.config import settings
from dyor_scan.sources.models import Fundamentals

logger = logging.getLogger(__name__)


async def _etherscan_get(
    params: dict, client: httpx.AsyncClient, timeout: float | None = None,
) -> dict | None:
    """Single Etherscan V2 GET. Returns the JSON body only for status=1."""
    params = {**params, "chainid": settings.bsc_chain_id, "apikey": settings.bscscan_api_key}
    try:
        resp = await client.get(
            settings.etherscan_v2_url,
            params=params,
            timeout=timeout or settings.fundamentals_timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Etherscan request failed (%s): %s", params.get("action"), exc)
        return None

    if not isinstance(data, dict) or data.get("status") != "1":
        logger.debug(
            "Etherscan non-OK response for %s: %s",
            params.get("action"), (data or {}).get("message") if isinstance(data, dict) else data,
        )
        return None
    return data


async def get_token_info(
    ca: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> Fundamentals | None:
    if not settings.bscscan_api_key:
        return None

    data = await _etherscan_get(
        {"module": "token", "action": "tokeninfo", "contractaddress": ca},
        client,
        timeout=timeout,
    )
    if data is None:
        return None

    result = data.get("result")
    if isinstance(result, list):
        result = result[0] if result else None
    if not isinstance(result, dict):
        return None

    supply = None
    if result.get("totalSupply"):
        try:
            supply = str(int(result["totalSupply"]))
        except (ValueError, TypeError):
            supply = None

    decimals = None
    if result.get("divisor") or result.get("decimals"):
        try:
            decimals = int(result.get("decimals") or result.get("divisor"))
        except (ValueError, TypeError):
            decimals = None

    return Fundamentals(
        supply=supply,
        decimals=decimals,
        token_name=result.get("tokenName") or result.get("name") or None,
        token_symbol=result.get("symbol") or None,
    )


async def get_holder_count(
    ca: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> int | None:
    if not settings.bscscan_api_key:
        return None

    data = await _etherscan_get(
        {"module": "token", "action": "tokenholdercount", "contractaddress": ca},
        client,
        timeout=timeout,
    )
    if data is None:
        return None

    try:
        return int(data.get("result"))
    except (ValueError, TypeError):
        return None
