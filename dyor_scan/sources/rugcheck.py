"""RugCheck security report client (Solana only)."""

import logging

import httpx
from pydantic import ValidationError

from dyor_scan.config import settings
from dyor_scan.sources.models import SecurityReport, SecurityRisk

logger = logging.getLogger(__name__)


async def get_security_report(
    mint: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> SecurityReport | None:
    """Fetch the RugCheck risk report for a mint. Returns None on any failure."""
    try:
        resp = await client.get(
            f"{settings.rugcheck_base_url}/tokens/{mint}/report",
            headers={"Accept": "application/json"},
            timeout=timeout or settings.security_timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("RugCheck lookup failed for %s: %s", mint[:12], exc)
        return None

    if not isinstance(data, dict):
        return None

    try:
        risks = [
            SecurityRisk(
                name=r.get("name") or "",
                level=(r.get("level") or "").lower(),
                description=r.get("description") or "",
                score=r.get("score"),
            )
            for r in data.get("risks") or []
        ]
        return SecurityReport(
            risk_level=data.get("riskLevel") or "unknown",
            risks=risks,
            score=data.get("score"),
        )
    except (AttributeError, ValidationError) as exc:
        logger.warning("RugCheck payload malformed for %s: %s", mint[:12], exc)
        return None
