import logging

import httpx

from dyor_scan.config import settings

logger = logging.getLogger(__name__)

BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ScrapingBeeError(RuntimeError):
    pass


def is_configured() -> bool:
    return bool(settings.scrapingbee_api_key)


async def fetch_rendered_html(
    url: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> str:
    """Fetch a JS-rendered page through ScrapingBee's premium proxy.

    Raises ``ScrapingBeeError`` or ``httpx.HTTPError``; callers absorb them.
    """
    if not settings.scrapingbee_api_key:
        raise ScrapingBeeError("SCRAPINGBEE_API_KEY is not set")

    resp = await client.get(
        settings.scrapingbee_base_url,
        params={
            "api_key": settings.scrapingbee_api_key,
            "url": url,
            "render_js": "true",
            "premium_proxy": "true",
        },
        headers={"User-Agent": BROWSER_UA},
        timeout=timeout or settings.scrape_timeout,
    )
    if resp.status_code == 401:
        raise ScrapingBeeError("ScrapingBee authentication failed (401), check SCRAPINGBEE_API_KEY")
    if resp.status_code >= 400:
        raise ScrapingBeeError(f"ScrapingBee error {resp.status_code}: {resp.text[:100]}")
    return resp.text
