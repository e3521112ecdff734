"""Secondary website discovery for BNB launchpad tokens via their four.meme page."""

import json
import logging

import httpx
from bs4 import BeautifulSoup

from dyor_scan.config import settings
from dyor_scan.sources import scrapingbee

logger = logging.getLogger(__name__)

# Links on a token page that are never the project's own website
NON_WEBSITE_HOSTS = (
    "twitter.com", "x.com", "telegram.org", "t.me", "dexscreener.com",
    "bscscan.com", "four.meme", "github.com", "discord.com", "medium.com",
    "reddit.com",
)


def _absolute(href: str) -> str:
    if href.startswith("/"):
        return f"{settings.fourmeme_base_url}{href}"
    if not href.startswith(("http://", "https://")):
        return f"https://{href}"
    return href


def _first_website_link(anchors) -> str | None:
    for a in anchors:
        href = (a.get("href") or "").strip()
        if not href or href.startswith(("#", "mailto:", "javascript:")):
            continue
        url = _absolute(href)
        if not any(host in url for host in NON_WEBSITE_HOSTS):
            return url
    return None


def find_website(html: str) -> str | None:
    """Locate the project website on a four.meme token page.

    Tries the token info panel, then every link, then og:url / canonical,
    then JSON-LD ``url``.
    """
    soup = BeautifulSoup(html, "html.parser")

    panel = soup.select_one('.bg-darkGray900, [class*="darkGray900"]')
    if panel is not None:
        url = _first_website_link(panel.find_all("a", href=True))
        if url:
            return url

    url = _first_website_link(soup.find_all("a", href=True))
    if url:
        return url

    og = soup.find("meta", attrs={"property": "og:url"})
    if og is not None and (og.get("content") or "").startswith(("http://", "https://")):
        return og["content"]
    canonical = soup.find("link", attrs={"rel": "canonical"})
    if canonical is not None and (canonical.get("href") or "").startswith(("http://", "https://")):
        return canonical["href"]

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or "")
        except ValueError:
            continue
        if isinstance(data, dict) and str(data.get("url", "")).startswith(("http://", "https://")):
            return data["url"]

    return None


async def discover_website(
    contract_address: str, client: httpx.AsyncClient, timeout: float | None = None,
) -> str | None:
    if not scrapingbee.is_configured():
        logger.debug("SCRAPINGBEE_API_KEY not set, skipping four.meme lookup")
        return None

    page_url = f"{settings.fourmeme_base_url}/token/{contract_address}"
    try:
        html = await scrapingbee.fetch_rendered_html(page_url, client, timeout=timeout)
    except (scrapingbee.ScrapingBeeError, httpx.HTTPError) as exc:
        logger.warning("four.meme lookup failed for %s: %s", contract_address[:12], exc)
        return None

    if len(html) < 100:
        return None

    website = find_website(html)
    if website:
        logger.info("four.meme website for %s: %s", contract_address[:12], website)
    return website
