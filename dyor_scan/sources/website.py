"""Project website scraper: ScrapingBee first (JS / Cloudflare), direct fetch as fallback."""

import logging
import re

import httpx
from bs4 import BeautifulSoup

from dyor_scan.config import settings
from dyor_scan.sources import scrapingbee
from dyor_scan.sources.models import WebsiteContent

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 2000
MAX_HEADINGS = 10
MIN_HTML_CHARS = 100

_WS_RE = re.compile(r"\s+")


def _meta(soup: BeautifulSoup, *selectors: tuple[str, str]) -> str:
    for attr, value in selectors:
        tag = soup.find("meta", attrs={attr: value})
        if tag is not None and tag.get("content"):
            return tag["content"].strip()
    return ""


def extract_content(url: str, html: str) -> WebsiteContent | None:
    """Pull title, description, headings and main text out of a page.

    Returns None when the page carries nothing meaningful.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    title = soup.title.get_text(strip=True) if soup.title else ""
    og_title = _meta(soup, ("property", "og:title"))
    description = _meta(
        soup,
        ("name", "description"),
        ("property", "og:description"),
        ("name", "og:description"),
    )

    container = soup.find("article") or soup.find("main") or soup.body or soup
    text = _WS_RE.sub(" ", container.get_text(" ")).strip()

    headings = []
    for h in soup.find_all(["h1", "h2", "h3"]):
        heading = h.get_text(" ", strip=True)
        if heading and len(heading) < 200:
            headings.append(heading)

    if len(text) < 100 and not title and not description:
        return None

    return WebsiteContent(
        url=url,
        title=title or og_title or "No title",
        meta_description=description,
        text=text[:MAX_TEXT_CHARS],
        headings=headings[:MAX_HEADINGS],
    )


async def scrape_website(
    url: str | None, client: httpx.AsyncClient, timeout: float | None = None,
) -> WebsiteContent | None:
    if not url:
        return None
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    timeout = timeout or settings.scrape_timeout

    if scrapingbee.is_configured():
        try:
            html = await scrapingbee.fetch_rendered_html(url, client, timeout=timeout)
            if len(html) > MIN_HTML_CHARS:
                content = extract_content(url, html)
                if content is not None:
                    logger.info("Website scraped via ScrapingBee: %s (%d chars)", url, len(content.text))
                    return content
        except (scrapingbee.ScrapingBeeError, httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.info("ScrapingBee failed for %s: %s", url, exc)

    try:
        resp = await client.get(
            url,
            headers={"User-Agent": scrapingbee.BROWSER_UA},
            timeout=timeout,
            follow_redirects=True,
        )
        resp.raise_for_status()
        html = resp.text
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("Website fetch failed for %s: %s", url, exc)
        return None

    if len(html) < MIN_HTML_CHARS:
        logger.warning("Website %s returned an empty page", url)
        return None

    content = extract_content(url, html)
    if content is None:
        logger.warning("No meaningful content extracted from %s", url)
    return content
