"""X/Twitter posts via Nitter mirrors, fetched through ScrapingBee.

Every lookup races all configured mirrors and keeps the first page that
parses into at least one post. A total miss is an empty ``PostFeed``.
"""

from __future__ import annotations

import logging
import re
from functools import partial

import httpx
from bs4 import BeautifulSoup

from dyor_scan.config import settings
from dyor_scan.sources import scrapingbee
from dyor_scan.sources.models import Post, PostFeed
from dyor_scan.utils.concurrency import race_first_valid

logger = logging.getLogger(__name__)

MAX_POSTS_PER_PAGE = 3
RATE_LIMIT_MARKERS = ("rate limit", "Too many requests")

_STATUS_RE = re.compile(r"/status/(\d+)")
_COUNT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([KkMm]?)")
_PROFILE_RE = re.compile(r"(?:twitter\.com|x\.com)/([^/?#]+)")


def _parse_count(text: str) -> int:
    match = _COUNT_RE.search(text.replace(",", ""))
    if not match:
        return 0
    value = float(match.group(1))
    suffix = match.group(2).lower()
    if suffix == "k":
        value *= 1_000
    elif suffix == "m":
        value *= 1_000_000
    return int(value)


def _stat(item, icon_class: str) -> int:
    icon = item.select_one(f".{icon_class}")
    if icon is None or icon.parent is None:
        return 0
    return _parse_count(icon.parent.get_text(" ", strip=True))


def is_valid_page(html: str) -> bool:
    """A usable Nitter page is not a rate-limit notice and has timeline items."""
    if not html or any(marker in html for marker in RATE_LIMIT_MARKERS):
        return False
    return "timeline-item" in html


def parse_timeline(
    html: str,
    default_author: str = "",
    default_username: str = "",
    limit: int = MAX_POSTS_PER_PAGE,
) -> list[Post]:
    soup = BeautifulSoup(html, "html.parser")
    posts: list[Post] = []

    for item in soup.select(".timeline-item")[:limit]:
        content = item.select_one(".tweet-content")
        text = content.get_text(" ", strip=True) if content else ""
        if not text:
            continue

        author_el = item.select_one(".tweet-header a")
        author = author_el.get_text(strip=True) if author_el else ""
        href = (author_el.get("href") or "") if author_el else ""
        username = href.strip("/").split("/")[0] if href else ""
        username = username or default_username

        time_el = item.select_one("time")
        date = ""
        if time_el is not None:
            date = time_el.get("datetime") or time_el.get_text(strip=True)

        tweet_id = None
        url = None
        link = item.select_one('a[href*="/status/"]')
        if link is not None:
            link_href = link.get("href") or ""
            status = _STATUS_RE.search(link_href)
            if status:
                tweet_id = status.group(1)
                url = (
                    f"https://x.com/{username}/status/{tweet_id}"
                    if username else f"https://x.com{link_href}"
                )
            elif link_href:
                url = link_href if link_href.startswith("http") else f"https://x.com{link_href}"

        posts.append(
            Post(
                text=text,
                author=author or default_author or username,
                username=username,
                date=date,
                likes=_stat(item, "icon-heart"),
                retweets=_stat(item, "icon-retweet"),
                replies=_stat(item, "icon-comment") or _stat(item, "icon-reply"),
                tweet_id=tweet_id,
                url=url,
            )
        )

    return posts


def mentions_ticker(post: Post, ticker: str) -> bool:
    return f"${ticker}" in post.text or ticker.lower() in post.text.lower()


async def _search_mirror(
    mirror: str, ticker: str, client: httpx.AsyncClient, timeout: float,
) -> PostFeed | None:
    query = f"${ticker}"
    html = await scrapingbee.fetch_rendered_html(
        f"{mirror}/search?{httpx.QueryParams({'f': 'top', 'q': query})}",
        client,
        timeout=timeout,
    )
    if not is_valid_page(html):
        return None
    posts = [p for p in parse_timeline(html) if mentions_ticker(p, ticker)]
    return PostFeed(posts=posts, query=query) if posts else None


async def search_ticker(
    ticker: str | None, client: httpx.AsyncClient, timeout: float | None = None,
) -> PostFeed:
    """Recent top posts tagging ``$TICKER``; empty feed when nothing is found."""
    clean = (ticker or "").strip().lstrip("$")
    if not clean or clean == "???" or not scrapingbee.is_configured():
        return PostFeed(query=f"${clean}" if clean else "")

    timeout = timeout or settings.scrape_timeout
    feed = await race_first_valid(
        [partial(_search_mirror, m, clean, client, timeout) for m in settings.nitter_mirrors],
        is_valid=lambda f: not f.is_empty,
    )
    if feed is None:
        logger.info("Nitter ticker search found nothing for $%s", clean)
        return PostFeed(query=f"${clean}")
    logger.info("Nitter ticker search: %d posts for $%s", feed.post_count, clean)
    return feed


def username_from_url(profile_url: str | None) -> str | None:
    if not profile_url:
        return None
    match = _PROFILE_RE.search(profile_url)
    return match.group(1) if match else None


async def _profile_mirror(
    mirror: str, username: str, client: httpx.AsyncClient, timeout: float,
) -> PostFeed | None:
    html = await scrapingbee.fetch_rendered_html(f"{mirror}/{username}", client, timeout=timeout)
    if not is_valid_page(html):
        return None

    soup = BeautifulSoup(html, "html.parser")
    name_el = soup.select_one(".profile-card-fullname, .profile-card-name, .fullname")
    author = name_el.get_text(strip=True) if name_el else username

    posts = parse_timeline(html, default_author=author, default_username=username)
    if not posts:
        return None
    posts.sort(key=lambda p: p.engagement, reverse=True)
    return PostFeed(posts=posts, query=f"@{username}")


async def get_profile_posts(
    profile_url: str | None, client: httpx.AsyncClient, timeout: float | None = None,
) -> PostFeed:
    """Latest posts from the project's own X profile, highest engagement first."""
    username = username_from_url(profile_url)
    if not username or not scrapingbee.is_configured():
        return PostFeed()

    timeout = timeout or settings.scrape_timeout
    feed = await race_first_valid(
        [partial(_profile_mirror, m, username, client, timeout) for m in settings.nitter_mirrors],
        is_valid=lambda f: not f.is_empty,
    )
    return feed if feed is not None else PostFeed(query=f"@{username}")
