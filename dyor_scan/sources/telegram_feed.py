"""Scrape the public web preview (t.me/s/<channel>) of a project's Telegram channel."""

import logging

import httpx
from bs4 import BeautifulSoup

from dyor_scan.config import settings
from dyor_scan.sources.models import TelegramFeed, TelegramMessage

logger = logging.getLogger(__name__)

MAX_MESSAGES = 10


def public_preview_url(telegram_url: str) -> str | None:
    for prefix in ("https://t.me/", "http://t.me/", "https://telegram.me/", "t.me/"):
        if telegram_url.startswith(prefix):
            channel = telegram_url[len(prefix):].strip("/")
            if not channel or channel.startswith("+") or channel.startswith("joinchat"):
                return None  # private invite links have no preview
            if channel.startswith("s/"):
                channel = channel[2:]
            return f"https://t.me/s/{channel}"
    return None


def parse_messages(html: str, limit: int = MAX_MESSAGES) -> list[TelegramMessage]:
    soup = BeautifulSoup(html, "html.parser")
    messages = []
    for el in soup.select(".tgme_widget_message")[:limit]:
        text_el = el.select_one(".tgme_widget_message_text")
        time_el = el.select_one("time")
        messages.append(
            TelegramMessage(
                text=text_el.get_text(" ", strip=True) if text_el else "",
                date=time_el.get("datetime") if time_el else None,
            )
        )
    return messages


async def get_channel_feed(
    telegram_url: str | None, client: httpx.AsyncClient, timeout: float | None = None,
) -> TelegramFeed | None:
    if not telegram_url:
        return None
    url = public_preview_url(telegram_url)
    if url is None:
        return None

    try:
        resp = await client.get(url, timeout=timeout or settings.scrape_timeout)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Telegram preview failed for %s: %s", url, exc)
        return None

    feed = TelegramFeed(messages=parse_messages(resp.text))
    logger.info("Telegram preview %s: %d messages", url, len(feed.messages))
    return feed
