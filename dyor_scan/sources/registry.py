"""Bundle of all source connectors bound to one shared HTTP client."""

import httpx

from dyor_scan.config import Settings, settings as default_settings
from dyor_scan.sources import (
    birdeye,
    bscscan,
    dexscreener,
    fourmeme,
    helius,
    nitter,
    rugcheck,
    solscan,
    telegram_feed,
    website,
)
from dyor_scan.sources.models import (
    BirdeyeOverview,
    DexSnapshot,
    Fundamentals,
    PostFeed,
    SecurityReport,
    TelegramFeed,
    WebsiteContent,
)


class Sources:
    """The only gateway the aggregator uses to reach external providers.

    Holds the injected ``httpx.AsyncClient`` and the per-connector timeouts.
    """

    def __init__(self, client: httpx.AsyncClient, config: Settings | None = None) -> None:
        self.client = client
        self.config = config or default_settings

    @property
    def birdeye_enabled(self) -> bool:
        return bool(self.config.birdeye_api_key)

    # -- both chains --

    async def market_snapshot(self, address: str) -> DexSnapshot | None:
        return await dexscreener.get_market_snapshot(
            address, self.client, timeout=self.config.market_timeout
        )

    async def ticker_posts(self, symbol: str | None) -> PostFeed:
        return await nitter.search_ticker(symbol, self.client, timeout=self.config.scrape_timeout)

    async def profile_posts(self, x_url: str | None) -> PostFeed:
        return await nitter.get_profile_posts(x_url, self.client, timeout=self.config.scrape_timeout)

    async def website_content(self, url: str | None) -> WebsiteContent | None:
        return await website.scrape_website(url, self.client, timeout=self.config.scrape_timeout)

    async def telegram_feed(self, url: str | None) -> TelegramFeed | None:
        return await telegram_feed.get_channel_feed(
            url, self.client, timeout=self.config.scrape_timeout
        )

    # -- solana --

    async def security_report(self, mint: str) -> SecurityReport | None:
        return await rugcheck.get_security_report(
            mint, self.client, timeout=self.config.security_timeout
        )

    async def solana_fundamentals(self, mint: str) -> Fundamentals | None:
        return await helius.get_fundamentals(
            mint, self.client, timeout=self.config.fundamentals_timeout
        )

    async def solana_holders(self, mint: str) -> int | None:
        return await solscan.get_holder_count(
            mint, self.client, timeout=self.config.holders_timeout
        )

    async def birdeye_overview(self, mint: str) -> BirdeyeOverview | None:
        return await birdeye.get_token_overview(
            mint, self.client, timeout=self.config.birdeye_timeout
        )

    # -- bnb --

    async def bsc_token_info(self, ca: str) -> Fundamentals | None:
        return await bscscan.get_token_info(
            ca, self.client, timeout=self.config.fundamentals_timeout
        )

    async def bsc_holders(self, ca: str) -> int | None:
        return await bscscan.get_holder_count(
            ca, self.client, timeout=self.config.holders_timeout
        )

    async def discover_website(self, ca: str) -> str | None:
        return await fourmeme.discover_website(
            ca, self.client, timeout=self.config.scrape_timeout
        )
