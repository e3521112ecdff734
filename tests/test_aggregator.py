import pytest

from dyor_scan.scan.aggregator import EvidenceAggregator, compute_market_cap
from dyor_scan.sources.models import (
    BirdeyeOverview,
    Fundamentals,
    PostFeed,
    SecurityReport,
    Socials,
    WebsiteContent,
)

from conftest import ALL_SOCIALS, BNB_CA, SOL_MINT, assert_not_called, dex_snapshot, make_sources, post

SOLANA_ONLY = ("security_report", "solana_fundamentals", "solana_holders", "birdeye_overview")
BNB_ONLY = ("bsc_token_info", "bsc_holders", "discover_website")


class TestComputeMarketCap:
    def test_bnb_default_decimals(self):
        # 1000 tokens (18 decimals) at $0.5
        assert compute_market_cap(0.5, str(1000 * 10**18), None, "bnb") == 500.0

    def test_reported_decimals_win(self):
        assert compute_market_cap(0.001, "1000000000000000", 6, "solana") == 1_000_000.0

    def test_huge_supply_keeps_precision(self):
        supply = str(123_456_789_123_456_789_123_456_789)
        cap = compute_market_cap(2, supply, 18, "bnb")
        assert cap == pytest.approx(246_913_578.246913578)

    def test_falls_back_to_reported_cap(self):
        assert compute_market_cap(None, "100", 0, "solana", reported=42.0) == 42.0
        assert compute_market_cap(1.0, None, 9, "solana", reported=42.0) == 42.0
        assert compute_market_cap(1.0, "not-a-number", 9, "solana", reported=7.0) == 7.0
        assert compute_market_cap(1.0, None, 9, "solana") is None


class TestFetchTokenData:
    @pytest.mark.asyncio
    async def test_solana_never_calls_bnb_connectors(self):
        sources = make_sources(
            market_snapshot=dex_snapshot(),
            security_report=SecurityReport(),
            solana_fundamentals=Fundamentals(supply="1000", decimals=0),
            solana_holders=1234,
        )
        evidence = await EvidenceAggregator(sources).fetch_token_data(SOL_MINT, "solana")

        assert evidence.chain == "solana"
        assert evidence.holder_count == 1234
        assert evidence.security is not None
        assert_not_called(sources, *BNB_ONLY)
        sources.birdeye_overview.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bnb_never_calls_solana_connectors(self):
        sources = make_sources(market_snapshot=dex_snapshot(), discover_website="https://found.example")
        evidence = await EvidenceAggregator(sources).fetch_token_data(BNB_CA, "bnb")

        assert evidence.chain == "bnb"
        assert evidence.security is None
        assert evidence.birdeye is None
        assert_not_called(sources, *SOLANA_ONLY)
        sources.bsc_token_info.assert_awaited_once_with(BNB_CA)
        sources.bsc_holders.assert_awaited_once_with(BNB_CA)

    @pytest.mark.asyncio
    async def test_birdeye_only_queried_when_enabled(self):
        sources = make_sources(
            birdeye_enabled=True,
            market_snapshot=dex_snapshot(),
            birdeye_overview=BirdeyeOverview(price_change_24h=12.0),
        )
        evidence = await EvidenceAggregator(sources).fetch_token_data(SOL_MINT, "solana")
        assert evidence.birdeye.price_change_24h == 12.0

    @pytest.mark.asyncio
    async def test_failed_source_only_blanks_its_own_field(self):
        sources = make_sources(
            market_snapshot=RuntimeError("dexscreener down"),
            solana_fundamentals=Fundamentals(token_name="Fallback", token_symbol="FBK"),
            security_report=SecurityReport(),
        )
        evidence = await EvidenceAggregator(sources).fetch_token_data(SOL_MINT, "solana")

        assert evidence.market is None
        assert evidence.symbol == "FBK"
        assert evidence.token_name == "Fallback"
        assert evidence.security is not None

    @pytest.mark.asyncio
    async def test_placeholders_when_nothing_identifies_the_token(self):
        evidence = await EvidenceAggregator(make_sources()).fetch_token_data(SOL_MINT, "solana")
        assert evidence.symbol == "???"
        assert evidence.token_name == "Unknown Token"
        assert evidence.market_dict()["liquidity"] is None

    @pytest.mark.asyncio
    async def test_holder_count_prefers_dedicated_source(self):
        sources = make_sources(solana_fundamentals=Fundamentals(holder_count=100), solana_holders=500)
        evidence = await EvidenceAggregator(sources).fetch_token_data(SOL_MINT, "solana")
        assert evidence.holder_count == 500
        assert evidence.fundamentals.holder_count == 500

        sources = make_sources(solana_fundamentals=Fundamentals(holder_count=100), solana_holders=None)
        evidence = await EvidenceAggregator(sources).fetch_token_data(SOL_MINT, "solana")
        assert evidence.holder_count == 100

    @pytest.mark.asyncio
    async def test_market_cap_from_supply(self):
        sources = make_sources(
            market_snapshot=dex_snapshot(price=0.5, market_cap=None),
            bsc_token_info=Fundamentals(supply=str(1000 * 10**18)),
        )
        evidence = await EvidenceAggregator(sources).fetch_token_data(BNB_CA, "bnb")
        assert evidence.market_cap == 500.0

    @pytest.mark.asyncio
    async def test_fourmeme_fallback_only_without_website(self):
        sources = make_sources(market_snapshot=dex_snapshot(socials=Socials(x="https://x.com/a")),
                               discover_website="https://found.example")
        evidence = await EvidenceAggregator(sources).fetch_token_data(BNB_CA, "bnb")
        assert evidence.socials.website == "https://found.example"
        assert evidence.socials.x == "https://x.com/a"

        sources = make_sources(market_snapshot=dex_snapshot(socials=ALL_SOCIALS))
        await EvidenceAggregator(sources).fetch_token_data(BNB_CA, "bnb")
        sources.discover_website.assert_not_awaited()


class TestFetchSocialData:
    @pytest.mark.asyncio
    async def test_branches_run_only_for_known_links(self):
        sources = make_sources(
            market_snapshot=dex_snapshot(symbol="GOOD"),
            ticker_posts=PostFeed(posts=[post()], query="$GOOD"),
        )
        aggregator = EvidenceAggregator(sources)
        evidence = await aggregator.fetch_token_data(SOL_MINT, "solana")
        evidence = await aggregator.fetch_social_data(evidence)

        sources.ticker_posts.assert_awaited_once_with("GOOD")
        assert_not_called(sources, "profile_posts", "website_content", "telegram_feed")
        assert evidence.ticker_posts.post_count == 1
        assert evidence.profile_posts is None

    @pytest.mark.asyncio
    async def test_ticker_search_runs_with_placeholder_symbol(self):
        sources = make_sources()
        aggregator = EvidenceAggregator(sources)
        evidence = await aggregator.fetch_token_data(SOL_MINT, "solana")
        await aggregator.fetch_social_data(evidence)
        sources.ticker_posts.assert_awaited_once_with("???")

    @pytest.mark.asyncio
    async def test_one_branch_failing_leaves_the_others(self):
        sources = make_sources(
            market_snapshot=dex_snapshot(socials=ALL_SOCIALS),
            profile_posts=PostFeed(posts=[post(likes=9)]),
            website_content=RuntimeError("scrape blew up"),
        )
        aggregator = EvidenceAggregator(sources)
        evidence = await aggregator.fetch_social_data(
            await aggregator.fetch_token_data(SOL_MINT, "solana")
        )

        assert evidence.website is None
        assert evidence.profile_posts.post_count == 1
        sources.telegram_feed.assert_awaited_once_with("https://t.me/goodtoken")

    @pytest.mark.asyncio
    async def test_website_content_is_attached(self):
        sources = make_sources(
            market_snapshot=dex_snapshot(socials=Socials(website="https://good.example")),
            website_content=WebsiteContent(url="https://good.example", title="Good"),
        )
        aggregator = EvidenceAggregator(sources)
        evidence = await aggregator.fetch_social_data(
            await aggregator.fetch_token_data(SOL_MINT, "solana")
        )
        assert evidence.website.title == "Good"
