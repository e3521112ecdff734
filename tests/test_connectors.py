"""HTTP connectors against canned responses via httpx.MockTransport."""

import httpx
import pytest

from dyor_scan.config import settings
from dyor_scan.sources import birdeye, bscscan, dexscreener, helius, rugcheck, solscan, telegram_feed
from dyor_scan.sources.registry import Sources

from conftest import BNB_CA, SOL_MINT


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def json_handler(payload, status: int = 200, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload)
    return handler


def pair(liquidity: float, symbol: str = "GOOD") -> dict:
    return {
        "baseToken": {"name": "Good Token", "symbol": symbol},
        "priceUsd": "0.0123",
        "liquidity": {"usd": liquidity},
        "volume": {"h24": 250000},
        "priceChange": {"h24": -4.5},
        "marketCap": 1230000,
        "url": "https://dexscreener.com/solana/abc",
        "info": {
            "websites": [{"url": "https://good.example"}],
            "socials": [
                {"type": "twitter", "url": "https://x.com/goodtoken"},
                {"type": "telegram", "url": "https://t.me/goodtoken"},
            ],
        },
    }


class TestDexScreener:
    @pytest.mark.asyncio
    async def test_highest_liquidity_pair_wins(self):
        payload = {"pairs": [pair(1000, "LOW"), pair(90000, "HIGH"), pair(5000, "MID")]}
        async with mock_client(json_handler(payload)) as client:
            snapshot = await dexscreener.get_market_snapshot(SOL_MINT, client)

        assert snapshot.symbol == "HIGH"
        assert snapshot.market.liquidity == 90000.0
        assert snapshot.market.price == pytest.approx(0.0123)
        assert snapshot.market.price_change_24h == -4.5
        assert snapshot.reported_market_cap == 1230000.0
        assert snapshot.socials.website == "https://good.example"
        assert snapshot.socials.x == "https://x.com/goodtoken"
        assert snapshot.socials.telegram == "https://t.me/goodtoken"

    @pytest.mark.asyncio
    async def test_malformed_liquidity_does_not_raise(self):
        odd = pair(0, "ODD")
        odd["liquidity"] = "n/a"
        text_usd = pair(0, "TEXT")
        text_usd["liquidity"] = {"usd": "75000"}
        payload = {"pairs": [odd, pair(50000, "NUM"), text_usd]}
        async with mock_client(json_handler(payload)) as client:
            best = await dexscreener.get_token_by_address(SOL_MINT, client)

        assert best["baseToken"]["symbol"] == "TEXT"

    @pytest.mark.asyncio
    async def test_no_pairs_is_none(self):
        async with mock_client(json_handler({"pairs": None})) as client:
            assert await dexscreener.get_market_snapshot(SOL_MINT, client) is None

    @pytest.mark.asyncio
    async def test_server_error_is_none(self):
        async with mock_client(json_handler({}, status=500)) as client:
            assert await dexscreener.get_market_snapshot(SOL_MINT, client) is None

    @pytest.mark.asyncio
    async def test_timeout_is_none(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        async with mock_client(handler) as client:
            assert await dexscreener.get_market_snapshot(SOL_MINT, client, timeout=0.1) is None

    def test_missing_fields_stay_none(self):
        snapshot = dexscreener.extract_snapshot({"baseToken": {}, "priceUsd": ""})
        assert snapshot.symbol is None
        assert snapshot.market.price is None
        assert snapshot.socials.present() == []


class TestRugCheck:
    @pytest.mark.asyncio
    async def test_risks_are_normalized(self):
        payload = {
            "riskLevel": "medium",
            "score": 1200,
            "risks": [
                {"name": "Mutable metadata", "level": "WARN", "description": "can change"},
                {"name": "Top holder", "level": "danger", "score": 900},
            ],
        }
        seen = []
        async with mock_client(json_handler(payload, seen=seen)) as client:
            report = await rugcheck.get_security_report(SOL_MINT, client)

        assert seen[0].url.path.endswith(f"/tokens/{SOL_MINT}/report")
        assert report.risk_level == "medium"
        assert [r.level for r in report.risks] == ["warn", "danger"]
        assert report.count("danger") == 1

    @pytest.mark.asyncio
    async def test_not_found_is_none(self):
        async with mock_client(json_handler({"error": "not found"}, status=404)) as client:
            assert await rugcheck.get_security_report(SOL_MINT, client) is None


class TestHelius:
    @pytest.mark.asyncio
    async def test_skipped_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "helius_api_key", "")
        seen = []
        async with mock_client(json_handler({}, seen=seen)) as client:
            assert await helius.get_fundamentals(SOL_MINT, client) is None
        assert seen == []

    @pytest.mark.asyncio
    async def test_asset_fields(self, monkeypatch):
        monkeypatch.setattr(settings, "helius_api_key", "test-key")
        payload = {
            "result": {
                "content": {"metadata": {"name": "Good Token", "symbol": "GOOD"}},
                "token_info": {
                    "supply": 123456789012345678901234,
                    "decimals": 6,
                    "mint_authority": "Auth1111",
                },
                "ownership": {"ownerCount": 321},
            }
        }
        seen = []
        async with mock_client(json_handler(payload, seen=seen)) as client:
            fundamentals = await helius.get_fundamentals(SOL_MINT, client)

        assert seen[0].url.params["api-key"] == "test-key"
        assert fundamentals.supply == "123456789012345678901234"
        assert fundamentals.decimals == 6
        assert fundamentals.mint_authority == "Auth1111"
        assert fundamentals.freeze_authority is None
        assert fundamentals.holder_count == 321
        assert fundamentals.token_symbol == "GOOD"

    @pytest.mark.asyncio
    async def test_rpc_error_is_none(self, monkeypatch):
        monkeypatch.setattr(settings, "helius_api_key", "test-key")
        payload = {"error": {"code": -32000, "message": "asset not found"}}
        async with mock_client(json_handler(payload)) as client:
            assert await helius.get_fundamentals(SOL_MINT, client) is None


class TestBscScan:
    @pytest.mark.asyncio
    async def test_token_info(self, monkeypatch):
        monkeypatch.setattr(settings, "bscscan_api_key", "bsc-key")
        payload = {
            "status": "1",
            "message": "OK",
            "result": [{
                "tokenName": "Good Token",
                "symbol": "GOOD",
                "divisor": "18",
                "totalSupply": "1000000000000000000000000000",
            }],
        }
        seen = []
        async with mock_client(json_handler(payload, seen=seen)) as client:
            info = await bscscan.get_token_info(BNB_CA, client)

        params = seen[0].url.params
        assert params["chainid"] == "56"
        assert params["action"] == "tokeninfo"
        assert params["contractaddress"] == BNB_CA
        assert info.supply == "1000000000000000000000000000"
        assert info.decimals == 18
        assert info.token_name == "Good Token"

    @pytest.mark.asyncio
    async def test_holder_count(self, monkeypatch):
        monkeypatch.setattr(settings, "bscscan_api_key", "bsc-key")
        payload = {"status": "1", "message": "OK", "result": "4821"}
        async with mock_client(json_handler(payload)) as client:
            assert await bscscan.get_holder_count(BNB_CA, client) == 4821

    @pytest.mark.asyncio
    async def test_non_ok_status_is_none(self, monkeypatch):
        monkeypatch.setattr(settings, "bscscan_api_key", "bsc-key")
        payload = {"status": "0", "message": "NOTOK", "result": "Invalid API Key"}
        async with mock_client(json_handler(payload)) as client:
            assert await bscscan.get_token_info(BNB_CA, client) is None
            assert await bscscan.get_holder_count(BNB_CA, client) is None

    @pytest.mark.asyncio
    async def test_skipped_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "bscscan_api_key", "")
        seen = []
        async with mock_client(json_handler({}, seen=seen)) as client:
            assert await bscscan.get_holder_count(BNB_CA, client) is None
        assert seen == []


class TestTelegramFeed:
    @pytest.mark.asyncio
    async def test_fetches_public_preview(self):
        html = """
        <div class="tgme_widget_message">
          <div class="tgme_widget_message_text">Listing next week</div>
          <time datetime="2026-10-01T12:00:00+00:00"></time>
        </div>
        """
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text=html)

        async with mock_client(handler) as client:
            feed = await telegram_feed.get_channel_feed("https://t.me/goodtoken", client)

        assert str(seen[0].url) == "https://t.me/s/goodtoken"
        assert feed.last_message.text == "Listing next week"

    @pytest.mark.asyncio
    async def test_invite_link_is_not_fetched(self):
        seen = []
        async with mock_client(json_handler({}, seen=seen)) as client:
            assert await telegram_feed.get_channel_feed("https://t.me/+AbCdEf", client) is None
        assert seen == []


class TestSolscan:
    @pytest.mark.asyncio
    async def test_total_holders(self):
        seen = []
        async with mock_client(json_handler({"total": 5120, "data": []}, seen=seen)) as client:
            assert await solscan.get_holder_count(SOL_MINT, client) == 5120
        assert seen[0].url.params["tokenAddress"] == SOL_MINT

    @pytest.mark.asyncio
    async def test_zero_or_missing_is_none(self):
        async with mock_client(json_handler({"data": []})) as client:
            assert await solscan.get_holder_count(SOL_MINT, client) is None


class TestBirdeye:
    @pytest.mark.asyncio
    async def test_overview(self, monkeypatch):
        monkeypatch.setattr(settings, "birdeye_api_key", "bird-key")
        payload = {"data": {
            "price": 0.02,
            "priceChange24hPercent": 14.2,
            "v24hUSD": 880000,
            "liquidity": 410000,
            "trade24h": 5400,
            "tokenRanking": 17,
        }}
        seen = []
        async with mock_client(json_handler(payload, seen=seen)) as client:
            overview = await birdeye.get_token_overview(SOL_MINT, client)

        assert seen[0].headers["X-API-KEY"] == "bird-key"
        assert overview.price_change_24h == 14.2
        assert overview.volume_24h == 880000
        assert overview.trade_count_24h == 5400
        assert overview.trending_rank == 17

    @pytest.mark.asyncio
    async def test_skipped_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "birdeye_api_key", "")
        seen = []
        async with mock_client(json_handler({}, seen=seen)) as client:
            assert await birdeye.get_token_overview(SOL_MINT, client) is None
        assert seen == []


class TestSources:
    @pytest.mark.asyncio
    async def test_market_snapshot_uses_shared_client(self):
        seen = []
        async with mock_client(json_handler({"pairs": [pair(1000)]}, seen=seen)) as client:
            sources = Sources(client)
            snapshot = await sources.market_snapshot(SOL_MINT)

        assert snapshot.symbol == "GOOD"
        assert len(seen) == 1

    def test_birdeye_enabled_follows_key(self):
        config = settings.model_copy(update={"birdeye_api_key": "bird-key"})
        assert Sources(client=None, config=config).birdeye_enabled
        assert not Sources(client=None, config=settings.model_copy(update={"birdeye_api_key": ""})).birdeye_enabled
