from pydantic import BaseModel, Field


class Socials(BaseModel):
    website: str | None = None
    x: str | None = None
    telegram: str | None = None

    def present(self) -> list[str]:
        return [url for url in (self.website, self.x, self.telegram) if url]


class MarketData(BaseModel):
    price: float | None = None
    volume_24h: float | None = None
    liquidity: float | None = None
    price_change_24h: float | None = None
    market_cap: float | None = None
    dex_url: str | None = None


class DexSnapshot(BaseModel):
    """Normalized best-pair view of a token on DexScreener."""

    token_name: str | None = None
    symbol: str | None = None
    market: MarketData = Field(default_factory=MarketData)
    reported_market_cap: float | None = None
    socials: Socials = Field(default_factory=Socials)


class SecurityRisk(BaseModel):
    name: str = ""
    level: str = ""  # "high" / "medium" / "low" / "warn" ...
    description: str = ""
    score: float | None = None


class SecurityReport(BaseModel):
    risk_level: str = "unknown"
    risks: list[SecurityRisk] = Field(default_factory=list)
    score: float | None = None

    def count(self, level: str) -> int:
        return sum(1 for r in self.risks if r.level == level)


class Fundamentals(BaseModel):
    # Raw integer supply (smallest unit) kept as str: it routinely exceeds 2**63
    supply: str | None = None
    decimals: int | None = None
    mint_authority: str | None = None
    freeze_authority: str | None = None
    holder_count: int | None = None
    token_name: str | None = None
    token_symbol: str | None = None


class BirdeyeOverview(BaseModel):
    price: float | None = None
    price_change_24h: float | None = None
    volume_24h: float | None = None
    liquidity: float | None = None
    trade_count_24h: int | None = None
    trending_rank: int | None = None


class Post(BaseModel):
    text: str
    author: str = ""
    username: str = ""
    date: str = ""
    likes: int = 0
    retweets: int = 0
    replies: int = 0
    tweet_id: str | None = None
    url: str | None = None

    @property
    def engagement(self) -> int:
        return self.likes + self.retweets * 2


class PostFeed(BaseModel):
    posts: list[Post] = Field(default_factory=list)
    query: str = ""

    @property
    def post_count(self) -> int:
        return len(self.posts)

    @property
    def is_empty(self) -> bool:
        return not self.posts


class WebsiteContent(BaseModel):
    url: str
    title: str = ""
    meta_description: str = ""
    text: str = ""
    headings: list[str] = Field(default_factory=list)


class TelegramMessage(BaseModel):
    text: str = ""
    date: str | None = None


class TelegramFeed(BaseModel):
    messages: list[TelegramMessage] = Field(default_factory=list)

    @property
    def last_message(self) -> TelegramMessage | None:
        return self.messages[0] if self.messages else None
