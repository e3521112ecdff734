from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Provider keys (blank = connector disabled or keyless tier)
    helius_api_key: str = ""
    birdeye_api_key: str = ""  # Birdeye is skipped entirely without a key
    bscscan_api_key: str = ""
    scrapingbee_api_key: str = ""  # needed for Nitter, four.meme and JS-rendered sites

    # LLM text generation (leave blank to fall back to placeholder texts)
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-5-20250929"

    # Provider endpoints
    dexscreener_base_url: str = "https://api.dexscreener.com/latest/dex"
    rugcheck_base_url: str = "https://api.rugcheck.xyz/v1"
    helius_rpc_url: str = "https://mainnet.helius-rpc.com"
    solscan_base_url: str = "https://public-api.solscan.io"
    birdeye_base_url: str = "https://public-api.birdeye.so"
    etherscan_v2_url: str = "https://api.etherscan.io/v2/api"
    bsc_chain_id: str = "56"
    scrapingbee_base_url: str = "https://app.scrapingbee.com/api/v1/"
    fourmeme_base_url: str = "https://four.meme"
    nitter_mirrors: list[str] = [
        "https://nitter.net",
        "https://nitter.privacydev.net",
        "https://nitter.poast.org",
    ]

    # Per-connector timeouts (seconds)
    market_timeout: float = 5.0
    security_timeout: float = 5.0
    fundamentals_timeout: float = 5.0
    holders_timeout: float = 5.0
    birdeye_timeout: float = 8.0
    scrape_timeout: float = 8.0

    # Database (scan cache)
    database_url: str = "sqlite+aiosqlite:///dyor_scan.db"

    # Web
    web_host: str = "0.0.0.0"
    web_port: int = 8888

    # Telegram bot (optional)
    telegram_bot_token: str = ""

    log_level: str = "INFO"


settings = Settings()
