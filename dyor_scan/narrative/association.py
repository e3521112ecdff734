"""Exchange-association detection from token name, symbol, website and X handle.

Only feeds prompt context; it never changes the score.
"""

from __future__ import annotations

from dataclasses import dataclass

from dyor_scan.scan.evidence import EvidenceRecord

EXCHANGE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "binance": ("binance", "bibi"),
    "coinbase": ("coinbase",),
    "okx": ("okx", "okex"),
    "kraken": ("kraken",),
}


@dataclass(frozen=True)
class ExchangeAssociation:
    exchange: str
    confidence: str = "high"

    def prompt_line(self) -> str:
        return (
            f"- Exchange Association: {self.exchange.upper()} ({self.confidence} confidence)"
            ' - DO NOT claim this is "official"'
        )


def detect_exchange_association(evidence: EvidenceRecord) -> ExchangeAssociation | None:
    name = (evidence.token_name or "").lower()
    symbol = (evidence.symbol or "").lower()
    site = evidence.website
    site_text = (
        f"{site.title} {site.meta_description} {site.text}".lower() if site else ""
    )
    x_url = (evidence.socials.x or "").lower()

    for exchange, keywords in EXCHANGE_KEYWORDS.items():
        for keyword in keywords:
            if keyword in name or keyword in symbol or keyword in site_text or keyword in x_url:
                return ExchangeAssociation(exchange)

    return None
