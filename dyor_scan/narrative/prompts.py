"""Prompt builders for narrative, fundamentals, summary, hype and verdict texts."""

from __future__ import annotations

from dyor_scan.narrative.association import detect_exchange_association
from dyor_scan.scan.chains import SOLANA
from dyor_scan.scan.evidence import UNKNOWN_NAME, EvidenceRecord
from dyor_scan.scan.sentiment import HIGH_ENGAGEMENT, NEUTRAL_SENTIMENT, summarize_buzz

CHAIN_LABELS = {SOLANA: "Solana", "bnb": "BNB Smart Chain"}

NO_OFFICIAL_RULE = (
    '- NEVER use the word "official" - we cannot verify official status. Use neutral '
    'language like "associated with" or "linked to" instead'
)


def fmt_usd(value: float | None) -> str:
    """$1.23M for >= 1M, $456K below."""
    if not value:
        return "unknown"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    return f"${value / 1_000:.0f}K"


def _pct(value: float) -> str:
    return f"{value:+.2f}%"


def _website_block(evidence: EvidenceRecord) -> str:
    site = evidence.website
    if site is None:
        return ""
    lines = [
        f"\nWEBSITE CONTENT ({site.url}):",
        f"Title: {site.title or 'No title'}",
        f"Description: {site.meta_description or 'No description'}",
    ]
    if site.headings:
        lines.append("Key Headings:")
        lines.extend(f"{i}. {h}" for i, h in enumerate(site.headings, 1))
    lines.append(f"Content: {site.text or 'No content available'}")
    return "\n".join(lines) + "\n"


def _posts_block(evidence: EvidenceRecord, limit: int = 10, chars: int = 200) -> str:
    posts = evidence.top_posts(limit)
    if not posts:
        return ""
    lines = []
    for i, p in enumerate(posts, 1):
        who = f"@{p.username} ({p.author})" if p.username else (p.author or "Unknown")
        lines.append(f'{i}. {who}: "{p.text[:chars]}" ({p.likes} likes, {p.retweets} retweets)')
    return "\n\nPOSTS ABOUT THIS TOKEN:\n" + "\n".join(lines)


def _telegram_block(evidence: EvidenceRecord) -> str:
    feed = evidence.telegram
    if feed is None or not feed.messages:
        return ""
    lines = [f"- {m.text[:150]}" for m in feed.messages[:5] if m.text]
    if not lines:
        return ""
    return "\n\nRECENT TELEGRAM ANNOUNCEMENTS:\n" + "\n".join(lines)


def narrative_prompt(evidence: EvidenceRecord) -> str:
    holders = f"{evidence.holder_count:,}" if evidence.holder_count else "unknown"
    base = (
        f"Token: {evidence.symbol} ({evidence.token_name}). "
        f"Liquidity: {fmt_usd(evidence.liquidity)}. Holders: {holders}."
    )
    return f"""Analyze the information below to extract the core narrative/story of this token. Pay special attention to the WEBSITE CONTENT - it is often the most reliable source of the token's claimed narrative, partnerships and purpose.

What real-world narrative, theme, or story is this token using to promote itself?

{base}{_website_block(evidence)}{_posts_block(evidence)}{_telegram_block(evidence)}

Look for official claims about the project, partnerships or integrations, described technology or features, and whether it is an exchange token or mascot.

If the data indicates association with a major exchange, mention it with neutral language like "associated with [Exchange]". Never use the word "official".

Provide 1-2 sentences that capture the core narrative based on what you find in the data."""


def _metric_lines(evidence: EvidenceRecord, include_score: bool = True) -> list[str]:
    lines = []
    if include_score:
        lines.append(f"- Score: {evidence.token_score or NEUTRAL_SENTIMENT}/100")
    if evidence.holder_count:
        lines.append(f"- Holders: {evidence.holder_count:,}")
    if evidence.liquidity:
        lines.append(f"- Liquidity: {fmt_usd(evidence.liquidity)}")
    if evidence.volume_24h:
        lines.append(f"- 24h Volume: {fmt_usd(evidence.volume_24h)}")
    return lines


def fundamentals_prompt(evidence: EvidenceRecord) -> str:
    lines = _metric_lines(evidence)
    f = evidence.fundamentals
    if evidence.chain == SOLANA and f is not None:
        if not f.mint_authority and not f.freeze_authority:
            lines.append("- Security: clean (no mint/freeze authority)")
        else:
            flags = [n for n, v in (("Mint authority", f.mint_authority),
                                    ("Freeze authority", f.freeze_authority)) if v]
            lines.append(f"- Security: {', '.join(flags)} still assigned")
    if evidence.security and evidence.security.risks:
        lines.append(f"- Risk flags: {len(evidence.security.risks)}")
    association = detect_exchange_association(evidence)
    if association:
        lines.append(association.prompt_line())

    data = "\n".join(lines)
    return f"""Analyze the fundamentals. Write 2 sentences in a natural, conversational way.

DATA:
{data}

RULES:
- Write naturally, avoid corporate jargon like 'boasts', 'significantly', 'positions'
{NO_OFFICIAL_RULE}
- ONLY use data provided, don't mention missing data or make assumptions
- Use **bold** for key numbers
- Connect the numbers: what story do they tell?

Write 2 casual sentences based on the actual data provided."""


def summary_prompt(evidence: EvidenceRecord, narrative: str) -> str:
    lines = _metric_lines(evidence)
    lines.insert(1, f"- Sentiment: {evidence.sentiment_score or NEUTRAL_SENTIMENT}/100")
    change = evidence.market.price_change_24h if evidence.market else None
    if change is not None:
        lines.append(f"- 24h Price Change: {_pct(change)}")
    if narrative:
        lines.append(f"- Narrative: {narrative}")
    association = detect_exchange_association(evidence)
    if association:
        lines.append(association.prompt_line())
    if evidence.website:
        lines.append(f"- Website: {evidence.website.title or 'Available'} - {evidence.website.text[:200]}")

    data = "\n".join(lines)
    return f"""You are a professional crypto analyst writing a clear, informative summary. Balanced tone: professional but not overly formal.

Format:
1. Two sentences on what makes this token notable. Use **bold** for key points.
2. Three bullet points, one line each, **bold** the important numbers.

DATA:
{data}{_posts_block(evidence, limit=10, chars=150)}

RULES:
- Avoid casual filler and corporate jargon
{NO_OFFICIAL_RULE}
- ONLY use data provided, don't mention missing data or make assumptions
- Don't mention the blockchain, it is obvious
- Focus on facts and metrics

Write the two sentences, then three bullets starting with "•"."""


def hype_prompt(evidence: EvidenceRecord, narrative: str) -> str:
    lines = [f"- Sentiment score: {evidence.sentiment_score or NEUTRAL_SENTIMENT}/100"]
    if evidence.volume_24h:
        lines.append(f"- 24h volume: {fmt_usd(evidence.volume_24h)}")
    change = evidence.market.price_change_24h if evidence.market else None
    if change is not None:
        lines.append(f"- Price change (24h): {_pct(change)}")
    if evidence.holder_count:
        lines.append(f"- Holders: {evidence.holder_count:,}")
    if evidence.liquidity:
        lines.append(f"- Liquidity: {fmt_usd(evidence.liquidity)}")
    if evidence.birdeye and evidence.birdeye.trending_rank:
        lines.append(f"- Birdeye trending rank: #{evidence.birdeye.trending_rank}")
    if narrative:
        lines.append(f"- Narrative: {narrative[:150]}")

    posts_block = ""
    posts = evidence.all_posts()[:15]
    if posts:
        buzz = summarize_buzz(posts)
        avg = round(sum(p.engagement for p in posts) / len(posts))
        high = sum(1 for p in posts if p.engagement > HIGH_ENGAGEMENT)
        themes = " | ".join(p.text[:100] for p in posts)[:500]
        posts_block = f"""

POST ANALYSIS:
- Total posts analyzed: {len(posts)}
- Average engagement per post: {avg} (likes + 2x retweets)
- High-engagement posts (>{HIGH_ENGAGEMENT}): {high}
- Tone split (bullish/bearish/neutral): {buzz.bullish_count}/{buzz.bearish_count}/{buzz.neutral_count}
- Content themes: {themes}"""

    data = "\n".join(lines)
    return f"""Assess market sentiment and community hype for this token. Provide analysis in 2 sentences max.

AVAILABLE DATA:
{data}{posts_block}

RULES:
- ONLY discuss data provided, never mention missing or unknown data
- Use **bold** for sentiment scores, volumes, price changes and engagement metrics
- Connect social signals to market behavior

Provide 2 concise, insightful sentences about hype and momentum."""


def build_project_summary(evidence: EvidenceRecord) -> str:
    """Plain-text digest of the evidence, used as context for the verdict."""
    chain = CHAIN_LABELS.get(evidence.chain, evidence.chain)
    risks = len(evidence.security.risks) if evidence.security else 0

    if evidence.market is None:
        summary = f"Token with contract address {evidence.contract_address} is a {chain} token"
        if risks:
            summary += f" with {risks} security risk(s) identified"
        return summary + (
            ". No trading pairs found on decentralized exchanges yet. This token may be "
            "very new, unlaunched, or have no liquidity."
        )

    parts = [f"Token {evidence.symbol}"]
    if evidence.token_name and evidence.token_name != UNKNOWN_NAME:
        parts.append(f" ({evidence.token_name})")
    parts.append(f" is a {chain} token")
    if evidence.liquidity:
        parts.append(f" with {fmt_usd(evidence.liquidity)} in liquidity")
    if evidence.market.price:
        parts.append(f" trading at ${evidence.market.price:.6f}")
    parts.append(".")

    site = evidence.website
    if site is not None and site.title:
        parts.append(f" The project website ({site.url}) indicates: {site.title}")
        if site.meta_description:
            parts.append(f" - {site.meta_description[:200]}")
        if site.text:
            parts.append(f" Additional website content: {site.text[:300]}")
        parts.append(".")

    posts = evidence.all_posts()
    if posts:
        parts.append(" Recent X posts about this token include:")
        for i, post in enumerate(posts[:5], 1):
            parts.append(f' Post {i}: "{post.text[:250]}"')
            if post.likes or post.retweets:
                parts.append(f" ({post.likes} likes, {post.retweets} retweets)")
            parts.append(".")

    present = [
        label for label, url in (
            ("a website", evidence.socials.website),
            ("X presence", evidence.socials.x),
            ("Telegram community", evidence.socials.telegram),
        ) if url
    ]
    if present:
        parts.append(f" The project maintains {', '.join(present)}.")

    if risks:
        parts.append(f" Security analysis identified {risks} potential risk factor(s).")

    return "".join(parts)


def verdict_prompt(evidence: EvidenceRecord, narrative: str) -> str:
    red_flags = ", ".join(r.name for r in evidence.security.risks) if evidence.security else ""
    return f"""You are a professional cryptocurrency analyst conducting objective narrative verification.

NARRATIVE CLAIM:
{narrative}

PROJECT SUMMARY:
{build_project_summary(evidence)}

SECURITY FLAGS: {red_flags or "None reported"}

Evaluation criteria:
1. Does the narrative reference verifiable real-world events, products, or concepts?
2. Are the mentioned entities legitimate and accurately represented?
3. What is the nature of the association (partnership, inspiration, or unsubstantiated claim)?

Default to PARTIAL when evidence is mixed or limited. Only use UNVERIFIED when there is clear evidence that claims are false or misleading.

Classification:
- CONFIRMED: strong connection to legitimate real-world elements with clear supporting evidence.
- PARTIAL: mix of verified elements and unverified claims, or limited evidence but no clear falsehoods.
- UNVERIFIED: clear evidence that claims are false, misleading, or fabricated.

Return STRICT JSON only, no prose:
{{"verdict": "CONFIRMED" | "PARTIAL" | "UNVERIFIED", "reasoning": "3-4 sentences", "confidence": "high" | "medium" | "low", "red_flags": ["material concerns only"]}}"""
