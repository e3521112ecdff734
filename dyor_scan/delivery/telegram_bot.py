import html
import logging

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from dyor_scan.config import settings
from dyor_scan.scan.chains import InvalidAddressError, classify_address
from dyor_scan.scan.service import ScanFailedError, ScanService

logger = logging.getLogger(__name__)

MAX_MESSAGE_CHARS = 4000


def _fmt_usd(n: float | None) -> str:
    if not n:
        return "N/A"
    if n >= 1_000_000:
        return f"${n / 1_000_000:.2f}M"
    if n >= 1_000:
        return f"${n / 1_000:.1f}K"
    return f"${n:,.2f}"


def _score_emoji(score: int | None) -> str:
    if score is None:
        return "⚪"
    if score >= 70:
        return "🟢"
    if score >= 40:
        return "🟡"
    return "🔴"


def format_scan_telegram(result: dict) -> str:
    """Format a scan result dict as a Telegram HTML message."""
    esc = html.escape
    score = result.get("token_score")
    lines: list[str] = [
        f"🔎 <b>{esc(str(result.get('symbol', '???')))}</b> ({esc(str(result.get('token_name', '')))})",
        f"<code>{esc(str(result.get('contract_address', '')))}</code> · {esc(str(result.get('chain', '')))}",
        "",
        f"{_score_emoji(score)} <b>Score:</b> {score if score is not None else '?'}/100"
        f"  ·  <b>Sentiment:</b> {result.get('sentiment_score', '?')}/100",
    ]

    market = result.get("market_data") or {}
    if any(market.get(k) for k in ("liquidity", "volume_24h", "market_cap")):
        lines.append("")
        lines.append("<b>📊 Market</b>")
        lines.append(f"  Liquidity: {_fmt_usd(market.get('liquidity'))}")
        lines.append(f"  24h Vol: {_fmt_usd(market.get('volume_24h'))}")
        lines.append(f"  MCap: {_fmt_usd(market.get('market_cap'))}")
        change = market.get("price_change_24h")
        if change is not None:
            lines.append(f"  24h: {'🟢' if change >= 0 else '🔴'} {change:+.2f}%")

    security = result.get("security_data") or {}
    risks = security.get("risks") or []
    if risks:
        lines.append("")
        lines.append(f"<b>⚠️ Risk flags ({len(risks)})</b>")
        for risk in risks[:5]:
            lines.append(f"  • {esc(risk.get('name', ''))} ({esc(risk.get('level', ''))})")

    if result.get("narrative_claim"):
        lines.append("")
        lines.append(f"<b>📡 Narrative</b>\n{esc(result['narrative_claim'])}")

    verdict = result.get("verdict") or {}
    if verdict.get("verdict"):
        lines.append("")
        lines.append(
            f"<b>⚖️ Verdict:</b> {esc(verdict['verdict'])} ({esc(verdict.get('confidence', ''))} confidence)"
        )
        if verdict.get("reasoning"):
            lines.append(esc(verdict["reasoning"]))

    for key, title in (
        ("summary", "🤖 Summary"),
        ("fundamentals_analysis", "🧱 Fundamentals"),
        ("hype_analysis", "🔥 Hype"),
    ):
        if result.get(key):
            lines.append("")
            lines.append(f"<b>{title}</b>\n{esc(result[key])}")

    if result.get("cached"):
        lines.append("")
        lines.append("<i>Cached result. Use /scan &lt;address&gt; refresh for a fresh scan.</i>")

    return "\n".join(lines)


class TelegramBot:
    """Command handling: /scan and bare contract addresses."""

    def __init__(self, service: ScanService) -> None:
        self.service = service
        self._app: Application | None = None

    def build_application(self) -> Application:
        self._app = Application.builder().token(settings.telegram_bot_token).build()
        self._app.add_handler(CommandHandler("start", self._cmd_start))
        self._app.add_handler(CommandHandler("help", self._cmd_help))
        self._app.add_handler(CommandHandler("scan", self._cmd_scan))
        self._app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self._on_text))
        return self._app

    @staticmethod
    async def _cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(
            "🔎 <b>DYOR Scan</b>\n\n"
            "Send a Solana or BNB contract address, or use\n"
            "/scan &lt;address&gt; — Credibility report\n"
            "/help — Show usage",
            parse_mode="HTML",
        )

    @staticmethod
    async def _cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(
            "<b>Usage:</b>\n\n"
            "<code>/scan ADDRESS</code> — Scan a token (cached results are reused)\n"
            "<code>/scan ADDRESS refresh</code> — Force a fresh scan",
            parse_mode="HTML",
        )

    async def _cmd_scan(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not context.args:
            await update.message.reply_text(
                "Usage: <code>/scan ADDRESS</code>", parse_mode="HTML"
            )
            return
        refresh = len(context.args) > 1 and context.args[1].lower() in ("refresh", "force")
        await self._run_scan(update, context.args[0], refresh)

    async def _on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        text = (update.message.text or "").strip()
        if classify_address(text) is None:
            return
        await self._run_scan(update, text, False)

    async def _run_scan(self, update: Update, address: str, force_refresh: bool) -> None:
        await update.message.reply_text(
            f"🔍 Scanning <code>{html.escape(address[:12])}…</code> this may take a minute.",
            parse_mode="HTML",
        )
        try:
            result = await self.service.scan(address, force_refresh=force_refresh)
        except InvalidAddressError as exc:
            await update.message.reply_text(f"❌ {html.escape(str(exc))}")
            return
        except ScanFailedError as exc:
            logger.error("Scan command failed for %s: %s", address[:12], exc)
            await update.message.reply_text(f"❌ Scan failed: {html.escape(str(exc))}")
            return

        text = format_scan_telegram(result)
        for i in range(0, len(text), MAX_MESSAGE_CHARS):
            await update.message.reply_text(text[i : i + MAX_MESSAGE_CHARS], parse_mode="HTML")
