import asyncio
import logging

import httpx
import uvicorn

from dyor_scan.config import settings
from dyor_scan.delivery.telegram_bot import TelegramBot
from dyor_scan.delivery.web.app import create_app
from dyor_scan.scan.service import build_scan_service
from dyor_scan.storage.database import build_engine, build_session_factory, init_db
from dyor_scan.utils.logging import setup_logging

logger = logging.getLogger(__name__)


async def main() -> None:
    setup_logging()
    logger.info("Starting DYOR Scan")

    engine = build_engine()
    await init_db(engine)
    session_factory = build_session_factory(engine)
    logger.info("Database initialized")

    async with httpx.AsyncClient(follow_redirects=False) as client:
        service = build_scan_service(client, session_factory)
        if not settings.anthropic_api_key:
            logger.warning("ANTHROPIC_API_KEY not set, generated texts will use fallbacks")

        app = create_app(service)
        server = uvicorn.Server(
            uvicorn.Config(app, host=settings.web_host, port=settings.web_port, log_level="info")
        )
        tasks = [server.serve()]

        if settings.telegram_bot_token:
            tg_app = TelegramBot(service).build_application()

            async def run_telegram():
                async with tg_app:
                    await tg_app.updater.start_polling()
                    await tg_app.start()
                    logger.info("Telegram bot polling started")
                    try:
                        while True:
                            await asyncio.sleep(3600)
                    except asyncio.CancelledError:
                        await tg_app.updater.stop()
                        await tg_app.stop()
                        raise

            tasks.append(run_telegram())
        else:
            logger.info("TELEGRAM_BOT_TOKEN not set, Telegram bot disabled")

        try:
            await asyncio.gather(*tasks)
        finally:
            await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
