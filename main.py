import logging
import threading
from datetime import time as dtime
from zoneinfo import ZoneInfo

import uvicorn
from telegram.ext import Application, CallbackQueryHandler, MessageHandler, filters

from api_main import app as web_app
from app.config import PROMPT_HOUR, PROMPT_TIMEZONE, settings
from app.context import APP_KEY, AppContext
from app.db import SessionLocal, init_store
from app.handlers import DISPATCH, EventKind, on_error

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

PROMPT_JOB_NAME = "daily-drink-prompt"


def start_web_server(port: int) -> threading.Thread:
    """Serve the liveness endpoints next to the bot so the host sees an open port."""
    server = uvicorn.Server(uvicorn.Config(web_app, host="0.0.0.0", port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="web-server", daemon=True)
    thread.start()
    logger.info("✅ Web server listening on port %s", port)
    return thread


def build_application(app_ctx: AppContext, token: str) -> Application:
    # updates from different chats must not wait on each other's store calls
    app = Application.builder().token(token).concurrent_updates(True).build()
    app.bot_data[APP_KEY] = app_ctx

    app.add_handler(MessageHandler(filters.UpdateType.MESSAGE & filters.TEXT, DISPATCH[EventKind.TEXT]))
    app.add_handler(CallbackQueryHandler(DISPATCH[EventKind.CALLBACK]))
    app.add_error_handler(on_error)

    if app.job_queue:
        app.job_queue.run_daily(
            DISPATCH[EventKind.TIMER],
            time=dtime(hour=PROMPT_HOUR, minute=0, tzinfo=app_ctx.timezone),
            name=PROMPT_JOB_NAME,
        )
    else:
        logger.warning("JobQueue is unavailable; install python-telegram-bot[job-queue] for daily prompts")
    return app


def run() -> None:
    if not settings.BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set")

    logger.info("🚀 Bot is starting...")
    start_web_server(settings.PORT)
    init_store()

    app_ctx = AppContext(session_factory=SessionLocal, timezone=ZoneInfo(PROMPT_TIMEZONE))
    app = build_application(app_ctx, settings.BOT_TOKEN)

    logger.info("🤖 Bot started and polling...")
    app.run_polling()


if __name__ == "__main__":
    run()
