import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="Trezvost Bot", version="0.1.0")


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Bot is running 🚀"


@app.get("/healthz", response_class=PlainTextResponse)
def healthz() -> str:
    logger.info("🩺 health ping @ %s", datetime.now(timezone.utc).isoformat())
    return "ok"
