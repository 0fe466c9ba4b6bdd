import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")

PROMPT_HOUR = 9
PROMPT_TIMEZONE = "Europe/Moscow"


class Settings:
    BOT_TOKEN: str = os.getenv("BOT_TOKEN", "").strip()
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./trezvost.db")
    PORT: int = int(os.getenv("PORT", "3000"))


settings = Settings()
