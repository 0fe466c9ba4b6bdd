from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session
from telegram.ext import ContextTypes

APP_KEY = "app"


@dataclass
class AppContext:
    """Everything a handler needs, built once in ``run()``."""

    session_factory: Callable[[], Session]
    timezone: ZoneInfo
    # naive local "now"; tests pin it
    clock: Callable[[], datetime] = field(default=datetime.now)


def get_app(context: ContextTypes.DEFAULT_TYPE) -> AppContext:
    return context.bot_data[APP_KEY]
