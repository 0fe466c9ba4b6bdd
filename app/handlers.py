import asyncio
import logging
import re
from datetime import date, datetime, timedelta
from datetime import time as dtime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session
from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import ContextTypes

from app.context import AppContext, get_app
from app.crud import list_streaks, record_drink, record_sober_day, reset_streak
from app.errors import StreakStoreError

logger = logging.getLogger(__name__)

START_COMMAND = "/start"
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

START_TEXT = (
    "Здравствуйте! Введите дату, когда вы пили алкоголь последний раз "
    "(в формате YYYY-MM-DD, например, 2025-08-12):"
)
INVALID_DATE_TEXT = "Такой даты не существует. Используйте формат YYYY-MM-DD, например, 2025-08-12."
PROMPT_TEXT = "Вы выпивали вчера?"

CALLBACK_YES = "yes"
CALLBACK_NO = "no"


class EventKind(str, Enum):
    TEXT = "text"
    CALLBACK = "callback"
    TIMER = "timer"


def days_since(last_drink_at: datetime, now: datetime) -> int:
    """Whole days from ``last_drink_at`` to ``now``, floored. Negative for future dates."""
    return (now - last_drink_at) // timedelta(days=1)


def _with_session(session_factory: Callable[[], Session], work: Callable[..., Any], *args: Any) -> Any:
    with session_factory() as db:
        return work(db, *args)


async def run_in_store(app: AppContext, work: Callable[..., Any], *args: Any) -> Any:
    """Run ``work(db, *args)`` in a worker thread so a slow store only stalls its own update."""
    return await asyncio.to_thread(_with_session, app.session_factory, work, *args)


def _load_chat_ids(db: Session) -> List[int]:
    return [s.chat_id for s in list_streaks(db)]


def prompt_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton("Yes", callback_data=CALLBACK_YES)],
            [InlineKeyboardButton("No", callback_data=CALLBACK_NO)],
        ]
    )


async def on_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.effective_message
    if not message or message.text is None:
        return
    text = message.text

    if text == START_COMMAND:
        await message.reply_text(START_TEXT)
        return

    if not DATE_PATTERN.fullmatch(text):
        return

    try:
        last_drink = date.fromisoformat(text)
    except ValueError:
        await message.reply_text(INVALID_DATE_TEXT)
        return

    app = get_app(context)
    chat_id = update.effective_chat.id
    last_drink_at = datetime.combine(last_drink, dtime.min)
    try:
        await run_in_store(app, reset_streak, chat_id, last_drink_at)
    except StreakStoreError:
        logger.exception("Could not save last drink date for chat %s", chat_id)
        return

    await message.reply_text(f"Дней без алкоголя: {days_since(last_drink_at, app.clock())}")


def _answer_yes(db: Session, chat_id: int, now: datetime) -> Optional[str]:
    if record_drink(db, chat_id, now) is None:
        return None
    return "Вы выпили вчера. Дней без алкоголя: 0"


def _answer_no(db: Session, chat_id: int, now: datetime) -> Optional[str]:
    user_streak = record_sober_day(db, chat_id)
    if user_streak is None:
        return None
    return f"Вы не выпивали вчера. Дней без алкоголя: {user_streak.streak}"


CALLBACK_ACTIONS: Dict[str, Callable[[Session, int, datetime], Optional[str]]] = {
    CALLBACK_YES: _answer_yes,
    CALLBACK_NO: _answer_no,
}


async def on_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    q = update.callback_query
    try:
        action = CALLBACK_ACTIONS.get(q.data)
        if action is None:
            return

        app = get_app(context)
        chat_id = update.effective_chat.id
        try:
            reply = await run_in_store(app, action, chat_id, app.clock())
        except StreakStoreError:
            logger.exception("Could not update streak for chat %s (%s)", chat_id, q.data)
            return

        # no record yet: user never sent a date
        if reply is None:
            return
        await context.bot.send_message(chat_id=chat_id, text=reply)
    finally:
        await q.answer()


async def daily_prompt_job(context: ContextTypes.DEFAULT_TYPE) -> int:
    app = get_app(context)
    try:
        chat_ids = await run_in_store(app, _load_chat_ids)
    except StreakStoreError:
        logger.exception("❌ Daily prompt aborted: could not load users")
        return 0

    logger.info("🕘 Daily prompt fired (%s): sending to %d users", app.timezone.key, len(chat_ids))
    results = await asyncio.gather(
        *(
            context.bot.send_message(chat_id=chat_id, text=PROMPT_TEXT, reply_markup=prompt_keyboard())
            for chat_id in chat_ids
        ),
        return_exceptions=True,
    )

    sent = 0
    for chat_id, result in zip(chat_ids, results):
        if isinstance(result, Exception):
            logger.warning("Daily prompt to chat %s failed: %s", chat_id, result)
            continue
        sent += 1
    return sent


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Exception while handling an update", exc_info=context.error)


DISPATCH = {
    EventKind.TEXT: on_text,
    EventKind.CALLBACK: on_callback,
    EventKind.TIMER: daily_prompt_job,
}
