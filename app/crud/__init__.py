from app.crud.streaks import get_streak_by_chat_id, list_streaks, record_drink, record_sober_day, reset_streak

__all__ = [
    "get_streak_by_chat_id",
    "list_streaks",
    "reset_streak",
    "record_drink",
    "record_sober_day",
]
