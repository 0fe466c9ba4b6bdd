from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import StaleStreakError, StreakStoreError
from app.models import UserStreak

MAX_CAS_ATTEMPTS = 3


def _fresh(db: Session, chat_id: int) -> Optional[UserStreak]:
    return db.scalar(
        select(UserStreak).where(UserStreak.chat_id == chat_id).execution_options(populate_existing=True)
    )


def _swap(db: Session, current: UserStreak, values: Dict[str, Any]) -> bool:
    result = db.execute(
        update(UserStreak)
        .where(UserStreak.chat_id == current.chat_id, UserStreak.version == current.version)
        .values(**values, version=current.version + 1, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        return False
    db.commit()
    return True


def _update_with_retry(
    db: Session, chat_id: int, mutate: Callable[[UserStreak], Dict[str, Any]]
) -> Optional[UserStreak]:
    for _ in range(MAX_CAS_ATTEMPTS):
        current = _fresh(db, chat_id)
        if current is None:
            return None
        if _swap(db, current, mutate(current)):
            return _fresh(db, chat_id)
    raise StaleStreakError(chat_id, MAX_CAS_ATTEMPTS)


def get_streak_by_chat_id(db: Session, chat_id: int) -> Optional[UserStreak]:
    try:
        return db.scalar(select(UserStreak).where(UserStreak.chat_id == chat_id))
    except SQLAlchemyError as exc:
        db.rollback()
        raise StreakStoreError(f"lookup failed for chat {chat_id}") from exc


def list_streaks(db: Session) -> list[UserStreak]:
    try:
        return list(db.scalars(select(UserStreak).order_by(UserStreak.id)))
    except SQLAlchemyError as exc:
        db.rollback()
        raise StreakStoreError("bulk read failed") from exc


def reset_streak(db: Session, chat_id: int, last_drink_at: datetime) -> UserStreak:
    """Create the chat's record, or point an existing one at a new drink date.

    Either way the streak starts over from 0.
    """
    try:
        if _fresh(db, chat_id) is None:
            user_streak = UserStreak(chat_id=chat_id, last_drink_at=last_drink_at, streak=0, version=1)
            db.add(user_streak)
            try:
                db.commit()
            except IntegrityError:
                # another writer inserted the same chat first
                db.rollback()
            else:
                db.refresh(user_streak)
                return user_streak

        return _update_with_retry(db, chat_id, lambda _: {"last_drink_at": last_drink_at, "streak": 0})
    except StreakStoreError:
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise StreakStoreError(f"save failed for chat {chat_id}") from exc


def record_drink(db: Session, chat_id: int, now: datetime) -> Optional[UserStreak]:
    try:
        return _update_with_retry(db, chat_id, lambda _: {"last_drink_at": now, "streak": 0})
    except StreakStoreError:
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise StreakStoreError(f"save failed for chat {chat_id}") from exc


def record_sober_day(db: Session, chat_id: int) -> Optional[UserStreak]:
    try:
        return _update_with_retry(db, chat_id, lambda current: {"streak": current.streak + 1})
    except StreakStoreError:
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise StreakStoreError(f"save failed for chat {chat_id}") from exc
