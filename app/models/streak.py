from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class UserStreak(Base):
    __tablename__ = "user_streaks"
    __table_args__ = (CheckConstraint("streak >= 0", name="ck_user_streaks_streak_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    chat_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    last_drink_at: Mapped[datetime] = mapped_column(DateTime)
    streak: Mapped[int] = mapped_column(Integer, default=0)
    # bumped on every update; writers compare-and-swap on it
    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
