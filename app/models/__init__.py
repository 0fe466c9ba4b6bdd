from app.models.base import Base
from app.models.streak import UserStreak

__all__ = ["Base", "UserStreak"]
