class StreakStoreError(Exception):
    """A lookup or save against the streak store failed."""


class StaleStreakError(StreakStoreError):
    """The record kept changing underneath us and the update was abandoned."""

    def __init__(self, chat_id: int, attempts: int):
        super().__init__(f"streak for chat {chat_id} changed concurrently {attempts} times")
        self.chat_id = chat_id
        self.attempts = attempts
