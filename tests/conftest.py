from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.context import APP_KEY, AppContext
from app.models import Base

NOW = datetime(2025, 8, 22, 0, 0, 0)


def _memory_engine():
    return create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def engine():
    engine = _memory_engine()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def broken_session_factory():
    # no tables: every query fails
    engine = _memory_engine()
    yield sessionmaker(bind=engine, future=True)
    engine.dispose()


class DummyMessage:
    def __init__(self, text):
        self.text = text
        self.sent = []

    async def reply_text(self, text, parse_mode=None, reply_markup=None):
        self.sent.append(text)


class DummyChat:
    def __init__(self, chat_id):
        self.id = chat_id


class DummyCallbackQuery:
    def __init__(self, data):
        self.data = data
        self.answered = False

    async def answer(self, *args, **kwargs):
        self.answered = True


class DummyUpdate:
    def __init__(self, chat_id, text=None, callback_data=None):
        self.effective_chat = DummyChat(chat_id)
        self.effective_message = DummyMessage(text) if text is not None else None
        self.callback_query = DummyCallbackQuery(callback_data) if callback_data is not None else None


class DummyBot:
    def __init__(self, fail_for=()):
        self.sent = []
        self.attempts = []
        self.fail_for = set(fail_for)

    async def send_message(self, chat_id, text, parse_mode=None, reply_markup=None):
        self.attempts.append(chat_id)
        if chat_id in self.fail_for:
            raise RuntimeError(f"chat {chat_id} blocked the bot")
        self.sent.append((chat_id, text, reply_markup))


class DummyContext:
    def __init__(self, app_ctx, bot=None):
        self.bot = bot or DummyBot()
        self.bot_data = {APP_KEY: app_ctx}


@pytest.fixture
def app_ctx(session_factory):
    return AppContext(session_factory=session_factory, timezone=ZoneInfo("Europe/Moscow"), clock=lambda: NOW)


@pytest.fixture
def context(app_ctx):
    return DummyContext(app_ctx)
