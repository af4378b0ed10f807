"""
Pytest fixtures for Sentence Quest tests.
"""

import uuid
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sentence_quest.kernel.models import (
    Base,
    Campaign,
    Mission,
    MissionType,
    Player,
    Theme,
    UnlockType,
    Word,
)

# In-memory SQLite; StaticPool keeps one connection so every session sees the same DB
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def catalog(db_session: AsyncSession) -> Dict[str, object]:
    """
    One theme with one campaign of three missions:

    - order 1: play
    - order 2: play
    - order 3: boss, rewards the "robot" avatar
    """
    theme = Theme(id=uuid.uuid4(), name="space", display_name="Space Rangers")
    db_session.add(theme)
    await db_session.flush()

    campaign = Campaign(
        id=uuid.uuid4(),
        theme_id=theme.id,
        title="Moon Base",
        synopsis="Help the rangers fix the moon base.",
        order=1,
    )
    db_session.add(campaign)
    await db_session.flush()

    first = Mission(
        id=uuid.uuid4(), campaign_id=campaign.id, title="Launch", mission_type=MissionType.PLAY, order=1,
    )
    second = Mission(
        id=uuid.uuid4(), campaign_id=campaign.id, title="Landing", mission_type=MissionType.PLAY, order=2,
    )
    boss = Mission(
        id=uuid.uuid4(),
        campaign_id=campaign.id,
        title="Meteor Storm",
        mission_type=MissionType.BOSS,
        order=3,
        unlock_reward_type=UnlockType.AVATAR,
        unlock_reward_id="robot",
    )
    db_session.add_all([first, second, boss])

    words = [
        Word(id=uuid.uuid4(), text="the", level="pre-primer"),
        Word(id=uuid.uuid4(), text="cat", level="pre-primer"),
        Word(id=uuid.uuid4(), text="jump", level="primer"),
    ]
    db_session.add_all(words)
    await db_session.commit()

    return {
        "theme": theme,
        "campaign": campaign,
        "first": first,
        "second": second,
        "boss": boss,
        "words": {w.text: w for w in words},
    }


@pytest_asyncio.fixture
async def player(db_session: AsyncSession, catalog) -> Player:
    """A player placed in the test campaign with no progress yet."""
    p = Player(
        id=uuid.uuid4(),
        name="Mia",
        avatar_id="fox",
        current_theme_id=catalog["theme"].id,
        current_campaign_id=catalog["campaign"].id,
        total_stars=0,
        total_play_time_seconds=0,
    )
    db_session.add(p)
    await db_session.commit()
    await db_session.refresh(p)
    return p


@pytest.fixture
def missing_id() -> uuid.UUID:
    return uuid.uuid4()
