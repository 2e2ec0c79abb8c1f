import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from campusflow.database import Base  # noqa: E402
from campusflow.models.profile import Profile  # noqa: E402
from campusflow.services import collections  # noqa: E402,F401
from campusflow.services.change_feed import ChangeFeed  # noqa: E402
from campusflow.services.policy import Caller  # noqa: E402
from campusflow.services.record_store import RecordStore  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def feed():
    return ChangeFeed(queue_size=10)


@pytest.fixture
def store(db, feed):
    return RecordStore(db, feed=feed, sleep=lambda _delay: None)


@pytest.fixture
def make_caller(db):
    created = []

    def _make_caller(role: str = 'student', department: str | None = None, email: str | None = None) -> Caller:
        profile = Profile(
            full_name=f'User {len(created) + 1}',
            email=email or f'user{len(created) + 1}@campus.edu',
            role=role,
            department=department,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        created.append(profile)
        return Caller.from_profile(profile)

    return _make_caller
