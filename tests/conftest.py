"""
Pytest configuration and shared fixtures.

Environment defaults are set here so the suite runs without a .env file.
Settings are reloaded with these values before any app module is imported.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_messages.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from app.config import get_settings  # noqa: E402
get_settings.cache_clear()

from app.storage import Base, SessionLocal, engine  # noqa: E402
import app.models  # noqa: E402,F401


@pytest.fixture
def db_session():
    """Session over freshly created tables, dropped after the test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
