import os
from pathlib import Path

from dotenv import load_dotenv
import pytest

# Must be set before reservation_core.database is imported
os.environ.setdefault("PYTEST_RUN", "1")

# Load environment variables for tests
load_dotenv(Path(__file__).resolve().parents[1] / ".env.test")

from reservation_core.utils.status_logger import register_status_listeners  # noqa: E402

from reservation_fixtures import setup_db  # noqa: E402

register_status_listeners()


@pytest.fixture
def db():
    Session = setup_db()
    session = Session()
    try:
        yield session
    finally:
        session.close()
