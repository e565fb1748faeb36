import os
import tempfile
from unittest.mock import MagicMock

import pytest

from tests.factories import FakeClock, make_article

os.environ.setdefault("FILE_STORAGE_DIR", tempfile.mkdtemp(prefix="newsdesk-tests-"))
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def test_settings(tmp_path):
    from newsdesk.config import Settings

    return Settings(
        news_api_key="test-key",
        database_url="sqlite:///:memory:",
        file_storage_dir=str(tmp_path / "storage"),
        cache_backend="memory",
        _env_file=None,
    )


@pytest.fixture
def test_db():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from newsdesk.core.database import Base, create_tables

    # Use in-memory SQLite for tests
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    create_tables(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repository(test_db, fake_clock):
    from newsdesk.repositories.news_article_repository import NewsArticleRepository
    return NewsArticleRepository(test_db, clock=fake_clock)


@pytest.fixture
def memory_cache(fake_clock):
    from newsdesk.core.cache import InMemoryCacheStore
    return InMemoryCacheStore(clock=fake_clock)


@pytest.fixture
def sample_articles():
    return [make_article(1), make_article(2)]


@pytest.fixture
def mock_news_client(sample_articles):
    from newsdesk.services.news_api_client import NewsApiResponse

    client = MagicMock()
    client.top_headlines = MagicMock(
        return_value=NewsApiResponse(total_results=len(sample_articles), articles=sample_articles)
    )
    client.search = MagicMock(
        return_value=NewsApiResponse(total_results=len(sample_articles), articles=sample_articles)
    )
    return client


@pytest.fixture
def mock_image_mirror():
    mirror = MagicMock()
    mirror.mirror = MagicMock(return_value=None)
    return mirror


@pytest.fixture
def fetch_service(memory_cache, mock_news_client, test_settings, repository, mock_image_mirror):
    from newsdesk.services.news_fetch_service import NewsFetchService
    return NewsFetchService(
        cache=memory_cache,
        client=mock_news_client,
        settings=test_settings,
        repository=repository,
        image_mirror=mock_image_mirror,
    )


@pytest.fixture
async def async_client(test_db, fetch_service):
    from httpx import AsyncClient, ASGITransport
    from newsdesk.main import app
    from newsdesk.core.database import get_db
    from newsdesk.api.dependencies import get_news_fetch_service

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_news_fetch_service] = lambda: fetch_service

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
