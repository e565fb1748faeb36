from datetime import datetime

import pytest

from newsdesk.exceptions import ValidationError
from newsdesk.models.news_article import NewsArticle
from newsdesk.repositories.news_article_repository import parse_published_at

from tests.factories import make_article


class TestUpsert:

    def test_insert_maps_upstream_fields(self, repository):
        stored = repository.upsert(make_article(1), "sports")

        assert stored.id is not None
        assert stored.source_id == "source-1"
        assert stored.source_name == "Source 1"
        assert stored.author == "Author 1"
        assert stored.title == "Headline number 1"
        assert stored.url == "https://example.com/articles/1"
        assert stored.url_to_image == "https://images.example.com/1.png"
        assert stored.published_at == datetime(2025, 1, 1, 8, 0, 0)
        assert stored.category == "sports"
        assert stored.created_at is not None

    def test_same_url_twice_keeps_one_row_and_second_wins(self, repository, test_db):
        repository.upsert(make_article(1), "sports")
        repository.upsert(make_article(1, title="Updated headline", author="Someone else"), "business")

        rows = test_db.query(NewsArticle).all()
        assert len(rows) == 1
        assert rows[0].title == "Updated headline"
        assert rows[0].author == "Someone else"
        assert rows[0].category == "business"

    def test_missing_optional_fields_use_defaults(self, repository, fake_clock):
        stored = repository.upsert({"url": "https://example.com/bare"}, "general")

        assert stored.source_name == "Unknown"
        assert stored.source_id is None
        assert stored.title == "No title"
        assert stored.description is None
        assert stored.content is None
        assert stored.url_to_image is None
        assert stored.published_at == fake_clock()

    def test_null_source_object_is_tolerated(self, repository):
        stored = repository.upsert(make_article(1, source=None), "general")

        assert stored.source_name == "Unknown"

    def test_mirrored_image_overrides_remote_url(self, repository):
        stored = repository.upsert(make_article(1), "general", image_url="/storage/news_images/a.png")

        assert stored.url_to_image == "/storage/news_images/a.png"

    def test_article_without_url_is_rejected(self, repository):
        with pytest.raises(ValidationError):
            repository.upsert(make_article(1, url=None), "general")


class TestParsePublishedAt:

    def test_offset_is_converted_to_utc(self):
        default = datetime(2000, 1, 1)
        assert parse_published_at("2025-03-01T10:00:00+02:00", default) == datetime(2025, 3, 1, 8, 0, 0)

    def test_garbage_falls_back_to_default(self):
        default = datetime(2000, 1, 1)
        assert parse_published_at("yesterday", default) == default

    @pytest.mark.parametrize("value", [1735718400, 1735718400.5, ["2025-01-01"], {"at": "now"}])
    def test_non_string_falls_back_to_default(self, value):
        default = datetime(2000, 1, 1)
        assert parse_published_at(value, default) == default

    def test_epoch_published_at_is_stored_with_fetch_time(self, repository, fake_clock):
        row = repository.upsert(make_article(1, publishedAt=1735718400), "general")

        assert row.published_at == fake_clock()


class TestListAndStats:

    @pytest.fixture(autouse=True)
    def seed(self, repository):
        repository.upsert(make_article(1), "sports")
        repository.upsert(make_article(2), "business")
        repository.upsert(make_article(3), "sports")
        repository.upsert(make_article(4), "search")

    def test_list_all_newest_first(self, repository):
        articles, total = repository.list_articles()

        assert total == 4
        assert [a.url[-1] for a in articles] == ["4", "3", "2", "1"]

    def test_list_filters_by_exact_category(self, repository):
        articles, total = repository.list_articles(category="sports")

        assert total == 2
        assert {a.category for a in articles} == {"sports"}

    def test_all_category_means_no_filter(self, repository):
        _, total = repository.list_articles(category="all")

        assert total == 4

    def test_pagination(self, repository):
        first, total = repository.list_articles(per_page=3, page=1)
        second, _ = repository.list_articles(per_page=3, page=2)

        assert total == 4
        assert len(first) == 3
        assert [a.url[-1] for a in second] == ["1"]

    def test_count(self, repository):
        assert repository.count() == 4
        assert repository.count("business") == 1

    def test_stats(self, repository):
        stats = repository.stats()

        assert stats["total"] == 4
        assert stats["by_category"] == {"business": 1, "search": 1, "sports": 2}
        assert stats["latest_published_at"] == datetime(2025, 1, 4, 8, 0, 0)
        assert stats["oldest_published_at"] == datetime(2025, 1, 1, 8, 0, 0)


def test_stats_on_empty_table(repository):
    stats = repository.stats()

    assert stats["total"] == 0
    assert stats["by_category"] == {}
    assert stats["latest_published_at"] is None
