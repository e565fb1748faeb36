from datetime import datetime, timedelta


class FakeClock:
    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def make_article(n: int, **overrides):
    article = {
        "source": {"id": f"source-{n}", "name": f"Source {n}"},
        "author": f"Author {n}",
        "title": f"Headline number {n}",
        "description": f"Description {n}",
        "url": f"https://example.com/articles/{n}",
        "urlToImage": f"https://images.example.com/{n}.png",
        "publishedAt": f"2025-01-0{n}T08:00:00Z",
        "content": f"Content {n}",
    }
    article.update(overrides)
    return article
