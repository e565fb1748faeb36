from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from ..core.database import Base


class NewsArticle(Base):
    __tablename__ = "news_articles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Publisher identity
    source_id = Column(String(255))
    source_name = Column(String(255), nullable=False, default="Unknown")
    author = Column(String(255))

    title = Column(String(500), nullable=False)
    description = Column(Text)
    url = Column(String(1000), nullable=False, unique=True)
    url_to_image = Column(String(1000))  # remote URL or mirrored /storage path
    published_at = Column(DateTime, nullable=False, index=True)
    content = Column(Text)
    category = Column(String(100), index=True)  # free text, not an enum

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<NewsArticle(id={self.id}, title='{self.title[:50]}...', category='{self.category}')>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source_id": self.source_id,
            "source_name": self.source_name,
            "author": self.author,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "url_to_image": self.url_to_image,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "content": self.content,
            "category": self.category,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
