from datetime import datetime

from sqlalchemy import Column, String, DateTime, JSON

from ..core.database import Base


class CacheEntry(Base):
    __tablename__ = "cache_entries"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
