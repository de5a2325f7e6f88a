from datetime import timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from db.database import Base
from models.mapping import UrlMapping


class URL(Base):
    __tablename__ = "urls"

    id = Column(String(32), primary_key=True)
    original_url = Column(Text, nullable=False)
    short_code = Column(String(6), nullable=False, unique=True, index=True)
    click_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    @classmethod
    def from_mapping(cls, mapping: UrlMapping) -> "URL":
        return cls(
            id=mapping.id,
            original_url=mapping.original_url,
            short_code=mapping.short_code,
            click_count=mapping.click_count,
            created_at=mapping.created_at,
        )

    def to_mapping(self) -> UrlMapping:
        return UrlMapping(
            id=self.id,
            original_url=self.original_url,
            short_code=self.short_code,
            click_count=self.click_count,
            # SQLite drops the offset; stored values are always UTC.
            created_at=(
                self.created_at.replace(tzinfo=timezone.utc)
                if self.created_at is not None and self.created_at.tzinfo is None
                else self.created_at
            ),
        )
