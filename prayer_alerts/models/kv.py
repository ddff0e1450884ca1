from sqlalchemy import Column, String, DateTime, LargeBinary
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class StoredValue(Base):
    __tablename__ = "key_values"

    key = Column(String, primary_key=True)
    value = Column(LargeBinary, nullable=False)  # JSON-encoded blob
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
