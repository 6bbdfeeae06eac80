from datetime import datetime

from sqlalchemy import Column, DateTime, Float, String, Text

from ..database import Base


class KVEntry(Base):
    __tablename__ = "kv_entries"

    namespace = Column(String(64), primary_key=True)
    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)  # JSON document
    expires_at = Column(Float, nullable=True, index=True)  # epoch seconds; NULL = no expiry
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
