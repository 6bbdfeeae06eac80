from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from ..database import Base


class FeedbackEntry(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(128), nullable=False, index=True)
    rating = Column(String(8), nullable=False)  # "up" | "down"
    notes = Column(Text, nullable=False, default="")
    result_id = Column(String(128), nullable=True)
    idea_index = Column(Integer, nullable=True)
    received_at = Column(DateTime, default=datetime.utcnow, nullable=False)
