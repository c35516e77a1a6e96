"""SQLAlchemy database models for dayfocus."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, DateTime, JSON, UniqueConstraint

from dayfocus.database.database import Base


# Document keys stored per user
TASKS_KEY = "tasks"
CATEGORIES_KEY = "categories"
PREFERENCES_KEY = "preferences"
STREAK_KEY = "streak"

DOCUMENT_KEYS = (TASKS_KEY, CATEGORIES_KEY, PREFERENCES_KEY, STREAK_KEY)


class UserDocumentDB(Base):
    """One JSON document of user state (tasks, categories, preferences or streak)."""

    __tablename__ = "user_documents"
    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uq_user_document_key"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    key = Column(String, nullable=False)
    payload = Column(JSON, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
