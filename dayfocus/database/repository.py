"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dayfocus.database.models import (
    CATEGORIES_KEY,
    PREFERENCES_KEY,
    STREAK_KEY,
    TASKS_KEY,
    UserDocumentDB,
)
from dayfocus.database.transforms import (
    decode_categories,
    decode_preferences,
    decode_streak,
    decode_tasks,
    encode_model,
    encode_models,
)
from dayfocus.models.preferences import UserPreferences
from dayfocus.models.streak import StreakState, default_streak_state
from dayfocus.models.task import Category, Task

logger = logging.getLogger(__name__)


class UserState(BaseModel):
    """Everything stored for one user."""

    tasks: List[Task] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    streak: StreakState = Field(default_factory=default_streak_state)


class UserStateRepository:
    """Repository for per-user state documents."""

    def __init__(self, db: Session):
        self.db = db

    def _get_document(self, user_id: str, key: str) -> Optional[UserDocumentDB]:
        return self.db.query(UserDocumentDB).filter(
            UserDocumentDB.user_id == user_id,
            UserDocumentDB.key == key,
        ).first()

    def _load_payload(self, user_id: str, key: str) -> Any:
        document = self._get_document(user_id, key)
        return document.payload if document else None

    def _save_payload(self, user_id: str, key: str, payload: Any) -> None:
        try:
            document = self._get_document(user_id, key)
            if document is None:
                document = UserDocumentDB(user_id=user_id, key=key)
                self.db.add(document)
            document.payload = payload
            document.updated_at = datetime.utcnow()
            self.db.commit()
            logger.debug(f"Saved {key} for user {user_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save {key} for user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def load(self, user_id: str) -> UserState:
        """Load a user's full state, with defaults for anything missing or malformed."""
        return UserState(
            tasks=self.load_tasks(user_id),
            categories=self.load_categories(user_id),
            preferences=self.load_preferences(user_id),
            streak=self.load_streak(user_id),
        )

    def load_tasks(self, user_id: str) -> List[Task]:
        return decode_tasks(self._load_payload(user_id, TASKS_KEY))

    def load_categories(self, user_id: str) -> List[Category]:
        return decode_categories(self._load_payload(user_id, CATEGORIES_KEY))

    def load_preferences(self, user_id: str) -> UserPreferences:
        return decode_preferences(self._load_payload(user_id, PREFERENCES_KEY))

    def load_streak(self, user_id: str) -> StreakState:
        return decode_streak(self._load_payload(user_id, STREAK_KEY))

    def save_tasks(self, user_id: str, tasks: List[Task]) -> None:
        self._save_payload(user_id, TASKS_KEY, encode_models(tasks))

    def save_categories(self, user_id: str, categories: List[Category]) -> None:
        self._save_payload(user_id, CATEGORIES_KEY, encode_models(categories))

    def save_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        self._save_payload(user_id, PREFERENCES_KEY, encode_model(preferences))

    def save_streak(self, user_id: str, streak: StreakState) -> None:
        self._save_payload(user_id, STREAK_KEY, encode_model(streak))

    def save(self, user_id: str, state: UserState) -> None:
        """Persist every document of a user's state."""
        self.save_tasks(user_id, state.tasks)
        self.save_categories(user_id, state.categories)
        self.save_preferences(user_id, state.preferences)
        self.save_streak(user_id, state.streak)

    def list_keys(self, user_id: str) -> Dict[str, datetime]:
        """Stored document keys for a user with their last update time."""
        documents = self.db.query(UserDocumentDB).filter(UserDocumentDB.user_id == user_id).all()
        return {document.key: document.updated_at for document in documents}
