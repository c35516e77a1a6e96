"""Conversion between stored JSON documents and domain models.

Decoding is lenient: stored documents may come from older clients, use
camelCase keys, or be partially corrupted. Bad entries are skipped with a
warning and whole documents fall back to defaults; nothing here raises.
"""

import logging
import re
from typing import Any, Dict, List

from pydantic import BaseModel, ValidationError

from dayfocus.models.preferences import UserPreferences, normalize_preferences
from dayfocus.models.streak import StreakState, default_streak_state
from dayfocus.models.task import Category, Task

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow camelCase -> snake_case key conversion (snake_case keys pass through)."""
    return {_CAMEL_BOUNDARY.sub("_", str(key)).lower(): value for key, value in raw.items()}


def encode_model(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json")


def encode_models(models: List[BaseModel]) -> List[Dict[str, Any]]:
    return [encode_model(model) for model in models]


def decode_task(raw: Any) -> Task:
    """Decode one stored task.

    Raises:
        ValueError: If the payload cannot be turned into a Task
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Task payload must be an object, got {type(raw).__name__}")
    data = to_snake_keys(raw)
    if isinstance(data.get("category"), dict):
        data["category"] = to_snake_keys(data["category"])
    try:
        return Task.model_validate(data)
    except ValidationError as e:
        raise ValueError(str(e)) from e


def decode_tasks(raw: Any) -> List[Task]:
    """Decode a stored task list, skipping tasks that fail validation."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning(f"Ignoring tasks document of unexpected type {type(raw).__name__}")
        return []

    tasks: List[Task] = []
    for index, item in enumerate(raw):
        try:
            tasks.append(decode_task(item))
        except ValueError as e:
            task_id = item.get("id") if isinstance(item, dict) else None
            logger.warning(f"Skipping undecodable task at index {index} (id={task_id}): {e}")
    return tasks


def decode_categories(raw: Any) -> List[Category]:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Ignoring categories document of unexpected type {type(raw).__name__}")
        return []

    categories: List[Category] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            categories.append(Category.model_validate(to_snake_keys(item)))
        except ValidationError as e:
            logger.warning(f"Skipping undecodable category {item.get('id')!r}: {e}")
    return categories


def decode_preferences(raw: Any) -> UserPreferences:
    return normalize_preferences(raw)


def decode_streak(raw: Any) -> StreakState:
    if not isinstance(raw, dict):
        return default_streak_state()
    data = to_snake_keys(raw)
    if isinstance(data.get("milestone_celebration"), dict):
        data["milestone_celebration"] = to_snake_keys(data["milestone_celebration"])
    try:
        return StreakState.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Falling back to a fresh streak, stored state is invalid: {e}")
        return default_streak_state()
