"""
Content library: saved courses and lesson sets, one row per item in `content_items`.

Rows use snake_case columns; the API speaks the camelCase `ContentItem` model.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from psycopg.connection_async import AsyncConnection
from psycopg.types.json import Jsonb

from src.creatorai.models import ContentItem

logger = logging.getLogger(__name__)

TABLE_NAME = "content_items"

CONTENT_ITEMS_DDL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    lesson_count INTEGER NOT NULL DEFAULT 0,
    lesson_duration INTEGER NOT NULL DEFAULT 0,
    difficulty TEXT NOT NULL DEFAULT 'beginner',
    created TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    notes TEXT,
    generation_options JSONB NOT NULL DEFAULT '{{}}'::jsonb,
    lessons JSONB NOT NULL DEFAULT '[]'::jsonb,
    progress DOUBLE PRECISION,
    tags JSONB,
    learning_outcomes JSONB
)
"""

# camelCase model field -> column, in SELECT order
COLUMNS = {
    "id": "id",
    "name": "name",
    "description": "description",
    "lessonCount": "lesson_count",
    "lessonDuration": "lesson_duration",
    "difficulty": "difficulty",
    "created": "created",
    "notes": "notes",
    "generationOptions": "generation_options",
    "lessons": "lessons",
    "progress": "progress",
    "tags": "tags",
    "learningOutcomes": "learning_outcomes",
}
JSON_FIELDS = {"generationOptions", "lessons", "tags", "learningOutcomes"}
# set by the database
READ_ONLY_FIELDS = {"id", "created"}

SELECT_COLUMNS = ", ".join(COLUMNS.values())


def to_row(item: ContentItem) -> Dict[str, Any]:
    """Column -> value for the writable columns of `item`."""
    data = item.model_dump(mode="json")
    row = {}
    for field, column in COLUMNS.items():
        if field in READ_ONLY_FIELDS:
            continue
        value = data.get(field)
        row[column] = Jsonb(value) if field in JSON_FIELDS and value is not None else value
    return row


def from_row(row: Sequence[Any]) -> ContentItem:
    data = dict(zip(COLUMNS.keys(), row))
    created = data.get("created")
    if created is not None and not isinstance(created, str):
        data["created"] = created.isoformat()
    if data.get("generationOptions") is None:
        data.pop("generationOptions")
    if data.get("lessons") is None:
        data.pop("lessons")
    return ContentItem.model_validate(data)


async def ensure_content_items_table(db: AsyncConnection) -> None:
    await db.execute(CONTENT_ITEMS_DDL)


async def list_content_items(db: AsyncConnection) -> List[ContentItem]:
    """Every item, newest first."""
    cursor = await db.execute(f"SELECT {SELECT_COLUMNS} FROM {TABLE_NAME} ORDER BY created DESC")
    rows = await cursor.fetchall()
    return [from_row(row) for row in rows]


async def get_content_item(db: AsyncConnection, item_id: int) -> Optional[ContentItem]:
    cursor = await db.execute(f"SELECT {SELECT_COLUMNS} FROM {TABLE_NAME} WHERE id = %s", (item_id,))
    row = await cursor.fetchone()
    return from_row(row) if row else None


async def save_content_item(db: AsyncConnection, item: ContentItem) -> ContentItem:
    row = to_row(item)
    columns = ", ".join(row.keys())
    placeholders = ", ".join(["%s"] * len(row))
    cursor = await db.execute(
        f"INSERT INTO {TABLE_NAME} ({columns}) VALUES ({placeholders}) RETURNING {SELECT_COLUMNS}",
        tuple(row.values()),
    )
    saved = await cursor.fetchone()
    if not saved:
        raise RuntimeError("Failed to add content item, no data returned.")
    logger.info("--- Saved content item %s ---", saved[0])
    return from_row(saved)


async def update_content_item(db: AsyncConnection, item_id: int, item: ContentItem) -> Optional[ContentItem]:
    """Replaces every writable column of the item. Returns None when it does not exist."""
    row = to_row(item)
    assignments = ", ".join(f"{column} = %s" for column in row.keys())
    cursor = await db.execute(
        f"UPDATE {TABLE_NAME} SET {assignments} WHERE id = %s RETURNING {SELECT_COLUMNS}",
        (*row.values(), item_id),
    )
    updated = await cursor.fetchone()
    return from_row(updated) if updated else None


async def delete_content_item(db: AsyncConnection, item_id: int) -> bool:
    cursor = await db.execute(f"DELETE FROM {TABLE_NAME} WHERE id = %s RETURNING id", (item_id,))
    deleted = await cursor.fetchone()
    return deleted is not None
