"""
Tests for the content library service against a recording async connection.
"""

import asyncio

from psycopg.types.json import Jsonb

from src.creatorai.db import library_service
from src.creatorai.models import ContentItem, GenerationOptions, LibraryLesson


def make_item():
    return ContentItem(
        name="Practical SQL",
        description="SQL for analysts",
        lessonCount=2,
        lessonDuration=45,
        generationOptions=GenerationOptions(style="concise"),
        lessons=[LibraryLesson(title="Joins", content="...")],
        tags=["sql"],
    )


class TestRowMapping:
    def test_to_row_uses_snake_case_and_skips_db_columns(self):
        row = library_service.to_row(make_item())
        assert "id" not in row and "created" not in row
        assert row["lesson_count"] == 2
        assert row["lesson_duration"] == 45
        assert isinstance(row["generation_options"], Jsonb)
        assert row["generation_options"].obj["style"] == "concise"
        assert row["progress"] is None
        assert row["learning_outcomes"] is None

    def test_from_row_maps_back_to_camel_case(self, row_factory):
        item = library_service.from_row(row_factory())
        assert item.id == 1
        assert item.lessonCount == 2
        assert item.generationOptions.style == "balanced"
        assert item.lessons[0].title == "Joins"
        assert item.created.startswith("2026-01-05T09:30:00")


class TestQueries:
    def test_list_newest_first(self, db_factory, row_factory):
        db = db_factory([row_factory(2, "B"), row_factory(1, "A")])
        items = asyncio.run(library_service.list_content_items(db))
        assert [i.name for i in items] == ["B", "A"]
        assert "ORDER BY created DESC" in db.executed[0][0]

    def test_save_returns_stored_item(self, db_factory, row_factory):
        db = db_factory([row_factory(5)])
        saved = asyncio.run(library_service.save_content_item(db, make_item()))
        sql, params = db.executed[0]
        assert sql.startswith("INSERT INTO content_items")
        assert "RETURNING" in sql
        assert len(params) == len(library_service.COLUMNS) - 2
        assert saved.id == 5

    def test_update_missing_item(self, db_factory):
        db = db_factory([])
        assert asyncio.run(library_service.update_content_item(db, 99, make_item())) is None
        assert db.executed[0][1][-1] == 99

    def test_get_and_delete(self, db_factory, row_factory):
        db = db_factory([row_factory(3)])
        assert asyncio.run(library_service.get_content_item(db, 3)).id == 3
        assert asyncio.run(library_service.delete_content_item(db, 3))
        assert not asyncio.run(library_service.delete_content_item(db_factory([]), 4))

    def test_table_is_created_if_missing(self, db_factory):
        db = db_factory()
        asyncio.run(library_service.ensure_content_items_table(db))
        assert "CREATE TABLE IF NOT EXISTS content_items" in db.executed[0][0]
