"""
Tests for the catalog and roster tools.

1. Input validation
2. Success responses with structured data
3. Store errors mapped to error_type
"""

from lending_desk.tools.catalog import (
    add_book,
    add_book_handler,
    add_borrower_handler,
    catalog_tools,
    delete_book_handler,
    delete_borrower_handler,
)


class TestAddBookTool:
    async def test_add_book_success(self, store):
        result = await add_book_handler(
            {"name": "Dune", "author": "Frank Herbert", "year": 1965}, store
        )

        assert not result.get("isError")
        assert result["content"][0]["type"] == "text"
        assert "DU-0001" in result["content"][0]["text"]
        assert result["data"]["book"] == {
            "name": "Dune",
            "id": "DU-0001",
            "author": "Frank Herbert",
            "year": 1965,
            "is_available": True,
        }

    async def test_add_book_invalid_arguments(self, store):
        result = await add_book_handler({"name": "Dune", "year": -3}, store)

        assert result["isError"] is True
        assert result["error_type"] == "validation"
        assert "Invalid add_book parameters" in result["content"][0]["text"]
        assert store.books == []

    async def test_add_book_duplicate(self, seeded_store):
        result = await add_book_handler(
            {"name": "UTOPIA", "author": "Thomas More", "year": 1516}, seeded_store
        )

        assert result["isError"] is True
        assert result["error_type"] == "validation"
        assert "already exists" in result["content"][0]["text"]

    def test_tool_definition(self):
        assert add_book["name"] == "add_book"
        assert set(add_book["inputSchema"]["required"]) == {"name", "author", "year"}
        assert {tool["name"] for tool in catalog_tools} == {
            "add_book",
            "delete_book",
            "add_borrower",
            "delete_borrower",
        }


class TestDeleteBookTool:
    async def test_delete_book(self, seeded_store):
        result = await delete_book_handler({"book_id": "UT-1516"}, seeded_store)

        assert not result.get("isError")
        assert result["data"]["book"]["name"] == "Utopia"

    async def test_delete_unknown_book(self, seeded_store):
        result = await delete_book_handler({"book_id": "ZZ-0001"}, seeded_store)

        assert result["isError"] is True
        assert result["error_type"] == "not_found"

    async def test_delete_book_on_loan(self, seeded_store, loan_dates):
        seeded_store.create_record("STU-001", ["UT-1516"], *loan_dates)

        result = await delete_book_handler({"book_id": "UT-1516"}, seeded_store)

        assert result["isError"] is True
        assert result["error_type"] == "conflict"
        assert len(seeded_store.books) == 5


class TestBorrowerTools:
    async def test_add_borrower(self, seeded_store):
        result = await add_borrower_handler({"name": "Dana Scully"}, seeded_store)

        assert not result.get("isError")
        assert result["data"]["borrower"] == {"name": "Dana Scully", "serial": "STU-004"}

    async def test_add_borrower_blank(self, store):
        result = await add_borrower_handler({"name": ""}, store)
        assert result["error_type"] == "validation"

    async def test_delete_borrower_with_loan(self, seeded_store, loan_dates):
        seeded_store.create_record("STU-002", ["UT-1516"], *loan_dates)

        result = await delete_borrower_handler({"serial": "STU-002"}, seeded_store)

        assert result["error_type"] == "conflict"

    async def test_delete_borrower_bad_serial(self, seeded_store):
        result = await delete_borrower_handler({"serial": "bob"}, seeded_store)
        assert result["error_type"] == "validation"

    async def test_delete_borrower(self, seeded_store):
        result = await delete_borrower_handler({"serial": "STU-003"}, seeded_store)

        assert not result.get("isError")
        assert [b.serial for b in seeded_store.borrowers] == ["STU-001", "STU-002"]
