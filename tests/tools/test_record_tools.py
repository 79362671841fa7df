"""
Tests for the loan record tools.

Covers the create flow (including the borrower_not_found retry), the edit
lock tools, deletes, the overdue sweep and search.
"""

from datetime import date

import pytest

from lending_desk.models import RecordStatus
from lending_desk.tools import all_tools, bind_tool
from lending_desk.tools.records import (
    begin_edit_record_handler,
    cancel_edit_record_handler,
    commit_edit_record_handler,
    create_record_handler,
    delete_all_records_handler,
    delete_record_handler,
    search_records_handler,
    sweep_overdue_handler,
)


def loan(**overrides) -> dict:
    arguments = {
        "borrower": "STU-001",
        "books": ["TP-1532"],
        "borrowed_date": "2025-03-01",
        "return_date": "2025-03-15",
    }
    arguments.update(overrides)
    return arguments


@pytest.fixture
async def created(seeded_store) -> dict:
    result = await create_record_handler(loan(books=["TP-1532", "UT-1516"]), seeded_store)
    assert not result.get("isError"), result
    return result["data"]["record"]


class TestCreateRecordTool:
    async def test_create_success(self, seeded_store):
        result = await create_record_handler(loan(), seeded_store)

        assert not result.get("isError")
        assert "Alice Johnson (STU-001) borrowed 'The Prince'" in result["content"][0]["text"]
        record = result["data"]["record"]
        assert record["status"] == "borrowed"
        assert record["borrowed_date"] == "2025-03-01"
        assert record["books"][0]["is_available"] is False
        assert seeded_store.get_book("TP-1532").is_available is False

    async def test_return_date_before_borrowed(self, seeded_store):
        result = await create_record_handler(
            loan(borrowed_date="2025-03-15", return_date="2025-03-01"), seeded_store
        )

        assert result["isError"] is True
        assert result["error_type"] == "validation"
        assert seeded_store.records == []

    async def test_empty_books_rejected(self, seeded_store):
        result = await create_record_handler(loan(books=[]), seeded_store)
        assert result["error_type"] == "validation"

    async def test_unknown_borrower_then_retry(self, seeded_store):
        result = await create_record_handler(loan(borrower="Dana Scully"), seeded_store)

        assert result["isError"] is True
        assert result["error_type"] == "borrower_not_found"
        assert result["data"] == {"borrower_name": "Dana Scully"}
        assert "create_borrower=true" in result["content"][0]["text"]
        assert len(seeded_store.borrowers) == 3

        retry = await create_record_handler(
            loan(borrower="Dana Scully", create_borrower=True), seeded_store
        )

        assert not retry.get("isError")
        assert retry["data"]["record"]["borrower"] == {"name": "Dana Scully", "serial": "STU-004"}

    async def test_unavailable_book(self, seeded_store, created):
        result = await create_record_handler(loan(borrower="STU-002"), seeded_store)

        assert result["error_type"] == "conflict"

    async def test_unknown_book(self, seeded_store):
        result = await create_record_handler(loan(books=["Moby Dick"]), seeded_store)
        assert result["error_type"] == "not_found"

    async def test_overdue_borrower(self, seeded_store, created):
        seeded_store.sweep_overdue(date(2025, 4, 1))

        result = await create_record_handler(
            loan(books=["TB-1482"], borrowed_date="2025-04-01", return_date="2025-04-10"),
            seeded_store,
        )

        assert result["error_type"] == "conflict"
        assert "overdue" in result["content"][0]["text"]


class TestEditTools:
    async def test_begin_commit(self, seeded_store, created):
        begun = await begin_edit_record_handler({"record_id": created["id"]}, seeded_store)
        token = begun["data"]["token"]

        result = await commit_edit_record_handler(
            loan(books=["TP-1532"], status="returned", **token), seeded_store
        )

        assert not result.get("isError")
        assert result["data"]["record"]["status"] == "returned"
        assert seeded_store.get_book("UT-1516").is_available is True
        assert seeded_store.get_book("TP-1532").is_available is True
        assert seeded_store.edit_in_progress is None

    async def test_second_edit_conflicts(self, seeded_store, created):
        other = seeded_store.create_record(
            "STU-002", ["TB-1482"], date(2025, 3, 1), date(2025, 3, 15)
        )
        await begin_edit_record_handler({"record_id": created["id"]}, seeded_store)

        result = await begin_edit_record_handler({"record_id": other.id}, seeded_store)

        assert result["error_type"] == "conflict"

    async def test_commit_with_wrong_nonce(self, seeded_store, created):
        await begin_edit_record_handler({"record_id": created["id"]}, seeded_store)

        result = await commit_edit_record_handler(
            loan(record_id=created["id"], nonce="forged"), seeded_store
        )

        assert result["error_type"] == "conflict"
        assert seeded_store.edit_in_progress is not None

    async def test_cancel(self, seeded_store, created):
        await begin_edit_record_handler({"record_id": created["id"]}, seeded_store)

        result = await cancel_edit_record_handler({}, seeded_store)

        assert result["data"] == {"record_id": created["id"]}
        assert seeded_store.edit_in_progress is None

    async def test_cancel_without_edit(self, seeded_store):
        result = await cancel_edit_record_handler({}, seeded_store)
        assert result["content"][0]["text"] == "No record was being edited"

    async def test_begin_bad_record_id(self, seeded_store):
        result = await begin_edit_record_handler({"record_id": "42"}, seeded_store)
        assert result["error_type"] == "validation"


class TestDeleteTools:
    async def test_delete_record(self, seeded_store, created):
        result = await delete_record_handler({"record_id": created["id"]}, seeded_store)

        assert not result.get("isError")
        assert "2 book(s) released" in result["content"][0]["text"]
        assert seeded_store.get_book("UT-1516").is_available is True

    async def test_delete_record_while_editing(self, seeded_store, created):
        await begin_edit_record_handler({"record_id": created["id"]}, seeded_store)

        result = await delete_record_handler({"record_id": created["id"]}, seeded_store)

        assert result["error_type"] == "conflict"
        assert len(seeded_store.records) == 1

    async def test_delete_all_requires_confirm(self, seeded_store, created):
        result = await delete_all_records_handler({"confirm": False}, seeded_store)

        assert result["error_type"] == "validation"
        assert len(seeded_store.records) == 1

    async def test_delete_all(self, seeded_store, created):
        result = await delete_all_records_handler({"confirm": True}, seeded_store)

        assert result["data"] == {"deleted": 1}
        assert all(book.is_available for book in seeded_store.books)


class TestSweepAndSearchTools:
    async def test_sweep(self, seeded_store, created):
        result = await sweep_overdue_handler({"today": "2025-04-01"}, seeded_store)

        assert result["data"]["updated"] == 1
        assert seeded_store.records[0].status is RecordStatus.OVERDUE

        again = await sweep_overdue_handler({"today": "2025-04-01"}, seeded_store)
        assert again["data"]["updated"] == 0

    async def test_search(self, history_store):
        result = await search_records_handler(
            {"query": "overdue", "sort_by": "name", "order": "desc"}, history_store
        )

        assert result["data"]["total"] == 2
        assert [r["books"][0]["name"] for r in result["data"]["records"]] == ["Dune", "Ivanhoe"]
        assert result["content"][0]["text"].startswith("Found 2 record(s):")

    async def test_search_no_match(self, history_store):
        result = await search_records_handler({"query": "zzz"}, history_store)

        assert result["data"]["records"] == []
        assert result["content"][0]["text"] == "No records match 'zzz'"

    async def test_search_bad_sort_field(self, history_store):
        result = await search_records_handler({"sort_by": "author"}, history_store)
        assert result["error_type"] == "validation"


class TestBoundTools:
    async def test_bind_tool_closes_over_store(self, seeded_store):
        tool = next(t for t in all_tools if t["name"] == "add_borrower")
        handler = bind_tool(tool, seeded_store)

        result = await handler({"name": "Dana Scully"})

        assert handler.__name__ == "add_borrower"
        assert result["data"]["borrower"]["serial"] == "STU-004"

    def test_every_tool_is_exposed(self):
        assert {tool["name"] for tool in all_tools} == {
            "add_book",
            "add_borrower",
            "delete_book",
            "delete_borrower",
            "create_record",
            "begin_edit_record",
            "commit_edit_record",
            "cancel_edit_record",
            "delete_record",
            "delete_all_records",
            "sweep_overdue",
            "search_records",
        }
