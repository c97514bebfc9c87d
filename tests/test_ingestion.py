import json
from datetime import datetime, timezone

import httpx
import pytest

from expense_tracker.core.errors import BadRequestError, InternalError, UnprocessableError
from expense_tracker.core.retry import with_retry
from expense_tracker.schemas.category import CategoryCreate, SubcategoryCreate
from expense_tracker.schemas.expense import ExpenseFilters
from expense_tracker.services.category import CategoryService
from expense_tracker.services.expense import ExpenseService
from expense_tracker.services.ingestion import ExpenseIngestionService, extract_tool_call, parse_expense_date
from expense_tracker.services.subcategory import SubcategoryService

RECEIPT_ARGS = json.dumps({
    "date": "2025-03-14",
    "amount": 23.4,
    "category": "Food",
    "subcategory": "Groceries",
    "notes": "Corner market: bread, milk",
})


async def test_receipt_image_becomes_expense(db, register, fake_ai) -> None:
    _, home = await register("Alice")
    food = await CategoryService(db).create_category(home, CategoryCreate(name="Food"))
    await SubcategoryService(db).create_subcategory(home, SubcategoryCreate(name="Groceries", category_id=food.id))
    fake_ai.queue_tool_call(RECEIPT_ARGS)

    expense = await ExpenseIngestionService(db, fake_ai.client()).ingest(home, "receipt.jpg", "image/jpeg", b"\xff\xd8jpeg")

    assert expense.household_id == home
    assert (expense.amount, expense.category, expense.subcategory) == (23.4, "Food", "Groceries")
    assert expense.description == "Corner market: bread, milk"
    assert expense.expense_datetime.date().isoformat() == "2025-03-14"

    [request] = fake_ai.requests
    assert request.url.path == "/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-ai-key"
    body = json.loads(request.content)
    assert body["tools"][0]["function"]["name"] == "log_expense"
    text_part, image_part = body["messages"][0]["content"]
    assert "- Food: Groceries" in text_part["text"]
    assert image_part["image_url"]["url"].startswith("data:image/jpeg;base64,")


async def test_voice_memo_is_transcribed_first(db, register, fake_ai) -> None:
    _, home = await register("Alice")
    fake_ai.queue_json({"text": "I spent twelve dollars on lunch today"})
    fake_ai.queue_tool_call(json.dumps({"date": "2025-03-14", "amount": 12, "category": "Food"}))

    expense = await ExpenseIngestionService(db, fake_ai.client()).ingest(home, "memo.m4a", "audio/mp4", b"audio")

    assert [r.url.path for r in fake_ai.requests] == ["/v1/audio/transcriptions", "/v1/chat/completions"]
    assert "twelve dollars on lunch" in json.loads(fake_ai.requests[1].content)["messages"][0]["content"]
    assert expense.description == "Expense from voice memo"
    assert expense.subcategory is None


async def test_no_tool_call_is_unprocessable(db, register, fake_ai) -> None:
    _, home = await register("Alice")
    fake_ai.queue_json({"choices": [{"message": {"role": "assistant", "content": "This is a cat picture."}}]})

    with pytest.raises(UnprocessableError):
        await ExpenseIngestionService(db, fake_ai.client()).ingest(home, "cat.png", "image/png", b"png")

    assert (await ExpenseService(db).get_expenses(home, ExpenseFilters())).total_items == 0


async def test_invalid_tool_arguments_are_unprocessable(db, register, fake_ai) -> None:
    _, home = await register("Alice")
    fake_ai.queue_tool_call(json.dumps({"date": "2025-03-14", "amount": -5, "category": "Food"}))

    with pytest.raises(UnprocessableError):
        await ExpenseIngestionService(db, fake_ai.client()).ingest(home, "r.png", "image/png", b"png")


@pytest.mark.parametrize(
    "content_type, content",
    [("application/pdf", b"%PDF"), (None, b"data"), ("image/png", b"")],
)
async def test_bad_uploads_are_rejected_before_calling_ai(db, register, fake_ai, content_type, content) -> None:
    _, home = await register("Alice")

    with pytest.raises(BadRequestError):
        await ExpenseIngestionService(db, fake_ai.client()).ingest(home, "upload", content_type, content)
    assert fake_ai.requests == []


async def test_ai_failure_is_internal_error(db, register, fake_ai) -> None:
    _, home = await register("Alice")
    fake_ai.queue_json({"error": {"message": "overloaded"}}, status_code=503)

    with pytest.raises(InternalError):
        await ExpenseIngestionService(db, fake_ai.client()).ingest(home, "r.png", "image/png", b"png")


def test_extract_tool_call_ignores_other_tools() -> None:
    response = {
        "choices": [{
            "message": {
                "tool_calls": [{"function": {"name": "something_else", "arguments": "{}"}}],
            },
        }],
    }
    assert extract_tool_call(response) is None
    assert extract_tool_call({"choices": []}) is None


def test_parse_expense_date() -> None:
    assert parse_expense_date("2025-03-14") == datetime(2025, 3, 14, tzinfo=timezone.utc)
    assert parse_expense_date("2025-03-14T10:30:00Z") == datetime(2025, 3, 14, 10, 30, tzinfo=timezone.utc)

    before = datetime.now(timezone.utc)
    assert parse_expense_date("last tuesday") >= before
    assert parse_expense_date(None) >= before


async def test_with_retry_retries_transport_errors() -> None:
    attempts = []

    @with_retry(max_retries=2, retry_delay=0)
    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ConnectError("connection refused")
        return "ok"

    assert await flaky() == "ok"
    assert len(attempts) == 3

    @with_retry(max_retries=1, retry_delay=0)
    async def down():
        raise httpx.ConnectError("connection refused")

    with pytest.raises(httpx.ConnectError):
        await down()
