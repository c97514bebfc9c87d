# expense_tracker/services/ingestion.py
"""
Turn an uploaded receipt photo or voice memo into an expense.

A processor is picked once from the upload's MIME type. Both processors end in
the same chat completion that may call the ``log_expense`` tool; the tool
arguments become the stored expense.
"""
import base64
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.config import settings
from expense_tracker.core.errors import BadRequestError, InternalError, UnprocessableError
from expense_tracker.core.retry import with_retry
from expense_tracker.models.expense import Expense
from expense_tracker.schemas.expense import ExpenseCreate
from expense_tracker.services.category import CategoryService
from expense_tracker.services.expense import ExpenseService

logger = logging.getLogger(__name__)

LOG_EXPENSE_TOOL = {
    "type": "function",
    "function": {
        "name": "log_expense",
        "description": "Logs an expense in the system",
        "parameters": {
            "type": "object",
            "properties": {
                "date": {"type": "string", "description": "Date of the expense"},
                "amount": {"type": "number", "description": "Amount of the expense"},
                "category": {"type": "string", "description": "Category of the expense"},
                "subcategory": {"type": "string", "description": "Subcategory of the expense"},
                "notes": {
                    "type": "string",
                    "description": "Additional notes for the expense, such as the name of the store, "
                                   "items purchased, or any specific context about the expense",
                },
            },
            "required": ["date", "amount", "category"],
        },
    },
}

PROMPT_TEMPLATE = """Extract the {source} details and determine if we should log this expense. If yes, call the log_expense function.

To determine the category and subcategory, take into account that we currently have the following categories and subcategories:

{categories}

To determine the date, use what is explicitly mentioned in the {source}, otherwise use the current date ({today}).
"""


class ExtractedExpense(BaseModel):
    date: Optional[str] = None
    amount: float
    category: str
    subcategory: Optional[str] = None
    notes: Optional[str] = None

    def to_expense_create(self, default_description: str) -> ExpenseCreate:
        return ExpenseCreate(
            description=(self.notes or "").strip() or default_description,
            amount=self.amount,
            category=self.category,
            subcategory=self.subcategory or None,
            expense_datetime=parse_expense_date(self.date),
        )


def parse_expense_date(value: Optional[str]) -> datetime:
    """ISO date or datetime from the model; anything unreadable falls back to now."""
    now = datetime.now(timezone.utc)
    if not value:
        return now
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unreadable expense date {value!r}, using current time")
        return now
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AIClient:
    """Minimal client for an OpenAI compatible REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        transcription_model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.transcription_model = transcription_model
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "AIClient":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.OPENAI_MODEL,
            transcription_model=settings.OPENAI_TRANSCRIPTION_MODEL,
            timeout=settings.OPENAI_TIMEOUT,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self.transport,
        )

    @with_retry()
    async def chat(self, content: Any) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": content}],
            "tools": [LOG_EXPENSE_TOOL],
            "tool_choice": "auto",
            "temperature": 1,
            "max_tokens": 256,
        }
        async with self._client() as client:
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
            return response.json()

    @with_retry()
    async def transcribe(self, filename: str, content: bytes, content_type: str) -> str:
        async with self._client() as client:
            response = await client.post(
                "/audio/transcriptions",
                data={"model": self.transcription_model},
                files={"file": (filename, content, content_type)},
            )
            response.raise_for_status()
            return response.json().get("text", "")


def extract_tool_call(response: Dict[str, Any]) -> Optional[ExtractedExpense]:
    choices = response.get("choices") or []
    if not choices:
        return None
    for call in choices[0].get("message", {}).get("tool_calls") or []:
        function = call.get("function") or {}
        if function.get("name") != "log_expense":
            continue
        try:
            return ExtractedExpense.model_validate(json.loads(function.get("arguments") or "{}"))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Discarding malformed log_expense arguments: {e}")
            return None
    return None


class ExpenseFileProcessor:
    """Strategy for one kind of upload."""

    source = "file"
    default_description = "Expense from upload"

    def __init__(self, client: AIClient):
        self.client = client

    def build_prompt(self, categories: str) -> str:
        return PROMPT_TEMPLATE.format(
            source=self.source,
            categories=categories or "- (no categories yet)",
            today=datetime.now(timezone.utc).date().isoformat(),
        )

    async def extract(self, filename: str, content_type: str, content: bytes, categories: str) -> Optional[ExtractedExpense]:
        raise NotImplementedError


class ReceiptImageProcessor(ExpenseFileProcessor):
    source = "receipt"
    default_description = "Expense from receipt"

    async def extract(self, filename, content_type, content, categories):
        encoded = base64.b64encode(content).decode("ascii")
        message = [
            {"type": "text", "text": self.build_prompt(categories)},
            {"type": "image_url", "image_url": {"url": f"data:{content_type};base64,{encoded}"}},
        ]
        return extract_tool_call(await self.client.chat(message))


class VoiceMemoProcessor(ExpenseFileProcessor):
    source = "transcription"
    default_description = "Expense from voice memo"

    async def extract(self, filename, content_type, content, categories):
        transcription = await self.client.transcribe(filename, content, content_type)
        if not transcription.strip():
            logger.warning(f"Empty transcription for {filename}")
            return None
        prompt = f"Transcription: {transcription}\n\n{self.build_prompt(categories)}"
        return extract_tool_call(await self.client.chat(prompt))


def select_processor(content_type: Optional[str], client: AIClient) -> ExpenseFileProcessor:
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return ReceiptImageProcessor(client)
    if content_type.startswith("audio/"):
        return VoiceMemoProcessor(client)
    logger.error(f"Unsupported file type: {content_type}")
    raise BadRequestError("Unsupported file type", fields=["file"])


class ExpenseIngestionService:
    def __init__(self, db: AsyncSession, client: AIClient):
        self.db = db
        self.client = client

    async def ingest(
        self,
        household_id: uuid.UUID,
        filename: str,
        content_type: Optional[str],
        content: bytes,
    ) -> Expense:
        if not content:
            raise BadRequestError("No file uploaded", fields=["file"])
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise BadRequestError("Uploaded file is too large", fields=["file"])

        processor = select_processor(content_type, self.client)
        categories = await CategoryService(self.db).describe_hierarchy(household_id)

        try:
            extracted = await processor.extract(filename, content_type, content, categories)
        except httpx.HTTPStatusError as e:
            logger.error(f"AI service returned {e.response.status_code}: {e.response.text[:200]}")
            raise InternalError("Error processing uploaded file") from e
        except httpx.HTTPError as e:
            logger.error(f"AI service unreachable: {str(e)}")
            raise InternalError("Error processing uploaded file") from e

        if extracted is None:
            logger.error(f"No expense could be logged from {filename}")
            raise UnprocessableError(
                "No expense logged. The file was processed successfully, but no valid expense could be identified."
            )

        try:
            ex_in = extracted.to_expense_create(processor.default_description)
        except ValidationError as e:
            logger.warning(f"Extracted expense failed validation: {e}")
            raise UnprocessableError("No expense logged. The extracted expense was not valid.") from e

        return await ExpenseService(self.db).create_expense(household_id, ex_in)
