"""Pipeline test fixtures: an in-memory document store and a scripted generation client."""

from datetime import UTC, datetime, timedelta

import pytest
from draftwire.errors import StoreError
from draftwire.schemas.documents import Candidate, DocumentStatus, ProcessingOrder
from draftwire.services.document_store import validate_write_fields


class FakeDocumentStore:
    """Dict-backed DocumentStore that records every write."""

    def __init__(self):
        self.documents: dict[int, dict] = {}
        self.writes: list[tuple[int, dict]] = []
        self.fail_writes_with: Exception | None = None

    def add(self, *, title="Original title", body="Original body.", status="pending", categories=()):
        doc_id = len(self.documents) + 1
        self.documents[doc_id] = {
            "id": doc_id,
            "author_id": 1,
            "title": title,
            "body": body,
            "status": status,
            "categories": sorted(categories),
            "created_at": datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=doc_id),
            "published_at": None,
            "published_at_gmt": None,
        }
        return doc_id

    def _candidate(self, doc):
        return Candidate(
            id=doc["id"],
            author_id=doc["author_id"],
            status=DocumentStatus(doc["status"]),
            title=doc["title"],
            body=doc["body"],
            categories=doc["categories"],
            created_at=doc["created_at"],
        )

    async def find_one(self, status, categories=None, order=ProcessingOrder.OLDEST):
        matches = [
            d
            for d in self.documents.values()
            if d["status"] == DocumentStatus(status).value
            and (not categories or set(categories) & set(d["categories"]))
        ]
        if not matches:
            return None
        matches.sort(key=lambda d: (d["created_at"], d["id"]))
        pick = matches[-1] if ProcessingOrder(order) is ProcessingOrder.NEWEST else matches[0]
        return self._candidate(pick)

    async def read(self, document_id):
        doc = self.documents.get(document_id)
        return self._candidate(doc) if doc is not None else None

    async def write(self, document_id, fields):
        if self.fail_writes_with is not None:
            raise self.fail_writes_with
        values = validate_write_fields(fields)
        if document_id not in self.documents:
            raise StoreError(f"Document {document_id} not found")
        self.writes.append((document_id, dict(values)))
        self.documents[document_id].update(values)


class ScriptedClient:
    """Stand-in for GenerationClient returning queued replies (or raising queued errors)."""

    def __init__(self, *, summaries=(), articles=(), titles=()):
        self.summaries = list(summaries)
        self.articles = list(articles)
        self.titles = list(titles)
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    @staticmethod
    def _next(queue, kind):
        if not queue:
            raise AssertionError(f"Unexpected {kind} request")
        reply = queue.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def generate_summary(self, text, **overrides):
        self.calls.append(("summary", text))
        return self._next(self.summaries, "summary")

    async def generate_article(self, prompt, **overrides):
        self.calls.append(("article", prompt))
        return self._next(self.articles, "article")

    async def generate_title_variant(self, original_title, **overrides):
        self.calls.append(("title", original_title))
        return self._next(self.titles, "title")

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_store():
    return FakeDocumentStore()


@pytest.fixture
def scripted_client():
    """Factory: ``scripted_client(summaries=[...], articles=[...], titles=[...])``."""
    return ScriptedClient
