"""Document store - the narrow read/write contract the pipeline uses for content."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, AsyncContextManager, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from draftwire.errors import StoreError
from draftwire.models import Document, DocumentCategory
from draftwire.schemas.documents import Candidate, DocumentStatus, ProcessingOrder

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = frozenset({"title", "body", "status", "published_at", "published_at_gmt"})

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


class DocumentStore(Protocol):
    async def find_one(
        self,
        status: DocumentStatus,
        categories: Sequence[str] | None = None,
        order: ProcessingOrder = ProcessingOrder.OLDEST,
    ) -> Candidate | None: ...

    async def read(self, document_id: int) -> Candidate | None: ...

    async def write(self, document_id: int, fields: dict[str, Any]) -> None: ...


def validate_write_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Check a write payload against the writable columns and status values."""
    if not fields:
        raise StoreError("Write requires at least one field")
    unknown = sorted(set(fields) - WRITABLE_FIELDS)
    if unknown:
        raise StoreError(f"Fields not writable: {', '.join(unknown)}")

    values = dict(fields)
    if "status" in values:
        try:
            values["status"] = DocumentStatus(values["status"]).value
        except ValueError as exc:
            raise StoreError(f"Invalid document status: {values['status']!r}") from exc
    return values


def to_candidate(document: Document) -> Candidate:
    return Candidate(
        id=document.id,
        author_id=document.author_id,
        status=DocumentStatus(document.status),
        title=document.title or "",
        body=document.body or "",
        categories=sorted(c.category for c in document.categories),
        created_at=document.created_at,
    )


class SqlDocumentStore:
    """DocumentStore backed by the ``documents`` table."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def find_one(
        self,
        status: DocumentStatus,
        categories: Sequence[str] | None = None,
        order: ProcessingOrder = ProcessingOrder.OLDEST,
    ) -> Candidate | None:
        stmt = select(Document).where(Document.status == DocumentStatus(status).value)
        if categories:
            stmt = stmt.where(
                Document.categories.any(DocumentCategory.category.in_(list(categories)))
            )
        if ProcessingOrder(order) is ProcessingOrder.NEWEST:
            stmt = stmt.order_by(Document.created_at.desc(), Document.id.desc())
        else:
            stmt = stmt.order_by(Document.created_at.asc(), Document.id.asc())
        stmt = stmt.limit(1)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                document = result.scalars().first()
                return to_candidate(document) if document is not None else None
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not query documents: {exc!s}") from exc

    async def read(self, document_id: int) -> Candidate | None:
        try:
            async with self._session_factory() as session:
                document = await session.get(Document, document_id)
                return to_candidate(document) if document is not None else None
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read document {document_id}: {exc!s}") from exc

    async def write(self, document_id: int, fields: dict[str, Any]) -> None:
        values = validate_write_fields(fields)
        values["updated_at"] = datetime.now(UTC)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    update(Document).where(Document.id == document_id).values(**values)
                )
                if result.rowcount == 0:
                    await session.rollback()
                    raise StoreError(f"Document {document_id} not found")
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not update document {document_id}: {exc!s}") from exc
        logger.info("Updated document %s fields=%s", document_id, sorted(fields))
