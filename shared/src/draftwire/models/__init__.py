"""SQLAlchemy ORM models for Draftwire."""

from draftwire.models.base import Base
from draftwire.models.document import Document, DocumentCategory
from draftwire.models.site_setting import SiteSetting

__all__ = [
    "Base",
    "Document",
    "DocumentCategory",
    "SiteSetting",
]
