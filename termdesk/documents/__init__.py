"""Document rendering collaborators for file tabs."""

from termdesk.documents.categories import DocumentCategory, category_for
from termdesk.documents.renderers import Document, DocumentRenderer

__all__ = ["Document", "DocumentCategory", "DocumentRenderer", "category_for"]
