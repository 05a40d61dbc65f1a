"""
Chat Archive - two-store persistence backend for chat messages and attachments.

Messages live in one relational store, file attachments in another. The
package keeps the two referentially coherent under deletes and retention
while serving files back over HTTP.
"""

__version__ = "0.1.0"

from .storage.database import (
    AttachmentService,
    DeletionService,
    MessageService,
    RetentionService,
    Store,
)

__all__ = [
    "AttachmentService",
    "DeletionService",
    "MessageService",
    "RetentionService",
    "Store",
]
