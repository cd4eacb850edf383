"""Chat message domain models: inbound user messages and outbound replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class InboundMessage:
    """A user message awaiting a reply.

    ``processed`` flips from False to True exactly once, either during the
    backlog drain or after its reply has been written.
    """

    id: str
    message: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processed: bool = False

    def to_doc(self) -> dict:
        """Serialize to MongoDB document."""
        return {
            "_id": self.id,
            "id": self.id,
            "message": self.message,
            "timestamp": self.timestamp,
            "processed": self.processed,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> InboundMessage:
        """Deserialize from MongoDB document.

        The document key is authoritative; the stored ``id`` field is often
        left empty by chat clients.
        """
        return cls(
            id=str(doc["_id"]),
            message=doc.get("message", ""),
            timestamp=doc.get("timestamp", datetime.now(timezone.utc)),
            processed=doc.get("processed", False),
        )


@dataclass(frozen=True)
class OutboundReply:
    """A generated message written back for the chat client to display."""

    id: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processed: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Reply id cannot be empty")

    def to_doc(self) -> dict:
        """Serialize to MongoDB document, keyed by reply id."""
        return {
            "_id": self.id,
            "id": self.id,
            "message": self.message,
            "timestamp": self.timestamp,
            "processed": self.processed,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> OutboundReply:
        return cls(
            id=str(doc["_id"]),
            message=doc.get("message", ""),
            timestamp=doc.get("timestamp", datetime.now(timezone.utc)),
            processed=doc.get("processed", False),
        )
