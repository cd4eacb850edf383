"""Reply repository - generated messages written back to the chat client."""

from __future__ import annotations

import logging

from pollhost.models.message import OutboundReply

logger = logging.getLogger(__name__)


class ReplyRepo:
    """Upsert-by-id sink for generated replies and host prompts."""

    def __init__(self, db, collection: str) -> None:
        self._col = db[collection]

    async def upsert(self, reply: OutboundReply) -> None:
        """Write *reply* under its id, replacing any previous document."""
        await self._col.replace_one({"_id": reply.id}, reply.to_doc(), upsert=True)
        logger.debug("Reply %s written", reply.id)
