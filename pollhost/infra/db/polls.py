"""Poll repository - point reads of the live poll document."""

from __future__ import annotations

from pollhost.errors import PollNotFoundError
from pollhost.infra.db._keys import key_filter
from pollhost.models.poll import PollSnapshot


class PollRepo:
    """Read-only access to poll documents."""

    def __init__(self, db, collection: str) -> None:
        self._col = db[collection]

    async def get(self, key: str) -> PollSnapshot:
        """Fetch the poll stored under *key*. Raises PollNotFoundError if absent."""
        doc = await self._col.find_one(key_filter(key))
        if doc is None:
            raise PollNotFoundError(key)
        return PollSnapshot.from_doc(doc)
