"""Document key helpers shared by the repositories."""

from __future__ import annotations

from bson import ObjectId


def key_filter(doc_id: str) -> dict:
    """Match a document by string id, whether stored as str or ObjectId.

    Chat clients write string keys; documents created from a shell get
    ObjectIds. Both are accepted.
    """
    if ObjectId.is_valid(doc_id):
        return {"_id": {"$in": [doc_id, ObjectId(doc_id)]}}
    return {"_id": doc_id}
