"""
MongoDB access for the Portfolio API.

`db` is None when DATABASE_URL is not configured; routes obtain the handle
through `get_db` so an unconfigured deployment answers with a clean error
instead of crashing at import time.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient

from config import DATABASE_NAME, DATABASE_URL

logger = logging.getLogger(__name__)

_client = None
db = None

if DATABASE_URL:
    _client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=10000, connectTimeoutMS=10000)
    db = _client[DATABASE_NAME]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_db():
    """FastAPI dependency returning the active database handle."""
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return db


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document stamped with createdAt/updatedAt and return its id."""
    database = get_db()
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()
    data_dict["createdAt"] = utcnow()
    data_dict["updatedAt"] = utcnow()
    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, sort: Optional[list] = None, limit: Optional[int] = None):
    database = get_db()
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize(doc) for doc in cursor]


def to_object_id(value: str, label: str = "id") -> ObjectId:
    """Parse a path parameter into an ObjectId or answer 400."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {label} format")


def serialize(value: Any) -> Any:
    """Normalize a stored document for JSON: `_id` becomes a string `id`."""
    if isinstance(value, list):
        return [serialize(v) for v in value]
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            if key == "_id":
                out["id"] = str(item)
            else:
                out[key] = serialize(item)
        return out
    if isinstance(value, ObjectId):
        return str(value)
    return value


def ensure_indexes(database) -> None:
    database["user"].create_index([("email", ASCENDING)], unique=True)
    # at most one active portfolio
    database["portfolio"].create_index(
        [("isActive", ASCENDING)],
        unique=True,
        partialFilterExpression={"isActive": True},
    )
    database["portfolio"].create_index([("projects.featured", ASCENDING)])
    database["service"].create_index([("order", ASCENDING)])
    database["testimonial"].create_index([("order", ASCENDING)])
    database["contactsubmission"].create_index([("isRead", ASCENDING), ("createdAt", DESCENDING)])
    database["analytics"].create_index([("type", ASCENDING), ("createdAt", ASCENDING)])
    logger.info("Indexes ensured on %s", database.name)
