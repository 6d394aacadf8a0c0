"""
Services and testimonials: independent collections ordered by `order`.

Both expose the same surface (public list, admin create/update/delete and a
bulk reorder), so one router factory serves each collection.
"""

import logging
from typing import Any, Type

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, ReturnDocument, UpdateOne

from database import create_document, get_db, get_documents, serialize, to_object_id, utcnow
from routes import respond
from schemas import ReorderRequest, Service, Testimonial
from security import get_current_admin

logger = logging.getLogger(__name__)

STORED_ONLY = ("_id", "createdAt", "updatedAt")


def content_router(prefix: str, collection: str, model: Type[BaseModel], label: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[collection])

    def list_sorted():
        return get_documents(collection, sort=[("order", ASCENDING), ("createdAt", ASCENDING)])

    @router.get("")
    def list_items(db=Depends(get_db)):
        return respond(list_sorted(), f"{label}s fetched")

    @router.post("", status_code=201)
    def create_item(payload: model, db=Depends(get_db), _: dict = Depends(get_current_admin)):  # type: ignore[valid-type]
        inserted_id = create_document(collection, payload)
        return respond(serialize(db[collection].find_one({"_id": to_object_id(inserted_id)})), f"{label} created")

    # registered before /{item_id} so "reorder" is never read as an id
    @router.patch("/reorder/bulk")
    def reorder(data: ReorderRequest, db=Depends(get_db), _: dict = Depends(get_current_admin)):
        ops = [
            UpdateOne({"_id": to_object_id(i.id)}, {"$set": {"order": i.order, "updatedAt": utcnow()}})
            for i in data.items
        ]
        if ops:
            db[collection].bulk_write(ops)
        logger.info("Reordered %d %s documents", len(ops), collection)
        return respond(list_sorted(), "Order updated")

    @router.patch("/{item_id}")
    def update_item(item_id: str, body: Any = Body(...), db=Depends(get_db), _: dict = Depends(get_current_admin)):
        oid = to_object_id(item_id)
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail=f"{label} update must be an object")
        existing = db[collection].find_one({"_id": oid})
        if not existing:
            raise HTTPException(status_code=404, detail=f"{label} not found")

        current = {k: v for k, v in existing.items() if k not in STORED_ONLY}
        changes = {k: v for k, v in body.items() if k in model.model_fields}
        validated = model.model_validate({**current, **changes}).model_dump()
        updated = db[collection].find_one_and_update(
            {"_id": oid},
            {"$set": {**validated, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return respond(serialize(updated), f"{label} updated")

    @router.delete("/{item_id}")
    def delete_item(item_id: str, db=Depends(get_db), _: dict = Depends(get_current_admin)):
        deleted = db[collection].find_one_and_delete({"_id": to_object_id(item_id)})
        if not deleted:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return respond(None, f"{label} deleted")

    return router


services_router = content_router("/api/services", "service", Service, "Service")
testimonials_router = content_router("/api/testimonials", "testimonial", Testimonial, "Testimonial")
