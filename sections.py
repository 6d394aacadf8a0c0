"""
Section and item updates on the active portfolio document.

A portfolio has two kinds of sections. Object sections (personalDetails,
resume) are merged key by key with dotted `$set` paths. Array sections
(skills, projects, experience, education) hold sub-documents with their own
`_id`; single items are addressed through the positional operator
(`skills.$.name`) and whole arrays are replaced wholesale.

Every write is validated against the schema of the merged result first, so a
partial update can never leave an item in a state the create path would
reject.
"""

import logging
from typing import Any, Optional

from bson import ObjectId
from fastapi import HTTPException
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from database import serialize, to_object_id, utcnow
from schemas import (
    ARRAY_SECTIONS,
    SECTION_ITEM_MODELS,
    SECTION_OBJECT_MODELS,
    SECTIONS,
    Item,
    PersonalDetails,
    Portfolio,
    SocialLink,
)

logger = logging.getLogger(__name__)

COLLECTION = "portfolio"
ACTIVE = {"isActive": True}


# =====================
# Document conversion
# =====================
def _item_oid(value: Optional[str]) -> ObjectId:
    if value and ObjectId.is_valid(value):
        return ObjectId(value)
    return ObjectId()


def item_document(item: Item, oid: Optional[ObjectId] = None) -> dict:
    data = item.model_dump(exclude={"id"})
    return {"_id": oid or _item_oid(item.id), **data}


def personal_details_document(details: PersonalDetails) -> dict:
    data = details.model_dump(exclude={"socialLinks"})
    data["socialLinks"] = [item_document(link) for link in details.socialLinks]
    return data


def object_document(section: str, model) -> dict:
    if section == "personalDetails":
        return personal_details_document(model)
    return model.model_dump()


def portfolio_document(portfolio: Portfolio) -> dict:
    now = utcnow()
    doc = {"personalDetails": personal_details_document(portfolio.personalDetails)}
    for section in ARRAY_SECTIONS:
        doc[section] = [item_document(i) for i in getattr(portfolio, section)]
    doc["resume"] = portfolio.resume.model_dump()
    doc["isActive"] = True
    doc["createdAt"] = now
    doc["updatedAt"] = now
    return doc


def present(portfolio: dict) -> dict:
    """Serialize a portfolio and add the derived personalDetails.fullName."""
    out = serialize(portfolio)
    details = out.get("personalDetails")
    if isinstance(details, dict):
        details["fullName"] = f"{details.get('firstName', '')} {details.get('lastName', '')}".strip()
    return out


# ==========
# Guards
# ==========
def check_section(section: str) -> None:
    if section not in SECTIONS:
        raise HTTPException(status_code=400, detail=f"Invalid section. Allowed: {', '.join(SECTIONS)}")


def check_array_section(section: str, verb: str) -> None:
    check_section(section)
    if section not in ARRAY_SECTIONS:
        raise HTTPException(
            status_code=400,
            detail=f'Cannot {verb} "{section}". Allowed: {", ".join(ARRAY_SECTIONS)}',
        )


def _not_found():
    return HTTPException(status_code=404, detail="Portfolio not found")


def find_active(db, projection: Optional[dict] = None) -> dict:
    portfolio = db[COLLECTION].find_one(ACTIVE, projection)
    if not portfolio:
        raise _not_found()
    return portfolio


def _update_active(db, update: dict, extra_filter: Optional[dict] = None) -> Optional[dict]:
    update.setdefault("$set", {})["updatedAt"] = utcnow()
    return db[COLLECTION].find_one_and_update(
        {**ACTIVE, **(extra_filter or {})},
        update,
        return_document=ReturnDocument.AFTER,
    )


# ==============
# Whole document
# ==============
def _already_active():
    return HTTPException(status_code=409, detail="An active portfolio already exists. Update it instead.")


def has_active(db) -> bool:
    return db[COLLECTION].find_one(ACTIVE, {"_id": 1}) is not None


def create_portfolio(db, payload: Portfolio) -> dict:
    if has_active(db):
        raise _already_active()
    doc = portfolio_document(payload)
    try:
        doc["_id"] = db[COLLECTION].insert_one(doc).inserted_id
    except DuplicateKeyError:
        # a concurrent create got there first
        raise _already_active()
    logger.info("Created portfolio %s", doc["_id"])
    return present(doc)


def delete_portfolio(db) -> None:
    deleted = db[COLLECTION].find_one_and_delete(ACTIVE)
    if not deleted:
        raise _not_found()
    logger.info("Deleted portfolio %s", deleted["_id"])


# ========
# Sections
# ========
def get_section(db, section: str) -> Any:
    check_section(section)
    portfolio = find_active(db, {section: 1, "personalDetails": 1})
    return present(portfolio).get(section)


def update_section(db, section: str, body: Any) -> Any:
    check_section(section)
    if section in ARRAY_SECTIONS:
        return _replace_array(db, section, body)
    return _merge_object(db, section, body)


def _merge_object(db, section: str, body: Any) -> dict:
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail=f"{section} update must be an object")
    model = SECTION_OBJECT_MODELS[section]
    fields = set(model.model_fields)
    changes = {k: v for k, v in body.items() if k in fields}
    if not changes:
        raise HTTPException(status_code=400, detail=f"No valid {section} fields supplied")
    if section == "resume" and "fileUrl" in changes and "lastUpdated" not in changes:
        changes["lastUpdated"] = utcnow()

    portfolio = find_active(db, {section: 1})
    merged = {**serialize(portfolio.get(section) or {}), **changes}
    validated = object_document(section, model.model_validate(merged))

    updated = _update_active(db, {"$set": {f"{section}.{k}": validated[k] for k in changes}})
    if not updated:
        raise _not_found()
    return present(updated)[section]


def _replace_array(db, section: str, body: Any) -> list:
    items = body.get(section) if isinstance(body, dict) else body
    if not isinstance(items, list):
        raise HTTPException(status_code=400, detail=f"{section} update must be a list of items")
    model = SECTION_ITEM_MODELS[section]
    docs = [item_document(model.model_validate(i)) for i in items]
    updated = _update_active(db, {"$set": {section: docs}})
    if not updated:
        raise _not_found()
    return present(updated)[section]


# =====
# Items
# =====
def add_item(db, section: str, body: Any) -> list:
    check_array_section(section, "add items to")
    item = SECTION_ITEM_MODELS[section].model_validate(body)
    updated = _update_active(db, {"$push": {section: item_document(item, ObjectId())}})
    if not updated:
        raise _not_found()
    return present(updated)[section]


def update_item(db, section: str, item_id: str, body: Any) -> dict:
    check_array_section(section, "update items in")
    oid = to_object_id(item_id, "item ID")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Item update must be an object")

    portfolio = find_active(db, {section: 1})
    existing = next((i for i in portfolio.get(section) or [] if i.get("_id") == oid), None)
    if existing is None:
        raise HTTPException(status_code=404, detail=f"Item with id {item_id} not found in {section}")

    model = SECTION_ITEM_MODELS[section]
    changes = {k: v for k, v in body.items() if k in model.model_fields and k != "id"}
    merged = {**serialize(existing), **changes}
    doc = item_document(model.model_validate(merged), oid)

    fields = {f"{section}.$.{k}": v for k, v in doc.items() if k != "_id"}
    updated = _update_active(db, {"$set": fields}, {f"{section}._id": oid})
    if not updated:
        raise HTTPException(status_code=404, detail=f"Item with id {item_id} not found in {section}")
    return serialize(doc)


def delete_item(db, section: str, item_id: str) -> list:
    check_array_section(section, "delete items from")
    oid = to_object_id(item_id, "item ID")
    updated = _update_active(db, {"$pull": {section: {"_id": oid}}})
    if not updated:
        raise _not_found()
    return present(updated)[section]


# ============
# Social links
# ============
def add_social_link(db, body: Any) -> list:
    link = SocialLink.model_validate(body)
    updated = _update_active(db, {"$push": {"personalDetails.socialLinks": item_document(link, ObjectId())}})
    if not updated:
        raise _not_found()
    return present(updated)["personalDetails"]["socialLinks"]


def delete_social_link(db, link_id: str) -> list:
    oid = to_object_id(link_id, "link ID")
    updated = _update_active(db, {"$pull": {"personalDetails.socialLinks": {"_id": oid}}})
    if not updated:
        raise _not_found()
    return present(updated)["personalDetails"]["socialLinks"]


def set_resume_url(db, file_url: str) -> bool:
    """Point the active portfolio's resume at a new file; False when there is no portfolio."""
    updated = _update_active(db, {"$set": {"resume.fileUrl": file_url, "resume.lastUpdated": utcnow()}})
    return updated is not None
