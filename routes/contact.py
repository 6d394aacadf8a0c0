import logging
import math
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import DESCENDING, ReturnDocument

from database import create_document, get_db, serialize, to_object_id, utcnow
from routes import respond
from schemas import ContactSubmission
from security import get_current_admin

router = APIRouter(prefix="/api/contact", tags=["contact"])
logger = logging.getLogger(__name__)

COLLECTION = "contactsubmission"
SEARCH_FIELDS = ("name", "email", "subject", "message")


def _get_or_404(db, submission_id: str) -> dict:
    sub = db[COLLECTION].find_one({"_id": to_object_id(submission_id)})
    if not sub:
        raise HTTPException(status_code=404, detail="Submission not found")
    return sub


def _toggle(db, sub: dict, field: str) -> dict:
    return db[COLLECTION].find_one_and_update(
        {"_id": sub["_id"]},
        {"$set": {field: not sub.get(field, False), "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )


# Public
@router.post("/submit", status_code=201)
def submit(data: ContactSubmission, db=Depends(get_db)):
    doc = data.model_dump()
    doc.update({"isRead": False, "isStarred": False})
    inserted_id = create_document(COLLECTION, doc)
    create_document("analytics", {"type": "message", "sessionId": None, "meta": {"submissionId": inserted_id}})
    logger.info("Contact submission %s from %s", inserted_id, data.email)
    return respond(serialize(db[COLLECTION].find_one({"_id": to_object_id(inserted_id)})), "Message sent successfully")


# Admin
@router.get("")
def list_submissions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    isRead: Optional[bool] = None,
    search: Optional[str] = None,
    db=Depends(get_db),
    _: dict = Depends(get_current_admin),
):
    filter_dict = {}
    if isRead is not None:
        filter_dict["isRead"] = isRead
    if search:
        pattern = re.escape(search.strip())
        filter_dict["$or"] = [{f: {"$regex": pattern, "$options": "i"}} for f in SEARCH_FIELDS]

    total = db[COLLECTION].count_documents(filter_dict)
    cursor = (
        db[COLLECTION].find(filter_dict)
        .sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
        .skip((page - 1) * limit)
        .limit(limit)
    )
    return respond({
        "submissions": [serialize(d) for d in cursor],
        "pagination": {"total": total, "page": page, "pages": math.ceil(total / limit)},
    }, "Submissions fetched")


@router.get("/unread-count")
def unread_count(db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond({"count": db[COLLECTION].count_documents({"isRead": False})}, "Unread count")


@router.get("/{submission_id}")
def get_submission(submission_id: str, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(serialize(_get_or_404(db, submission_id)), "Submission fetched")


@router.patch("/{submission_id}/read")
def toggle_read(submission_id: str, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    sub = _toggle(db, _get_or_404(db, submission_id), "isRead")
    return respond(serialize(sub), f"Marked as {'read' if sub['isRead'] else 'unread'}")


@router.patch("/{submission_id}/star")
def toggle_star(submission_id: str, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    sub = _toggle(db, _get_or_404(db, submission_id), "isStarred")
    return respond(serialize(sub), "Starred" if sub["isStarred"] else "Unstarred")


@router.delete("/{submission_id}")
def delete_submission(submission_id: str, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    deleted = db[COLLECTION].find_one_and_delete({"_id": to_object_id(submission_id)})
    if not deleted:
        raise HTTPException(status_code=404, detail="Submission not found")
    return respond(None, "Submission deleted")
