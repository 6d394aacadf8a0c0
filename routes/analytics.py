"""
Visit/download events and the admin dashboard summary.
"""

from collections import Counter
from datetime import timedelta

from fastapi import APIRouter, Depends, Query

from database import create_document, get_db, utcnow
from routes import respond
from schemas import AnalyticsEvent
from security import get_current_admin

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

COLLECTION = "analytics"


@router.post("/track", status_code=201)
def track(event: AnalyticsEvent, db=Depends(get_db)):
    create_document(COLLECTION, event)
    return respond(None, "Event recorded")


@router.get("/summary")
def summary(db=Depends(get_db), _: dict = Depends(get_current_admin)):
    portfolio = db["portfolio"].find_one({"isActive": True}) or {}
    projects = portfolio.get("projects") or []
    events = db[COLLECTION]
    sessions = {s for s in events.distinct("sessionId", {"type": "visit"}) if s}

    return respond({
        "totalProjects": len(projects),
        "featuredProjects": sum(1 for p in projects if p.get("featured")),
        "skillsCount": len(portfolio.get("skills") or []),
        "experienceCount": len(portfolio.get("experience") or []),
        "educationCount": len(portfolio.get("education") or []),
        "servicesCount": db["service"].count_documents({}),
        "testimonialsCount": db["testimonial"].count_documents({}),
        "totalMessages": db["contactsubmission"].count_documents({}),
        "unreadMessages": db["contactsubmission"].count_documents({"isRead": False}),
        "resumeDownloads": events.count_documents({"type": "download", "meta.fileType": "resume"}),
        "resumeViews": events.count_documents({"type": "resume_view"}),
        "totalVisits": events.count_documents({"type": "visit"}),
        "uniqueVisitors": len(sessions),
        "lastPortfolioUpdate": portfolio.get("updatedAt"),
    }, "Summary fetched")


@router.get("/visits")
def visits(days: int = Query(30, ge=1, le=365), db=Depends(get_db), _: dict = Depends(get_current_admin)):
    # stored dates come back naive UTC
    since = utcnow().replace(tzinfo=None) - timedelta(days=days)
    counts = Counter(
        e["createdAt"].strftime("%Y-%m-%d")
        for e in db[COLLECTION].find({"type": "visit", "createdAt": {"$gte": since}}, {"createdAt": 1})
    )
    return respond([{"date": d, "count": counts[d]} for d in sorted(counts)], "Visits fetched")
