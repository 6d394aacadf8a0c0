"""
Public portfolio page rendered from the active portfolio, services and
testimonials.
"""

from collections import OrderedDict
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pymongo import ASCENDING

from database import get_db, serialize
from schemas import SKILL_CATEGORIES
from sections import present

BASE_DIR = Path(__file__).resolve().parent.parent

router = APIRouter(tags=["site"])
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def group_skills(skills: list) -> "OrderedDict[str, list]":
    """Skills keyed by category, in the canonical category order."""
    groups = OrderedDict((c, []) for c in SKILL_CATEGORIES)
    for skill in skills:
        groups.setdefault(skill.get("category") or "Other", []).append(skill)
    return OrderedDict((c, items) for c, items in groups.items() if items)


def page_context(db) -> dict:
    doc = db["portfolio"].find_one({"isActive": True})
    portfolio = present(doc) if doc else None

    def active(collection):
        cursor = db[collection].find({"isActive": {"$ne": False}}).sort([("order", ASCENDING), ("createdAt", ASCENDING)])
        return [serialize(d) for d in cursor]

    context = {
        "portfolio": portfolio,
        "services": active("service"),
        "testimonials": active("testimonial"),
        "skill_groups": OrderedDict(),
        "projects": [],
        "experience": [],
        "education": [],
    }
    if portfolio:
        context["skill_groups"] = group_skills(portfolio.get("skills") or [])
        context["projects"] = sorted(
            portfolio.get("projects") or [],
            key=lambda p: (not p.get("featured"), p.get("order", 0)),
        )
        context["experience"] = sorted(portfolio.get("experience") or [], key=lambda e: e.get("order", 0))
        context["education"] = sorted(portfolio.get("education") or [], key=lambda e: e.get("order", 0))
    return context


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def home(request: Request, db=Depends(get_db)):
    return templates.TemplateResponse(request, "index.html", page_context(db))
