from typing import Any

from fastapi import APIRouter, Body, Depends

import sections
from database import get_db
from routes import respond
from schemas import Portfolio, Project, Skill, SocialLink
from security import get_current_admin

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


# Portfolio CRUD
@router.post("", status_code=201)
def create_portfolio(payload: Portfolio, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.create_portfolio(db, payload), "Portfolio created successfully")


@router.get("")
def get_portfolio(db=Depends(get_db)):
    return respond(sections.present(sections.find_active(db)), "Portfolio fetched successfully")


@router.delete("")
def delete_portfolio(db=Depends(get_db), _: dict = Depends(get_current_admin)):
    sections.delete_portfolio(db)
    return respond(None, "Portfolio deleted successfully")


# Section-level operations
@router.get("/section/{section}")
def get_section(section: str, db=Depends(get_db)):
    return respond(sections.get_section(db, section), f"{section} fetched successfully")


@router.patch("/section/{section}")
def update_section(section: str, body: Any = Body(...), db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.update_section(db, section, body), f"{section} updated successfully")


# Item-level operations on array sections
@router.post("/section/{section}/item", status_code=201)
def add_item(section: str, body: Any = Body(...), db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.add_item(db, section, body), f"Item added to {section} successfully")


@router.patch("/section/{section}/item/{item_id}")
def update_item(section: str, item_id: str, body: Any = Body(...), db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.update_item(db, section, item_id, body), f"Item in {section} updated successfully")


@router.delete("/section/{section}/item/{item_id}")
def delete_item(section: str, item_id: str, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.delete_item(db, section, item_id), f"Item removed from {section} successfully")


# Validated shortcuts for skills / projects
@router.post("/skills", status_code=201)
def add_skill(skill: Skill, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.add_item(db, "skills", skill.model_dump()), "Item added to skills successfully")


@router.post("/projects", status_code=201)
def add_project(project: Project, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.add_item(db, "projects", project.model_dump()), "Item added to projects successfully")


# Social links
@router.post("/social-links", status_code=201)
def add_social_link(link: SocialLink, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.add_social_link(db, link.model_dump()), "Social link added successfully")


@router.delete("/social-links/{link_id}")
def delete_social_link(link_id: str, db=Depends(get_db), _: dict = Depends(get_current_admin)):
    return respond(sections.delete_social_link(db, link_id), "Social link removed successfully")
