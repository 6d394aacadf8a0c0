"""
Admin account: first-time registration, login, profile and password change.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from database import get_db, utcnow
from routes import respond
from schemas import ChangePasswordRequest, LoginRequest, RegisterRequest, User
from security import get_current_admin, hash_password, public_user, token_for, verify_password

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", status_code=201)
def register(data: RegisterRequest, db=Depends(get_db)):
    if db["user"].count_documents({}) > 0:
        raise HTTPException(status_code=403, detail="Admin account already exists. Use login.")

    user = User(name=data.name, email=data.email, password=data.password, role="admin")
    doc = user.model_dump()
    doc["password"] = hash_password(user.password)
    doc["createdAt"] = doc["updatedAt"] = utcnow()
    doc["_id"] = db["user"].insert_one(doc).inserted_id
    logger.info("Registered admin account %s", doc["email"])
    return respond({"user": public_user(doc), "token": token_for(doc)}, "Admin account created")


@router.post("/login")
def login(data: LoginRequest, db=Depends(get_db)):
    if not data.email or not data.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = db["user"].find_one({"email": data.email.lower()})
    if not user or not verify_password(data.password, user["password"]):
        logger.warning("Failed login for %s", data.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return respond({"user": public_user(user), "token": token_for(user)}, "Login successful")


@router.get("/me")
def me(user: dict = Depends(get_current_admin)):
    return respond(public_user(user), "User fetched")


@router.patch("/change-password")
def change_password(data: ChangePasswordRequest, user: dict = Depends(get_current_admin), db=Depends(get_db)):
    if not verify_password(data.currentPassword, user["password"]):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    db["user"].update_one(
        {"_id": user["_id"]},
        {"$set": {"password": hash_password(data.newPassword), "updatedAt": utcnow()}},
    )
    logger.info("Password changed for %s", user.get("email"))
    return respond({"token": token_for(user)}, "Password changed successfully")
