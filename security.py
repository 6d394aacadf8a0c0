"""
Password hashing, JWT issuance and the admin guard dependency.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD, ALGORITHM, SECRET_KEY
from database import get_db, utcnow

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 to avoid external bcrypt dependency issues
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def token_for(user: dict) -> str:
    return create_access_token({"sub": str(user["_id"]), "role": user.get("role", "admin")})


def public_user(user: dict) -> dict:
    """User fields safe to return to clients."""
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role"),
        "createdAt": user.get("createdAt"),
    }


def get_current_admin(authorization: Optional[str] = Header(None), db=Depends(get_db)) -> dict:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authorised - no token provided")
    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        subject = payload.get("sub")
        if not subject:
            raise JWTError("token has no subject")
        user_id = ObjectId(subject)
    except (JWTError, InvalidId, TypeError):
        raise HTTPException(status_code=401, detail="Not authorised - invalid token")

    user = db["user"].find_one({"_id": user_id})
    if not user:
        raise HTTPException(status_code=401, detail="User no longer exists")
    if user.get("role") not in ("admin", "editor"):
        raise HTTPException(status_code=403, detail="You do not have permission for this action")
    return user


def seed_admin(db) -> None:
    """Create the admin account from ADMIN_EMAIL/ADMIN_PASSWORD on an empty users collection."""
    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        return
    if db["user"].count_documents({}) > 0:
        return
    now = utcnow()
    db["user"].insert_one({
        "name": ADMIN_NAME,
        "email": ADMIN_EMAIL.strip().lower(),
        "password": hash_password(ADMIN_PASSWORD),
        "role": "admin",
        "createdAt": now,
        "updatedAt": now,
    })
    logger.info("Seeded admin account %s", ADMIN_EMAIL)
