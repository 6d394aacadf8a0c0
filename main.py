import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import database
from config import CORS_ORIGINS, LOG_LEVEL
from routes.analytics import router as analytics_router
from routes.auth import router as auth_router
from routes.contact import router as contact_router
from routes.content import services_router, testimonials_router
from routes.portfolio import router as portfolio_router
from routes.site import router as site_router
from routes.uploads import router as uploads_router
from security import seed_admin

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is None:
        logger.warning("DATABASE_URL not provided - requests needing the database will fail")
    else:
        try:
            database.ensure_indexes(database.db)
            seed_admin(database.db)
            logger.info("MongoDB ready (db: %s)", database.db.name)
        except PyMongoError as e:
            # keep serving; handlers surface database errors per request
            logger.error("MongoDB initialization failed: %s", e)
    yield
    if database._client is not None:
        database._client.close()
        logger.info("MongoDB connection closed")


# ==================
# FastAPI app config
# ==================
app = FastAPI(title="Portfolio API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    # uploaded images are embedded by pages on other origins
    response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
    return response


# ==============
# Error handlers
# ==============
def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _validation_message(errors) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "invalid value"))
    return "Validation failed: " + ". ".join(parts)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return error_response(404, f"Route {request.url.path} not found")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(400, _validation_message(exc.errors()))


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    return error_response(400, _validation_message(exc.errors()))


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    key_value = (exc.details or {}).get("keyValue") or {}
    return error_response(409, f"Duplicate value for field(s): {', '.join(key_value) or 'unknown'}")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal Server Error")


# ======
# Routes
# ======
@app.get("/api/health")
def health():
    ok = database.db is not None
    collections = []
    if ok:
        try:
            collections = database.db.list_collection_names()
        except PyMongoError as e:
            logger.warning("Health check could not list collections: %s", e)
            ok = False
    return {
        "success": True,
        "message": "Portfolio API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if ok else "not-available",
        "collections": collections[:10],
    }


app.include_router(auth_router)
app.include_router(portfolio_router)
app.include_router(services_router)
app.include_router(testimonials_router)
app.include_router(contact_router)
app.include_router(uploads_router)
app.include_router(analytics_router)
app.include_router(site_router)

app.mount("/admin", StaticFiles(directory=str(BASE_DIR / "admin"), html=True), name="admin")
